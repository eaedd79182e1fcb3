"""
伪随机字节流模块

基于计数器的SplitMix64生成器，使用NumPy向量化计算。
流的每个字节只由种子和位置决定，与每次读取的块大小无关：

    word(i) = mix64(seed + (i + 1) * 0x9E3779B97F4A7C15)   (mod 2^64)
    byte(p) = 第 p // 8 个字按小端序展开后的第 p % 8 个字节

mix64 为 SplitMix64 的标准终结函数（移位 30/27/31，乘数
0xBF58476D1CE4E5B9 与 0x94D049BB133111EB）。
"""

import sys

import numpy as np
import structlog

logger = structlog.get_logger(__name__)

DEFAULT_CHUNK_SIZE = 2 ** 24  # 16MB
WORD_SIZE = 8
SCRATCH_WORDS = 2 ** 16  # 混合计算的临时区，512KB

MASK64 = (1 << 64) - 1
GOLDEN_GAMMA = 0x9E3779B97F4A7C15
MIX_MULTIPLIER_1 = 0xBF58476D1CE4E5B9
MIX_MULTIPLIER_2 = 0x94D049BB133111EB

_BIG_ENDIAN_HOST = sys.byteorder == "big"


def mix64(z: int) -> int:
    """SplitMix64终结函数（纯Python版本，用于单个字）"""
    z = (z ^ (z >> 30)) * MIX_MULTIPLIER_1 & MASK64
    z = (z ^ (z >> 27)) * MIX_MULTIPLIER_2 & MASK64
    return z ^ (z >> 31)


def word_at(seed: int, index: int) -> int:
    """计算流中第 index 个64位字"""
    return mix64((seed + (index + 1) * GOLDEN_GAMMA) & MASK64)


class PseudoRandomStream:
    """可复现的伪随机字节流

    缓冲区在构造时一次性分配，之后每次 next_bytes 都复用同一块内存，
    返回值是内部缓冲区的视图，下一次调用时会被覆盖。
    除了一个块大小的输出缓冲区外，只有一个固定大小的小临时区。
    """

    def __init__(self, seed: int, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError(f"块大小必须为正数: {chunk_size}")

        self.seed = seed
        self.chunk_size = chunk_size
        self._position = 0

        # 非对齐起点最多多占一个字，结尾再多一个
        capacity = chunk_size // WORD_SIZE + 2
        self._seed = seed & MASK64
        self._words = np.empty(capacity, dtype=np.uint64)
        self._scratch = np.empty(min(capacity, SCRATCH_WORDS), dtype=np.uint64)
        self._bytes = self._words.view(np.uint8)

        logger.debug("伪随机流初始化完成", seed=seed, chunk_size=chunk_size)

    @property
    def position(self) -> int:
        """当前字节位置"""
        return self._position

    def next_bytes(self, count: int) -> np.ndarray:
        """生成接下来的 count 个字节"""
        if count < 0 or count > self.chunk_size:
            raise ValueError(f"字节数必须在 0 到 {self.chunk_size} 之间: {count}")

        first_word, skip = divmod(self._position, WORD_SIZE)
        word_count = (skip + count + WORD_SIZE - 1) // WORD_SIZE
        for start in range(0, word_count, len(self._scratch)):
            end = min(start + len(self._scratch), word_count)
            self._generate_block(first_word + start, self._words[start:end])
        self._position += count

        return self._bytes[skip:skip + count]

    def _generate_block(self, first_word: int, words: np.ndarray) -> None:
        scratch = self._scratch[:len(words)]

        # 计数器: seed + first_word * gamma + (i + 1) * gamma
        scratch.fill(np.uint64(GOLDEN_GAMMA))
        np.add.accumulate(scratch, dtype=np.uint64, out=words)
        np.add(words, np.uint64((self._seed + first_word * GOLDEN_GAMMA) & MASK64), out=words)

        np.right_shift(words, np.uint64(30), out=scratch)
        np.bitwise_xor(words, scratch, out=words)
        np.multiply(words, np.uint64(MIX_MULTIPLIER_1), out=words)
        np.right_shift(words, np.uint64(27), out=scratch)
        np.bitwise_xor(words, scratch, out=words)
        np.multiply(words, np.uint64(MIX_MULTIPLIER_2), out=words)
        np.right_shift(words, np.uint64(31), out=scratch)
        np.bitwise_xor(words, scratch, out=words)

        if _BIG_ENDIAN_HOST:
            words.byteswap(inplace=True)
