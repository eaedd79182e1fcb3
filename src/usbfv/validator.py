"""
测试文件校验模块

读取头部中的种子和声明大小，重新生成相同的伪随机字节流，
逐块与文件实际内容比较。
"""

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union

import numpy as np
import structlog

from .config import VerifierConfig, create_default_config
from .errors import ContentMismatch, IOFailure, SizeMismatch
from .header import HEADER_SIZE, read_header
from .progress import ProgressCallback, ProgressReporter
from .stream import DEFAULT_CHUNK_SIZE, PseudoRandomStream

logger = structlog.get_logger(__name__)


@dataclass
class ValidationResult:
    """校验结果"""

    seed: int
    declared_size: int
    total_verified: int
    elapsed_seconds: float = 0.0


def _read_into(source: BinaryIO, view: memoryview) -> int:
    """尽量读满缓冲区，只有到达文件末尾时才会少读"""
    filled = 0
    while filled < len(view):
        count = source.readinto(view[filled:])
        if not count:
            break
        filled += count
    return filled


class Validator:
    """测试文件校验器"""

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, progress_callback: Optional[ProgressCallback] = None):
        self.chunk_size = chunk_size
        self.progress_callback = progress_callback

        # 读取缓冲区只分配一次
        self._actual = np.zeros(chunk_size, dtype=np.uint8)
        self._actual_view = memoryview(self._actual)

    def run(self, source: BinaryIO) -> ValidationResult:
        """校验文件，失败时抛出 CorruptHeader / ContentMismatch / SizeMismatch / IOFailure"""
        try:
            return self._run(source)
        except OSError as e:
            logger.error("读取失败", error=str(e))
            raise IOFailure(f"读取测试文件失败: {e}") from e

    def _run(self, source: BinaryIO) -> ValidationResult:
        header = read_header(source)
        declared_size = header.declared_size

        stream = PseudoRandomStream(header.seed, self.chunk_size)
        reporter = ProgressReporter("validate", declared_size, self.progress_callback)

        logger.info("开始校验测试文件", seed=header.seed, declared_size=declared_size)

        total_verified = HEADER_SIZE
        while total_verified < declared_size:
            wanted = min(self.chunk_size, declared_size - total_verified)
            last_read = _read_into(source, self._actual_view[:wanted])
            if last_read == 0:
                break

            expected = stream.next_bytes(self.chunk_size)

            # 最后一块不满时两边都补零，避免多生成的字节造成误报
            if last_read < self.chunk_size:
                self._actual[last_read:] = 0
                expected[last_read:] = 0

            # 失败时才定位第一个不同的字节
            if self._actual_view != expected.data:
                first_difference = total_verified + int(np.flatnonzero(self._actual != expected)[0])
                logger.warning(
                    "内容不一致",
                    offset=total_verified,
                    first_difference=first_difference
                )
                raise ContentMismatch(total_verified, first_difference)

            total_verified += last_read
            reporter.update(total_verified)

            if last_read < wanted:
                break

        if total_verified != declared_size:
            logger.warning("文件大小不一致", expected=declared_size, actual=total_verified)
            raise SizeMismatch(declared_size, total_verified)

        extra = self._count_trailing_bytes(source)
        if extra:
            logger.warning("文件末尾存在多余数据", expected=declared_size, extra=extra)
            raise SizeMismatch(declared_size, declared_size + extra)

        elapsed = reporter.finish()
        return ValidationResult(
            seed=header.seed,
            declared_size=declared_size,
            total_verified=total_verified,
            elapsed_seconds=elapsed
        )

    def _count_trailing_bytes(self, source: BinaryIO) -> int:
        extra = 0
        while True:
            count = _read_into(source, self._actual_view)
            extra += count
            if count < self.chunk_size:
                return extra


def validate_file(
    path: Union[str, Path],
    config: Optional[VerifierConfig] = None,
    progress_callback: Optional[ProgressCallback] = None
) -> ValidationResult:
    """打开并校验测试文件"""
    config = config or create_default_config()
    validator = Validator(chunk_size=config.chunk_size, progress_callback=progress_callback)

    try:
        with open(path, 'rb') as f:
            return validator.run(f)
    except OSError as e:
        raise IOFailure(f"无法打开测试文件 {path}: {e}") from e
