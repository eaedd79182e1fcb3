"""
测试文件生成模块

写入16字节头部，然后按块写入由种子决定的伪随机字节流。
"""

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union

import structlog

from .config import VerifierConfig, create_default_config
from .errors import IOFailure, InvalidInput
from .header import HEADER_SIZE, pack_header
from .progress import ProgressCallback, ProgressReporter
from .stream import DEFAULT_CHUNK_SIZE, PseudoRandomStream

logger = structlog.get_logger(__name__)


@dataclass
class GenerationResult:
    """生成结果"""

    seed: int
    total_written: int
    elapsed_seconds: float = 0.0


def new_seed() -> int:
    """以当前毫秒时间戳作为种子"""
    return int(time.time() * 1000)


def _write_all(output: BinaryIO, data, position: int) -> None:
    """写入全部数据，原始流可能一次只写入一部分"""
    view = memoryview(data).cast("B")
    written = 0
    while written < len(view):
        count = output.write(view[written:])
        if not count:
            raise IOFailure(f"设备在第 {position + written} 字节处拒绝写入", position=position + written)
        written += count


class Generator:
    """测试文件生成器"""

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, progress_callback: Optional[ProgressCallback] = None):
        self.chunk_size = chunk_size
        self.progress_callback = progress_callback

    def run(self, output: BinaryIO, required_size: int, seed: Optional[int] = None) -> GenerationResult:
        """生成头部和伪随机内容，总大小恰好为 required_size"""
        if required_size < HEADER_SIZE:
            raise InvalidInput(f"文件大小不能小于头部大小 {HEADER_SIZE} 字节: {required_size}")

        if seed is None:
            seed = new_seed()

        header = pack_header(seed, required_size)
        stream = PseudoRandomStream(seed, self.chunk_size)
        reporter = ProgressReporter("generate", required_size, self.progress_callback)

        logger.info("开始生成测试文件", seed=seed, required_size=required_size, chunk_size=self.chunk_size)

        total_written = 0
        try:
            _write_all(output, header, total_written)
            total_written = HEADER_SIZE
            reporter.update(total_written)

            while total_written < required_size:
                bytes_to_write = min(required_size - total_written, self.chunk_size)
                _write_all(output, stream.next_bytes(bytes_to_write), total_written)
                total_written += bytes_to_write
                reporter.update(total_written)

        except OSError as e:
            logger.error("写入失败", position=total_written, error=str(e))
            raise IOFailure(f"在第 {total_written} 字节处写入失败: {e}", position=total_written) from e

        elapsed = reporter.finish()
        return GenerationResult(seed=seed, total_written=total_written, elapsed_seconds=elapsed)


def generate_file(
    path: Union[str, Path],
    required_size: int,
    config: Optional[VerifierConfig] = None,
    seed: Optional[int] = None,
    progress_callback: Optional[ProgressCallback] = None
) -> GenerationResult:
    """创建测试文件，结束后刷新并同步到设备"""
    config = config or create_default_config()
    generator = Generator(chunk_size=config.chunk_size, progress_callback=progress_callback)

    try:
        with open(path, 'wb') as f:
            result = generator.run(f, required_size, seed=seed)

            logger.info("生成完成，等待系统刷新文件", path=str(path))
            f.flush()
            if config.fsync:
                os.fsync(f.fileno())

    except OSError as e:
        raise IOFailure(f"无法写入测试文件 {path}: {e}") from e

    return result
