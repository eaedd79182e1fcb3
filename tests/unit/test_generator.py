"""
生成器单元测试
"""

import io
import tracemalloc
from unittest.mock import patch

import pytest

from usbfv.config import VerifierConfig
from usbfv.errors import InvalidInput, IOFailure
from usbfv.generator import Generator, generate_file
from usbfv.header import HEADER_SIZE, pack_header, unpack_header
from usbfv.stream import PseudoRandomStream


class FailingWriter(io.RawIOBase):
    """写入指定字节数后抛出设备错误"""

    def __init__(self, limit: int):
        self.limit = limit
        self.written = 0

    def writable(self):
        return True

    def write(self, data):
        size = len(memoryview(data).cast("B"))
        if self.written + size > self.limit:
            raise OSError(5, "Input/output error")
        self.written += size
        return size


class TestGenerator:
    """生成器测试"""

    def test_header_and_payload(self):
        """头部 + 10个伪随机字节"""
        output = io.BytesIO()
        result = Generator(chunk_size=64).run(output, HEADER_SIZE + 10, seed=42)

        data = output.getvalue()
        assert result.total_written == 26
        assert result.seed == 42
        assert len(data) == 26
        assert data[:HEADER_SIZE] == pack_header(42, 26)
        assert data[HEADER_SIZE:] == PseudoRandomStream(42, 64).next_bytes(10).tobytes()

    def test_header_only(self):
        """大小恰好为16字节时只写头部"""
        output = io.BytesIO()
        result = Generator(chunk_size=64).run(output, HEADER_SIZE, seed=1)

        assert result.total_written == HEADER_SIZE
        assert output.getvalue() == pack_header(1, HEADER_SIZE)

    @pytest.mark.parametrize("payload", [64 * 3, 64 * 3 + 17, 1])
    def test_exact_size(self, payload):
        """文件大小恰好等于要求的大小"""
        output = io.BytesIO()
        Generator(chunk_size=64).run(output, HEADER_SIZE + payload, seed=9)

        data = output.getvalue()
        assert len(data) == HEADER_SIZE + payload
        assert unpack_header(data).declared_size == HEADER_SIZE + payload

    def test_payload_independent_of_chunk_size(self):
        """不同块大小生成相同内容"""
        first = io.BytesIO()
        second = io.BytesIO()
        Generator(chunk_size=64).run(first, 1000, seed=5)
        Generator(chunk_size=512).run(second, 1000, seed=5)

        assert first.getvalue() == second.getvalue()

    def test_time_seed(self):
        """未指定种子时使用当前毫秒时间"""
        with patch("usbfv.generator.time.time", return_value=1640995200.5):
            result = Generator(chunk_size=64).run(io.BytesIO(), 100)

        assert result.seed == 1640995200500

    def test_progress(self):
        """每块报告一次进度，最后为100%"""
        reported = []
        Generator(chunk_size=64, progress_callback=reported.append).run(io.BytesIO(), HEADER_SIZE + 128, seed=3)

        assert reported == [11.11, 55.56, 100.0]

    def test_size_below_header(self):
        """小于头部大小应该失败"""
        output = io.BytesIO()
        with pytest.raises(InvalidInput):
            Generator(chunk_size=64).run(output, 15, seed=1)

        assert output.getvalue() == b""

    def test_write_failure(self):
        """写入错误立即中止，不重试"""
        writer = FailingWriter(limit=HEADER_SIZE + 64)

        with pytest.raises(IOFailure) as exc_info:
            Generator(chunk_size=64).run(writer, HEADER_SIZE + 256, seed=1)

        assert exc_info.value.position == HEADER_SIZE + 64
        assert isinstance(exc_info.value.__cause__, OSError)


class TestGenerateFile:
    """文件生成测试"""

    def test_generate_file(self, tmp_path):
        """生成文件并同步"""
        path = tmp_path / "test-file.txt"
        config = VerifierConfig(chunk_size=1024)

        result = generate_file(path, 5000, config, seed=77)

        assert result.total_written == 5000
        assert path.stat().st_size == 5000

    def test_missing_directory(self, tmp_path):
        """目录不存在时报告IO错误"""
        with pytest.raises(IOFailure):
            generate_file(tmp_path / "missing" / "file.bin", 100, VerifierConfig(chunk_size=64))


class ShortWriter(io.RawIOBase):
    """每次最多写入 step 个字节的原始流"""

    def __init__(self, step: int):
        self.step = step
        self.data = bytearray()

    def writable(self):
        return True

    def write(self, data):
        view = memoryview(data).cast("B")[:self.step]
        self.data += view
        return len(view)


class DiscardingWriter(io.RawIOBase):
    """丢弃所有数据，只统计字节数"""

    def __init__(self):
        self.written = 0

    def writable(self):
        return True

    def write(self, data):
        size = memoryview(data).nbytes
        self.written += size
        return size


class TestPartialWrites:
    """部分写入测试"""

    def test_short_writes_are_completed(self):
        """原始流只写入一部分时继续写完剩余数据"""
        writer = ShortWriter(step=7)
        expected = io.BytesIO()

        result = Generator(chunk_size=64).run(writer, HEADER_SIZE + 200, seed=8)
        Generator(chunk_size=64).run(expected, HEADER_SIZE + 200, seed=8)

        assert result.total_written == HEADER_SIZE + 200
        assert bytes(writer.data) == expected.getvalue()

    def test_zero_write(self):
        """设备不再接受数据时报告IO错误"""
        writer = ShortWriter(step=0)

        with pytest.raises(IOFailure) as exc_info:
            Generator(chunk_size=64).run(writer, HEADER_SIZE + 200, seed=8)

        assert exc_info.value.position == 0


class TestMemoryBound:
    """内存占用测试"""

    def test_no_per_chunk_allocation(self):
        """生成过程中只分配一个块大小的缓冲区"""
        chunk = 4 * 1024 * 1024
        writer = DiscardingWriter()
        generator = Generator(chunk_size=chunk)

        tracemalloc.start()
        try:
            result = generator.run(writer, HEADER_SIZE + 3 * chunk + 100, seed=4)
            _, peak = tracemalloc.get_traced_memory()
        finally:
            tracemalloc.stop()

        assert result.total_written == writer.written == HEADER_SIZE + 3 * chunk + 100
        assert peak < 2 * chunk
