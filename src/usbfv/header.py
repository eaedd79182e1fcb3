"""
文件头部模块

测试文件前16字节：大端序有符号64位种子 + 大端序有符号64位声明大小。
"""

import struct
from dataclasses import dataclass
from typing import BinaryIO

from .errors import CorruptHeader, InvalidInput

HEADER_FORMAT = ">qq"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)  # 16字节

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class FileHeader:
    """测试文件头部"""

    seed: int
    declared_size: int


def pack_header(seed: int, declared_size: int) -> bytes:
    """序列化头部"""
    if not INT64_MIN <= seed <= INT64_MAX:
        raise InvalidInput(f"种子超出64位有符号整数范围: {seed}")
    if not HEADER_SIZE <= declared_size <= INT64_MAX:
        raise InvalidInput(f"文件大小必须在 {HEADER_SIZE} 到 {INT64_MAX} 字节之间: {declared_size}")

    return struct.pack(HEADER_FORMAT, seed, declared_size)


def unpack_header(data: bytes) -> FileHeader:
    """解析头部"""
    if len(data) < HEADER_SIZE:
        raise CorruptHeader(f"文件已损坏: 无法读取随机种子或大小（只有 {len(data)} 字节）")

    seed, declared_size = struct.unpack(HEADER_FORMAT, data[:HEADER_SIZE])
    if declared_size < HEADER_SIZE:
        raise CorruptHeader(f"文件已损坏: 声明大小 {declared_size} 小于头部大小")

    return FileHeader(seed=seed, declared_size=declared_size)


def read_header(source: BinaryIO) -> FileHeader:
    """从流中读取并解析头部"""
    data = b""
    while len(data) < HEADER_SIZE:
        part = source.read(HEADER_SIZE - len(data))
        if not part:
            break
        data += part

    return unpack_header(data)
