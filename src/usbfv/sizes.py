"""
大小解析与空间检查模块
"""

import re
from pathlib import Path
from typing import Union

import psutil
import structlog

from .config import DEFAULT_RESERVE_BYTES
from .errors import InsufficientSpace, InvalidInput
from .header import HEADER_SIZE

logger = structlog.get_logger(__name__)

SIZE_SUFFIXES = {
    "KB": 2 ** 10,
    "MB": 2 ** 20,
    "GB": 2 ** 30,
}

SIZE_PATTERN = re.compile(r"^([1-9]\d*)(" + "|".join(SIZE_SUFFIXES) + r")$")


def parse_size(text: str) -> int:
    """解析带单位的大小字符串，例如 "4GB" """
    match = SIZE_PATTERN.match(text.strip().upper())
    if match is None:
        raise InvalidInput(f"无法解析大小: {text!r}，大小必须是整数加上单位 KB、MB 或 GB")

    size = int(match.group(1)) * SIZE_SUFFIXES[match.group(2)]
    if size < HEADER_SIZE:
        raise InvalidInput(f"大小不能小于 {HEADER_SIZE} 字节: {text!r}")

    return size


def resolve_target(directory: Union[str, Path], file_name: str) -> Path:
    """检查目标目录并返回测试文件路径"""
    path = Path(directory)
    if not path.exists():
        raise InvalidInput(f"目录不存在: {directory}")
    if not path.is_dir():
        raise InvalidInput(f"路径不是目录: {directory}")

    return path / file_name


def check_free_space(
    directory: Union[str, Path],
    required_size: int,
    reserve: int = DEFAULT_RESERVE_BYTES
) -> int:
    """确认分区剩余空间足够，返回可用字节数"""
    free = psutil.disk_usage(str(directory)).free
    needed = required_size + reserve

    logger.debug("剩余空间检查", directory=str(directory), free=free, needed=needed)
    if free < needed:
        raise InsufficientSpace(free=free, required=required_size)

    return free
