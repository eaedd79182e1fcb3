"""
USBFV - U盘真实容量校验工具

向目标设备写入由种子决定的伪随机文件，重新插入设备后读回并逐字节比较，
用于发现虚标容量的U盘。
"""

__version__ = "0.1.0"

from .config import (
    VerifierConfig,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
)
from .errors import (
    VerifierError,
    InvalidInput,
    InsufficientSpace,
    IOFailure,
    CorruptHeader,
    ContentMismatch,
    SizeMismatch,
)
from .header import HEADER_SIZE, FileHeader, pack_header, unpack_header, read_header
from .stream import DEFAULT_CHUNK_SIZE, PseudoRandomStream
from .generator import Generator, GenerationResult, generate_file
from .validator import Validator, ValidationResult, validate_file
from .sizes import parse_size, check_free_space, resolve_target

__all__ = [
    # 配置
    "VerifierConfig",
    "create_default_config",
    "load_config_from_file",
    "save_config_to_file",

    # 错误
    "VerifierError",
    "InvalidInput",
    "InsufficientSpace",
    "IOFailure",
    "CorruptHeader",
    "ContentMismatch",
    "SizeMismatch",

    # 核心组件
    "HEADER_SIZE",
    "FileHeader",
    "pack_header",
    "unpack_header",
    "read_header",
    "DEFAULT_CHUNK_SIZE",
    "PseudoRandomStream",
    "Generator",
    "GenerationResult",
    "generate_file",
    "Validator",
    "ValidationResult",
    "validate_file",

    # 辅助函数
    "parse_size",
    "check_free_space",
    "resolve_target",
]
