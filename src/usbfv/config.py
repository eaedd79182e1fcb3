"""
配置管理模块

使用Pydantic进行配置验证和管理，提供类型安全的配置系统。
"""

import json

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .stream import DEFAULT_CHUNK_SIZE, WORD_SIZE

DEFAULT_FILE_NAME = "usb-flash-verifier-test-file.txt"
DEFAULT_RESERVE_BYTES = 16 * 1024 * 1024  # 为文件系统元数据预留16MB


class VerifierConfig(BaseModel):
    """校验器配置"""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    chunk_size: int = Field(
        default=DEFAULT_CHUNK_SIZE,
        description="每次读写的块大小(字节)",
        gt=0,
        le=2 ** 30
    )

    reserve_bytes: int = Field(
        default=DEFAULT_RESERVE_BYTES,
        description="剩余空间检查时额外预留的字节数",
        ge=0
    )

    file_name: str = Field(
        default=DEFAULT_FILE_NAME,
        description="测试文件名",
        min_length=1
    )

    log_level: str = Field(
        default="INFO",
        description="日志级别",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$"
    )

    fsync: bool = Field(
        default=True,
        description="生成结束后是否强制同步到设备"
    )

    @field_validator('chunk_size')
    @classmethod
    def validate_chunk_size(cls, v):
        """块大小必须是8的倍数"""
        if v % WORD_SIZE != 0:
            raise ValueError(f"块大小必须是{WORD_SIZE}的倍数")
        return v

    @field_validator('file_name')
    @classmethod
    def validate_file_name(cls, v):
        """文件名不能包含路径"""
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"文件名不能包含路径: {v}")
        return v


def create_default_config() -> VerifierConfig:
    """创建默认配置"""
    return VerifierConfig()


def load_config_from_file(file_path: str) -> VerifierConfig:
    """从文件加载配置"""
    with open(file_path, 'r', encoding='utf-8') as f:
        config_dict = json.load(f)

    return VerifierConfig(**config_dict)


def save_config_to_file(config: VerifierConfig, file_path: str) -> None:
    """保存配置到文件"""
    config_dict = config.model_dump()

    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(config_dict, f, indent=2, ensure_ascii=False)
