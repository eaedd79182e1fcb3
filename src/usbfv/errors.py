"""
错误定义模块

校验工具的全部错误类型。核心组件只抛出异常，由命令行层转换为提示信息和退出码。
"""

from typing import Optional


class VerifierError(Exception):
    """所有校验错误的基类"""

    kind: str = "error"


class InvalidInput(VerifierError):
    """路径、大小字符串或参数无效"""

    kind = "invalid-input"


class InsufficientSpace(VerifierError):
    """目标分区剩余空间不足"""

    kind = "insufficient-space"

    def __init__(self, free: int, required: int):
        self.free = free
        self.required = required
        super().__init__(
            f"分区只有 {free} 字节可用空间，但测试需要 {required} 字节"
        )


class IOFailure(VerifierError):
    """读写过程中发生的设备错误"""

    kind = "io-failure"

    def __init__(self, message: str, position: int = 0):
        self.position = position
        super().__init__(message)


class CorruptHeader(VerifierError):
    """无法读取文件头部的种子和大小"""

    kind = "header-unreadable"


class ContentMismatch(VerifierError):
    """内容与伪随机序列不一致"""

    kind = "content-mismatch"

    def __init__(self, offset: int, first_difference: Optional[int] = None):
        self.offset = offset
        self.first_difference = first_difference
        super().__init__(f"内容在第 {offset} 字节之后不一致")


class SizeMismatch(VerifierError):
    """读取的字节数与声明大小不一致"""

    kind = "size-mismatch"

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"期望读取 {expected} 字节，实际读取 {actual} 字节")
