"""
USBFV 基本使用示例

在临时目录中演示生成、校验以及检测篡改和截断。
"""

import tempfile
from pathlib import Path

from usbfv import (
    VerifierConfig,
    VerifierError,
    check_free_space,
    generate_file,
    parse_size,
    resolve_target,
    validate_file,
)
from usbfv.log import configure_logging


def basic_round_trip_example(directory: Path, config: VerifierConfig) -> Path:
    """生成并校验测试文件"""
    print("\n1. 生成与校验示例")

    size = parse_size("4MB")
    target = resolve_target(directory, config.file_name)
    check_free_space(directory, size, config.reserve_bytes)

    generated = generate_file(target, size, config)
    print(f"种子: {generated.seed}, 写入: {generated.total_written} 字节")

    validated = validate_file(target, config)
    print(f"校验通过: {validated.total_verified} 字节")

    return target


def tamper_example(target: Path, config: VerifierConfig) -> None:
    """篡改一个字节后校验"""
    print("\n2. 篡改检测示例")

    data = bytearray(target.read_bytes())
    data[3 * 1024 * 1024] ^= 0xFF
    target.write_bytes(bytes(data))

    try:
        validate_file(target, config)
    except VerifierError as e:
        print(f"校验失败({e.kind}): {e}")


def truncation_example(target: Path, config: VerifierConfig) -> None:
    """截断文件后校验"""
    print("\n3. 截断检测示例")

    target.write_bytes(target.read_bytes()[:1024 * 1024])

    try:
        validate_file(target, config)
    except VerifierError as e:
        print(f"校验失败({e.kind}): {e}")


def main():
    """主函数"""
    print("USBFV 基本使用示例")
    print("=" * 50)

    configure_logging("WARNING")
    config = VerifierConfig(chunk_size=1024 * 1024, fsync=False)

    with tempfile.TemporaryDirectory() as temp_dir:
        target = basic_round_trip_example(Path(temp_dir), config)
        tamper_example(target, config)
        truncation_example(target, config)

    print("\n所有示例运行完成！")


if __name__ == "__main__":
    main()
