"""
命令行入口

    usbfv run <驱动器根目录> <大小> [文件名]
    usbfv generate <驱动器根目录> <大小> [文件名]
    usbfv validate <驱动器根目录> [文件名]

大小为整数加单位，可用单位: KB、MB、GB。
"""

import sys
from functools import wraps
from pathlib import Path
from typing import Optional

import click
import structlog

from .config import VerifierConfig, create_default_config, load_config_from_file
from .errors import ContentMismatch, InvalidInput, VerifierError
from .generator import generate_file
from .log import configure_logging
from .sizes import check_free_space, parse_size, resolve_target
from .validator import validate_file

logger = structlog.get_logger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _parse_size_argument(ctx, param, value):
    try:
        return parse_size(value)
    except InvalidInput as e:
        raise click.BadParameter(str(e)) from e


def _echo_progress(percent: float) -> None:
    click.echo(f"已完成: {percent:.2f}%")


def _reports_errors(func):
    """把校验错误转换成提示信息和退出码1"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except InvalidInput as e:
            raise click.UsageError(str(e), ctx=click.get_current_context()) from e
        except VerifierError as e:
            logger.debug("命令失败", kind=e.kind, error=str(e))
            click.echo(str(e), err=True)
            if isinstance(e, ContentMismatch) and e.first_difference is not None:
                click.echo(f"第一个不一致的字节位于偏移 {e.first_difference}", err=True)
            sys.exit(1)
    return wrapper


def _target(directory: Path, file_name: Optional[str], config: VerifierConfig) -> Path:
    return resolve_target(directory, file_name or config.file_name)


def _generate(directory: Path, target: Path, size: int, config: VerifierConfig, seed: Optional[int] = None) -> None:
    check_free_space(directory, size, config.reserve_bytes)

    click.echo(f"正在生成大小为 {size} 字节的测试文件")
    result = generate_file(target, size, config, seed=seed, progress_callback=_echo_progress)
    click.echo(f"成功写入 {result.total_written} 字节")


def _validate(target: Path, config: VerifierConfig) -> None:
    result = validate_file(target, config, progress_callback=_echo_progress)
    click.echo(f"大小为 {result.total_verified} 字节的校验成功")


@click.group()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="JSON配置文件")
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), help="日志级别")
@click.option("--chunk-size", type=int, help="块大小(字节)，必须是8的倍数")
@click.pass_context
def main(ctx, config_path, log_level, chunk_size):
    """U盘真实容量与数据完整性校验工具"""
    try:
        config = load_config_from_file(config_path) if config_path else create_default_config()
        if log_level is not None:
            config.log_level = log_level.upper()
        if chunk_size is not None:
            config.chunk_size = chunk_size
    except ValueError as e:
        raise click.UsageError(f"配置无效: {e}") from e

    configure_logging(config.log_level)
    ctx.obj = config


@main.command("run")
@click.argument("directory", type=click.Path(path_type=Path))
@click.argument("size", callback=_parse_size_argument)
@click.argument("file_name", required=False)
@click.pass_obj
@_reports_errors
def run_cmd(config: VerifierConfig, directory: Path, size: int, file_name: Optional[str]):
    """生成测试文件，等待重新插入设备后校验"""
    target = _target(directory, file_name, config)

    if target.exists():
        click.echo("测试文件已存在，认为现在处于校验阶段\n")
        _validate(target, config)
        return

    _generate(directory, target, size, config)

    click.echo("请重新插入U盘，然后按任意键继续...")
    click.pause(info="等待中...")
    click.echo("开始校验")
    _validate(target, config)


@main.command("generate")
@click.argument("directory", type=click.Path(path_type=Path))
@click.argument("size", callback=_parse_size_argument)
@click.argument("file_name", required=False)
@click.option("--seed", type=int, default=None, help="指定随机种子，默认使用当前时间")
@click.option("--force", is_flag=True, help="覆盖已存在的测试文件")
@click.pass_obj
@_reports_errors
def generate_cmd(config: VerifierConfig, directory: Path, size: int, file_name: Optional[str],
                 seed: Optional[int], force: bool):
    """只生成测试文件"""
    target = _target(directory, file_name, config)
    if target.exists() and not force:
        raise InvalidInput(f"测试文件已存在: {target}，使用 --force 覆盖")

    _generate(directory, target, size, config, seed=seed)


@main.command("validate")
@click.argument("directory", type=click.Path(path_type=Path))
@click.argument("file_name", required=False)
@click.pass_obj
@_reports_errors
def validate_cmd(config: VerifierConfig, directory: Path, file_name: Optional[str]):
    """只校验已有的测试文件"""
    target = _target(directory, file_name, config)
    if not target.is_file():
        raise InvalidInput(f"测试文件不存在: {target}")

    _validate(target, config)


if __name__ == "__main__":
    main()
