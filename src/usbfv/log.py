"""
日志配置模块
"""

import logging
import sys

import structlog


def configure_logging(level: str = "INFO") -> None:
    """配置structlog，日志输出到标准错误"""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
        # 每次创建logger时取当前的sys.stderr
        logger_factory=lambda *args: structlog.PrintLogger(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
