"""
进度报告模块
"""

import time
from typing import Callable, Optional

import structlog

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[float], None]


def percentage(done: int, total: int) -> float:
    """完成百分比，保留两位小数"""
    if total <= 0:
        return 100.0
    return round(done / total * 100, 2)


class ProgressReporter:
    """按块报告读写进度"""

    def __init__(self, operation: str, total: int, callback: Optional[ProgressCallback] = None):
        self.operation = operation
        self.total = total
        self.callback = callback
        self.done = 0
        self._start_time = time.perf_counter()

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self._start_time

    def update(self, done: int) -> float:
        """记录当前完成的字节数并返回百分比"""
        self.done = done
        percent = percentage(done, self.total)

        logger.debug("进度", operation=self.operation, percent=percent, done=done, total=self.total)
        if self.callback is not None:
            self.callback(percent)

        return percent

    def finish(self) -> float:
        """结束报告，返回耗时(秒)"""
        elapsed = self.elapsed
        throughput_mbps = self.done / (1024 * 1024) / elapsed if elapsed > 0 else 0.0

        logger.info(
            "操作完成",
            operation=self.operation,
            bytes=self.done,
            elapsed_seconds=round(elapsed, 3),
            throughput_mbps=round(throughput_mbps, 2)
        )
        return elapsed
