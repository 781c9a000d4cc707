"""
日志模块

loguru 的统一配置：控制台输出走 stderr，标准输出只留给命令结果；
可选的日志文件按大小轮转。
"""

import os
import sys
from typing import Optional

from loguru import logger


CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"
DEBUG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> | {message}"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{line} | {message}"


def resolve_level(level: Optional[str] = None) -> str:
    """显式级别优先，其次 LOADERKIT_DEBUG=1 表示 DEBUG"""
    if level:
        return level.upper()
    return "DEBUG" if os.environ.get("LOADERKIT_DEBUG", "0") == "1" else "INFO"


def setup_logger(
    level: Optional[str] = None,
    sink=None,
    enqueue: bool = True,
    colorize: Optional[bool] = None,
    log_file: Optional[str] = None,
) -> None:
    """
    设置日志记录器

    Args:
        level: 控制台日志级别
        sink: 控制台输出目标，默认 sys.stderr
        enqueue: 是否通过队列写入（多个并发安装共用同一个 sink）
        colorize: 是否着色，None 表示由 loguru 按终端判断
        log_file: 日志文件路径，始终记录 DEBUG 级别，5 MB 轮转
    """
    level = resolve_level(level)
    verbose = level in ("TRACE", "DEBUG")

    logger.remove()
    logger.add(
        sink if sink is not None else sys.stderr,
        format=DEBUG_FORMAT if verbose else CONSOLE_FORMAT,
        level=level,
        enqueue=enqueue,
        colorize=colorize,
        backtrace=verbose,
        diagnose=verbose,
    )

    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level="DEBUG",
            enqueue=enqueue,
            rotation="5 MB",
            retention=3,
            encoding="utf-8",
        )

    logger.debug(f"[日志] 级别 {level}" + (f"，写入 {log_file}" if log_file else ""))


__all__ = ["logger", "setup_logger", "resolve_level"]
