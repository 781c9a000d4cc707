import io
import sys

import pytest
from loguru import logger

from loaderkit.logger import resolve_level, setup_logger


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_resolve_level(monkeypatch):
    monkeypatch.delenv("LOADERKIT_DEBUG", raising=False)
    assert resolve_level() == "INFO"
    assert resolve_level("warning") == "WARNING"

    monkeypatch.setenv("LOADERKIT_DEBUG", "1")
    assert resolve_level() == "DEBUG"
    assert resolve_level("ERROR") == "ERROR"


def test_console_sink_filters_by_level():
    stream = io.StringIO()
    setup_logger(level="WARNING", sink=stream, enqueue=False, colorize=False)

    logger.info("[Fabric] 开始下载")
    logger.warning("[NeoForge] 安装器失败")

    output = stream.getvalue()
    assert "开始下载" not in output
    assert "| WARNING  | [NeoForge] 安装器失败" in output


def test_debug_format_shows_location():
    stream = io.StringIO()
    setup_logger(level="DEBUG", sink=stream, enqueue=False, colorize=False)

    logger.debug("[Quilt] 库文件汇总")

    line = [l for l in stream.getvalue().splitlines() if "库文件汇总" in l][0]
    assert "test_logger:test_debug_format_shows_location:" in line


def test_log_file_records_debug(tmp_path):
    log_file = tmp_path / "logs" / "loaderkit.log"
    setup_logger(
        level="ERROR", sink=io.StringIO(), enqueue=False, colorize=False, log_file=str(log_file)
    )

    logger.debug("[下载] 已跳过")
    logger.remove()

    assert "[下载] 已跳过" in log_file.read_text(encoding="utf-8")
