import logging
from logging.handlers import QueueHandler

import pytest

from utils.LoggingUtils import ColoredFormatter, build_logging_config, configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_installs_queue_handler(restore_root_logger):
    listener = configure_logging("DEBUG")
    try:
        assert restore_root_logger.level == logging.DEBUG
        assert any(isinstance(h, QueueHandler) for h in restore_root_logger.handlers)
        assert logging.getLogger("uvicorn").propagate is True
    finally:
        listener.stop()


def test_logging_config_uses_requested_level():
    config = build_logging_config("WARNING")
    assert config["root"]["level"] == "WARNING"
    assert config["loggers"]["uvicorn.access"]["level"] == "WARNING"


def test_formatter_without_tty_does_not_colorize():
    # pytest fängt stdout ab, daher ist stdout kein TTY
    formatter = ColoredFormatter("%(levelname)s %(message)s")
    record = logging.LogRecord("x", logging.ERROR, __file__, 1, "boom", None, None)

    assert formatter.format(record) == "ERROR boom"
