import logging
import queue
import sys
from logging.config import dictConfig
from logging.handlers import QueueListener
from typing import Dict

LOG_QUEUE: "queue.Queue[logging.LogRecord]" = queue.Queue(-1)

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(process)5d %(threadName)s %(name)-40s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"

# ANSI-Farben für Levels
_COLOR_MAP = {
    logging.DEBUG: "\x1b[37m",     # hellgrau
    logging.WARNING: "\x1b[33m",   # gelb
    logging.ERROR: "\x1b[31m",     # rot
    logging.CRITICAL: "\x1b[35m",  # magenta
}
_RESET = "\x1b[0m"


class ColoredFormatter(logging.Formatter):
    """
    Färbt ganze Zeilen anhand des Log-Levels ein, aber nur wenn stdout ein TTY ist.
    """
    def __init__(self, fmt, datefmt=None, use_colors=True):
        super().__init__(fmt, datefmt=datefmt)
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        color = _COLOR_MAP.get(record.levelno) if self.use_colors else None
        return f"{color}{formatted}{_RESET}" if color else formatted


def build_logging_config(level: str = "INFO") -> Dict:
    """dictConfig für den Root-Logger: alle Records landen in LOG_QUEUE.

    uvicorn-Logger propagieren zum Root, damit Access- und Fehlerlogs über
    denselben Listener laufen.
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "handlers": {
            "queue": {
                "class": "logging.handlers.QueueHandler",
                "queue": "ext://utils.LoggingUtils.LOG_QUEUE",
                "level": "DEBUG",
            },
        },
        "loggers": {
            "uvicorn": {"level": level, "handlers": [], "propagate": True},
            "uvicorn.access": {"level": level, "handlers": [], "propagate": True},
        },
        "root": {
            "level": level,
            "handlers": ["queue"],
        },
    }


def configure_logging(level: str = "INFO") -> QueueListener:
    """
    Konfiguriert das Logging mit QueueHandler/QueueListener und gibt den gestarteten
    Listener zurück. Der Aufrufer stoppt ihn bei Programmende:

        listener = configure_logging("DEBUG")
        ...
        listener.stop()
    """
    dictConfig(build_logging_config(level))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    console_handler.setLevel(level)

    listener = QueueListener(LOG_QUEUE, console_handler, respect_handler_level=True)
    listener.start()
    return listener
