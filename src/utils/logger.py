import logging
import os

from rich.logging import RichHandler

_LOG_FORMAT = "[%(name)s]  %(message)s"


class CenteredFormatter(logging.Formatter):
    """Centers logger names in a column that widens to the longest name seen."""

    name_width = 16

    def format(self, record):
        CenteredFormatter.name_width = max(
            CenteredFormatter.name_width, len(record.name)
        )
        record = logging.makeLogRecord(record.__dict__)
        record.name = record.name.center(CenteredFormatter.name_width)
        return super().format(record)


def _log_level() -> int:
    return logging.DEBUG if os.getenv("DEBUG") else logging.INFO


def _rich_handler(level: int) -> RichHandler:
    handler = RichHandler(
        show_time=True,
        show_level=True,
        show_path=False,
        rich_tracebacks=True,
        log_time_format="[%X]",
    )
    handler.setFormatter(CenteredFormatter(_LOG_FORMAT))
    handler.setLevel(level)
    return handler


def get_logger(name=None) -> logging.Logger:
    """
    Return a logger that writes through a RichHandler.

    Handlers are attached once per logger name.
    """
    if name is None:
        name = "market"
    logger = logging.getLogger(name)
    level = _log_level()
    logger.setLevel(level)

    if not logger.handlers:
        logger.addHandler(_rich_handler(level))
        logger.propagate = False
        logger.debug(f"Logger '{name}' ready.")

    return logger


def configure_server_logging() -> None:
    """Send uvicorn's own loggers through the same rich output."""
    level = _log_level()
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(name)
        logger.handlers = [_rich_handler(level)]
        logger.setLevel(level)
        logger.propagate = False
