import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOG_FILE = os.getenv("SHOP_LOG_FILE")

_file_console = None


class CenteredFormatter(logging.Formatter):
    longest_name_length = 12  # grows with the longest logger name seen

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )
        record.name = record.name.center(CenteredFormatter.longest_name_length)
        return super().format(record)


def _console() -> Console | None:
    """
    Console for the log file, if SHOP_LOG_FILE is set.
    Otherwise None, RichHandler then writes to the terminal.
    """
    global _file_console
    if LOG_FILE and _file_console is None:
        log_dir = os.path.dirname(LOG_FILE)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        _file_console = Console(
            file=open(LOG_FILE, "a", encoding="utf-8"), width=120, no_color=True
        )
    return _file_console


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger configured with RichHandler for rich output.
    """
    logger = logging.getLogger(name or "shop")
    log_level = logging.DEBUG if os.getenv("DEBUG") else logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        handler = RichHandler(
            console=_console(),
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(CenteredFormatter("[%(name)s]  %(message)s"))
        handler.setLevel(log_level)
        logger.addHandler(handler)

        logger.propagate = False
        logger.debug(f"Logger for '{logger.name}' initialized.")

    return logger
