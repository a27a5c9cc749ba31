"""
Logging setup.

Modules obtain their logger with ``get_logger(__name__)``. Output goes through
rich's RichHandler so log lines match the CLI's console styling.
"""

import logging

from rich.logging import RichHandler

_initialized = False


def configure_logging(level: int = logging.INFO) -> None:
    """Configure the root logger once. Later calls only adjust the level."""
    global _initialized
    root = logging.getLogger()
    root.setLevel(level)
    if _initialized:
        return
    handler = RichHandler(show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s | %(message)s", "[%X]"))
    root.addHandler(handler)
    _initialized = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
