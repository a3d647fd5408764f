"""Shared, versioned scouting notes for small teams."""

__version__ = "0.1.0"

from scoutnotes.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
