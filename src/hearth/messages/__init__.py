"""
Message utilities for hearth.

- Logger: Human-readable output formatting with colors
"""
from hearth.messages.logger import HearthLogger, get_logger

__all__ = ["HearthLogger", "get_logger"]
