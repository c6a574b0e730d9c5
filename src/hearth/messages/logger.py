"""
Logging configuration for hearth - comfortable, informative output.

HearthLogger provides human-readable, color-coded logging that makes it easy
to see which worker opened which session and with what configuration. It
writes to the console and, unless disabled in settings, to a log file.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

import colorama

from hearth.utility.settings import settings

# Initialize colorama for cross-platform color support
colorama.init()


class ColorFormatter(logging.Formatter):
    """Custom formatter with colors"""

    # Color codes - Blue and Green scheme
    COLORS = {
        "INFO": colorama.Fore.BLUE,
        "WARNING": colorama.Fore.YELLOW,
        "ERROR": colorama.Fore.RED,
        "DEBUG": colorama.Fore.BLUE,
        "START": colorama.Fore.BLUE,
        "OK": colorama.Fore.GREEN,
    }

    def format(self, record):
        # Extract factory name from logger name
        # (e.g., hearth.factory.secure -> secure)
        # and format it in white
        if record.name.startswith("hearth.factory."):
            factory_name = record.name.replace("hearth.factory.", "")
            white = colorama.Fore.WHITE
            reset = colorama.Style.RESET_ALL
            record.factory_name = f"{white}[{factory_name}]{reset} "
        else:
            record.factory_name = ""

        # Add color to levelname if it exists in our color mapping
        if record.levelname in self.COLORS:
            color = self.COLORS[record.levelname]
            record.levelname = f"{color}{record.levelname}{colorama.Style.RESET_ALL}"

        # Add color to message for START and OK prefixes
        if hasattr(record, "color_prefix"):
            color = self.COLORS.get(record.color_prefix, "")
            record.msg = f"{color}{record.msg}{colorama.Style.RESET_ALL}"

        return super().format(record)


class HearthLogger:
    """
    Central logging class for hearth.

    Wraps a standard ``logging.Logger`` and adds the ``start`` / ``success``
    helpers used around session creation. Handlers are attached once per
    logger name, so creating a HearthLogger per factory or per session is
    cheap.
    """

    class Style:
        """ANSI color codes for hosts and paths"""

        CYAN = colorama.Fore.CYAN
        GREEN = colorama.Fore.GREEN
        YELLOW = colorama.Fore.YELLOW
        BLUE = colorama.Fore.BLUE
        MAGENTA = colorama.Fore.MAGENTA
        RED = colorama.Fore.RED
        RESET = colorama.Style.RESET_ALL

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.style = self.Style()

        # Only set up handlers if they haven't been set up already
        if not self.logger.handlers:
            self.logger.setLevel(logging.INFO)

            formatter = ColorFormatter(
                "%(asctime)s  %(factory_name)s%(message)s", datefmt="%H:%M:%S"
            )

            if settings.logging.to_file:
                log_dir = Path.cwd() / settings.logging.directory
                log_dir.mkdir(exist_ok=True)

                file_handler = logging.FileHandler(
                    log_dir / settings.logging.filename, encoding="utf-8"
                )
                file_handler.setLevel(logging.DEBUG)
                file_handler.setFormatter(formatter)
                self.logger.addHandler(file_handler)

            # Console handler
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(logging.DEBUG)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

            # Prevent logs from being passed to root logger
            self.logger.propagate = False

    def info(self, msg: str, color_prefix: Optional[str] = None) -> None:
        """Log info message with optional color prefix"""
        extra = {"color_prefix": color_prefix} if color_prefix else None
        self.logger.info(msg, extra=extra)

    def start(self, msg: str) -> None:
        """Log start message in blue"""
        self.info(f"START {msg}", color_prefix="START")

    def success(self, msg: str) -> None:
        """Log success message in green"""
        self.info(f"OK {msg}", color_prefix="OK")

    def error(self, msg: str) -> None:
        """Log error message in red"""
        self.logger.error(msg)

    def warning(self, msg: str) -> None:
        """Log warning message in yellow"""
        self.logger.warning(msg)

    def debug(self, msg: str) -> None:
        """Log debug message in blue"""
        self.logger.debug(msg)

    def host(self, host: str, color: str = None) -> str:
        """Format a host or path with color"""
        if not color:
            color = self.style.CYAN
        return f"{color}{host}{self.style.RESET}"


def get_logger(name: str) -> HearthLogger:
    """Get a configured logger instance."""
    return HearthLogger(name)
