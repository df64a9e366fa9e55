"""
Colored logging formatter for the JSON snake_case generator.

This module provides colored console output so that warnings about skipped
fields and unformatted output stand out during a generation run.
"""

import logging
import sys
from typing import Optional


class ColoredFormatter(logging.Formatter):
    """
    Colored logging formatter that adds ANSI color codes to log messages.

    Levels get their own colors; INFO messages carrying one of the markers
    written by the ``log_*`` helpers below are highlighted as well.
    """

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '',
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }

    # Message markers and their colors
    MARKERS = {
        '✓': '\033[92m\033[1m',   # Bright green, bold
        '→': '\033[94m',          # Bright blue
        '•': '\033[96m',          # Bright cyan
        '==': '\033[1m\033[96m',  # Bold bright cyan
    }

    RESET = '\033[0m'

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True):
        """
        Initialize the colored formatter.

        Args:
            fmt: Log format string (uses "json-snake: LEVEL: message" if None)
            use_colors: Whether to use colors (disabled anyway when stderr is not a TTY)
        """
        if fmt is None:
            fmt = "json-snake: %(levelname)s: %(message)s"
        super().__init__(fmt)
        self.use_colors = use_colors and hasattr(sys.stderr, 'isatty') and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with colors."""
        formatted_message = super().format(record)
        if not self.use_colors:
            return formatted_message

        color = self.COLORS.get(record.levelname, '')
        if record.levelname == 'INFO':
            message = record.getMessage().lstrip()
            for marker, marker_color in self.MARKERS.items():
                if message.startswith(marker):
                    color = marker_color
                    break

        if not color:
            return formatted_message
        return f"{color}{formatted_message}{self.RESET}"


def setup_colored_logging(level: int = logging.INFO, use_colors: bool = True) -> None:
    """
    Set up colored logging for the application.

    Args:
        level: Logging level (default: INFO)
        use_colors: Whether to use colors (default: True)
    """
    formatter = ColoredFormatter(use_colors=use_colors)

    root_logger = logging.getLogger()

    # Remove existing handlers to avoid duplication
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)

    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)


def get_colored_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name (typically __name__)."""
    return logging.getLogger(name)


# Convenience functions for special message types
def log_success(logger: logging.Logger, message: str) -> None:
    """Log a success message with special formatting."""
    logger.info(f"✓ {message}")


def log_progress(logger: logging.Logger, message: str) -> None:
    """Log a progress message with special formatting."""
    logger.info(f"→ {message}")


def log_highlight(logger: logging.Logger, message: str) -> None:
    """Log a highlighted message with special formatting."""
    logger.info(f"• {message}")


def log_section(logger: logging.Logger, section_name: str) -> None:
    """Log a section header with special formatting."""
    logger.info(f"== {section_name} ==")
