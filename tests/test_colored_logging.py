import logging
import unittest
from unittest.mock import patch

from json_snake_generator.colored_logging import (
    ColoredFormatter,
    log_progress,
    log_success,
    setup_colored_logging,
)


def _record(level: int, message: str) -> logging.LogRecord:
    return logging.LogRecord("json_snake_generator", level, __file__, 1, message, None, None)


class TestColoredFormatter(unittest.TestCase):
    """Test message prefixes and color selection."""

    def test_plain_output_without_colors(self):
        formatter = ColoredFormatter(use_colors=False)
        text = formatter.format(_record(logging.WARNING, "Skipping field User.At"))
        self.assertEqual(text, "json-snake: WARNING: Skipping field User.At")

    def test_colors_disabled_when_not_a_tty(self):
        with patch("sys.stderr") as stderr:
            stderr.isatty.return_value = False
            self.assertFalse(ColoredFormatter(use_colors=True).use_colors)

    def test_warning_and_success_colors(self):
        with patch("sys.stderr") as stderr:
            stderr.isatty.return_value = True
            formatter = ColoredFormatter(use_colors=True)
        warning = formatter.format(_record(logging.WARNING, "careful"))
        self.assertTrue(warning.startswith(ColoredFormatter.COLORS["WARNING"]))
        self.assertTrue(warning.endswith(ColoredFormatter.RESET))
        success = formatter.format(_record(logging.INFO, "✓ Wrote user_json.go"))
        self.assertTrue(success.startswith(ColoredFormatter.MARKERS["✓"]))
        plain = formatter.format(_record(logging.INFO, "nothing special"))
        self.assertEqual(plain, "json-snake: INFO: nothing special")


def test_helpers_prefix_markers(caplog):
    logger = logging.getLogger("json_snake_generator.tests")
    with caplog.at_level(logging.INFO):
        log_success(logger, "done")
        log_progress(logger, "working")
    assert caplog.messages == ["✓ done", "→ working"]


def test_setup_installs_single_handler():
    setup_colored_logging(level=logging.DEBUG, use_colors=False)
    setup_colored_logging(level=logging.INFO, use_colors=False)
    root_logger = logging.getLogger()
    handlers = [h for h in root_logger.handlers if isinstance(h.formatter, ColoredFormatter)]
    assert len(handlers) == 1
    assert root_logger.level == logging.INFO
