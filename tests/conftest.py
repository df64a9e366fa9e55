# File: tests/conftest.py
# Contains pytest fixtures for building throwaway Go packages on disk.

import logging
import textwrap
from pathlib import Path
from typing import Callable, Dict

import pytest

from json_snake_generator.colored_logging import ColoredFormatter


USER_SOURCE = """\
package models

type User struct {
	ID       int
	UserName string `json:",omitempty"`
}
"""


@pytest.fixture
def go_package(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """
    Returns a factory writing ``{file name: source}`` into a fresh package
    directory and returning that directory.
    """

    def _write(files: Dict[str, str]) -> Path:
        package_dir = tmp_path / "pkg"
        package_dir.mkdir(exist_ok=True)
        for name, source in files.items():
            (package_dir / name).write_text(textwrap.dedent(source), encoding="utf-8")
        return package_dir

    return _write


@pytest.fixture
def user_package(go_package) -> Path:
    """A package declaring the two-field ``User`` struct."""
    return go_package({"user.go": USER_SOURCE})


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI installs a colored console handler on the root logger; drop it after every test."""
    root_logger = logging.getLogger()
    level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        if isinstance(handler.formatter, ColoredFormatter):
            root_logger.removeHandler(handler)
    root_logger.setLevel(level)
