"""
Go build constraint evaluation.

Decides which files of a package directory take part in a build for a given
target platform, following the rules of ``go build``: ``_GOOS``, ``_GOARCH``
and ``_GOOS_GOARCH`` file name suffixes, and ``//go:build`` expressions (or
the older ``// +build`` lines) in the comments preceding the package clause.
"""

import os
import platform
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .constants import GoPlatform
from .exceptions import SourceReadError


_GO_BUILD_PREFIX = "//go:build"
_PLUS_BUILD_PREFIX = "// +build"
_EXPRESSION_TOKEN = re.compile(r"\s*(&&|\|\||!|\(|\)|[A-Za-z0-9_.]+)")


def host_goos() -> str:
    """GOOS of the running interpreter, honoring a ``GOOS`` environment variable."""
    return os.environ.get("GOOS") or platform.system().lower()


def host_goarch() -> str:
    """GOARCH of the running interpreter, honoring a ``GOARCH`` environment variable."""
    if os.environ.get("GOARCH"):
        return os.environ["GOARCH"]
    machine = platform.machine().lower()
    return GoPlatform.HOST_ARCH.get(machine, machine)


@dataclass(frozen=True)
class BuildContext:
    """The target platform and extra tags a package is scanned for."""
    goos: str
    goarch: str
    build_tags: Tuple[str, ...] = ()

    @classmethod
    def for_target(
        cls,
        goos: Optional[str] = None,
        goarch: Optional[str] = None,
        build_tags: Iterable[str] = (),
    ) -> "BuildContext":
        """Build a context, filling unset platform values from the host."""
        return cls(goos or host_goos(), goarch or host_goarch(), tuple(build_tags))

    def match_tag(self, tag: str) -> bool:
        """Report whether a single build tag holds for this context."""
        if tag in (self.goos, self.goarch) or tag in self.build_tags:
            return True
        if tag == "unix":
            return self.goos in GoPlatform.UNIX_OS
        if tag in GoPlatform.TOOLCHAIN_TAGS or tag.startswith(GoPlatform.RELEASE_TAG_PREFIX):
            return True
        return GoPlatform.IMPLIED_OS.get(self.goos) == tag

    def match_file_name(self, file_name: str) -> bool:
        """
        Report whether a file's ``_GOOS``/``_GOARCH`` suffix admits this context.

        ``stat_linux.go`` only builds on linux (and android), ``asm_amd64.s``
        only on amd64 and ``sys_linux_arm64.go`` needs both. Names without a
        known platform element are unconstrained.
        """
        name = file_name.split(".", 1)[0]
        index = name.find("_")
        if index < 0:
            return True
        parts = name[index:].split("_")
        if parts[-1] == "test":
            parts = parts[:-1]

        if (
            len(parts) >= 2
            and parts[-2] in GoPlatform.KNOWN_OS
            and parts[-1] in GoPlatform.KNOWN_ARCH
        ):
            return self.match_tag(parts[-2]) and self.match_tag(parts[-1])
        if parts and (parts[-1] in GoPlatform.KNOWN_OS or parts[-1] in GoPlatform.KNOWN_ARCH):
            return self.match_tag(parts[-1])
        return True

    def match_source(self, source: str, path: str = "<source>") -> bool:
        """
        Evaluate the build constraints in the header of a Go file.

        A ``//go:build`` line wins over ``// +build`` lines, which are only
        consulted when no ``//go:build`` line is present.

        Raises:
            SourceReadError: If a ``//go:build`` expression is malformed.
        """
        go_build, plus_build = constraint_lines(source)
        if go_build is not None:
            try:
                return ConstraintExpression(go_build).evaluate(self.match_tag)
            except ValueError as e:
                raise SourceReadError(
                    f"Invalid build constraint '{go_build}': {e}", path=path
                ) from e
        return all(self._match_plus_build(line) for line in plus_build)

    def _match_plus_build(self, line: str) -> bool:
        # Space separated options are alternatives, comma separated terms must all hold
        for option in line.split():
            if all(self._match_term(term) for term in option.split(",")):
                return True
        return False

    def _match_term(self, term: str) -> bool:
        if term.startswith("!"):
            return not self.match_tag(term[1:])
        return self.match_tag(term)


def constraint_lines(source: str) -> Tuple[Optional[str], List[str]]:
    """
    Collect the constraint lines from a file header.

    Returns the ``//go:build`` expression (or None) and the bodies of any
    ``// +build`` lines. Only line comments before the first other line count.
    """
    go_build = None
    plus_build = []
    for line in source.lstrip("\ufeff").splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if not stripped.startswith("//"):
            break
        if stripped.startswith(_GO_BUILD_PREFIX) and go_build is None:
            rest = stripped[len(_GO_BUILD_PREFIX):]
            if not rest or rest[0].isspace():
                go_build = rest.strip()
        elif stripped.startswith(_PLUS_BUILD_PREFIX):
            rest = stripped[len(_PLUS_BUILD_PREFIX):]
            if not rest or rest[0].isspace():
                plus_build.append(rest.strip())
    return go_build, plus_build


class ConstraintExpression:
    """
    A ``//go:build`` expression: tags combined with ``!``, ``&&``, ``||``
    and parentheses, where ``&&`` binds tighter than ``||``.
    """

    def __init__(self, text: str):
        self.text = text
        self.tokens = self._tokenize(text)
        self.pos = 0

    @staticmethod
    def _tokenize(text: str) -> List[str]:
        tokens = []
        pos = 0
        while pos < len(text):
            if text[pos:].strip() == "":
                break
            match = _EXPRESSION_TOKEN.match(text, pos)
            if not match:
                raise ValueError(f"unexpected character {text[pos:].lstrip()[0]!r}")
            tokens.append(match.group(1))
            pos = match.end()
        if not tokens:
            raise ValueError("empty expression")
        return tokens

    def evaluate(self, match_tag) -> bool:
        self.pos = 0
        result = self._or(match_tag)
        if self.pos != len(self.tokens):
            raise ValueError(f"unexpected {self.tokens[self.pos]!r}")
        return result

    def _peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _or(self, match_tag) -> bool:
        result = self._and(match_tag)
        while self._peek() == "||":
            self.pos += 1
            right = self._and(match_tag)
            result = result or right
        return result

    def _and(self, match_tag) -> bool:
        result = self._not(match_tag)
        while self._peek() == "&&":
            self.pos += 1
            right = self._not(match_tag)
            result = result and right
        return result

    def _not(self, match_tag) -> bool:
        if self._peek() == "!":
            self.pos += 1
            return not self._not(match_tag)
        return self._atom(match_tag)

    def _atom(self, match_tag) -> bool:
        token = self._peek()
        if token is None:
            raise ValueError("unexpected end of expression")
        self.pos += 1
        if token == "(":
            result = self._or(match_tag)
            if self._peek() != ")":
                raise ValueError("missing ')'")
            self.pos += 1
            return result
        if token in (")", "&&", "||"):
            raise ValueError(f"unexpected {token!r}")
        return match_tag(token)
