"""
Struct tag parsing, rendering and wire-name synthesis.

Tags follow the Go convention: space separated ``key`` flags or
``key:"value"`` pairs where the value is a Go interpreted string literal.
Parsed tags are ordered ``StructTag`` sequences so that regenerating from
unchanged sources reproduces the same output byte for byte.
"""

import logging
from typing import Optional, Tuple

from ..constants import TagSyntax
from ..exceptions import TagSyntaxError
from .models import StructTag


logger = logging.getLogger(__name__)

_SIMPLE_ESCAPES = {
    'a': '\a',
    'b': '\b',
    'f': '\f',
    'n': '\n',
    'r': '\r',
    't': '\t',
    'v': '\v',
    '\\': '\\',
    '"': '"',
}

_QUOTE_ESCAPES = {
    '\\': '\\\\',
    '"': '\\"',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
}

_HEX_ESCAPE_WIDTHS = {'x': 2, 'u': 4, 'U': 8}


def _read_quoted(raw: str, pos: int) -> Tuple[str, int]:
    """Decode the quoted value starting at ``raw[pos] == '"'``; return it and the offset after it."""
    start = pos
    pos += 1
    chars = []
    while pos < len(raw):
        char = raw[pos]
        if char == '"':
            return "".join(chars), pos + 1
        if char != '\\':
            chars.append(char)
            pos += 1
            continue

        if pos + 1 >= len(raw):
            break
        escape = raw[pos + 1]
        if escape in _SIMPLE_ESCAPES:
            chars.append(_SIMPLE_ESCAPES[escape])
            pos += 2
        elif escape in _HEX_ESCAPE_WIDTHS:
            width = _HEX_ESCAPE_WIDTHS[escape]
            digits = raw[pos + 2:pos + 2 + width]
            try:
                if len(digits) != width:
                    raise ValueError(digits)
                chars.append(chr(int(digits, 16)))
            except ValueError:
                raise TagSyntaxError(
                    f"Invalid \\{escape} escape in tag value", tag=raw, offset=pos
                )
            pos += 2 + width
        elif escape in "01234567":
            digits = raw[pos + 1:pos + 4]
            if len(digits) != 3 or any(d not in "01234567" for d in digits):
                raise TagSyntaxError("Invalid octal escape in tag value", tag=raw, offset=pos)
            chars.append(chr(int(digits, 8)))
            pos += 4
        else:
            raise TagSyntaxError(
                f"Unknown escape sequence \\{escape} in tag value", tag=raw, offset=pos
            )

    raise TagSyntaxError("Unterminated quoted value in tag", tag=raw, offset=start)


def unquote_string_literal(literal: str) -> str:
    """Decode a complete Go interpreted string literal such as ``"a\\"b"``."""
    if len(literal) < 2 or not literal.startswith('"'):
        raise TagSyntaxError("Expected a double-quoted string literal", tag=literal, offset=0)
    value, end = _read_quoted(literal, 0)
    if end != len(literal):
        raise TagSyntaxError("Unexpected text after string literal", tag=literal, offset=end)
    return value


def parse_tag(raw: Optional[str]) -> StructTag:
    """
    Parse a raw struct tag into an ordered StructTag.

    Args:
        raw: Tag text without the enclosing literal quotes, or None

    Returns:
        The entries in first-seen order. A repeated key keeps its first
        position and takes the last value.

    Raises:
        TagSyntaxError: If a key is missing or a value is not a terminated
            double-quoted string.

    Example:
        >>> parse_tag('json:",omitempty" db:"user_name"').keys()
        ['json', 'db']
    """
    if not raw:
        return StructTag()

    pairs = []
    pos = 0
    length = len(raw)
    while True:
        while pos < length and raw[pos].isspace():
            pos += 1
        if pos >= length:
            break

        start = pos
        while pos < length and not raw[pos].isspace() and raw[pos] not in ':"':
            pos += 1
        key = raw[start:pos]
        if not key:
            raise TagSyntaxError(
                f"Expected a tag key, found {raw[pos]!r}", tag=raw, offset=pos
            )

        if pos < length and raw[pos] == ':':
            pos += 1
            # go vet rejects it, but a single space after the colon is common enough to accept
            if pos < length and raw[pos] == ' ':
                pos += 1
            if pos >= length or raw[pos] != '"':
                raise TagSyntaxError(
                    f"Expected a quoted value for tag key '{key}'", tag=raw, offset=pos
                )
            value, pos = _read_quoted(raw, pos)
            pairs.append((key, value))
        else:
            pairs.append((key, None))

    return StructTag.from_pairs(pairs)


def quote_tag_value(value: str) -> str:
    """Quote a tag value as a Go interpreted string literal."""
    return '"' + "".join(_QUOTE_ESCAPES.get(char, char) for char in value) + '"'


def serialize_tag(tag: StructTag) -> str:
    """Render a StructTag as tag text, entries in order and single-space separated."""
    parts = []
    for entry in tag:
        if entry.is_flag:
            parts.append(entry.key)
        else:
            parts.append(f"{entry.key}:{quote_tag_value(entry.value)}")
    return " ".join(parts)


def go_tag_literal(tag: StructTag) -> str:
    """
    Render a StructTag as a Go string literal for a struct field.

    A raw backtick literal is used unless the tag text itself contains a
    backtick, in which case an interpreted literal is produced.
    """
    text = serialize_tag(tag)
    if "`" not in text:
        return f"`{text}`"
    return quote_tag_value(text)


def synthesize_wire_tag(
    field_name: str,
    existing: StructTag,
    derived_label: str,
    key: str = TagSyntax.WIRE_NAME_KEY,
) -> StructTag:
    """
    Decide the wire-name entry of a field's tag.

    Explicit names always win over the derived label, but the derived label
    wins over "no name given":

    - no ``key`` entry: ``key:"<derived_label>"`` is appended;
    - empty or flag ``key`` entry: its value becomes the derived label;
    - separator-led value (``,omitempty``): the derived label is prepended;
    - any other value (including ``-``): left untouched.

    Other entries keep their values and positions. The input is not mutated
    and applying the function to its own output changes nothing.
    """
    entry = existing.get(key)
    if entry is None or not entry.value:
        logger.debug(f"{field_name}: deriving {key} name '{derived_label}'")
        return existing.with_entry(key, derived_label)

    if entry.value.startswith(TagSyntax.OPTION_SEPARATOR):
        logger.debug(f"{field_name}: prefixing {key} options '{entry.value}' with '{derived_label}'")
        return existing.with_entry(key, derived_label + entry.value)

    logger.debug(f"{field_name}: keeping explicit {key} name '{entry.value}'")
    return existing
