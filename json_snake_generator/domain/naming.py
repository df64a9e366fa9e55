"""
Naming convention utilities for the JSON snake_case generator.

This module converts Go identifiers to snake_case wire names and derives the
names of the generated declarations and output file.
"""

from ..constants import (
    COMMON_INITIALISMS,
    MAX_INITIALISM_LENGTH,
    MIN_INITIALISM_LENGTH,
    GeneratedNames,
    GoSource,
)


def leading_initialism(text: str) -> str:
    """
    Return the initialism ``text`` starts with, or an empty string.

    Candidate lengths are scanned in ascending order and a longer match
    replaces a shorter one. Matches that end on a word boundary (end of
    text or a character that is not lower-case) are preferred, so that
    "HTTPServer" yields "HTTP" rather than "HTTPS". When no candidate ends on
    a boundary the longest match is returned.

    Example:
        >>> leading_initialism("UIDValue")
        'UID'
        >>> leading_initialism("HTTPServer")
        'HTTP'
        >>> leading_initialism("User")
        ''
    """
    longest = ""
    longest_on_boundary = ""
    for length in range(MIN_INITIALISM_LENGTH, MAX_INITIALISM_LENGTH + 1):
        if len(text) < length:
            break
        candidate = text[:length]
        if candidate not in COMMON_INITIALISMS:
            continue
        longest = candidate
        if length == len(text) or not text[length].islower():
            longest_on_boundary = candidate
    return longest_on_boundary or longest


def to_snake_case(name: str) -> str:
    """
    Convert a camelCase or PascalCase Go identifier to snake_case.

    Upper-case letters start new words, except that a known initialism at
    the start of the current word is kept whole ("ID", "HTTP", "URL"...).
    Characters that are neither upper- nor lower-case pass through as part
    of the current word. The conversion is total and deterministic.

    Args:
        name: The identifier to convert

    Returns:
        The lower-cased words joined with underscores

    Example:
        >>> to_snake_case("UserID")
        'user_id'
        >>> to_snake_case("HTTPServer")
        'http_server'
        >>> to_snake_case("APIKeyID")
        'api_key_id'
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")

    words = []
    word_start = 0
    position = 1
    while position < len(name):
        if not name[position].isupper():
            position += 1
            continue

        initialism = leading_initialism(name[word_start:])
        if initialism:
            words.append(initialism)
            word_start += len(initialism)
            position = word_start + 1
            continue

        words.append(name[word_start:position])
        word_start = position
        position += 1

    if name[word_start:]:
        words.append(name[word_start:])

    return "_".join(word.lower() for word in words)


def is_go_identifier(name: str) -> bool:
    """Check if a string is a valid Go identifier and not a keyword."""
    if not isinstance(name, str) or not name:
        return False
    return name.isidentifier() and name not in GoSource.KEYWORDS


def is_exported(name: str) -> bool:
    """Exported Go identifiers start with an upper-case letter."""
    return bool(name) and name[0].isupper()


class NamingConventions:
    """
    Centralized naming of the generated Go declarations.

    Keeps the mirror type, constructor and output file names consistent
    between the emitter and the driver.
    """

    @staticmethod
    def mirror_type_name(type_name: str) -> str:
        """``User`` -> ``UserJSON``."""
        return f"{type_name}{GeneratedNames.MIRROR_SUFFIX}"

    @staticmethod
    def constructor_name(type_name: str) -> str:
        """``User`` -> ``NewUserJSON``."""
        return f"{GeneratedNames.CONSTRUCTOR_PREFIX}{type_name}{GeneratedNames.MIRROR_SUFFIX}"

    @staticmethod
    def output_file_name(type_name: str) -> str:
        """``User`` -> ``user_json.go``."""
        return f"{type_name}{GeneratedNames.OUTPUT_SUFFIX}".lower()

    @staticmethod
    def wire_name(field_name: str) -> str:
        """Convert a field identifier to its snake_case wire name."""
        return to_snake_case(field_name)
