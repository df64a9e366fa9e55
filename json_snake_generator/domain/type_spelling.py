"""
Helpers classifying Go type spellings.

The mirror type repeats each field's declared type verbatim, so the emitter
needs to know whether a spelling references other packages or declares an
inline type before deciding to keep the field.
"""

import re
from typing import List

_STRING_LITERAL = re.compile(r'"(?:[^"\\]|\\.)*"|`[^`]*`')
_QUALIFIED_NAME = re.compile(r'(?<![\w.])([A-Za-z_][A-Za-z0-9_]*)\s*\.\s*[A-Za-z_]')
_INLINE_DECLARATION = re.compile(r'\b(struct|interface)\s*\{\s*[^}\s]|\bfunc\s*\(')
_VERSION_ELEMENT = re.compile(r'v[0-9]+')


def _strip_literals(spelling: str) -> str:
    # Tags of inline struct types may contain dots that are not qualifiers
    return _STRING_LITERAL.sub('""', spelling)


def package_qualifiers(spelling: str) -> List[str]:
    """
    Return the package qualifiers a type spelling references, in order of appearance.

    Example:
        >>> package_qualifiers("map[string]*time.Time")
        ['time']
        >>> package_qualifiers("[]User")
        []
    """
    qualifiers = []
    for match in _QUALIFIED_NAME.finditer(_strip_literals(spelling)):
        qualifier = match.group(1)
        if qualifier not in qualifiers:
            qualifiers.append(qualifier)
    return qualifiers


def declares_inline_type(spelling: str) -> bool:
    """True for spellings containing a non-empty struct/interface body or a func signature."""
    return bool(_INLINE_DECLARATION.search(_strip_literals(spelling)))


def is_unqualified(spelling: str) -> bool:
    """
    True when the spelling can be repeated in the generated file as is.

    That is, it references no other package and declares no inline type;
    ``[]string``, ``*User``, ``map[string]int`` and ``interface{}`` qualify.
    """
    return not package_qualifiers(spelling) and not declares_inline_type(spelling)


def default_package_name(import_path: str) -> str:
    """
    Guess the package name an import path is referenced by.

    Uses the last path element, skipping a major version suffix and any
    dotted suffix (``gopkg.in/yaml.v3`` -> ``yaml``).
    """
    elements = [element for element in import_path.split("/") if element]
    if not elements:
        return import_path
    name = elements[-1]
    if _VERSION_ELEMENT.fullmatch(name) and len(elements) > 1:
        name = elements[-2]
    return name.split(".")[0]
