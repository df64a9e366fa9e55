"""
Domain module for the JSON snake_case generator.

This module contains the core logic separated from infrastructure concerns:
declaration and tag models, snake_case naming and wire-name tag synthesis.
"""

from .models import (
    FieldDeclaration,
    TypeDeclaration,
    TagEntry,
    StructTag,
    MirrorField,
    SkippedField,
    GeneratedType,
    GenerationResult
)

from .naming import (
    NamingConventions,
    to_snake_case,
    leading_initialism,
    is_go_identifier,
    is_exported
)

from .tags import (
    parse_tag,
    serialize_tag,
    quote_tag_value,
    unquote_string_literal,
    go_tag_literal,
    synthesize_wire_tag
)

from .type_spelling import (
    package_qualifiers,
    declares_inline_type,
    is_unqualified,
    default_package_name
)

__all__ = [
    # Core models
    'FieldDeclaration',
    'TypeDeclaration',
    'TagEntry',
    'StructTag',
    'MirrorField',
    'SkippedField',
    'GeneratedType',
    'GenerationResult',

    # Naming
    'NamingConventions',
    'to_snake_case',
    'leading_initialism',
    'is_go_identifier',
    'is_exported',

    # Tags
    'parse_tag',
    'serialize_tag',
    'quote_tag_value',
    'unquote_string_literal',
    'go_tag_literal',
    'synthesize_wire_tag',

    # Type spellings
    'package_qualifiers',
    'declares_inline_type',
    'is_unqualified',
    'default_package_name'
]
