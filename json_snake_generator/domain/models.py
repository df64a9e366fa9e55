"""
Core domain models for the JSON snake_case generator.

These models describe Go struct declarations as consumed by the generator,
struct tags as ordered key/value sequences, and the mirror types produced
from them. They are independent of how declarations are discovered and of
how the generated code is rendered.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class FieldDeclaration:
    """One named, typed member of a Go struct."""

    name: str
    declared_type: str
    raw_tag: Optional[str] = None
    embedded: bool = False

    @property
    def is_exported(self) -> bool:
        """Exported Go identifiers start with an upper-case letter."""
        return bool(self.name) and self.name[0].isupper()


@dataclass(frozen=True)
class TypeDeclaration:
    """
    A named, field-ordered Go struct declaration.

    Read-only input of a generation pass. ``imports`` maps the package
    qualifiers visible in the declaring file to their import paths.
    """

    name: str
    fields: Tuple[FieldDeclaration, ...] = ()
    type_params: Optional[str] = None
    source_file: Optional[str] = None
    line: Optional[int] = None
    imports: Tuple[Tuple[str, str], ...] = ()

    @property
    def is_generic(self) -> bool:
        return bool(self.type_params)

    @property
    def location(self) -> str:
        if self.source_file is None:
            return "<unknown>"
        if self.line is None:
            return self.source_file
        return f"{self.source_file}:{self.line}"

    def import_path(self, qualifier: str) -> Optional[str]:
        """Return the import path bound to ``qualifier`` in the declaring file."""
        for name, path in self.imports:
            if name == qualifier:
                return path
        return None


@dataclass(frozen=True)
class TagEntry:
    """A single ``key`` or ``key:"value"`` struct tag entry; ``value`` None is a bare flag."""

    key: str
    value: Optional[str] = None

    @property
    def is_flag(self) -> bool:
        return self.value is None


@dataclass(frozen=True)
class StructTag:
    """
    An ordered sequence of tag entries with unique keys.

    Insertion order is significant: it is the order the entries are emitted
    in, and regenerating from unchanged input must reproduce it exactly.
    Updating an existing key keeps its position, new keys are appended.
    """

    entries: Tuple[TagEntry, ...] = ()

    def __iter__(self) -> Iterator[TagEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def keys(self) -> List[str]:
        return [entry.key for entry in self.entries]

    def get(self, key: str) -> Optional[TagEntry]:
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    def with_entry(self, key: str, value: Optional[str]) -> "StructTag":
        """Return a copy with ``key`` set to ``value``, in place if already present."""
        updated = TagEntry(key, value)
        entries = list(self.entries)
        for index, entry in enumerate(entries):
            if entry.key == key:
                entries[index] = updated
                return StructTag(tuple(entries))
        entries.append(updated)
        return StructTag(tuple(entries))

    @classmethod
    def from_pairs(cls, pairs) -> "StructTag":
        """Build a tag from ``(key, value)`` pairs; a repeated key overwrites in place."""
        tag = cls()
        for key, value in pairs:
            tag = tag.with_entry(key, value)
        return tag


@dataclass(frozen=True)
class MirrorField:
    """A field of the generated mirror type."""

    name: str
    declared_type: str
    tag: StructTag


@dataclass(frozen=True)
class SkippedField:
    """Diagnostic for a field left out of both the mirror type and its constructor."""

    type_name: str
    field_name: str
    declared_type: str
    reason: str

    def __str__(self) -> str:
        return f"{self.type_name}.{self.field_name} ({self.declared_type}): {self.reason}"


@dataclass(frozen=True)
class GeneratedType:
    """The mirror of one requested struct, ready for rendering."""

    source_name: str
    mirror_name: str
    constructor_name: str
    fields: Tuple[MirrorField, ...] = ()
    skipped: Tuple[SkippedField, ...] = ()
    # (qualifier, import path) pairs the mirror's field types need
    imports: Tuple[Tuple[str, str], ...] = ()

    @property
    def field_names(self) -> List[str]:
        return [mirror_field.name for mirror_field in self.fields]


@dataclass
class GenerationResult:
    """
    Result of a generation pass.

    Carries the generated Go source plus every non-fatal diagnostic that was
    raised along the way, so callers can report them without re-running.
    """

    # Generated content
    code: str
    type_names: List[str] = field(default_factory=list)
    package_name: Optional[str] = None
    output_path: Optional[str] = None

    # Status and diagnostics
    is_formatted: bool = False
    warnings: List[str] = field(default_factory=list)
    skipped_fields: List[SkippedField] = field(default_factory=list)

    code_lines: Optional[int] = None

    def __post_init__(self):
        """Post-initialization processing."""
        if self.code_lines is None:
            self.code_lines = len(self.code.splitlines())

    def add_warning(self, warning: str):
        """Add a non-fatal diagnostic."""
        self.warnings.append(warning)

    def to_dict(self) -> Dict[str, object]:
        """Convert to dictionary representation."""
        return {
            'code': self.code,
            'type_names': list(self.type_names),
            'package_name': self.package_name,
            'output_path': self.output_path,
            'is_formatted': self.is_formatted,
            'warnings': list(self.warnings),
            'skipped_fields': [str(skipped) for skipped in self.skipped_fields],
            'code_lines': self.code_lines,
        }
