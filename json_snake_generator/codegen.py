import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .constants import FieldPolicy, GeneratedNames
from .domain.models import GeneratedType, MirrorField, SkippedField, TypeDeclaration
from .domain.naming import NamingConventions, to_snake_case
from .domain.tags import go_tag_literal, parse_tag, quote_tag_value, synthesize_wire_tag
from .domain.type_spelling import (
    declares_inline_type,
    default_package_name,
    package_qualifiers,
)
from .exceptions import CodeGenerationError, TagSyntaxError


logger = logging.getLogger(__name__)

# Define the path to the templates directory relative to this file
TEMPLATE_DIR = Path(__file__).parent / "templates"

HEADER_TEMPLATE = "header.go.j2"
MARSHAL_TEMPLATE = "marshal_json.go.j2"


def setup_jinja_env() -> Environment:
    """Sets up and returns the Jinja2 environment for Go templates."""
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=False,  # Go source, never HTML
        trim_blocks=True,  # Remove first newline after a block tag
        lstrip_blocks=True,  # Strip leading whitespace from lines with block tags
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["go_tag"] = go_tag_literal
    return env


def _skip_reason(decl: TypeDeclaration, field_decl, field_policy: str) -> Optional[str]:
    """Return why a field is left out of the mirror type, or None to keep it."""
    if field_decl.embedded:
        return "embedded fields are not mirrored"
    if not field_decl.is_exported:
        return "unexported fields are not serialized"

    qualifiers = package_qualifiers(field_decl.declared_type)
    if field_policy == FieldPolicy.UNQUALIFIED:
        if qualifiers:
            return f"type references package '{qualifiers[0]}'"
        if declares_inline_type(field_decl.declared_type):
            return "type declares an inline struct, interface or func"
        return None

    for qualifier in qualifiers:
        if decl.import_path(qualifier) is None:
            return f"package qualifier '{qualifier}' is not imported by {decl.location}"
    return None


def build_mirror_type(
    decl: TypeDeclaration, field_policy: str = FieldPolicy.UNQUALIFIED
) -> GeneratedType:
    """
    Compute the mirror type of a struct declaration.

    Every kept field gets its tag parsed and its ``json`` entry synthesized
    from the snake_case form of the field name. Skipped fields are left out
    of the mirror type and therefore of the constructor as well, and are
    reported on the result.

    Raises:
        CodeGenerationError: For generic types or unparsable field tags.
    """
    if field_policy not in FieldPolicy.CHOICES:
        raise CodeGenerationError(
            f"Unknown field policy '{field_policy}'", type_name=decl.name
        )
    if decl.is_generic:
        raise CodeGenerationError(
            f"Cannot generate a mirror for generic type {decl.name}{decl.type_params}",
            type_name=decl.name,
            context={"location": decl.location},
        )

    mirror_fields: List[MirrorField] = []
    skipped: List[SkippedField] = []
    imports: List[Tuple[str, str]] = []

    for field_decl in decl.fields:
        reason = _skip_reason(decl, field_decl, field_policy)
        if reason:
            skipped.append(
                SkippedField(decl.name, field_decl.name, field_decl.declared_type, reason)
            )
            logger.warning(f"Skipping field {decl.name}.{field_decl.name}: {reason}")
            continue

        try:
            existing = parse_tag(field_decl.raw_tag)
        except TagSyntaxError as e:
            raise CodeGenerationError(
                f"Invalid struct tag on {decl.name}.{field_decl.name}: {e.message}",
                type_name=decl.name,
                field_name=field_decl.name,
                context={"tag": field_decl.raw_tag, "location": decl.location},
            ) from e

        tag = synthesize_wire_tag(field_decl.name, existing, to_snake_case(field_decl.name))
        mirror_fields.append(MirrorField(field_decl.name, field_decl.declared_type, tag))

        for qualifier in package_qualifiers(field_decl.declared_type):
            spec = (qualifier, decl.import_path(qualifier))
            if spec not in imports:
                imports.append(spec)

    return GeneratedType(
        source_name=decl.name,
        mirror_name=NamingConventions.mirror_type_name(decl.name),
        constructor_name=NamingConventions.constructor_name(decl.name),
        fields=tuple(mirror_fields),
        skipped=tuple(skipped),
        imports=tuple(imports),
    )


def emit_type_declaration(generated: GeneratedType, env: Optional[Environment] = None) -> str:
    """Render the mirror type, MarshalJSON method and constructor of one type."""
    env = env or setup_jinja_env()
    template = env.get_template(MARSHAL_TEMPLATE)
    return template.render(generated=generated)


def resolve_import_conflicts(generated_types: Sequence[GeneratedType]) -> List[GeneratedType]:
    """
    Make the package qualifiers of all generated types agree on one import each.

    Types declared in different files may use one qualifier for different
    import paths, e.g. ``util`` for both ``example.com/a/util`` and
    ``example.com/b/util``. The generated file can bind a qualifier only
    once: the first field to use it (in emission order) wins and later fields
    spelling it for another path are skipped. ``json`` is always bound to
    ``encoding/json``.
    """
    bound = {default_package_name(GeneratedNames.JSON_IMPORT): GeneratedNames.JSON_IMPORT}
    resolved = []
    for generated in generated_types:
        type_imports = dict(generated.imports)
        kept: List[MirrorField] = []
        skipped = list(generated.skipped)
        for mirror_field in generated.fields:
            qualifiers = package_qualifiers(mirror_field.declared_type)
            conflict = next(
                (q for q in qualifiers if bound.get(q, type_imports[q]) != type_imports[q]),
                None,
            )
            if conflict is not None:
                reason = (
                    f"package qualifier '{conflict}' refers to both {bound[conflict]} "
                    f"and {type_imports[conflict]}"
                )
                skipped.append(
                    SkippedField(
                        generated.source_name, mirror_field.name, mirror_field.declared_type, reason
                    )
                )
                logger.warning(
                    f"Skipping field {generated.source_name}.{mirror_field.name}: {reason}"
                )
                continue
            for qualifier in qualifiers:
                bound[qualifier] = type_imports[qualifier]
            kept.append(mirror_field)

        used = {q for mirror_field in kept for q in package_qualifiers(mirror_field.declared_type)}
        resolved.append(
            replace(
                generated,
                fields=tuple(kept),
                skipped=tuple(skipped),
                imports=tuple(spec for spec in generated.imports if spec[0] in used),
            )
        )
    return resolved


def import_specs(generated_types: Sequence[GeneratedType]) -> List[str]:
    """
    Collect the import specs of the generated file, one per qualifier, sorted by path.

    ``encoding/json`` is always present; a qualifier that differs from the
    package name guessed from its path is written as an explicit alias, so
    one path imported under two names yields two specs.

    Raises:
        CodeGenerationError: If a qualifier is bound to two paths; run
            ``resolve_import_conflicts`` first.
    """
    qualifiers = {default_package_name(GeneratedNames.JSON_IMPORT): GeneratedNames.JSON_IMPORT}
    for generated in generated_types:
        for qualifier, path in generated.imports:
            bound = qualifiers.setdefault(qualifier, path)
            if bound != path:
                raise CodeGenerationError(
                    f"Package qualifier '{qualifier}' refers to both {bound} and {path}",
                    type_name=generated.source_name,
                )

    specs = []
    for qualifier, path in sorted(qualifiers.items(), key=lambda item: (item[1], item[0])):
        quoted = quote_tag_value(path)
        specs.append(quoted if default_package_name(path) == qualifier else f"{qualifier} {quoted}")
    return specs


def render_file_header(
    package_name: str, command: str, imports: Sequence[str], env: Optional[Environment] = None
) -> str:
    """Render the generated-code banner, package clause and import block."""
    env = env or setup_jinja_env()
    template = env.get_template(HEADER_TEMPLATE)
    return template.render(command=command, package_name=package_name, imports=list(imports))
