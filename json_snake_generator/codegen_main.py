"""
Code generation main module.

Ties the pieces of a generation pass together: reads the Go package, picks
the requested struct declarations, renders one mirror type per declaration
below a shared file header, canonicalizes the result with gofmt and writes
the output file.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from jinja2 import Environment

from .codegen import (
    build_mirror_type,
    emit_type_declaration,
    import_specs,
    render_file_header,
    resolve_import_conflicts,
    setup_jinja_env,
)
from .codegen_utils import format_go_code_using_gofmt
from .config_validation import (
    GeneratorConfigSchema,
    resolve_build_context,
    resolve_output_path,
)
from .constants import FieldPolicy, GeneratedNames
from .domain.models import GeneratedType, GenerationResult, TypeDeclaration
from .exceptions import (
    DuplicateDeclarationError,
    FormattingError,
    OutputWriteError,
    TypeNotFoundError,
)
from .introspection_go import GoPackage, introspect_package


logger = logging.getLogger(__name__)


def select_declarations(package: GoPackage, type_names: Sequence[str]) -> List[TypeDeclaration]:
    """
    Return the declarations of the requested types, in source order.

    Raises:
        TypeNotFoundError: If a name is not a struct declared in the package.
        DuplicateDeclarationError: If a name is declared more than once.
    """
    selected = []
    for type_name in type_names:
        matches = package.find(type_name)
        if not matches:
            raise TypeNotFoundError(
                f"No struct type named '{type_name}' in package '{package.name}'",
                type_name=type_name,
                package=package.name,
            )
        if len(matches) > 1:
            raise DuplicateDeclarationError(
                f"Type '{type_name}' is declared {len(matches)} times in package '{package.name}'",
                type_name=type_name,
                locations=[decl.location for decl in matches],
            )
        selected.append(matches[0])

    order = {id(decl): index for index, decl in enumerate(package.declarations)}
    return sorted(selected, key=lambda decl: order[id(decl)])


def render_generated_file(
    package_name: str,
    declarations: Sequence[TypeDeclaration],
    field_policy: str = FieldPolicy.UNQUALIFIED,
    command: str = GeneratedNames.TOOL_NAME,
    env: Optional[Environment] = None,
) -> Tuple[str, List[GeneratedType]]:
    """
    Render the unformatted Go source for ``declarations``.

    The header comes first, followed by one block per declaration in the
    given order. The text always ends with exactly one newline.
    """
    env = env or setup_jinja_env()
    generated_types = resolve_import_conflicts(
        [build_mirror_type(decl, field_policy) for decl in declarations]
    )

    parts = [render_file_header(package_name, command, import_specs(generated_types), env)]
    for generated in generated_types:
        logger.debug(
            f"Emitting {generated.mirror_name} with {len(generated.fields)} field(s)"
        )
        parts.append(emit_type_declaration(generated, env))

    code = "".join(parts).rstrip("\n") + "\n"
    return code, generated_types


def generate_marshal_code(
    config: GeneratorConfigSchema,
    command: str = GeneratedNames.TOOL_NAME,
    package: Optional[GoPackage] = None,
) -> GenerationResult:
    """
    Run one generation pass and return its result without writing anything.

    Args:
        config: Validated configuration
        command: Command line recorded in the generated-code banner
        package: Already introspected package; read from ``config.directory`` if None

    Raises:
        JsonSnakeError: Any failure other than formatting, which is reported
            as a warning on the result.
    """
    if package is None:
        package = introspect_package(config.directory, resolve_build_context(config))

    declarations = select_declarations(package, config.type_names)
    code, generated_types = render_generated_file(
        package.name, declarations, config.field_policy, command
    )

    result = GenerationResult(
        code=code,
        type_names=[decl.name for decl in declarations],
        package_name=package.name,
        output_path=str(resolve_output_path(config)),
    )
    for generated in generated_types:
        result.skipped_fields.extend(generated.skipped)

    if config.format_output:
        try:
            result.code = format_go_code_using_gofmt(
                code, config.gofmt_path, config.format_timeout
            )
            result.is_formatted = True
        except FormattingError as e:
            logger.warning(f"Could not format generated code: {e.message}")
            logger.warning("Writing the unformatted code; compile it to see the problem")
            result.add_warning(f"Output is not gofmt-formatted: {e.message}")
    else:
        logger.debug("Formatting disabled, keeping the rendered code as is")

    result.code_lines = len(result.code.splitlines())
    return result


def write_generated_file(result: GenerationResult) -> Path:
    """
    Write the generated code to ``result.output_path``.

    Raises:
        OutputWriteError: If the directory or file cannot be written.
    """
    output_path = Path(result.output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8", newline="\n") as f:
            f.write(result.code)
    except OSError as e:
        raise OutputWriteError(f"Writing output failed: {e}", path=str(output_path)) from e

    logger.debug(f"Wrote {result.code_lines} lines to {output_path}")
    return output_path
