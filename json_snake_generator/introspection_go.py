"""
Go package introspection.

Scans the Go files of a single package directory and extracts its struct
type declarations: names, fields in declaration order, declared type
spellings and raw tag strings. Files are parsed with the tree-sitter Go
grammar; type spellings are the exact source text of the type nodes.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from .build_constraints import BuildContext
from .constants import GoSource
from .domain.models import FieldDeclaration, TypeDeclaration
from .domain.tags import unquote_string_literal
from .domain.type_spelling import default_package_name
from .exceptions import SourceReadError, TagSyntaxError


logger = logging.getLogger(__name__)

GO_LANGUAGE = Language(tree_sitter_go.language())


# --- Data Structures for Introspection Results ---
@dataclass
class GoFile:
    """Declarations found in one Go source file."""
    path: str
    package_name: str
    imports: List[Tuple[str, str]] = field(default_factory=list)  # (qualifier, import path)
    declarations: List[TypeDeclaration] = field(default_factory=list)


@dataclass
class GoPackage:
    """All struct declarations of a package directory, in file then source order."""
    name: str
    directory: str
    files: List[str] = field(default_factory=list)
    declarations: List[TypeDeclaration] = field(default_factory=list)

    def find(self, type_name: str) -> List[TypeDeclaration]:
        """Return every struct declaration named ``type_name``."""
        return [decl for decl in self.declarations if decl.name == type_name]


# --- Parser ---
class GoSourceParser:
    """Extracts the package clause, imports and struct declarations of one Go file."""

    def __init__(self):
        self.parser = Parser(language=GO_LANGUAGE)

    def parse(self, source: bytes, path: str) -> GoFile:
        tree = self.parser.parse(source)
        root = tree.root_node
        if root.has_error:
            error_node = _find_error(root)
            line = _line(error_node) if error_node is not None else None
            raise SourceReadError("Syntax error in Go source", path=path, line=line)

        package_name = None
        imports: List[Tuple[str, str]] = []
        type_nodes: List[Node] = []
        # Only top-level children: types declared inside function bodies are local
        for child in root.named_children:
            if child.type == "package_clause":
                package_name = self._package_name(child, source)
            elif child.type == "import_declaration":
                imports.extend(self._imports(child, source, path))
            elif child.type == "type_declaration":
                type_nodes.append(child)

        if package_name is None:
            raise SourceReadError("Missing package clause", path=path)

        go_file = GoFile(path=path, package_name=package_name, imports=imports)
        for type_node in type_nodes:
            for spec in type_node.named_children:
                # type_alias children never declare a new struct
                if spec.type != "type_spec":
                    continue
                decl = self._struct_declaration(spec, source, path, tuple(imports))
                if decl is not None:
                    go_file.declarations.append(decl)
        return go_file

    # --- Package clause and imports ---
    @staticmethod
    def _package_name(node: Node, source: bytes) -> Optional[str]:
        for child in node.named_children:
            if child.type == "package_identifier":
                return _text(child, source)
        return None

    def _imports(self, node: Node, source: bytes, path: str) -> List[Tuple[str, str]]:
        specs = []
        for child in node.named_children:
            if child.type == "import_spec":
                specs.append(child)
            elif child.type == "import_spec_list":
                specs.extend(spec for spec in child.named_children if spec.type == "import_spec")

        imports = []
        for spec in specs:
            name_node = spec.child_by_field_name("name")
            import_path = self._decode_literal(spec.child_by_field_name("path"), source, path)
            if name_node is not None and name_node.type in ("dot", "blank_identifier"):
                continue
            qualifier = _text(name_node, source) if name_node is not None else None
            imports.append((qualifier or default_package_name(import_path), import_path))
        return imports

    # --- Type declarations ---
    def _struct_declaration(
        self, spec: Node, source: bytes, path: str, imports: Tuple[Tuple[str, str], ...]
    ) -> Optional[TypeDeclaration]:
        type_node = spec.child_by_field_name("type")
        if type_node is None or type_node.type != "struct_type":
            return None

        name_node = spec.child_by_field_name("name")
        params_node = spec.child_by_field_name("type_parameters")
        fields = []
        for body in type_node.named_children:
            if body.type != "field_declaration_list":
                continue
            for field_node in body.named_children:
                if field_node.type == "field_declaration":
                    fields.extend(self._fields(field_node, source, path))

        return TypeDeclaration(
            name=_text(name_node, source),
            fields=tuple(fields),
            type_params=_text(params_node, source) if params_node is not None else None,
            source_file=path,
            line=_line(name_node),
            imports=imports,
        )

    def _fields(self, node: Node, source: bytes, path: str) -> List[FieldDeclaration]:
        type_node = node.child_by_field_name("type")
        tag_node = node.child_by_field_name("tag")
        raw_tag = self._decode_literal(tag_node, source, path) if tag_node is not None else None
        declared_type = _text(type_node, source)

        names = node.children_by_field_name("name")
        if names:
            return [
                FieldDeclaration(_text(name, source), declared_type, raw_tag) for name in names
            ]

        if any(child.type == "*" for child in node.children):
            declared_type = "*" + declared_type
        return [
            FieldDeclaration(
                _embedded_name(type_node, source), declared_type, raw_tag, embedded=True
            )
        ]

    @staticmethod
    def _decode_literal(node: Node, source: bytes, path: str) -> str:
        text = _text(node, source)
        if node.type == "raw_string_literal":
            return text[1:-1].replace("\r", "")
        try:
            return unquote_string_literal(text)
        except TagSyntaxError as e:
            raise SourceReadError(
                f"Invalid string literal {text}: {e.message}", path=path, line=_line(node)
            ) from e


# --- Helper Functions ---
def _text(node: Node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8")


def _line(node: Node) -> int:
    return node.start_point[0] + 1


def _encode(source: str) -> bytes:
    return source.lstrip("\ufeff").encode("utf-8")


def _embedded_name(node: Node, source: bytes) -> str:
    # Base, pkg.Base and Base[T] all embed under the name "Base"
    if node.type == "generic_type":
        node = node.child_by_field_name("type")
    if node.type == "qualified_type":
        node = node.child_by_field_name("name")
    return _text(node, source)


def _find_error(node: Node) -> Optional[Node]:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _find_error(child)
            if found is not None:
                return found
    return None


# --- Main Introspection Functions ---
def parse_go_source(source: str, path: str = "<source>") -> GoFile:
    """Parse the text of one Go file."""
    return GoSourceParser().parse(_encode(source), path)


def list_go_files(directory: Path, build_context: BuildContext) -> List[Path]:
    """Return the package's non-test Go files whose names match the build target, sorted by name."""
    files = []
    for path in sorted(directory.iterdir()):
        name = path.name
        if not path.is_file() or not name.endswith(GoSource.FILE_SUFFIX):
            continue
        if name.endswith(GoSource.TEST_FILE_SUFFIX) or name.startswith(GoSource.IGNORED_PREFIXES):
            logger.debug(f"Skipping {path}")
            continue
        if not build_context.match_file_name(name):
            logger.debug(
                f"Skipping {path}: not built for {build_context.goos}/{build_context.goarch}"
            )
            continue
        files.append(path)
    return files


def introspect_package(
    directory: str, build_context: Optional[BuildContext] = None
) -> GoPackage:
    """
    Extract every struct declaration of the Go package in ``directory``.

    Only files that take part in a build for ``build_context`` are scanned;
    without one the host platform is the target.

    Raises:
        SourceReadError: If the directory is missing, holds no buildable Go
            files, mixes package clauses, or a file cannot be read or parsed.
    """
    dir_path = Path(directory)
    if not dir_path.exists():
        raise SourceReadError("Cannot process directory: not found", path=str(dir_path))
    if not dir_path.is_dir():
        raise SourceReadError("Cannot process directory: not a directory", path=str(dir_path))

    if build_context is None:
        build_context = BuildContext.for_target()

    logger.info(
        f"Scanning Go package in '{dir_path}' for {build_context.goos}/{build_context.goarch}..."
    )
    source_parser = GoSourceParser()
    package: Optional[GoPackage] = None
    first_file = None
    for file_path in list_go_files(dir_path, build_context):
        try:
            source = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(f"Cannot read Go file: {e}", path=str(file_path)) from e

        if not build_context.match_source(source, str(file_path)):
            logger.debug(f"Skipping {file_path}: excluded by build constraint")
            continue

        go_file = source_parser.parse(_encode(source), str(file_path))
        if package is None:
            package = GoPackage(name=go_file.package_name, directory=str(dir_path))
            first_file = file_path.name
        elif go_file.package_name != package.name:
            raise SourceReadError(
                f"Found packages {package.name} ({first_file}) and "
                f"{go_file.package_name} ({file_path.name})",
                path=str(dir_path),
            )

        package.files.append(str(file_path))
        package.declarations.extend(go_file.declarations)
        logger.debug(
            f"{file_path.name}: {len(go_file.declarations)} struct declaration(s)"
        )

    if package is None:
        raise SourceReadError("No buildable Go source files", path=str(dir_path))

    logger.info(
        f"Found {len(package.declarations)} struct declaration(s) in package '{package.name}'"
    )
    return package
