"""
Custom exception hierarchy for the JSON snake_case generator.

Every failure of a generation pass is raised as one of these exceptions and
propagated to the caller; only the command line entry point turns them into
exit codes. Each error carries context and recovery suggestions.
"""

from typing import Dict, Any, Optional, List


class JsonSnakeError(Exception):
    """
    Base exception for all generator errors.

    Provides rich context and error recovery guidance.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None
    ):
        """
        Initialize the exception with context and recovery suggestions.

        Args:
            message: Human-readable error message
            context: Additional context about where/why the error occurred
            suggestions: List of potential solutions or next steps
            error_code: Unique error code for programmatic handling
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        self.error_code = error_code

    def __str__(self) -> str:
        """Return formatted error message with context."""
        lines = [self.message]

        if self.error_code:
            lines.append(f"Error Code: {self.error_code}")

        if self.context:
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestions:
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  • {suggestion}")

        return "\n".join(lines)


class ConfigurationError(JsonSnakeError):
    """Raised when configuration or command line arguments are invalid."""

    def __init__(self, message: str, config_file: str = None, **kwargs):
        context = kwargs.get('context', {})
        if config_file:
            context['config_file'] = config_file

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Pass the type names with -t/--type, e.g. -t User,Account",
                "Pass a single package directory, not a list of files",
                "Check the configuration file syntax",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CONFIG_ERROR"
        )


class SourceReadError(JsonSnakeError):
    """Raised when Go sources cannot be read or scanned."""

    def __init__(self, message: str, path: str = None, line: int = None, **kwargs):
        context = kwargs.get('context', {})
        if path:
            context['path'] = path
        if line:
            context['line'] = line

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check that the directory exists and contains Go files",
                "Run 'go build' on the package to find syntax errors",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="SOURCE_READ_ERROR"
        )


class TypeNotFoundError(JsonSnakeError):
    """Raised when a requested type is not a struct declared in the package."""

    def __init__(self, message: str, type_name: str = None, package: str = None, **kwargs):
        context = kwargs.get('context', {})
        if type_name:
            context['type_name'] = type_name
        if package:
            context['package'] = package

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the spelling of the type name (names are case sensitive)",
                "Only struct types can be generated",
                "Make sure the file declaring the type is not a _test.go file",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="TYPE_NOT_FOUND"
        )


class DuplicateDeclarationError(JsonSnakeError):
    """Raised when a requested type name is declared more than once."""

    def __init__(self, message: str, type_name: str = None, locations: List[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if type_name:
            context['type_name'] = type_name
        if locations:
            context['locations'] = ", ".join(locations)

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Remove or rename one of the declarations",
                "Check for files excluded from the build by constraints",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="DUPLICATE_DECLARATION"
        )


class TagSyntaxError(JsonSnakeError):
    """Raised when a struct tag does not follow the key:"value" convention."""

    def __init__(self, message: str, tag: str = None, offset: int = None, **kwargs):
        context = kwargs.get('context', {})
        if tag is not None:
            context['tag'] = tag
        if offset is not None:
            context['offset'] = offset

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                'Write tags as space separated key:"value" pairs',
                "Run 'go vet' to check struct tags",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="TAG_SYNTAX_ERROR"
        )


class CodeGenerationError(JsonSnakeError):
    """Raised when code emission for a declaration fails."""

    def __init__(self, message: str, type_name: str = None, field_name: str = None, **kwargs):
        context = kwargs.get('context', {})
        if type_name:
            context['type_name'] = type_name
        if field_name:
            context['field_name'] = field_name

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the struct declaration for unsupported constructs",
                "Generic struct types are not supported",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CODE_GENERATION_ERROR"
        )


class FormattingError(JsonSnakeError):
    """Raised when the external formatter rejects or cannot process the output."""

    def __init__(self, message: str, formatter: str = None, **kwargs):
        context = kwargs.get('context', {})
        if formatter:
            context['formatter'] = formatter

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Make sure gofmt is installed and on PATH",
                "Compile the package to analyze the generated code",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="FORMATTING_ERROR"
        )


class OutputWriteError(JsonSnakeError):
    """Raised when the generated file cannot be written."""

    def __init__(self, message: str, path: str = None, **kwargs):
        context = kwargs.get('context', {})
        if path:
            context['path'] = path

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check write permissions of the output directory",
                "Check that the output path is not a directory",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="OUTPUT_WRITE_ERROR"
        )
