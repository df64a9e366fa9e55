"""
Centralized constants for the JSON snake_case generator.

This module holds the naming conventions of the generated Go code, the
initialism table used by the case converter and the configuration defaults,
so contributors can adjust behavior in one place.
"""

from typing import FrozenSet


# =============================================================================
# CORE CONFIGURATION
# =============================================================================

class DefaultConfig:
    """Default configuration values."""

    DIRECTORY = "."
    FIELD_POLICY = "unqualified"
    FORMAT_OUTPUT = True
    GOFMT_PATH = "gofmt"
    FORMAT_TIMEOUT = 30.0


class FieldPolicy:
    """Policies deciding which field type spellings reach the mirror type."""

    # Keep only fields whose type needs no package qualification
    UNQUALIFIED = "unqualified"
    # Keep every exported field with its full type spelling
    ALL = "all"

    CHOICES = [UNQUALIFIED, ALL]


# =============================================================================
# GENERATED CODE NAMING
# =============================================================================

class GeneratedNames:
    """Naming conventions of the emitted Go declarations."""

    TOOL_NAME = "json-snake"
    MIRROR_SUFFIX = "JSON"
    CONSTRUCTOR_PREFIX = "New"
    OUTPUT_SUFFIX = "_json.go"
    JSON_IMPORT = "encoding/json"


class TagSyntax:
    """Struct tag conventions."""

    # Annotation key controlling a field's serialized name
    WIRE_NAME_KEY = "json"
    # Separator between the wire name and its options, e.g. ",omitempty"
    OPTION_SEPARATOR = ","


# =============================================================================
# CASE CONVERSION
# =============================================================================

# Multi-letter abbreviations kept as single words during snake_case conversion.
# Taken from the golint list of common initialisms.
COMMON_INITIALISMS: FrozenSet[str] = frozenset({
    "API",
    "ASCII",
    "CPU",
    "CSS",
    "DNS",
    "EOF",
    "GUID",
    "HTML",
    "HTTP",
    "HTTPS",
    "ID",
    "IP",
    "JSON",
    "LHS",
    "QPS",
    "RAM",
    "RHS",
    "RPC",
    "SLA",
    "SMTP",
    "SQL",
    "SSH",
    "TCP",
    "TLS",
    "TTL",
    "UDP",
    "UI",
    "UID",
    "UUID",
    "URI",
    "URL",
    "UTF8",
    "VM",
    "XML",
    "XSRF",
    "XSS",
})

MIN_INITIALISM_LENGTH = 2
MAX_INITIALISM_LENGTH = 5


# =============================================================================
# GO SOURCE DISCOVERY
# =============================================================================

class GoSource:
    """File selection rules for package scanning."""

    FILE_SUFFIX = ".go"
    TEST_FILE_SUFFIX = "_test.go"
    IGNORED_PREFIXES = ("_", ".")

    # Reserved words that cannot name a type
    KEYWORDS = frozenset({
        "break", "case", "chan", "const", "continue", "default", "defer",
        "else", "fallthrough", "for", "func", "go", "goto", "if", "import",
        "interface", "map", "package", "range", "return", "select", "struct",
        "switch", "type", "var",
    })


# =============================================================================
# BUILD CONSTRAINTS
# =============================================================================

class GoPlatform:
    """Target platform names understood by file name suffixes and build tags."""

    KNOWN_OS = frozenset({
        "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos",
        "ios", "js", "linux", "nacl", "netbsd", "openbsd", "plan9", "solaris",
        "wasip1", "windows", "zos",
    })

    # Operating systems satisfying the "unix" tag
    UNIX_OS = frozenset({
        "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos",
        "ios", "linux", "netbsd", "openbsd", "solaris",
    })

    KNOWN_ARCH = frozenset({
        "386", "amd64", "amd64p32", "arm", "armbe", "arm64", "arm64be",
        "loong64", "mips", "mipsle", "mips64", "mips64le", "mips64p32",
        "mips64p32le", "ppc", "ppc64", "ppc64le", "riscv", "riscv64", "s390",
        "s390x", "sparc", "sparc64", "wasm",
    })

    # GOOS values that also satisfy another OS tag
    IMPLIED_OS = {
        "android": "linux",
        "illumos": "solaris",
        "ios": "darwin",
    }

    # platform.machine() spellings mapped to GOARCH
    HOST_ARCH = {
        "x86_64": "amd64",
        "amd64": "amd64",
        "aarch64": "arm64",
        "arm64": "arm64",
        "i386": "386",
        "i686": "386",
        "x86": "386",
        "armv6l": "arm",
        "armv7l": "arm",
        "ppc64le": "ppc64le",
        "riscv64": "riscv64",
        "s390x": "s390x",
    }

    # Tags that always hold for the gc toolchain
    TOOLCHAIN_TAGS = frozenset({"gc"})
    RELEASE_TAG_PREFIX = "go1."
