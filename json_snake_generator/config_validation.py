import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from .build_constraints import BuildContext
from .constants import DefaultConfig, GoPlatform
from .domain.naming import NamingConventions, is_go_identifier
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


# --- Pydantic Model for Configuration Schema ---
class GeneratorConfigSchema(BaseModel):
    """Pydantic schema defining the expected structure and types for the configuration."""

    type_names: List[str] = Field(
        ...,
        min_length=1,
        description="Struct type names to generate, in a list or as a comma-separated string.",
    )
    directory: str = Field(
        DefaultConfig.DIRECTORY,
        min_length=1,
        description="Directory of the Go package declaring the types.",
    )
    output: Optional[str] = Field(
        default=None,
        description="Output file; defaults to <directory>/<first type>_json.go.",
    )
    field_policy: Literal["unqualified", "all"] = Field(
        default=DefaultConfig.FIELD_POLICY,
        description="'unqualified' mirrors only fields whose type needs no package; 'all' mirrors every exported field.",
    )
    format_output: bool = Field(
        default=DefaultConfig.FORMAT_OUTPUT,
        description="Whether to canonicalize the generated code with gofmt.",
    )
    gofmt_path: str = Field(
        default=DefaultConfig.GOFMT_PATH,
        min_length=1,
        description="gofmt executable name or path.",
    )
    format_timeout: float = Field(
        default=DefaultConfig.FORMAT_TIMEOUT,
        gt=0,
        description="Seconds to wait for gofmt.",
    )
    goos: Optional[str] = Field(
        default=None,
        description="Target operating system for build constraints; defaults to $GOOS or the host.",
    )
    goarch: Optional[str] = Field(
        default=None,
        description="Target architecture for build constraints; defaults to $GOARCH or the host.",
    )
    build_tags: List[str] = Field(
        default_factory=list,
        description="Extra build tags satisfied during file selection, in a list or comma-separated.",
    )

    def __getitem__(self, key: str) -> Any:
        """Allow dictionary-style access."""
        return getattr(self, key)

    # --- Custom Field Validators using @field_validator ---

    @field_validator("type_names", mode="before")
    @classmethod
    def split_type_names(cls, v: Any) -> List[str]:
        """Accept "A,B" or ["A", "B"]; ensure items are Go identifiers, drop repeats."""
        if isinstance(v, str):
            v = v.split(",")
        if not isinstance(v, (list, tuple)):
            raise ValueError("type_names must be a list or a comma-separated string.")
        names: List[str] = []
        for index, item in enumerate(v):
            if not isinstance(item, str):
                raise ValueError(
                    f"Item at index {index} must be a string, found: {type(item).__name__}"
                )
            name = item.strip()
            if not name:
                raise ValueError(f"Item at index {index} cannot be empty or just whitespace.")
            if not is_go_identifier(name):
                raise ValueError(f"'{name}' is not a valid Go identifier.")
            if name not in names:
                names.append(name)
        return names

    @field_validator("goos")
    @classmethod
    def check_goos(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in GoPlatform.KNOWN_OS:
            raise ValueError(f"Unknown GOOS '{v}'.")
        return v

    @field_validator("goarch")
    @classmethod
    def check_goarch(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in GoPlatform.KNOWN_ARCH:
            raise ValueError(f"Unknown GOARCH '{v}'.")
        return v

    @field_validator("build_tags", mode="before")
    @classmethod
    def split_build_tags(cls, v: Any) -> List[str]:
        """Accept "a,b" or ["a", "b"]; blank items are dropped."""
        if isinstance(v, str):
            v = v.split(",")
        if not isinstance(v, (list, tuple)):
            raise ValueError("build_tags must be a list or a comma-separated string.")
        tags = [str(item).strip() for item in v]
        return [tag for tag in tags if tag]

    model_config = ConfigDict(
        extra="ignore",  # Allow and ignore extra fields from input dict
        validate_assignment=True,
    )


# --- Validation Function (Internal) ---
def _validate_and_parse_config(
    config_dict: Dict[str, Any], config_file: Optional[str] = None
) -> GeneratorConfigSchema:
    """
    Validates a raw configuration dictionary against the Pydantic schema.

    Raises:
        ConfigurationError: Listing every invalid location with its message.
    """
    try:
        validated_config = GeneratorConfigSchema.model_validate(config_dict)
        logger.debug("Configuration dictionary parsed and validated successfully.")
        return validated_config
    except ValidationError as e:
        problems = []
        suggestions = []
        for error in e.errors():
            loc_parts = [str(loc_item) for loc_item in error.get("loc", ())]
            loc_str = " -> ".join(loc_parts) if loc_parts else "Top Level"
            problems.append(f"{loc_str}: {error.get('msg', 'Unknown error')}")

            if "type_names" in loc_parts:
                suggestions.append("Pass the type names with -t/--type, e.g. -t User,Account")
            elif "field_policy" in loc_parts:
                suggestions.append("Allowed field policies are: 'unqualified', 'all'")
            elif "goos" in loc_parts or "goarch" in loc_parts:
                suggestions.append("Use a GOOS/GOARCH pair listed by 'go tool dist list', e.g. linux/amd64")

        raise ConfigurationError(
            "Configuration validation failed: " + "; ".join(problems),
            config_file=config_file,
            context={"errors": len(problems)},
            suggestions=suggestions or None,
        ) from e


def _read_yaml_config(config_path: str) -> Dict[str, Any]:
    config_file = Path(config_path)
    if not config_file.is_file():
        raise ConfigurationError("Config file not found", config_file=config_path)
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML file: {e}", config_file=config_path) from e
    except OSError as e:
        raise ConfigurationError(f"Error reading config file: {e}", config_file=config_path) from e

    if yaml_config is None:
        return {}
    if not isinstance(yaml_config, dict):
        raise ConfigurationError(
            "Config file content must be a mapping", config_file=config_path
        )
    logger.debug(f"Loaded configuration from {config_path}")
    return yaml_config


# --- Main Configuration Loading Function ---
def load_config(
    config_path: Optional[str], cli_args: argparse.Namespace
) -> GeneratorConfigSchema:
    """
    Loads configuration from YAML file, merges with CLI arguments,
    validates the result, and returns a validated Pydantic model instance.

    Raises:
        ConfigurationError: If the file cannot be read or the merged
            configuration is invalid.
    """
    raw_config: Dict[str, Any] = {}

    # 1. Load from YAML file if path is provided
    if config_path:
        raw_config.update(_read_yaml_config(config_path))

    # 2. Override with CLI arguments (only those explicitly provided)
    overridden_keys = set()
    for key, value in vars(cli_args).items():
        if value is not None and key in GeneratorConfigSchema.model_fields:
            raw_config[key] = value
            overridden_keys.add(key)
    if overridden_keys:
        logger.debug(f"Overridden config keys from CLI arguments: {sorted(overridden_keys)}")

    # 3. Validate the combined configuration dictionary using Pydantic
    validated_config = _validate_and_parse_config(raw_config, config_file=config_path)

    # 4. Only a package directory is accepted as the source argument
    if Path(validated_config.directory).is_file():
        raise ConfigurationError(
            f"Not supported: '{validated_config.directory}' is a file; pass the package directory",
            config_file=config_path,
        )

    return validated_config


def resolve_output_path(config: GeneratorConfigSchema) -> Path:
    """Return the output file, defaulting to ``<directory>/<first type lower-cased>_json.go``."""
    if config.output:
        return Path(config.output)
    return Path(config.directory) / NamingConventions.output_file_name(config.type_names[0])


def resolve_build_context(config: GeneratorConfigSchema) -> BuildContext:
    """Return the build target, filling an unset GOOS or GOARCH from the host."""
    return BuildContext.for_target(config.goos, config.goarch, config.build_tags)
