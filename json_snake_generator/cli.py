import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from json_snake_generator.codegen_main import generate_marshal_code, write_generated_file
from json_snake_generator.config_validation import load_config
from json_snake_generator.constants import FieldPolicy, GeneratedNames
from json_snake_generator.exceptions import ConfigurationError, JsonSnakeError

# Import colored logging
from json_snake_generator.colored_logging import (
    setup_colored_logging,
    get_colored_logger,
    log_success,
    log_progress,
    log_highlight,
    log_section
)

# Note: Colored logging will be configured after parsing args
logger = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=GeneratedNames.TOOL_NAME,
        description=(
            "Generate <Type>JSON mirror types whose json tags are the snake_case "
            "form of the field names, plus MarshalJSON methods using them."
        ),
    )
    parser.add_argument(
        "-t",
        "-type",
        "--type",
        dest="type_names",
        help="Comma-separated list of struct type names; must be set here or in the config file.",
    )
    parser.add_argument(
        "-o",
        "-output",
        "--output",
        dest="output",
        help="Output file name; default <directory>/<type>_json.go.",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to a YAML configuration file.",
    )
    parser.add_argument(
        "--field-policy",
        choices=FieldPolicy.CHOICES,
        help="Which exported fields to mirror (default: unqualified).",
    )
    parser.add_argument(
        "--gofmt",
        dest="gofmt_path",
        help="gofmt executable used to format the output.",
    )
    parser.add_argument(
        "--goos",
        help="Target operating system for file selection (default: $GOOS or the host).",
    )
    parser.add_argument(
        "--goarch",
        help="Target architecture for file selection (default: $GOARCH or the host).",
    )
    parser.add_argument(
        "--tags",
        dest="build_tags",
        help="Comma-separated list of extra build tags to satisfy.",
    )
    parser.add_argument(
        "--no-format",
        dest="format_output",
        action="store_const",
        const=False,
        default=None,
        help="Write the generated code without running gofmt.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose DEBUG logging for the generator tool.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output (useful for CI/CD environments).",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        help="Directory of the Go package (default: current directory).",
    )
    return parser


def _apply_package_directory(args: argparse.Namespace) -> None:
    """Turn the positional arguments into ``args.directory``; only a single directory is accepted."""
    args.directory = None
    if not args.paths:
        return
    if len(args.paths) > 1 or Path(args.paths[0]).is_file():
        raise ConfigurationError(
            "Not supported: file-list arguments are not supported",
            suggestions=["Pass a single package directory, e.g. json-snake -t User ./models"],
        )
    args.directory = args.paths[0]


def main(argv: Optional[List[str]] = None):
    # --- Argument Parsing ---
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)

    # --- Logging Setup ---
    use_colors = not args.no_color
    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_colored_logging(level=log_level, use_colors=use_colors)

    global logger
    logger = get_colored_logger(__name__)

    if args.verbose:
        logger.debug("Verbose mode enabled. DEBUG level logging activated.")

    # --- Main Execution Pipeline ---
    try:
        # 1. Load Configuration
        _apply_package_directory(args)
        config = load_config(args.config, args)
        logger.debug(f"Effective configuration loaded: {config}")

        # 2. Generate code for the requested types
        log_section(logger, "Code Generation")
        log_progress(logger, f"Generating JSON mirrors for {', '.join(config.type_names)}...")
        command = " ".join([GeneratedNames.TOOL_NAME] + list(argv))
        result = generate_marshal_code(config, command=command)

        # 3. Write the output file
        output_path = write_generated_file(result)

        # --- Summary ---
        for skipped in result.skipped_fields:
            log_highlight(logger, f"Skipped {skipped}")
        for warning in result.warnings:
            logger.warning(warning)
        log_success(logger, f"Wrote {output_path} ({result.code_lines} lines)")

    # --- Error Handling ---
    except ConfigurationError as e:
        logger.error(f"Configuration Error: {e}", exc_info=args.verbose)
        parser.print_usage(sys.stderr)
        sys.exit(2)
    except JsonSnakeError as e:
        logger.error(f"{type(e).__name__}: {e}", exc_info=args.verbose)
        sys.exit(1)
    except Exception as e:
        # Catch any other unexpected exceptions
        logger.error(
            f"An unexpected error occurred during generation: {e}", exc_info=True
        )  # Always show traceback for unexpected
        sys.exit(1)


# --- Script Entry Point ---
if __name__ == "__main__":
    main()
