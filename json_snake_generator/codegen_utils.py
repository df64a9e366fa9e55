import logging
import subprocess

from .constants import DefaultConfig
from .exceptions import FormattingError


logger = logging.getLogger(__name__)


def format_go_code_using_gofmt(
    code_string: str,
    gofmt_path: str = DefaultConfig.GOFMT_PATH,
    timeout: float = DefaultConfig.FORMAT_TIMEOUT,
) -> str:
    """
    Formats the given Go code using gofmt.

    Raises:
        FormattingError: If gofmt is missing, times out or rejects the code.
    """
    try:
        completed = subprocess.run(
            [gofmt_path],
            input=code_string,
            capture_output=True,
            text=True,
            encoding="utf-8",
            timeout=timeout,
            check=False,
        )
    except OSError as e:
        raise FormattingError(f"Could not run gofmt: {e}", formatter=gofmt_path) from e
    except subprocess.TimeoutExpired as e:
        raise FormattingError(
            f"gofmt did not finish within {timeout} seconds", formatter=gofmt_path
        ) from e

    if completed.returncode != 0:
        raise FormattingError(
            f"gofmt rejected the generated code: {completed.stderr.strip()}",
            formatter=gofmt_path,
        )

    logger.debug("Formatted generated code using gofmt")
    return completed.stdout
