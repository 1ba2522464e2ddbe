"""Check that the Claude Code CLI can be used before generating notes."""

import subprocess

import structlog

from .exceptions import GeneratorNotFoundError

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

VERSION_FLAGS = ("-v", "--version")


def verify_executable(executable_path: str) -> str:
    """Return the version reported by the CLI.

    ``-v`` is tried first and ``--version`` second.

    Raises:
        GeneratorNotFoundError: If neither invocation succeeds.
    """
    for flag in VERSION_FLAGS:
        try:
            result = subprocess.run([executable_path, flag], capture_output=True, text=True, check=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            logger.debug("Claude Code CLI version check failed", executable=executable_path, flag=flag, error=str(exc))
            continue
        version = result.stdout.strip()
        logger.info("Verified Claude Code CLI", executable=executable_path, version=version)
        return version

    logger.error("Failed to verify Claude Code CLI installation", executable=executable_path)
    raise GeneratorNotFoundError(executable_path)


def prepare(executable_path: str, anthropic_api_key: str | None) -> str:
    """Verify the CLI is available and warn when no API key is configured.

    Args:
        executable_path: Path or command name of the CLI.
        anthropic_api_key: The configured API key, if any.

    Returns:
        The version reported by the CLI.

    Raises:
        GeneratorNotFoundError: If the CLI cannot be run.
    """
    if not anthropic_api_key:
        logger.warning(
            "ANTHROPIC_API_KEY environment variable is not set, make sure the API key is available when running Claude Code CLI"
        )
    else:
        logger.info("ANTHROPIC_API_KEY environment variable is set")
    return verify_executable(executable_path)
