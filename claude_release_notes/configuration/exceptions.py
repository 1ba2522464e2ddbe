"""Contains exceptions raised when loading application configuration."""

from pathlib import Path


class ConfigurationFileError(Exception):
    """Raised when a configuration file cannot be loaded or validated."""

    def __init__(self, path: Path, reason: str) -> None:
        """Initializes the exception with the offending file and the reason."""
        super().__init__(f"Invalid configuration file {path}: {reason}")
        self.path = path
        self.reason = reason
