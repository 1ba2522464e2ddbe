"""Custom exceptions for the release notes module."""

from ..utils.constants import GENERATOR_NOT_FOUND_MESSAGE


class ReleaseNotesError(Exception):
    """Base exception for release notes generation errors."""

    pass


class GeneratorProcessError(ReleaseNotesError):
    """Raised when the generator process exits with a non-zero status."""

    def __init__(self, returncode: int) -> None:
        """Initializes the exception with the exit status of the process."""
        super().__init__(f"Generator process exited with status {returncode}")
        self.returncode = returncode


class GeneratorNotFoundError(ReleaseNotesError):
    """Raised when the generator executable cannot be run."""

    def __init__(self, executable_path: str) -> None:
        """Initializes the exception with the executable that could not be verified."""
        super().__init__(GENERATOR_NOT_FOUND_MESSAGE)
        self.executable_path = executable_path
