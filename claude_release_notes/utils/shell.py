"""Contains utilities for escaping text before it is handed to a shell."""

from enum import Enum


class EscapingMode(str, Enum):
    """Enum for output escaping modes."""

    SHELL = "shell"
    NONE = "none"


def escape_for_shell(text: str) -> str:
    """Quote text so a POSIX shell reads it back as a single literal word.

    The text is wrapped in single quotes. Every embedded single quote closes
    the quoted section, adds an escaped quote and reopens it, so ``can't``
    becomes ``'can'\\''t'``. Nothing else needs escaping inside single quotes.

    Args:
        text: The text to quote.

    Returns:
        The quoted text, or ``''`` for empty input.
    """
    if not text:
        return "''"
    escaped = text.replace("'", "'\\''")
    return f"'{escaped}'"


def escape_text(text: str, mode: EscapingMode | str = EscapingMode.NONE) -> str:
    """Escape text according to the given escaping mode."""
    if EscapingMode(mode) is EscapingMode.SHELL:
        return escape_for_shell(text)
    return text
