"""Utility modules for shared functionality."""

from .constants import (
    DEFAULT_PROMPT_TEMPLATE,
    ERROR_FALLBACK_NOTES,
    NO_NOTES_FALLBACK,
)
from .shell import EscapingMode, escape_for_shell, escape_text

__all__ = [
    "DEFAULT_PROMPT_TEMPLATE",
    "ERROR_FALLBACK_NOTES",
    "NO_NOTES_FALLBACK",
    "EscapingMode",
    "escape_for_shell",
    "escape_text",
]
