"""Extract the release notes body from generator output."""

import re

import structlog

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

ANY_H2_HEADER_PATTERN = re.compile(r"^##\s+", re.MULTILINE)
"""Pattern matching any markdown level-2 header at the start of a line."""


def build_version_header_pattern(version: str) -> re.Pattern[str]:
    """Compile a pattern matching a level-2 header that names ``version`` literally."""
    return re.compile(rf"^##\s+{re.escape(version)}\b", re.MULTILINE)


def extract_release_notes(text: str, version: str) -> str:
    """Drop any conversational preamble in front of the release notes.

    The notes are assumed to start at a markdown level-2 header. A header
    naming the exact version is preferred; otherwise the first level-2 header
    of any kind is used. Text without such a header is returned unchanged.

    Args:
        text: Output of the generator.
        version: The version being released.

    Returns:
        ``text`` from the chosen header to the end, or ``text`` itself.
    """
    match = build_version_header_pattern(version).search(text)
    if match:
        return text[match.start() :]

    match = ANY_H2_HEADER_PATTERN.search(text)
    if match:
        logger.debug("No header for version found, using first level-2 header", version=version)
        return text[match.start() :]

    return text
