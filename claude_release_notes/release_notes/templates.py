"""Render the generator prompt from a template.

Templates are plain text with ``{{version}}``, ``{{date}}``, ``{{repoName}}``
and ``{{commits}}`` placeholders plus an optional region wrapped in
``{{#additionalContext}}`` / ``{{/additionalContext}}``. Rendering is purely
textual:

- Each placeholder is replaced at its first occurrence only.
- The conditional region is swapped for a fenced JSON block when additional
  context is supplied, and removed otherwise.
- Templates without a conditional region still receive the additional
  context, after the commits code block, before the ``IMPORTANT:``
  instructions, or at the very end.

Marker lookup uses ``str.find`` so scanning cost stays linear in the template
size. Substituted values are spliced in after all lookups are done, which
means text coming from commits or context is never scanned for markers.
"""

import json
from typing import Any

import structlog

from ..utils.constants import (
    ADDITIONAL_CONTEXT_CLOSE_TAG,
    ADDITIONAL_CONTEXT_HEADER,
    ADDITIONAL_CONTEXT_OPEN_TAG,
    CODE_FENCE,
    COMMITS_PLACEHOLDER,
    DATE_PLACEHOLDER,
    INSTRUCTIONS_MARKER,
    REPO_NAME_PLACEHOLDER,
    VERSION_PLACEHOLDER,
)
from .models import RenderContext

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

OPTIONAL_PLACEHOLDERS = (VERSION_PLACEHOLDER, DATE_PLACEHOLDER, REPO_NAME_PLACEHOLDER)


def format_additional_context(additional_context: Any) -> str:
    """Serialize additional context as indented JSON."""
    return json.dumps(additional_context, indent=2, ensure_ascii=False)


def build_additional_context_block(additional_context: Any) -> str:
    """Fenced block replacing a conditional region."""
    return f"{ADDITIONAL_CONTEXT_HEADER}\n\n{CODE_FENCE}json\n{format_additional_context(additional_context)}\n{CODE_FENCE}"


def remove_conditional_blocks(text: str) -> str:
    """Remove every complete additional context region from ``text``.

    Regions are matched left to right without overlapping. An opening tag with
    no closing tag after it is kept, together with everything that follows.
    """
    pieces: list[str] = []
    position = 0
    while True:
        block_start = text.find(ADDITIONAL_CONTEXT_OPEN_TAG, position)
        if block_start == -1:
            pieces.append(text[position:])
            break
        pieces.append(text[position:block_start])
        block_end = text.find(ADDITIONAL_CONTEXT_CLOSE_TAG, block_start + len(ADDITIONAL_CONTEXT_OPEN_TAG))
        if block_end == -1:
            pieces.append(text[block_start:])
            break
        position = block_end + len(ADDITIONAL_CONTEXT_CLOSE_TAG)
    return "".join(pieces)


def find_conditional_block(text: str) -> tuple[int, int] | None:
    """Return the ``(start, end)`` span of the first complete conditional region."""
    block_start = text.find(ADDITIONAL_CONTEXT_OPEN_TAG)
    if block_start == -1:
        return None
    block_end = text.find(ADDITIONAL_CONTEXT_CLOSE_TAG, block_start)
    if block_end == -1:
        return None
    return block_start, block_end + len(ADDITIONAL_CONTEXT_CLOSE_TAG)


def find_context_insertion_point(text: str) -> int:
    """Pick where additional context goes in a template without a conditional region.

    Tried in order: right after the code fence closing the commits block,
    right before the ``IMPORTANT:`` instructions, then the end of the text.
    """
    commits_position = text.find(COMMITS_PLACEHOLDER)
    if commits_position != -1:
        fence_position = text.find(CODE_FENCE, commits_position + len(COMMITS_PLACEHOLDER))
        if fence_position != -1:
            logger.info("Inserting additional context after the commits block", strategy="after_commits_block")
            return fence_position + len(CODE_FENCE)
        logger.info("Could not find the end of the commits block")

    instructions_position = text.find(INSTRUCTIONS_MARKER)
    if instructions_position != -1:
        logger.info("Inserting additional context before instructions", strategy="before_instructions")
        return instructions_position

    logger.info("Could not find suitable location for additional context, appending to the end", strategy="append")
    return len(text)


def _resolve_additional_context(template: str, ctx: RenderContext) -> tuple[str, int | None, str]:
    """Apply conditional region handling to the template.

    Returns:
        The template with regions resolved, the index at which the context
        block must be inserted (None when there is nothing to insert) and the
        block itself.
    """
    if not ctx.has_additional_context:
        return remove_conditional_blocks(template), None, ""

    span = find_conditional_block(template)
    if span is not None:
        start, end = span
        return template[:start] + template[end:], start, build_additional_context_block(ctx.additional_context)

    if ADDITIONAL_CONTEXT_OPEN_TAG in template:
        logger.warning("Additional context block is never closed, injecting context instead")
    else:
        logger.info("Custom template without additionalContext placeholder, injecting context")
    block = f"\n{build_additional_context_block(ctx.additional_context)}\n"
    return template, find_context_insertion_point(template), block


def render_prompt(template: str, ctx: RenderContext) -> str:
    """Render ``template`` against ``ctx``.

    Args:
        template: The prompt template.
        ctx: Values for the placeholders and the optional additional context.

    Returns:
        The prompt text.
    """
    body, context_position, context_block = _resolve_additional_context(template, ctx)

    values = {
        VERSION_PLACEHOLDER: ctx.version,
        DATE_PLACEHOLDER: ctx.date,
        REPO_NAME_PLACEHOLDER: ctx.repo_name,
        COMMITS_PLACEHOLDER: ctx.commits_json,
    }
    # (position, order, length replaced, replacement); the context block sorts
    # before a placeholder found at the same position.
    splices: list[tuple[int, int, int, str]] = []
    for placeholder, value in values.items():
        position = body.find(placeholder)
        if position != -1:
            splices.append((position, 1, len(placeholder), value))
    if context_position is not None:
        splices.append((context_position, 0, 0, context_block))
    splices.sort()

    pieces: list[str] = []
    cursor = 0
    for position, _, length, replacement in splices:
        pieces.append(body[cursor:position])
        pieces.append(replacement)
        cursor = position + length
    pieces.append(body[cursor:])
    return "".join(pieces)


def validate_template(template: str, has_additional_context: bool = False) -> list[str]:
    """Report placeholders a custom template does not use.

    Args:
        template: The custom prompt template.
        has_additional_context: Whether additional context is configured.

    Returns:
        The missing placeholders, ``{{commits}}`` first when it is missing.
    """
    missing: list[str] = []
    if COMMITS_PLACEHOLDER not in template:
        logger.warning("Custom prompt template is missing {{commits}} placeholder, commits will not be sent to the generator")
        missing.append(COMMITS_PLACEHOLDER)

    missing_optional = [placeholder for placeholder in OPTIONAL_PLACEHOLDERS if placeholder not in template]
    if missing_optional:
        logger.info("Custom prompt template does not use some placeholders", missing=missing_optional)
        missing.extend(missing_optional)

    if has_additional_context and ADDITIONAL_CONTEXT_OPEN_TAG not in template:
        logger.warning(
            "Additional context is configured but the custom prompt template has no "
            "{{#additionalContext}}...{{/additionalContext}} block, context will be injected automatically"
        )
    return missing
