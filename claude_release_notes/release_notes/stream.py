"""Decode the line-delimited JSON stream emitted by the Claude Code CLI."""

import json
from typing import Any

import structlog
from pydantic import ValidationError

from ..utils.constants import END_TURN_STOP_REASON, NO_NOTES_FALLBACK, RESULT_SUCCESS_SUBTYPE
from .models import AssistantMessage, FinalResult, StreamEvent, stream_event_adapter

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def decode_stream_event(line: str) -> StreamEvent | None:
    """Decode one line of stream output into an event.

    Lines that are not JSON, or JSON that does not look like a known event,
    are not events and yield None.
    """
    try:
        payload: Any = json.loads(line)
    except (ValueError, RecursionError):
        # Oversized numbers and deeply nested arrays are noise too.
        return None

    # Older CLI builds tagged some lines with ``role`` instead of ``type``.
    if isinstance(payload, dict) and "type" not in payload and "role" in payload:
        payload = {**payload, "type": payload["role"]}

    try:
        return stream_event_adapter.validate_python(payload)
    except ValidationError:
        return None


def parse_stream_events(raw_output: str) -> list[StreamEvent]:
    """Decode every non-blank line of ``raw_output``, dropping the ones that are not events."""
    events: list[StreamEvent] = []
    for line in raw_output.split("\n"):
        if not line.strip():
            continue
        event = decode_stream_event(line)
        if event is not None:
            events.append(event)
    return events


def find_final_text(raw_output: str) -> str | None:
    """Locate the final answer in a stream, or None if no event carries one.

    Events are scanned from the last to the first. The first event that
    matches wins, using this priority:

    1. A ``result`` event with subtype ``success`` and a string ``result``.
    2. An ``assistant`` message that ended its turn and has text blocks. The
       text blocks are joined with newlines; tool_use blocks are ignored.

    Args:
        raw_output: Everything the CLI wrote to stdout.

    Returns:
        The answer text, or None.
    """
    events = parse_stream_events(raw_output)
    for index in range(len(events) - 1, -1, -1):
        event = events[index]

        if isinstance(event, FinalResult):
            if event.subtype == RESULT_SUCCESS_SUBTYPE and isinstance(event.result, str):
                logger.info("Found final result message", index=index)
                return event.result
            continue

        if isinstance(event, AssistantMessage):
            message = event.message
            if message.role != "assistant" or message.stop_reason != END_TURN_STOP_REASON:
                continue
            text_blocks = message.text_blocks
            if text_blocks:
                logger.info("Found end_turn assistant message with text content", index=index)
                return "\n".join(block.text for block in text_blocks)

    return None


def extract_final_text(raw_output: str) -> str:
    """Return the final answer in a stream, falling back to a fixed placeholder."""
    text = find_final_text(raw_output)
    if not text:
        logger.info("No valid response found, using fallback message")
        return NO_NOTES_FALLBACK
    return text
