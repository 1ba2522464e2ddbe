"""Release notes generation module."""

from .commits import get_commits, read_git_commits, repo_name_from_url, serialize_commits
from .context_logger import ReleaseLogger
from .exceptions import GeneratorNotFoundError, GeneratorProcessError, ReleaseNotesError
from .extractor import extract_release_notes
from .generator import NotesPipeline, generate_notes, generate_notes_with_timeout
from .models import (
    CommitRecord,
    NotesConfig,
    NotesPipelineResult,
    PipelineState,
    ReleaseContext,
    RenderContext,
)
from .prepare import prepare, verify_executable
from .runner import ClaudeCodeRunner, GeneratorRunner, StreamAccumulator, prompt_file
from .stream import extract_final_text, find_final_text, parse_stream_events
from .templates import render_prompt, validate_template

__all__ = [
    "CommitRecord",
    "NotesConfig",
    "NotesPipelineResult",
    "PipelineState",
    "ReleaseContext",
    "RenderContext",
    "ReleaseNotesError",
    "GeneratorProcessError",
    "GeneratorNotFoundError",
    "ClaudeCodeRunner",
    "ReleaseLogger",
    "GeneratorRunner",
    "StreamAccumulator",
    "NotesPipeline",
    "extract_final_text",
    "extract_release_notes",
    "find_final_text",
    "generate_notes",
    "generate_notes_with_timeout",
    "get_commits",
    "parse_stream_events",
    "prepare",
    "prompt_file",
    "read_git_commits",
    "render_prompt",
    "repo_name_from_url",
    "serialize_commits",
    "validate_template",
    "verify_executable",
]
