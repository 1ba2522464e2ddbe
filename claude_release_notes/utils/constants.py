"""Shared constants used across the application."""

# Prompt Template Constants
# -------------------------

VERSION_PLACEHOLDER = "{{version}}"
"""Replaced with the version being released."""

DATE_PLACEHOLDER = "{{date}}"
"""Replaced with the release date (ISO date, no time)."""

REPO_NAME_PLACEHOLDER = "{{repoName}}"
"""Replaced with the repository name."""

COMMITS_PLACEHOLDER = "{{commits}}"
"""Replaced with the JSON-serialized list of commit records."""

ADDITIONAL_CONTEXT_OPEN_TAG = "{{#additionalContext}}"
"""Opens the region kept only when additional context is supplied."""

ADDITIONAL_CONTEXT_CLOSE_TAG = "{{/additionalContext}}"
"""Closes the additional context region."""

INSTRUCTIONS_MARKER = "IMPORTANT:"
"""Marker before which additional context is injected when no better spot exists."""

CODE_FENCE = "```"

ADDITIONAL_CONTEXT_HEADER = "Additional context information:"

DEFAULT_PROMPT_TEMPLATE = """
Generate release notes for version {{version}} (released on {{date}}) of the {{repoName}} project.

Here are the commits that were included in this release:

```json
{{commits}}
```

IMPORTANT: Your response must contain ONLY the release notes in Markdown format, with no additional text, commentary, or explanations about your process.

The release notes should:

1. Group changes by type (features, improvements, bug fixes, etc.)
2. Translate technical commit messages into user-friendly descriptions
3. Highlight important changes that users should be aware of
4. Be concise but informative
5. Use Markdown formatting

Focus on explaining what's new or changed from an end-user perspective, rather than implementation details. Omit commits that are purely technical (e.g., "fix typo", "merge branch", etc.) unless they fix important user-facing issues.

Format the notes with a clean structure using Markdown, starting with a brief summary of the release. Do not include any introductory statements like "here are the release notes" or explanations of your process.

AGAIN: Your response must only contain the final release notes in Markdown format - nothing else.
"""
"""Prompt used when no custom template is configured."""

# Stream Protocol Constants
# -------------------------

END_TURN_STOP_REASON = "end_turn"
"""Stop reason of an assistant message that concludes the turn."""

RESULT_SUCCESS_SUBTYPE = "success"

# Pipeline Defaults and Fallbacks
# -------------------------------

DEFAULT_EXECUTABLE_PATH = "claude"
"""Command name of the Claude Code CLI."""

DEFAULT_MAX_COMMITS = 100

NO_NOTES_FALLBACK = "General fixes and updates"
"""Returned by the stream parser when no event carries a usable answer."""

ERROR_FALLBACK_NOTES = "## Release Notes\n\nNo release notes generated due to an error."
"""Returned by the pipeline whenever generation fails."""

UNKNOWN_VERSION = "unknown"

UNKNOWN_AUTHOR = "Unknown"

SHORT_HASH_LENGTH = 7

PROMPT_FILE_PREFIX = "claude-prompt-"

GENERATOR_NOT_FOUND_MESSAGE = (
    "Claude Code CLI is required to generate release notes. Please make sure it is installed and available in your PATH."
)

# Git Log Parsing
# ---------------

GIT_LOG_FIELD_SEPARATOR = "\x1f"
"""Unit separator between fields of one commit in git log output."""

GIT_LOG_RECORD_SEPARATOR = "\x1e"
"""Record separator between commits in git log output."""
