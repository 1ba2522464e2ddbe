"""Data models for release notes generation."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter

from ..utils.constants import (
    DEFAULT_EXECUTABLE_PATH,
    DEFAULT_MAX_COMMITS,
    DEFAULT_PROMPT_TEMPLATE,
    SHORT_HASH_LENGTH,
    UNKNOWN_AUTHOR,
    UNKNOWN_VERSION,
)
from ..utils.shell import EscapingMode


class PipelineState(str, Enum):
    """Stages of a release notes generation run."""

    IDLE = "idle"
    COMMITS_FETCHED = "commits_fetched"
    PROMPT_BUILT = "prompt_built"
    PROCESS_RUNNING = "process_running"
    STREAM_COLLECTED = "stream_collected"
    PARSED = "parsed"
    CLEANED = "cleaned"
    ESCAPED = "escaped"
    DONE = "done"
    FAILED = "failed"


def _lookup(source: Any, *names: str) -> Any:
    """Return the first attribute or mapping key of ``source`` found in ``names``."""
    for name in names:
        if isinstance(source, Mapping):
            if source.get(name) is not None:
                return source[name]
        elif getattr(source, name, None) is not None:
            return getattr(source, name)
    return None


class CommitRecord(BaseModel):
    """A commit as presented to the generator in the prompt."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message: str
    short_hash: str = Field(alias="hash")
    date: str
    author: str

    @classmethod
    def from_commit(cls, commit: Any) -> "CommitRecord":
        """Build a record from a richer commit mapping or object.

        Understands the semantic-release commit shape (``hash``, ``message``,
        ``committer.name`` and ``committerDate``) as well as snake_case
        attribute names.
        """
        committer = _lookup(commit, "committer")
        author = _lookup(committer, "name") if committer is not None else None
        commit_hash = str(_lookup(commit, "hash", "sha") or "")
        return cls(
            message=str(_lookup(commit, "message") or ""),
            hash=commit_hash[:SHORT_HASH_LENGTH],
            date=str(_lookup(commit, "committerDate", "committer_date", "date") or ""),
            author=str(author or UNKNOWN_AUTHOR),
        )


class RenderContext(BaseModel):
    """Values substituted into a prompt template."""

    model_config = ConfigDict(frozen=True)

    version: str
    date: str
    repo_name: str
    commits_json: str
    additional_context: Any = None

    @property
    def has_additional_context(self) -> bool:
        """Whether additional context was supplied."""
        return self.additional_context is not None


class NotesConfig(BaseModel):
    """Configuration of a release notes generation run.

    Accepts snake_case names as well as the camelCase keys used by
    semantic-release plugin configuration.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    executable_path: str = Field(
        default=DEFAULT_EXECUTABLE_PATH,
        validation_alias=AliasChoices("executable_path", "executablePath", "claudePath"),
    )
    prompt_template: str | None = Field(default=None, validation_alias=AliasChoices("prompt_template", "promptTemplate"))
    max_commits: int = Field(default=DEFAULT_MAX_COMMITS, ge=0, validation_alias=AliasChoices("max_commits", "maxCommits"))
    additional_context: Any = Field(default=None, validation_alias=AliasChoices("additional_context", "additionalContext"))
    clean_output: bool = Field(default=True, validation_alias=AliasChoices("clean_output", "cleanOutput"))
    escaping_mode: EscapingMode = Field(
        default=EscapingMode.SHELL,
        validation_alias=AliasChoices("escaping_mode", "escapingMode", "escaping"),
    )

    @property
    def template(self) -> str:
        """The configured prompt template, or the built-in one."""
        return self.prompt_template if self.prompt_template is not None else DEFAULT_PROMPT_TEMPLATE

    @property
    def uses_custom_template(self) -> bool:
        """Whether a template other than the built-in one is configured."""
        return self.prompt_template is not None and self.prompt_template != DEFAULT_PROMPT_TEMPLATE


class NotesPipelineResult(BaseModel):
    """Result of a release notes generation run."""

    state: PipelineState
    notes: str
    error: str | None = None
    process_failed: bool = False


@dataclass
class ReleaseContext:
    """What the host knows about the release being prepared.

    ``logger`` is either a structlog-style logger or a console-style one with
    ``log``, ``warn`` and ``error`` methods. The pipeline falls back to its
    module logger when it is not provided.
    """

    version: str = UNKNOWN_VERSION
    commits: list[Any] = field(default_factory=list)
    repository_url: str = ""
    logger: Any = None


# Stream protocol events
# ----------------------


class TextBlock(BaseModel):
    """Text content produced by the assistant."""

    type: Literal["text"]
    text: str


class ToolUseBlock(BaseModel):
    """Tool invocation requested by the assistant."""

    type: Literal["tool_use"]
    id: str | None = None
    name: str | None = None
    input: dict[str, Any] = Field(default_factory=dict)


ContentBlock = Annotated[Union[TextBlock, ToolUseBlock, dict[str, Any]], Field(union_mode="left_to_right")]


class AssistantContent(BaseModel):
    """The message wrapped by an assistant event."""

    role: str = "assistant"
    content: list[ContentBlock] = Field(default_factory=list)
    stop_reason: str | None = None
    model: Any = None

    @property
    def text_blocks(self) -> list[TextBlock]:
        """Text blocks in content order; tool_use and unknown blocks are skipped."""
        return [block for block in self.content if isinstance(block, TextBlock)]


class SystemInit(BaseModel):
    """Session bootstrap event; never carries answer text."""

    type: Literal["system"]
    subtype: str | None = None
    session_id: Any = None


class AssistantMessage(BaseModel):
    """An assistant turn made of ordered content blocks."""

    type: Literal["assistant"]
    message: AssistantContent
    session_id: Any = None

    @property
    def stop_reason(self) -> str | None:
        """The stop reason of the wrapped message."""
        return self.message.stop_reason


class UserToolResult(BaseModel):
    """Tool output echoed back to the assistant."""

    type: Literal["user"]
    message: Any = None
    session_id: Any = None


class FinalResult(BaseModel):
    """The final result event emitted when the session ends."""

    type: Literal["result"]
    subtype: str | None = None
    is_error: Any = None
    result: Any = None
    session_id: Any = None


StreamEvent = Annotated[
    Union[SystemInit, AssistantMessage, UserToolResult, FinalResult],
    Field(discriminator="type"),
]

stream_event_adapter = TypeAdapter(StreamEvent)
