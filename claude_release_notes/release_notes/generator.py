"""Main release notes generation orchestration."""

import asyncio
from datetime import date, datetime, timezone
from typing import Any, Callable

import structlog

from ..utils.constants import ERROR_FALLBACK_NOTES, NO_NOTES_FALLBACK
from ..utils.shell import EscapingMode, escape_text
from .commits import get_commits, repo_name_from_url, serialize_commits
from .context_logger import ReleaseLogger
from .extractor import extract_release_notes
from .models import NotesConfig, NotesPipelineResult, PipelineState, ReleaseContext, RenderContext
from .runner import ClaudeCodeRunner, GeneratorRunner, StreamAccumulator, prompt_file
from .stream import find_final_text
from .templates import render_prompt, validate_template

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class NotesPipeline:
    """Turns the commits of a release into finished release notes.

    The pipeline renders the prompt, runs the generator on it, recovers the
    final answer from the output stream, strips any preamble in front of the
    notes and escapes the result. It never raises: every failure is logged
    and turned into a fixed fallback text.
    """

    def __init__(
        self,
        config: NotesConfig | None = None,
        runner: GeneratorRunner | None = None,
        today: Callable[[], date] = _utc_today,
    ) -> None:
        """Initialize with a configuration and an optional generator runner.

        Args:
            config: Options of the run; defaults apply when omitted.
            runner: Runs the generator; the Claude Code CLI at
                ``config.executable_path`` when omitted.
            today: Supplies the release date.
        """
        self.config = config or NotesConfig()
        self.runner = runner or ClaudeCodeRunner(self.config.executable_path)
        self.today = today

    def build_render_context(self, context: ReleaseContext, commits: list[Any]) -> RenderContext:
        """Collect the values substituted into the prompt template."""
        return RenderContext(
            version=context.version,
            date=self.today().isoformat(),
            repo_name=repo_name_from_url(context.repository_url),
            commits_json=serialize_commits(commits),
            additional_context=self.config.additional_context,
        )

    def build_prompt(self, context: ReleaseContext, commits: list[Any]) -> str:
        """Render the prompt, validating custom templates first."""
        render_context = self.build_render_context(context, commits)
        if self.config.uses_custom_template:
            validate_template(self.config.template, has_additional_context=render_context.has_additional_context)
        return render_prompt(self.config.template, render_context)

    def clean(self, text: str, version: str, log: ReleaseLogger) -> str:
        """Strip preamble in front of the notes (when enabled) and surrounding whitespace."""
        if self.config.clean_output:
            log.info("Cleaned release notes to remove any AI preamble")
            return extract_release_notes(text, version).strip()
        log.info("Skipping output cleaning (disabled by configuration)")
        return text.strip()

    async def run(self, context: ReleaseContext) -> NotesPipelineResult:
        """Generate release notes and report how the run ended.

        Args:
            context: The release being prepared.

        Returns:
            The final state, the notes and any error that was handled.
        """
        log = ReleaseLogger(context.logger, logger)
        state = PipelineState.IDLE
        try:
            commits = get_commits(context, self.config.max_commits)
            state = PipelineState.COMMITS_FETCHED
            if not commits:
                log.info("No commits found, using empty release notes")
                return NotesPipelineResult(state=PipelineState.DONE, notes="")

            prompt = self.build_prompt(context, commits)
            state = PipelineState.PROMPT_BUILT

            log.info("Generating release notes with Claude...")
            accumulator = StreamAccumulator()
            process_error: Exception | None = None
            with prompt_file(prompt) as prompt_path:
                state = PipelineState.PROCESS_RUNNING
                try:
                    await self.runner.run(prompt_path, accumulator.append)
                except Exception as exc:
                    # Partial output may still hold a usable final message.
                    log.error("Generator process execution resulted in an error", error=str(exc), error_type=type(exc).__name__)
                    process_error = exc
            raw_output = accumulator.text
            state = PipelineState.STREAM_COLLECTED

            text = find_final_text(raw_output)
            state = PipelineState.PARSED
            if not text:
                if process_error is not None:
                    log.error("No usable output from failed generator process, using error fallback")
                    return NotesPipelineResult(
                        state=PipelineState.FAILED,
                        notes=ERROR_FALLBACK_NOTES,
                        error=str(process_error),
                        process_failed=True,
                    )
                log.info("No valid response found, using fallback message")
                text = NO_NOTES_FALLBACK
            log.info("Successfully generated release notes")

            cleaned = self.clean(text, context.version, log)
            state = PipelineState.CLEANED

            notes = escape_text(cleaned, self.config.escaping_mode)
            state = PipelineState.ESCAPED
            if self.config.escaping_mode is EscapingMode.SHELL:
                log.info("Applied shell escaping to release notes")

            return NotesPipelineResult(state=PipelineState.DONE, notes=notes, process_failed=process_error is not None)
        except Exception as exc:
            log.exception("Error generating release notes with Claude", state=state.value)
            return NotesPipelineResult(state=PipelineState.FAILED, notes=ERROR_FALLBACK_NOTES, error=str(exc))

    async def generate(self, context: ReleaseContext) -> str:
        """Generate release notes for ``context``."""
        result = await self.run(context)
        return result.notes


async def generate_notes(
    config: NotesConfig,
    context: ReleaseContext,
    runner: GeneratorRunner | None = None,
) -> str:
    """Generate release notes with a fresh pipeline."""
    return await NotesPipeline(config, runner=runner).generate(context)


async def generate_notes_with_timeout(
    config: NotesConfig,
    context: ReleaseContext,
    timeout: float | None,
    runner: GeneratorRunner | None = None,
) -> str:
    """Generate release notes, giving up after ``timeout`` seconds.

    A ``timeout`` of None waits for as long as generation takes.

    On timeout the pipeline is cancelled, which kills a running Claude Code
    CLI process, and the timeout is reported to the caller.

    Raises:
        asyncio.TimeoutError: If generation does not finish in time.
    """
    try:
        return await asyncio.wait_for(generate_notes(config, context, runner=runner), timeout)
    except asyncio.TimeoutError:
        ReleaseLogger(context.logger, logger).error("Release notes generation timed out", timeout=timeout)
        raise
