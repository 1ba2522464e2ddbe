"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
import subprocess
from pathlib import Path

import typer
from dotenv import load_dotenv
from typer import Argument, Option
from typing_extensions import Annotated

from claude_release_notes.configuration.env import Settings
from claude_release_notes.configuration.exceptions import ConfigurationFileError
from claude_release_notes.configuration.loader import load_json_file, reconcile_notes_config
from claude_release_notes.configuration.logs import configure_logging
from claude_release_notes.release_notes.commits import read_git_commits
from claude_release_notes.release_notes.exceptions import GeneratorNotFoundError
from claude_release_notes.release_notes.generator import generate_notes_with_timeout
from claude_release_notes.release_notes.models import ReleaseContext
from claude_release_notes.release_notes.prepare import prepare
from claude_release_notes.utils.constants import DEFAULT_EXECUTABLE_PATH
from claude_release_notes.utils.shell import EscapingMode

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False)


@typer_app.callback()
def main_callback(
    ctx: typer.Context,
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug logging.")] = False,
) -> None:
    """Generate release notes from git commits with the Claude Code CLI."""
    configure_logging(debug)
    ctx.obj = Settings()


@typer_app.command(name="generate")
def generate_cli(
    ctx: typer.Context,
    version: Annotated[str, Argument(help="Version being released, e.g. 1.2.0.")],
    since: Annotated[str | None, Option(help="Previous release ref; commits after it are included.")] = None,
    until: Annotated[str, Option(help="Last ref included in the release.")] = "HEAD",
    repository_url: Annotated[str, Option(help="Repository URL, used to derive the repository name.")] = "",
    config_file: Annotated[Path | None, Option("--config", help="JSON or YAML file with generation options.")] = None,
    template: Annotated[Path | None, Option(help="File holding a custom prompt template.")] = None,
    context_file: Annotated[Path | None, Option("--context", help="JSON file with additional context for the prompt.")] = None,
    claude_path: Annotated[str | None, Option(help="Path to the Claude Code CLI executable.")] = None,
    max_commits: Annotated[int | None, Option(min=0, help="Maximum number of commits to include.")] = None,
    no_clean: Annotated[bool, Option("--no-clean", help="Keep any preamble in front of the notes.")] = False,
    escaping: Annotated[EscapingMode | None, Option(help="How to escape the notes before printing them.")] = None,
    timeout: Annotated[float | None, Option(min=0, help="Give up after this many seconds.")] = None,
) -> None:
    """Generate release notes for VERSION and print them to stdout."""
    settings: Settings = ctx.obj

    try:
        overrides = {
            "executable_path": claude_path,
            "prompt_template": template.read_text(encoding="utf-8") if template is not None else None,
            "additional_context": load_json_file(context_file) if context_file is not None else None,
            "max_commits": max_commits,
            "clean_output": False if no_clean else None,
            "escaping_mode": escaping,
        }
        config = reconcile_notes_config(settings, config_path=config_file, overrides=overrides)
    except (ConfigurationFileError, OSError) as exc:
        typer.echo(f"Error loading configuration: {exc}", err=True)
        raise typer.Exit(1) from exc

    try:
        commits = read_git_commits(since=since, until=until)
    except (OSError, subprocess.CalledProcessError) as exc:
        stderr = getattr(exc, "stderr", None) or str(exc)
        typer.echo(f"Error reading commits from git: {stderr}", err=True)
        raise typer.Exit(1) from exc

    context = ReleaseContext(version=version, commits=commits, repository_url=repository_url)
    try:
        notes = asyncio.run(generate_notes_with_timeout(config, context, timeout=timeout))
    except asyncio.TimeoutError as exc:
        typer.echo(f"Release notes generation timed out after {timeout} seconds", err=True)
        raise typer.Exit(1) from exc

    typer.echo(notes)


@typer_app.command(name="verify")
def verify_cli(
    ctx: typer.Context,
    claude_path: Annotated[str | None, Option(help="Path to the Claude Code CLI executable.")] = None,
) -> None:
    """Check that the Claude Code CLI can be run."""
    settings: Settings = ctx.obj
    executable_path = claude_path or settings.CLAUDE_PATH or DEFAULT_EXECUTABLE_PATH
    try:
        version = prepare(executable_path, settings.ANTHROPIC_API_KEY)
    except GeneratorNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc
    typer.echo(f"Claude Code CLI found: {version}")


def main() -> None:
    """Main entry point for the CLI."""
    typer_app()


if __name__ == "__main__":
    main()
