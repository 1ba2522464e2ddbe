"""Collect the commits that go into a release."""

import json
import subprocess
from pathlib import Path
from typing import Any

import structlog

from ..utils.constants import GIT_LOG_FIELD_SEPARATOR, GIT_LOG_RECORD_SEPARATOR
from .context_logger import ReleaseLogger
from .models import CommitRecord, ReleaseContext

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

GIT_LOG_FORMAT = GIT_LOG_FIELD_SEPARATOR.join(["%H", "%s", "%b", "%cn", "%cI"]) + GIT_LOG_RECORD_SEPARATOR


def get_commits(context: ReleaseContext, max_commits: int) -> list[Any]:
    """Return at most ``max_commits`` commits of the release, in their original order."""
    log = ReleaseLogger(context.logger, logger)
    if not context.commits:
        log.info("No commits found")
        return []

    limited_commits = list(context.commits[:max_commits])
    log.info(f"Found {len(limited_commits)} commits", total=len(context.commits), max_commits=max_commits)
    return limited_commits


def serialize_commits(commits: list[Any]) -> str:
    """Serialize commits as the indented JSON list embedded in the prompt."""
    records = [CommitRecord.from_commit(commit).model_dump(by_alias=True) for commit in commits]
    return json.dumps(records, indent=2, ensure_ascii=False)


def repo_name_from_url(repository_url: str) -> str:
    """Derive a repository name from its URL, e.g. ``https://host/org/tool.git`` -> ``tool``."""
    last_segment = repository_url.rstrip("/").split("/")[-1]
    return last_segment.replace(".git", "")


def read_git_commits(since: str | None = None, until: str = "HEAD", cwd: Path | None = None) -> list[dict[str, Any]]:
    """Read non-merge commits from ``git log``, newest first.

    Args:
        since: Exclusive starting revision, usually the previous release tag.
            All commits reachable from ``until`` are read when omitted.
        until: Inclusive ending revision.
        cwd: Repository directory; the current directory when omitted.

    Returns:
        Commit mappings shaped like the commits semantic-release hands to its
        plugins (``hash``, ``message``, ``body``, ``committer`` and
        ``committerDate``).

    Raises:
        subprocess.CalledProcessError: If git fails.
    """
    revision_range = f"{since}..{until}" if since else until
    result = subprocess.run(
        ["git", "log", f"--pretty=format:{GIT_LOG_FORMAT}", "--no-merges", revision_range],
        capture_output=True,
        text=True,
        check=True,
        cwd=cwd,
    )

    commits: list[dict[str, Any]] = []
    for record in result.stdout.split(GIT_LOG_RECORD_SEPARATOR):
        record = record.strip("\n")
        if not record:
            continue
        fields = record.split(GIT_LOG_FIELD_SEPARATOR)
        if len(fields) != 5:
            logger.warning("Skipping unparseable git log record", record=record)
            continue
        commit_hash, subject, body, committer_name, committer_date = fields
        body = body.strip()
        commits.append(
            {
                "hash": commit_hash,
                "message": f"{subject}\n\n{body}" if body else subject,
                "subject": subject,
                "body": body,
                "committer": {"name": committer_name},
                "committerDate": committer_date,
            }
        )
    logger.debug("Read commits from git", revision_range=revision_range, count=len(commits))
    return commits
