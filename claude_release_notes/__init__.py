"""Generate shell-safe release notes from git commits with the Claude Code CLI."""

__version__ = "0.1.0"
