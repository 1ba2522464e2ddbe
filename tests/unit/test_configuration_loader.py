"""Unit tests for reconciling the generation configuration."""

import json
from pathlib import Path

import pytest

from claude_release_notes.configuration.env import Settings
from claude_release_notes.configuration.exceptions import ConfigurationFileError
from claude_release_notes.configuration.loader import load_config_file, load_json_file, reconcile_notes_config
from claude_release_notes.release_notes.models import NotesConfig
from claude_release_notes.utils.constants import DEFAULT_PROMPT_TEMPLATE
from claude_release_notes.utils.shell import EscapingMode


@pytest.fixture
def settings() -> Settings:
    """Settings that ignore the real environment and .env file."""
    return Settings(_env_file=None, CLAUDE_PATH=None, ANTHROPIC_API_KEY=None)


class TestNotesConfig:
    """Tests for the configuration model."""

    def test_defaults(self) -> None:
        """Every option has a default."""
        config = NotesConfig()
        assert config.executable_path == "claude"
        assert config.prompt_template is None
        assert config.template == DEFAULT_PROMPT_TEMPLATE
        assert config.max_commits == 100
        assert config.additional_context is None
        assert config.clean_output is True
        assert config.escaping_mode is EscapingMode.SHELL
        assert config.uses_custom_template is False

    def test_camel_case_keys(self) -> None:
        """semantic-release style keys are accepted, including claudePath and escaping."""
        config = NotesConfig.model_validate(
            {"claudePath": "/bin/claude", "maxCommits": 5, "cleanOutput": False, "escaping": "none", "additionalContext": {"a": 1}}
        )
        assert config.executable_path == "/bin/claude"
        assert config.max_commits == 5
        assert config.clean_output is False
        assert config.escaping_mode is EscapingMode.NONE
        assert config.additional_context == {"a": 1}

    def test_default_template_passed_explicitly_is_not_custom(self) -> None:
        """Passing the built-in template does not trigger validation."""
        assert NotesConfig(prompt_template=DEFAULT_PROMPT_TEMPLATE).uses_custom_template is False
        assert NotesConfig(prompt_template="{{commits}}").uses_custom_template is True

    @pytest.mark.parametrize("values", [{"max_commits": -1}, {"escaping_mode": "bash"}])
    def test_invalid_values(self, values: dict[str, object]) -> None:
        """Out of range values are rejected."""
        with pytest.raises(ValueError):
            NotesConfig.model_validate(values)


def test_load_yaml_config_file(tmp_path: Path) -> None:
    """YAML files are loaded into a mapping."""
    path = tmp_path / "notes.yaml"
    path.write_text("maxCommits: 10\nadditionalContext:\n  milestone: Q3\n", encoding="utf-8")
    assert load_config_file(path) == {"maxCommits": 10, "additionalContext": {"milestone": "Q3"}}


def test_load_json_config_file(tmp_path: Path) -> None:
    """JSON files are loaded into a mapping."""
    path = tmp_path / "notes.json"
    path.write_text(json.dumps({"escapingMode": "none"}), encoding="utf-8")
    assert load_config_file(path) == {"escapingMode": "none"}


def test_empty_config_file(tmp_path: Path) -> None:
    """An empty YAML file holds no options."""
    path = tmp_path / "notes.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config_file(path) == {}


@pytest.mark.parametrize(
    "name,content",
    [
        ("list.yaml", "- a\n- b\n"),
        ("broken.yaml", "not: [valid: yaml"),
        ("broken.json", "{not json"),
    ],
)
def test_invalid_config_files(tmp_path: Path, name: str, content: str) -> None:
    """Unusable files raise ConfigurationFileError."""
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigurationFileError):
        load_config_file(path)


def test_missing_config_file(tmp_path: Path) -> None:
    """A missing file raises ConfigurationFileError."""
    with pytest.raises(ConfigurationFileError, match="file not found"):
        load_config_file(tmp_path / "missing.yaml")


def test_load_json_file_accepts_any_value(tmp_path: Path) -> None:
    """Additional context files may hold any JSON value."""
    path = tmp_path / "context.json"
    path.write_text("[1, 2]", encoding="utf-8")
    assert load_json_file(path) == [1, 2]


class TestReconcileNotesConfig:
    """Tests for layering configuration sources."""

    def test_defaults_only(self, settings: Settings) -> None:
        """Without any source the defaults apply."""
        assert reconcile_notes_config(settings) == NotesConfig()

    def test_environment_sets_executable(self) -> None:
        """CLAUDE_PATH overrides the default executable."""
        settings = Settings(_env_file=None, CLAUDE_PATH="/env/claude")
        assert reconcile_notes_config(settings).executable_path == "/env/claude"

    def test_precedence(self, tmp_path: Path) -> None:
        """CLI overrides beat the file, which beats the environment."""
        path = tmp_path / "notes.yaml"
        path.write_text("claudePath: /file/claude\nmaxCommits: 10\nescapingMode: none\n", encoding="utf-8")
        settings = Settings(_env_file=None, CLAUDE_PATH="/env/claude")

        config = reconcile_notes_config(settings, config_path=path, overrides={"max_commits": 3, "clean_output": None})

        assert config.executable_path == "/file/claude"
        assert config.max_commits == 3
        assert config.escaping_mode is EscapingMode.NONE
        assert config.clean_output is True

    def test_invalid_file_values(self, settings: Settings, tmp_path: Path) -> None:
        """Values the model rejects are reported against the file."""
        path = tmp_path / "notes.yaml"
        path.write_text("maxCommits: -4\n", encoding="utf-8")
        with pytest.raises(ConfigurationFileError):
            reconcile_notes_config(settings, config_path=path)


@pytest.mark.parametrize("name", ["latin1.yaml", "latin1.json"])
def test_non_utf8_config_file(tmp_path: Path, name: str) -> None:
    """Files that are not UTF-8 are reported as configuration errors."""
    path = tmp_path / name
    path.write_bytes(b"additionalContext: caf\xe9\n" if name.endswith(".yaml") else b'{"additionalContext": "caf\xe9"}')
    with pytest.raises(ConfigurationFileError):
        load_config_file(path)


def test_non_utf8_context_file(tmp_path: Path) -> None:
    """Additional context files must be UTF-8 as well."""
    path = tmp_path / "context.json"
    path.write_bytes(b'{"milestone": "\xff"}')
    with pytest.raises(ConfigurationFileError):
        load_json_file(path)
