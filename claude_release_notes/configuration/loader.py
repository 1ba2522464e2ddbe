"""Reconciles configuration between CLI options, configuration files and environment variables."""

import json
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError
from ruamel.yaml.error import YAMLError

from claude_release_notes.configuration.env import Settings
from claude_release_notes.configuration.exceptions import ConfigurationFileError
from claude_release_notes.release_notes.models import NotesConfig
from claude_release_notes.utils.yaml import load_yaml_file

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration options from a JSON or YAML file.

    Raises:
        ConfigurationFileError: If the file cannot be read or does not hold a mapping.
    """
    try:
        if path.suffix == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
        else:
            data = load_yaml_file(path)
    except FileNotFoundError as exc:
        raise ConfigurationFileError(path, "file not found") from exc
    except (json.JSONDecodeError, UnicodeDecodeError, YAMLError) as exc:
        raise ConfigurationFileError(path, str(exc)) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationFileError(path, "top level must be a mapping")
    return data


def load_json_file(path: Path) -> Any:
    """Load any JSON value from a file, used for additional context."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationFileError(path, "file not found") from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ConfigurationFileError(path, str(exc)) from exc


def reconcile_notes_config(
    settings: Settings,
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> NotesConfig:
    """Build the run configuration.

    Precedence, highest first: ``overrides`` (CLI options that were given),
    the configuration file, environment variables, built-in defaults.

    Raises:
        ConfigurationFileError: If the configuration file is unusable.
    """
    options: dict[str, Any] = {}
    if settings.CLAUDE_PATH:
        options["executable_path"] = settings.CLAUDE_PATH

    if config_path is not None:
        file_options = load_config_file(config_path)
        logger.debug("Loaded configuration file", path=str(config_path), keys=sorted(file_options))
        # Normalize file keys through the model so camelCase and snake_case can be mixed.
        try:
            file_config = NotesConfig.model_validate(file_options)
        except ValidationError as exc:
            raise ConfigurationFileError(config_path, str(exc)) from exc
        options.update(file_config.model_dump(include=file_config.model_fields_set))

    options.update({key: value for key, value in (overrides or {}).items() if value is not None})
    return NotesConfig.model_validate(options)
