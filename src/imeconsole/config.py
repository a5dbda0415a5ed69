"""Console configuration.

Settings come from an optional YAML file, overridden by command-line
options.  A complete file looks like::

    app_name: ime.console
    engine: memory
    engine_options:
      schemas_file: schemas.yaml
    shared_data_dir: /usr/share/ime
    user_data_dir: ~/.config/ime-console
    full_check: true
    max_line_length: 99
    log_level: WARNING
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from imeconsole.engine.types import EngineTraits
from imeconsole.errors import ConfigError

DEFAULT_APP_NAME = "ime.console"
DEFAULT_ENGINE = "memory"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ConsoleConfig:
    """Settings for one console run.

    Parameters
    ----------
    app_name:
        Application identifier passed to the engine's ``setup``.
    engine:
        Name of the registered engine to drive.
    engine_options:
        Keyword arguments for the engine constructor.
    shared_data_dir:
        Engine-wide data directory, if any.
    user_data_dir:
        Directory for user data written on ``synchronize``, if any.
    full_check:
        Whether startup maintenance performs a full check.
    max_line_length:
        Longest accepted input line; ``None`` for no limit.
    log_level:
        Logging level name.
    """

    app_name: str = DEFAULT_APP_NAME
    engine: str = DEFAULT_ENGINE
    engine_options: dict[str, Any] = field(default_factory=dict)
    shared_data_dir: Path | None = None
    user_data_dir: Path | None = None
    full_check: bool = True
    max_line_length: int | None = None
    log_level: str = "WARNING"

    def traits(self) -> EngineTraits:
        """Return the engine traits described by this configuration."""
        return EngineTraits(
            app_name=self.app_name,
            shared_data_dir=self.shared_data_dir,
            user_data_dir=self.user_data_dir,
            log_level=self.log_level,
        )

    def with_overrides(self, **overrides: Any) -> ConsoleConfig:
        """Return a copy with every non-``None`` override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


def _path(value: Any, key: str, source: str | None) -> Path | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"{key!r} must be a path string", source)
    return Path(value).expanduser()


def config_from_dict(data: dict[str, Any], source: str | None = None) -> ConsoleConfig:
    """Validate a mapping and build a ``ConsoleConfig`` from it.

    Raises
    ------
    ConfigError
        On unknown keys or values of the wrong type.
    """
    known = {f.name for f in fields(ConsoleConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown configuration key(s): {', '.join(unknown)}", source)

    values: dict[str, Any] = {}
    for key in ("app_name", "engine"):
        if key in data:
            if not isinstance(data[key], str) or not data[key]:
                raise ConfigError(f"{key!r} must be a non-empty string", source)
            values[key] = data[key]
    if "engine_options" in data:
        options = data["engine_options"] or {}
        if not isinstance(options, dict):
            raise ConfigError("'engine_options' must be a mapping", source)
        values["engine_options"] = dict(options)
    for key in ("shared_data_dir", "user_data_dir"):
        if key in data:
            values[key] = _path(data[key], key, source)
    if "full_check" in data:
        if not isinstance(data["full_check"], bool):
            raise ConfigError("'full_check' must be true or false", source)
        values["full_check"] = data["full_check"]
    if "max_line_length" in data:
        limit = data["max_line_length"]
        if limit is not None and (not isinstance(limit, int) or isinstance(limit, bool) or limit <= 0):
            raise ConfigError("'max_line_length' must be a positive integer", source)
        values["max_line_length"] = limit
    if "log_level" in data:
        level = str(data["log_level"]).upper()
        if level not in _LOG_LEVELS:
            raise ConfigError(f"'log_level' must be one of {', '.join(_LOG_LEVELS)}", source)
        values["log_level"] = level
    return ConsoleConfig(**values)


def load_config(path: str | Path | None) -> ConsoleConfig:
    """Load configuration from a YAML file, or return the defaults.

    Relative ``schemas_file`` engine options are resolved against the
    directory of the configuration file.

    Raises
    ------
    ConfigError
        If the file cannot be read or is invalid.
    """
    if path is None:
        return ConsoleConfig()
    source = str(path)
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"cannot read configuration: {exc}", source) from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML: {exc}", source) from exc
    if data is None:
        return ConsoleConfig()
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping", source)
    config = config_from_dict(data, source)
    schemas_file = config.engine_options.get("schemas_file")
    if isinstance(schemas_file, str) and not Path(schemas_file).is_absolute():
        options = dict(config.engine_options)
        options["schemas_file"] = str(Path(path).parent / schemas_file)
        config = replace(config, engine_options=options)
    return config
