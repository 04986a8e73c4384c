#!/usr/bin/env python3
"""
Pydantic models for execution options and runner settings.
"""

import codecs
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

SETTINGS_FILE_NAMES = (".cmdrunner.yaml", ".cmdrunner.yml")

_ENV_PREFIX = "CMDRUNNER_"
_ENV_FIELDS = {
    "TIMEOUT": "timeout",
    "MERGE_STDERR": "merge_stderr",
    "ENCODING": "encoding",
    "READER_GRACE_PERIOD": "reader_grace_period",
    "LOGGING": "logging_enabled",
    "LOG_LEVEL": "log_level",
    "JSON_LOGS": "json_logs",
}


class SettingsError(ValueError):
    pass


class ExecutionOptions(BaseModel):
    """How a single command should be executed."""

    model_config = ConfigDict(frozen=True)

    working_directory: Optional[Path] = Field(
        default=None, description="Directory the process starts in"
    )
    shell_mode: bool = Field(default=False, description="Run through sh -c")
    remote_host: Optional[str] = Field(default=None, description="Host passed to ssh")
    remote_user: Optional[str] = Field(default=None, description="User for the ssh destination")
    timeout: Optional[float] = Field(default=None, ge=0, description="Deadline in seconds")
    logging_enabled: bool = Field(default=False, description="Emit the command line before running")

    @field_validator("remote_host", "remote_user")
    @classmethod
    def must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not v.strip():
            raise ValueError("remote host and user cannot be blank")
        return v.strip()

    @model_validator(mode="after")
    def user_requires_host(self) -> "ExecutionOptions":
        if self.remote_user is not None and self.remote_host is None:
            raise ValueError("remote_user requires remote_host")
        return self

    @property
    def uses_shell(self) -> bool:
        """Remote execution always goes through a local shell."""
        return self.shell_mode or self.remote_host is not None

    @property
    def remote_destination(self) -> Optional[str]:
        if self.remote_host is None:
            return None
        if self.remote_user is None:
            return self.remote_host
        return f"{self.remote_user}@{self.remote_host}"

    @property
    def effective_timeout(self) -> Optional[float]:
        """Timeout in seconds, with ``0`` meaning no deadline."""
        return self.timeout or None

    def with_changes(self, **changes: Any) -> "ExecutionOptions":
        """Return a validated copy with *changes* applied."""
        data = self.model_dump()
        data.update(changes)
        return ExecutionOptions.model_validate(data)


class RunnerSettings(BaseModel):
    """Process-wide defaults, read from ``.cmdrunner.yaml`` and the environment."""

    timeout: Optional[float] = Field(default=None, ge=0, description="Default deadline in seconds")
    merge_stderr: bool = Field(default=True, description="Capture stderr into the same buffer")
    encoding: str = Field(default="utf-8", description="Encoding used to decode process output")
    reader_grace_period: float = Field(
        default=2.0, gt=0, description="Seconds a reader may sit idle after exit before it is abandoned"
    )
    logging_enabled: bool = Field(default=False, description="Default for CommandRunner logging")
    log_level: str = Field(default="INFO", description="DEBUG|INFO|WARNING|ERROR")
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("encoding")
    @classmethod
    def encoding_must_exist(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError:
            raise ValueError(f"Unknown encoding: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_valid(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.upper()
        if level not in valid_levels:
            raise ValueError(f"log_level must be one of: {sorted(valid_levels)}")
        return level

    def save(self, path: Path) -> None:
        """Save settings to a YAML file."""
        import yaml

        if path.is_dir():
            path = path / SETTINGS_FILE_NAMES[0]
        settings_dict = self.model_dump(exclude_none=True)
        path.write_text(yaml.dump(settings_dict, default_flow_style=False, sort_keys=False))

    @classmethod
    def load(cls, path: Path) -> "RunnerSettings":
        """Load settings from a YAML file."""
        import yaml

        if path.is_dir():
            path = path / SETTINGS_FILE_NAMES[0]
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")

        try:
            raw = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise SettingsError(f"Failed to read settings file {path}: {e}") from e

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise SettingsError("Settings file must be a YAML mapping")

        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise SettingsError(str(e)) from e

    @classmethod
    def find_settings_file(cls, start: Optional[Path] = None) -> Optional[Path]:
        start_path = (start or Path.cwd()).expanduser().resolve()
        if start_path.is_file():
            start_path = start_path.parent

        current = start_path
        while True:
            for name in SETTINGS_FILE_NAMES:
                candidate = current / name
                if candidate.is_file():
                    return candidate

            if current.parent == current:
                return None
            current = current.parent


def _environment_overrides(environ: Dict[str, str]) -> Dict[str, str]:
    overrides = {}
    for suffix, field_name in _ENV_FIELDS.items():
        value = environ.get(_ENV_PREFIX + suffix)
        if value is not None and value != "":
            overrides[field_name] = value
    return overrides


def load_settings(
    start: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
) -> RunnerSettings:
    """
    Resolve the effective settings.

    Resolution order:
      1. built-in defaults
      2. nearest ``.cmdrunner.yaml`` found walking up from *start*
      3. ``CMDRUNNER_*`` environment variables
    """
    environ = os.environ if environ is None else environ

    settings_file = RunnerSettings.find_settings_file(start)
    settings = RunnerSettings.load(settings_file) if settings_file else RunnerSettings()

    overrides = _environment_overrides(environ)
    if not overrides:
        return settings

    data = settings.model_dump()
    data.update(overrides)
    try:
        return RunnerSettings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid {_ENV_PREFIX}* environment value: {e}") from e
