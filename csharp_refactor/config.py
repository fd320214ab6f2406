# Copyright 2025 Vijaykumar Singh <singhvjd@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Refactoring settings and YAML configuration loading."""

import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)


class RefactorSettings(BaseModel):
    """Settings shared by the transforms, the manager and the CLI."""

    deferred_type_names: List[str] = Field(
        default_factory=lambda: ["Task", "ValueTask"],
        description="Type names treated as deferred-result wrappers",
    )
    deferred_type_name: str = Field(
        default="Task", description="Wrapper type used when converting to async"
    )
    indent: str = Field(
        default="    ", description="Indentation unit when the source gives no hint"
    )
    create_backups: bool = Field(default=True, description="Back up files before applying")
    backup_dir: str = Field(
        default=".refactor_backups", description="Backup directory relative to project root"
    )
    diff_context_lines: int = Field(default=3, ge=0, description="Context lines in diffs")
    warn_on_parameter_collisions: bool = Field(
        default=True, description="Report fields that map to the same parameter name"
    )

    @field_validator("indent")
    @classmethod
    def _indent_is_whitespace(cls, value: str) -> str:
        if value.strip(" \t"):
            raise ValueError("indent must contain only spaces or tabs")
        return value

    @model_validator(mode="after")
    def _wrapper_is_deferred(self) -> "RefactorSettings":
        if self.deferred_type_name not in self.deferred_type_names:
            self.deferred_type_names = [*self.deferred_type_names, self.deferred_type_name]
        return self


def load_settings(path: Path) -> RefactorSettings:
    """Load settings from a YAML file.

    Args:
        path: Path to YAML file

    Expected format:
    ```yaml
    refactor:
      deferred_type_names: [Task, ValueTask]
      indent: "\\t"
      create_backups: false
    ```
    The top-level ``refactor`` key is optional.

    Raises:
        ValueError: If the file is not valid YAML or holds invalid values
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to load settings from {path}: {e}")
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    data = data or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings in {path} must be a mapping")
    if "refactor" in data:
        data = data["refactor"] or {}

    try:
        settings = RefactorSettings(**data)
    except ValidationError as e:
        logger.error(f"Invalid settings in {path}: {e}")
        raise ValueError(str(e)) from e

    logger.debug(f"Loaded settings from {path}")
    return settings


def export_settings(settings: RefactorSettings, path: Path) -> None:
    """Export settings to a YAML file.

    Args:
        settings: Settings to write
        path: Output path
    """
    with open(path, "w") as f:
        yaml.dump({"refactor": settings.model_dump()}, f, default_flow_style=False)


# Global settings singleton
_settings: Optional[RefactorSettings] = None


def get_settings() -> RefactorSettings:
    """Get the process-wide settings."""
    global _settings
    if _settings is None:
        _settings = RefactorSettings()
    return _settings


def set_settings(settings: RefactorSettings) -> None:
    """Replace the process-wide settings."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset the process-wide settings."""
    global _settings
    _settings = None
