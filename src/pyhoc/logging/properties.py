# Copyright 2026 Firefly Software Solutions Inc.
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
"""Logging configuration properties (pyhoc.logging.*)."""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyhoc.core.config import config_properties

ROOT_LOGGER = "root"


def level_name(value: Any) -> str:
    """Normalise *value* to a stdlib level name, rejecting unknown levels."""
    name = str(value).strip().upper()
    if name not in logging.getLevelNamesMapping():
        raise ValueError(f"unknown log level '{value}'")
    return name


def _flatten(levels: dict[str, Any], parent: str = "") -> dict[str, Any]:
    # TOML turns unquoted dotted keys into nested tables
    flat: dict[str, Any] = {}
    for key, value in levels.items():
        name = f"{parent}.{key}" if parent else str(key)
        if isinstance(value, dict):
            flat.update(_flatten(value, name))
        else:
            flat[name] = value
    return flat


@config_properties(prefix="pyhoc.logging")
class LoggingSettings(BaseModel):
    """Log rendering and levels.

    ``level`` maps logger names to level names; the ``root`` entry sets the
    root logger.  ``format`` is ``console`` or ``json``.
    """

    model_config = ConfigDict(frozen=True)

    format: Literal["console", "json"] = "console"
    level: dict[str, str] = Field(default_factory=lambda: {ROOT_LOGGER: "INFO"})

    @field_validator("format", mode="before")
    @classmethod
    def _lower_format(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("level", mode="before")
    @classmethod
    def _normalise_levels(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, str):
            # PYHOC_LOGGING_LEVEL=debug sets the root level
            return {ROOT_LOGGER: level_name(v)}
        if isinstance(v, dict):
            return {name: level_name(level) for name, level in _flatten(v).items()}
        return v
