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
"""CORS configuration properties (pyhoc.cors.*)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyhoc.core.config import config_properties


@config_properties(prefix="pyhoc.cors")
class CorsSettings(BaseModel):
    """Raw CORS settings as supplied by configuration.

    Every list may be empty, which means "unset": the resolver substitutes
    its defaults.  Keys are kebab-case in configuration files
    (``allowed-origins``) and snake_case in Python.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    enabled: bool = True
    allowed_origins: tuple[str, ...] = Field(default_factory=tuple, alias="allowed-origins")
    allowed_methods: tuple[str, ...] = Field(default_factory=tuple, alias="allowed-methods")
    allowed_headers: tuple[str, ...] = Field(default_factory=tuple, alias="allowed-headers")

    @field_validator("allowed_origins", "allowed_methods", "allowed_headers", mode="before")
    @classmethod
    def _split_lists(cls, v: Any) -> Any:
        # null in YAML means unset; env vars arrive as comma-separated strings
        if v is None:
            return []
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v
