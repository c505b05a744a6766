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
"""Layered configuration: packaged defaults, YAML/TOML files and env vars.

Keys use dot notation (``pyhoc.cors.allowed-origins``). Any key can be
overridden from the environment with the ``PYHOC_`` prefix, upper-cased,
with dots and dashes mapped to underscores (``PYHOC_CORS_ALLOWED_ORIGINS``).
"""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
import re
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, cast, get_type_hints

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

from pyhoc.kernel.exceptions import ConfigurationException

T = TypeVar("T")

ENV_PREFIX = "PYHOC_"
CONFIG_BASENAME = "pyhoc"
DEFAULTS_RESOURCE = "pyhoc-defaults.yaml"

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")
_MAX_PLACEHOLDER_DEPTH = 10

_CONFIG_PROPERTIES_ATTR = "__pyhoc_config_prefix__"


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Mark a pydantic model or dataclass as bindable to a configuration prefix.

    Usage:
        @config_properties(prefix="pyhoc.cors")
        class CorsSettings(BaseModel):
            allowed_origins: tuple[str, ...] = Field(default_factory=tuple, alias="allowed-origins")
    """

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, _CONFIG_PROPERTIES_ATTR, prefix)
        return cls

    return decorator


def env_key_for(key: str) -> str:
    """Return the environment variable that overrides *key*."""
    base = key.removeprefix(f"{CONFIG_BASENAME}.")
    return ENV_PREFIX + base.upper().replace(".", "_").replace("-", "_")


class Config:
    """Hierarchical configuration with dot-notation access.

    Priority (highest wins):
    1. Environment variables (``PYHOC_SECTION_KEY``)
    2. Profile overlays, then project files, then packaged defaults
    3. Field defaults of the bound properties class
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._loaded_sources: list[str] = []

    @property
    def loaded_sources(self) -> list[str]:
        """Config sources that were merged, in merge order."""
        return list(self._loaded_sources)

    @classmethod
    def defaults(cls) -> Config:
        """Configuration holding only the packaged defaults."""
        instance = cls(cls._load_packaged_defaults())
        instance._loaded_sources = [f"{DEFAULTS_RESOURCE} (packaged defaults)"]
        return instance

    @classmethod
    def from_sources(
        cls,
        base_dir: str | Path,
        active_profiles: list[str] | None = None,
        load_defaults: bool = True,
    ) -> Config:
        """Load and merge config from every known location under *base_dir*.

        Merge order (later wins):
        1. Packaged defaults (``pyhoc.resources/pyhoc-defaults.yaml``)
        2. ``config/pyhoc.yaml`` or ``config/pyhoc.toml``
        3. ``pyhoc.yaml`` or ``pyhoc.toml``
        4. Profile overlays ``pyhoc-{profile}.{yaml,toml}`` in both locations
        """
        base_dir = Path(base_dir)
        data: dict[str, Any] = {}
        sources: list[str] = []

        if load_defaults:
            data = cls._load_packaged_defaults()
            sources.append(f"{DEFAULTS_RESOURCE} (packaged defaults)")

        for search_dir in (base_dir / "config", base_dir):
            for candidate in cls._candidates(search_dir, CONFIG_BASENAME):
                data = cls._deep_merge(data, cls._load_file(candidate))
                sources.append(str(candidate))

        for profile in active_profiles or []:
            for search_dir in (base_dir / "config", base_dir):
                for candidate in cls._candidates(search_dir, f"{CONFIG_BASENAME}-{profile}"):
                    data = cls._deep_merge(data, cls._load_file(candidate))
                    sources.append(f"{candidate} (profile: {profile})")

        instance = cls(data)
        instance._loaded_sources = sources
        return instance

    @staticmethod
    def _candidates(directory: Path, stem: str) -> list[Path]:
        return [p for p in (directory / f"{stem}.yaml", directory / f"{stem}.toml") if p.is_file()]

    @staticmethod
    def _load_file(path: Path) -> dict[str, Any]:
        try:
            if path.suffix == ".toml":
                with open(path, "rb") as f:
                    return tomllib.load(f) or {}
            with open(path) as f:
                loaded = yaml.safe_load(f) or {}
        except (yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
            raise ConfigurationException(
                f"Cannot parse configuration file '{path}': {exc}",
                code="CONFIG_PARSE_ERROR",
                context={"path": str(path)},
            ) from exc
        if not isinstance(loaded, dict):
            raise ConfigurationException(
                f"Configuration file '{path}' must contain a mapping at the top level",
                code="CONFIG_PARSE_ERROR",
                context={"path": str(path)},
            )
        return loaded

    @staticmethod
    def _load_packaged_defaults() -> dict[str, Any]:
        defaults_file = importlib.resources.files("pyhoc.resources").joinpath(DEFAULTS_RESOURCE)
        with importlib.resources.as_file(defaults_file) as p, open(p) as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        merged = dict(base)
        for key, value in override.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = Config._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _lookup(self, key: str) -> Any:
        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, dict):
                return None
            current = current.get(part)
            if current is None:
                return None
        return current

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key, checking env vars first.

        String values containing ``${...}`` placeholders are resolved:
        - ``${ENV_VAR}`` from environment variables
        - ``${config.key}`` from other config values
        - ``${key:default}`` falling back to *default*
        """
        env_val = os.environ.get(env_key_for(key))
        if env_val is not None:
            return env_val

        current = self._lookup(key)
        if current is None:
            return default
        if isinstance(current, str) and "${" in current:
            return self._resolve_placeholders(current)
        return current

    def _resolve_placeholders(self, value: str, _depth: int = 0) -> str:
        if _depth > _MAX_PLACEHOLDER_DEPTH:
            raise ValueError(
                f"Max recursion depth exceeded resolving placeholders in '{value}'. Check for circular references."
            )

        def _replace(match: re.Match[str]) -> str:
            inner = match.group(1)
            if ":" in inner:
                ref_key, default_val = inner.split(":", 1)
            else:
                ref_key, default_val = inner, None

            env_val = os.environ.get(ref_key)
            if env_val is not None:
                return env_val

            current = self._lookup(ref_key)
            if current is not None:
                resolved = str(current)
                if "${" in resolved:
                    resolved = self._resolve_placeholders(resolved, _depth + 1)
                return resolved

            if default_val is not None:
                return cast(str, default_val)

            raise ValueError(f"Cannot resolve placeholder '${{{inner}}}': not found in environment or config")

        return _PLACEHOLDER_RE.sub(_replace, value)

    def _resolve_values(self, value: Any) -> Any:
        """Resolve placeholders in *value*, descending into lists and mappings."""
        if isinstance(value, str):
            return self._resolve_placeholders(value) if "${" in value else value
        if isinstance(value, list):
            return [self._resolve_values(item) for item in value]
        if isinstance(value, dict):
            return {key: self._resolve_values(item) for key, item in value.items()}
        return value

    def get_section(self, prefix: str) -> dict[str, Any]:
        """Get the nested mapping stored under *prefix* (empty when absent)."""
        current = self._lookup(prefix)
        return dict(current) if isinstance(current, dict) else {}

    def bind(self, config_cls: type[T]) -> T:
        """Bind the section named by ``@config_properties`` to *config_cls*.

        Environment overrides are applied per field, matched by field name
        and by alias, before validation.  Placeholders are resolved in string
        values, including strings nested in lists.
        """
        prefix = getattr(config_cls, _CONFIG_PROPERTIES_ATTR, None)
        if prefix is None:
            raise ConfigurationException(
                f"{config_cls.__name__} is not decorated with @config_properties",
                code="CONFIG_NOT_BINDABLE",
            )

        try:
            section = self._resolve_values(self.get_section(prefix))
        except ValueError as exc:
            raise ConfigurationException(
                f"Cannot bind '{config_cls.__name__}' (prefix='{prefix}'): {exc}",
                code="CONFIG_PLACEHOLDER",
                context={"prefix": prefix},
            ) from exc

        if isinstance(config_cls, type) and issubclass(config_cls, BaseModel):
            for name, info in config_cls.model_fields.items():
                for key in {name, info.alias or name}:
                    env_val = os.environ.get(env_key_for(f"{prefix}.{key}"))
                    if env_val is not None:
                        section[info.alias or name] = env_val
            try:
                return cast(T, config_cls.model_validate(section))
            except ValidationError as exc:
                raise ConfigurationException(
                    f"Configuration validation failed for '{config_cls.__name__}' (prefix='{prefix}'):\n{exc}",
                    code="CONFIG_INVALID",
                    context={"prefix": prefix},
                ) from exc

        hints = get_type_hints(config_cls)
        kwargs: dict[str, Any] = {}
        for field in dataclasses.fields(config_cls):  # type: ignore[arg-type]
            value = os.environ.get(env_key_for(f"{prefix}.{field.name}"), section.get(field.name))
            if value is None:
                continue
            expected_type = hints.get(field.name)
            if expected_type is int and isinstance(value, str):
                value = int(value)
            elif expected_type is bool and isinstance(value, str):
                value = value.lower() in ("true", "1", "yes")
            kwargs[field.name] = value

        return config_cls(**kwargs)
