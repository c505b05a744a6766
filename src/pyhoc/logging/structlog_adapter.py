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
"""StructlogAdapter: LoggingPort implementation backed by structlog."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from typing import Any

import structlog

from pyhoc.core.config import Config, env_key_for
from pyhoc.kernel.exceptions import ConfigurationException
from pyhoc.logging.properties import ROOT_LOGGER, LoggingSettings, level_name

LEVEL_PREFIX = "pyhoc.logging.level"
APP_NAME_KEY = "pyhoc.app.name"


def env_levels(declared: Mapping[str, str]) -> dict[str, str]:
    """Collect ``PYHOC_LOGGING_LEVEL_<LOGGER>`` overrides from the environment.

    A variable matching a logger already named in configuration overrides
    that logger.  Any other suffix is read as a dotted logger name:
    ``PYHOC_LOGGING_LEVEL_PYHOC_CORS`` sets ``pyhoc.cors``.
    """
    known = {env_key_for(f"{LEVEL_PREFIX}.{name}"): name for name in (*declared, ROOT_LOGGER)}
    marker = env_key_for(LEVEL_PREFIX) + "_"

    levels: dict[str, str] = {}
    for key, value in os.environ.items():
        if not key.startswith(marker) or not value.strip():
            continue
        name = known.get(key, key.removeprefix(marker).lower().replace("_", "."))
        try:
            levels[name] = level_name(value)
        except ValueError as exc:
            raise ConfigurationException(
                f"Invalid log level in {key}: {exc}",
                code="CONFIG_INVALID",
                context={"variable": key},
            ) from exc
    return levels


def add_app_name(app_name: str) -> structlog.types.Processor:
    """Processor stamping every event with the application name."""

    def processor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("app", app_name)
        return event_dict

    return processor


class StructlogAdapter:
    """Configures structlog and stdlib logging from :class:`LoggingSettings`.

    Levels come from ``pyhoc.logging.level.*`` with ``PYHOC_LOGGING_LEVEL_*``
    overrides on top; events are rendered for the console or as JSON lines.
    """

    def __init__(self) -> None:
        self._root_level: str = "INFO"
        self._format: str = "console"
        self._module_levels: dict[str, str] = {}

    def configure(self, config: Config) -> None:
        settings = config.bind(LoggingSettings)
        levels = {**settings.level, **env_levels(settings.level)}

        self._root_level = levels.pop(ROOT_LOGGER, "INFO")
        self._module_levels = levels
        self._format = settings.format

        structlog.configure(
            processors=self._processors(str(config.get(APP_NAME_KEY, "pyhoc-app"))),
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=logging.getLevelNamesMapping()[self._root_level],
            force=True,
        )
        for name, level in self._module_levels.items():
            self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        logging.getLogger(name).setLevel(level_name(level))

    def _processors(self, app_name: str) -> list[structlog.types.Processor]:
        renderer: structlog.types.Processor = (
            structlog.processors.JSONRenderer() if self._format == "json" else structlog.dev.ConsoleRenderer()
        )
        return [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            add_app_name(app_name),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            renderer,
        ]
