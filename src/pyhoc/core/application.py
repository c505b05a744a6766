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
"""Application bootstrap: load config, configure logging, install filters.

There is no container: the startup routine composes the pieces directly.
Each auto-configuration is a callable taking the :class:`Config` and
returning a :class:`FilterRegistration` (or ``None`` when it opts out).
"""

from __future__ import annotations

import os
import platform
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from starlette.applications import Starlette
from starlette.routing import BaseRoute

from pyhoc import __version__
from pyhoc.core.config import Config, config_properties, env_key_for
from pyhoc.cors.auto_configuration import CorsAutoConfiguration
from pyhoc.kernel.exceptions import PyHocException
from pyhoc.logging.port import LoggingPort
from pyhoc.logging.structlog_adapter import StructlogAdapter
from pyhoc.web.app import create_app
from pyhoc.web.registration import FilterRegistration

AutoConfiguration = Callable[[Config], FilterRegistration | None]

PROFILES_KEY = "pyhoc.profiles.active"


@config_properties(prefix="pyhoc.app")
@dataclass
class ApplicationProperties:
    """Application identity (pyhoc.app.*)."""

    name: str = "pyhoc-app"
    debug: bool = False


def _cors(config: Config) -> FilterRegistration | None:
    return CorsAutoConfiguration(config).cors_filter_registration()


DEFAULT_AUTO_CONFIGURATIONS: tuple[AutoConfiguration, ...] = (_cors,)


class HocApplication:
    """Bootstraps a Starlette app with every enabled pyhoc module.

    Startup sequence:
    1. Load configuration from *base_dir* (profiles from ``pyhoc.profiles.active``)
    2. Configure logging from ``pyhoc.logging.*`` through the
       :class:`LoggingPort` (structlog unless another port is supplied)
    3. Run each auto-configuration and collect its filter registration
    4. Build the Starlette app with the filters in order
    """

    def __init__(
        self,
        base_dir: str | Path | None = None,
        config: Config | None = None,
        auto_configurations: Sequence[AutoConfiguration] = DEFAULT_AUTO_CONFIGURATIONS,
        logging: LoggingPort | None = None,
    ) -> None:
        if config is None:
            if base_dir is None:
                config = Config.defaults()
            else:
                config = Config.from_sources(base_dir, active_profiles=resolve_active_profiles(base_dir))
        self.config = config
        self.properties = config.bind(ApplicationProperties)
        self._auto_configurations = list(auto_configurations)

        self._logging: LoggingPort = logging if logging is not None else StructlogAdapter()
        self._logging.configure(self.config)
        self._logger = self._logging.get_logger("pyhoc.core")

    def create_app(
        self,
        routes: Sequence[BaseRoute] | None = None,
        lifespan: object | None = None,
    ) -> Starlette:
        """Run the auto-configurations and build the application.

        Any :class:`PyHocException` raised while doing so is logged and
        re-raised; startup failures are fatal.
        """
        start = time.perf_counter()
        self._logger.info(
            "application_starting",
            app=self.properties.name,
            pyhoc_version=__version__,
            python=platform.python_version(),
            pid=os.getpid(),
        )
        for source in self.config.loaded_sources:
            self._logger.info("loaded_config", source=source)

        try:
            candidates = (auto_config(self.config) for auto_config in self._auto_configurations)
            registrations = [reg for reg in candidates if reg is not None]
            app = create_app(
                filters=registrations,
                routes=routes,
                debug=self.properties.debug,
                lifespan=lifespan,
            )
        except PyHocException as exc:
            self._logger.error("application_failed", app=self.properties.name, error=str(exc), code=exc.code)
            raise

        elapsed = time.perf_counter() - start
        self._logger.info(
            "application_started",
            app=self.properties.name,
            filters=app.state.pyhoc_filters,
            startup_time_s=round(elapsed, 3),
        )
        return app


def resolve_active_profiles(base_dir: str | Path) -> list[str]:
    """Read active profiles from ``PYHOC_PROFILES_ACTIVE`` or the base config files.

    Profiles are resolved before the full load because they decide which
    overlay files are merged.
    """
    env_profiles = os.environ.get(env_key_for(PROFILES_KEY), "")
    if env_profiles:
        return [p.strip() for p in env_profiles.split(",") if p.strip()]

    base = Config.from_sources(base_dir, load_defaults=False)
    active = base.get(PROFILES_KEY, "") or ""
    if isinstance(active, str):
        active = active.split(",")
    return [str(p).strip() for p in active if str(p).strip()]
