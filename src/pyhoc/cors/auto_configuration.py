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
"""CORS auto-configuration: settings to policy to a registered filter."""

from __future__ import annotations

import structlog

from pyhoc.core.config import Config
from pyhoc.cors.filter import CATCH_ALL_PATTERN, CorsFilter
from pyhoc.cors.policy import CorsPolicy, resolve
from pyhoc.cors.properties import CorsSettings
from pyhoc.web.ordering import HIGHEST_PRECEDENCE
from pyhoc.web.registration import FilterRegistration

logger = structlog.get_logger("pyhoc.cors")


class CorsAutoConfiguration:
    """Builds the CORS filter registration from ``pyhoc.cors.*``.

    The filter is registered at ``HIGHEST_PRECEDENCE`` on the catch-all
    pattern so that preflight requests are answered before authentication,
    logging or body parsing run.
    """

    def __init__(self, config: Config) -> None:
        self._config = config

    def cors_settings(self) -> CorsSettings:
        return self._config.bind(CorsSettings)

    def cors_policy(self, settings: CorsSettings | None = None) -> CorsPolicy:
        policy = resolve(settings if settings is not None else self.cors_settings())
        logger.info(
            "cors_policy_resolved",
            allowed_origins=list(policy.allowed_origins),
            allowed_methods=list(policy.allowed_methods),
            allowed_headers=list(policy.allowed_headers),
            allow_credentials=policy.allow_credentials,
        )
        if policy.allows_any_origin and policy.allow_credentials:
            logger.warning(
                "cors_wildcard_origin_with_credentials",
                hint=(
                    'browsers reject "*" with credentials, so the request origin is echoed back; '
                    "set pyhoc.cors.allowed-origins to restrict credentialed requests"
                ),
            )
        return policy

    def cors_filter_registration(self) -> FilterRegistration | None:
        settings = self.cors_settings()
        if not settings.enabled:
            logger.info("cors_disabled")
            return None

        return FilterRegistration(
            filter_class=CorsFilter,
            options={"policy": self.cors_policy(settings), "path_pattern": CATCH_ALL_PATTERN},
            order=HIGHEST_PRECEDENCE,
            name="corsFilter",
        )
