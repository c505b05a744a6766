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
"""CORS policy resolution.

:func:`resolve` turns raw :class:`CorsSettings` into the effective
:class:`CorsPolicy`, substituting fixed defaults for every empty list.
Configured lists are used verbatim: no validation, deduplication or
reordering.
"""

from __future__ import annotations

from dataclasses import dataclass

from pyhoc.cors.properties import CorsSettings

DEFAULT_ALLOWED_ORIGINS: tuple[str, ...] = ("*",)

DEFAULT_ALLOWED_METHODS: tuple[str, ...] = (
    "GET",
    "HEAD",
    "POST",
    "PATCH",
    "PUT",
    "OPTIONS",
    "DELETE",
)

DEFAULT_ALLOWED_HEADERS: tuple[str, ...] = (
    "Origin",
    "Referer",
    "User-Agent",
    "Cache-Control",
    "Content-Type",
    "Accept",
    "Authorization",
    "X-Requested-With",
    "X-Forwarded-For",
    "x-ijt",
)


@dataclass(frozen=True)
class CorsPolicy:
    """The resolved policy handed to the CORS filter.

    All three sequences are non-empty.  Credentials are always allowed.
    """

    allowed_origins: tuple[str, ...]
    allowed_methods: tuple[str, ...]
    allowed_headers: tuple[str, ...]
    allow_credentials: bool = True

    @property
    def allows_any_origin(self) -> bool:
        return "*" in self.allowed_origins


def _or_default(configured: tuple[str, ...], default: tuple[str, ...]) -> tuple[str, ...]:
    return configured if configured else default


def resolve(settings: CorsSettings) -> CorsPolicy:
    """Resolve *settings* into a policy; an empty list takes its default, anything else passes through as is."""
    return CorsPolicy(
        allowed_origins=_or_default(settings.allowed_origins, DEFAULT_ALLOWED_ORIGINS),
        allowed_methods=_or_default(settings.allowed_methods, DEFAULT_ALLOWED_METHODS),
        allowed_headers=_or_default(settings.allowed_headers, DEFAULT_ALLOWED_HEADERS),
        allow_credentials=True,
    )
