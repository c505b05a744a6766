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
"""Tests for CORS policy resolution."""

from __future__ import annotations

import dataclasses

import pytest
from pydantic import ValidationError

from pyhoc.cors.policy import (
    DEFAULT_ALLOWED_HEADERS,
    DEFAULT_ALLOWED_METHODS,
    DEFAULT_ALLOWED_ORIGINS,
    CorsPolicy,
    resolve,
)
from pyhoc.cors.properties import CorsSettings

EXPECTED_METHODS = ("GET", "HEAD", "POST", "PATCH", "PUT", "OPTIONS", "DELETE")

EXPECTED_HEADERS = (
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


class TestResolveOrigins:
    def test_empty_origins_allow_any_origin(self):
        policy = resolve(CorsSettings())
        assert policy.allowed_origins == ("*",)
        assert DEFAULT_ALLOWED_ORIGINS == ("*",)

    def test_configured_origins_pass_through(self):
        settings = CorsSettings(allowed_origins=["https://app.example.com", "https://admin.example.com"])
        assert resolve(settings).allowed_origins == ("https://app.example.com", "https://admin.example.com")

    def test_configured_origins_are_not_deduplicated_or_reordered(self):
        origins = ["https://b.example.com", "https://a.example.com", "https://b.example.com"]
        assert resolve(CorsSettings(allowed_origins=origins)).allowed_origins == tuple(origins)

    def test_configured_origins_are_not_validated(self):
        settings = CorsSettings(allowed_origins=["not a url", "*.example.com"])
        assert resolve(settings).allowed_origins == ("not a url", "*.example.com")


class TestResolveMethods:
    def test_empty_methods_use_default_order(self):
        assert resolve(CorsSettings()).allowed_methods == EXPECTED_METHODS
        assert DEFAULT_ALLOWED_METHODS == EXPECTED_METHODS

    def test_configured_methods_pass_through_verbatim(self):
        settings = CorsSettings(allowed_methods=["delete", "GET"])
        assert resolve(settings).allowed_methods == ("delete", "GET")


class TestResolveHeaders:
    def test_empty_headers_use_default_order(self):
        assert resolve(CorsSettings()).allowed_headers == EXPECTED_HEADERS
        assert DEFAULT_ALLOWED_HEADERS == EXPECTED_HEADERS
        assert len(EXPECTED_HEADERS) == 10

    def test_configured_headers_pass_through_verbatim(self):
        settings = CorsSettings(allowed_headers=["X-Api-Key"])
        assert resolve(settings).allowed_headers == ("X-Api-Key",)


class TestCredentials:
    @pytest.mark.parametrize(
        "settings",
        [
            CorsSettings(),
            CorsSettings(allowed_origins=["https://app.example.com"]),
            CorsSettings(allowed_methods=["GET"], allowed_headers=["Accept"]),
            CorsSettings(enabled=False),
        ],
    )
    def test_credentials_always_allowed(self, settings):
        assert resolve(settings).allow_credentials is True


class TestResolveIsPure:
    def test_same_input_gives_equal_output(self):
        settings = CorsSettings(allowed_origins=["https://app.example.com"])
        assert resolve(settings) == resolve(settings)

    def test_settings_cannot_be_changed_after_load(self):
        settings = CorsSettings(allowed_origins=["https://app.example.com"])
        with pytest.raises(AttributeError):
            settings.allowed_origins.append("https://late.example.com")  # type: ignore[attr-defined]
        with pytest.raises(ValidationError):
            settings.allowed_origins = ("https://late.example.com",)  # type: ignore[misc]
        assert resolve(settings).allowed_origins == ("https://app.example.com",)

    def test_every_list_is_non_empty(self):
        policy = resolve(CorsSettings())
        assert policy.allowed_origins
        assert policy.allowed_methods
        assert policy.allowed_headers


class TestScenarios:
    def test_nothing_configured(self):
        policy = resolve(CorsSettings(allowed_origins=[], allowed_methods=[], allowed_headers=[]))
        assert policy == CorsPolicy(
            allowed_origins=("*",),
            allowed_methods=EXPECTED_METHODS,
            allowed_headers=EXPECTED_HEADERS,
            allow_credentials=True,
        )

    def test_everything_configured(self):
        policy = resolve(
            CorsSettings(
                allowed_origins=["https://app.example.com"],
                allowed_methods=["GET"],
                allowed_headers=["Content-Type"],
            )
        )
        assert policy == CorsPolicy(
            allowed_origins=("https://app.example.com",),
            allowed_methods=("GET",),
            allowed_headers=("Content-Type",),
            allow_credentials=True,
        )


class TestCorsPolicy:
    def test_policy_is_frozen(self):
        policy = resolve(CorsSettings())
        with pytest.raises(dataclasses.FrozenInstanceError):
            policy.allow_credentials = False  # type: ignore[misc]

    def test_allows_any_origin(self):
        assert resolve(CorsSettings()).allows_any_origin is True
        assert resolve(CorsSettings(allowed_origins=["https://app.example.com"])).allows_any_origin is False
