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
"""pyhoc CORS: resolve a CORS policy from configuration and install its filter."""

from pyhoc.cors.auto_configuration import CorsAutoConfiguration
from pyhoc.cors.filter import CATCH_ALL_PATTERN, CorsFilter
from pyhoc.cors.policy import (
    DEFAULT_ALLOWED_HEADERS,
    DEFAULT_ALLOWED_METHODS,
    DEFAULT_ALLOWED_ORIGINS,
    CorsPolicy,
    resolve,
)
from pyhoc.cors.properties import CorsSettings

__all__ = [
    "CATCH_ALL_PATTERN",
    "DEFAULT_ALLOWED_HEADERS",
    "DEFAULT_ALLOWED_METHODS",
    "DEFAULT_ALLOWED_ORIGINS",
    "CorsAutoConfiguration",
    "CorsFilter",
    "CorsPolicy",
    "CorsSettings",
    "resolve",
]
