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
"""CorsFilter: binds a CorsPolicy to a route pattern in front of Starlette's CORSMiddleware."""

from __future__ import annotations

from fnmatch import fnmatch

from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send

from pyhoc.cors.policy import CorsPolicy
from pyhoc.web.ordering import HIGHEST_PRECEDENCE, order

CATCH_ALL_PATTERN = "/**"


@order(HIGHEST_PRECEDENCE)
class CorsFilter:
    """Pure ASGI middleware applying *policy* to paths matching *path_pattern*.

    Matching requests go through ``CORSMiddleware``, which handles preflight
    short-circuiting, ``Vary`` and origin matching.  Everything else is
    passed to the wrapped app untouched.
    """

    def __init__(self, app: ASGIApp, policy: CorsPolicy, path_pattern: str = CATCH_ALL_PATTERN) -> None:
        self.app = app
        self.policy = policy
        self.path_pattern = path_pattern
        self._cors = CORSMiddleware(
            app,
            allow_origins=list(policy.allowed_origins),
            allow_methods=list(policy.allowed_methods),
            allow_headers=list(policy.allowed_headers),
            allow_credentials=policy.allow_credentials,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not fnmatch(scope["path"], self.path_pattern):
            await self.app(scope, receive, send)
            return
        await self._cors(scope, receive, send)
