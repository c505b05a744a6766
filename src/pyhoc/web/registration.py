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
"""FilterRegistration: a middleware class, its options and its place in the chain."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from starlette.middleware import Middleware

from pyhoc.web.ordering import get_order


@dataclass(frozen=True)
class FilterRegistration:
    """Registration of an ASGI middleware with the application.

    Mirrors Spring's ``FilterRegistrationBean``: the filter class is
    instantiated by Starlette when the middleware stack is built, with
    ``options`` as keyword arguments.  When ``order`` is omitted, the
    class' ``@order`` value is used.
    """

    filter_class: type
    options: Mapping[str, Any] = field(default_factory=dict)
    order: int | None = None
    name: str = ""

    @property
    def effective_order(self) -> int:
        return self.order if self.order is not None else get_order(self.filter_class)

    @property
    def display_name(self) -> str:
        return self.name or self.filter_class.__name__

    def to_middleware(self) -> Middleware:
        return Middleware(self.filter_class, **dict(self.options))
