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
"""Starlette application factory wiring registered filters in order."""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from starlette.applications import Starlette
from starlette.routing import BaseRoute

from pyhoc.kernel.exceptions import FilterRegistrationException
from pyhoc.web.registration import FilterRegistration

logger = structlog.get_logger("pyhoc.web")


def create_app(
    filters: Sequence[FilterRegistration] = (),
    routes: Sequence[BaseRoute] | None = None,
    debug: bool = False,
    lifespan: object | None = None,
) -> Starlette:
    """Create a Starlette application with the given filter registrations.

    Filters are sorted by order, lowest first; Starlette treats the first
    middleware as the outermost, so a ``HIGHEST_PRECEDENCE`` filter sees
    every request before anything else in the chain.

    The middleware stack is built eagerly.  A filter that cannot be
    constructed raises :class:`FilterRegistrationException` here, at startup,
    rather than on the first request.
    """
    ordered = sorted(filters, key=lambda reg: reg.effective_order)

    app = Starlette(
        debug=debug,
        routes=list(routes or []),
        middleware=[reg.to_middleware() for reg in ordered],
        lifespan=lifespan,  # type: ignore[arg-type]
    )

    try:
        app.middleware_stack = app.build_middleware_stack()
    except Exception as exc:
        names = [reg.display_name for reg in ordered]
        raise FilterRegistrationException(
            f"Cannot construct filter chain {names}: {exc}",
            code="FILTER_CONSTRUCTION_FAILED",
            context={"filters": names},
        ) from exc

    app.state.pyhoc_filters = [reg.display_name for reg in ordered]
    for position, reg in enumerate(ordered):
        logger.debug("filter_registered", filter=reg.display_name, order=reg.effective_order, position=position)
    return app
