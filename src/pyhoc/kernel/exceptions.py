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
"""Exception hierarchy for pyhoc.

Every failure raised by the library derives from :class:`PyHocException`, so
applications can catch the base class during startup and report a single
fatal error.
"""

from __future__ import annotations


class PyHocException(Exception):
    """Base exception for all pyhoc errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CONFIG_001").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


class ConfigurationException(PyHocException):
    """Configuration could not be loaded or bound to a properties class."""


class FilterRegistrationException(PyHocException):
    """A registered filter could not be constructed at startup."""
