# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""
Request scope and bootstrap state of the legacy framework.

The scope decides the legacy `TL_MODE` constant; the state guards the
one-shot bootstrap against re-entry.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class RequestScope(Enum):
    """The area of the application a request belongs to."""

    FRONTEND = "frontend"
    BACKEND = "backend"
    NONE = None

    @classmethod
    def from_attribute(cls, value: Any) -> RequestScope:
        """Map the `_scope` request attribute; anything unknown is NONE."""
        try:
            return cls(value)
        except ValueError:
            return cls.NONE

    @property
    def legacy_mode(self) -> str | None:
        """Return the legacy `TL_MODE` value: "FE", "BE" or None."""
        return {RequestScope.FRONTEND: "FE", RequestScope.BACKEND: "BE"}.get(self)


class BootstrapState(Enum):
    """Lifecycle of `LegacyFramework.initialize`; a failed run returns to UNINITIALIZED."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    INITIALIZED = "initialized"
