# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""
Adapter for legacy classes.

Legacy code is called through class-level methods (`Config.get(...)`,
`RequestToken.validate(...)`). Wrapping the class, or an object bound to
the current container, in an `Adapter` lets callers swap it for a test
double without touching the legacy class.
"""

from __future__ import annotations

from typing import Any


class Adapter:
    """Forward attribute access to a legacy class or object."""

    def __init__(self, target: Any) -> None:
        self._target = target

    @property
    def target(self) -> Any:
        """Return the wrapped class or object."""
        return self._target

    def __getattr__(self, name: str) -> Any:
        if name == "_target":
            raise AttributeError(name)
        return getattr(self._target, name)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._target!r})"
