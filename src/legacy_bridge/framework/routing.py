# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""Minimal named-route path generation."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, urlencode

from legacy_bridge.exceptions import RouteNotFoundError

if TYPE_CHECKING:
    from collections.abc import Mapping

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


class Router:
    """
    Generate paths from route names.

    Route paths may contain `{name}` placeholders; parameters without a
    placeholder are appended as query string.
    """

    def __init__(self, routes: Mapping[str, str] | None = None) -> None:
        self._routes: dict[str, str] = dict(routes or {})

    def add(self, name: str, path: str) -> None:
        self._routes[name] = path

    def has(self, name: str) -> bool:
        return name in self._routes

    def generate(self, name: str, parameters: Mapping[str, Any] | None = None) -> str:
        """
        Return the path of route `name`.

        Raises:
            RouteNotFoundError: If no route is registered under `name`.
            ValueError: If a placeholder has no parameter.
        """
        try:
            pattern = self._routes[name]
        except KeyError as e:
            msg = f"Route {name!r} does not exist."
            raise RouteNotFoundError(msg) from e

        remaining = dict(parameters or {})

        def _substitute(match: re.Match[str]) -> str:
            key = match.group(1)
            if key not in remaining:
                msg = f"Missing parameter {key!r} for route {name!r}."
                raise ValueError(msg)
            return quote(str(remaining.pop(key)), safe="")

        path = _PLACEHOLDER.sub(_substitute, pattern)
        if remaining:
            path = f"{path}?{urlencode(remaining)}"
        return path
