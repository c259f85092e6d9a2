# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""
Request tokens.

The expected token is stored in the session; forms submit it as
`REQUEST_TOKEN` and the bootstrap compares both before legacy code runs.
"""

from __future__ import annotations

import hmac
import secrets
from typing import TYPE_CHECKING, Final

import structlog

if TYPE_CHECKING:
    from collections.abc import MutableMapping

    from legacy_bridge.config.appcontext import AppContext

log: structlog.stdlib.BoundLogger
log = structlog.get_logger(__name__)

DEFAULT_TOKEN_NAME: Final[str] = "request_token"
TOKEN_BYTES: Final[int] = 32


class CsrfTokenManager:
    """Generate and check tokens kept in a session-bound storage mapping."""

    def __init__(self, storage: MutableMapping[str, str] | None = None) -> None:
        self._storage: MutableMapping[str, str] = storage if storage is not None else {}

    def get_token(self, token_id: str) -> str:
        """Return the token for `token_id`, generating it on first use."""
        if token_id not in self._storage:
            self._storage[token_id] = secrets.token_urlsafe(TOKEN_BYTES)
        return self._storage[token_id]

    def refresh_token(self, token_id: str) -> str:
        self._storage[token_id] = secrets.token_urlsafe(TOKEN_BYTES)
        return self._storage[token_id]

    def remove_token(self, token_id: str) -> str | None:
        return self._storage.pop(token_id, None)

    def is_token_valid(self, token_id: str, value: str | None) -> bool:
        expected = self._storage.get(token_id)
        if expected is None or not value:
            return False
        return hmac.compare_digest(expected, value)


class RequestToken:
    """The legacy request token, bound to one token manager and token name."""

    def __init__(self, token_manager: CsrfTokenManager, token_name: str = DEFAULT_TOKEN_NAME) -> None:
        self.token_manager = token_manager
        self.token_name = token_name

    @classmethod
    def from_container(cls, container: AppContext) -> RequestToken:
        return cls(
            container.get("csrf_token_manager"),
            container.get_parameter("csrf_token_name", DEFAULT_TOKEN_NAME),
        )

    def get(self) -> str:
        """Return the token to embed into forms."""
        return self.token_manager.get_token(self.token_name)

    def validate(self, token: str | None) -> bool:
        """Return True if `token` matches the session token."""
        valid = self.token_manager.is_token_valid(self.token_name, token)
        if not valid:
            log.warning("Request token mismatch", token_name=self.token_name)
        return valid
