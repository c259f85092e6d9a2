# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""
Request, request stack and session objects consumed by the bootstrap.

Only the surface the legacy bootstrap reads is modelled: routing
attributes, method, headers, form data, locale, base path and the
session with its named attribute bags.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    from collections.abc import Iterator

BACKEND_BAG: Final[str] = "backend"
FRONTEND_BAG: Final[str] = "frontend"


class Headers(MutableMapping):
    """Case-insensitive HTTP header mapping."""

    def __init__(self, headers: dict[str, str] | None = None) -> None:
        self._headers: dict[str, tuple[str, str]] = {}
        for name, value in (headers or {}).items():
            self[name] = value

    def __getitem__(self, name: str) -> str:
        return self._headers[name.lower()][1]

    def __setitem__(self, name: str, value: str) -> None:
        self._headers[name.lower()] = (name, value)

    def __delitem__(self, name: str) -> None:
        del self._headers[name.lower()]

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._headers.values())

    def __len__(self) -> int:
        return len(self._headers)


class ArrayAttributeBag(dict):
    """A named session bag that behaves like a plain dict."""

    def __init__(self, name: str, storage_key: str | None = None) -> None:
        super().__init__()
        self.name = name
        self.storage_key = storage_key or f"_{name}_attributes"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r}, {dict(self)!r})"


class Session:
    """
    In-memory session with named attribute bags.

    The backend and frontend bags are always registered.
    """

    def __init__(self, session_id: str = "") -> None:
        self.id = session_id
        self.attributes: dict[str, Any] = {}
        self._bags: dict[str, ArrayAttributeBag] = {}
        self.register_bag(ArrayAttributeBag(BACKEND_BAG))
        self.register_bag(ArrayAttributeBag(FRONTEND_BAG))

    def register_bag(self, bag: ArrayAttributeBag) -> None:
        self._bags[bag.name] = bag

    def get_bag(self, name: str) -> ArrayAttributeBag:
        """Return the bag registered as `name`; KeyError if unknown."""
        return self._bags[name]

    def has_bag(self, name: str) -> bool:
        return name in self._bags


@dataclass
class Request:
    """An incoming HTTP request as seen by the bootstrap."""

    method: str = "GET"
    attributes: dict[str, Any] = field(default_factory=dict)
    headers: Headers = field(default_factory=Headers)
    form: dict[str, str] = field(default_factory=dict)
    locale: str = "en"
    base_path: str = ""
    session: Session | None = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if not isinstance(self.headers, Headers):
            self.headers = Headers(self.headers)

    def is_xml_http_request(self) -> bool:
        """Return True for requests sent by `XMLHttpRequest`."""
        return self.headers.get("X-Requested-With") == "XMLHttpRequest"


class RequestStack:
    """Stack of the requests currently being handled (main plus sub-requests)."""

    def __init__(self) -> None:
        self._requests: list[Request] = []

    def push(self, request: Request) -> None:
        self._requests.append(request)

    def pop(self) -> Request | None:
        return self._requests.pop() if self._requests else None

    def get_current_request(self) -> Request | None:
        return self._requests[-1] if self._requests else None

    def get_main_request(self) -> Request | None:
        return self._requests[0] if self._requests else None
