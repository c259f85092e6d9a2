# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""
The legacy language table.

`LanguageTable` is the nested mapping historically known as
`$GLOBALS['TL_LANG']`. Keys are strings or integers, leaves are strings.

Writing a path merges into the existing structure: sibling keys survive,
and a scalar found where a mapping is needed is replaced by an empty
mapping before the write descends (last writer wins).
"""

from __future__ import annotations

import copy
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

Key = str | int


class LanguageTable(MutableMapping):
    """Nested, mutable mapping of language labels."""

    def __init__(self, data: dict[Key, Any] | None = None) -> None:
        self._data: dict[Key, Any] = copy.deepcopy(data) if data else {}

    def __getitem__(self, key: Key) -> Any:
        return self._data[key]

    def __setitem__(self, key: Key, value: Any) -> None:
        self._data[key] = value

    def __delitem__(self, key: Key) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[Key]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._data!r})"

    def set_path(self, path: Sequence[Key], value: Any) -> None:
        """
        Write `value` at the nested `path`.

        Intermediate levels are created as needed. A non-mapping value on
        the way is overwritten with an empty mapping.

        Raises:
            ValueError: If `path` is empty.
        """
        if not path:
            msg = "Cannot write an empty path into the language table."
            raise ValueError(msg)

        node: dict[Key, Any] = self._data
        for key in path[:-1]:
            child = node.get(key)
            if not isinstance(child, dict):
                child = {}
                node[key] = child
            node = child
        node[path[-1]] = value

    def get_path(self, path: Sequence[Key], default: Any = None) -> Any:
        """Return the value at `path`, or `default` if any level is missing."""
        node: Any = self._data
        for key in path:
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def has_path(self, path: Sequence[Key]) -> bool:
        """Return True if a value is stored at `path`."""
        sentinel = object()
        return self.get_path(path, sentinel) is not sentinel

    def as_dict(self) -> dict[Key, Any]:
        """Return a deep copy of the table."""
        return copy.deepcopy(self._data)
