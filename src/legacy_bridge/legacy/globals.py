# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""
Explicit replacement of the legacy superglobals.

Older parts of the CMS read their state from constants (`TL_MODE`,
`TL_SCRIPT`, ...), from `$GLOBALS` (`TL_LANGUAGE`, `TL_LANG`) and from
`$_SESSION` (`BE_DATA`, `FE_DATA`). `LegacyGlobals` keeps these three
areas as plain Python objects which are passed by reference to the loader
and the framework bootstrap.
"""

from __future__ import annotations

from typing import Any

import structlog

from legacy_bridge.exceptions import ConstantAlreadyDefinedError
from legacy_bridge.legacy.language_table import LanguageTable

log: structlog.stdlib.BoundLogger
log = structlog.get_logger(__name__)

LANGUAGE_TABLE_KEY = "TL_LANG"


class LegacyGlobals:
    """
    Process-scoped legacy state.

    Attributes
    ----------
    constants : dict[str, Any]
        Define-once values, the equivalent of PHP constants.
    variables : dict[str, Any]
        Mutable globals such as `TL_LANGUAGE` and the `TL_LANG` table.
    session : dict[str, Any]
        Legacy session entries, e.g. the `BE_DATA` and `FE_DATA` bags.
    """

    def __init__(self, language_table: LanguageTable | None = None) -> None:
        if language_table is None:
            language_table = LanguageTable()
        self.constants: dict[str, Any] = {}
        self.variables: dict[str, Any] = {LANGUAGE_TABLE_KEY: language_table}
        self.session: dict[str, Any] = {}

    @property
    def language_table(self) -> LanguageTable:
        """Return the `TL_LANG` table."""
        return self.variables[LANGUAGE_TABLE_KEY]

    def define(self, name: str, value: Any) -> None:
        """
        Define a constant.

        Raises:
            ConstantAlreadyDefinedError: If `name` has been defined before.
        """
        if name in self.constants:
            msg = f"Constant {name} already defined."
            raise ConstantAlreadyDefinedError(msg)
        self.constants[name] = value
        log.debug("Defined legacy constant", name=name, value=value)

    def define_many(self, constants: dict[str, Any]) -> None:
        """
        Define several constants at once.

        Either all of them are defined or, if one already exists, none.
        """
        clashes = sorted(name for name in constants if name in self.constants)
        if clashes:
            msg = f"Constants already defined: {', '.join(clashes)}"
            raise ConstantAlreadyDefinedError(msg)
        for name, value in constants.items():
            self.define(name, value)

    def defined(self, name: str) -> bool:
        """Return True if the constant `name` exists."""
        return name in self.constants

    def constant(self, name: str) -> Any:
        """Return the value of constant `name`; KeyError if undefined."""
        return self.constants[name]


class LegacyGlobalsSingleton:
    """Holds the process-wide `LegacyGlobals` instance."""

    _instance: LegacyGlobals | None = None

    @classmethod
    def get_instance(cls) -> LegacyGlobals:
        """Return the shared instance, creating it on first use."""
        if cls._instance is None:
            cls._instance = LegacyGlobals()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """
        Drop the shared instance.

        Primarily for testing.
        """
        cls._instance = None


__all__ = ["LANGUAGE_TABLE_KEY", "LegacyGlobals", "LegacyGlobalsSingleton"]
