# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""Read-only view of the settings in the shape legacy code expects."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from legacy_bridge.config.appcontext import AppContext
    from legacy_bridge.config.settings_manager import SettingsManager


class LegacyConfig:
    """
    Expose the `framework` settings section and the installation state.

    Attributes
    ----------
    settings : SettingsManager
        The loaded application settings.
    """

    def __init__(self, settings: SettingsManager) -> None:
        self.settings = settings

    @classmethod
    def from_container(cls, container: AppContext) -> LegacyConfig:
        return cls(container.settings)

    def is_complete(self) -> bool:
        """Return True once the installation has been completed."""
        return bool(self.settings.get_setting("install", "completed", False))

    def get(self, key: str, default: Any = None) -> Any:
        """Return a value of the `framework` section."""
        return self.settings.get_setting("framework", key, default)
