# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""
Legacy Bridge Application Context Module.

The `AppContext` is the service container the framework bootstrap is
attached to. It holds the loaded settings, the registered services (token
manager, request stack, ...) and the container parameters, and offers
module loggers.

Usage Example:
--------------
```python
context = AppContext.create(
    settings_instance=SettingsManagerSingleton.get_instance(),
    services={"csrf_token_manager": CsrfTokenManager(session.attributes)},
    parameters={"csrf_token_name": "request_token"},
)
framework.set_container(context)
framework.initialize()
```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from legacy_bridge.exceptions import ServiceNotFoundError

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from legacy_bridge.config.settings_manager import SettingsManager


@dataclass
class AppContext:
    """
    Service container of the legacy bridge.

    Attributes
    ----------
    settings : SettingsManager
        An already loaded settings manager.
    services : dict[str, Any]
        Services by id.
    parameters : dict[str, Any]
        Container parameters by name.
    """

    settings: SettingsManager
    services: dict[str, Any] = field(default_factory=dict)
    parameters: dict[str, Any] = field(default_factory=dict)

    def get(self, service_id: str) -> Any:
        """
        Return the service registered as `service_id`.

        Raises:
            ServiceNotFoundError: If no such service exists.
        """
        try:
            return self.services[service_id]
        except KeyError as e:
            msg = f"You have requested a non-existent service {service_id!r}."
            raise ServiceNotFoundError(msg) from e

    def has(self, service_id: str) -> bool:
        return service_id in self.services

    def set(self, service_id: str, service: Any) -> None:
        self.services[service_id] = service

    def get_parameter(self, name: str, default: Any = None) -> Any:
        return self.parameters.get(name, default)

    def get_module_logger(self, name: str) -> BoundLogger:
        """Return a structlog logger for module `name`."""
        return structlog.get_logger(name)

    @classmethod
    def create(
        cls,
        settings_instance: SettingsManager,
        services: dict[str, Any] | None = None,
        parameters: dict[str, Any] | None = None,
    ) -> AppContext:
        """
        Create an `AppContext` from an already loaded settings manager.

        The `csrf_token_name` parameter defaults to the `framework` setting
        of the same name.
        """
        merged_parameters = {
            "csrf_token_name": settings_instance.get_setting("framework", "csrf_token_name", "request_token"),
            **(parameters or {}),
        }
        return cls(settings=settings_instance, services=dict(services or {}), parameters=merged_parameters)
