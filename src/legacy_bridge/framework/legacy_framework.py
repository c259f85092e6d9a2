# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""
Legacy framework bootstrap.

Prepares the global state legacy code depends on, once per process:

1. the constants `TL_MODE`, `TL_START`, `TL_ROOT`, `TL_REFERER_ID`,
   `TL_SCRIPT`, `TL_PATH`, `BE_USER_LOGGED_IN` and `FE_USER_LOGGED_IN`,
2. the active language `TL_LANGUAGE`,
3. the `BE_DATA` and `FE_DATA` session bags,

after checking the request token and the installation state. Everything is
computed and validated first and committed last, so a failed bootstrap
leaves no partial state behind.

While the bootstrap runs, the configured warning categories are ignored;
the previous warning filters are restored afterwards.

Typical usage:
--------------
>>> framework = LegacyFramework.from_settings(request_stack, router, settings)
>>> framework.set_container(app_context)
>>> framework.initialize()
"""

from __future__ import annotations

import builtins
import time
import warnings
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

import structlog

from legacy_bridge.exceptions import (
    ContainerNotSetError,
    IncompleteInstallationError,
    InvalidRequestTokenError,
)
from legacy_bridge.framework.adapter import Adapter
from legacy_bridge.framework.http import BACKEND_BAG, FRONTEND_BAG
from legacy_bridge.framework.legacy_config import LegacyConfig
from legacy_bridge.framework.request_token import RequestToken
from legacy_bridge.framework.scope import BootstrapState, RequestScope
from legacy_bridge.legacy.globals import LegacyGlobals, LegacyGlobalsSingleton

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

    from legacy_bridge.config.appcontext import AppContext
    from legacy_bridge.config.settings_manager import SettingsManager
    from legacy_bridge.framework.http import Request, RequestStack
    from legacy_bridge.framework.routing import Router

log: structlog.stdlib.BoundLogger
log = structlog.get_logger(__name__)

DEFAULT_LANGUAGE: Final[str] = "en"
DEFAULT_INSTALLER_ROUTES: Final[tuple[str, ...]] = ("installer", "installer_redirect")
TOKEN_FIELD: Final[str] = "REQUEST_TOKEN"


def resolve_warning_categories(names: Iterable[str | type[Warning]]) -> tuple[type[Warning], ...]:
    """
    Turn warning category names into classes.

    Raises:
        ValueError: If a name is not a built-in warning category.
    """
    categories: list[type[Warning]] = []
    for name in names:
        category = getattr(builtins, name, None) if isinstance(name, str) else name
        if not (isinstance(category, type) and issubclass(category, Warning)):
            msg = f"Unknown warning category: {name!r}"
            raise ValueError(msg)
        categories.append(category)
    return tuple(categories)


class LegacyFramework:
    """
    Initialize the legacy global state for the current request.

    Attributes
    ----------
    root_dir : Path
        The installation root, exposed as `TL_ROOT`.
    legacy_globals : LegacyGlobals
        The store the constants, language and session bags are written to.
    """

    def __init__(  # noqa: PLR0913
        self,
        request_stack: RequestStack,
        router: Router,
        root_dir: str | Path,
        error_level: Iterable[str | type[Warning]] | None = None,
        adapters: Mapping[type, Any] | None = None,
        *,
        legacy_globals: LegacyGlobals | None = None,
        default_language: str = DEFAULT_LANGUAGE,
        installer_routes: Iterable[str] = DEFAULT_INSTALLER_ROUTES,
    ) -> None:
        self._request_stack = request_stack
        self._router = router
        self.root_dir = Path(root_dir)
        self._ignored_warnings = resolve_warning_categories(error_level) if error_level is not None else None
        self._adapters: dict[type, Any] = dict(adapters or {})
        self.legacy_globals = legacy_globals if legacy_globals is not None else LegacyGlobalsSingleton.get_instance()
        self._default_language = default_language
        self._installer_routes = frozenset(installer_routes)
        self._container: AppContext | None = None
        self._state = BootstrapState.UNINITIALIZED

    @classmethod
    def from_settings(
        cls,
        request_stack: RequestStack,
        router: Router,
        settings: SettingsManager,
        **kwargs: Any,
    ) -> LegacyFramework:
        """Create the framework from the `framework` settings section."""
        section = settings.get_section("framework")
        return cls(
            request_stack,
            router,
            section.get("root_dir", "."),
            section.get("error_reporting", {}).get("ignore"),
            default_language=section.get("default_language", DEFAULT_LANGUAGE),
            installer_routes=section.get("installer_routes", DEFAULT_INSTALLER_ROUTES),
            **kwargs,
        )

    @property
    def state(self) -> BootstrapState:
        return self._state

    def set_container(self, container: AppContext | None = None) -> None:
        self._container = container

    def is_initialized(self) -> bool:
        """Return True once `initialize()` has started or finished."""
        return self._state is not BootstrapState.UNINITIALIZED

    def initialize(self) -> None:
        """
        Initialize the legacy framework.

        Does nothing if the framework has already been initialized.

        Raises:
            ContainerNotSetError: If no container has been set.
            InvalidRequestTokenError: If a POST request carries a wrong token.
            IncompleteInstallationError: If the installation is incomplete
                and the route is not an installer route.
        """
        if self.is_initialized():
            return

        if self._container is None:
            msg = "The service container has not been set."
            raise ContainerNotSetError(msg)

        self._state = BootstrapState.INITIALIZING
        try:
            with self._scoped_error_reporting():
                request = self._request_stack.get_current_request()
                constants = self._collect_constants(request)
                language = self._get_language(request)
                session_bags = self._collect_session_bags(request)
                self._validate_request_token(request)
                self._validate_installation(request)

                self.legacy_globals.define_many(constants)
                self.legacy_globals.variables["TL_LANGUAGE"] = language
                self.legacy_globals.session.update(session_bags)
        except Exception:
            self._state = BootstrapState.UNINITIALIZED
            raise

        self._state = BootstrapState.INITIALIZED
        log.info(
            "Legacy framework initialized",
            mode=constants["TL_MODE"],
            script=constants["TL_SCRIPT"],
            language=language,
        )

    def get_adapter(self, cls: type) -> Any:
        """
        Return the adapter for a legacy class.

        Adapters passed to the constructor win. Otherwise classes offering
        `from_container()` are bound to the current container, everything
        else is wrapped as is. Adapters are cached per class.
        """
        if cls not in self._adapters:
            if hasattr(cls, "from_container"):
                if self._container is None:
                    msg = f"The service container has not been set; cannot create an adapter for {cls.__name__}."
                    raise ContainerNotSetError(msg)
                self._adapters[cls] = Adapter(cls.from_container(self._container))
            else:
                self._adapters[cls] = Adapter(cls)
        return self._adapters[cls]

    @staticmethod
    def create_instance(legacy_class: type, *args: Any) -> Any:
        """Instantiate a legacy class, using `get_instance()` for singletons."""
        factory = getattr(legacy_class, "get_instance", None)
        if callable(factory):
            return factory(*args)
        return legacy_class(*args)

    @contextmanager
    def _scoped_error_reporting(self) -> Iterator[None]:
        if self._ignored_warnings is None:
            yield
            return

        with warnings.catch_warnings():
            for category in self._ignored_warnings:
                warnings.simplefilter("ignore", category)
            yield

    def _collect_constants(self, request: Request | None) -> dict[str, Any]:
        scope = RequestScope.from_attribute(request.attributes.get("_scope")) if request else RequestScope.NONE

        return {
            "TL_MODE": scope.legacy_mode,
            "TL_START": time.time(),
            "TL_ROOT": str(self.root_dir),
            "TL_REFERER_ID": request.attributes.get("_referer_id", "") if request else None,
            "TL_SCRIPT": self._get_script_path(request),
            "TL_PATH": request.base_path if request else None,
            "BE_USER_LOGGED_IN": False,
            "FE_USER_LOGGED_IN": False,
        }

    def _get_script_path(self, request: Request | None) -> str | None:
        if request is None or not request.attributes.get("_route"):
            return None

        path = self._router.generate(request.attributes["_route"], request.attributes.get("_route_params"))
        return path.removeprefix(request.base_path).removeprefix("/")

    def _get_language(self, request: Request | None) -> str:
        if request is None:
            return self._default_language
        return request.locale.replace("_", "-")

    @staticmethod
    def _collect_session_bags(request: Request | None) -> dict[str, Any]:
        if request is None or request.session is None:
            return {}

        return {
            "BE_DATA": request.session.get_bag(BACKEND_BAG),
            "FE_DATA": request.session.get_bag(FRONTEND_BAG),
        }

    def _validate_request_token(self, request: Request | None) -> None:
        if request is None or request.attributes.get("_token_check") is not True or request.method != "POST":
            return

        if request.is_xml_http_request() or self.legacy_globals.defined("BYPASS_TOKEN_CHECK"):
            return

        if not self.get_adapter(RequestToken).validate(request.form.get(TOKEN_FIELD)):
            msg = "Invalid request token. Please reload the page and try again."
            raise InvalidRequestTokenError(msg)

    def _validate_installation(self, request: Request | None) -> None:
        if request is None or request.attributes.get("_route") in self._installer_routes:
            return

        if not self.get_adapter(LegacyConfig).is_complete():
            msg = "The installation has not been completed. Open the install tool to continue."
            raise IncompleteInstallationError(msg)
