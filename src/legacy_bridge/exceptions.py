# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""Exception hierarchy for the legacy bridge."""

from __future__ import annotations


class LegacyBridgeError(Exception):
    """Base class for all errors raised by the legacy bridge."""


# --- Settings ---


class SettingsConfigurationError(LegacyBridgeError):
    """Raised when a configuration file cannot be parsed."""


class ConfigFileNotFoundError(LegacyBridgeError):
    """Raised when a configuration file cannot be accessed."""


class SettingsWriteConfigurationError(LegacyBridgeError):
    """Raised when no configuration location is writable."""


# --- Logging ---


class InvalidLogLevelError(LegacyBridgeError):
    """Raised when a configured log level is unknown."""


class LogHandlerError(LegacyBridgeError):
    """Raised when a log handler cannot be set up."""


class LogDirectoryError(LegacyBridgeError):
    """Raised when the log directory cannot be created."""


# --- Language files ---


class LanguageFileError(LegacyBridgeError):
    """Raised when a language file cannot be read or is not well-formed."""


class NestingLevelExceededError(LegacyBridgeError, IndexError):
    """
    Raised when a translation unit id has too few or too many levels.

    The legacy language table only supports two to four nested keys.
    """


# --- Framework ---


class LogicError(LegacyBridgeError, RuntimeError):
    """Programmer error: the framework is used in a way it cannot support."""


class ContainerNotSetError(LogicError):
    """Raised when the framework is initialized without a service container."""


class ConstantAlreadyDefinedError(LogicError):
    """Raised when a legacy constant is defined a second time."""


class ServiceNotFoundError(LegacyBridgeError, KeyError):
    """Raised when a service id is not registered in the container."""


class RouteNotFoundError(LegacyBridgeError, KeyError):
    """Raised when the router does not know a route name."""


class InvalidRequestTokenError(LegacyBridgeError):
    """Raised when the submitted request token does not match the session token."""


class IncompleteInstallationError(LegacyBridgeError):
    """Raised when the installation has not been completed yet."""
