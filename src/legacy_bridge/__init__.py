# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""
Legacy Bridge.

Bridges a modern request/response stack to the global state expected by the
older, non-modular parts of the CMS.

Components of this package:
--------------------------------
- `config.loader.xliff_file_loader`: Converts XLIFF translation files into
  legacy `$GLOBALS['TL_LANG']` source or writes them into the language table.
- `config.language_manager`: Loads named language files for a language, with
  English as fallback, and resolves labels.
- `config.settings_manager`: Loads the TOML configuration.
- `config.logging_bootstrap` / `config.logging_manager`: structlog setup.
- `framework.legacy_framework`: One-shot bootstrap of the legacy constants,
  session bags and request-token validation for the current request.
- `legacy.globals`: The explicit replacement of the legacy superglobals.
"""

from legacy_bridge.__about__ import __version__

__all__ = ["__version__"]
