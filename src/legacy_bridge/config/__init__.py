# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""
Legacy Bridge Configuration Module.

This module groups everything the bridge needs before a request is handled:
settings, logging and language resources.

Components of this module:
--------------------------------
- `config.toml`: The primary configuration file. Holds the logger sections,
  the framework section (root directory, default language, request-token
  name, installer routes, ignored warning categories), the language resource
  directories and the installation state.
- `settings_manager.py`: Loads and persists the TOML settings.
- `logging_bootstrap.py`: Minimal structlog setup for startup.
- `logging_manager.py`: Full console and file logging from the settings.
- `language_manager.py`: Loads named language files through the XLIFF
  loader into the `TL_LANG` table.
- `loader/xliff_file_loader.py`: The XLIFF to `TL_LANG` converter.

Usage:
------
1. Call `bootstrap_logging()` as early as possible.
2. Load the settings with `SettingsManagerSingleton.initialize_from_context()`.
3. Apply the full logging configuration with `LoggingManagerSingleton`.
4. Configure the `LanguageManagerSingleton` and load language files.
"""
