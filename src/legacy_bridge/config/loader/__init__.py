# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""Loaders for language resources."""

from legacy_bridge.config.loader.xliff_file_loader import XliffFileLoader

__all__ = ["XliffFileLoader"]
