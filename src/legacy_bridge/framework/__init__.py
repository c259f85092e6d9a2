# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""The legacy framework bootstrap and the request-side objects it consumes."""

from legacy_bridge.framework.legacy_framework import LegacyFramework
from legacy_bridge.framework.scope import BootstrapState, RequestScope

__all__ = ["BootstrapState", "LegacyFramework", "RequestScope"]
