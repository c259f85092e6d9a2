# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""Legacy global state: constants, the `TL_LANG` table and session entries."""
