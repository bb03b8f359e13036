# Copyright 2026 ConfParse Contributors
# SPDX-License-Identifier: Apache-2.0

"""Settings controlling how configuration files are parsed."""

from confparse.settings.config import (
    DEFAULT_MAX_INCLUDE_DEPTH,
    INCLUDE_BASE_CWD,
    INCLUDE_BASE_FILE,
    ParserSettings,
    SettingsError,
    load_settings,
)

__all__ = [
    "DEFAULT_MAX_INCLUDE_DEPTH",
    "INCLUDE_BASE_CWD",
    "INCLUDE_BASE_FILE",
    "ParserSettings",
    "SettingsError",
    "load_settings",
]
