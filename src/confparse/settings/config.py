# Copyright 2026 ConfParse Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parser settings and their YAML loader."""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from pathlib import Path

import yaml

# ###############
# Public Interface
# ###############

INCLUDE_BASE_FILE = "file"
INCLUDE_BASE_CWD = "cwd"

DEFAULT_MAX_INCLUDE_DEPTH = 32


class SettingsError(Exception):
    """Raised when a settings file is invalid or cannot be loaded."""


@dataclass
class ParserSettings:
    """Options controlling how configuration files are read.

    Attributes:
        encoding: Text encoding used to decode every source file.
        max_include_depth: Maximum nesting of ``include`` directives below the root file.
        include_base: ``"file"`` resolves relative include paths against the
            including file's directory, ``"cwd"`` against the working directory.
    """

    encoding: str = "utf-8"
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH
    include_base: str = INCLUDE_BASE_FILE


def load_settings(path: Path) -> ParserSettings:
    """Load parser settings from a YAML file.

    Every key is optional; missing keys keep their defaults.

    Args:
        path: Path to the YAML settings file.

    Returns:
        A ParserSettings instance populated from the file.

    Raises:
        SettingsError: If the file cannot be read or holds invalid settings.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise SettingsError(f"Settings file not found: {path}") from None
    except OSError as exc:
        raise SettingsError(f"Cannot read settings file: {exc}") from exc

    return _parse_settings(text, source_label=str(path))


# ################
# Implementation
# ################

_KNOWN_KEYS = frozenset({"encoding", "max-include-depth", "include-base"})


def _parse_settings(text: str, source_label: str = "<string>") -> ParserSettings:
    """Parse settings YAML text into a ParserSettings.

    An empty document yields the defaults.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise SettingsError(f"Invalid YAML in {source_label}: {exc}") from exc

    if data is None:
        return ParserSettings()
    if not isinstance(data, dict):
        raise SettingsError(f"{source_label}: settings must be a YAML mapping")

    unknown = sorted(str(key) for key in data if key not in _KNOWN_KEYS)
    if unknown:
        raise SettingsError(f"{source_label}: unknown setting(s): {', '.join(unknown)}")

    settings = ParserSettings()

    if "encoding" in data:
        encoding = data["encoding"]
        if not isinstance(encoding, str):
            raise SettingsError(f"{source_label}: 'encoding' must be a string")
        try:
            codecs.lookup(encoding)
        except LookupError:
            raise SettingsError(f"{source_label}: unknown encoding '{encoding}'") from None
        settings.encoding = encoding

    if "max-include-depth" in data:
        depth = data["max-include-depth"]
        # bool is an int subclass
        if isinstance(depth, bool) or not isinstance(depth, int) or depth < 1:
            raise SettingsError(f"{source_label}: 'max-include-depth' must be a positive integer")
        settings.max_include_depth = depth

    if "include-base" in data:
        base = data["include-base"]
        if base not in (INCLUDE_BASE_FILE, INCLUDE_BASE_CWD):
            raise SettingsError(
                f"{source_label}: 'include-base' must be '{INCLUDE_BASE_FILE}' or '{INCLUDE_BASE_CWD}'"
            )
        settings.include_base = base

    return settings
