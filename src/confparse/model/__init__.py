# Copyright 2026 ConfParse Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parse tree model for configuration files."""

from confparse.model.tree import (
    MAX_PROPERTY_VALUES,
    Block,
    ParseTree,
    Property,
    PropertyValue,
    ValueKind,
    free_tree,
)

__all__ = [
    "MAX_PROPERTY_VALUES",
    "ValueKind",
    "PropertyValue",
    "Property",
    "Block",
    "ParseTree",
    "free_tree",
]
