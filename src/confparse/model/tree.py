# Copyright 2026 ConfParse Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parse tree produced from configuration files: blocks, properties and values."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############

MAX_PROPERTY_VALUES = 16


class ValueKind(Enum):
    """Literal kinds a property value can take."""

    IDENTIFIER = "identifier"
    STRING = "string"
    NUMBER = "number"


class PropertyValue(BaseModel):
    """One literal within a property.

    Identifiers and strings both store text; they are tagged separately so a
    host can tell bare words from quoted strings.
    """

    line: int
    kind: ValueKind
    value: str | int

    @property
    def text(self) -> str:
        """Return the text payload of an identifier or string value."""
        if self.kind is ValueKind.NUMBER:
            raise TypeError(f"Value on line {self.line} is a number, not text")
        return str(self.value)

    @property
    def number(self) -> int:
        """Return the integer payload of a number value."""
        if self.kind is not ValueKind.NUMBER:
            raise TypeError(f"Value on line {self.line} is {self.kind.value}, not a number")
        return int(self.value)


class Property(BaseModel):
    """A named, comma-separated list of values inside a block."""

    line: int
    name: str
    values: list[PropertyValue] = _Field(default_factory=list, max_length=MAX_PROPERTY_VALUES)


class Block(BaseModel):
    """A declaration grouping properties under a type and an optional name.

    ``block_name`` is the empty string when the declaration omitted a name.
    """

    line: int
    block_type: str = _Field(min_length=1)
    block_name: str = ""
    properties: list[Property] = _Field(default_factory=list)
    file_name: str = ""


class ParseTree(BaseModel):
    """Flattened, ordered blocks of a root file and everything it includes."""

    blocks: list[Block] = _Field(default_factory=list)
    files: list[str] = _Field(default_factory=list)


def free_tree(tree: ParseTree) -> None:
    """Release every block, property and value owned by *tree*.

    The tree is emptied in place as a single unit; calling this twice is harmless.
    """
    for block in tree.blocks:
        for prop in block.properties:
            prop.values.clear()
        block.properties.clear()
    tree.blocks.clear()
    tree.files.clear()
