# Copyright 2026 ConfParse Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexer and parser for block/property configuration files."""

from confparse.model.tree import ParseTree, free_tree
from confparse.parser.diagnostics import (
    CollectingSink,
    Diagnostic,
    DiagnosticSink,
    ErrorKind,
    ParseContext,
    current_file_name,
    format_diagnostic,
    log_diagnostic,
)
from confparse.parser.lexer import Lexer, Token, TokenType, tokenize
from confparse.parser.parser import ParseError, parse, parse_string

__all__ = [
    "parse",
    "parse_string",
    "free_tree",
    "current_file_name",
    "ParseError",
    "ParseTree",
    "ErrorKind",
    "Diagnostic",
    "DiagnosticSink",
    "CollectingSink",
    "ParseContext",
    "format_diagnostic",
    "log_diagnostic",
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
]
