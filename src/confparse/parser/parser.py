# Copyright 2026 ConfParse Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for configuration files.

Pulls tokens from a :class:`Lexer` one at a time and appends the blocks it
recognises to a :class:`ParseTree`. ``include`` directives are handled by a
fresh lexer and parser over the included file, writing into the same tree so
the result stays flat.

Grammar::

    document := (include | block)* END
    include  := INCLUDE STRING [SEMICOLON]
    block    := ID [ID] OBRACE property* EBRACE
    property := ID COLON value (COMMA value)* SEMICOLON
    value    := ID | STRING | NUMBER
"""

from __future__ import annotations

import io
import logging
import os
from pathlib import Path

from confparse.model.tree import (
    MAX_PROPERTY_VALUES,
    Block,
    ParseTree,
    Property,
    PropertyValue,
    ValueKind,
    free_tree,
)
from confparse.parser.diagnostics import Diagnostic, DiagnosticSink, ErrorKind, ParseContext
from confparse.parser.lexer import Lexer, Token, TokenType, describe_type
from confparse.parser.reader import SourceReader, open_source
from confparse.settings.config import INCLUDE_BASE_FILE, ParserSettings

# ###############
# Public Interface
# ###############


class ParseError(Exception):
    """Raised when a file, or any file it includes, cannot be parsed.

    The diagnostic has already been delivered to the sink when this is raised.

    Attributes:
        diagnostic: The reported diagnostic.
        kind: The class of failure.
        file_name: File in which the error occurred.
        line: 1-based line number of the error.
    """

    def __init__(self, diagnostic: Diagnostic) -> None:
        super().__init__(str(diagnostic))
        self.diagnostic = diagnostic
        self.kind = diagnostic.kind
        self.file_name = diagnostic.file_name
        self.line = diagnostic.line


def parse(
    file_path: str | os.PathLike[str],
    *,
    sink: DiagnosticSink | None = None,
    settings: ParserSettings | None = None,
) -> ParseTree:
    """Parse a configuration file and everything it includes.

    Args:
        file_path: Path of the root configuration file.
        sink: Receives the diagnostic of the first error; defaults to logging.
        settings: Parser options; defaults to :class:`ParserSettings` defaults.

    Returns:
        The flattened tree of every block, in declaration order.

    Raises:
        ParseError: On the first lexical, syntactic or I/O error. No partial
            tree is returned.
    """
    path = Path(file_path)
    context = ParseContext(str(file_path), sink=sink, settings=settings, publish=True)
    tree = ParseTree()
    try:
        _parse_file(path, tree, context)
    except (OSError, LookupError) as exc:
        free_tree(tree)
        diagnostic = context.report(ErrorKind.INTERNAL, 1, f"internal error: cannot read '{path}': {_reason(exc)}")
        raise ParseError(diagnostic) from exc
    except ParseError:
        free_tree(tree)
        raise
    return tree


def parse_string(
    source: str,
    file_name: str = "<string>",
    *,
    sink: DiagnosticSink | None = None,
    settings: ParserSettings | None = None,
) -> ParseTree:
    """Parse configuration text held in memory.

    Relative include paths are resolved against the current working directory.

    Raises:
        ParseError: On the first lexical, syntactic or I/O error.
    """
    context = ParseContext(file_name, sink=sink, settings=settings, publish=True)
    tree = ParseTree(files=[file_name])
    reader = SourceReader(io.StringIO(source), file_name)
    try:
        _Parser(Lexer(reader, context), tree, context, base_dir=Path.cwd()).parse()
    except ParseError:
        free_tree(tree)
        raise
    return tree


# ################
# Implementation
# ################

_logger = logging.getLogger("confparse.parser")

_VALUE_KINDS: dict[TokenType, ValueKind] = {
    TokenType.ID: ValueKind.IDENTIFIER,
    TokenType.STRING: ValueKind.STRING,
    TokenType.NUMBER: ValueKind.NUMBER,
}


def _reason(exc: OSError | LookupError) -> str:
    return getattr(exc, "strerror", None) or str(exc)


def _parse_file(path: Path, tree: ParseTree, context: ParseContext) -> None:
    """Open *path* and parse it into *tree*; the file is closed on every exit path.

    Raises:
        OSError: If the file cannot be opened or read.
        LookupError: If the configured encoding is unknown.
        ParseError: On any error inside the file or its includes.
    """
    resolved = path.resolve()
    context.include_stack.append(resolved)
    try:
        with open_source(path, context.settings.encoding) as reader:
            tree.files.append(str(path))
            _Parser(Lexer(reader, context), tree, context, base_dir=path.parent).parse()
    finally:
        context.include_stack.pop()


class _Parser:
    """Recursive-descent parser over the token stream of a single file.

    Only the current token and the one consumed before it are kept; the
    previous token gives context to "unexpected token" diagnostics.
    """

    def __init__(self, lexer: Lexer, tree: ParseTree, context: ParseContext, base_dir: Path) -> None:
        self._lexer = lexer
        self._tree = tree
        self._context = context
        self._base_dir = base_dir
        self._current = Token(TokenType.END, 1)
        self._previous: Token | None = None

    def parse(self) -> None:
        """Parse the whole file, appending its blocks to the tree."""
        self._advance(first=True)
        while self._current.type is not TokenType.END:
            if self._current.type is TokenType.INCLUDE:
                self._parse_include()
            elif self._current.type is TokenType.ID:
                self._tree.blocks.append(self._parse_block())
            else:
                raise self._unexpected("identifier or 'include'")

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _advance(self, first: bool = False) -> Token:
        """Pull the next token, keeping the one it replaces as context.

        Raises ParseError for an ERROR token; the lexer has already reported it.
        """
        if not first:
            self._previous = self._current
        self._current = self._lexer.next_token()
        if self._current.type is TokenType.ERROR:
            diagnostic = self._lexer.diagnostic
            if diagnostic is None:
                diagnostic = self._context.report(
                    ErrorKind.INTERNAL,
                    self._current.line,
                    f"internal error: {self._current.text or 'lexical error'}",
                )
            raise ParseError(diagnostic)
        return self._current

    def _expect(self, token_type: TokenType) -> Token:
        """Pull the next token and require it to be of *token_type*."""
        tok = self._advance()
        if tok.type is not token_type:
            raise self._unexpected(describe_type(token_type))
        return tok

    # ------------------------------------------------------------------
    # Error reporting
    # ------------------------------------------------------------------

    def _error(self, kind: ErrorKind, line: int, description: str) -> ParseError:
        """Report a diagnostic against the current file and return the exception to raise."""
        return ParseError(self._context.report(kind, line, description))

    def _unexpected(self, expected: str | None = None) -> ParseError:
        """Build the error for an unexpected current token."""
        tok = self._current
        if tok.type is TokenType.END:
            kind = ErrorKind.UNEXPECTED_EOF
            description = "unexpected end of file"
        else:
            kind = ErrorKind.UNEXPECTED_TOKEN
            description = f"unexpected token {tok.describe()}"
        if self._previous is not None:
            description += f" after token {self._previous.describe()}"
        if expected:
            description += f" (expected {expected})"
        return self._error(kind, tok.line, description)

    # ------------------------------------------------------------------
    # Blocks and properties
    # ------------------------------------------------------------------

    def _parse_block(self) -> Block:
        """Parse: <type> [<name>] { property* }"""
        type_tok = self._current
        block_name = ""
        tok = self._advance()
        if tok.type is TokenType.ID:
            block_name = tok.text or ""
            self._expect(TokenType.OBRACE)
        elif tok.type is not TokenType.OBRACE:
            raise self._unexpected("identifier or '{'")

        properties: list[Property] = []
        self._advance()  # consume {
        while self._current.type is not TokenType.EBRACE:
            if self._current.type is not TokenType.ID:
                raise self._unexpected("identifier or '}'")
            properties.append(self._parse_property())
        self._advance()  # consume }

        return Block(
            line=type_tok.line,
            block_type=type_tok.text or "",
            block_name=block_name,
            properties=properties,
            file_name=self._context.file_name,
        )

    def _parse_property(self) -> Property:
        """Parse: <name> : value (, value)* ;"""
        name_tok = self._current
        name = name_tok.text or ""
        self._expect(TokenType.COLON)

        values: list[PropertyValue] = []
        while True:
            tok = self._advance()
            if tok.type not in _VALUE_KINDS:
                raise self._unexpected("identifier, string or number")
            if len(values) >= MAX_PROPERTY_VALUES:
                raise self._error(
                    ErrorKind.TOO_MANY_VALUES,
                    tok.line,
                    f"too many values on property '{name}' (at most {MAX_PROPERTY_VALUES})",
                )
            values.append(_make_value(tok))

            tok = self._advance()
            if tok.type is TokenType.COMMA:
                continue
            if tok.type is TokenType.SEMICOLON:
                break
            raise self._unexpected("',' or ';'")
        self._advance()  # consume ;

        return Property(line=name_tok.line, name=name, values=values)

    # ------------------------------------------------------------------
    # Include directives
    # ------------------------------------------------------------------

    def _parse_include(self) -> None:
        """Parse: include "<path>" [;] and splice the included file's blocks in place."""
        path_tok = self._expect(TokenType.STRING)
        self._include(path_tok)
        if self._advance().type is TokenType.SEMICOLON:
            self._advance()

    def _include(self, path_tok: Token) -> None:
        """Parse the file named by *path_tok* into the shared tree."""
        context = self._context
        settings = context.settings
        raw = path_tok.text or ""

        try:
            if "\0" in raw:
                raise ValueError("embedded null character")
            os.fsencode(raw)
        except (UnicodeError, ValueError) as exc:
            raise self._error(
                ErrorKind.INTERNAL,
                path_tok.line,
                f"internal error: cannot convert include path '{raw}': {exc}",
            ) from exc

        path = Path(raw)
        if not path.is_absolute() and settings.include_base == INCLUDE_BASE_FILE:
            path = self._base_dir / path

        if path.resolve() in context.include_stack:
            raise self._error(
                ErrorKind.INCLUDE_CYCLE,
                path_tok.line,
                f"include cycle: '{raw}' is already being parsed",
            )
        if context.include_depth >= settings.max_include_depth:
            raise self._error(
                ErrorKind.INCLUDE_DEPTH,
                path_tok.line,
                f"include of '{raw}' exceeds the maximum include depth of {settings.max_include_depth}",
            )

        _logger.debug("Including %s from %s:%d", path, context.file_name, path_tok.line)
        includer = context.file_name
        context.file_name = str(path)
        context.include_depth += 1
        try:
            _parse_file(path, self._tree, context)
        except (OSError, LookupError) as exc:
            context.file_name = includer
            raise self._error(
                ErrorKind.INTERNAL,
                path_tok.line,
                f"internal error: cannot read include file '{raw}': {_reason(exc)}",
            ) from exc
        finally:
            context.include_depth -= 1
            context.file_name = includer
        _logger.debug("Finished include of %s", path)


def _make_value(tok: Token) -> PropertyValue:
    kind = _VALUE_KINDS[tok.type]
    if kind is ValueKind.NUMBER:
        return PropertyValue(line=tok.line, kind=kind, value=tok.number or 0)
    return PropertyValue(line=tok.line, kind=kind, value=tok.text or "")
