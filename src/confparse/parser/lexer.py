# Copyright 2026 ConfParse Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for configuration files.

Pulls code points from a :class:`SourceReader` and produces one token per
call to :meth:`Lexer.next_token`. Lexical errors are reported through the
parse context's sink and then surface as a terminal ``ERROR`` token.
"""

from __future__ import annotations

import enum
import io
import string
from collections.abc import Iterator
from dataclasses import dataclass

from confparse.parser.diagnostics import Diagnostic, DiagnosticSink, ErrorKind, ParseContext
from confparse.parser.reader import SourceDecodeError, SourceReader

# ###############
# Public Interface
# ###############

TOKEN_BUFFER_SIZE = 256
MAX_TOKEN_LENGTH = TOKEN_BUFFER_SIZE - 1


class TokenType(enum.Enum):
    """All token types produced by the lexer."""

    # Literals
    ID = "IDENTIFIER"
    STRING = "STRING"
    NUMBER = "NUMBER"

    # Punctuation
    OBRACE = "{"
    EBRACE = "}"
    COLON = ":"
    COMMA = ","
    SEMICOLON = ";"

    # Keywords
    INCLUDE = "include"

    # Terminal tokens
    END = "END"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Token:
    """A lexical token with the line it starts on.

    Attributes:
        type: The kind of token.
        line: 1-based line number of the token's first character.
        text: Identifier text, decoded string content, the lexeme of
            punctuation and keywords, or the diagnostic of an ERROR token.
        number: Signed 64-bit value of a NUMBER token.
    """

    type: TokenType
    line: int
    text: str | None = None
    number: int | None = None

    def describe(self) -> str:
        """Render the token for use in a diagnostic."""
        if self.type is TokenType.ID:
            return f"identifier '{_shorten(self.text or '')}'"
        if self.type is TokenType.STRING:
            return f'string "{_shorten(self.text or "")}"'
        if self.type is TokenType.NUMBER:
            return f"number {self.number}"
        return describe_type(self.type)


def describe_type(token_type: TokenType) -> str:
    """Render a token type as an expectation, e.g. ``identifier`` or ``':'``."""
    if token_type in _TYPE_NAMES:
        return _TYPE_NAMES[token_type]
    return f"'{token_type.value}'"


class Lexer:
    """Pull-based scanner over one source file."""

    def __init__(self, reader: SourceReader, context: ParseContext) -> None:
        self._reader = reader
        self._context = context
        self._terminal: Token | None = None
        self.diagnostic: Diagnostic | None = None

    def next_token(self) -> Token:
        """Scan and return the next token.

        Once END or ERROR has been produced, every later call returns that same token.
        """
        if self._terminal is not None:
            return self._terminal
        try:
            token = self._scan_token()
        except _ScanError as exc:
            token = self._error_token(exc.kind, exc.line, exc.description)
        except SourceDecodeError as exc:
            token = self._error_token(ErrorKind.INTERNAL, exc.line, f"internal error: {exc}")
        if token.type in (TokenType.END, TokenType.ERROR):
            self._terminal = token
        return token

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to and including the terminal END or ERROR token."""
        while True:
            token = self.next_token()
            yield token
            if token.type in (TokenType.END, TokenType.ERROR):
                return

    # ------------------------------------------------------------------
    # Error reporting
    # ------------------------------------------------------------------

    def _error_token(self, kind: ErrorKind, line: int, description: str) -> Token:
        """Report a lexical error and return the ERROR token standing for it."""
        diagnostic = self._context.report(kind, line, description)
        self.diagnostic = diagnostic
        return Token(TokenType.ERROR, line, text=str(diagnostic))

    # ------------------------------------------------------------------
    # Whitespace and comment skipping
    # ------------------------------------------------------------------

    def _skip_whitespace_and_comments(self) -> None:
        """Consume whitespace and ``#`` comments; a comment runs to the end of its line."""
        reader = self._reader
        while True:
            ch = reader.peek()
            if ch and ch.isspace():
                reader.advance()
            elif ch == _COMMENT_START:
                while reader.peek() not in ("", "\n"):
                    reader.advance()
            else:
                return

    # ------------------------------------------------------------------
    # Token scanning dispatcher
    # ------------------------------------------------------------------

    def _scan_token(self) -> Token:
        """Dispatch to the appropriate handler based on the current character."""
        self._skip_whitespace_and_comments()
        reader = self._reader
        line = reader.line
        ch = reader.peek()

        if not ch:
            return Token(TokenType.END, line, text="")
        if ch in _PUNCTUATION:
            reader.advance()
            return Token(_PUNCTUATION[ch], line, text=ch)
        if ch in _QUOTES:
            return self._scan_string(line)
        if ch in _DECIMAL_DIGITS or (ch == "-" and reader.peek(1) in _DECIMAL_DIGITS):
            return self._scan_number(line)
        if _is_identifier_start(ch):
            return self._scan_identifier_or_keyword(line)
        raise _ScanError(ErrorKind.INVALID_CHARACTER, line, f"unexpected character {ch!r}")

    # ------------------------------------------------------------------
    # Literal scanners
    # ------------------------------------------------------------------

    def _scan_identifier_or_keyword(self, line: int) -> Token:
        """Scan an identifier and map it to a keyword token type if applicable."""
        reader = self._reader
        chars: list[str] = []
        while _is_identifier_char(reader.peek()):
            if len(chars) >= MAX_TOKEN_LENGTH:
                raise _ScanError(
                    ErrorKind.OVERFLOW,
                    line,
                    f"identifier '{_shorten(''.join(chars))}' is longer than {MAX_TOKEN_LENGTH} characters",
                )
            chars.append(reader.advance())
        text = "".join(chars)
        return Token(_KEYWORDS.get(text, TokenType.ID), line, text=text)

    def _scan_string(self, line: int) -> Token:
        """Scan a quoted string; the closing quote must match the opening one.

        Literal newlines are kept in the value and still advance the line count.
        """
        reader = self._reader
        quote = reader.advance()
        chars: list[str] = []
        while True:
            ch = reader.advance()
            if not ch:
                raise _ScanError(ErrorKind.UNTERMINATED_STRING, line, "unterminated string")
            if ch == quote:
                break
            if ch == "\\":
                esc = reader.peek()
                if not esc:
                    raise _ScanError(ErrorKind.UNTERMINATED_STRING, line, "unterminated string")
                if esc not in _ESCAPES:
                    raise _ScanError(
                        ErrorKind.INVALID_ESCAPE,
                        reader.line,
                        f"invalid escape sequence '\\{esc}'",
                    )
                reader.advance()
                ch = _ESCAPES[esc]
            if len(chars) >= MAX_TOKEN_LENGTH:
                raise _ScanError(
                    ErrorKind.OVERFLOW,
                    line,
                    f'string "{_shorten("".join(chars))}" is longer than {MAX_TOKEN_LENGTH} characters',
                )
            chars.append(ch)
        return Token(TokenType.STRING, line, text="".join(chars))

    def _scan_number(self, line: int) -> Token:
        """Scan a decimal or ``0x``-prefixed hexadecimal integer with an optional '-'."""
        reader = self._reader
        negative = reader.peek() == "-"
        if negative:
            reader.advance()

        base = 10
        valid = _DECIMAL_DIGITS
        if reader.peek() == "0" and reader.peek(1) in ("x", "X"):
            reader.advance()  # 0
            reader.advance()  # x
            base = 16
            valid = _HEX_DIGITS

        # Digits are folded modulo 2**64 as they are read.
        value = 0
        has_digits = False
        while reader.peek() in valid:
            value = (value * base + int(reader.advance(), 16)) & _UINT64_MASK
            has_digits = True

        if not has_digits:
            raise _ScanError(ErrorKind.MALFORMED_NUMBER, line, "hexadecimal number has no digits")
        trailing = reader.peek()
        if _is_identifier_char(trailing):
            raise _ScanError(ErrorKind.MALFORMED_NUMBER, line, f"unexpected character {trailing!r} in number")

        if negative:
            value = -value
        return Token(TokenType.NUMBER, line, number=_wrap_int64(value))


def tokenize(source: str, file_name: str = "<string>", sink: DiagnosticSink | None = None) -> list[Token]:
    """Tokenize configuration text held in memory.

    Args:
        source: The full text to scan.
        file_name: Name used to prefix diagnostics.
        sink: Receives the diagnostic of a lexical error; defaults to logging.

    Returns:
        Every token in order, ending with a single END or ERROR token.
    """
    context = ParseContext(file_name, sink=sink)
    reader = SourceReader(io.StringIO(source), file_name)
    return list(Lexer(reader, context))


# ################
# Implementation
# ################

_PUNCTUATION: dict[str, TokenType] = {
    "{": TokenType.OBRACE,
    "}": TokenType.EBRACE,
    ":": TokenType.COLON,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
}

_KEYWORDS: dict[str, TokenType] = {
    "include": TokenType.INCLUDE,
}

_TYPE_NAMES: dict[TokenType, str] = {
    TokenType.ID: "identifier",
    TokenType.STRING: "string",
    TokenType.NUMBER: "number",
    TokenType.END: "end of file",
    TokenType.ERROR: "invalid token",
}

_QUOTES = frozenset({'"', "'"})

_ESCAPES: dict[str, str] = {
    "\\": "\\",
    '"': '"',
    "'": "'",
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
}

_DECIMAL_DIGITS = frozenset(string.digits)
_HEX_DIGITS = frozenset(string.hexdigits)

_UINT64_MASK = (1 << 64) - 1

_COMMENT_START = "#"


class _ScanError(Exception):
    """Carries one lexical error from a scanner method up to next_token()."""

    def __init__(self, kind: ErrorKind, line: int, description: str) -> None:
        super().__init__(description)
        self.kind = kind
        self.line = line
        self.description = description


def _shorten(text: str, limit: int = 32) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def _is_identifier_start(ch: str) -> bool:
    return ch.isalpha() or ch in ("_", "-")


def _is_identifier_char(ch: str) -> bool:
    return ch.isalnum() or ch in ("_", "-")


def _wrap_int64(value: int) -> int:
    """Reduce *value* to the signed 64-bit range, two's complement style."""
    value &= _UINT64_MASK
    if value >= 1 << 63:
        value -= 1 << 64
    return value
