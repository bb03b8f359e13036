# Copyright 2026 ConfParse Contributors
# SPDX-License-Identifier: Apache-2.0

"""Diagnostic formatting and reporting for the lexer and parser.

Every lexical or syntactic error becomes exactly one :class:`Diagnostic`,
formatted as ``error: <file>:<line>: <description>`` and handed to a
reporting sink. Reporting never terminates anything by itself; the caller
unwinds after the diagnostic has been delivered.
"""

from __future__ import annotations

import contextvars
import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from confparse.settings.config import ParserSettings

# ###############
# Public Interface
# ###############


class ErrorKind(enum.Enum):
    """Classes of failure a parse can end with."""

    UNEXPECTED_TOKEN = "unexpected-token"
    UNEXPECTED_EOF = "unexpected-eof"
    OVERFLOW = "overflow"
    TOO_MANY_VALUES = "too-many-values"
    INTERNAL = "internal"
    UNTERMINATED_STRING = "unterminated-string"
    MALFORMED_NUMBER = "malformed-number"
    INVALID_ESCAPE = "invalid-escape"
    INVALID_CHARACTER = "invalid-character"
    INCLUDE_CYCLE = "include-cycle"
    INCLUDE_DEPTH = "include-depth"


@dataclass(frozen=True)
class Diagnostic:
    """A single reported error.

    Attributes:
        kind: The class of failure.
        file_name: Name of the file being processed when the error occurred.
        line: 1-based line number of the offending token.
        description: Human-readable description without location prefix.
    """

    kind: ErrorKind
    file_name: str
    line: int
    description: str

    def __str__(self) -> str:
        return format_diagnostic(self.file_name, self.line, self.description)


DiagnosticSink = Callable[[Diagnostic], None]


def format_diagnostic(file_name: str, line: int, description: str) -> str:
    """Return the one-line rendering of an error at *file_name*:*line*."""
    return f"error: {file_name}:{line}: {description}"


def log_diagnostic(diagnostic: Diagnostic) -> None:
    """Default sink: emit the diagnostic through the ``confparse`` logger."""
    _logger.error("%s", diagnostic)


def current_file_name() -> str | None:
    """Return the file currently, or most recently, parsed in this context.

    Returns ``None`` before any parse has started in the current thread or task.
    """
    return _current_file.get()


class ParseContext:
    """Call-scoped state shared by every lexer and parser of one parse.

    Holds the name of the file being processed (used to prefix diagnostics),
    the reporting sink, the settings and the chain of files currently open
    through ``include``. With ``publish`` set, every change of file name is
    also made visible through :func:`current_file_name`.
    """

    def __init__(
        self,
        file_name: str,
        sink: DiagnosticSink | None = None,
        settings: ParserSettings | None = None,
        *,
        publish: bool = False,
    ) -> None:
        self._publish = publish
        self.sink: DiagnosticSink = sink if sink is not None else log_diagnostic
        self.settings = settings if settings is not None else ParserSettings()
        self.include_stack: list[Path] = []
        self.include_depth = 0
        self.file_name = file_name

    @property
    def file_name(self) -> str:
        return self._file_name

    @file_name.setter
    def file_name(self, value: str) -> None:
        self._file_name = value
        if self._publish:
            _current_file.set(value)

    def report(self, kind: ErrorKind, line: int, description: str) -> Diagnostic:
        """Build a diagnostic for the current file, deliver it and return it."""
        diagnostic = Diagnostic(kind=kind, file_name=self._file_name, line=line, description=description)
        self.sink(diagnostic)
        return diagnostic


@dataclass
class CollectingSink:
    """Sink that keeps every diagnostic it receives, in order."""

    diagnostics: list[Diagnostic] = field(default_factory=list)

    def __call__(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)


# ################
# Implementation
# ################

_logger = logging.getLogger("confparse")

_current_file: contextvars.ContextVar[str | None] = contextvars.ContextVar("confparse_current_file", default=None)
