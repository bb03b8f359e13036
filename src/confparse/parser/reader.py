# Copyright 2026 ConfParse Contributors
# SPDX-License-Identifier: Apache-2.0

"""Character source for the lexer.

Reads a stream in fixed-size chunks and hands out decoded code points one at
a time, counting lines as newlines are consumed. Files are read as bytes and
decoded here, so line endings reach the lexer exactly as written.
"""

from __future__ import annotations

import codecs
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, TextIO

# ###############
# Public Interface
# ###############


class SourceDecodeError(Exception):
    """Raised when the underlying bytes cannot be decoded with the chosen encoding.

    Attributes:
        line: 1-based line number of the undecodable byte.
    """

    def __init__(self, message: str, line: int) -> None:
        super().__init__(message)
        self.line = line


class SourceReader:
    """Code point reader over a stream with line tracking.

    The stream is either text, or bytes together with the encoding used to
    decode them.

    Attributes:
        name: Name of the source, used in log records and decode errors.
        line: 1-based number of the line the next code point is on.
    """

    CHUNK_SIZE = 8192

    def __init__(self, stream: TextIO | BinaryIO, name: str, encoding: str | None = None) -> None:
        self.name = name
        self.line = 1
        self._stream = stream
        self._decoder = codecs.getincrementaldecoder(encoding)() if encoding is not None else None
        self._buffer = ""
        self._pos = 0
        self._exhausted = False

    def peek(self, offset: int = 0) -> str:
        """Return the code point *offset* positions ahead, or '' past the end of input."""
        self._fill(offset + 1)
        index = self._pos + offset
        if index < len(self._buffer):
            return self._buffer[index]
        return ""

    def advance(self) -> str:
        """Consume and return the next code point, or '' at end of input."""
        ch = self.peek()
        if ch:
            self._pos += 1
            if ch == "\n":
                self.line += 1
        return ch

    def at_end(self) -> bool:
        """Return True once every code point has been consumed."""
        return self.peek() == ""

    def _fill(self, needed: int) -> None:
        """Read chunks until *needed* code points are buffered or the stream ends."""
        while not self._exhausted and len(self._buffer) - self._pos < needed:
            chunk = self._read_chunk()
            if not chunk and self._exhausted:
                break
            self._buffer = self._buffer[self._pos :] + chunk
            self._pos = 0

    def _read_chunk(self) -> str:
        """Read and decode the next chunk, marking the reader exhausted at end of stream."""
        raw = self._stream.read(self.CHUNK_SIZE)
        if not raw:
            self._exhausted = True
        if self._decoder is None:
            return raw
        try:
            return self._decoder.decode(raw, final=not raw)
        except UnicodeDecodeError as exc:
            # Lines already buffered plus those in the bytes that decoded cleanly.
            line = self.line + self._buffer.count("\n", self._pos) + exc.object[: exc.start].count(b"\n")
            raise SourceDecodeError(f"cannot decode {self.name}: {exc.reason}", line) from exc


@contextmanager
def open_source(path: Path, encoding: str = "utf-8") -> Iterator[SourceReader]:
    """Open *path* for reading and yield a SourceReader over it.

    The file handle is closed when the block exits, whether or not it raised.

    Raises:
        OSError: If the file cannot be opened.
        LookupError: If *encoding* is unknown.
    """
    with open(path, "rb") as stream:
        _logger.debug("Opened %s", path)
        try:
            yield SourceReader(stream, str(path), encoding)
        finally:
            _logger.debug("Closed %s", path)


# ################
# Implementation
# ################

_logger = logging.getLogger("confparse.parser.reader")
