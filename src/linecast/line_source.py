# -*- coding: utf-8 -*-
from __future__ import annotations

import io
import logging
from typing import IO, Iterable, Iterator, Optional, Protocol, Union, runtime_checkable

from .errors import EndOfStreamError, LineSourceError
from .security import RawLogPolicy, safe_raw_preview

logger = logging.getLogger(__name__)


@runtime_checkable
class LineSource(Protocol):
    """Source of newline-delimited lines.

    ``read()`` returns the next line without its terminator and raises
    ``EndOfStreamError`` once the stream is exhausted.
    """
    def read(self) -> str: ...


def strip_terminator(line: str) -> str:
    """Remove one trailing ``\\n`` or ``\\r\\n``."""
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


class StreamLineSource:
    """LineSource over a text or binary file-like object."""

    def __init__(
        self,
        stream: IO,
        encoding: str = "utf-8",
        log_policy: Optional[RawLogPolicy] = None,
    ):
        self.stream = stream
        self.encoding = encoding
        self.line_no = 0
        self._log_policy = log_policy or RawLogPolicy.from_env()

    @classmethod
    def from_text(cls, text: str, log_policy: Optional[RawLogPolicy] = None) -> "StreamLineSource":
        return cls(io.StringIO(text), log_policy=log_policy)

    def read(self) -> str:
        try:
            raw: Union[str, bytes] = self.stream.readline()
        except OSError as e:
            raise LineSourceError(f"read failed: {e}", line_no=self.line_no + 1) from e

        if not raw:
            raise EndOfStreamError("end of stream", line_no=self.line_no + 1)

        if isinstance(raw, bytes):
            try:
                raw = raw.decode(self.encoding)
            except UnicodeDecodeError as e:
                raise LineSourceError(f"cannot decode line as {self.encoding}: {e}", line_no=self.line_no + 1) from e

        self.line_no += 1
        line = strip_terminator(raw)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("line %d: %s", self.line_no, safe_raw_preview(line, self._log_policy))
        return line


class IterLineSource:
    """LineSource over an iterable of already-split lines."""

    def __init__(self, lines: Iterable[str], log_policy: Optional[RawLogPolicy] = None):
        self._it: Iterator[str] = iter(lines)
        self.line_no = 0
        self._log_policy = log_policy or RawLogPolicy.from_env()

    def read(self) -> str:
        try:
            raw = next(self._it)
        except StopIteration:
            raise EndOfStreamError("end of stream", line_no=self.line_no + 1) from None
        self.line_no += 1
        line = strip_terminator(raw)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("line %d: %s", self.line_no, safe_raw_preview(line, self._log_policy))
        return line
