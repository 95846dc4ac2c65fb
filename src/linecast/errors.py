# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Optional


class ShapeReaderError(ValueError):
    """Base error. Carries the shape path and, when a line was involved, its 1-based number."""

    def __init__(self, message: str, path: Optional[str] = None, line_no: Optional[int] = None):
        self.reason = message
        self.path = path
        self.line_no = line_no
        super().__init__(self._format())

    def _format(self) -> str:
        where = []
        if self.path:
            where.append(f"at {self.path}")
        if self.line_no is not None:
            where.append(f"line {self.line_no}")
        if not where:
            return self.reason
        return f"{self.reason} ({', '.join(where)})"


class EndOfStreamError(ShapeReaderError):
    pass


class MalformedError(ShapeReaderError):
    pass


class UnsupportedKindError(ShapeReaderError):
    pass


class HintCountMismatchError(ShapeReaderError):
    def __init__(self, expected: int, got: int, compact: Optional[int] = None, path: Optional[str] = None):
        self.expected = expected
        self.got = got
        self.compact = compact
        if compact is not None and compact != expected:
            msg = f"expected {expected} dimension hints (or {compact} in compact form), got {got}"
        else:
            msg = f"expected {expected} dimension hints, got {got}"
        super().__init__(msg, path=path)


class ShortReadError(ShapeReaderError):
    pass


class InvalidHintError(ShapeReaderError):
    pass


class LineSourceError(ShapeReaderError):
    pass


class ShapeEncodeError(ShapeReaderError):
    pass
