# -*- coding: utf-8 -*-

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import IO, Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import NonNegativeInt, TypeAdapter, ValidationError

from .errors import (
    EndOfStreamError,
    HintCountMismatchError,
    InvalidHintError,
    MalformedError,
    ShapeReaderError,
    ShortReadError,
    UnsupportedKindError,
)
from .inference import compact_depth, depth, hint_depth, line_count
from .line_source import LineSource, StreamLineSource
from .scalars import parse_scalar
from .shapes import (
    FixedArray,
    Field,
    Record,
    Scalar,
    ScalarKind,
    Text,
    ValueShape,
    VariableList,
    is_line_scalar,
)

logger = logging.getLogger(__name__)

_HINTS = TypeAdapter(List[NonNegativeInt])


# ============================================================
# Config
# ============================================================
@dataclass(frozen=True)
class ParserConfig:
    # an exhausted line in the middle of a scalar run reads the next line
    # instead of failing with ShortReadError
    scalar_run_spans_lines: bool = False
    # extra tokens on fixed-length lines are an error instead of ignored
    strict_count: bool = False
    # used by StreamLineSource for binary streams
    encoding: str = "utf-8"


# ============================================================
# Line cursor
# ============================================================
class _LineCursor:
    """Token cursor over one line, shared by consecutive scalar fields."""

    def __init__(self, line: str, delimiter: str, line_no: Optional[int]):
        self.line = line
        self.delimiter = delimiter
        self.line_no = line_no
        self.offset = 0

    @property
    def exhausted(self) -> bool:
        return self.offset > len(self.line)

    def take(self, path: str) -> str:
        if self.exhausted:
            raise ShortReadError("line has no more tokens", path=path, line_no=self.line_no)
        end = self.line.find(self.delimiter, self.offset)
        if end < 0:
            # last token runs to end of line
            end = len(self.line)
        token = self.line[self.offset:end]
        self.offset = end + 1
        return token


# ============================================================
# Record walker
# ============================================================
class RecordWalker:
    """Parses record fields in declaration order.

    Consecutive scalar fields take tokens from one shared line. Any other
    field drops the shared line and recurses into the reader with the
    front slice of the remaining hints, sized by that field's depth.
    """

    def __init__(self, reader: "StructuredReader"):
        self.reader = reader

    def walk(self, fields: Sequence[Field], hints: Tuple[int, ...], path: str) -> Dict[str, Any]:
        reader = self.reader
        out: Dict[str, Any] = {}
        cursor: Optional[_LineCursor] = None
        pos = 0

        for f in fields:
            fpath = f"{path}.{f.name}"

            if isinstance(f.shape, Scalar):
                if cursor is not None and cursor.exhausted and reader.cfg.scalar_run_spans_lines:
                    cursor = None
                if cursor is None:
                    cursor = reader._open_cursor(fpath)
                out[f.name] = reader._parse(f.shape.kind, cursor.take(fpath), fpath, cursor.line_no)
                continue

            cursor = None
            need = hint_depth(f.shape, reader._leaf_hints)
            out[f.name] = reader._produce(f.shape, hints[pos:pos + need], fpath)
            pos += need

        return out


# ============================================================
# Structured reader
# ============================================================
class StructuredReader:
    """Reads values of a given shape from a LineSource.

    One ``produce()`` call is one depth-first pass; lines are read strictly
    in shape order and every error aborts the whole call.
    """

    def __init__(self, source: Union[LineSource, IO, str, bytes], cfg: ParserConfig = ParserConfig()):
        self.cfg = cfg
        self.source = source_for(source, cfg)
        self._walker = RecordWalker(self)
        self._delimiter = " "
        self._leaf_hints = True
        self._lines_read = 0
        self._lines_expected = 0

    # ---------------- Public ----------------
    def produce(self, shape: ValueShape, hints: Iterable[int] = (), delimiter: str = " ") -> Any:
        """Read one value of ``shape``.

        ``hints`` lists the length of every variable dimension, depth-first in
        declaration order. A list of records or lists uses one hint for all of
        its elements: ``[2, 5, 5]`` on a list of 5x5 matrices means two
        matrices of five rows of five.

        Two hint lengths are accepted. With ``depth(shape)`` hints every
        list of scalars has its own count. With ``compact_depth(shape)``
        hints those counts are left out and each such line is read whole,
        so ``[]`` reads ``VariableList(INT32)`` and ``[2, 5]`` reads the
        matrices above. Any other length is a mismatch.

        Every line the shape needs must be present; running out of input
        is ``EndOfStreamError``, including on the last line.

        Raises:
            HintCountMismatchError: wrong number of hints (nothing is read).
            EndOfStreamError, MalformedError, ShortReadError, UnsupportedKindError
        """
        self._check_delimiter(delimiter)
        hints = self._validate_hints(hints)

        full = depth(shape)
        compact = compact_depth(shape)
        if len(hints) == full:
            leaf_hints = True
        elif len(hints) == compact:
            leaf_hints = False
        else:
            raise HintCountMismatchError(full, len(hints), compact=compact, path="$")

        self._delimiter = delimiter
        self._leaf_hints = leaf_hints
        self._lines_read = 0
        self._lines_expected = line_count(shape, hints, leaf_hints)
        logger.debug(
            "produce %s hints=%s form=%s expected_lines=%d",
            shape, list(hints), "full" if leaf_hints else "compact", self._lines_expected,
        )
        return self._produce(shape, hints, "$")

    # ---------------- Validation ----------------
    def _check_delimiter(self, delimiter: str) -> None:
        if not isinstance(delimiter, str) or len(delimiter) != 1:
            raise ShapeReaderError(f"delimiter must be a single character, got {delimiter!r}")
        if delimiter in "\r\n":
            raise ShapeReaderError("delimiter cannot be a line terminator")

    def _validate_hints(self, hints: Iterable[int]) -> Tuple[int, ...]:
        try:
            return tuple(_HINTS.validate_python(list(hints), strict=True))
        except TypeError as e:
            raise InvalidHintError(f"dimension hints must be a sequence of integers: {e}") from e
        except ValidationError as e:
            err = e.errors()[0]
            loc = ".".join(str(p) for p in err.get("loc", ()))
            raise InvalidHintError(f"invalid dimension hint at index {loc}: {err.get('msg')}") from e

    # ---------------- Reading ----------------
    def _line_no(self) -> Optional[int]:
        return getattr(self.source, "line_no", None) or self._lines_read or None

    def _read_line(self, path: str) -> str:
        try:
            line = self.source.read()
        except EndOfStreamError as e:
            if self.cfg.scalar_run_spans_lines:
                msg = f"unexpected end of stream after {self._lines_read} lines"
            else:
                msg = f"unexpected end of stream after {self._lines_read} of {self._lines_expected} lines"
            raise EndOfStreamError(msg, path=path, line_no=e.line_no) from e
        self._lines_read += 1
        return line

    def _open_cursor(self, path: str) -> _LineCursor:
        line = self._read_line(path)
        return _LineCursor(line, self._delimiter, self._line_no())

    def _split(self, line: str) -> List[str]:
        # an empty line is one empty token, not zero tokens
        return line.split(self._delimiter)

    def _parse(self, kind: ScalarKind, token: str, path: str, line_no: Optional[int]) -> Any:
        return parse_scalar(kind, token, path, line_no)

    def _parse_element(self, child: ValueShape, token: str, path: str, line_no: Optional[int]) -> Any:
        if isinstance(child, Text):
            return token
        return self._parse(child.kind, token, path, line_no)

    def _take_tokens(self, child: ValueShape, tokens: List[str], n: int, path: str) -> List[Any]:
        line_no = self._line_no()
        if n == 0 and tokens == [""]:
            tokens = []
        if len(tokens) < n:
            raise ShortReadError(f"expected {n} tokens, got {len(tokens)}", path=path, line_no=line_no)
        if self.cfg.strict_count and len(tokens) > n:
            raise MalformedError(f"expected {n} tokens, got {len(tokens)}", path=path, line_no=line_no)
        return [self._parse_element(child, tok, f"{path}[{i}]", line_no) for i, tok in enumerate(tokens[:n])]

    # ---------------- Dispatch ----------------
    def _produce(self, shape: ValueShape, hints: Tuple[int, ...], path: str) -> Any:
        if isinstance(shape, Scalar):
            cursor = self._open_cursor(path)
            return self._parse(shape.kind, cursor.take(path), path, cursor.line_no)

        if isinstance(shape, Text):
            return self._read_line(path)

        if isinstance(shape, FixedArray):
            tokens = self._split(self._read_line(path))
            return self._take_tokens(shape.child, tokens, shape.length, path)

        if isinstance(shape, VariableList):
            if is_line_scalar(shape.child):
                tokens = self._split(self._read_line(path))
                if self._leaf_hints:
                    return self._take_tokens(shape.child, tokens, hints[0], path)
                line_no = self._line_no()
                return [self._parse_element(shape.child, tok, f"{path}[{i}]", line_no) for i, tok in enumerate(tokens)]
            # one hint sizes this list; every element shares the rest
            count, rest = hints[0], hints[1:]
            return [self._produce(shape.child, rest, f"{path}[{i}]") for i in range(count)]

        if isinstance(shape, Record):
            return self._walker.walk(shape.fields, hints, path)

        raise UnsupportedKindError(f"not a shape: {shape!r}", path=path)


# ============================================================
# Shortcuts
# ============================================================
def produce(
    source: Union[LineSource, IO, str, bytes],
    shape: ValueShape,
    hints: Iterable[int] = (),
    delimiter: str = " ",
    cfg: Optional[ParserConfig] = None,
) -> Any:
    return StructuredReader(source, cfg or ParserConfig()).produce(shape, hints, delimiter)


def loads(
    text: Union[str, bytes],
    shape: ValueShape,
    hints: Iterable[int] = (),
    delimiter: str = " ",
    cfg: Optional[ParserConfig] = None,
) -> Any:
    """Read ``shape`` from the lines of ``text``; bytes are decoded with ``cfg.encoding``."""
    cfg = cfg or ParserConfig()
    return StructuredReader(source_for(text, cfg), cfg).produce(shape, hints, delimiter)


def source_for(data: Union[str, bytes, IO, LineSource], cfg: Optional[ParserConfig] = None) -> LineSource:
    """Wrap strings, bytes and file objects; pass LineSources through."""
    cfg = cfg or ParserConfig()
    if isinstance(data, io.IOBase):
        return StreamLineSource(data, encoding=cfg.encoding)
    if isinstance(data, LineSource):
        return data
    if isinstance(data, bytes):
        return StreamLineSource(io.BytesIO(data), encoding=cfg.encoding)
    if isinstance(data, str):
        return StreamLineSource.from_text(data)
    raise TypeError(f"expected str, bytes, a file object or a LineSource, got {type(data).__name__}")
