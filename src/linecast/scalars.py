# -*- coding: utf-8 -*-
from __future__ import annotations

import math
import re
import struct
from typing import Any, Callable, Dict, Optional, Union

from .errors import MalformedError, UnsupportedKindError
from .shapes import ScalarKind

ScalarValue = Union[int, float, bool, str]

_SIGNED_RE = re.compile(r"[-+]?\d+", flags=re.ASCII)
_UNSIGNED_RE = re.compile(r"\+?\d+", flags=re.ASCII)
_FLOAT_RE = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?", flags=re.ASCII)
_FLOAT_SPECIAL_RE = re.compile(r"[-+]?(?:inf|infinity|nan)", flags=re.IGNORECASE)


def _int_bounds(kind: ScalarKind) -> tuple:
    if kind.signed:
        return -(1 << (kind.bits - 1)), (1 << (kind.bits - 1)) - 1
    return 0, (1 << kind.bits) - 1


def _parse_int(kind: ScalarKind, token: str, path: Optional[str], line_no: Optional[int]) -> int:
    pattern = _SIGNED_RE if kind.signed else _UNSIGNED_RE
    if not pattern.fullmatch(token):
        raise MalformedError(f"{token!r} is not a valid {kind.value}", path=path, line_no=line_no)
    value = int(token, 10)
    lo, hi = _int_bounds(kind)
    if not lo <= value <= hi:
        raise MalformedError(f"{token!r} is out of range for {kind.value} [{lo}, {hi}]", path=path, line_no=line_no)
    return value


def _parse_float(kind: ScalarKind, token: str, path: Optional[str], line_no: Optional[int]) -> float:
    if not (_FLOAT_RE.fullmatch(token) or _FLOAT_SPECIAL_RE.fullmatch(token)):
        raise MalformedError(f"{token!r} is not a valid {kind.value}", path=path, line_no=line_no)
    value = float(token)
    if kind is ScalarKind.FLOAT32 and math.isfinite(value):
        try:
            value = struct.unpack("<f", struct.pack("<f", value))[0]
        except OverflowError:
            raise MalformedError(f"{token!r} is out of range for float32", path=path, line_no=line_no) from None
    return value


def _parse_bool(kind: ScalarKind, token: str, path: Optional[str], line_no: Optional[int]) -> bool:
    if token == "1":
        return True
    if token == "0":
        return False
    raise MalformedError(f"{token!r} is not a valid bool (expected '0' or '1')", path=path, line_no=line_no)


def _parse_text(kind: ScalarKind, token: str, path: Optional[str], line_no: Optional[int]) -> str:
    return token


_PARSERS: Dict[ScalarKind, Callable[[ScalarKind, str, Optional[str], Optional[int]], Any]] = {
    ScalarKind.INT8: _parse_int,
    ScalarKind.INT16: _parse_int,
    ScalarKind.INT32: _parse_int,
    ScalarKind.INT64: _parse_int,
    ScalarKind.UINT8: _parse_int,
    ScalarKind.UINT16: _parse_int,
    ScalarKind.UINT32: _parse_int,
    ScalarKind.UINT64: _parse_int,
    ScalarKind.FLOAT32: _parse_float,
    ScalarKind.FLOAT64: _parse_float,
    ScalarKind.BOOL: _parse_bool,
    ScalarKind.TEXT: _parse_text,
}


def parse_scalar(
    kind: ScalarKind, token: str, path: Optional[str] = None, line_no: Optional[int] = None
) -> ScalarValue:
    """Convert one token into the Python value for ``kind``.

    Raises:
        MalformedError: the token does not match the kind's grammar or range.
        UnsupportedKindError: ``kind`` is not a known ``ScalarKind``.
    """
    parser = _PARSERS.get(kind) if isinstance(kind, ScalarKind) else None
    if parser is None:
        raise UnsupportedKindError(f"unsupported scalar kind: {kind!r}", path=path, line_no=line_no)
    return parser(kind, token, path, line_no)


def format_scalar(kind: ScalarKind, value: Any) -> str:
    """Inverse of ``parse_scalar``; the result re-parses to an equal value."""
    if not isinstance(kind, ScalarKind) or kind not in _PARSERS:
        raise UnsupportedKindError(f"unsupported scalar kind: {kind!r}")
    if kind is ScalarKind.BOOL:
        return "1" if value else "0"
    if kind is ScalarKind.TEXT:
        return str(value)
    if kind.is_float:
        return repr(float(value))
    return str(int(value))
