# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Any, Dict, List, Sequence

from .errors import ShapeEncodeError
from .inference import depth, hint_depth
from .scalars import format_scalar
from .shapes import FixedArray, Record, Scalar, ScalarKind, Text, ValueShape, VariableList, is_line_scalar


def dumps(value: Any, shape: ValueShape, delimiter: str = " ") -> str:
    """Write ``value`` as the lines ``loads(..., shape, ...)`` reads back.

    Consecutive scalar fields of a record share one line; every other node
    starts its own line.
    """
    if not isinstance(delimiter, str) or len(delimiter) != 1 or delimiter in "\r\n":
        raise ShapeEncodeError(f"delimiter must be a single non-newline character, got {delimiter!r}")
    depth(shape)  # validates the shape
    out: List[str] = []
    _encode(value, shape, delimiter, out, "$")
    return "".join(line + "\n" for line in out)


def infer_hints(value: Any, shape: ValueShape, leaf_hints: bool = False) -> List[int]:
    """Dimension hints that re-read ``value`` with ``shape``.

    Elements of a list of lists/records must agree on their own hints,
    since one hint sizes every sibling.
    """
    depth(shape)
    return _hints(value, shape, leaf_hints, "$")


# ---------------- encoding ----------------
def _token(kind: ScalarKind, value: Any, delimiter: str, path: str) -> str:
    if kind is ScalarKind.BOOL:
        if not isinstance(value, bool):
            raise ShapeEncodeError(f"expected bool, got {type(value).__name__}", path=path)
    elif kind is ScalarKind.TEXT:
        if not isinstance(value, str):
            raise ShapeEncodeError(f"expected str, got {type(value).__name__}", path=path)
        if delimiter in value:
            raise ShapeEncodeError(f"text token contains the delimiter {delimiter!r}", path=path)
        _check_line(value, path)
    elif kind.is_integer:
        if not isinstance(value, int) or isinstance(value, bool):
            raise ShapeEncodeError(f"expected int, got {type(value).__name__}", path=path)
    elif kind.is_float:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ShapeEncodeError(f"expected float, got {type(value).__name__}", path=path)
    return format_scalar(kind, value)


def _check_line(text: str, path: str) -> None:
    if "\n" in text or "\r" in text:
        raise ShapeEncodeError("text contains a line break", path=path)


def _element_token(child: ValueShape, value: Any, delimiter: str, path: str) -> str:
    if isinstance(child, Text):
        return _token(ScalarKind.TEXT, value, delimiter, path)
    return _token(child.kind, value, delimiter, path)


def _as_list(value: Any, path: str) -> Sequence[Any]:
    if not isinstance(value, (list, tuple)):
        raise ShapeEncodeError(f"expected a list, got {type(value).__name__}", path=path)
    return value


def _as_record(value: Any, shape: Record, path: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ShapeEncodeError(f"expected a dict, got {type(value).__name__}", path=path)
    missing = [n for n in shape.names if n not in value]
    if missing:
        raise ShapeEncodeError(f"missing fields: {missing}", path=path)
    return value


def _encode(value: Any, shape: ValueShape, delimiter: str, out: List[str], path: str) -> None:
    if isinstance(shape, Scalar):
        out.append(_token(shape.kind, value, delimiter, path))
    elif isinstance(shape, Text):
        if not isinstance(value, str):
            raise ShapeEncodeError(f"expected str, got {type(value).__name__}", path=path)
        _check_line(value, path)
        out.append(value)
    elif isinstance(shape, FixedArray):
        items = _as_list(value, path)
        if len(items) != shape.length:
            raise ShapeEncodeError(f"expected {shape.length} items, got {len(items)}", path=path)
        out.append(delimiter.join(_token(shape.child.kind, v, delimiter, f"{path}[{i}]") for i, v in enumerate(items)))
    elif isinstance(shape, VariableList):
        items = _as_list(value, path)
        if is_line_scalar(shape.child):
            out.append(delimiter.join(_element_token(shape.child, v, delimiter, f"{path}[{i}]") for i, v in enumerate(items)))
        else:
            for i, v in enumerate(items):
                _encode(v, shape.child, delimiter, out, f"{path}[{i}]")
    elif isinstance(shape, Record):
        obj = _as_record(value, shape, path)
        run: List[str] = []
        for f in shape.fields:
            fpath = f"{path}.{f.name}"
            if isinstance(f.shape, Scalar):
                run.append(_token(f.shape.kind, obj[f.name], delimiter, fpath))
                continue
            if run:
                out.append(delimiter.join(run))
                run = []
            _encode(obj[f.name], f.shape, delimiter, out, fpath)
        if run:
            out.append(delimiter.join(run))
    else:
        raise ShapeEncodeError(f"not a shape: {shape!r}", path=path)


# ---------------- hints ----------------
def _hints(value: Any, shape: ValueShape, leaf_hints: bool, path: str) -> List[int]:
    if isinstance(shape, (Scalar, Text, FixedArray)):
        return []
    if isinstance(shape, VariableList):
        items = _as_list(value, path)
        if is_line_scalar(shape.child):
            return [len(items)] if leaf_hints else []
        child_hints = None
        for i, v in enumerate(items):
            h = _hints(v, shape.child, leaf_hints, f"{path}[{i}]")
            if child_hints is None:
                child_hints = h
            elif h != child_hints:
                raise ShapeEncodeError(
                    f"ragged list: element {i} needs hints {h}, element 0 needs {child_hints}", path=path
                )
        if child_hints is None:
            child_hints = [0] * hint_depth(shape.child, leaf_hints)
        return [len(items)] + child_hints
    if isinstance(shape, Record):
        obj = _as_record(value, shape, path)
        out: List[int] = []
        for f in shape.fields:
            out.extend(_hints(obj[f.name], f.shape, leaf_hints, f"{path}.{f.name}"))
        return out
    raise ShapeEncodeError(f"not a shape: {shape!r}", path=path)
