# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from .errors import HintCountMismatchError
from .inference import compact_depth, depth, hint_depth
from .shapes import FixedArray, Record, Scalar, ScalarKind, Text, ValueShape, VariableList, is_line_scalar


def _kind_name(kind: ScalarKind) -> str:
    if kind is ScalarKind.TEXT:
        return "text token"
    if kind is ScalarKind.BOOL:
        return "bool (0 or 1)"
    return kind.value


def describe_layout(
    shape: ValueShape,
    hints: Iterable[int] = (),
    delimiter: str = " ",
    leaf_hints: Optional[bool] = None,
) -> List[str]:
    """Describe, line by line, the input ``shape`` expects.

    Repeated blocks are described once with their count, so the result
    stays short for large hints.
    """
    hints = tuple(hints)
    full, compact = depth(shape), compact_depth(shape)
    if leaf_hints is None:
        if len(hints) == full:
            leaf_hints = True
        elif len(hints) == compact:
            leaf_hints = False
        else:
            raise HintCountMismatchError(full, len(hints), compact=compact)
    out: List[str] = []
    _describe(shape, hints, delimiter, leaf_hints, out, 0, None)
    return out


def _describe(
    shape: ValueShape,
    hints: Tuple[int, ...],
    delimiter: str,
    leaf_hints: bool,
    out: List[str],
    level: int,
    label: Optional[str],
) -> None:
    pad = "  " * level
    name = f"{label}: " if label else ""
    sep = f"separated by {delimiter!r}"

    if isinstance(shape, Scalar):
        out.append(f"{pad}- {name}one line holding a {_kind_name(shape.kind)}")
    elif isinstance(shape, Text):
        out.append(f"{pad}- {name}one line of free text")
    elif isinstance(shape, FixedArray):
        out.append(f"{pad}- {name}one line of exactly {shape.length} {_kind_name(shape.child.kind)} values {sep}")
    elif isinstance(shape, VariableList):
        if is_line_scalar(shape.child):
            count = f"exactly {hints[0]}" if leaf_hints else "any number of"
            noun = "text tokens" if isinstance(shape.child, Text) else f"{_kind_name(shape.child.kind)} values"
            out.append(f"{pad}- {name}one line of {count} {noun} {sep}")
        else:
            out.append(f"{pad}- {name}{hints[0]} x the following block:")
            _describe(shape.child, hints[1:], delimiter, leaf_hints, out, level + 1, None)
    elif isinstance(shape, Record):
        if label:
            out.append(f"{pad}- {label}:")
            level += 1
            pad = "  " * level
        run: List[str] = []
        pos = 0
        for f in shape.fields:
            if isinstance(f.shape, Scalar):
                run.append(f"{f.name} ({_kind_name(f.shape.kind)})")
                continue
            if run:
                out.append(f"{pad}- one line: {', '.join(run)} {sep}")
                run = []
            need = hint_depth(f.shape, leaf_hints)
            _describe(f.shape, hints[pos:pos + need], delimiter, leaf_hints, out, level, f.name)
            pos += need
        if run:
            out.append(f"{pad}- one line: {', '.join(run)} {sep}")


def build_layout_instructions(shape: ValueShape, hints: Iterable[int] = (), delimiter: str = " ") -> str:
    """Format instructions for producers (people or LLMs) of line-oriented input."""
    out: List[str] = []
    out.append("### LINE LAYOUT (MUST FOLLOW EXACTLY)")
    out.append("")
    out.append("Write plain text lines, in this order and nothing else:")
    out.extend(describe_layout(shape, hints, delimiter))
    out.append("")
    out.append("#### RULES:")
    out.append(f"1. Separate values on a line with exactly one {delimiter!r}")
    out.append("2. No headers, labels, blank lines or code fences")
    out.append("3. Integers in base 10, decimals with a dot (3.14), booleans as 0 or 1")
    return "\n".join(out)
