# -*- coding: utf-8 -*-
"""Shape nodes describing the nested structure of a line-oriented value.

A shape is a closed set of frozen dataclasses:

- ``Scalar(kind)``: one token
- ``Text()``: one whole line
- ``FixedArray(child, length)``: ``length`` tokens on one line
- ``VariableList(child)``: tokens of one line, or ``hint`` elements of ``child``
- ``Record(fields)``: ordered named fields

Shapes are hashable so derived facts (depth, line count) can be memoized.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple, Union

from .errors import UnsupportedKindError


# ============================================================
# Scalar kinds
# ============================================================
class ScalarKind(Enum):
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    BOOL = "bool"
    TEXT = "text"

    @property
    def is_integer(self) -> bool:
        return self.value.startswith(("int", "uint"))

    @property
    def is_float(self) -> bool:
        return self.value.startswith("float")

    @property
    def signed(self) -> bool:
        return not self.value.startswith("uint")

    @property
    def bits(self) -> int:
        digits = "".join(ch for ch in self.value if ch.isdigit())
        return int(digits) if digits else 0


# ============================================================
# Shape nodes
# ============================================================
@dataclass(frozen=True)
class Scalar:
    kind: ScalarKind

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class Text:
    def __str__(self) -> str:
        return "line"


@dataclass(frozen=True)
class FixedArray:
    child: "ValueShape"
    length: int

    def __post_init__(self):
        # bool is an int that hashes like 0 and 1
        if not isinstance(self.length, int) or isinstance(self.length, bool) or self.length < 0:
            raise UnsupportedKindError(f"invalid fixed array length: {self.length!r}")

    def __str__(self) -> str:
        return f"{self.child}[{self.length}]"


@dataclass(frozen=True)
class VariableList:
    child: "ValueShape"

    def __str__(self) -> str:
        return f"{self.child}[]"


@dataclass(frozen=True)
class Field:
    name: str
    shape: "ValueShape"


@dataclass(frozen=True)
class Record:
    fields: Tuple[Field, ...]

    def __post_init__(self):
        # accept lists and (name, shape) pairs, store a hashable tuple of Field
        normalized = tuple(f if isinstance(f, Field) else Field(*f) for f in self.fields)
        names = [f.name for f in normalized]
        if any(not n for n in names):
            raise ValueError("record field names must be non-empty")
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"duplicate record fields: {dupes}")
        object.__setattr__(self, "fields", normalized)

    @classmethod
    def of(cls, **fields: "ValueShape") -> "Record":
        """Build a record from keyword arguments, keeping their order."""
        return cls(tuple(Field(name, shape) for name, shape in fields.items()))

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def __str__(self) -> str:
        return "{" + ", ".join(f"{f.name}: {f.shape}" for f in self.fields) + "}"


ValueShape = Union[Scalar, Text, FixedArray, VariableList, Record]


def is_line_scalar(shape: ValueShape) -> bool:
    """True for element shapes a list reads as tokens of a single line."""
    return isinstance(shape, (Scalar, Text))


def record(fields: Iterable[Tuple[str, ValueShape]]) -> Record:
    return Record(tuple(Field(name, shape) for name, shape in fields))


# Shorthands
INT8 = Scalar(ScalarKind.INT8)
INT16 = Scalar(ScalarKind.INT16)
INT32 = Scalar(ScalarKind.INT32)
INT64 = Scalar(ScalarKind.INT64)
UINT8 = Scalar(ScalarKind.UINT8)
UINT16 = Scalar(ScalarKind.UINT16)
UINT32 = Scalar(ScalarKind.UINT32)
UINT64 = Scalar(ScalarKind.UINT64)
FLOAT32 = Scalar(ScalarKind.FLOAT32)
FLOAT64 = Scalar(ScalarKind.FLOAT64)
BOOL = Scalar(ScalarKind.BOOL)
TEXT_TOKEN = Scalar(ScalarKind.TEXT)
LINE = Text()
