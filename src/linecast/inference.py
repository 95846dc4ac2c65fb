# -*- coding: utf-8 -*-
from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel

from .errors import UnsupportedKindError
from .shapes import (
    BOOL,
    FLOAT64,
    INT64,
    LINE,
    UINT64,
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


# ============================================================
# Depth
# ============================================================
def depth(shape: ValueShape) -> int:
    """Number of dimension hints ``shape`` requires.

    - Scalar / Text / FixedArray -> 0
    - VariableList of Scalar or Text -> 1
    - VariableList of anything else -> 1 + depth(child)
    - Record -> sum over fields, in declaration order

    Also validates the shape: unknown nodes and non-scalar FixedArray children
    raise ``UnsupportedKindError``; ``FixedArray`` checks its length when built.
    """
    return _depth(_hashable(shape), True)


def compact_depth(shape: ValueShape) -> int:
    """Like ``depth`` but scalar lists contribute nothing; their line is self-describing."""
    return _depth(_hashable(shape), False)


def hint_depth(shape: ValueShape, leaf_hints: bool) -> int:
    return depth(shape) if leaf_hints else compact_depth(shape)


def _hashable(shape: Any) -> Any:
    try:
        hash(shape)
    except TypeError:
        raise UnsupportedKindError(f"not a shape: {shape!r}") from None
    return shape


@lru_cache(maxsize=1024)
def _depth(shape: ValueShape, leaf_hints: bool) -> int:
    if isinstance(shape, Scalar):
        if not isinstance(shape.kind, ScalarKind):
            raise UnsupportedKindError(f"unsupported scalar kind: {shape.kind!r}")
        return 0
    if isinstance(shape, Text):
        return 0
    if isinstance(shape, FixedArray):
        if not isinstance(shape.child, Scalar):
            raise UnsupportedKindError(f"fixed arrays hold scalars only, got {shape.child!r}")
        return _depth(shape.child, leaf_hints)
    if isinstance(shape, VariableList):
        if is_line_scalar(shape.child):
            _depth(shape.child, leaf_hints)
            return 1 if leaf_hints else 0
        return 1 + _depth(shape.child, leaf_hints)
    if isinstance(shape, Record):
        return sum(_depth(f.shape, leaf_hints) for f in shape.fields)
    raise UnsupportedKindError(f"not a shape: {shape!r}")


# ============================================================
# Line count
# ============================================================
def line_count(shape: ValueShape, hints: Sequence[int] = (), leaf_hints: bool = True) -> int:
    """Number of lines reading ``shape`` with ``hints`` consumes.

    Consecutive scalar fields of a record share one line. ``hints`` must
    already have the length ``hint_depth(shape, leaf_hints)``.
    """
    return _lines(shape, tuple(hints), leaf_hints)


def _lines(shape: ValueShape, hints: tuple, leaf_hints: bool) -> int:
    if isinstance(shape, (Scalar, Text, FixedArray)):
        return 1
    if isinstance(shape, VariableList):
        if is_line_scalar(shape.child):
            return 1
        count = hints[0]
        if count == 0:
            return 0
        return count * _lines(shape.child, hints[1:], leaf_hints)
    if isinstance(shape, Record):
        total = 0
        pos = 0
        in_run = False
        for f in shape.fields:
            if isinstance(f.shape, Scalar):
                if not in_run:
                    total += 1
                    in_run = True
                continue
            in_run = False
            need = hint_depth(f.shape, leaf_hints)
            total += _lines(f.shape, hints[pos:pos + need], leaf_hints)
            pos += need
        return total
    raise UnsupportedKindError(f"not a shape: {shape!r}")


# ============================================================
# Shapes from pydantic models
# ============================================================
class _SchemaWalker:
    """Turns a pydantic JSON schema into a shape.

    string -> Text (whole line), integer -> int64 (uint64 with minimum >= 0),
    number -> float64, boolean -> bool, array -> VariableList / FixedArray,
    object -> Record. ``json_schema_extra={"scalar_kind": ...}`` overrides.
    """

    def __init__(self, model: Type[BaseModel]):
        self.model = model
        self.schema = model.model_json_schema()
        self._defs: Dict[str, Any] = {}
        if isinstance(self.schema.get("$defs"), dict):
            self._defs.update(self.schema["$defs"])
        if isinstance(self.schema.get("definitions"), dict):
            self._defs.update(self.schema["definitions"])

    def _resolve_ref(self, ref: str) -> Dict[str, Any]:
        # Supported refs: #/$defs/Name or #/definitions/Name
        if not ref.startswith("#/"):
            raise UnsupportedKindError(f"Unsupported $ref: {ref}")
        parts = ref[2:].split("/")
        if len(parts) == 2 and parts[0] in ("$defs", "definitions"):
            target = self._defs.get(parts[1])
            if not isinstance(target, dict):
                raise UnsupportedKindError(f"$ref not found: {ref}")
            return target
        raise UnsupportedKindError(f"Unsupported $ref path: {ref}")

    def _resolve_schema(self, schema: Any, path: str) -> Dict[str, Any]:
        cur = schema
        seen = set()
        while isinstance(cur, dict):
            if "$ref" in cur:
                ref = cur["$ref"]
                if ref in seen:
                    raise UnsupportedKindError(f"Cyclic $ref detected: {ref}", path=path)
                seen.add(ref)
                base = {k: v for k, v in cur.items() if k != "$ref"}
                resolved = dict(self._resolve_ref(ref))
                resolved.update(base)
                cur = resolved
                continue
            if isinstance(cur.get("allOf"), list) and len(cur["allOf"]) == 1:
                base = {k: v for k, v in cur.items() if k != "allOf"}
                merged = dict(cur["allOf"][0])
                merged.update(base)
                cur = merged
                continue
            break
        if not isinstance(cur, dict):
            raise UnsupportedKindError(f"Invalid schema: {cur!r}", path=path)
        return cur

    def _unwrap_nullable(self, schema: Any, path: str) -> Dict[str, Any]:
        schema = self._resolve_schema(schema, path)
        for key in ("anyOf", "oneOf"):
            if key in schema and isinstance(schema[key], list):
                non_null = [s for s in schema[key] if not (isinstance(s, dict) and s.get("type") == "null")]
                if len(non_null) != 1:
                    raise UnsupportedKindError("union types have no line layout", path=path)
                base = {k: v for k, v in schema.items() if k != key}
                inner = dict(self._resolve_schema(non_null[0], path))
                inner.update(base)
                return inner
        return schema

    def walk(self) -> Record:
        shape = self._shape(self.schema, "$")
        if not isinstance(shape, Record):
            raise UnsupportedKindError(f"{self.model.__name__} does not describe a record")
        return shape

    def _scalar(self, schema: Dict[str, Any], path: str) -> Optional[ValueShape]:
        override = schema.get("scalar_kind")
        if override is not None:
            try:
                return Scalar(ScalarKind(override))
            except ValueError:
                raise UnsupportedKindError(f"unknown scalar_kind {override!r}", path=path) from None
        t = schema.get("type")
        if t == "string":
            return LINE
        if t == "integer":
            minimum = schema.get("minimum", schema.get("exclusiveMinimum"))
            if isinstance(minimum, (int, float)) and minimum >= 0:
                return UINT64
            return INT64
        if t == "number":
            return FLOAT64
        if t == "boolean":
            return BOOL
        return None

    def _shape(self, schema: Any, path: str) -> ValueShape:
        schema = self._unwrap_nullable(schema, path)
        scalar = self._scalar(schema, path)
        if scalar is not None:
            return scalar

        t = schema.get("type")
        if t == "array":
            if "prefixItems" in schema:
                raise UnsupportedKindError("tuple arrays have no line layout", path=path)
            child = self._shape(schema.get("items") or {}, f"{path}[]")
            lo, hi = schema.get("minItems"), schema.get("maxItems")
            if isinstance(child, Scalar) and lo is not None and lo == hi:
                return FixedArray(child, lo)
            return VariableList(child)

        if t == "object" or "properties" in schema:
            props = schema.get("properties") or {}
            if not props:
                raise UnsupportedKindError("free-form objects have no line layout", path=path)
            fields: List[Field] = []
            for name, fsch in props.items():
                fields.append(Field(name, self._shape(fsch, f"{path}.{name}")))
            return Record(tuple(fields))

        raise UnsupportedKindError(f"no line layout for schema type {t!r}", path=path)


def shape_from_model(model: Type[BaseModel]) -> Record:
    """Derive a ``Record`` shape from a pydantic model, fields in declaration order."""
    return _SchemaWalker(model).walk()
