from .errors import (
    EndOfStreamError,
    HintCountMismatchError,
    InvalidHintError,
    LineSourceError,
    MalformedError,
    ShapeEncodeError,
    ShapeReaderError,
    ShortReadError,
    UnsupportedKindError,
)
from .shapes import (
    BOOL,
    FLOAT32,
    FLOAT64,
    INT8,
    INT16,
    INT32,
    INT64,
    LINE,
    TEXT_TOKEN,
    UINT8,
    UINT16,
    UINT32,
    UINT64,
    Field,
    FixedArray,
    Record,
    Scalar,
    ScalarKind,
    Text,
    ValueShape,
    VariableList,
)
from .line_source import IterLineSource, LineSource, StreamLineSource
from .scalars import format_scalar, parse_scalar
from .inference import compact_depth, depth, line_count, shape_from_model
from .reader import ParserConfig, RecordWalker, StructuredReader, loads, produce
from .encoder import dumps, infer_hints
from .models import ModelReader
from .output_parser import ShapeOutputParser
from .prompting import build_layout_instructions, describe_layout

__all__ = [
    "EndOfStreamError",
    "HintCountMismatchError",
    "InvalidHintError",
    "LineSourceError",
    "MalformedError",
    "ShapeEncodeError",
    "ShapeReaderError",
    "ShortReadError",
    "UnsupportedKindError",
    "BOOL",
    "FLOAT32",
    "FLOAT64",
    "INT8",
    "INT16",
    "INT32",
    "INT64",
    "LINE",
    "TEXT_TOKEN",
    "UINT8",
    "UINT16",
    "UINT32",
    "UINT64",
    "Field",
    "FixedArray",
    "Record",
    "Scalar",
    "ScalarKind",
    "Text",
    "ValueShape",
    "VariableList",
    "IterLineSource",
    "LineSource",
    "StreamLineSource",
    "format_scalar",
    "parse_scalar",
    "compact_depth",
    "depth",
    "line_count",
    "shape_from_model",
    "ParserConfig",
    "RecordWalker",
    "StructuredReader",
    "loads",
    "produce",
    "dumps",
    "infer_hints",
    "ModelReader",
    "ShapeOutputParser",
    "build_layout_instructions",
    "describe_layout",
]
