from __future__ import annotations

import pytest

from linecast import (
    BOOL,
    FLOAT32,
    FLOAT64,
    INT8,
    INT32,
    LINE,
    TEXT_TOKEN,
    UINT64,
    FixedArray,
    Record,
    ShapeEncodeError,
    VariableList,
    dumps,
    infer_hints,
    loads,
)

MATRIX_RECORDS = VariableList(Record.of(content=VariableList(VariableList(INT32)), text=LINE))

MATRIX_VALUE = [
    {"content": [[r * 10 + i * 3 + j for j in range(3)] for i in range(2)], "text": f"record {r}"}
    for r in range(2)
]


def test_dumps_scalar_run_and_lines():
    shape = Record.of(n=INT32, m=INT32, first=LINE, second=LINE)
    value = {"n": 2, "m": 6, "first": "foo bar", "second": "baz"}
    assert dumps(value, shape) == "2 6\nfoo bar\nbaz\n"


def test_infer_hints_for_matrix_records():
    assert infer_hints(MATRIX_VALUE, MATRIX_RECORDS) == [2, 2]
    assert infer_hints(MATRIX_VALUE, MATRIX_RECORDS, leaf_hints=True) == [2, 2, 3]


def test_matrix_records_round_trip():
    text = dumps(MATRIX_VALUE, MATRIX_RECORDS)
    assert loads(text, MATRIX_RECORDS, infer_hints(MATRIX_VALUE, MATRIX_RECORDS)) == MATRIX_VALUE
    full = infer_hints(MATRIX_VALUE, MATRIX_RECORDS, leaf_hints=True)
    assert loads(text, MATRIX_RECORDS, full) == MATRIX_VALUE


@pytest.mark.parametrize(
    "shape,value,delimiter",
    [
        (LINE, "Hello world", " "),
        (VariableList(INT32), [123, 456, 789], " "),
        (VariableList(LINE), [""], " "),
        (VariableList(TEXT_TOKEN), ["a", "", "b"], ","),
        (FixedArray(FLOAT64, 3), [0.1, -2.5, 1e-300], " "),
        (FixedArray(FLOAT32, 2), [0.5, 0.25], " "),
        (Record.of(id=UINT64, ok=BOOL, tag=TEXT_TOKEN, note=LINE), {"id": 2**64 - 1, "ok": False, "tag": "x", "note": "a b"}, " "),
        (VariableList(VariableList(INT8)), [[1, -2], [3, 4], [5, 6]], "|"),
        (Record.of(head=Record.of(x=INT32), rows=VariableList(FixedArray(INT32, 2))), {"head": {"x": 1}, "rows": [[1, 2], [3, 4]]}, " "),
    ],
)
def test_round_trip(shape, value, delimiter):
    text = dumps(value, shape, delimiter)
    assert loads(text, shape, infer_hints(value, shape), delimiter) == value


def test_empty_list_of_lists_hints():
    shape = VariableList(Record.of(rows=VariableList(VariableList(INT32))))
    assert infer_hints([], shape) == [0, 0]
    assert infer_hints([], shape, leaf_hints=True) == [0, 0, 0]
    assert dumps([], shape) == ""


def test_ragged_siblings_are_rejected():
    with pytest.raises(ShapeEncodeError):
        infer_hints([[[1], [2]], [[3]]], VariableList(VariableList(VariableList(INT32))))


def test_text_token_with_delimiter():
    with pytest.raises(ShapeEncodeError):
        dumps(["a b"], VariableList(TEXT_TOKEN))
    assert dumps(["a b"], VariableList(TEXT_TOKEN), ",") == "a b\n"


def test_line_with_newline():
    with pytest.raises(ShapeEncodeError):
        dumps("a\nb", LINE)


@pytest.mark.parametrize(
    "shape,value",
    [
        (INT32, "1"),
        (INT32, True),
        (BOOL, 1),
        (FLOAT64, "1.0"),
        (FixedArray(INT32, 2), [1]),
        (VariableList(INT32), 5),
        (Record.of(a=INT32), {"b": 1}),
        (Record.of(a=INT32), [1]),
    ],
)
def test_value_does_not_match_shape(shape, value):
    with pytest.raises(ShapeEncodeError):
        dumps(value, shape)


def test_bad_delimiter():
    with pytest.raises(ShapeEncodeError):
        dumps([1], VariableList(INT32), "\n")
