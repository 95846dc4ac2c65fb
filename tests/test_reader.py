from __future__ import annotations

import io
import logging

import pytest

from linecast import (
    INT32,
    LINE,
    TEXT_TOKEN,
    EndOfStreamError,
    FixedArray,
    HintCountMismatchError,
    InvalidHintError,
    IterLineSource,
    MalformedError,
    ParserConfig,
    Record,
    ShapeReaderError,
    ShortReadError,
    StreamLineSource,
    StructuredReader,
    UnsupportedKindError,
    VariableList,
    loads,
    produce,
)

MATRIX_RECORDS = VariableList(Record.of(content=VariableList(VariableList(INT32)), text=LINE))


def _matrix_input(records: int, rows: int, cols: int):
    lines = []
    expected = []
    for r in range(records):
        matrix = [[r * 100 + i * cols + j for j in range(cols)] for i in range(rows)]
        lines.extend(" ".join(str(v) for v in row) for row in matrix)
        lines.append(f"record {r}")
        expected.append({"content": matrix, "text": f"record {r}"})
    return "\n".join(lines) + "\n", expected


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

def test_text_line():
    assert loads("Hello world\n", LINE) == "Hello world"


def test_scalar_list_reads_whole_line():
    assert loads("123 456 789\n", VariableList(INT32)) == [123, 456, 789]


def test_empty_line_is_one_empty_text_element():
    assert loads("\n", VariableList(LINE)) == [""]
    assert loads("\n", VariableList(TEXT_TOKEN)) == [""]


def test_empty_line_of_ints_is_malformed():
    with pytest.raises(MalformedError):
        loads("\n", VariableList(INT32))


def test_fixed_array():
    assert loads("123 456 789\n", FixedArray(INT32, 3)) == [123, 456, 789]
    with pytest.raises(ShortReadError):
        loads("1 2\n", FixedArray(INT32, 3))


def test_fixed_array_ignores_extra_tokens():
    assert loads("1 2 3 4\n", FixedArray(INT32, 3)) == [1, 2, 3]


def test_fixed_array_strict_count():
    with pytest.raises(MalformedError):
        loads("1 2 3 4\n", FixedArray(INT32, 3), cfg=ParserConfig(strict_count=True))


def test_fixed_array_of_zero():
    assert loads("\n", FixedArray(INT32, 0), cfg=ParserConfig(strict_count=True)) == []


def test_matrix_records_share_row_hint():
    text, expected = _matrix_input(records=2, rows=5, cols=5)
    assert loads(text, MATRIX_RECORDS, [2, 5, 5]) == expected


def test_matrix_records_non_square():
    text, expected = _matrix_input(records=3, rows=2, cols=4)
    result = loads(text, MATRIX_RECORDS, [3, 2, 4])
    assert result == expected
    assert all(len(row) == 4 for rec in result for row in rec["content"])


def test_matrix_records_compact_hints():
    text, expected = _matrix_input(records=2, rows=5, cols=5)
    assert loads(text, MATRIX_RECORDS, [2, 5]) == expected


def test_row_shorter_than_hint():
    text = "1 2\n3\nt\n"
    with pytest.raises(ShortReadError) as exc:
        loads(text, MATRIX_RECORDS, [1, 2, 2])
    assert exc.value.path == "$[0].content[1]"


def test_record_scalars_share_first_line():
    shape = Record.of(n=INT32, m=INT32, first=LINE, second=LINE)
    assert loads("2 6\nfoo bar\nbaz\n", shape) == {"n": 2, "m": 6, "first": "foo bar", "second": "baz"}


# ---------------------------------------------------------------------------
# Hints
# ---------------------------------------------------------------------------

def test_hint_count_mismatch_reads_nothing():
    src = IterLineSource(["1 2", "3 4"])
    with pytest.raises(HintCountMismatchError) as exc:
        produce(src, MATRIX_RECORDS, [2])
    assert src.line_no == 0
    assert exc.value.expected == 3
    assert exc.value.compact == 2
    assert exc.value.got == 1


def test_depth_zero_shape_requires_no_hints():
    with pytest.raises(HintCountMismatchError):
        loads("x\n", LINE, [1])


def test_full_form_scalar_list_hint():
    assert loads("1 2 3\n", VariableList(INT32), [3]) == [1, 2, 3]
    assert loads("1 2 3\n", VariableList(INT32), [2]) == [1, 2]
    with pytest.raises(ShortReadError):
        loads("1 2 3\n", VariableList(INT32), [4])


def test_full_form_scalar_list_strict():
    with pytest.raises(MalformedError):
        loads("1 2 3\n", VariableList(INT32), [2], cfg=ParserConfig(strict_count=True))


@pytest.mark.parametrize("hints", [[-1, 2, 2], ["2", 2, 2], [1.5, 2, 2], [True, 2, 2]])
def test_invalid_hints(hints):
    with pytest.raises(InvalidHintError):
        loads("", MATRIX_RECORDS, hints)


def test_hints_must_be_iterable():
    with pytest.raises(InvalidHintError):
        loads("", MATRIX_RECORDS, 5)


def test_zero_count_list_reads_nothing():
    src = IterLineSource(["untouched"])
    assert produce(src, MATRIX_RECORDS, [0, 5, 5]) == []
    assert src.read() == "untouched"


def test_list_of_fixed_arrays():
    assert loads("1 2\n3 4\n", VariableList(FixedArray(INT32, 2)), [2]) == [[1, 2], [3, 4]]


# ---------------------------------------------------------------------------
# End of stream
# ---------------------------------------------------------------------------

def test_missing_last_line_is_fatal():
    with pytest.raises(EndOfStreamError) as exc:
        loads("x\n", Record.of(a=LINE, b=LINE))
    assert exc.value.path == "$.b"
    assert exc.value.line_no == 2
    with pytest.raises(EndOfStreamError):
        loads("", VariableList(LINE))


def test_empty_stream_is_end_of_stream_not_malformed():
    with pytest.raises(EndOfStreamError):
        loads("", INT32)
    with pytest.raises(EndOfStreamError):
        loads("", FixedArray(INT32, 0))


def test_early_end_of_stream_is_fatal():
    shape = Record.of(a=LINE, b=LINE)
    with pytest.raises(EndOfStreamError) as exc:
        loads("", shape)
    assert exc.value.path == "$.a"


def test_missing_matrix_row_is_fatal():
    text, _ = _matrix_input(records=2, rows=5, cols=5)
    lines = text.splitlines()
    truncated = "\n".join(lines[:8]) + "\n"
    with pytest.raises(EndOfStreamError) as exc:
        loads(truncated, MATRIX_RECORDS, [2, 5, 5])
    assert exc.value.path.startswith("$[1].content")


def test_unterminated_last_line():
    assert loads("1 2 3", VariableList(INT32)) == [1, 2, 3]


# ---------------------------------------------------------------------------
# Reader behaviour
# ---------------------------------------------------------------------------

def test_top_level_scalar_takes_first_token():
    assert loads("42\n", INT32) == 42
    assert loads("42 43\n", INT32) == 42
    with pytest.raises(MalformedError):
        loads("\n", INT32)


def test_reader_does_not_read_past_the_shape():
    src = StreamLineSource.from_text("1 2\nrest\n")
    assert produce(src, FixedArray(INT32, 2)) == [1, 2]
    assert src.read() == "rest"


def test_reader_can_produce_repeatedly():
    reader = StructuredReader(StreamLineSource.from_text("3\na b c\n"))
    assert reader.produce(INT32) == 3
    assert reader.produce(VariableList(TEXT_TOKEN), [3]) == ["a", "b", "c"]


def test_unsupported_shape_reads_nothing():
    src = IterLineSource(["a b"])
    with pytest.raises(UnsupportedKindError):
        produce(src, FixedArray(LINE, 2))
    assert src.line_no == 0


def test_custom_delimiter():
    assert loads("1,2,3\n", VariableList(INT32), delimiter=",") == [1, 2, 3]
    assert loads("a\tb c\n", VariableList(TEXT_TOKEN), delimiter="\t") == ["a", "b c"]


@pytest.mark.parametrize("delimiter", ["", "ab", "\n", "\r", 3])
def test_bad_delimiter(delimiter):
    with pytest.raises(ShapeReaderError):
        loads("1\n", INT32, delimiter=delimiter)


def test_bytes_and_file_objects():
    assert loads(b"1 2\n", VariableList(INT32)) == [1, 2]
    assert StructuredReader(io.StringIO("a\n")).produce(LINE) == "a"
    assert StructuredReader(io.BytesIO(b"7\n")).produce(INT32) == 7


def test_rejects_non_sources():
    with pytest.raises(TypeError):
        StructuredReader(42)


def test_malformed_token_reports_path_and_line():
    with pytest.raises(MalformedError) as exc:
        loads("1 2\n3 x\nt\n", MATRIX_RECORDS, [1, 2, 2])
    assert exc.value.path == "$[0].content[1][1]"
    assert exc.value.line_no == 2


def test_debug_logging_hides_raw_lines(caplog, monkeypatch):
    monkeypatch.delenv("LINECAST_LOG_RAW", raising=False)
    caplog.set_level(logging.DEBUG, logger="linecast")
    loads("secret@example.com\n", LINE)
    assert "produce" in caplog.text
    assert "secret@example.com" not in caplog.text
