"""Tests for the table, CSV and JSON renderers."""

import csv
import io

import orjson

from avro_explorer.config import OutputFormat
from avro_explorer.rendering import (
    CsvRenderer,
    JsonLinesRenderer,
    TableRenderer,
    make_renderer,
)
from avro_explorer.rendering.table import column_widths
from avro_explorer.values import ABSENT, EnumValue, FixedValue, Row

COLUMNS = ["firstName", "age"]


def rows():
    return [Row(["Marty", 24]), Row(["Biff", ABSENT])]


class TestTable:
    def test_bordered_grid(self):
        sink = io.StringIO()
        count = TableRenderer(sink, color=False).render(COLUMNS, rows())
        assert count == 2
        assert sink.getvalue().splitlines() == [
            "+-----------+-----+",
            "| firstName | age |",
            "+-----------+-----+",
            "| Marty     | 24  |",
            "| Biff      | N/A |",
            "+-----------+-----+",
        ]

    def test_widths_cover_header_and_cells(self):
        widths = column_widths([["a"], ["bb"]], [[["long value"], ["c"]]])
        assert widths == [10, 2]

    def test_absent_differs_from_empty_string(self):
        sink = io.StringIO()
        TableRenderer(sink, absent_placeholder="-", color=False).render(["x"], [Row([""]), Row([ABSENT])])
        lines = sink.getvalue().splitlines()
        assert lines[3] == "|   |"
        assert lines[4] == "| - |"

    def test_multiline_cells(self):
        sink = io.StringIO()
        TableRenderer(sink, color=False).render(["note"], [Row(["one\ntwo"])])
        assert sink.getvalue().splitlines()[3:5] == ["| one  |", "| two  |"]

    def test_matched_cells_are_emphasised(self, monkeypatch):
        monkeypatch.setenv("TERM", "xterm-256color")
        sink = io.StringIO()
        row = Row(["Marty", 24], matched=frozenset({0}))
        TableRenderer(sink, color=True).render(COLUMNS, [row])
        output = sink.getvalue()
        assert "\x1b[" in output
        matched_line = [line for line in output.splitlines() if "Marty" in line][0]
        assert "\x1b[1" in matched_line

    def test_no_columns_prints_nothing(self):
        sink = io.StringIO()
        assert TableRenderer(sink, color=False).render([], []) == 0
        assert sink.getvalue() == ""


class TestCsv:
    def test_round_trips_awkward_cells(self):
        cells = ['comma, here', 'say "hi"', "two\nlines", "x\ry", "crlf\r\nend"]
        sink = io.StringIO()
        CsvRenderer(sink).render(["a", "b", "c", "d", "e"], [Row(list(cells))])
        parsed = list(csv.reader(io.StringIO(sink.getvalue())))
        assert parsed == [["a", "b", "c", "d", "e"], cells]

    def test_absent_is_empty_field(self):
        sink = io.StringIO()
        CsvRenderer(sink).render(COLUMNS, rows())
        assert sink.getvalue() == "firstName,age\nMarty,24\nBiff,\n"


class TestJsonLines:
    def test_one_object_per_line_without_absent(self):
        sink = io.StringIO()
        JsonLinesRenderer(sink).render(COLUMNS, rows())
        lines = sink.getvalue().splitlines()
        assert [orjson.loads(line) for line in lines] == [
            {"firstName": "Marty", "age": 24},
            {"firstName": "Biff"},
        ]

    def test_native_types(self):
        sink = io.StringIO()
        JsonLinesRenderer(sink).render(
            ["e", "f", "n"], [Row([EnumValue(1, "B"), FixedValue(b"\x01\x02"), 2.5])]
        )
        assert orjson.loads(sink.getvalue()) == {"e": "B", "f": [1, 2], "n": 2.5}

    def test_pretty(self):
        sink = io.StringIO()
        JsonLinesRenderer(sink, pretty=True).render(COLUMNS, rows()[:1])
        assert sink.getvalue() == '{\n  "firstName": "Marty",\n  "age": 24\n}\n'


def test_make_renderer_selects_by_format():
    sink = io.StringIO()
    assert isinstance(make_renderer(OutputFormat.TABLE, sink), TableRenderer)
    assert isinstance(make_renderer(OutputFormat.CSV, sink), CsvRenderer)
    assert isinstance(make_renderer(OutputFormat.JSON, sink), JsonLinesRenderer)
    pretty = make_renderer(OutputFormat.JSON_PRETTY, sink)
    assert pretty.options == orjson.OPT_INDENT_2
