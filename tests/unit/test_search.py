"""Tests for search filtering and highlighting."""

import pytest

from avro_explorer.config import SearchMode
from avro_explorer.errors import PatternError
from avro_explorer.search import SearchEngine, compile_pattern
from avro_explorer.values import ABSENT, EnumValue, RecordValue, Row, UnionValue

ROWS = [
    Row(["Marty", "McFly", 24]),
    Row(["Biff", "Tannen", 72]),
    Row(["Emmett", ABSENT, 65]),
]


def test_no_pattern_retains_everything_and_matches_nothing():
    engine = SearchEngine()
    report = engine.evaluate(ROWS[0])
    assert report.retained
    assert report.matched_cells == frozenset()
    assert len(list(engine.filter(ROWS))) == len(ROWS)


def test_reports_matching_cells():
    engine = SearchEngine.from_options("McFly")
    report = engine.evaluate(ROWS[0])
    assert report.retained
    assert report.matched_cells == {1}
    assert not engine.evaluate(ROWS[1]).retained


def test_filter_annotates_rows():
    rows = [Row(list(r.cells)) for r in ROWS]
    kept = list(SearchEngine.from_options("^[0-9]+$").filter(rows))
    assert len(kept) == 3
    assert all(row.matched == {2} for row in kept)


def test_retained_rows_are_a_subset():
    engine = SearchEngine.from_options("a")
    kept = list(engine.filter(Row(list(r.cells)) for r in ROWS))
    assert [r.cells[0] for r in kept] == ["Marty", "Biff"]
    assert list(SearchEngine.from_options("zzz").filter(ROWS)) == []


def test_absent_cells_never_match():
    engine = SearchEngine.from_options("N/A", SearchMode.LITERAL)
    assert not engine.evaluate(ROWS[2]).retained


def test_regex_is_unanchored_and_case_sensitive_by_default():
    assert SearchEngine.from_options("Fl").evaluate(ROWS[0]).retained
    assert not SearchEngine.from_options("mcfly").evaluate(ROWS[0]).retained
    assert SearchEngine.from_options("mcfly", ignore_case=True).evaluate(ROWS[0]).retained


def test_literal_mode_escapes_metacharacters():
    row = Row(["a.b", "axb"])
    report = SearchEngine.from_options("a.b", SearchMode.LITERAL).evaluate(row)
    assert report.matched_cells == {0}


def test_nested_values_match_on_their_text():
    row = Row([
        RecordValue("Addr", {"city": "Hill Valley", "zip": 95420}),
        [UnionValue(1, "x"), UnionValue(1, "y")],
        EnumValue(0, "DELOREAN"),
    ])
    engine = SearchEngine.from_options("city: Hill|DELOREAN")
    assert engine.evaluate(row).matched_cells == {0, 2}


def test_invalid_pattern_is_rejected_eagerly():
    with pytest.raises(PatternError) as exc:
        compile_pattern("(unclosed")
    assert exc.value.pattern == "(unclosed"


def test_no_pattern_compiles_to_none():
    assert compile_pattern(None) is None
