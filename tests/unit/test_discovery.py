"""Tests for file argument expansion."""

from avro_explorer.shared.discovery import expand_paths


def test_plain_files_and_globs(tmp_path):
    for name in ["b.avro", "a.avro", "notes.txt"]:
        (tmp_path / name).touch()
    files = expand_paths([str(tmp_path / "*.avro")])
    assert [f.name for f in files] == ["a.avro", "b.avro"]


def test_argument_order_kept_and_duplicates_dropped(tmp_path):
    for name in ["a.avro", "b.avro"]:
        (tmp_path / name).touch()
    files = expand_paths([str(tmp_path / "b.avro"), str(tmp_path / "*.avro")])
    assert [f.name for f in files] == ["b.avro", "a.avro"]


def test_recursive_glob(tmp_path):
    (tmp_path / "nested" / "deeper").mkdir(parents=True)
    (tmp_path / "nested" / "deeper" / "x.avro").touch()
    files = expand_paths([str(tmp_path / "**" / "*.avro")])
    assert [f.name for f in files] == ["x.avro"]


def test_no_match(tmp_path):
    assert expand_paths([str(tmp_path / "missing-*.avro")]) == []
    assert expand_paths([str(tmp_path)]) == []
