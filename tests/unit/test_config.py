"""Tests for settings and query options."""

import pytest
from pydantic import ValidationError

from avro_explorer.config import ExplorerSettings, OutputFormat, QueryOptions, SearchMode


class TestOutputFormat:
    def test_none_means_table(self):
        assert OutputFormat.parse(None) is OutputFormat.TABLE

    def test_known_names(self):
        assert OutputFormat.parse("csv") is OutputFormat.CSV
        assert OutputFormat.parse("JSON") is OutputFormat.JSON
        assert OutputFormat.parse("json-pretty") is OutputFormat.JSON_PRETTY

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="not recognized"):
            OutputFormat.parse("xml")


class TestQueryOptions:
    def test_defaults(self):
        options = QueryOptions()
        assert options.fields == []
        assert options.search is None
        assert options.take is None
        assert options.format is OutputFormat.TABLE
        assert options.search_mode is SearchMode.REGEX
        assert options.ignore_case is False

    def test_fields_accept_commas_and_repeats(self):
        options = QueryOptions(fields=["firstName,age", " lastName ", ""])
        assert options.fields == ["firstName", "age", "lastName"]

    def test_format_from_string(self):
        assert QueryOptions(format="csv").format is OutputFormat.CSV
        assert QueryOptions(format=None).format is OutputFormat.TABLE

    @pytest.mark.parametrize("kwargs", [{"take": -1}, {"format": "xml"}, {"limit": 3}])
    def test_rejects_bad_values(self, kwargs):
        with pytest.raises(ValidationError):
            QueryOptions(**kwargs)


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("AVRO_EXPLORER_FAIL_FAST", raising=False)
        settings = ExplorerSettings(_env_file=None)
        assert settings.default_format is OutputFormat.TABLE
        assert settings.absent_placeholder == "N/A"
        assert settings.fail_fast is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("AVRO_EXPLORER_FAIL_FAST", "1")
        monkeypatch.setenv("AVRO_EXPLORER_DEFAULT_FORMAT", "json")
        monkeypatch.setenv("AVRO_EXPLORER_SEARCH_MODE", "literal")
        settings = ExplorerSettings(_env_file=None)
        assert settings.fail_fast is True
        assert settings.default_format is OutputFormat.JSON
        assert settings.search_mode is SearchMode.LITERAL
