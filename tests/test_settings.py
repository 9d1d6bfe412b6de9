"""Tests for the analysis settings tree."""

import json

import pytest

from roadsearch_combo.settings import AnalysisConfigurationError, Settings


class TestSettings:
    """Test settings access and coercion."""

    def test_dotted_keys_expand(self):
        settings = Settings({
            "index.analysis.analyzer.combo_a.type": "combo",
            "index": {"analysis": {"analyzer": {"combo_a": {"deduplication": "true"}}}},
        })
        group = settings.analysis().get_groups("analyzer")["combo_a"]
        assert group.get_as_str("type") == "combo"
        assert group.get_as_bool("deduplication") is True

    def test_analysis_without_index_wrapper(self):
        settings = Settings({"analysis": {"analyzer": {"a": {"type": "keyword"}}}})
        assert list(settings.analysis().get_groups("analyzer")) == ["a"]

    def test_groups_keep_declaration_order(self):
        settings = Settings({"analyzer": {"z": {"type": "keyword"}, "a": {"type": "simple"}}})
        assert list(settings.get_groups("analyzer")) == ["z", "a"]

    def test_bool_coercion(self):
        settings = Settings({"yes": True, "no": "FALSE", "bad": "maybe"})
        assert settings.get_as_bool("yes") is True
        assert settings.get_as_bool("no") is False
        assert settings.get_as_bool("missing", True) is True
        with pytest.raises(AnalysisConfigurationError):
            settings.get_as_bool("bad")

    def test_list_coercion(self):
        settings = Settings({"many": ["a", "b"], "csv": "a, b ,c", "bad": 3})
        assert settings.get_as_list("many") == ["a", "b"]
        assert settings.get_as_list("csv") == ["a", "b", "c"]
        assert settings.get_as_list("missing") is None
        with pytest.raises(AnalysisConfigurationError):
            settings.get_as_list("bad")

    def test_int_coercion(self):
        settings = Settings({"size": "12", "bad": "twelve"})
        assert settings.get_as_int("size") == 12
        with pytest.raises(AnalysisConfigurationError):
            settings.get_as_int("bad")

    def test_configuration_error_is_value_error(self):
        assert issubclass(AnalysisConfigurationError, ValueError)

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"index": {"analysis": {"analyzer": {"k": {"type": "keyword"}}}}}))
        settings = Settings.from_json_file(str(path))
        assert settings.get("index.analysis.analyzer.k.type") == "keyword"
        assert "index.analysis" in settings
        assert "index.missing" not in settings
