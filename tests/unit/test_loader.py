"""Unit tests for document loading."""

import json

import pytest

from apigraph.loader import DocumentLoadError, load_document, parse_document


class TestLoadDocument:
    """Test loading documents from disk."""

    def test_json_file(self, tmp_path, users_document):
        path = tmp_path / "api.json"
        path.write_text(json.dumps(users_document), encoding="utf-8")

        assert load_document(path) == users_document

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "api.yaml"
        path.write_text("paths:\n  /users:\n    get:\n      summary: List users\n", encoding="utf-8")

        assert load_document(path) == {"paths": {"/users": {"get": {"summary": "List users"}}}}

    def test_yaml_fallback_for_unknown_suffix(self, tmp_path):
        path = tmp_path / "api.txt"
        path.write_text("openapi: 3.0.0\n", encoding="utf-8")

        assert load_document(path) == {"openapi": "3.0.0"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentLoadError, match="Cannot read"):
            load_document(tmp_path / "missing.json")

    def test_non_utf8_file(self, tmp_path):
        path = tmp_path / "api.json"
        path.write_bytes(b'{"paths": {"/caf\xe9": {}}}')

        with pytest.raises(DocumentLoadError, match="not valid UTF-8"):
            load_document(path)


class TestParseDocument:
    """Test decoding document text."""

    def test_top_level_must_be_mapping(self):
        with pytest.raises(DocumentLoadError, match="mapping"):
            parse_document("[1, 2, 3]")

    def test_invalid_yaml(self):
        with pytest.raises(DocumentLoadError, match="Invalid YAML"):
            parse_document("paths: [unclosed", yaml_first=True)

    def test_load_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_document("42")
