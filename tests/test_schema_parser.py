"""
Tests for the schema parser (schema file → CanonicalRecord).
"""

import json

import pytest

from crd.derivation import derive
from crd.errors import SchemaParseError, UnnamedField
from crd.model import ConversionKind
from crd.schema_parser import parse_schema_dict, parse_schema_file, parse_schema_string

PERSON_YAML = """
name: Person
variants:
  - PersonSummary
annotations:
  - attr_for("PersonSummary", "@dataclass(frozen=True)")
fields:
  - name: name
    type: str
  - name: age
    type: int
    annotations:
      - only_in_self
      - default
options:
  strict_names: true
  fallbacks:
    int: "-1"
"""


class TestSchemaParsing:
    """Test reading YAML and JSON schemas."""

    def test_yaml_schema(self):
        record, options = parse_schema_string(PERSON_YAML)
        assert record.name == "Person"
        assert record.variants == ["PersonSummary"]
        assert [f.name for f in record.fields] == ["name", "age"]
        assert record.fields[1].annotations == ["only_in_self", "default"]
        assert record.annotations == ['attr_for("PersonSummary", "@dataclass(frozen=True)")']
        assert options.strict_names
        assert not options.strict_variants
        assert options.fallbacks == {"int": "-1"}

    def test_options_reach_derivation(self):
        record, options = parse_schema_string(PERSON_YAML)
        family = derive(record, options)
        assert family.fallbacks == {"age": "-1"}
        assert family.find_conversion("PersonSummary", "Person", ConversionKind.FROM)

    def test_json_schema(self):
        data = {
            "name": "Person",
            "variants": ["PersonSummary"],
            "fields": [{"name": "age", "type": "int", "annotations": ["only_in_self"]}],
        }
        record, options = parse_schema_string(json.dumps(data), fmt="json")
        assert record.fields[0].annotations == ["only_in_self"]
        assert not options.strict_names

    def test_parse_schema_dict(self):
        record, _ = parse_schema_dict({"name": "Person"})
        assert record.fields == []
        assert record.variants == []

    def test_file_by_extension(self, tmp_path):
        path = tmp_path / "person.yaml"
        path.write_text(PERSON_YAML)
        record, _ = parse_schema_file(str(path))
        assert record.name == "Person"

    def test_json_file(self, tmp_path):
        path = tmp_path / "person.json"
        path.write_text(json.dumps({"name": "Person", "fields": []}))
        record, _ = parse_schema_file(str(path))
        assert record.name == "Person"


class TestSchemaErrors:
    """Test malformed schemas."""

    def test_empty(self):
        with pytest.raises(SchemaParseError):
            parse_schema_string("   ")

    def test_not_a_mapping(self):
        with pytest.raises(SchemaParseError):
            parse_schema_string("- a\n- b\n")

    def test_missing_name(self):
        with pytest.raises(SchemaParseError):
            parse_schema_string("fields: []\n")

    def test_fields_not_a_list(self):
        with pytest.raises(SchemaParseError):
            parse_schema_string("name: P\nfields: nope\n")

    def test_unnamed_field(self):
        with pytest.raises(UnnamedField):
            parse_schema_string("name: P\nfields:\n  - type: int\n")

    def test_field_without_type(self):
        with pytest.raises(SchemaParseError):
            parse_schema_string("name: P\nfields:\n  - name: x\n")

    def test_invalid_yaml(self):
        with pytest.raises(SchemaParseError):
            parse_schema_string("name: [unclosed\n")

    def test_invalid_json(self):
        with pytest.raises(SchemaParseError):
            parse_schema_string("{not json", fmt="json")

    def test_unknown_extension(self, tmp_path):
        path = tmp_path / "person.toml"
        path.write_text("name = 'Person'")
        with pytest.raises(SchemaParseError):
            parse_schema_file(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_schema_file(str(tmp_path / "nope.yaml"))

    def test_fallbacks_not_a_mapping(self):
        with pytest.raises(SchemaParseError) as excinfo:
            parse_schema_string("name: P\noptions:\n  fallbacks: [1]\n")
        assert "fallbacks" in str(excinfo.value)

    def test_docstring_not_a_string(self):
        with pytest.raises(SchemaParseError):
            parse_schema_string("name: P\ndocstring: [a, b]\n")

    def test_imports_not_a_list(self):
        with pytest.raises(SchemaParseError):
            parse_schema_string("name: P\nimports: {a: b}\n")

    def test_not_utf8(self, tmp_path):
        path = tmp_path / "person.yaml"
        path.write_bytes(b"name: P\xe9rson\xff\n")
        with pytest.raises(SchemaParseError) as excinfo:
            parse_schema_file(str(path))
        assert "UTF-8" in str(excinfo.value)

    def test_directory_instead_of_file(self, tmp_path):
        path = tmp_path / "schemas.yaml"
        path.mkdir()
        with pytest.raises(SchemaParseError):
            parse_schema_file(str(path))
