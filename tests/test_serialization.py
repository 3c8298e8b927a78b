"""
Tests for serialization and deserialization of derivation objects.

These tests ensure lossless JSON/YAML round-trip using the explicit
serialization functions in `crd.serialization`.
"""

import json

import yaml

from crd.derivation import derive
from crd.examples import build_example_article_record
from crd.model import CanonicalRecord, ConversionKind, FieldSpec
from crd.serialization import (
    family_from_json,
    family_from_yaml,
    family_to_dict,
    family_to_json,
    family_to_yaml,
    record_from_dict,
    record_from_yaml,
    record_to_dict,
    record_to_yaml,
)


def test_record_yaml_roundtrip():
    record = build_example_article_record()
    before = record_to_dict(record)
    restored = record_from_yaml(record_to_yaml(record))
    assert record_to_dict(restored) == before


def test_record_from_dict_accepts_single_annotation_string():
    record = record_from_dict({
        "name": "Person",
        "variants": "PersonSummary",
        "fields": [{"name": "age", "type": "int", "annotations": "only_in_self"}],
    })
    assert record.variants == ["PersonSummary"]
    assert record.fields[0].annotations == ["only_in_self"]


def test_family_json_roundtrip():
    family = derive(build_example_article_record())
    before = family_to_dict(family)
    restored = family_from_json(family_to_json(family))
    assert family_to_dict(restored) == before


def test_family_yaml_roundtrip():
    family = derive(build_example_article_record())
    before = family_to_dict(family)
    restored = family_from_yaml(family_to_yaml(family))
    assert family_to_dict(restored) == before


def test_family_dict_shape():
    d = family_to_dict(derive(build_example_article_record()))
    assert d["canonical"] == "Article"
    assert [v["name"] for v in d["variants"]] == ["Article", "Draft", "ArticleCard"]
    assert d["fallbacks"] == {"tags": "[]", "revision": "0"}

    draft = d["variants"][1]
    assert draft["absences"] == ["HasNoPublishedAt"]
    assert [f["name"] for f in draft["fields"]] == ["title", "body", "tags", "revision"]

    kinds = {c["kind"] for c in d["conversions"]}
    assert kinds == {"from", "into", "into_defaults"}


def test_family_json_is_plain_data():
    text = family_to_json(derive(build_example_article_record()))
    assert json.loads(text)["canonical"] == "Article"


def test_family_yaml_keeps_declaration_order():
    text = family_to_yaml(derive(build_example_article_record()))
    data = yaml.safe_load(text)
    assert list(data)[:2] == ["canonical", "docstring"]


def test_conversion_arguments_keep_field_metadata():
    record = CanonicalRecord(
        name="Person",
        variants=["PersonSummary"],
        fields=[
            FieldSpec(name="name", type="str"),
            FieldSpec(name="age", type="int", annotations=['"years"', "only_in_self", "default"]),
        ],
    )
    family = derive(record)
    restored = family_from_json(family_to_json(family))

    into = restored.find_conversion("PersonSummary", "Person", ConversionKind.INTO)
    (age,) = into.arguments
    assert age.default
    assert age.passthrough == ['"years"']
    assert age == family.find_conversion("PersonSummary", "Person", ConversionKind.INTO).arguments[0]
