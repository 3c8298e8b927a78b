"""
Tests for Variant Registry construction.
"""

import warnings

import pytest

from crd.config import DerivationOptions
from crd.errors import (
    DuplicateVariantDeclaration,
    DuplicateVariantWarning,
    MalformedAnnotation,
    UndeclaredVariant,
    UnknownVariant,
)
from crd.model import CanonicalRecord
from crd.registry import build_registry


class TestRegistryContents:
    """Test which variants exist and in what order."""

    def test_canonical_always_present(self):
        registry = build_registry(CanonicalRecord(name="Person"))
        assert registry.names() == ["Person"]
        assert registry.get("Person").is_canonical

    def test_canonical_first_then_declaration_order(self):
        record = CanonicalRecord(name="Person", variants=["Zeta", "Alpha", "Mid"])
        registry = build_registry(record)
        assert registry.names() == ["Person", "Zeta", "Alpha", "Mid"]

    def test_variants_start_empty(self):
        record = CanonicalRecord(name="Person", variants=["PersonSummary"])
        registry = build_registry(record)
        for variant in registry:
            assert variant.fields == []
            assert variant.capabilities == []
            assert variant.absences == []

    def test_only_canonical_flagged(self):
        record = CanonicalRecord(name="Person", variants=["PersonSummary"])
        registry = build_registry(record)
        assert not registry.get("PersonSummary").is_canonical

    def test_invalid_variant_name(self):
        record = CanonicalRecord(name="Person", variants=["not a name"])
        with pytest.raises(MalformedAnnotation):
            build_registry(record)

    def test_keyword_variant_name(self):
        record = CanonicalRecord(name="Person", variants=["class"])
        with pytest.raises(MalformedAnnotation):
            build_registry(record)


class TestDecorations:
    """Test record-level annotations."""

    def test_attr_for_targets_variant(self):
        record = CanonicalRecord(
            name="Person",
            variants=["PersonSummary"],
            annotations=['attr_for("PersonSummary", "@dataclass(frozen=True)")'],
        )
        registry = build_registry(record)
        assert registry.get("PersonSummary").decorations == ["@dataclass(frozen=True)"]
        assert registry.get("Person").decorations == []

    def test_attr_for_decorations_keep_order(self):
        record = CanonicalRecord(
            name="Person",
            variants=["PersonSummary"],
            annotations=[
                'attr_for("PersonSummary", "@first")',
                'attr_for("PersonSummary", "@second")',
            ],
        )
        registry = build_registry(record)
        assert registry.get("PersonSummary").decorations == ["@first", "@second"]

    def test_other_annotations_decorate_canonical(self):
        record = CanonicalRecord(
            name="Person",
            variants=["PersonSummary"],
            annotations=['attr_for("Person", "@late")', "@total_ordering"],
        )
        registry = build_registry(record)
        assert registry.get("Person").decorations == ["@total_ordering", "@late"]
        assert registry.get("PersonSummary").decorations == []

    def test_attr_for_undeclared_variant(self):
        record = CanonicalRecord(
            name="Person",
            annotations=['attr_for("Ghost", "@x")'],
        )
        with pytest.raises(UndeclaredVariant):
            build_registry(record)

    def test_undeclared_variant_is_unknown_variant(self):
        record = CanonicalRecord(name="Person", annotations=['attr_for("Ghost", "@x")'])
        with pytest.raises(UnknownVariant):
            build_registry(record)

    @pytest.mark.parametrize("annotation", [
        'attr_for("Person")',
        'attr_for("Person", "@a", "@b")',
        "attr_for",
        "attr_for(Person, @a)",
    ])
    def test_malformed_attr_for(self, annotation):
        record = CanonicalRecord(name="Person", annotations=[annotation])
        with pytest.raises(MalformedAnnotation):
            build_registry(record)


class TestDuplicateDeclarations:
    """Duplicate names warn by default and fail in strict mode."""

    def test_duplicate_warns_and_keeps_first_position(self):
        record = CanonicalRecord(name="Person", variants=["A", "B", "A"])
        with pytest.warns(DuplicateVariantWarning):
            registry = build_registry(record)
        assert registry.names() == ["Person", "A", "B"]

    def test_duplicate_of_canonical_warns_and_stays_canonical(self):
        record = CanonicalRecord(name="Person", variants=["Person"])
        with pytest.warns(DuplicateVariantWarning):
            registry = build_registry(record)
        assert registry.names() == ["Person"]
        assert registry.get("Person").is_canonical

    def test_duplicate_strict(self):
        record = CanonicalRecord(name="Person", variants=["A", "A"])
        with pytest.raises(DuplicateVariantDeclaration):
            build_registry(record, DerivationOptions(strict_variants=True))

    def test_no_warning_without_duplicates(self):
        record = CanonicalRecord(name="Person", variants=["A", "B"])
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            build_registry(record)
