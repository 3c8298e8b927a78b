"""
Example canonical records.

    Person / PersonSummary: a summary that leaves out `age`
    Article / Draft / ArticleCard: publication metadata that drafts lack,
        plus a card view that only carries display fields
"""
from crd.model import CanonicalRecord, FieldSpec


def build_example_person_record(age_default: bool = False) -> CanonicalRecord:
    age_annotations = ["only_in_self"]
    if age_default:
        age_annotations.append("default")

    return CanonicalRecord(
        name="Person",
        variants=["PersonSummary"],
        fields=[
            FieldSpec(name="name", type="str"),
            FieldSpec(name="age", type="int", annotations=age_annotations),
        ],
    )


def build_example_article_record() -> CanonicalRecord:
    return CanonicalRecord(
        name="Article",
        docstring="A published article.",
        variants=["Draft", "ArticleCard"],
        imports=["from datetime import datetime"],
        annotations=[
            'attr_for("ArticleCard", "@dataclass(frozen=True)")',
        ],
        fields=[
            FieldSpec(name="title", type="str"),
            FieldSpec(name="body", type="str", annotations=['not_in("ArticleCard")']),
            FieldSpec(name="tags", type="List[str]", annotations=["default"]),
            FieldSpec(
                name="published_at",
                type="datetime",
                annotations=['not_in("Draft")'],
            ),
            FieldSpec(
                name="revision",
                type="int",
                annotations=['only_in("Article", "Draft")', "default"],
            ),
        ],
    )
