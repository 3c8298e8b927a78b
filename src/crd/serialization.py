"""
Serialization helpers for derivation objects (CanonicalRecord, DerivedFamily).

Provides lossless JSON/YAML round-trip via intermediate dict representation.
This module intentionally keeps serialization structure stable and explicit:
the dict form of a DerivedFamily is the structured output consumed by
external code emitters.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List

import yaml

from crd.errors import UnnamedField
from crd.model import (
    CanonicalRecord,
    CapabilityInterface,
    Conversion,
    ConversionEdge,
    ConversionKind,
    DerivedFamily,
    FieldSpec,
    Variant,
)


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def field_to_dict(f: FieldSpec) -> Dict[str, Any]:
    return {
        "name": f.name,
        "type": f.type,
        "annotations": list(f.annotations),
        "default": f.default,
        "passthrough": list(f.passthrough),
    }


def field_from_dict(d: Dict[str, Any]) -> FieldSpec:
    name = d.get("name")
    if not name:
        raise UnnamedField(f"Field {d!r} has no name; named fields are required")
    return FieldSpec(
        name=str(name),
        type=str(d.get("type", "Any")),
        annotations=[str(a) for a in _as_list(d.get("annotations"))],
        default=bool(d.get("default", False)),
        passthrough=[str(a) for a in _as_list(d.get("passthrough"))],
    )


def record_to_dict(r: CanonicalRecord) -> Dict[str, Any]:
    return {
        "name": r.name,
        "docstring": r.docstring,
        "imports": list(r.imports),
        "variants": list(r.variants),
        "annotations": list(r.annotations),
        "fields": [
            {"name": f.name, "type": f.type, "annotations": list(f.annotations)}
            for f in r.fields
        ],
    }


def record_from_dict(d: Dict[str, Any]) -> CanonicalRecord:
    return CanonicalRecord(
        name=str(d.get("name", "")),
        fields=[field_from_dict(f) for f in _as_list(d.get("fields"))],
        annotations=[str(a) for a in _as_list(d.get("annotations"))],
        variants=[str(v) for v in _as_list(d.get("variants"))],
        docstring=d.get("docstring"),
        imports=[str(i) for i in _as_list(d.get("imports"))],
    )


def variant_to_dict(v: Variant) -> Dict[str, Any]:
    return {
        "name": v.name,
        "is_canonical": v.is_canonical,
        "decorations": list(v.decorations),
        "fields": [field_to_dict(f) for f in v.fields],
        "capabilities": list(v.capabilities),
        "absences": list(v.absences),
    }


def variant_from_dict(d: Dict[str, Any]) -> Variant:
    return Variant(
        name=d["name"],
        is_canonical=d.get("is_canonical", False),
        decorations=list(d.get("decorations", [])),
        fields=[field_from_dict(f) for f in d.get("fields", [])],
        capabilities=list(d.get("capabilities", [])),
        absences=list(d.get("absences", [])),
    )


def interface_to_dict(i: CapabilityInterface) -> Dict[str, Any]:
    return {
        "field_name": i.field_name,
        "field_type": i.field_type,
        "name": i.name,
        "absence_name": i.absence_name,
        "getter": i.getter,
        "setter": i.setter,
        "implementors": list(i.implementors),
        "non_implementors": list(i.non_implementors),
    }


def interface_from_dict(d: Dict[str, Any]) -> CapabilityInterface:
    return CapabilityInterface(
        field_name=d["field_name"],
        field_type=d["field_type"],
        name=d["name"],
        absence_name=d["absence_name"],
        getter=d["getter"],
        setter=d["setter"],
        implementors=list(d.get("implementors", [])),
        non_implementors=list(d.get("non_implementors", [])),
    )


def edge_to_dict(e: ConversionEdge) -> Dict[str, Any]:
    return {
        "source": e.source,
        "target": e.target,
        "missing": list(e.missing),
        "missing_with_default": list(e.missing_with_default),
        "missing_without_default": list(e.missing_without_default),
        "common": list(e.common),
    }


def edge_from_dict(d: Dict[str, Any]) -> ConversionEdge:
    return ConversionEdge(
        source=d["source"],
        target=d["target"],
        missing=list(d.get("missing", [])),
        missing_with_default=list(d.get("missing_with_default", [])),
        missing_without_default=list(d.get("missing_without_default", [])),
        common=list(d.get("common", [])),
    )


def conversion_to_dict(c: Conversion) -> Dict[str, Any]:
    return {
        "kind": c.kind.value,
        "source": c.source,
        "target": c.target,
        "name": c.name,
        "owner": c.owner,
        "arguments": [field_to_dict(a) for a in c.arguments],
        "copied": list(c.copied),
        "defaulted": list(c.defaulted),
        "assigned": list(c.assigned),
    }


def conversion_from_dict(d: Dict[str, Any]) -> Conversion:
    return Conversion(
        kind=ConversionKind(d["kind"]),
        source=d["source"],
        target=d["target"],
        name=d["name"],
        owner=d["owner"],
        arguments=[field_from_dict(a) for a in d.get("arguments", [])],
        copied=list(d.get("copied", [])),
        defaulted=list(d.get("defaulted", [])),
        assigned=list(d.get("assigned", [])),
    )


def family_to_dict(f: DerivedFamily) -> Dict[str, Any]:
    return {
        "canonical": f.canonical,
        "docstring": f.docstring,
        "imports": list(f.imports),
        "variants": [variant_to_dict(v) for v in f.variants],
        "interfaces": [interface_to_dict(i) for i in f.interfaces],
        "edges": [edge_to_dict(e) for e in f.edges],
        "conversions": [conversion_to_dict(c) for c in f.conversions],
        "fallbacks": dict(f.fallbacks),
        "diagnostics": list(f.diagnostics),
    }


def family_from_dict(d: Dict[str, Any]) -> DerivedFamily:
    return DerivedFamily(
        canonical=d["canonical"],
        docstring=d.get("docstring"),
        imports=list(d.get("imports", [])),
        variants=[variant_from_dict(v) for v in d.get("variants", [])],
        interfaces=[interface_from_dict(i) for i in d.get("interfaces", [])],
        edges=[edge_from_dict(e) for e in d.get("edges", [])],
        conversions=[conversion_from_dict(c) for c in d.get("conversions", [])],
        fallbacks=dict(d.get("fallbacks", {})),
        diagnostics=list(d.get("diagnostics", [])),
    )


def family_to_json(f: DerivedFamily) -> str:
    return json.dumps(family_to_dict(f), sort_keys=True, indent=2)


def family_from_json(s: str) -> DerivedFamily:
    return family_from_dict(json.loads(s))


def family_to_yaml(f: DerivedFamily) -> str:
    return yaml.safe_dump(family_to_dict(f), sort_keys=False)


def family_from_yaml(s: str) -> DerivedFamily:
    return family_from_dict(yaml.safe_load(s))


def record_to_yaml(r: CanonicalRecord) -> str:
    return yaml.safe_dump(record_to_dict(r), sort_keys=False)


def record_from_yaml(s: str) -> CanonicalRecord:
    return record_from_dict(yaml.safe_load(s))
