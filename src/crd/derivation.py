"""
Record derivation: Field Distributor, Field-Set Comparator and
Conversion Synthesizer.

Pipeline (single pass, no I/O):

    CanonicalRecord
        → build_registry()          variants, decorations
        → parse_field_rule()        one FieldRule per field
        → distribute_fields()       fields, capabilities, absence markers
        → synthesize_conversions()  edges and conversions per ordered pair
        → DerivedFamily

IMPORTANT:
    Fields are compared by name only. Types are carried, never compared.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from crd import naming
from crd.config import DerivationOptions
from crd.errors import (
    DuplicateField,
    InvalidFieldName,
    NameCollision,
    NameCollisionWarning,
    UnnamedField,
)
from crd.model import (
    CanonicalRecord,
    CapabilityInterface,
    Conversion,
    ConversionEdge,
    ConversionKind,
    DerivedFamily,
    FieldRule,
    FieldSpec,
    Variant,
)
from crd.registry import VariantRegistry, build_registry
from crd.rules import parse_field_rule

logger = logging.getLogger(__name__)


# =========================================================================
# FIELD DISTRIBUTOR
# =========================================================================

def distribute_fields(
    registry: VariantRegistry,
    fields: Sequence[FieldSpec],
    rules: Sequence[FieldRule],
) -> List[CapabilityInterface]:
    """
    Hand every field to the variants in its target set.

    For each field (declaration order) and each variant (registry order):
    owners get the field and the field's capability interface; every
    other variant gets the absence marker.

    Returns:
        One CapabilityInterface per field, in declaration order
    """
    interfaces = []
    for fs, rule in zip(fields, rules):
        interface = CapabilityInterface(
            field_name=fs.name,
            field_type=fs.type,
            name=naming.capability_name(fs.name),
            absence_name=naming.absence_name(fs.name),
            getter=naming.getter_name(fs.name),
            setter=naming.setter_name(fs.name),
        )
        for variant in registry:
            if variant.name in rule.target_set:
                variant.fields.append(fs)
                variant.capabilities.append(interface.name)
                interface.implementors.append(variant.name)
            else:
                variant.absences.append(interface.absence_name)
                interface.non_implementors.append(variant.name)
        interfaces.append(interface)
    return interfaces


# =========================================================================
# FIELD-SET COMPARATOR
# =========================================================================

def missing_fields(a: Variant, b: Variant) -> List[FieldSpec]:
    """Fields of `a` not present (by name) in `b`, in `a`'s order."""
    names = set(b.field_names())
    return [f for f in a.fields if f.name not in names]


def common_fields(a: Variant, b: Variant) -> List[FieldSpec]:
    """Fields of `a` also present (by name) in `b`, in `a`'s order."""
    names = set(b.field_names())
    return [f for f in a.fields if f.name in names]


def compute_edge(source: Variant, target: Variant) -> ConversionEdge:
    """Field-set difference for converting `source` into `target`."""
    missing = missing_fields(target, source)
    return ConversionEdge(
        source=source.name,
        target=target.name,
        missing=[f.name for f in missing],
        missing_with_default=[f.name for f in missing if f.default],
        missing_without_default=[f.name for f in missing if not f.default],
        common=[f.name for f in common_fields(target, source)],
    )


# =========================================================================
# CONVERSION SYNTHESIZER
# =========================================================================

def conversions_for_edge(edge: ConversionEdge, target: Variant) -> List[Conversion]:
    """
    Synthesize the conversions of one ordered pair.

    Rules:
        - FROM (zero arguments) iff no missing field lacks a default
        - INTO and INTO_DEFAULTS iff any field is missing
    """
    by_name: Dict[str, FieldSpec] = {f.name: f for f in target.fields}
    conversions = []

    if edge.is_total:
        conversions.append(Conversion(
            kind=ConversionKind.FROM,
            source=edge.source,
            target=edge.target,
            name=naming.from_name(edge.source),
            owner=edge.target,
            copied=list(edge.common),
            defaulted=list(edge.missing_with_default),
        ))

    if edge.missing:
        conversions.append(Conversion(
            kind=ConversionKind.INTO,
            source=edge.source,
            target=edge.target,
            name=naming.into_name(edge.target),
            owner=edge.source,
            arguments=[by_name[n] for n in edge.missing],
            copied=list(edge.common),
            assigned=list(edge.missing),
        ))
        conversions.append(Conversion(
            kind=ConversionKind.INTO_DEFAULTS,
            source=edge.source,
            target=edge.target,
            name=naming.into_defaults_name(edge.target),
            owner=edge.source,
            arguments=[by_name[n] for n in edge.missing_without_default],
            copied=list(edge.common),
            defaulted=list(edge.missing_with_default),
            assigned=list(edge.missing_without_default),
        ))

    return conversions


def synthesize_conversions(
    variants: Sequence[Variant],
) -> Tuple[List[ConversionEdge], List[Conversion]]:
    """
    Build edges and conversions for every ordered pair of distinct variants.

    Pairs are visited source-major in registry order.
    """
    edges = []
    conversions = []
    for source in variants:
        for target in variants:
            if source.name == target.name:
                continue
            edge = compute_edge(source, target)
            edges.append(edge)
            conversions.extend(conversions_for_edge(edge, target))
    logger.debug("synthesized %d conversions over %d edges", len(conversions), len(edges))
    return edges, conversions


# =========================================================================
# NAME COLLISIONS
# =========================================================================

def member_names(variant: Variant, conversions: Sequence[Conversion]) -> List[str]:
    """Every member name generated on a variant, in emission order."""
    names = []
    for f in variant.fields:
        names.append(f.name)
    for f in variant.fields:
        names.append(naming.getter_name(f.name))
        names.append(naming.setter_name(f.name))
    names.extend(c.name for c in conversions if c.owner == variant.name)
    return names


def find_collisions(
    variants: Sequence[Variant],
    interfaces: Sequence[CapabilityInterface],
    conversions: Sequence[Conversion],
) -> List[str]:
    """
    Describe every generated name that is defined twice.

    Checked:
        - members of each variant (fields, accessors, conversions)
        - module-level names (variants, interfaces, absence markers)
    """
    found = []
    for variant in variants:
        for name in naming.find_member_collisions(member_names(variant, conversions)):
            found.append(f"`{variant.name}.{name}` is generated more than once")

    top_level = [v.name for v in variants]
    for interface in interfaces:
        top_level.extend([interface.name, interface.absence_name])
    for name in naming.find_member_collisions(top_level):
        found.append(f"`{name}` is generated more than once")
    return found


def _report_collisions(found: List[str], options: DerivationOptions) -> None:
    if not found:
        return
    if options.strict_names:
        raise NameCollision("; ".join(found))
    for message in found:
        warnings.warn(message, NameCollisionWarning)


# =========================================================================
# ENTRY POINT
# =========================================================================

def _check_fields(record: CanonicalRecord) -> None:
    seen = set()
    for position, fs in enumerate(record.fields):
        if not fs.name:
            raise UnnamedField(
                f"Field #{position + 1} of `{record.name}` has no name; named fields are required"
            )
        if not naming.is_valid_name(fs.name):
            raise InvalidFieldName(
                f"Field `{fs.name}` of `{record.name}` is not a valid Python identifier"
            )
        if fs.name in seen:
            raise DuplicateField(f"Field `{fs.name}` of `{record.name}` is declared twice")
        seen.add(fs.name)


def derive(record: CanonicalRecord, options: Optional[DerivationOptions] = None) -> DerivedFamily:
    """
    Derive the full variant family of a canonical record.

    The input record is not modified.

    Args:
        record: Canonical record with annotations
        options: Derivation options

    Returns:
        DerivedFamily

    Raises:
        DerivationError: Any subclass; the derivation is all-or-nothing
    """
    options = options or DerivationOptions()

    _check_fields(record)
    registry = build_registry(record, options)
    declared = registry.names()

    fields = [replace(f, annotations=list(f.annotations)) for f in record.fields]
    rules = [parse_field_rule(f, declared, record.name) for f in fields]

    interfaces = distribute_fields(registry, fields, rules)
    variants = list(registry)
    edges, conversions = synthesize_conversions(variants)

    diagnostics = find_collisions(variants, interfaces, conversions)
    _report_collisions(diagnostics, options)

    family = DerivedFamily(
        canonical=record.name,
        variants=variants,
        interfaces=interfaces,
        edges=edges,
        conversions=conversions,
        fallbacks={f.name: options.fallback_for(f.type) for f in fields if f.default},
        docstring=record.docstring,
        imports=list(record.imports),
        diagnostics=diagnostics,
    )
    logger.debug(
        "derived %s: %d variants, %d interfaces, %d conversions",
        record.name, len(variants), len(interfaces), len(conversions),
    )
    return family


__all__ = [
    "distribute_fields",
    "missing_fields",
    "common_fields",
    "compute_edge",
    "conversions_for_edge",
    "synthesize_conversions",
    "member_names",
    "find_collisions",
    "derive",
]
