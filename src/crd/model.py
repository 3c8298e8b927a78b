"""
Core Derivation Model Objects

Defines the data structures of a canonical record derivation.

These are pure data classes representing:
    - Fields (named, typed slots of the canonical record)
    - Field rules (which variants receive a field)
    - The canonical record (the single input)
    - Variants (derived records)
    - Capability interfaces (per-field accessor contracts)
    - Conversion edges and conversions (between variants)
    - The derived family (the single output)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about Python/DOT/other target syntax
        - Represent structure, not behavior
        - Are fully serializable
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set


@dataclass
class FieldSpec:
    """
    One field of the canonical record.

    Properties:
        name:
            Field identifier, unique within the canonical record
            Examples: "name", "published_at"

        type:
            Declared type expression, carried verbatim
            Examples: "str", "int", "Optional[datetime]"

        annotations:
            Raw annotation text as declared on the field.
            Derivation directives are consumed during rule parsing;
            what remains is kept in `passthrough`.

        default:
            True when the field opted into fallback synthesis.
            Set by the rule parser, never by the caller.

        passthrough:
            Annotations that are not derivation directives, carried
            verbatim into every variant that owns the field.

    IMPORTANT:
        Two FieldSpecs are "the same field" iff their names match.
        Type identity across variants is assumed, not checked.
    """

    name: str
    type: str
    annotations: List[str] = field(default_factory=list)
    default: bool = False
    passthrough: List[str] = field(default_factory=list)

    def same_field(self, other: "FieldSpec") -> bool:
        return self.name == other.name


class RuleKind(Enum):
    """Which inclusion directive produced a field's target set."""
    ALL = "all"
    ONLY_IN = "only_in"
    NOT_IN = "not_in"
    ONLY_IN_SELF = "only_in_self"


@dataclass
class FieldRule:
    """
    The parsed visibility rule of one field.

    Properties:
        target_set: Variant names that receive the field
        default: Fallback synthesis is allowed when the field is missing
        kind: Inclusion directive that produced target_set
        listed: Names given to only_in / not_in, in written order
    """

    target_set: Set[str] = field(default_factory=set)
    default: bool = False
    kind: RuleKind = RuleKind.ALL
    listed: List[str] = field(default_factory=list)


@dataclass
class CanonicalRecord:
    """
    The canonical record definition: the single source of truth.

    Every variant, interface and conversion MUST be derivable from
    this object alone.

    Properties:
        name: Canonical record name, always a variant of the family
        fields: Ordered field list
        annotations: Record-level raw annotations
        variants: Extra variant names to derive, in declaration order
        docstring: Optional documentation copied onto the canonical record
        imports: Import lines the generated module needs for field types
            and fallback expressions, e.g. "from datetime import datetime"
    """

    name: str
    fields: List[FieldSpec] = field(default_factory=list)
    annotations: List[str] = field(default_factory=list)
    variants: List[str] = field(default_factory=list)
    docstring: Optional[str] = None
    imports: List[str] = field(default_factory=list)

    def get_field(self, name: str) -> Optional[FieldSpec]:
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass
class Variant:
    """
    One derived record.

    Properties:
        name:
            Variant identifier (a record name)

        decorations:
            Record-level decorations, in order. Attached verbatim,
            never interpreted by the derivation.

        fields:
            Owned fields, in canonical declaration order

        capabilities:
            Names of capability interfaces this variant implements

        absences:
            Names of absence markers this variant implements

        is_canonical:
            True for the canonical record itself

    INVARIANT:
        Field order is the canonical order filtered to owned fields.
    """

    name: str
    decorations: List[str] = field(default_factory=list)
    fields: List[FieldSpec] = field(default_factory=list)
    capabilities: List[str] = field(default_factory=list)
    absences: List[str] = field(default_factory=list)
    is_canonical: bool = False

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def has_field(self, name: str) -> bool:
        return any(f.name == name for f in self.fields)


@dataclass
class CapabilityInterface:
    """
    Accessor contract for one canonical field.

    A variant that owns the field implements the interface; every other
    variant implements the paired absence marker, an empty interface, so
    that generic code can require "has field F" or "lacks field F".

    Properties:
        field_name: Canonical field name
        field_type: Declared field type
        name: Interface name, e.g. "HasPublishedAt"
        absence_name: Absence marker name, e.g. "HasNoPublishedAt"
        getter: Getter member name, e.g. "get_published_at"
        setter: Setter member name, e.g. "set_published_at"
        implementors: Variants owning the field (registry order)
        non_implementors: Variants lacking the field (registry order)
    """

    field_name: str
    field_type: str
    name: str
    absence_name: str
    getter: str
    setter: str
    implementors: List[str] = field(default_factory=list)
    non_implementors: List[str] = field(default_factory=list)


@dataclass
class ConversionEdge:
    """
    Field-set difference for one ordered pair (source, target).

    Recomputed for every pair; never cached.

    Properties:
        source, target: Variant names, always distinct
        missing: Fields target needs that source lacks
        missing_with_default: The default-flagged part of `missing`
        missing_without_default: The rest of `missing`
        common: Fields present in both

    All lists hold field names in canonical declaration order.
    """

    source: str
    target: str
    missing: List[str] = field(default_factory=list)
    missing_with_default: List[str] = field(default_factory=list)
    missing_without_default: List[str] = field(default_factory=list)
    common: List[str] = field(default_factory=list)

    @property
    def is_total(self) -> bool:
        """A zero-argument conversion exists."""
        return not self.missing_without_default


class ConversionKind(Enum):
    """Conversion call conventions."""
    FROM = "from"                     # zero-argument, classmethod on target
    INTO = "into"                     # every missing field is an argument
    INTO_DEFAULTS = "into_defaults"   # only required missing fields are arguments


@dataclass
class Conversion:
    """
    One synthesized conversion operation.

    Properties:
        kind: Call convention
        source, target: Variant names
        name: Generated member name
        owner: Variant the member is generated on
            (target for FROM, source for INTO / INTO_DEFAULTS)
        arguments: Parameters, canonical order
        copied: Fields copied from the source
        defaulted: Fields synthesized from their fallback expression
        assigned: Fields assigned from arguments
    """

    kind: ConversionKind
    source: str
    target: str
    name: str
    owner: str
    arguments: List[FieldSpec] = field(default_factory=list)
    copied: List[str] = field(default_factory=list)
    defaulted: List[str] = field(default_factory=list)
    assigned: List[str] = field(default_factory=list)


@dataclass
class DerivedFamily:
    """
    Root container for the output of one derivation.

    Everything an emitter writes MUST be derivable from this object alone.

    Properties:
        canonical: Canonical record name
        variants: All variants, canonical first, then declaration order
        interfaces: One capability interface per canonical field
        edges: One ConversionEdge per ordered pair of distinct variants
        conversions: All synthesized conversions
        fallbacks: Fallback expression per default-flagged field name
        docstring: Canonical record documentation, if any
        imports: Import lines carried from the canonical record
        diagnostics: Non-fatal findings collected during derivation
    """

    canonical: str
    variants: List[Variant] = field(default_factory=list)
    interfaces: List[CapabilityInterface] = field(default_factory=list)
    edges: List[ConversionEdge] = field(default_factory=list)
    conversions: List[Conversion] = field(default_factory=list)
    fallbacks: Dict[str, str] = field(default_factory=dict)
    docstring: Optional[str] = None
    imports: List[str] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)

    def get_variant(self, name: str) -> Optional[Variant]:
        """
        Retrieve a variant by name.

        Args:
            name: Variant name

        Returns:
            Variant object or None if not found
        """
        for variant in self.variants:
            if variant.name == name:
                return variant
        return None

    def get_interface(self, field_name: str) -> Optional[CapabilityInterface]:
        for interface in self.interfaces:
            if interface.field_name == field_name:
                return interface
        return None

    def get_edge(self, source: str, target: str) -> Optional[ConversionEdge]:
        for edge in self.edges:
            if edge.source == source and edge.target == target:
                return edge
        return None

    def conversions_from(self, source: str) -> List[Conversion]:
        return [c for c in self.conversions if c.source == source]

    def conversions_to(self, target: str) -> List[Conversion]:
        return [c for c in self.conversions if c.target == target]

    def find_conversion(
        self, source: str, target: str, kind: ConversionKind
    ) -> Optional[Conversion]:
        for conversion in self.conversions:
            if (conversion.source == source and conversion.target == target
                    and conversion.kind == kind):
                return conversion
        return None

    def members_of(self, variant_name: str) -> List[Conversion]:
        """Conversions generated as members of a variant."""
        return [c for c in self.conversions if c.owner == variant_name]
