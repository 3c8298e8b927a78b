"""
Variant Registry construction.

The registry is the ordered set of variants of one derivation: the
canonical record first, then every declared variant in declaration order.
Each entry starts with an empty field list; the Field Distributor fills it.

Record-level annotations are resolved here:
    - attr_for("Variant", "decoration") appends the decoration to Variant
    - anything else decorates the canonical record, verbatim
"""

import logging
import warnings
from typing import Dict, Iterator, List, Optional

from crd import naming
from crd.config import DerivationOptions
from crd.directives import ATTR_FOR, RECORD_DIRECTIVES, is_directive, parse_annotation
from crd.errors import (
    DuplicateVariantDeclaration,
    DuplicateVariantWarning,
    MalformedAnnotation,
    UndeclaredVariant,
)
from crd.model import CanonicalRecord, Variant

logger = logging.getLogger(__name__)


class VariantRegistry:
    """Ordered mapping of variant name → Variant, canonical first."""

    def __init__(self, canonical: str):
        self.canonical = canonical
        self._variants: Dict[str, Variant] = {
            canonical: Variant(name=canonical, is_canonical=True),
        }

    def __contains__(self, name: str) -> bool:
        return name in self._variants

    def __iter__(self) -> Iterator[Variant]:
        return iter(self._variants.values())

    def __len__(self) -> int:
        return len(self._variants)

    def names(self) -> List[str]:
        return list(self._variants)

    def get(self, name: str) -> Optional[Variant]:
        return self._variants.get(name)

    def declare(self, name: str, strict: bool = False) -> Variant:
        """
        Declare a variant.

        A name declared twice replaces the earlier entry in place (its
        position is kept). This is reported with DuplicateVariantWarning,
        or rejected with DuplicateVariantDeclaration when strict.
        """
        if name in self._variants:
            message = f"Variant `{name}` is declared more than once"
            if strict:
                raise DuplicateVariantDeclaration(message)
            warnings.warn(f"{message}; the later declaration wins", DuplicateVariantWarning)
            self._variants[name] = Variant(
                name=name, is_canonical=self._variants[name].is_canonical
            )
            return self._variants[name]

        variant = Variant(name=name)
        self._variants[name] = variant
        return variant


def _check_variant_name(name: str) -> None:
    if not naming.is_valid_name(name):
        raise MalformedAnnotation(f"Variant name `{name}` is not a valid identifier")


def build_registry(record: CanonicalRecord, options: Optional[DerivationOptions] = None) -> VariantRegistry:
    """
    Build the Variant Registry for a canonical record.

    Args:
        record: Canonical record (its name, variants and record-level
            annotations are read)
        options: Derivation options (strict_variants is honoured)

    Returns:
        VariantRegistry with empty field lists

    Raises:
        MalformedAnnotation: Invalid variant name or malformed attr_for
        UndeclaredVariant: attr_for targets an undeclared variant
        DuplicateVariantDeclaration: Duplicate name in strict mode
    """
    options = options or DerivationOptions()

    _check_variant_name(record.name)
    registry = VariantRegistry(record.name)

    for name in record.variants:
        _check_variant_name(name)
        registry.declare(name, strict=options.strict_variants)

    canonical_decorations: List[str] = []
    targeted: List[tuple] = []
    for text in record.annotations:
        if not is_directive(text, RECORD_DIRECTIVES):
            canonical_decorations.append(text)
            continue

        directive = parse_annotation(text)
        if directive.name == ATTR_FOR and (not directive.has_call or len(directive.args) != 2):
            raise MalformedAnnotation(
                f"`{ATTR_FOR}(...)` must have two string literal arguments, got `{directive.text}`"
            )
        variant_name, decoration = directive.args
        if variant_name not in registry:
            raise UndeclaredVariant(
                f"`{ATTR_FOR}(...)` targets undeclared variant `{variant_name}`",
                variant=variant_name,
            )
        targeted.append((variant_name, decoration))

    registry.get(record.name).decorations.extend(canonical_decorations)
    for variant_name, decoration in targeted:
        registry.get(variant_name).decorations.append(decoration)

    logger.debug("registry for %s: %s", record.name, registry.names())
    return registry


__all__ = ["VariantRegistry", "build_registry"]
