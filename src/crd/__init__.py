"""
Canonical Record Derivation (CRD) Package

Derives a family of record variants from one canonical record definition.

    canonical record + per-field rules
        → one record per declared variant
        → one capability interface (and absence marker) per field
        → conversions between every ordered pair of variants

ARCHITECTURAL GUARANTEE:
------------------------
The derivation (crd.derivation) contains ZERO knowledge of:
    - Python source syntax
    - DOT syntax
    - File formats

It computes STRUCTURE only. Emitters in crd.backends render it.
"""

from crd.config import DerivationOptions
from crd.derivation import derive
from crd.errors import DerivationError
from crd.model import CanonicalRecord, DerivedFamily, FieldSpec

__version__ = "0.1.0"

__all__ = [
    "CanonicalRecord",
    "DerivationError",
    "DerivationOptions",
    "DerivedFamily",
    "FieldSpec",
    "derive",
]
