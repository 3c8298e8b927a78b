"""
Error and warning taxonomy for record derivation.

Every error is raised at generation time and aborts the whole derivation.
There is no partial output: one inconsistency invalidates the derived family.

Warnings cover the two behaviours that are deliberately left permissive
(duplicate variant declarations and generated-member name collisions).
They become errors when the matching strict option is enabled.
"""


class DerivationError(Exception):
    """Base class for every failure that aborts a derivation."""
    pass


class MalformedAnnotation(DerivationError):
    """Annotation text does not match any recognized directive shape."""
    pass


class ConflictingDirective(DerivationError):
    """More than one mutually exclusive inclusion directive on one field."""
    pass


class UnknownVariant(DerivationError):
    """A directive references a variant name that was never declared."""

    def __init__(self, message: str, variant: str = ""):
        super().__init__(message)
        self.variant = variant


class UndeclaredVariant(UnknownVariant):
    """A record-level ``attr_for`` targets a variant that was never declared."""
    pass


class UnnamedField(DerivationError):
    """A field of the canonical record has no name."""
    pass


class DuplicateField(DerivationError):
    """Two fields of the canonical record share a name."""
    pass


class InvalidFieldName(DerivationError):
    """A field name is not a Python identifier, or is a keyword."""
    pass


class DuplicateVariantDeclaration(DerivationError):
    """The same variant name is declared twice (strict mode only)."""
    pass


class NameCollision(DerivationError):
    """Two generated members of one variant share a name (strict mode only)."""
    pass


class SchemaParseError(DerivationError):
    """Raised when a schema description file cannot be read."""
    pass


class DerivationWarning(UserWarning):
    """Base class for non-fatal derivation diagnostics."""
    pass


class DuplicateVariantWarning(DerivationWarning):
    pass


class NameCollisionWarning(DerivationWarning):
    pass


__all__ = [
    "DerivationError",
    "MalformedAnnotation",
    "ConflictingDirective",
    "UnknownVariant",
    "UndeclaredVariant",
    "UnnamedField",
    "DuplicateField",
    "InvalidFieldName",
    "DuplicateVariantDeclaration",
    "NameCollision",
    "SchemaParseError",
    "DerivationWarning",
    "DuplicateVariantWarning",
    "NameCollisionWarning",
]
