"""
Derivation options and fallback expressions.

Options come from the ``options:`` section of a schema file or are
built directly. They never change which fields a variant owns; they only
control how strictly the two permissive behaviours are enforced and
which expression stands in for a missing default-flagged field.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from crd.errors import SchemaParseError


# Built-in fallback expressions, keyed by the bare type name.
BUILTIN_FALLBACKS: Dict[str, str] = {
    "int": "0",
    "float": "0.0",
    "complex": "0j",
    "str": '""',
    "bytes": 'b""',
    "bool": "False",
    "list": "[]",
    "List": "[]",
    "dict": "{}",
    "Dict": "{}",
    "set": "set()",
    "Set": "set()",
    "frozenset": "frozenset()",
    "FrozenSet": "frozenset()",
    "tuple": "()",
    "Tuple": "()",
    "Any": "None",
    "None": "None",
}

_OPTIONAL_RE = re.compile(r"^(?:typing\.)?Optional\[")
_UNION_NONE_RE = re.compile(r"\|\s*None\s*$|^\s*None\s*\|")


@dataclass
class DerivationOptions:
    """
    Options for one derivation.

    Properties:
        strict_variants:
            Reject a variant name declared twice with
            DuplicateVariantDeclaration instead of warning and overwriting.

        strict_names:
            Reject generated member name collisions with NameCollision
            instead of warning.

        fallbacks:
            Fallback expressions keyed by exact declared type text.
            Checked before the built-in table.
            Example: {"Decimal": "Decimal(0)"}
    """

    strict_variants: bool = False
    strict_names: bool = False
    fallbacks: Dict[str, str] = field(default_factory=dict)

    def fallback_for(self, type_text: str) -> str:
        return fallback_expression(type_text, self.fallbacks)


def _bare_type_name(type_text: str) -> str:
    head = type_text.split("[", 1)[0].strip()
    if head.startswith("typing."):
        head = head[len("typing."):]
    return head


def fallback_expression(type_text: str, overrides: Optional[Dict[str, str]] = None) -> str:
    """
    Return the expression used to synthesize a missing field of a type.

    Lookup order:
        1. overrides, by exact (stripped) type text
        2. Optional[...] and ``X | None`` → None
        3. built-in table, by bare type name (``List[int]`` → ``List``)
        4. the type's zero-argument constructor, ``<type>()``

    Args:
        type_text: Declared type expression
        overrides: Optional table keyed by type text

    Returns:
        Python expression text
    """
    text = type_text.strip()
    if overrides and text in overrides:
        return overrides[text]

    if _OPTIONAL_RE.match(text) or _UNION_NONE_RE.search(text):
        return "None"

    builtin = BUILTIN_FALLBACKS.get(_bare_type_name(text))
    if builtin is not None:
        return builtin

    return f"{text}()"


def options_from_dict(d: Optional[Dict[str, Any]]) -> DerivationOptions:
    """
    Build DerivationOptions from the ``options:`` mapping of a schema.

    Raises:
        SchemaParseError: If ``fallbacks`` is not a mapping
    """
    if not d:
        return DerivationOptions()
    fallbacks = d.get("fallbacks") or {}
    if not isinstance(fallbacks, dict):
        raise SchemaParseError("`options.fallbacks` must be a mapping of type to expression")
    return DerivationOptions(
        strict_variants=bool(d.get("strict_variants", False)),
        strict_names=bool(d.get("strict_names", False)),
        fallbacks={str(k): str(v) for k, v in fallbacks.items()},
    )


def options_to_dict(options: DerivationOptions) -> Dict[str, Any]:
    return {
        "strict_variants": options.strict_variants,
        "strict_names": options.strict_names,
        "fallbacks": dict(options.fallbacks),
    }


__all__ = [
    "DerivationOptions",
    "BUILTIN_FALLBACKS",
    "fallback_expression",
    "options_from_dict",
    "options_to_dict",
]
