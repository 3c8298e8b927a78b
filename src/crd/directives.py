"""
Directive parsing for field-level and record-level annotations.

Annotations arrive as raw text, one string per annotation:

    default
    only_in_self
    only_in("Draft", "Summary")
    not_in('Draft')
    attr_for("Draft", "@dataclass(frozen=True)")

Each one is tokenized and parsed into a Directive node. The node carries
structure only: a name, its string-literal arguments, and whether it was
written as a call. Deciding what a directive MEANS belongs to the rule
parser (crd.rules) and the registry (crd.registry).

ARCHITECTURAL RULE:
    Directive arguments are string literals. Bare identifiers, numbers and
    nested calls are rejected with MalformedAnnotation, so that a typo never
    silently turns into a variant name.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from crd.errors import MalformedAnnotation


# Field-level vocabulary
DEFAULT = "default"
ONLY_IN = "only_in"
NOT_IN = "not_in"
ONLY_IN_SELF = "only_in_self"

# Record-level vocabulary
ATTR_FOR = "attr_for"

FIELD_DIRECTIVES = frozenset({DEFAULT, ONLY_IN, NOT_IN, ONLY_IN_SELF})
RECORD_DIRECTIVES = frozenset({ATTR_FOR})


@dataclass(frozen=True)
class Directive:
    """
    One parsed annotation.

    Examples:
        only_in_self
            Directive(name="only_in_self", args=(), has_call=False)

        not_in("Draft")
            Directive(name="not_in", args=("Draft",), has_call=True)

    Properties:
        name: Directive identifier
        args: String-literal arguments, in written order
        has_call: True when the annotation was written with parentheses,
            even empty ones. ``default()`` and ``default`` are different
            shapes and the rule parser treats them differently.
        text: The original annotation text, for diagnostics
    """

    name: str
    args: Tuple[str, ...] = ()
    has_call: bool = False
    text: str = ""


_TOKEN_RE = re.compile(
    r"""
    (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
    |(?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    |(?P<lparen>\()
    |(?P<rparen>\))
    |(?P<comma>,)
    |(?P<space>\s+)
    |(?P<other>.)
    """,
    re.VERBOSE | re.DOTALL,
)


def _unquote(literal: str) -> str:
    """Strip the surrounding quotes of a string literal and resolve escapes."""
    body = literal[1:-1]
    return re.sub(r"\\(.)", r"\1", body)


def _tokenize(text: str) -> List[Tuple[str, str]]:
    """Tokenize annotation text into (kind, value) pairs."""
    tokens = []
    for match in _TOKEN_RE.finditer(text):
        kind = match.lastgroup
        if kind == "space":
            continue
        tokens.append((kind, match.group()))
    return tokens


def parse_annotation(text: str) -> Directive:
    """
    Parse one annotation into a Directive.

    Args:
        text: Raw annotation text

    Returns:
        Directive node

    Raises:
        MalformedAnnotation: If the text is not ``ident`` or
            ``ident(string, ...)``
    """
    if text is None or not str(text).strip():
        raise MalformedAnnotation("Empty annotation")

    text = str(text).strip()
    tokens = _tokenize(text)

    kind, name = tokens[0]
    if kind != "ident":
        raise MalformedAnnotation(f"Annotation `{text}` must start with a directive name")

    if len(tokens) == 1:
        return Directive(name=name, args=(), has_call=False, text=text)

    if tokens[1][0] != "lparen":
        raise MalformedAnnotation(f"Unexpected `{tokens[1][1]}` after `{name}` in `{text}`")
    if tokens[-1][0] != "rparen":
        raise MalformedAnnotation(f"Missing closing parenthesis in `{text}`")

    args: List[str] = []
    inner = tokens[2:-1]
    pos = 0
    while pos < len(inner):
        kind, value = inner[pos]
        if kind != "string":
            raise MalformedAnnotation(
                f"Expected a string literal in `{text}`, got `{value}`"
            )
        args.append(_unquote(value))
        pos += 1
        if pos == len(inner):
            break
        if inner[pos][0] != "comma":
            raise MalformedAnnotation(
                f"Expected ',' or ')' in `{text}`, got `{inner[pos][1]}`"
            )
        pos += 1
        # A trailing comma is accepted: only_in("A",)
    return Directive(name=name, args=tuple(args), has_call=True, text=text)


def parse_annotations(texts: Iterable[str]) -> List[Directive]:
    """Parse a sequence of annotations, preserving order."""
    return [parse_annotation(t) for t in texts]


_HEAD_RE = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*(?:\(|$)", re.DOTALL)


def directive_name(text: str) -> Optional[str]:
    """
    Return the leading directive name of an annotation, without parsing it.

    Used to decide whether an annotation belongs to the derivation
    vocabulary (and must parse strictly) or is passthrough text that is
    carried verbatim into the generated output.

    Returns:
        The identifier, or None when the text does not start with
        ``ident`` followed by ``(`` or end of text
    """
    if text is None:
        return None
    match = _HEAD_RE.match(str(text))
    return match.group(1) if match else None


def is_directive(text: str, vocabulary: Iterable[str]) -> bool:
    """Check whether annotation text belongs to a directive vocabulary."""
    return directive_name(text) in vocabulary


_NAMESPACE_RE = re.compile(r"^[a-z_][a-z0-9_]*$")


def in_directive_namespace(text: str) -> bool:
    """
    Check whether annotation text is written in directive shape.

    A lowercase ``ident`` or ``ident(...)`` is reserved for directives, so
    a misspelled one (``defualt``, ``only_inn("A")``) is an error rather
    than passthrough. Passthrough metadata is written any other way:
    ``Field(gt=0)``, ``annotated_types.Gt(0)``, ``"pii"``.
    """
    name = directive_name(text)
    return name is not None and bool(_NAMESPACE_RE.match(name))


__all__ = [
    "Directive",
    "parse_annotation",
    "parse_annotations",
    "directive_name",
    "is_directive",
    "in_directive_namespace",
    "DEFAULT",
    "ONLY_IN",
    "NOT_IN",
    "ONLY_IN_SELF",
    "ATTR_FOR",
    "FIELD_DIRECTIVES",
    "RECORD_DIRECTIVES",
]
