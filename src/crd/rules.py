"""
Field Rule Parser.

Turns one field's raw annotations into a FieldRule:

    only_in("A", "B")  → target_set = declared ∩ {A, B}
    not_in("A")        → target_set = declared − {A}
    only_in_self       → target_set = {canonical}
    (none)             → target_set = declared
    default            → field.default = True, combines with any of the above

Directive annotations are consumed. A lowercase `name` or `name(...)` outside
the vocabulary is a misspelled directive and is rejected. Every other
annotation is passthrough: it stays on the field and is emitted verbatim.
"""

import logging
from typing import List, Optional, Sequence

from crd.directives import (
    DEFAULT,
    FIELD_DIRECTIVES,
    NOT_IN,
    ONLY_IN,
    ONLY_IN_SELF,
    Directive,
    directive_name,
    in_directive_namespace,
    is_directive,
    parse_annotation,
)
from crd.errors import ConflictingDirective, MalformedAnnotation, UnknownVariant
from crd.model import FieldRule, FieldSpec, RuleKind

logger = logging.getLogger(__name__)

_KIND_BY_DIRECTIVE = {
    ONLY_IN: RuleKind.ONLY_IN,
    NOT_IN: RuleKind.NOT_IN,
    ONLY_IN_SELF: RuleKind.ONLY_IN_SELF,
}


def _check_shape(field_name: str, directive: Directive) -> None:
    """Validate argument count and call shape of a field directive."""
    if directive.name in (ONLY_IN, NOT_IN):
        if not directive.has_call or not directive.args:
            raise MalformedAnnotation(
                f"Field `{field_name}`: `{directive.name}(...)` must have at least one argument"
            )
    elif directive.has_call:
        raise MalformedAnnotation(
            f"Field `{field_name}`: `{directive.name}` takes no arguments, got `{directive.text}`"
        )


def _check_declared(field_name: str, directive: Directive, declared: Sequence[str]) -> None:
    for name in directive.args:
        if name not in declared:
            raise UnknownVariant(
                f"Field `{field_name}`: `{directive.name}(...)` has undeclared variant name `{name}`",
                variant=name,
            )


def parse_field_rule(field: FieldSpec, declared: Sequence[str], canonical: str) -> FieldRule:
    """
    Parse a field's annotations into a FieldRule.

    Side effects:
        - field.default is set when a ``default`` directive is present
        - field.passthrough receives every non-directive annotation

    Args:
        field: Field to parse (its `annotations` are read)
        declared: Every declared variant name, canonical included
        canonical: Canonical variant name

    Returns:
        FieldRule

    Raises:
        MalformedAnnotation: If a directive has the wrong shape or is not
            part of the vocabulary
        ConflictingDirective: If more than one inclusion directive is present
        UnknownVariant: If an inclusion directive names an undeclared variant
    """
    inclusion: Optional[Directive] = None
    default = False
    passthrough: List[str] = []

    for text in field.annotations:
        if not is_directive(text, FIELD_DIRECTIVES):
            if in_directive_namespace(text):
                raise MalformedAnnotation(
                    f"Field `{field.name}`: unknown directive `{directive_name(text)}` in `{text}`"
                )
            passthrough.append(text)
            continue

        directive = parse_annotation(text)
        _check_shape(field.name, directive)

        if directive.name == DEFAULT:
            default = True
            continue

        if inclusion is not None:
            raise ConflictingDirective(
                f"Field `{field.name}`: `{inclusion.text}` conflicts with `{directive.text}`"
            )
        inclusion = directive

    rule = FieldRule(default=default)
    if inclusion is None:
        rule.target_set = set(declared)
    else:
        rule.kind = _KIND_BY_DIRECTIVE[inclusion.name]
        rule.listed = list(inclusion.args)
        _check_declared(field.name, inclusion, declared)
        if rule.kind == RuleKind.ONLY_IN:
            rule.target_set = {name for name in declared if name in inclusion.args}
        elif rule.kind == RuleKind.NOT_IN:
            rule.target_set = {name for name in declared if name not in inclusion.args}
        else:
            rule.target_set = {canonical}

    field.default = default
    field.passthrough = passthrough

    logger.debug(
        "field %s: %s -> %s%s",
        field.name,
        rule.kind.value,
        sorted(rule.target_set),
        " (default)" if default else "",
    )
    return rule


__all__ = ["parse_field_rule"]
