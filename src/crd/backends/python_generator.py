"""
Python source generator for derived record families.

Converts a DerivedFamily into an importable Python module:
    - one ``abc.ABC`` capability interface per field (getter + setter)
    - one empty ``abc.ABC`` absence marker per field
    - one ``@dataclass`` per variant, inheriting the interfaces and
      absence markers it implements
    - conversions as members:
        Target.from_<source>(other)         zero-argument
        source.into_<target>(...)           every missing field
        source.into_<target>_defaults(...)  required missing fields only

Supports two modes:
    - FULL: everything above
    - RECORDS: interfaces and records, no conversions
"""

import re
from enum import Enum
from typing import Dict, List

from crd import naming
from crd.model import CapabilityInterface, Conversion, ConversionKind, DerivedFamily, FieldSpec, Variant


class PythonMode(Enum):
    """Generation modes for Python output."""
    FULL = "full"        # records, interfaces, conversions
    RECORDS = "records"  # records and interfaces only


INDENT = "    "

_DATACLASS_RE = re.compile(r"^@(?:dataclasses\.)?dataclass\b")


def _banner(title: str) -> List[str]:
    rule = "# " + "=" * 73
    return [rule, f"# {title}", rule]


def _docstring(text: str, indent: str) -> List[str]:
    """Docstring lines with backslashes and every double quote escaped."""
    text = text.strip().replace("\\", "\\\\").replace('"', '\\"')
    if "\n" not in text:
        return [f'{indent}"""{text}"""']
    lines = [f'{indent}"""{text.splitlines()[0]}']
    for line in text.splitlines()[1:]:
        lines.append(f"{indent}{line}".rstrip())
    lines.append(f'{indent}"""')
    return lines


def _decorator(text: str) -> str:
    text = text.strip()
    return text if text.startswith("@") else f"@{text}"


def _field_annotation(f: FieldSpec) -> str:
    """Declared type, wrapped in Annotated[...] when passthrough metadata exists."""
    if not f.passthrough:
        return f.type
    return f"Annotated[{f.type}, {', '.join(f.passthrough)}]"


def _uses_annotated(family: DerivedFamily) -> bool:
    return any(f.passthrough for v in family.variants for f in v.fields)


def _uses_dataclasses_module(family: DerivedFamily) -> bool:
    return any(
        _decorator(d).startswith("@dataclasses.") for v in family.variants for d in v.decorations
    )


def _interface_lines(interface: CapabilityInterface) -> List[str]:
    field_type = interface.field_type
    lines = [
        f"class {interface.name}(ABC):",
        f'{INDENT}"""Has field `{interface.field_name}`."""',
        "",
        f"{INDENT}@abstractmethod",
        f"{INDENT}def {interface.getter}(self) -> {field_type}:",
        f"{INDENT * 2}...",
        "",
        f"{INDENT}@abstractmethod",
        f"{INDENT}def {interface.setter}(self, value: {field_type}) -> None:",
        f"{INDENT * 2}...",
        "",
        "",
        f"class {interface.absence_name}(ABC):",
        f'{INDENT}"""Lacks field `{interface.field_name}`."""',
    ]
    return lines


def _value_expressions(
    conversion: Conversion, target: Variant, receiver: str, fallbacks: Dict[str, str]
) -> List[str]:
    """Keyword arguments of the target constructor, in target field order."""
    copied = set(conversion.copied)
    defaulted = set(conversion.defaulted)
    values = []
    for f in target.fields:
        if f.name in copied:
            values.append(f"{f.name}={receiver}.{f.name}")
        elif f.name in defaulted:
            values.append(f"{f.name}={fallbacks[f.name]}")
        else:
            values.append(f"{f.name}={f.name}")
    return values


def _constructor_call(callee: str, values: List[str], indent: str) -> List[str]:
    if not values:
        return [f"{indent}return {callee}()"]
    lines = [f"{indent}return {callee}("]
    for value in values:
        lines.append(f"{indent}{INDENT}{value},")
    lines.append(f"{indent})")
    return lines


def _conversion_lines(conversion: Conversion, family: DerivedFamily) -> List[str]:
    target = family.get_variant(conversion.target)
    body_indent = INDENT * 2

    if conversion.kind == ConversionKind.FROM:
        values = _value_expressions(conversion, target, "other", family.fallbacks)
        lines = [
            f"{INDENT}@classmethod",
            f"{INDENT}def {conversion.name}(cls, other: {conversion.source}) -> {conversion.target}:",
        ]
        lines.extend(_constructor_call("cls", values, body_indent))
        return lines

    params = ["self"] + [f"{a.name}: {a.type}" for a in conversion.arguments]
    values = _value_expressions(conversion, target, "self", family.fallbacks)
    lines = [f"{INDENT}def {conversion.name}({', '.join(params)}) -> {conversion.target}:"]
    lines.extend(_constructor_call(conversion.target, values, body_indent))
    return lines


def _variant_lines(variant: Variant, family: DerivedFamily, mode: PythonMode) -> List[str]:
    lines = []
    decorations = [_decorator(d) for d in variant.decorations]
    lines.extend(decorations)
    if not any(_DATACLASS_RE.match(d) for d in decorations):
        lines.append("@dataclass")

    bases = variant.capabilities + variant.absences
    interface_order = {}
    for position, interface in enumerate(family.interfaces):
        interface_order[interface.name] = position
        interface_order[interface.absence_name] = position
    bases = sorted(bases, key=lambda name: interface_order.get(name, len(interface_order)))
    base_text = f"({', '.join(bases)})" if bases else ""
    lines.append(f"class {variant.name}{base_text}:")

    body: List[List[str]] = []
    if variant.is_canonical and family.docstring:
        body.append(_docstring(family.docstring, INDENT))

    if variant.fields:
        body.append([f"{INDENT}{f.name}: {_field_annotation(f)}" for f in variant.fields])

    for f in variant.fields:
        body.append([
            f"{INDENT}def {naming.getter_name(f.name)}(self) -> {f.type}:",
            f"{INDENT * 2}return self.{f.name}",
        ])
        body.append([
            f"{INDENT}def {naming.setter_name(f.name)}(self, value: {f.type}) -> None:",
            f"{INDENT * 2}self.{f.name} = value",
        ])

    if mode == PythonMode.FULL:
        for conversion in family.conversions:
            if conversion.owner == variant.name:
                body.append(_conversion_lines(conversion, family))

    if not body:
        body.append([f"{INDENT}pass"])

    for position, block in enumerate(body):
        if position > 0:
            lines.append("")
        lines.extend(block)
    return lines


def generate_python(family: DerivedFamily, mode: PythonMode = PythonMode.FULL) -> str:
    """
    Generate a Python module for a derived family.

    Args:
        family: DerivedFamily to render
        mode: Generation mode (FULL, RECORDS)

    Returns:
        String containing Python source
    """
    lines = [
        f"# Generated from canonical record `{family.canonical}`. Do not edit.",
        "from __future__ import annotations",
        "",
    ]
    if _uses_dataclasses_module(family):
        lines.append("import dataclasses")
    lines.extend([
        "from abc import ABC, abstractmethod",
        "from dataclasses import dataclass",
    ])
    if _uses_annotated(family):
        lines.append("from typing import Annotated")
    if family.imports:
        lines.append("")
        lines.extend(family.imports)

    # =========================================================================
    # INTERFACES
    # =========================================================================

    if family.interfaces:
        lines.extend(["", ""])
        lines.extend(_banner("CAPABILITY INTERFACES"))
        for interface in family.interfaces:
            lines.extend(["", ""])
            lines.extend(_interface_lines(interface))

    # =========================================================================
    # RECORDS
    # =========================================================================

    lines.extend(["", ""])
    lines.extend(_banner("RECORDS"))
    for variant in family.variants:
        lines.extend(["", ""])
        lines.extend(_variant_lines(variant, family, mode))

    exported = []
    for interface in family.interfaces:
        exported.extend([interface.name, interface.absence_name])
    exported.extend(v.name for v in family.variants)
    lines.extend(["", ""])
    lines.append("__all__ = [")
    for name in exported:
        lines.append(f'{INDENT}"{name}",')
    lines.append("]")

    return "\n".join(lines) + "\n"


def save_python_file(family: DerivedFamily, filename: str, mode: PythonMode = PythonMode.FULL) -> None:
    """
    Generate Python and save to file.

    Args:
        family: DerivedFamily to render
        filename: Output file path (.py extension recommended)
        mode: Generation mode
    """
    source = generate_python(family, mode=mode)
    with open(filename, 'w') as f:
        f.write(source)


__all__ = ["PythonMode", "generate_python", "save_python_file"]
