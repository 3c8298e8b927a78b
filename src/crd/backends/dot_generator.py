"""
Graphviz DOT diagram generator for derived record families.

Converts a DerivedFamily into Graphviz DOT format: variants are nodes,
conversions are edges (source -> target).

Supports two modes:
    - SIMPLE: One edge per ordered pair; solid when a zero-argument
      conversion exists, dashed when only parameterized ones do
    - DETAILED: Node labels list owned fields, edge labels list the
      arguments the pair requires
"""

from enum import Enum
from typing import List

from crd.model import ConversionEdge, DerivedFamily, Variant


class DotMode(Enum):
    """Visualization modes for DOT output."""
    SIMPLE = "simple"      # Just the conversion graph
    DETAILED = "detailed"  # Include fields and required arguments


def _escape_dot_string(s: str) -> str:
    """Escape special characters for DOT labels."""
    if not s:
        return '""'
    # Escape backslashes first
    s = s.replace('\\', '\\\\')
    # Escape quotes
    s = s.replace('"', '\\"')
    # Newlines become DOT line breaks
    s = s.replace('\n', '\\n')
    return f'"{s}"'


def _escape_dot_id(identifier: str) -> str:
    """Escape/quote an identifier for DOT."""
    # If it starts with a digit or contains special chars, quote it
    if identifier[0].isdigit() or not identifier.replace('_', '').isalnum():
        return f'"{identifier}"'
    return identifier


def _node_label(variant: Variant, mode: DotMode) -> str:
    if mode != DotMode.DETAILED:
        return variant.name
    fields = [f"{f.name}: {f.type}" for f in variant.fields]
    return "\n".join([variant.name] + fields)


def _edge_label(edge: ConversionEdge) -> str:
    if not edge.missing:
        return ""
    parts: List[str] = []
    parts.extend(edge.missing_without_default)
    parts.extend(f"[{name}]" for name in edge.missing_with_default)
    label = ", ".join(parts)
    # Shorten for readability
    if len(label) > 40:
        label = label[:37] + "..."
    return label


def generate_dot(family: DerivedFamily, mode: DotMode = DotMode.SIMPLE) -> str:
    """
    Generate Graphviz DOT format for a derived family.

    Args:
        family: DerivedFamily to visualize
        mode: Visualization mode (SIMPLE, DETAILED)

    Returns:
        String containing DOT graph definition
    """
    lines = []

    # Header
    lines.append(f"digraph {_escape_dot_id(family.canonical)} {{")
    lines.append("  rankdir=LR;")
    lines.append("  node [shape=box, style=filled, fillcolor=lightblue];")

    # =========================================================================
    # NODES
    # =========================================================================

    for variant in family.variants:
        node_id = _escape_dot_id(variant.name)
        label_str = _escape_dot_string(_node_label(variant, mode))
        if variant.is_canonical:
            lines.append(f'  {node_id} [label={label_str}, fillcolor=lightgreen];')
        else:
            lines.append(f'  {node_id} [label={label_str}];')

    # =========================================================================
    # EDGES (CONVERSIONS)
    # =========================================================================

    # Every ordered pair converts one way or another: a pair without a
    # zero-argument conversion always has a missing field to pass in.
    for edge in family.edges:
        from_id = _escape_dot_id(edge.source)
        to_id = _escape_dot_id(edge.target)

        attrs = []
        if not edge.is_total:
            attrs.append("style=dashed")
        if mode == DotMode.DETAILED:
            label = _edge_label(edge)
            if label:
                attrs.append(f"label={_escape_dot_string(label)}")

        edge_attr = f" [{', '.join(attrs)}]" if attrs else ""
        lines.append(f"  {from_id} -> {to_id}{edge_attr};")

    # Footer
    lines.append("}")

    return "\n".join(lines)


def save_dot_file(family: DerivedFamily, filename: str, mode: DotMode = DotMode.SIMPLE) -> None:
    """
    Generate DOT and save to file.

    Args:
        family: DerivedFamily to visualize
        filename: Output file path (.dot extension recommended)
        mode: Visualization mode
    """
    dot = generate_dot(family, mode=mode)
    with open(filename, 'w') as f:
        f.write(dot)


__all__ = ["DotMode", "generate_dot", "save_dot_file"]
