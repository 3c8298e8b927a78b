"""
Tests for the DOT conversion-graph generator.

Tests cover:
    - Variant nodes and conversion edges
    - Solid vs. dashed edges (total vs. parameterized)
    - Field and argument labels in detailed mode
    - Special character escaping
"""

from crd.backends.dot_generator import DotMode, _escape_dot_id, _escape_dot_string, generate_dot
from crd.derivation import derive
from crd.examples import build_example_article_record, build_example_person_record
from crd.model import DerivedFamily


class TestDotBasicStructure:
    """Test basic DOT graph structure."""

    def test_empty_family_generates_valid_dot(self):
        dot = generate_dot(DerivedFamily(canonical="Empty"))
        assert dot.startswith("digraph Empty {")
        assert dot.endswith("}")

    def test_every_variant_is_a_node(self):
        dot = generate_dot(derive(build_example_article_record()))
        for name in ("Article", "Draft", "ArticleCard"):
            assert f"  {name} [label=" in dot

    def test_canonical_node_highlighted(self):
        dot = generate_dot(derive(build_example_person_record()))
        assert 'Person [label="Person", fillcolor=lightgreen];' in dot
        assert 'PersonSummary [label="PersonSummary"];' in dot

    def test_one_edge_per_ordered_pair(self):
        dot = generate_dot(derive(build_example_article_record()))
        assert dot.count("->") == 6


class TestDotEdgeStyle:
    """Test that edge style follows conversion totality."""

    def test_total_edge_is_solid(self):
        dot = generate_dot(derive(build_example_person_record()))
        assert "  Person -> PersonSummary;" in dot

    def test_parameterized_edge_is_dashed(self):
        dot = generate_dot(derive(build_example_person_record()))
        assert "  PersonSummary -> Person [style=dashed];" in dot

    def test_default_makes_edge_solid(self):
        dot = generate_dot(derive(build_example_person_record(age_default=True)))
        assert "  PersonSummary -> Person;" in dot


class TestDotDetailed:
    """Test labels in DETAILED mode."""

    def test_node_label_lists_fields(self):
        dot = generate_dot(derive(build_example_person_record()), mode=DotMode.DETAILED)
        assert 'Person [label="Person\\nname: str\\nage: int"' in dot

    def test_edge_label_lists_required_and_defaulted(self):
        dot = generate_dot(derive(build_example_article_record()), mode=DotMode.DETAILED)
        assert 'ArticleCard -> Draft [style=dashed, label="body, [revision]"];' in dot

    def test_simple_mode_has_no_edge_labels(self):
        dot = generate_dot(derive(build_example_article_record()), mode=DotMode.SIMPLE)
        assert "label=\"body" not in dot


class TestDotEscaping:
    """Test special character handling."""

    def test_quotes_escaped(self):
        assert _escape_dot_string('say "hi"') == '"say \\"hi\\""'

    def test_newline_becomes_line_break(self):
        assert _escape_dot_string("a\nb") == '"a\\nb"'

    def test_empty_string(self):
        assert _escape_dot_string("") == '""'

    def test_plain_identifier_unquoted(self):
        assert _escape_dot_id("Draft_2") == "Draft_2"

    def test_leading_digit_quoted(self):
        assert _escape_dot_id("2Draft") == '"2Draft"'
