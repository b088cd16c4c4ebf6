"""Lokasyon Desen Genişletici unit testleri."""

import pytest

from src.locations.errors import CapacityExceededError, PatternSyntaxError
from src.locations.pattern_expander import (
    NamingTemplate,
    count_nodes,
    expand,
    leaf_names,
    pattern_from_templates,
    templates_from_pattern,
    walk,
)


def _names(nodes):
    return [node.name for node in nodes]


class TestSimpleRanges:
    """Sayı ve harf aralıkları."""

    def test_numeric_range(self):
        assert _names(expand("A{3}")) == ["A1", "A2", "A3"]

    def test_letter_range(self):
        assert _names(expand("B[2]")) == ["BA", "BB"]

    def test_numeric_padding_uses_digits_of_count(self):
        names = _names(expand("A{10}"))
        assert names[0] == "A01"
        assert names[-1] == "A10"
        assert len(names) == 10

    def test_combined_numbers_then_letters(self):
        assert _names(expand("X{2}-[2]")) == ["X1-A", "X1-B", "X2-A", "X2-B"]

    def test_plain_literals_and_order(self):
        assert _names(expand("Doca, A{2}, Expedição")) == ["Doca", "A1", "A2", "Expedição"]

    def test_empty_segments_ignored(self):
        assert _names(expand(" A{2} , , B ")) == ["A1", "A2", "B"]

    def test_empty_pattern(self):
        assert expand("") == []

    def test_full_alphabet_allowed(self):
        names = _names(expand("R[26]"))
        assert names[-1] == "RZ"


class TestGroups:
    """Açık gruplar ve üst lokasyona göre üretim."""

    def test_explicit_group(self):
        nodes = expand("10(10A, 10B)")
        assert _names(nodes) == ["10"]
        assert _names(nodes[0].children) == ["10A", "10B"]
        assert leaf_names(nodes) == ["10A", "10B"]
        assert count_nodes(nodes) == 3

    def test_parent_relative_group(self):
        nodes = expand("20{2}*(+-[2])")
        assert _names(nodes) == ["201", "202"]
        assert _names(nodes[0].children) == ["201-A", "201-B"]
        assert _names(nodes[1].children) == ["202-A", "202-B"]

    def test_parent_relative_without_dash(self):
        nodes = expand("P{2}*(+[3])")
        assert _names(nodes[1].children) == ["P2A", "P2B", "P2C"]

    def test_range_base_without_star(self):
        nodes = expand("A{2}(X, Y)")
        assert _names(nodes) == ["A1", "A2"]
        assert _names(nodes[1].children) == ["X", "Y"]

    def test_nested_groups(self):
        nodes = expand("Fabrika(Estoque(A{2}*(+-[2])), Doca)")
        assert leaf_names(nodes) == ["A1-A", "A1-B", "A2-A", "A2-B", "Doca"]
        assert count_nodes(nodes) == 9

    def test_walk_is_depth_first(self):
        nodes = expand("10(10A, 10B), 11")
        assert [(d, n.name) for d, n in walk(nodes)] == [(0, "10"), (1, "10A"), (1, "10B"), (0, "11")]

    def test_leaf_count_matches_product(self):
        nodes = expand("Z{3}*(+-[4])")
        assert len(leaf_names(nodes)) == 12


class TestSyntaxErrors:
    """Hatalı desenler hiç ad üretmeden reddedilmeli."""

    @pytest.mark.parametrize(
        "pattern",
        ["A{3", "A{3}}", "B[2", "10(10A, 10B", "10(10A]", "A{B[2]}", "A{x}", "A{0}", "A{-1}", "(A, B)"],
    )
    def test_invalid_patterns_raise(self, pattern):
        with pytest.raises(PatternSyntaxError):
            expand(pattern)

    def test_error_carries_position(self):
        with pytest.raises(PatternSyntaxError) as exc_info:
            expand("A{3")
        assert exc_info.value.position == 1
        assert exc_info.value.pattern == "A{3"

    def test_relative_segment_outside_group(self):
        with pytest.raises(PatternSyntaxError):
            expand("+[2]")

    def test_text_after_group(self):
        with pytest.raises(PatternSyntaxError):
            expand("10(10A)B")

    def test_too_many_letters(self):
        with pytest.raises(CapacityExceededError) as exc_info:
            expand("B[27]")
        assert exc_info.value.limit == 26
        assert exc_info.value.requested == 27


class TestNamingTemplates:
    """Temel isim/sütun/satır tanımı ile gelişmiş desen arasında dönüşüm."""

    def test_templates_to_pattern(self):
        templates = [
            NamingTemplate("Doca"),
            NamingTemplate("A", columns=3),
            NamingTemplate("B", rows=2),
            NamingTemplate("X", columns=2, rows=2),
            NamingTemplate("  "),
        ]
        assert pattern_from_templates(templates) == "Doca, A{3}, B[2], X{2}-[2]"

    def test_pattern_to_templates(self):
        templates = templates_from_pattern("Doca, A{3}, B[2], X{2}-[2]")
        assert templates == [
            NamingTemplate("Doca"),
            NamingTemplate("A", columns=3),
            NamingTemplate("B", rows=2),
            NamingTemplate("X", columns=2, rows=2),
        ]

    def test_invalid_count_falls_back_to_one(self):
        assert templates_from_pattern("A{x}") == [NamingTemplate("A", columns=1)]

    def test_generated_pattern_expands(self):
        pattern = pattern_from_templates([NamingTemplate("X", columns=2, rows=2)])
        assert leaf_names(expand(pattern)) == ["X1-A", "X1-B", "X2-A", "X2-B"]
