"""Unit tests for parsing completion replies."""

import pytest

from catalog_grader.core.services.generation import (
    clean_subcategory,
    normalize_candidates,
    parse_attribute_mapping,
    render_prompt,
)


class TestNormalizeCandidates:
    """Turning a free-text list into product names."""

    def test_strips_list_markers_and_quotes(self):
        """Bullets, numbering and quotes should not end up in names."""
        reply = '1. Sony WH-1000XM4\n2) "Bose QC45"\n- AirPods Max\n* Jabra Elite\n• Sennheiser'

        assert normalize_candidates(reply, 10) == [
            "Sony WH-1000XM4",
            "Bose QC45",
            "AirPods Max",
            "Jabra Elite",
            "Sennheiser",
        ]

    def test_drops_blank_lines_and_case_insensitive_repeats(self):
        """The first spelling of a repeated name wins."""
        reply = "Bose QC45\n\n   \nbose qc45\nAirPods Max\n"

        assert normalize_candidates(reply, 10) == ["Bose QC45", "AirPods Max"]

    def test_truncates_to_limit(self):
        """No more than ``limit`` names are returned."""
        reply = "\n".join(f"Product {i}" for i in range(10))

        assert normalize_candidates(reply, 3) == ["Product 0", "Product 1", "Product 2"]

    def test_keeps_numbers_inside_names(self):
        """Only a leading list marker is removed."""
        assert normalize_candidates("3. iPhone 15 Pro", 3) == ["iPhone 15 Pro"]

    def test_empty_reply(self):
        assert normalize_candidates("", 3) == []


class TestCleanSubcategory:
    @pytest.mark.parametrize(
        "reply, expected",
        [
            ("Headphones", "Headphones"),
            ("  Headphones.\n", "Headphones"),
            ('"Headphones"', "Headphones"),
            ('"Headphones."', "Headphones"),
            ("Over-Ear Headphones", "Over-Ear Headphones"),
        ],
    )
    def test_cleans_reply(self, reply, expected):
        assert clean_subcategory(reply) == expected


class TestParseAttributeMapping:
    """Strict parsing of the attribute JSON reply."""

    def test_parses_array_of_objects(self):
        reply = '[{"name": "Color", "value": "Black"}, {"name": "Battery", "value": "30h"}]'

        assert parse_attribute_mapping(reply) == [("Color", "Black"), ("Battery", "30h")]

    def test_stringifies_scalar_values(self):
        """Numbers and booleans are stored as text."""
        reply = '[{"name": "Wireless", "value": true}, {"name": "Weight", "value": 254}]'

        assert parse_attribute_mapping(reply) == [("Wireless", "true"), ("Weight", "254")]

    def test_tolerates_surrounding_code_fence(self):
        reply = '```json\n[{"name": "Color", "value": "Black"}]\n```'

        assert parse_attribute_mapping(reply) == [("Color", "Black")]

    def test_repeated_name_keeps_last_value(self):
        reply = '[{"name": "Color", "value": "Black"}, {"name": "Color", "value": "Silver"}]'

        assert parse_attribute_mapping(reply) == [("Color", "Silver")]

    @pytest.mark.parametrize(
        "reply",
        [
            "Color: Black",
            'Here you go: [{"name": "Color", "value": "Black"}]',
            '{"name": "Color", "value": "Black"}',
            "[]",
            '["Color"]',
            '[{"value": "Black"}]',
            '[{"name": "Color", "value": {"hex": "#000"}}]',
        ],
    )
    def test_rejects_anything_else(self, reply):
        """Prose, objects, empty arrays and malformed items all fail."""
        with pytest.raises(ValueError):
            parse_attribute_mapping(reply)


class TestRenderPrompt:
    def test_fills_product_and_count(self):
        assert render_prompt("List {count} like {product}", product="Kindle", count=3) == (
            "List 3 like Kindle"
        )

    def test_leaves_other_braces_alone(self):
        """JSON examples in templates must survive rendering."""
        template = 'Answer as [{"name": ..., "value": ...}] for {product}'

        assert render_prompt(template, product="Kindle", count=5) == (
            'Answer as [{"name": ..., "value": ...}] for Kindle'
        )
