"""
Unit tests for template substitution.

WHAT: ``{{name}}`` replacement, variable extraction and value formatting.
"""

from datetime import date, datetime

import pytest

from receiptdesk.services.template_engine import (
    extract_variables,
    find_unresolved,
    format_amount,
    format_date,
    render,
)


class TestRender:
    def test_replaces_every_occurrence(self):
        assert render("{{a}}-{{a}}-{{b}}", {"a": "1", "b": "2"}) == "1-1-2"

    def test_unknown_markers_untouched(self):
        assert render("Hi {{name}}, total {{total}}", {"name": "Sam"}) == "Hi Sam, total {{total}}"

    def test_marker_names_are_exact(self):
        """Whitespace inside braces makes a different marker."""
        assert render("{{ name }} {{name}}", {"name": "Sam"}) == "{{ name }} Sam"

    def test_substituted_values_are_not_expanded(self):
        assert render("{{a}}", {"a": "{{b}}", "b": "x"}) == "{{b}}"

    def test_regex_characters_in_values(self):
        assert render("{{v}}", {"v": r"$1 \n (.*)"}) == r"$1 \n (.*)"

    def test_block_syntax_passes_through(self):
        template = "{{#each items}}<li>{{description}}</li>{{/each}}"
        assert render(template, {"items": "x"}) == template

    def test_empty_inputs(self):
        assert render("", {"a": "1"}) == ""
        assert render("{{a}}", {}) == "{{a}}"

    def test_prefix_names_do_not_shadow(self):
        assert render("{{client}} {{clientName}}", {"client": "A", "clientName": "B"}) == "A B"

    def test_values_are_inserted_without_conversion(self):
        """Formatting belongs to the caller; numbers are not stringified here."""
        with pytest.raises(TypeError):
            render("{{n}}", {"n": 5})


class TestVariables:
    def test_extract_in_first_seen_order(self):
        assert extract_variables("{{b}} {{a}} {{b}} {{c.d}}") == ["b", "a", "c.d"]

    def test_extract_skips_block_directives(self):
        assert extract_variables("{{#each items}}{{name}}{{/each}}") == ["name"]

    def test_extract_empty(self):
        assert extract_variables(None) == []

    def test_find_unresolved(self):
        assert find_unresolved("{{a}} {{b}}", {"a": "1"}) == ["b"]


class TestFormatting:
    def test_format_amount(self):
        assert format_amount(1234.5) == "1,234.50"
        assert format_amount(None) == "0.00"
        assert format_amount("12") == "12.00"

    def test_format_amount_non_numeric(self):
        assert format_amount("n/a") == "n/a"

    def test_format_date(self):
        assert format_date(date(2026, 1, 5)) == "January 05, 2026"
        assert format_date(datetime(2026, 3, 9, 10, 0)) == "March 09, 2026"
        assert format_date("2026-02-01T00:00:00") == "February 01, 2026"

    def test_format_date_passthrough(self):
        assert format_date("") == ""
        assert format_date(None) == ""
        assert format_date("soon") == "soon"
