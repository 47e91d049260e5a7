"""Tests for frontmatter, attribute and label helpers."""

import pytest

from utils import (
    FrontmatterError,
    parse_attributes,
    parse_optional_int,
    slugify_label,
    split_frontmatter,
)


class TestParseAttributes:
    """Tests for the marker attribute parser."""

    def test_quoted_and_unquoted_values(self):
        attrs = parse_attributes('kind="string" id=q1 label="What is your name?" required=true')

        assert attrs == {
            "kind": "string",
            "id": "q1",
            "label": "What is your name?",
            "required": "true",
        }

    def test_single_quoted_value(self):
        attrs = parse_attributes("id='q2' label='Say \"hi\"'")

        assert attrs == {"id": "q2", "label": 'Say "hi"'}

    def test_numeric_values_stay_strings(self):
        attrs = parse_attributes('minLength=10 maxLength=2000')

        assert attrs == {"minLength": "10", "maxLength": "2000"}

    def test_unquoted_value_with_spaces_is_not_an_attribute(self):
        attrs = parse_attributes('id=q1 label=two words')

        assert attrs == {"id": "q1"}

    def test_empty_string(self):
        assert parse_attributes("") == {}


class TestSlugifyLabel:
    """Tests for deriving option ids from labels."""

    def test_punctuation_and_spaces(self):
        assert slugify_label("Yes, partially") == "yes_partially"

    def test_leading_and_trailing_symbols_are_trimmed(self):
        assert slugify_label("  (LEFT) JOIN!  ") == "left_join"

    def test_label_without_alphanumerics(self):
        assert slugify_label("???") == ""

    def test_deterministic(self):
        assert slugify_label("Yes, partially") == slugify_label("Yes, partially")


class TestSplitFrontmatter:
    """Tests for YAML frontmatter extraction."""

    def test_frontmatter_and_body(self):
        data, body = split_frontmatter("---\nmarkform:\n  title: Demo\n---\nBody text\n")

        assert data == {"markform": {"title": "Demo"}}
        assert body == "Body text\n"

    def test_missing_frontmatter_returns_whole_text(self):
        text = "# Heading\n\n---\n\nNot frontmatter"
        data, body = split_frontmatter(text)

        assert data == {}
        assert body == text

    def test_empty_frontmatter(self):
        data, body = split_frontmatter("---\n---\nBody")

        assert data == {}
        assert body == "Body"

    def test_unterminated_frontmatter_is_treated_as_body(self):
        text = "---\ntitle: Demo\nno closing line"
        data, body = split_frontmatter(text)

        assert data == {}
        assert body == text

    def test_windows_newlines(self):
        data, body = split_frontmatter("---\r\nmarkform:\r\n  title: Demo\r\n---\r\nBody")

        assert data["markform"]["title"] == "Demo"
        assert body == "Body"

    def test_invalid_yaml_raises(self):
        with pytest.raises(FrontmatterError):
            split_frontmatter("---\nmarkform:\n  title: [unclosed\n---\nBody")

    def test_non_mapping_yaml_raises(self):
        with pytest.raises(FrontmatterError):
            split_frontmatter("---\n- just\n- a list\n---\nBody")


class TestParseOptionalInt:
    """Tests for the minLength/maxLength coercion."""

    def test_valid_integer(self):
        assert parse_optional_int("2000", "maxLength") == 2000

    def test_missing_value(self):
        assert parse_optional_int(None, "maxLength") is None
        assert parse_optional_int("", "maxLength") is None

    def test_non_numeric_is_dropped_with_warning(self, capsys):
        assert parse_optional_int("lots", "maxLength", " (field 'q1')") is None

        err = capsys.readouterr().err
        assert "WARN" in err
        assert "maxLength='lots'" in err
        assert "field 'q1'" in err

    def test_negative_is_dropped_with_warning(self, capsys):
        assert parse_optional_int("-5", "minLength") is None
        assert "negative" in capsys.readouterr().err
