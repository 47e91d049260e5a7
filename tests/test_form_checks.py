"""Tests for field id, statistics and consistency helpers."""

from parsers import (
    all_field_ids,
    form_stats,
    parse_markform,
    question_context_map,
    validate_form,
    validate_unique_ids,
)
from schema import CheckboxesField, FieldOption, MarkformGroup, ParsedForm, StringField, UnknownKindField


def make_form(*groups):
    return ParsedForm(groups=list(groups))


class TestFieldIds:
    """Tests for all_field_ids and validate_unique_ids."""

    def test_all_field_ids_in_document_order(self, junior_form):
        assert all_field_ids(junior_form) == [
            "candidate_name",
            "candidate_email",
            "a1_timestamps",
            "a2_confidence",
            "b1_join_query",
            "b2_join_types",
            "final_notes",
        ]

    def test_unique_ids(self, junior_form):
        result = validate_unique_ids(junior_form)

        assert result.valid is True
        assert result.duplicates == []

    def test_every_repeat_is_listed(self):
        form = make_form(
            MarkformGroup(id="g1", title="One", fields=[StringField(id="q", label="A"), StringField(id="q", label="B")]),
            MarkformGroup(id="g2", title="Two", fields=[StringField(id="q", label="C"), StringField(id="r", label="D")]),
        )
        result = validate_unique_ids(form)

        assert result.valid is False
        assert result.duplicates == ["q", "q"]


class TestFormStats:
    """Tests for form_stats."""

    def test_counts(self, junior_form):
        stats = form_stats(junior_form)

        assert stats.group_count == 4
        assert stats.field_count == 7
        assert stats.required_count == 3
        assert stats.optional_count == 4

    def test_empty_form(self):
        stats = form_stats(ParsedForm())

        assert (stats.group_count, stats.field_count, stats.required_count, stats.optional_count) == (0, 0, 0, 0)


class TestQuestionContextMap:
    """Tests for question_context_map."""

    def test_context_for_each_field(self, junior_form):
        context = question_context_map(junior_form)

        assert len(context) == 7
        entry = context["b2_join_types"]
        assert entry.group_title == "Section B: Basic SQL"
        assert entry.group_content.startswith("Write a query")
        assert entry.field_label == "BONUS: Which joins keep unmatched rows?"
        assert entry.field_id == "b2_join_types"
        assert entry.is_bonus is True
        assert context["b1_join_query"].is_bonus is False

    def test_bonus_is_case_insensitive(self):
        form = make_form(MarkformGroup(id="g", title="G", fields=[StringField(id="q", label="(bonus) extra credit")]))

        assert question_context_map(form)["q"].is_bonus is True


class TestValidateForm:
    """Tests for the advisory consistency report."""

    def test_clean_form(self, junior_form):
        report = validate_form(junior_form)

        assert report.valid is True
        assert report.errors == []
        assert report.warnings == []

    def test_duplicate_field_and_group_ids_are_errors(self):
        text = (
            '<!-- group id="g" title="One" -->\n'
            '<!-- field kind="string" id="q1" label="A" -->\n<!-- /field -->\n'
            '<!-- /group -->\n'
            '<!-- group id="g" title="Two" -->\n'
            '<!-- field kind="string" id="q1" label="B" -->\n<!-- /field -->\n'
            '<!-- /group -->\n'
        )
        report = validate_form(parse_markform(text))

        assert report.valid is False
        assert "field id 'q1' is used more than once" in report.errors
        assert "group id 'g' is used 2 times" in report.errors

    def test_semantic_warnings(self):
        form = make_form(MarkformGroup(id="g", title="G", fields=[
            CheckboxesField(id="c", label="C", options=[FieldOption(id="x", label="X"), FieldOption(id="x", label="Y")]),
            CheckboxesField(id="empty", label="Empty"),
            UnknownKindField(id="r", kind="rating", label="R"),
            StringField(id="s", label="S", min_length=50, max_length=10),
        ]))
        report = validate_form(form)

        assert report.valid is True
        assert report.warnings == [
            "group 'g', field 'c': option id 'x' is used 2 times",
            "group 'g', field 'empty': checkboxes field has no options",
            "group 'g', field 'r': unknown kind 'rating' (rendered as text)",
            "group 'g', field 's': min_length 50 exceeds max_length 10",
        ]
