# parsers/form_checks.py
# Read-only helpers over a parsed form: field ids, statistics, question context and consistency checks.

from collections import Counter
from typing import Dict, List

from schema import (
    KNOWN_FIELD_KINDS,
    FieldIdValidation,
    FormReport,
    FormStats,
    ParsedForm,
    QuestionContext,
)


def all_field_ids(form: ParsedForm) -> List[str]:
    """Field ids of every group, in document order."""
    return [field.id for group in form.groups for field in group.fields]


def validate_unique_ids(form: ParsedForm) -> FieldIdValidation:
    """Every repeat is listed: an id used three times appears twice in duplicates."""
    seen = set()
    duplicates = []
    for field_id in all_field_ids(form):
        if field_id in seen:
            duplicates.append(field_id)
        seen.add(field_id)
    return FieldIdValidation(valid=not duplicates, duplicates=duplicates)


def form_stats(form: ParsedForm) -> FormStats:
    fields = [field for group in form.groups for field in group.fields]
    required = sum(1 for field in fields if field.required)
    return FormStats(
        group_count=len(form.groups),
        field_count=len(fields),
        required_count=required,
        optional_count=len(fields) - required,
    )


def question_context_map(form: ParsedForm) -> Dict[str, QuestionContext]:
    """Maps each field id to the question context shown alongside its answer."""
    context = {}
    for group in form.groups:
        for field in group.fields:
            context[field.id] = QuestionContext(
                group_title=group.title,
                group_content=group.content,
                field_label=field.label,
                field_id=field.id,
                is_bonus=field.is_bonus,
            )
    return context


def validate_form(form: ParsedForm) -> FormReport:
    """
    Advisory consistency checks. A form with findings is still renderable:
    - errors: duplicate field ids, duplicate group ids
    - warnings: duplicate option ids within a field, unknown field kinds,
      choice fields without options, min_length above max_length
    """
    errors: List[str] = []
    warnings: List[str] = []

    id_check = validate_unique_ids(form)
    for field_id in dict.fromkeys(id_check.duplicates):
        errors.append(f"field id '{field_id}' is used more than once")

    group_counts = Counter(group.id for group in form.groups)
    for group_id, count in group_counts.items():
        if count > 1:
            errors.append(f"group id '{group_id}' is used {count} times")

    for group in form.groups:
        for field in group.fields:
            where = f"group '{group.id}', field '{field.id}'"
            if field.kind not in KNOWN_FIELD_KINDS:
                warnings.append(f"{where}: unknown kind '{field.kind}' (rendered as text)")

            if field.is_choice:
                option_counts = Counter(option.id for option in field.options)
                for option_id, count in option_counts.items():
                    if count > 1:
                        warnings.append(f"{where}: option id '{option_id}' is used {count} times")
                if not field.options:
                    warnings.append(f"{where}: {field.kind} field has no options")

            if field.min_length is not None and field.max_length is not None and field.min_length > field.max_length:
                warnings.append(f"{where}: min_length {field.min_length} exceeds max_length {field.max_length}")

    return FormReport(valid=not errors, errors=errors, warnings=warnings)
