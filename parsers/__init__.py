from parsers.markform_parser import parse_markform, sanitize_group_content, parse_options, build_field
from parsers.form_checks import all_field_ids, validate_unique_ids, form_stats, question_context_map, validate_form
from parsers.merge import merge_forms, merge_role_forms, question_groups
from parsers.answer_schema import build_answer_model, validate_answers
