# parsers/answer_schema.py
# Builds a Pydantic model that validates the answers submitted for a parsed form.

import sys
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, ConfigDict, Field, create_model

from parsers.merge import CANDIDATE_INFO_GROUP_ID
from schema import ParsedForm


class AnswerModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _answer_definition(field) -> tuple:
    # min_length/max_length are display hints only; long answers (e.g. SQL) must always pass.
    if field.kind == "checkboxes":
        return (List[str], Field(default_factory=list, alias=field.id))
    if field.kind == "number":
        return (Optional[float], Field(None, alias=field.id))
    return (str, Field("", alias=field.id))


def build_answer_model(
    form: ParsedForm,
    exclude_groups: Sequence[str] = (CANDIDATE_INFO_GROUP_ID,),
    model_name: str = "AssessmentAnswers",
) -> Type[AnswerModel]:
    """
    One optional entry per field, keyed by field id:
    string, single_select, table and unknown kinds -> str (default "")
    checkboxes -> list of option ids (default [])
    number -> float or None
    """
    definitions: Dict[str, Any] = {}
    seen = set()
    for group in form.groups:
        if group.id in exclude_groups:
            continue
        for field in group.fields:
            if field.id in seen:
                print(f"WARN: Duplicate field id '{field.id}' in group '{group.id}'; first definition used for answers", file=sys.stderr)
                continue
            seen.add(field.id)
            definitions[f"field_{len(definitions)}"] = _answer_definition(field)
    return create_model(model_name, __base__=AnswerModel, **definitions)


def validate_answers(model: Type[AnswerModel], answers: Dict[str, Any]) -> Dict[str, Any]:
    """Validates raw answers keyed by field id and returns them with defaults filled in."""
    return model.model_validate(answers).model_dump(by_alias=True)
