# schema.py
# Defines the Pydantic data models for the Markform document structure.

"""
Output Schema:
{
  "metadata": {
    "title": "Form Title",
    "description": "Form description",
    "version": "1.2 or null",
    "target_score": "60-75 points or null",
    "roles": ["agent"],
    "role": {"id": "junior", "title": "...", ...} or null
  },
  "groups": [
    {
      "id": "group_id",
      "title": "Group Title",
      "content": "Markdown narrative with field markers removed",
      "fields": [
        {
          "id": "field_id",
          "kind": "string | single_select | checkboxes | table | number",
          "label": "Question label",
          "role": "agent | user",
          "required": false,
          "min_length": null,
          "max_length": null,
          "options": [{"id": "option_id", "label": "Option label", "description": null}]
        }
      ]
    }
  ]
}

"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Discriminator, Field, Tag

KNOWN_FIELD_KINDS = ("string", "single_select", "checkboxes", "table", "number")
CHOICE_FIELD_KINDS = ("single_select", "checkboxes")
FIELD_ROLES = ("agent", "user")

# ----------------------------
# Fields
# ----------------------------

class FieldOption(BaseModel):
    id: str = Field(..., description="Option id, unique within its field.")
    label: str = Field(..., description="Display label of the option.")
    description: Optional[str] = Field(None, description="Optional longer description.")


class BaseField(BaseModel):
    id: str = Field(..., description="Field id, unique across the form.")
    kind: str = Field(..., description="Field kind.")
    label: str = Field(..., description="Question label shown to the candidate.")
    role: Literal["agent", "user"] = Field("agent", description="Who fills in the answer.")
    required: bool = Field(False, description="Whether an answer is expected.")
    min_length: Optional[int] = Field(None, ge=0, description="Length hint, never enforced.")
    max_length: Optional[int] = Field(None, ge=0, description="Length hint, never enforced.")

    @property
    def is_bonus(self) -> bool:
        return "BONUS" in self.label.upper()

    @property
    def is_choice(self) -> bool:
        return self.kind in CHOICE_FIELD_KINDS


class StringField(BaseField):
    kind: Literal["string"] = "string"


class NumberField(BaseField):
    kind: Literal["number"] = "number"


class TableField(BaseField):
    kind: Literal["table"] = "table"


class SingleSelectField(BaseField):
    kind: Literal["single_select"] = "single_select"
    options: List[FieldOption] = Field(default_factory=list)


class CheckboxesField(BaseField):
    kind: Literal["checkboxes"] = "checkboxes"
    options: List[FieldOption] = Field(default_factory=list)


class UnknownKindField(BaseField):
    """Field whose kind is not recognised. The literal kind string is kept."""


def _field_kind_tag(value: Any) -> str:
    if isinstance(value, dict):
        kind = value.get("kind")
    else:
        kind = getattr(value, "kind", None)
    return kind if kind in KNOWN_FIELD_KINDS else "unknown"


MarkformField = Annotated[
    Union[
        Annotated[StringField, Tag("string")],
        Annotated[NumberField, Tag("number")],
        Annotated[TableField, Tag("table")],
        Annotated[SingleSelectField, Tag("single_select")],
        Annotated[CheckboxesField, Tag("checkboxes")],
        Annotated[UnknownKindField, Tag("unknown")],
    ],
    Discriminator(_field_kind_tag),
]

FIELD_CLASSES = {
    "string": StringField,
    "number": NumberField,
    "table": TableField,
    "single_select": SingleSelectField,
    "checkboxes": CheckboxesField,
}

# ----------------------------
# Groups and forms
# ----------------------------

class MarkformGroup(BaseModel):
    id: str = Field(..., description="Group id, unique within a form.")
    title: str = Field(..., description="Section title.")
    fields: List[MarkformField] = Field(default_factory=list, description="Fields in document order.")
    content: str = Field("", description="Narrative markdown with field markers removed.")


class RoleInfo(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = None
    experience: Optional[str] = None
    estimated_time: Optional[str] = None
    sort_order: Optional[int] = None


class FormMetadata(BaseModel):
    title: str = Field("Untitled Form", description="Form title.")
    description: str = Field("", description="Form description.")
    version: Optional[str] = Field(None, description="Form version.")
    target_score: Optional[str] = Field(None, description="Target score, free text.")
    roles: List[str] = Field(default_factory=list, description="Roles, no duplicates, first-seen order.")
    role: Optional[RoleInfo] = Field(None, description="Role descriptor used for discovery.")


class ParsedForm(BaseModel):
    metadata: FormMetadata = Field(default_factory=FormMetadata)
    groups: List[MarkformGroup] = Field(default_factory=list, description="Groups in document order.")


class MergedGroup(MarkformGroup):
    roles: List[str] = Field(default_factory=list, description="Roles that contributed this group.")


class MergedForm(BaseModel):
    metadata: FormMetadata
    groups: List[MergedGroup] = Field(default_factory=list)
    selected_roles: List[str] = Field(default_factory=list)

# ----------------------------
# Utility results
# ----------------------------

class FieldIdValidation(BaseModel):
    valid: bool
    duplicates: List[str] = Field(default_factory=list)


class FormStats(BaseModel):
    group_count: int
    field_count: int
    required_count: int
    optional_count: int


class QuestionContext(BaseModel):
    group_title: str
    group_content: str
    field_label: str
    field_id: str
    is_bonus: bool


class FormReport(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class DiscoveredRole(BaseModel):
    id: str
    title: str
    experience: str = "Not specified"
    target_score: str = "Not specified"
    estimated_time: str = "Not specified"
    description: str = ""
    form_file: str
    sort_order: int = 999


class RolesSummary(BaseModel):
    total_estimated_time: str
    roles: List[DiscoveredRole] = Field(default_factory=list)


class SubmissionContext(BaseModel):
    version: str
    question_map: Dict[str, QuestionContext] = Field(default_factory=dict)


class QuestionWithAnswer(QuestionContext):
    answer: Union[str, List[str]] = ""
    comment: Optional[str] = None


class EmailSection(BaseModel):
    title: str
    content: str
    questions: List[QuestionWithAnswer] = Field(default_factory=list)
