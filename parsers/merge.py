# parsers/merge.py
# Combines the forms of several roles into one form for a multi-role assessment.

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from schema import FormMetadata, MarkformGroup, MergedForm, MergedGroup, ParsedForm

SUBMISSION_GROUP_ID = "submission"
CANDIDATE_INFO_GROUP_ID = "candidate_info"


def _join_present(values: Iterable[Optional[str]], separator: str) -> Optional[str]:
    present = [value for value in values if value]
    return separator.join(present) if present else None


def fold_groups(
    tagged_forms: Iterable[Tuple[Optional[str], ParsedForm]],
    skip_ids: Sequence[str] = (),
) -> List[Tuple[MarkformGroup, List[str]]]:
    """
    Folds the groups of (role, form) pairs into one ordered list of (group, roles).

    The first group seen for an id wins; a later group with the same id only adds
    its role to the tags. The submission group always comes last.
    A role of None contributes no tag.
    """
    accumulator: Dict[str, Tuple[MarkformGroup, List[str]]] = {}
    for role, form in tagged_forms:
        for group in form.groups:
            if group.id in skip_ids:
                continue
            entry = accumulator.get(group.id)
            if entry is None:
                accumulator[group.id] = (group, [role] if role else [])
            elif role and role not in entry[1]:
                entry[1].append(role)

    merged = [entry for group_id, entry in accumulator.items() if group_id != SUBMISSION_GROUP_ID]
    if SUBMISSION_GROUP_ID in accumulator:
        merged.append(accumulator[SUBMISSION_GROUP_ID])
    return merged


def merge_forms(forms: Sequence[ParsedForm]) -> ParsedForm:
    """
    Merges forms in order. No forms gives an empty form; a single form is returned as-is.
    Groups are deduplicated by id (first definition wins) and candidate_info is not treated specially.
    """
    if not forms:
        return ParsedForm(metadata=FormMetadata(title="Empty", description=""), groups=[])
    if len(forms) == 1:
        return forms[0]

    roles: List[str] = []
    for form in forms:
        for role in form.metadata.roles:
            if role not in roles:
                roles.append(role)

    metadata = FormMetadata(
        title=" + ".join(form.metadata.title for form in forms),
        description=forms[0].metadata.description,
        version=_join_present((form.metadata.version for form in forms), ", "),
        target_score=_join_present((form.metadata.target_score for form in forms), ", "),
        roles=roles,
    )
    groups = [group for group, _ in fold_groups((None, form) for form in forms)]
    return ParsedForm(metadata=metadata, groups=groups)


def merge_role_forms(
    forms_by_role: Mapping[str, Optional[ParsedForm]],
    selected_roles: Sequence[str],
) -> Optional[MergedForm]:
    """
    Merges the forms of the selected roles for the question-answering flow.

    Roles without a form are skipped, candidate_info is left out (it is collected
    before the questions) and each group records the roles that contributed it.
    Returns None when none of the selected roles has a form.
    """
    available = [(role, forms_by_role.get(role)) for role in selected_roles]
    available = [(role, form) for role, form in available if form is not None]
    if not available:
        return None

    groups = [
        MergedGroup(id=group.id, title=group.title, fields=group.fields, content=group.content, roles=roles)
        for group, roles in fold_groups(available, skip_ids=(CANDIDATE_INFO_GROUP_ID,))
    ]

    base = available[0][1].metadata
    if len(selected_roles) > 1:
        title = " + ".join(role[:1].upper() + role[1:] for role in selected_roles) + " Assessment"
    else:
        title = base.title

    return MergedForm(
        metadata=base.model_copy(update={"title": title}),
        groups=groups,
        selected_roles=list(selected_roles),
    )


def question_groups(form: ParsedForm) -> List[MarkformGroup]:
    """Groups to render as questions: everything except candidate_info."""
    return [group for group in form.groups if group.id != CANDIDATE_INFO_GROUP_ID]
