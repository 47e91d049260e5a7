# discovery.py
# Finds role forms in a directory and loads, merges and pairs them with submitted answers.

import re
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from parsers import merge_forms, parse_markform, question_context_map
from parsers.markform_parser import build_role_info
from parsers.merge import CANDIDATE_INFO_GROUP_ID, SUBMISSION_GROUP_ID
from schema import (
    DiscoveredRole,
    EmailSection,
    ParsedForm,
    QuestionWithAnswer,
    RolesSummary,
    SubmissionContext,
)
from utils import FORM_FILE_SUFFIX, MarkformError, default_forms_dir, optional_str, split_frontmatter

DEFAULT_SORT_ORDER = 999
NOT_SPECIFIED = "Not specified"
TIME_RANGE_RE = re.compile(r'(\d+)-(\d+)')

PathLike = Union[str, Path]

# ----------------------------
# Discovery
# ----------------------------

def read_role(path: Path) -> Optional[DiscoveredRole]:
    """Reads role metadata from one form's frontmatter. Raises on unreadable files or bad YAML."""
    frontmatter, _ = split_frontmatter(path.read_text(encoding="utf-8"))
    markform = frontmatter.get("markform")
    if not isinstance(markform, dict):
        markform = {}

    role = build_role_info(markform.get("role"))
    if role is None or not role.id:
        print(f"WARN: Form {path.name} missing role.id in frontmatter, skipping", file=sys.stderr)
        return None

    return DiscoveredRole(
        id=role.id,
        title=role.title or optional_str(markform.get("title")) or "Untitled",
        experience=role.experience or NOT_SPECIFIED,
        target_score=optional_str(markform.get("target_score")) or NOT_SPECIFIED,
        estimated_time=role.estimated_time or NOT_SPECIFIED,
        description=optional_str(markform.get("description")) or "",
        form_file=path.name,
        sort_order=role.sort_order if role.sort_order is not None else DEFAULT_SORT_ORDER,
    )


def discover_forms(forms_dir: Optional[PathLike] = None) -> List[DiscoveredRole]:
    """
    Scans forms_dir for *.form.md files and returns their roles sorted by sort_order.
    A file that cannot be read or parsed is reported and skipped; the others are still returned.
    """
    directory = Path(forms_dir) if forms_dir is not None else default_forms_dir()
    try:
        paths = sorted(p for p in directory.iterdir() if p.name.endswith(FORM_FILE_SUFFIX))
    except OSError as e:
        print(f"ERROR: Failed to read forms directory {directory}: {e}", file=sys.stderr)
        return []

    roles = []
    for path in paths:
        try:
            role = read_role(path)
        except (OSError, UnicodeDecodeError, MarkformError) as e:
            print(f"ERROR: Failed to parse form {path.name}: {e}", file=sys.stderr)
            continue
        if role is not None:
            roles.append(role)

    roles.sort(key=lambda r: r.sort_order)
    return roles


def get_discovered_role(role_id: str, forms_dir: Optional[PathLike] = None) -> Optional[DiscoveredRole]:
    for role in discover_forms(forms_dir):
        if role.id == role_id:
            return role
    return None


def get_form_file_for_role(role_id: str, forms_dir: Optional[PathLike] = None) -> Optional[str]:
    role = get_discovered_role(role_id, forms_dir)
    return role.form_file if role else None


def all_role_ids(forms_dir: Optional[PathLike] = None) -> List[str]:
    return [role.id for role in discover_forms(forms_dir)]


def roles_summary(role_ids: Sequence[str], forms_dir: Optional[PathLike] = None) -> RolesSummary:
    """
    Known roles among role_ids plus the session time estimate.
    The estimate takes the largest lower and upper bound of the 'N-M' ranges.
    """
    discovered = {role.id: role for role in discover_forms(forms_dir)}
    roles = [discovered[role_id] for role_id in role_ids if role_id in discovered]

    lows, highs = [], []
    for role in roles:
        m = TIME_RANGE_RE.search(role.estimated_time)
        lows.append(int(m.group(1)) if m else 0)
        highs.append(int(m.group(2)) if m else 0)

    low = max(lows, default=0)
    high = max(highs, default=0)
    total = f"{low}-{high} minutes" if low > 0 else NOT_SPECIFIED
    return RolesSummary(total_estimated_time=total, roles=roles)

# ----------------------------
# Loading
# ----------------------------

def load_form(path: PathLike) -> ParsedForm:
    return parse_markform(Path(path).read_text(encoding="utf-8"))


def load_form_by_role(role_id: str, forms_dir: Optional[PathLike] = None) -> Optional[ParsedForm]:
    directory = Path(forms_dir) if forms_dir is not None else default_forms_dir()
    filename = get_form_file_for_role(role_id, directory)
    if not filename:
        print(f"WARN: No form file found for role: {role_id}", file=sys.stderr)
        return None

    try:
        return load_form(directory / filename)
    except (OSError, UnicodeDecodeError, MarkformError) as e:
        print(f"ERROR: Failed to load form for role {role_id}: {e}", file=sys.stderr)
        return None


def load_forms_by_roles(roles: Sequence[str], forms_dir: Optional[PathLike] = None) -> Optional[ParsedForm]:
    """Loads each role's form and merges them. None when no form could be loaded."""
    forms = [form for form in (load_form_by_role(role, forms_dir) for role in roles) if form is not None]
    if not forms:
        return None
    return merge_forms(forms)


def question_context_for_submission(
    roles: Sequence[str],
    forms_dir: Optional[PathLike] = None,
) -> Optional[SubmissionContext]:
    form = load_forms_by_roles(roles, forms_dir)
    if form is None:
        return None
    return SubmissionContext(
        version=form.metadata.version or "unknown",
        question_map=question_context_map(form),
    )

# ----------------------------
# Submission data
# ----------------------------

def _has_answer(answer) -> bool:
    if isinstance(answer, (list, tuple)):
        return len(answer) > 0
    return bool(answer and str(answer).strip())


def build_email_sections(form: ParsedForm, answers: Dict[str, object]) -> List[EmailSection]:
    """
    Pairs each question with its answer (answers[field_id]) and optional comment
    (answers[field_id + '_comment']). Unanswered questions and empty sections are left out,
    as are the candidate_info and submission groups.
    """
    sections = []
    for group in form.groups:
        if group.id in (CANDIDATE_INFO_GROUP_ID, SUBMISSION_GROUP_ID):
            continue

        questions = []
        for field in group.fields:
            answer = answers.get(field.id)
            if answer is None:
                answer = ""
            elif isinstance(answer, (list, tuple)):
                answer = [str(item) for item in answer]
            else:
                answer = str(answer)
            comment = answers.get(f"{field.id}_comment")
            comment = str(comment) if comment else None

            if not (_has_answer(answer) or comment):
                continue
            questions.append(QuestionWithAnswer(
                group_title=group.title,
                group_content=group.content,
                field_label=field.label,
                field_id=field.id,
                is_bonus=field.is_bonus,
                answer=answer,
                comment=comment,
            ))

        if questions:
            sections.append(EmailSection(title=group.title, content=group.content, questions=questions))
    return sections
