# parsers/markform_parser.py
# Rule-based parser for Markform documents (.form.md): frontmatter, groups, fields and options.

import re
import sys
from typing import Any, Dict, List, Optional

from schema import (
    CHOICE_FIELD_KINDS,
    FIELD_CLASSES,
    FIELD_ROLES,
    BaseField,
    FieldOption,
    FormMetadata,
    MarkformGroup,
    ParsedForm,
    RoleInfo,
    UnknownKindField,
)
from utils import (
    normalize_newlines,
    optional_str,
    parse_attributes,
    parse_optional_int,
    slugify_label,
    split_frontmatter,
)

DEFAULT_TITLE = "Untitled Form"
DEFAULT_ROLES = ["agent"]
REQUIRED_FIELD_ATTRIBUTES = ("kind", "id", "label")
REQUIRED_GROUP_ATTRIBUTES = ("id", "title")

# ----------------------------
# Patterns
# ----------------------------

MARKER_RE = re.compile(
    r'<!--[ \t]*(?:'
    r'(?P<group_open>group)(?:[ \t]+(?P<group_attrs>[^\n]*?))?'
    r'|(?P<group_close>/group)'
    r'|(?P<field_open>field)(?:[ \t]+(?P<field_attrs>[^\n]*?))?'
    r'|(?P<field_close>/field)'
    r')[ \t]*-->'
)

FIELD_MARKER_RE = re.compile(r'<!--[ \t]*(?:field(?:[ \t]+[^\n]*?)?|/field)[ \t]*-->')

OPTION_RE = re.compile(
    r'^[ \t]*[-*+][ \t]+\[ \][ \t]+(?P<label>.+?)'
    r'(?:[ \t]*<!--[ \t]*#(?P<id>[\w-]+)[ \t]*-->)?[ \t]*$',
    re.MULTILINE
)

# ----------------------------
# Metadata
# ----------------------------

def build_role_info(raw: Any) -> Optional[RoleInfo]:
    if not isinstance(raw, dict):
        return None
    sort_order = raw.get("sort_order")
    if isinstance(sort_order, bool) or not isinstance(sort_order, int):
        sort_order = parse_optional_int(optional_str(sort_order), "sort_order")
    return RoleInfo(
        id=optional_str(raw.get("id")),
        title=optional_str(raw.get("title")),
        experience=optional_str(raw.get("experience")),
        estimated_time=optional_str(raw.get("estimated_time")),
        sort_order=sort_order,
    )


def build_roles(raw: Any) -> List[str]:
    if raw is None:
        return list(DEFAULT_ROLES)
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        print(f"WARN: markform.roles must be a list, got {type(raw).__name__}; using {DEFAULT_ROLES}", file=sys.stderr)
        return list(DEFAULT_ROLES)

    roles = []
    for item in raw:
        role = optional_str(item)
        if role and role not in roles:
            roles.append(role)
    return roles


def build_metadata(frontmatter: Dict[str, Any]) -> FormMetadata:
    markform = frontmatter.get("markform")
    if markform is None:
        markform = {}
    elif not isinstance(markform, dict):
        print("WARN: 'markform' frontmatter key is not a mapping; using defaults.", file=sys.stderr)
        markform = {}

    description = markform.get("description")
    return FormMetadata(
        title=optional_str(markform.get("title")) or DEFAULT_TITLE,
        description=str(description) if description is not None else "",
        version=optional_str(markform.get("version")),
        target_score=optional_str(markform.get("target_score")),
        roles=build_roles(markform.get("roles")),
        role=build_role_info(markform.get("role")),
    )

# ----------------------------
# Options and fields
# ----------------------------

def parse_options(content: str, context: str = "") -> List[FieldOption]:
    """
    Parses '- [ ] Label <!-- #option_id -->' lines into options.
    Options without an explicit id get one derived from the label.
    Colliding ids are suffixed (_2, _3, ...) so ids stay unique within the field.
    """
    options = []
    seen = set()
    for position, m in enumerate(OPTION_RE.finditer(content or ""), start=1):
        label = m.group("label").strip()
        option_id = m.group("id") or slugify_label(label) or f"option_{position}"

        if option_id in seen:
            suffix = 2
            while f"{option_id}_{suffix}" in seen:
                suffix += 1
            print(f"WARN: Duplicate option id '{option_id}'{context}; renamed to '{option_id}_{suffix}'", file=sys.stderr)
            option_id = f"{option_id}_{suffix}"

        seen.add(option_id)
        options.append(FieldOption(id=option_id, label=label))
    return options


def build_field(attributes_str: str, content: str = "", context: str = "") -> Optional[BaseField]:
    """
    Builds one field from its marker attributes and the markdown between its markers.
    Returns None (after a warning) when kind, id or label is missing.
    """
    attributes = parse_attributes(attributes_str)
    missing = [name for name in REQUIRED_FIELD_ATTRIBUTES if not attributes.get(name)]
    if missing:
        print(f"WARN: Field missing required attributes {missing}{context}: {attributes_str!r}", file=sys.stderr)
        return None

    field_id = attributes["id"]
    where = f"{context} (field '{field_id}')"

    role = attributes.get("role") or "agent"
    if role not in FIELD_ROLES:
        print(f"WARN: Unknown role '{role}'{where}; using 'agent'", file=sys.stderr)
        role = "agent"

    data = {
        "id": field_id,
        "label": attributes["label"],
        "role": role,
        "required": attributes.get("required", "").strip().lower() == "true",
        "min_length": parse_optional_int(attributes.get("minLength"), "minLength", where),
        "max_length": parse_optional_int(attributes.get("maxLength"), "maxLength", where),
    }

    kind = attributes["kind"]
    field_cls = FIELD_CLASSES.get(kind)
    if field_cls is None:
        print(f"WARN: Unknown field kind '{kind}'{where}; kept as-is", file=sys.stderr)
        return UnknownKindField(kind=kind, **data)

    if kind in CHOICE_FIELD_KINDS:
        data["options"] = parse_options(content, where)
    return field_cls(**data)

# ----------------------------
# Content sanitization
# ----------------------------

def sanitize_group_content(content: str) -> str:
    """Removes field open/close markers (and nothing else) and trims the result."""
    previous = None
    text = content or ""
    # Repeat until stable so markers split by a removed marker cannot survive.
    while text != previous:
        previous = text
        text = FIELD_MARKER_RE.sub("", text)
    return text.strip()

# ----------------------------
# Scanning
# ----------------------------

def _close_unterminated(stack: List[dict], reason: str) -> None:
    for block in reversed(stack):
        label = block["attrs"].strip() or "<no attributes>"
        print(f"WARN: Unclosed {block['type']} at line {block['line']} ({label}) {reason}; dropped", file=sys.stderr)
    stack.clear()


def scan_blocks(body: str, line_offset: int = 0) -> List[dict]:
    """
    Single pass over every group/field marker, tracking open blocks on a stack.

    Returns the closed groups in document order as dicts with keys
    attrs, inner, line and fields (each field: attrs, inner, line).
    Unbalanced markers are reported and the affected block is dropped;
    everything else in the document is kept.
    """
    groups = []
    stack = []
    line = line_offset + 1
    last_pos = 0

    for m in MARKER_RE.finditer(body):
        line += body.count("\n", last_pos, m.start())
        last_pos = m.start()

        if m.group("group_open"):
            if stack:
                _close_unterminated(stack, f"before group at line {line}")
            stack.append({"type": "group", "attrs": m.group("group_attrs") or "", "start": m.end(), "line": line, "fields": []})

        elif m.group("group_close"):
            if not stack:
                print(f"WARN: Closing group marker without an open group at line {line}; ignored", file=sys.stderr)
                continue
            if stack[-1]["type"] == "field":
                _close_unterminated(stack[-1:], f"before end of group at line {line}")
                stack.pop()
            group = stack.pop()
            group["inner"] = body[group["start"]:m.start()]
            groups.append(group)

        elif m.group("field_open"):
            if not stack:
                print(f"WARN: Field marker outside of any group at line {line}; ignored", file=sys.stderr)
                continue
            if stack[-1]["type"] == "field":
                _close_unterminated(stack[-1:], f"before field at line {line}")
                stack.pop()
            stack.append({"type": "field", "attrs": m.group("field_attrs") or "", "start": m.end(), "line": line})

        else:
            if not stack or stack[-1]["type"] != "field":
                print(f"WARN: Closing field marker without an open field at line {line}; ignored", file=sys.stderr)
                continue
            field = stack.pop()
            field["inner"] = body[field["start"]:m.start()]
            stack[-1]["fields"].append(field)

    if stack:
        _close_unterminated(stack, "at end of document")
    return groups


def parse_groups(body: str, line_offset: int = 0) -> List[MarkformGroup]:
    groups = []
    for block in scan_blocks(body, line_offset):
        attributes = parse_attributes(block["attrs"])
        missing = [name for name in REQUIRED_GROUP_ATTRIBUTES if not attributes.get(name)]
        if missing:
            print(f"WARN: Group at line {block['line']} missing required attributes {missing}; dropped", file=sys.stderr)
            continue

        fields = []
        for scanned in block["fields"]:
            field = build_field(scanned["attrs"], scanned["inner"], f" at line {scanned['line']}")
            if field is not None:
                fields.append(field)

        groups.append(MarkformGroup(
            id=attributes["id"],
            title=attributes["title"],
            fields=fields,
            content=sanitize_group_content(block["inner"]),
        ))
    return groups

# ----------------------------
# Public entrypoint
# ----------------------------

def parse_markform(text: str) -> ParsedForm:
    """
    Parses a Markform document into a ParsedForm.

    Structural problems in the body are reported on stderr and the offending
    group or field is skipped. Only a malformed frontmatter block raises
    (FrontmatterError).
    """
    text = normalize_newlines(text)
    frontmatter, body = split_frontmatter(text)
    line_offset = text[:len(text) - len(body)].count("\n")
    return ParsedForm(
        metadata=build_metadata(frontmatter),
        groups=parse_groups(body, line_offset),
    )
