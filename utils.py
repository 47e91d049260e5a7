# utils.py
# Contains helper functions for frontmatter extraction, attribute parsing and text normalization.

import os
import re
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

FORMS_DIR_ENV = "MARKFORM_FORMS_DIR"
DEFAULT_FORMS_DIR = "forms"
FORM_FILE_SUFFIX = ".form.md"

FRONTMATTER_RE = re.compile(r'---[ \t]*\n(?P<yaml>.*?)^---[ \t]*$\n?', re.DOTALL | re.MULTILINE)

# attr="value" | attr='value' | attr=value (unquoted runs until the next attr= or end of string)
ATTRIBUTE_RE = re.compile(r'''(\w+)=(?:"([^"]*)"|'([^']*)'|(\S+?)(?=\s+\w+=|\s*$))''')

NON_ALNUM_RUN_RE = re.compile(r'[^a-z0-9]+')


class MarkformError(ValueError):
    """Base error for documents that cannot be turned into a form."""


class FrontmatterError(MarkformError):
    """The YAML metadata block at the top of a document is malformed."""


def normalize_newlines(text: str) -> str:
    if not text:
        return ""
    return text.replace('\r\n', '\n').replace('\r', '\n')


def split_frontmatter(text: str) -> Tuple[Dict[str, Any], str]:
    """
    Splits a document into its YAML frontmatter mapping and the remaining body.

    A document without a leading '---' block yields an empty mapping and the
    whole text as body. Invalid YAML, or YAML that is not a mapping, raises
    FrontmatterError so the caller can decide whether to skip or abort.
    """
    text = normalize_newlines(text).lstrip('\ufeff')
    m = FRONTMATTER_RE.match(text)
    if not m:
        return {}, text

    try:
        data = yaml.safe_load(m.group('yaml'))
    except yaml.YAMLError as e:
        raise FrontmatterError(f"Invalid YAML frontmatter: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError(f"Frontmatter must be a mapping, got {type(data).__name__}")
    return data, text[m.end():]


def parse_attributes(attributes: str) -> Dict[str, str]:
    """
    Parses a marker attribute string into a mapping of raw string values.
    e.g. 'kind="string" id=q1 required=true' -> {'kind': 'string', 'id': 'q1', 'required': 'true'}
    """
    parsed = {}
    for m in ATTRIBUTE_RE.finditer(attributes or ""):
        name, double_quoted, single_quoted, bare = m.groups()
        if double_quoted is not None:
            parsed[name] = double_quoted
        elif single_quoted is not None:
            parsed[name] = single_quoted
        else:
            parsed[name] = bare
    return parsed


def slugify_label(label: str) -> str:
    """'Yes, partially' -> 'yes_partially'"""
    return NON_ALNUM_RUN_RE.sub('_', (label or "").lower()).strip('_')


def parse_optional_int(value: Optional[str], name: str, context: str = "") -> Optional[int]:
    """
    Parses a non-negative base-10 integer attribute.
    Missing, non-numeric and negative values come back as None; the latter two are reported.
    """
    if value is None or value == "":
        return None
    raw = value.strip()
    if not re.fullmatch(r'[+-]?\d+', raw):
        print(f"WARN: Ignoring non-numeric {name}={value!r}{context}", file=sys.stderr)
        return None
    number = int(raw, 10)
    if number < 0:
        print(f"WARN: Ignoring negative {name}={value!r}{context}", file=sys.stderr)
        return None
    return number


def optional_str(value: Any) -> Optional[str]:
    """YAML scalars (1.0, 2024) become strings; None and blanks stay None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def default_forms_dir() -> Path:
    return Path(os.environ.get(FORMS_DIR_ENV) or DEFAULT_FORMS_DIR)
