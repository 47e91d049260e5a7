#!/usr/bin/env python3
# grader.py
# Checks a Markform file (or the JSON produced by main.py) for structural and consistency problems.

import sys
import json
from pydantic import ValidationError

from parsers import form_stats, parse_markform, validate_form
from schema import ParsedForm
from utils import MarkformError


def read_args():
    """Reads and validates command-line arguments."""
    if len(sys.argv) != 2:
        print(f"Usage: python {sys.argv[0]} <form.md | parsed.json>", file=sys.stderr)
        sys.exit(1)
    return sys.argv[1]


def load_parsed_form(path: str) -> ParsedForm:
    """Parses .form.md files; anything ending in .json is validated against the ParsedForm schema."""
    with open(path, 'r', encoding='utf-8') as f:
        raw = f.read()
    if path.endswith(".json"):
        return ParsedForm.model_validate(json.loads(raw))
    return parse_markform(raw)


def grade(form: ParsedForm) -> bool:
    report = validate_form(form)
    stats = form_stats(form)
    print(f"INFO: {stats.group_count} groups, {stats.field_count} fields "
          f"({stats.required_count} required, {stats.optional_count} optional)")

    if report.valid:
        print("✅ Consistency checks PASSED.")
    else:
        print("❌ Consistency checks FAILED. See errors below:", file=sys.stderr)
        print("--------------------------------------------------", file=sys.stderr)
        for start, err in enumerate(report.errors):
            print(f"E{start+1} : {err}", file=sys.stderr)
        print("--------------------------------------------------", file=sys.stderr)

    for start, warning in enumerate(report.warnings):
        print(f"W{start+1} : {warning}", file=sys.stderr)
    return report.valid


def main(path: str) -> int:
    try:
        form = load_parsed_form(path)
    except FileNotFoundError:
        print(f"❌ Error: Input file not found at '{path}'", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"❌ Error: Invalid JSON in '{path}'.\n   Details: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print("❌ Schema validation FAILED. See errors below:", file=sys.stderr)
        print(e, file=sys.stderr)
        return 1
    except MarkformError as e:
        print(f"❌ Error: Could not parse '{path}'.\n   Details: {e}", file=sys.stderr)
        return 1

    return 0 if grade(form) else 1


def cli() -> int:
    return main(read_args())


if __name__ == "__main__":
    sys.exit(cli())
