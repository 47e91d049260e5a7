# main.py
# Main entry point for the Markform parsing CLI tool.

import sys
import json
import argparse
from dotenv import load_dotenv

# Load environment variables from .env file (for MARKFORM_FORMS_DIR)
load_dotenv()

from discovery import discover_forms, load_form, load_forms_by_roles
from parsers import form_stats, merge_forms
from utils import MarkformError


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Parse Markform (.form.md) files into structured JSON.")
    parser.add_argument("input_forms", nargs="*", help="Paths to .form.md files. Several files are merged in order.")
    parser.add_argument("-o", "--output", help="Where to write the JSON output (default: stdout).")
    parser.add_argument("--roles", nargs="+", metavar="ROLE", help="Load and merge the forms of these roles from the forms directory.")
    parser.add_argument("--forms-dir", help="Forms directory (default: $MARKFORM_FORMS_DIR or ./forms).")
    parser.add_argument("--list-roles", action="store_true", help="List the roles discovered in the forms directory.")
    parser.add_argument("--stats", action="store_true", help="Print group/field counts to stderr.")
    return parser


def write_output(data, output_path) -> None:
    if output_path is None:
        json.dump(data, sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")
        return
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    print(f"SUCCESS: Structured data successfully written to {output_path}", file=sys.stderr)


def main(argv=None) -> int:
    """Main function to orchestrate the parsing process."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.list_roles:
        data = [role.model_dump() for role in discover_forms(args.forms_dir)]
    elif args.roles:
        print(f"INFO: Loading forms for roles {', '.join(args.roles)}...", file=sys.stderr)
        form = load_forms_by_roles(args.roles, args.forms_dir)
        if form is None:
            print(f"ERROR: No form found for roles: {', '.join(args.roles)}", file=sys.stderr)
            return 1
        data = form.model_dump()
    elif args.input_forms:
        forms = []
        for path in args.input_forms:
            print(f"INFO: Reading and parsing {path}...", file=sys.stderr)
            try:
                forms.append(load_form(path))
            except (OSError, UnicodeDecodeError, MarkformError) as e:
                print(f"ERROR: Could not parse {path}: {e}", file=sys.stderr)
                return 1
        form = merge_forms(forms)
        data = form.model_dump()
    else:
        parser.print_help()
        return 1

    if args.stats and not args.list_roles:
        stats = form_stats(form)
        print(
            f"INFO: {stats.group_count} groups, {stats.field_count} fields "
            f"({stats.required_count} required, {stats.optional_count} optional)",
            file=sys.stderr,
        )

    try:
        write_output(data, args.output)
    except OSError as e:
        print(f"ERROR: Could not write to output file {args.output}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
