"""
`structural-edit` command line.

Usage
-----
structural-edit FILE upsertImport --module react --specifier useState --specifier useEffect
structural-edit FILE updateFunctionBody --function-name load --body-file body.ts
structural-edit FILE replaceJsxElement --jsx-tag Header --jsx "<NewHeader />"
structural-edit FILE replaceJsxAttributes --jsx-tag Button --attr variant=primary --attr disabled=false
structural-edit FILE insertAfterLastImport --text "const API = '/api';"
structural-edit FILE insertAtTop --text-file banner.ts
structural-edit --stats                       -- summary of logged edit metrics

Exit codes: 0 success (applied or no target found), 1 edit failed,
2 usage or I/O error.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Optional

import yaml

from .cli_display import setup_logger
from .config import Config
from .diff_display import format_colored_diff
from .editing.metrics import read_edit_stats
from .editing.request import EditAction
from .tool import apply_edit_to_file

EXIT_OK = 0
EXIT_EDIT_FAILED = 1
EXIT_USAGE = 2


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _parse_attr_value(raw: str) -> Any:
    """``true``/``false`` and numbers keep their type; the rest stays a string."""
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    if isinstance(value, bool):
        # YAML also reads yes/no/on/off as booleans
        return value if raw.strip().lower() in ("true", "false") else raw
    if isinstance(value, (int, float)):
        return value
    return raw


def _parse_attrs(pairs: list[str]) -> dict[str, Any]:
    attrs: dict[str, Any] = {}
    for pair in pairs:
        name, sep, raw = pair.partition("=")
        if not sep or not name:
            raise ValueError(f"Invalid --attr {pair!r}, expected NAME=VALUE")
        attrs[name] = _parse_attr_value(raw)
    return attrs


def _request_fields(args: argparse.Namespace) -> dict:
    """Build the camelCase request dict from parsed arguments."""
    selector: dict[str, Any] = {}
    if args.function_name:
        selector["functionName"] = args.function_name
    if args.jsx_tag:
        selector["jsxTag"] = args.jsx_tag
    if args.exported is not None:
        selector["exported"] = args.exported

    payload: dict[str, Any] = {}
    if args.module:
        payload["import"] = {"module": args.module, "specifiers": args.specifier or []}
    body = _read_text(args.body_file) if args.body_file else args.body
    if body:
        payload["functionBody"] = body
    if args.jsx:
        payload["jsxReplaceWith"] = args.jsx
    if args.attr:
        payload["jsxAttributes"] = _parse_attrs(args.attr)
    text = _read_text(args.text_file) if args.text_file else args.text
    if text:
        payload["insertText"] = text

    fields: dict[str, Any] = {"action": args.action}
    if selector:
        fields["selector"] = selector
    if payload:
        fields["payload"] = payload
    return fields


def _print_stats(config: Config) -> None:
    stats = read_edit_stats(metrics_dir=config.METRICS_DIR)
    print("\nEdit Metrics")
    print("=" * 40)
    print(f"  {'total_edits':<20} {stats['total_edits']}")
    for key in ("success_rate", "soft_miss_rate", "failure_rate"):
        print(f"  {key:<20} {stats[key]:.1f}%")
    print(f"  {'avg_elapsed_ms':<20} {stats['avg_elapsed_ms']:.1f}")
    for action, share in stats["actions"].items():
        print(f"    {action:<22} {share:.1f}%")
    print()


def _build_parser() -> argparse.ArgumentParser:
    actions = ", ".join(a.value for a in EditAction)
    parser = argparse.ArgumentParser(
        prog="structural-edit",
        description="Apply one structural edit to a JavaScript/TypeScript/JSX file.",
    )
    parser.add_argument("file", nargs="?", help="File to edit")
    parser.add_argument("action", nargs="?", help=f"One of: {actions}")

    selector = parser.add_argument_group("selector")
    selector.add_argument("--function-name", help="Function to update")
    selector.add_argument("--jsx-tag", help="JSX tag name, as written")
    selector.add_argument("--exported", action="store_const", const=True, default=None,
                          help="Accepted for compatibility; not used for matching")

    payload = parser.add_argument_group("payload")
    payload.add_argument("--module", help="Module for upsertImport")
    payload.add_argument("--specifier", action="append",
                         help="Named import to ensure (repeatable)")
    body = payload.add_mutually_exclusive_group()
    body.add_argument("--body", help="New function body")
    body.add_argument("--body-file", help="Read the new function body from a file")
    payload.add_argument("--jsx", help="Replacement JSX for replaceJsxElement")
    payload.add_argument("--attr", action="append", metavar="NAME=VALUE",
                         help="Attribute for replaceJsxAttributes (repeatable)")
    text = payload.add_mutually_exclusive_group()
    text.add_argument("--text", help="Statements to insert")
    text.add_argument("--text-file", help="Read the statements to insert from a file")

    parser.add_argument("--dry-run", action="store_true", help="Do not write the file")
    parser.add_argument("--json", action="store_true", help="Print the tool result as JSON")
    parser.add_argument("--no-diff", action="store_true", help="Do not print the preview")
    parser.add_argument("--config", help="Path to a .structural_edit.yaml file")
    parser.add_argument("--stats", action="store_true", help="Show edit metrics and exit")
    parser.add_argument("--verbose", action="store_true",
                        help="Write a debug log under the configured log_dir")
    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    config = Config.load(args.config)
    if args.verbose:
        setup_logger(config.LOG_DIR)

    if args.stats:
        _print_stats(config)
        return EXIT_OK

    if not args.file or not args.action:
        parser.print_usage(sys.stderr)
        print("structural-edit: error: FILE and ACTION are required", file=sys.stderr)
        return EXIT_USAGE

    if not os.path.isfile(args.file):
        print(f"File not found: {args.file}", file=sys.stderr)
        return EXIT_USAGE

    try:
        fields = _request_fields(args)
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_USAGE

    result = apply_edit_to_file(args.file, fields, dry_run=args.dry_run, config=config)

    if args.json:
        print(json.dumps(result, indent=2))
        return EXIT_OK if result["ok"] else EXIT_EDIT_FAILED

    if not result["ok"]:
        print(result["error"], file=sys.stderr)
        return EXIT_EDIT_FAILED

    if not result["applied"]:
        print(f"No change: nothing matched in {args.file} ({result['elapsedMs']}ms)")
        return EXIT_OK

    if not args.no_diff:
        print(format_colored_diff(result["previewDiff"], args.file))
    verb = "Would update" if args.dry_run else "Updated"
    ranges = ", ".join(f"{e['start']}-{e['end']}" for e in result["edits"])
    print(f"{verb} {args.file}: lines {ranges} ({result['elapsedMs']}ms)")
    return EXIT_OK
