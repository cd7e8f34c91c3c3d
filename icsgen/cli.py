"""
icsgen CLI - Command-line interface for the iCalendar generator.

Commands:
  icsgen convert - Convert a JSON calendar to .ics
  icsgen line    - Print a single content line
  icsgen check   - Lint the physical layer of an .ics file
  icsgen view    - Browse the generated content lines (TUI)
"""

from __future__ import annotations

import argparse
import io
import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger("icsgen")

MAX_INPUT_SIZE = 50 * 1024 * 1024


def _read_input(path: str) -> str:
    input_path = Path(path)
    if not input_path.is_file():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)
    size = input_path.stat().st_size
    if size > MAX_INPUT_SIZE:
        print(f"Error: File size {size} exceeds maximum {MAX_INPUT_SIZE} bytes", file=sys.stderr)
        sys.exit(1)
    return input_path.read_text(encoding="utf-8")


def _load_document(path: str, prodid: str | None = None):
    from icsgen.converters import from_json

    try:
        doc = from_json(_read_input(path))
    except ValueError as e:
        # json.JSONDecodeError is a ValueError too
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    if prodid:
        doc.prodid = prodid
    return doc


def cmd_convert(args: argparse.Namespace) -> None:
    """Convert a JSON calendar to .ics."""
    from icsgen.errors import FormatError

    doc = _load_document(args.path, args.prodid)
    try:
        if args.output:
            if ".." in Path(args.output).parts:
                print("Error: Output path must not contain '..' (path traversal)", file=sys.stderr)
                sys.exit(1)
            nbytes = doc.write(args.output)
            print(f"Converted {args.path} -> {args.output} ({len(doc.events)} events, {nbytes} bytes)")
        else:
            sys.stdout.buffer.write(doc.to_bytes())
            sys.stdout.flush()
    except FormatError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error: Cannot write output: {e}", file=sys.stderr)
        sys.exit(1)


def _split_param(text: str) -> tuple[str, str]:
    name, sep, value = text.partition("=")
    if not sep or not name:
        print(f"Error: Parameter must be NAME=VALUE, got {text!r}", file=sys.stderr)
        sys.exit(1)
    return name, value


def cmd_line(args: argparse.Namespace) -> None:
    """Print one content line, folded."""
    from icsgen.content_line import ContentLine
    from icsgen.errors import FormatError

    buf = io.StringIO()
    try:
        with ContentLine(buf) as line:
            line.name(args.name)
            for text in args.param or []:
                line.param_unquoted(*_split_param(text))
            for text in args.quoted or []:
                line.param_quoted(*_split_param(text))
            line.value(args.value)
            line.eol()
    except FormatError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.stdout.buffer.write(buf.getvalue().encode("utf-8"))
    sys.stdout.flush()


def cmd_check(args: argparse.Namespace) -> None:
    """Check line endings, line lengths and control bytes of an .ics file."""
    from icsgen.spec import check_physical_lines

    path = Path(args.path)
    if not path.is_file():
        print(f"Error: File not found: {args.path}", file=sys.stderr)
        sys.exit(1)

    data = path.read_bytes()
    problems = check_physical_lines(data)
    if problems:
        print(f"FAIL: {args.path}")
        for problem in problems:
            print(f"    {problem}")
        sys.exit(1)

    physical = data.count(b"\r\n")
    logical = physical - data.count(b"\r\n ") - data.count(b"\r\n\t")
    print(f"OK: {args.path} ({logical} content lines, {physical} physical lines)")


def cmd_view(args: argparse.Namespace) -> None:
    """Browse the content lines generated for a JSON calendar."""
    doc = _load_document(args.path, args.prodid)

    try:
        from icsgen.tui.viewer import run_viewer
    except ImportError:
        print(
            "TUI viewer requires the 'textual' package.\n"
            "Install it with: pip install \"icsgen[tui]\"",
            file=sys.stderr,
        )
        sys.exit(1)

    from icsgen.errors import FormatError

    try:
        run_viewer(doc, title=args.path)
    except FormatError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="icsgen",
        description="icsgen - iCalendar (RFC 5545) content-line generator.",
    )
    from icsgen import __version__
    parser.add_argument("--version", action="version", version=f"icsgen {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    # convert
    p_convert = sub.add_parser("convert", help="Convert a JSON calendar to .ics")
    p_convert.add_argument("path", help="Path to JSON calendar")
    p_convert.add_argument("-o", "--output", help="Output .ics path (default: stdout)")
    p_convert.add_argument("--prodid", help="PRODID (default: from JSON, then ICSGEN_PRODID)")

    # line
    p_line = sub.add_parser("line", help="Print a single content line")
    p_line.add_argument("name", help="Property name, e.g. SUMMARY or X-FOO")
    p_line.add_argument("value", help="Value, written as TEXT")
    p_line.add_argument("-p", "--param", action="append", metavar="NAME=VALUE",
                        help="Unquoted parameter (repeatable)")
    p_line.add_argument("-q", "--quoted", action="append", metavar="NAME=VALUE",
                        help="Quoted parameter (repeatable)")

    # check
    p_check = sub.add_parser("check", help="Lint the physical layer of an .ics file")
    p_check.add_argument("path", help="Path to .ics file")

    # view
    p_view = sub.add_parser("view", help="Browse generated content lines (TUI)")
    p_view.add_argument("path", help="Path to JSON calendar")
    p_view.add_argument("--prodid", help="PRODID override")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(message)s",
    )

    if not args.command:
        print("icsgen - iCalendar content-line generator\n")
        print("Usage:")
        print("  icsgen convert events.json -o events.ics")
        print("  icsgen line SUMMARY \"Lunch; then coffee\"")
        print("  icsgen line X-TEST value -p UNQUOTED=text -q QUOTED=\"a, b\"")
        print("  icsgen check events.ics")
        print("  icsgen view events.json")
        print()
        print(f"PRODID defaults to $ICSGEN_PRODID ({os.environ.get('ICSGEN_PRODID') or 'unset'}).")
        print("Run 'icsgen <command> --help' for details on any command.")
        sys.exit(0)

    commands = {
        "convert": cmd_convert,
        "line": cmd_line,
        "check": cmd_check,
        "view": cmd_view,
    }

    logger.debug("Running %s", args.command)
    commands[args.command](args)


if __name__ == "__main__":
    main()
