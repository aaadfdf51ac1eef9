"""Command-line interface for rollmark."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

import uvicorn

from .config import settings
from .errors import RollmarkError
from .grid import WorkbookGrid, cell_text
from .ops import EditorSession, MatchStatus, PreviewResult


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="rollmark - attendance and grade entry for course roster workbooks"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help=f"Host to bind to (default: {settings.host})"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Port to bind to (default: {settings.port})"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    def add_workbook_args(p):
        p.add_argument(
            "workbook",
            nargs="?",
            default=settings.default_workbook,
            help="Path to the .xlsx workbook (default: $ROLLMARK_WORKBOOK)",
        )
        p.add_argument("--sheet", "-s", help="Restrict to one sheet (default: all sheets)")

    columns_parser = subparsers.add_parser("columns", help="List selectable target columns")
    add_workbook_args(columns_parser)

    for name, help_text in (
        ("preview", "Show what would be written, without writing"),
        ("apply", "Write ids or grades into a column"),
    ):
        p = subparsers.add_parser(name, help=help_text)
        add_workbook_args(p)
        p.add_argument("--column", "-c", required=True, help="Column key or header text")
        p.add_argument(
            "--task", "-t", default="attendance", help="attendance or grade (default: attendance)"
        )
        p.add_argument(
            "--input", "-i", help="File with one id (or 'id, grade') per line (default: stdin)"
        )

    apply_parser = subparsers.choices["apply"]
    apply_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    apply_parser.add_argument(
        "--discard", type=int, action="append", default=[], metavar="SEQ",
        help="Discard a preview row (repeatable)",
    )
    apply_parser.add_argument(
        "--skip-ambiguous", action="store_true", help="Discard every ambiguous match"
    )
    apply_parser.add_argument("--highlight-color", help="Fill colour as RRGGBB or #RRGGBB")
    apply_parser.add_argument(
        "--no-highlight", action="store_true", help="Write values without a fill"
    )
    apply_parser.add_argument(
        "--output", "-o", help="Where to save the result (default: overwrite the workbook)"
    )

    return parser


def main(argv: Optional[list[str]] = None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
        return
    if args.command not in ("columns", "preview", "apply"):
        parser.print_help()
        sys.exit(1)

    if not args.workbook:
        print("Error: no workbook given (pass a path or set ROLLMARK_WORKBOOK)")
        sys.exit(1)

    try:
        session = open_session(args.workbook, args.sheet)
        if args.command == "columns":
            run_columns(session)
        elif args.command == "preview":
            run_preview(session, args)
        else:
            run_apply(session, args)
    except (RollmarkError, OSError) as e:
        print(f"Error: {e}")
        sys.exit(1)


def run_server(host: str, port: int, reload: bool):
    """Run the web server."""
    uvicorn.run(
        "rollmark.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


def open_session(path: str, sheet: Optional[str] = None) -> EditorSession:
    return EditorSession(WorkbookGrid.load(path), sheet)


def read_input(path: Optional[str]) -> str:
    if path:
        return Path(path).read_text(encoding="utf-8")
    return sys.stdin.read()


def run_columns(session: EditorSession):
    """Print the column catalog."""
    options = session.list_columns()
    if not options:
        print("No columns found.")
        return
    for option in options:
        where = ", ".join(f"{loc.sheet}!{loc.col_letter}" for loc in option.locations)
        print(f"{option.key}\t{where}")


def print_preview(preview: PreviewResult):
    """Print a preview as a table followed by a summary."""
    print(f"{'#':>4}  {'ID':<12} {'SEC':>3}  {'CELL':<16} {'OLD':<8} {'NEW':<8} STATUS")
    for row in preview.rows:
        cell = f"{row.sheet}!{row.target_cell}" if row.has_target else "-"
        status = row.match_status.value + (" (discarded)" if row.discarded else "")
        section = "" if row.section is None else str(row.section)
        print(
            f"{row.seq:>4}  {row.input_id:<12} {section:>3}  {cell:<16} "
            f"{cell_text(row.old_value):<8} {cell_text(row.new_value):<8} {status}"
        )
        if row.note:
            print(f"      {row.note}")

    summary = preview.summary()
    print()
    print(
        f"{summary.total} ids: {summary.matched} matched, {summary.ambiguous} ambiguous, "
        f"{summary.not_found} not found, {summary.discarded} discarded"
    )
    for sid, count in summary.duplicates.items():
        print(f"Duplicate in input: {sid} x{count}")


def run_preview(session: EditorSession, args) -> PreviewResult:
    preview = session.build_preview(args.column, args.task, read_input(args.input))
    print_preview(preview)
    return preview


def run_apply(session: EditorSession, args):
    """Preview, apply discards, confirm, write and save."""
    preview = session.build_preview(args.column, args.task, read_input(args.input))
    for seq in args.discard:
        session.discard(seq)
    if args.skip_ambiguous:
        for row in preview.rows:
            if row.match_status == MatchStatus.AMBIGUOUS:
                row.discarded = True
    print_preview(preview)

    confirmed = args.yes
    if not confirmed:
        # stdin may already hold the id list
        if not sys.stdin.isatty():
            print("Refusing to write without confirmation (use --yes).")
            sys.exit(1)
        answer = input("Write these changes? [y/N] ").strip().lower()
        confirmed = answer in ("y", "yes")
    if not confirmed:
        print("Aborted; nothing was written.")
        return

    result = session.apply(
        confirmation=True,
        highlight=False if args.no_highlight else None,
        highlight_color=args.highlight_color,
    )
    for error in result.errors:
        print(f"Error: {error}")

    output = Path(args.output or args.workbook)
    output.write_bytes(session.export())
    print(f"Updated {result.cells_updated} cells ({result.skipped} skipped). Saved to {output}")
    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
