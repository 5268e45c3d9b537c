"""
CLI (Command Line Interface).

Quick terminal commands for checking how a request is understood, e.g.:

    coursefinder validate "smsts refresher"
    coursefinder dates "end of october" --now 2025-08-15
    coursefinder search "SMSTS in Stratford next month" --catalogue sessions.json
    coursefinder ask "tws in sheffield" --endpoint https://example.com/products.json

Note:
- `ask` is an alias of `search`
- output is plain terminal text; nothing here is used by the library code
"""

from __future__ import annotations

import argparse
import logging
from datetime import date
from typing import Any, List, Optional

from rich.console import Console
from rich.table import Table
from rich import box

from coursefinder import config
from coursefinder.catalogue import CatalogueError, fetch_catalogue, load_catalogue
from coursefinder.dates import normalize_date_window
from coursefinder.model import (
    STAGE_NO_FAMILY_SESSIONS,
    STAGE_NO_SESSIONS_AT_LOCATION,
    STAGE_NO_SESSIONS_IN_WINDOW,
    Diagnostics,
    QueryOutcome,
    ResultItem,
    ValidationResult,
)
from coursefinder.pipeline import find_sessions
from coursefinder.validate import validate_course_query


def _console() -> Console:
    # resolved per call so redirected stdout (tests, pipes) is honoured
    return Console(highlight=False, markup=False, soft_wrap=True)


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a YYYY-MM-DD date: {value!r}")


def _configure_logging(verbose: bool) -> None:
    if config.DEBUG:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def _print_validation(console: Console, qc: ValidationResult) -> None:
    console.print(f"Reason: {qc.reason}")
    console.print(f"Recognized family: {qc.recognized_family or '-'}")
    console.print(f"Refresher requested: {qc.refresher_requested}")
    if qc.exists:
        console.print(f"Course: {qc.normalized_family}")
    for s in qc.suggestions:
        console.print(f"- {s.label}")


def _sessions_table(items: List[ResultItem], title: Optional[str] = None) -> Table:
    table = Table(title=title, box=box.SIMPLE)
    for col in ("Title", "Dates", "Venue/Format", "Price", "Spaces", "Link"):
        table.add_column(col)
    for it in items:
        table.add_row(
            it.title,
            it.dates,
            it.venue_or_format,
            "" if it.price is None else str(it.price),
            "" if it.spaces is None else str(it.spaces),
            it.link or "",
        )
    return table


def _print_diagnostics(console: Console, diag: Diagnostics, outcome: QueryOutcome) -> None:
    course = diag.family or outcome.validation.normalized_family or "the requested course"
    when = outcome.date_window.label if outcome.date_window else "the selected window"
    where = outcome.location or "any location"

    if diag.stage == STAGE_NO_FAMILY_SESSIONS:
        console.print(f"No {course} sessions are scheduled anywhere at the moment.")
    elif diag.stage == STAGE_NO_SESSIONS_IN_WINDOW:
        console.print(f"No {course} sessions for {when} at any location.")
        nearest = diag.nearest_in_location or diag.nearest_anywhere
        if nearest:
            console.print(_sessions_table(nearest, title="Next available"))
    elif diag.stage == STAGE_NO_SESSIONS_AT_LOCATION:
        console.print(f"No {course} sessions in {where} in any window.")
        if diag.nearest_anywhere:
            console.print(_sessions_table(diag.nearest_anywhere, title="Closest elsewhere"))
    else:
        console.print(f"No {course} sessions for {when} in {where}.")

    if diag.alternative:
        label = "Standard" if diag.refresher else "Refresher"
        console.print(_sessions_table(diag.alternative, title=f"{label} alternatives"))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_validate(args: argparse.Namespace) -> int:
    text = (args.text or "").strip()
    if not text:
        print("Please provide a course text.")
        return 1

    _print_validation(_console(), validate_course_query(text))
    return 0


def _cmd_dates(args: argparse.Namespace) -> int:
    window = normalize_date_window(args.text or "", now=args.now)
    _console().print(f"{window.label}: {window.start} .. {window.end}")
    return 0


def _load_sessions(args: argparse.Namespace) -> List[dict[str, Any]]:
    if args.catalogue:
        return load_catalogue(args.catalogue)
    return fetch_catalogue(args.endpoint or config.CATALOGUE_URL, timeout=args.timeout)


def _cmd_search(args: argparse.Namespace) -> int:
    text = (args.text or "").strip()
    if not text:
        print("Please provide a search text.")
        return 1
    if not (args.catalogue or args.endpoint or config.CATALOGUE_URL):
        print("Please provide --catalogue FILE or --endpoint URL (or set COURSEFINDER_CATALOGUE_URL).")
        return 1

    try:
        sessions = _load_sessions(args)
    except CatalogueError as exc:
        print(f"Could not load catalogue: {exc}")
        return 1

    outcome = find_sessions(
        sessions,
        text,
        date_text=args.date,
        include_refresher=args.refresher,
        now=args.now,
    )
    console = _console()

    if not outcome.validation.exists:
        _print_validation(console, outcome.validation)
        return 0

    if outcome.items:
        where = f" in {outcome.location}" if outcome.location else ""
        header = f"{outcome.count} option(s){where} for {outcome.date_window.label}"
        console.print(_sessions_table(outcome.items, title=header))
        if outcome.count > len(outcome.items):
            console.print(f"... and {outcome.count - len(outcome.items)} more results")
        return 0

    if outcome.diagnostics is not None:
        _print_diagnostics(console, outcome.diagnostics, outcome)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="coursefinder", description="Course session finder")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log progress to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    p_validate = sub.add_parser("validate", help="Check how a course request is understood")
    p_validate.add_argument("text", type=str, help="Course text (e.g. 'smsts refresher')")

    p_dates = sub.add_parser("dates", help="Turn a time expression into a date window")
    p_dates.add_argument("text", type=str, help="Time text (e.g. 'next month')")
    p_dates.add_argument("--now", type=_parse_day, default=None, help="Reference day YYYY-MM-DD")

    p_search = sub.add_parser("search", aliases=["ask"], help="Find sessions for a request")
    p_search.add_argument("text", type=str, help="Request (e.g. 'SMSTS in Stratford next month')")
    source = p_search.add_mutually_exclusive_group()
    source.add_argument("--catalogue", "-c", type=str, default=None, help="Catalogue JSON file")
    source.add_argument("--endpoint", "-e", type=str, default=None, help="Catalogue JSON URL")
    p_search.add_argument("--date", "-d", type=str, default=None, help="Time text, overrides the request")
    p_search.add_argument("--now", type=_parse_day, default=None, help="Reference day YYYY-MM-DD")
    p_search.add_argument("--timeout", type=float, default=config.TIMEOUT, help="HTTP timeout seconds")
    flag = p_search.add_mutually_exclusive_group()
    flag.add_argument("--refresher", dest="refresher", action="store_const", const=True, default=None,
                      help="Explain empty results for the refresher course (lists standard alternatives)")
    flag.add_argument("--standard", dest="refresher", action="store_const", const=False,
                      help="Explain empty results for the standard course (lists refresher alternatives)")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "validate":
        raise SystemExit(_cmd_validate(args))
    if args.command == "dates":
        raise SystemExit(_cmd_dates(args))
    if args.command in ("search", "ask"):
        raise SystemExit(_cmd_search(args))

    raise SystemExit(2)
