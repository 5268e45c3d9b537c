"""
Session search and zero-result diagnostics.

Works on an in-memory catalogue snapshot: a list of raw session dicts with
the keys name, start_date, end_date, dates_list, price, available_spaces
and link. Rows with missing fields are tolerated; they simply fail the
individual filters.

Ranking: soonest start date first (undated sessions last), then lowest price.
Duplicates (same name and same raw start date text) keep their first
occurrence.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any, Iterable, List, Optional

from coursefinder import config
from coursefinder.dates import parse_loose_date, utc_today, within_range
from coursefinder.families import as_family, counterpart_family
from coursefinder.location import detect_location_facet, match_location
from coursefinder.model import (
    STAGE_COMBINED,
    STAGE_NO_FAMILY_SESSIONS,
    STAGE_NO_SESSIONS_AT_LOCATION,
    STAGE_NO_SESSIONS_IN_WINDOW,
    DateWindow,
    Diagnostics,
    Family,
    ResultItem,
    SearchParams,
)
from coursefinder.predicates import is_course_match_by_family, is_refresher_match

logger = logging.getLogger(__name__)

Row = dict[str, Any]

_PRICE_JUNK_RE = re.compile(r"[^\d.]")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def to_numeric_price(price: Any) -> float:
    """'£1,095.00 + VAT' -> 1095.0; anything unreadable -> 0.0"""
    digits = _PRICE_JUNK_RE.sub("", "" if price is None else str(price))
    if not digits:
        return 0.0
    try:
        return float(digits)
    except ValueError:
        return 0.0


def _name(row: Row) -> str:
    return str(row.get("name") or "")


def _rows(catalogue: Optional[Iterable[Any]]) -> List[Row]:
    return [r for r in (catalogue or []) if isinstance(r, dict)]


def _dates_text(row: Row) -> str:
    if row.get("dates_list"):
        return str(row["dates_list"])
    start = row.get("start_date") or ""
    end = row.get("end_date")
    return f"{start} - {end}" if end else str(start)


def map_item(row: Row) -> ResultItem:
    name = _name(row)
    return ResultItem(
        id=row.get("id"),
        title=name,
        dates=_dates_text(row),
        price=row.get("price"),
        price_value=to_numeric_price(row.get("price")),
        spaces=row.get("available_spaces"),
        link=row.get("link"),
        venue_or_format=detect_location_facet(name) or "Venue TBC",
        starts_on=parse_loose_date(row.get("start_date")),
    )


def _rank(rows: List[Row]) -> List[Row]:
    def key(row: Row) -> tuple[bool, date, float]:
        d = parse_loose_date(row.get("start_date"))
        return (d is None, d or date.min, to_numeric_price(row.get("price")))

    # sorted() is stable, so equal keys keep catalogue order
    return sorted(rows, key=key)


def _dedupe(rows: List[Row]) -> List[Row]:
    seen: set[tuple[str, str]] = set()
    out: List[Row] = []
    for row in rows:
        k = (_name(row), str(row.get("start_date") or ""))
        if k in seen:
            continue
        seen.add(k)
        out.append(row)
    return out


def _family_and_refresher(row: Row, family: Optional[Family], refresher: Optional[bool]) -> bool:
    name = _name(row)
    return is_course_match_by_family(name, family) and is_refresher_match(name, refresher)


def _in_window(row: Row, window: Optional[DateWindow]) -> bool:
    return within_range(row.get("start_date"), window)


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def search(catalogue: Optional[Iterable[Any]], params: SearchParams) -> List[ResultItem]:
    family = as_family(params.family)
    rows = _rows(catalogue)

    matched = [
        r
        for r in rows
        if _family_and_refresher(r, family, params.refresher)
        and _in_window(r, params.date_window)
        and match_location(params.location, _name(r))
    ]
    ranked = _dedupe(_rank(matched))

    logger.debug(
        "search family=%s refresher=%s location=%s: %d of %d sessions",
        family.name if family else None,
        params.refresher,
        params.location,
        len(ranked),
        len(rows),
    )
    return [map_item(r) for r in ranked]


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


def _nearest(rows: List[Row], today: date) -> List[ResultItem]:
    future = []
    for row in rows:
        d = parse_loose_date(row.get("start_date"))
        if d is not None and d >= today:
            future.append(row)
    return [map_item(r) for r in _dedupe(_rank(future))[: config.NEAREST_LIMIT]]


def _alternative(rows: List[Row], params: SearchParams, family: Optional[Family]) -> List[ResultItem]:
    """Sessions with the opposite refresher flag under the same date/location filters."""
    if params.refresher is None:
        return []
    alt_refresher = not params.refresher
    alt_family = family
    if family is not None and not family.is_generic:
        alt_family = as_family(counterpart_family(family.name))

    alt = [
        r
        for r in rows
        if _family_and_refresher(r, alt_family, alt_refresher)
        and _in_window(r, params.date_window)
        and match_location(params.location, _name(r))
    ]
    return [map_item(r) for r in _dedupe(_rank(alt))[: config.NEAREST_LIMIT]]


def diagnose(
    catalogue: Optional[Iterable[Any]],
    params: SearchParams,
    now: date | datetime | None = None,
) -> Diagnostics:
    """
    Explain an empty search by relaxing it step by step:
    1. family + refresher only
    2. ... + date window, any location
    3. ... + location, any date
    4. otherwise only the combination fails
    """
    family = as_family(params.family)
    rows = _rows(catalogue)
    today = utc_today(now)

    family_ref = [r for r in rows if _family_and_refresher(r, family, params.refresher)]
    in_date_any_loc = [r for r in family_ref if _in_window(r, params.date_window)]
    in_loc_any_date = [r for r in family_ref if match_location(params.location, _name(r))]

    if not family_ref:
        stage = STAGE_NO_FAMILY_SESSIONS
    elif not in_date_any_loc:
        stage = STAGE_NO_SESSIONS_IN_WINDOW
    elif not in_loc_any_date:
        stage = STAGE_NO_SESSIONS_AT_LOCATION
    else:
        stage = STAGE_COMBINED

    diagnostics = Diagnostics(
        family=family.name if family else None,
        refresher=params.refresher,
        stage=stage,
        has_any_family_ref=bool(family_ref),
        has_in_date_any_loc=bool(in_date_any_loc),
        has_in_loc_any_date=bool(in_loc_any_date),
        nearest_in_location=_nearest(in_loc_any_date, today),
        nearest_anywhere=_nearest(family_ref, today),
        alternative=_alternative(rows, params, family),
    )
    logger.debug("diagnostics family=%s stage=%s", diagnostics.family, stage)
    return diagnostics
