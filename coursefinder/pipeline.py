"""
Session pipeline: one user request in, one QueryOutcome out.

    validate course -> date window -> location -> search -> diagnostics

The search never runs for a course that fails validation; the caller gets
the validation result (with suggestions) instead.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any, Iterable, Optional

from coursefinder import config
from coursefinder.dates import normalize_date_window
from coursefinder.families import REFRESHER_SUFFIX, is_refresher_capable
from coursefinder.location import detect_user_location_from_text
from coursefinder.model import QueryOutcome, SearchParams, ValidationResult
from coursefinder.search import diagnose, search
from coursefinder.validate import validate_course_query

logger = logging.getLogger(__name__)

_FILLER_RE = re.compile(r"\b(and|also|pls|please|hi|hello)\b", re.IGNORECASE)
_PUNCT_RE = re.compile(r"[?!.;,/\\]+")
_WS_RE = re.compile(r"\s+")


def clean_query(text: Optional[str]) -> str:
    """Drop greeting/filler words and sentence punctuation."""
    s = _FILLER_RE.sub(" ", str(text or ""))
    s = _PUNCT_RE.sub(" ", s)
    return _WS_RE.sub(" ", s).strip()


def _diagnostic_family(validation: ValidationResult, refresher: Optional[bool]) -> Optional[str]:
    """
    Family to diagnose with. An override that contradicts the refresher
    split in normalized_family switches to the matching half of the pair.
    """
    if refresher == validation.refresher_requested or validation.recognized_family is None:
        return validation.normalized_family
    base = validation.recognized_family
    if refresher is True and is_refresher_capable(base):
        return f"{base} {REFRESHER_SUFFIX}"
    return base


def find_sessions(
    catalogue: Optional[Iterable[Any]],
    text: str,
    *,
    course_term: Optional[str] = None,
    date_text: Optional[str] = None,
    include_refresher: Optional[bool] = None,
    now: date | datetime | None = None,
) -> QueryOutcome:
    cleaned = clean_query(text)
    validation = validate_course_query(f"{cleaned} {course_term or ''}".strip())
    if not validation.exists:
        logger.debug("validation stopped search: %s", validation.reason)
        return QueryOutcome(validation=validation)

    rows = list(catalogue or [])
    window = normalize_date_window(date_text or cleaned, now=now)
    location = detect_user_location_from_text(cleaned)

    params = SearchParams(
        family=validation.normalized_family,
        refresher=validation.refresher_requested,
        location=location,
        date_window=window,
    )
    items = search(rows, params)

    diagnostics = None
    if not items:
        refresher = include_refresher if isinstance(include_refresher, bool) else validation.refresher_requested
        diagnostics = diagnose(
            rows,
            SearchParams(
                family=_diagnostic_family(validation, refresher),
                refresher=refresher,
                location=location,
                date_window=window,
            ),
            now=now,
        )

    return QueryOutcome(
        validation=validation,
        date_window=window,
        location=location,
        count=len(items),
        items=items[: config.MAX_RESULTS],
        diagnostics=diagnostics,
    )
