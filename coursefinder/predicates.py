"""
Family-to-name match predicates.

Each concrete family owns one predicate over a session's lower-cased display
name. These run independently of the alias catalogue: catalogue names use
full scheme titles ("Site Management Safety Training Scheme Refresher |
Stratford | ...") rather than the phrases people type.

Generic placeholders (IOSH, EUSR) have no predicate and never match.
"""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from coursefinder.families import as_family
from coursefinder.model import Family

logger = logging.getLogger(__name__)

NamePredicate = Callable[[str], bool]

_REFRESHER_TOKEN_RE = re.compile(r"\b(refresher|renewal|update|refresh)\b")


# ---------------------------------------------------------------------------
# Predicate building blocks
# ---------------------------------------------------------------------------


def _contains(*phrases: str) -> NamePredicate:
    return lambda n: any(p in n for p in phrases)


def _matches(*patterns: str) -> NamePredicate:
    compiled = [re.compile(p) for p in patterns]
    return lambda n: any(rx.search(n) for rx in compiled)


def _either(*preds: NamePredicate) -> NamePredicate:
    return lambda n: any(pred(n) for pred in preds)


def _both(*preds: NamePredicate) -> NamePredicate:
    return lambda n: all(pred(n) for pred in preds)


def _standard(pred: NamePredicate) -> NamePredicate:
    return lambda n: pred(n) and "refresher" not in n


def _refresher(pred: NamePredicate) -> NamePredicate:
    return lambda n: pred(n) and "refresher" in n


_SMSTS = _either(_contains("site management safety training scheme"), _matches(r"\bsmsts\b"))
_SSSTS = _either(_contains("site supervisors safety training scheme"), _matches(r"\bsssts\b"))
_TWC = _either(
    _contains(
        "temporary works coordinator",
        "temporary works co-ordinator",
        "temporary works co ordinator",
    ),
    _matches(r"\btwc\b"),
)
_TWS = _either(_contains("temporary works supervisor"), _matches(r"\btws\b"))
_NEBOSH = _contains("nebosh")
_WATER_HYGIENE = _matches(r"\bwater hygiene\b")


FAMILY_PREDICATES: Mapping[str, NamePredicate] = MappingProxyType({
    "SMSTS": _standard(_SMSTS),
    "SMSTS Refresher": _refresher(_SMSTS),
    "SSSTS": _standard(_SSSTS),
    "SSSTS Refresher": _refresher(_SSSTS),
    # awareness is optional
    "HSA": _matches(r"\bhealth(?:\s*&|\s*and)?\s*safety(?:\s*awareness)?\b"),
    "TWC": _standard(_TWC),
    "TWC Refresher": _refresher(_TWC),
    "TWS": _standard(_TWS),
    "NEBOSH General": lambda n: _NEBOSH(n) and "construction" not in n,
    "NEBOSH Construction": lambda n: _NEBOSH(n) and "construction" in n,
    "NEBOSH": _NEBOSH,
    "IOSH Managing Safely": _either(
        _contains("iosh managing safely"),
        _matches(r"\bmanaging safely\b", r"\biosh managing\b"),
    ),
    "IOSH Working Safely": _either(
        _contains("iosh working safely"),
        _matches(r"\bworking safely\b", r"\biosh working\b"),
    ),
    "IEMA": _either(
        _contains("iema"),
        _matches(
            r"\bfoundation certificate in environmental management\b",
            r"\benvironmental\b.*\bmanagement\b",
        ),
    ),
    "MHFA": _contains("mental health first aid", "mhfa"),
    "SEATS": _either(
        _contains("site environmental awareness training scheme"),
        _matches(r"\bsite environmental awareness\b", r"\bseats\b"),
    ),
    "EUSR Water Hygiene AM": _both(_WATER_HYGIENE, _matches(r"\b(am|morning)\b", r"\bam session\b")),
    "EUSR Water Hygiene PM": _both(_WATER_HYGIENE, _matches(r"\b(pm|afternoon)\b", r"\bpm session\b")),
})


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def is_course_match_by_family(name: Optional[str], family: Optional[Family | str]) -> bool:
    """
    True when the session name belongs to `family`.

    No family means no family filter. Generic placeholders and unknown
    family names never match.
    """
    fam = as_family(family)
    if fam is None:
        return True
    if fam.is_generic:
        return False

    predicate = FAMILY_PREDICATES.get(fam.name)
    if predicate is None:
        logger.debug("no name predicate for family %r", fam.name)
        return False
    return predicate((name or "").lower())


def has_refresher_token(name: Optional[str]) -> bool:
    return bool(_REFRESHER_TOKEN_RE.search((name or "").lower()))


def is_refresher_match(name: Optional[str], refresher: Optional[bool]) -> bool:
    """True requires a refresher token in the name, False requires none, None accepts both."""
    if refresher is None:
        return True
    return has_refresher_token(name) == refresher
