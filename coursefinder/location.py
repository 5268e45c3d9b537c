"""
Location facets.

A session's facet comes from its display name: "online" when the name says
so, else the explicit venue segment of a pipe-delimited name
("SMSTS | Stratford | 5 days"), else a known city mentioned anywhere in it.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from coursefinder.text import normalize

CITY_ALIASES: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "online": ("online", "virtual", "instructor led", "instructor-led"),
    "chelmsford": ("chelmsford",),
    "peterborough": ("peterborough",),
    "sheffield": ("sheffield",),
    "crawley": ("crawley",),
    "stratford": ("stratford",),
})

VENUE_PLACEHOLDER = "venue tbc"

_ONLINE_RE = re.compile(r"\bonline\b")
_NO_FILTER_RE = re.compile(r"\b(anywhere|anyplace|any\s*place|any)\b")


def _city_from_aliases(q: str, include_online: bool) -> Optional[str]:
    for city, aliases in CITY_ALIASES.items():
        if city == "online" and not include_online:
            continue
        if any(normalize(a) in q for a in aliases):
            return city
    return None


def detect_location_facet(name: Optional[str]) -> Optional[str]:
    raw = str(name or "")
    n = normalize(raw)
    if _ONLINE_RE.search(n):
        return "online"

    parts = [p.strip() for p in raw.split("|") if p.strip()]
    if len(parts) >= 3:
        venue = parts[1]
        if normalize(venue) and normalize(venue) != VENUE_PLACEHOLDER:
            return venue

    return _city_from_aliases(n, include_online=True)


def detect_user_location_from_text(text: Optional[str]) -> Optional[str]:
    """
    Location the user asked for, or None for no location filter
    ("anywhere", "any place", or nothing recognizable).
    """
    q = normalize(text)
    if not q:
        return None
    if _NO_FILTER_RE.search(q):
        return None
    if _ONLINE_RE.search(q):
        return "online"
    return _city_from_aliases(q, include_online=False)


def match_location(requested: Optional[str], session_name: Optional[str]) -> bool:
    if not requested:
        return True
    wanted = normalize(requested)
    if not wanted or wanted in ("any", "anywhere"):
        return True

    facet = detect_location_facet(session_name)
    if not facet:
        return False
    f = normalize(facet)
    if not f:
        return False

    if wanted == "online":
        return f == "online"
    if f in wanted or wanted in f:
        return True
    return any(normalize(a) in f for a in CITY_ALIASES.get(wanted, ()))
