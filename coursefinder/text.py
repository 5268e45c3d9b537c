"""
Text normalization shared by every matcher in the package.

All substring and regex tests elsewhere run against the output of
normalize(), so it must stay idempotent.
"""

from __future__ import annotations

import re
import unicodedata

from rapidfuzz.distance import Levenshtein

_DISALLOWED_RE = re.compile(r"[^a-z0-9+& ]+")
_WS_RE = re.compile(r"\s+")


def normalize(text: object) -> str:
    """
    Lower-case, strip diacritics, drop everything outside [a-z0-9+& ]
    and collapse whitespace.

    >>> normalize("  SMSTS  Café!! ")
    'smsts cafe'
    """
    if text is None:
        return ""
    s = unicodedata.normalize("NFD", str(text).lower())
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    s = _DISALLOWED_RE.sub(" ", s)
    return _WS_RE.sub(" ", s).strip()


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance between the normalized forms of a and b."""
    return Levenshtein.distance(normalize(a), normalize(b))
