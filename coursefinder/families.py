"""
Family resolution.

Maps free text ("smsts refresher in stratford", "iosh", "water hygiene pm")
to one canonical course family plus a tri-state refresher flag.

Resolution runs the rule tables below in order, first match wins:
1. alias catalogue (exact alias first, then ordered substring scan)
2. bare acronyms
3. IOSH key phrases
4. water hygiene AM/PM
5. bare "health and safety" -> HSA
then post-processing narrows NEBOSH and re-specializes generic placeholders.

Refresher detection is an independent pass over the same normalized text.
"""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import List, Mapping, NamedTuple, Optional, Tuple

from coursefinder import config
from coursefinder.model import ConcreteFamily, Family, GenericFamily, ResolvedQuery
from coursefinder.text import edit_distance, normalize

logger = logging.getLogger(__name__)

REFRESHER_SUFFIX = "Refresher"


class FamilyEntry(NamedTuple):
    family: str
    aliases: Tuple[str, ...]


# ---------------------------------------------------------------------------
# Alias catalogue
# ---------------------------------------------------------------------------

# Only families that have a "<Family> Refresher" entry offer a refresher.
FAMILY_CATALOGUE: Tuple[FamilyEntry, ...] = (
    FamilyEntry("SMSTS", (
        "smsts",
        "citb smsts",
        "site management safety training scheme",
        "site managers safety training scheme",
        "site manager safety training scheme",
        "site management safety",
        "smsts course",
    )),
    FamilyEntry("SMSTS Refresher", (
        "smsts refresher",
        "smsts-r",
        "citb smsts refresher",
        "site management safety training scheme refresher",
        "site managers safety training scheme refresher",
        "smsts renewal",
        "smsts update",
        "smsts refresh",
    )),
    FamilyEntry("SSSTS", (
        "sssts",
        "citb sssts",
        "site supervisors safety training scheme",
        "site supervisor safety training scheme",
        "site supervisors safety",
        "supervisors safety training scheme",
        "sssts course",
    )),
    FamilyEntry("SSSTS Refresher", (
        "sssts refresher",
        "sssts-r",
        "citb sssts refresher",
        "site supervisors safety training scheme refresher",
        "sssts renewal",
        "sssts update",
        "sssts refresh",
    )),
    FamilyEntry("HSA", (
        "hsa",
        "health and safety awareness",
        "health & safety awareness",
        "health and safety awareness courses",
        "health and safety",
        "health & safety",
        "h&s",
        "hsa course",
        "citb health and safety awareness",
        "citb hsa",
    )),
    FamilyEntry("TWC", (
        "twc",
        "citb twc",
        "temporary works coordinator",
        "temporary works co ordinator",
        "temporary works co-ordinator",
        "temporary works coordinator course",
        "temporary works co ordinator course",
        "tw coordinator",
        "tw co-ordinator",
        "twc course",
    )),
    FamilyEntry("TWC Refresher", (
        "twc refresher",
        "citb twc refresher",
        "temporary works coordinator refresher",
        "temporary works co-ordinator refresher",
        "twc renewal",
        "twc update",
        "twc refresh",
    )),
    FamilyEntry("TWS", (
        "tws",
        "citb tws",
        "temporary works supervisor",
        "temporary work supervisor",
        "tw supervisor",
        "tws course",
    )),
    FamilyEntry("NEBOSH General", (
        "nebosh general",
        "nebosh ngc",
        "nebosh national general certificate",
        "nebosh certificate general",
        "nebosh health and safety",
        "nebosh h&s",
        "nebosh",
    )),
    FamilyEntry("NEBOSH Construction", (
        "nebosh construction",
        "nebosh ncc",
        "nebosh national certificate in construction",
        "nebosh construction certificate",
        "nebosh construction safety",
    )),
    FamilyEntry("IOSH Managing Safely", (
        "iosh managing safely",
        "managing safely",
        "iosh ms",
        "iosh manage safely",
        "iosh managing",
    )),
    FamilyEntry("IOSH Working Safely", (
        "iosh working safely",
        "working safely",
        "iosh ws",
        "iosh working",
    )),
    FamilyEntry("IEMA", (
        "iema",
        "iema foundation",
        "iema environmental management",
        "iema sustainability",
        "iema course",
        "environmental",
        "environmental management",
        "foundation certificate in environmental management",
        "foundation in environmental management",
    )),
    FamilyEntry("MHFA", (
        "mhfa",
        "mental health first aid",
        "mental health first aid course",
        "mhfa course",
        "mhfa england",
        "mental health first aid 2 day",
        "mhfa 2 day",
        "mhfa two day",
        "first aid",
    )),
    FamilyEntry("SEATS", (
        "seats",
        "site environmental awareness training scheme",
        "site environmental awareness",
        "citb seats",
    )),
    FamilyEntry("EUSR Water Hygiene AM", (
        "eusr water hygiene am",
        "water hygiene am session",
        "am water hygiene",
        "eusr am",
        "am session water hygiene",
        "water hygiene morning",
        "morning water hygiene",
    )),
    FamilyEntry("EUSR Water Hygiene PM", (
        "eusr water hygiene pm",
        "water hygiene pm session",
        "pm water hygiene",
        "eusr pm",
        "pm session water hygiene",
        "water hygiene afternoon",
        "afternoon water hygiene",
    )),
)

GENERIC_FAMILIES: Mapping[str, GenericFamily] = MappingProxyType({
    "IOSH": GenericFamily("IOSH", ("IOSH Managing Safely", "IOSH Working Safely")),
    "EUSR": GenericFamily("EUSR", ("EUSR Water Hygiene AM", "EUSR Water Hygiene PM")),
})


def base_family(name: str) -> str:
    """Strip a trailing 'Refresher' token: 'SMSTS Refresher' -> 'SMSTS'."""
    return re.sub(r"\s+refresher$", "", name.strip(), flags=re.IGNORECASE)


def _build_alias_table() -> Mapping[str, str]:
    table: dict[str, str] = {}
    for entry in FAMILY_CATALOGUE:
        base = base_family(entry.family)
        for alias in entry.aliases:
            # first registration wins
            table.setdefault(normalize(alias), base)
    return MappingProxyType(table)


ALIAS_TO_FAMILY: Mapping[str, str] = _build_alias_table()

FAMILIES: Tuple[str, ...] = tuple(dict.fromkeys(base_family(e.family) for e in FAMILY_CATALOGUE))

REFRESHER_CAPABLE: Tuple[str, ...] = tuple(
    base_family(e.family) for e in FAMILY_CATALOGUE if e.family.endswith(" " + REFRESHER_SUFFIX)
)


# ---------------------------------------------------------------------------
# Rule tables
# ---------------------------------------------------------------------------

# No word boundaries here: "twc" inside a longer token still counts.
ACRONYM_RULES: Tuple[Tuple[str, str], ...] = (
    ("smsts", "SMSTS"),
    ("sssts", "SSSTS"),
    ("twc", "TWC"),
    ("tws", "TWS"),
    ("seats", "SEATS"),
    ("eusr", "EUSR"),
    ("hsa", "HSA"),
    ("nebosh", "NEBOSH"),
    ("iema", "IEMA"),
    ("mhfa", "MHFA"),
    ("iosh", "IOSH"),
)

IOSH_PHRASE_RULES: Tuple[Tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bmanaging safely\b|\biosh managing\b"), "IOSH Managing Safely"),
    (re.compile(r"\bworking safely\b|\biosh working\b"), "IOSH Working Safely"),
)

SESSION_TIME_RULES: Tuple[Tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\b(am|morning)\b"), "EUSR Water Hygiene AM"),
    (re.compile(r"\b(pm|afternoon)\b"), "EUSR Water Hygiene PM"),
)

REFRESHER_RULES: Tuple[Tuple[re.Pattern[str], bool], ...] = (
    (re.compile(r"\b(refresher|renewal|update|refresh)\b"), True),
    (re.compile(r"\bstandard\b"), False),
)

_WATER_HYGIENE_RE = re.compile(r"\bwater hygiene\b")
_HEALTH_AND_SAFETY_RE = re.compile(r"\bhealth(?:\s*&|\s*and)?\s*safety\b")
_NEBOSH_OR_IOSH_RE = re.compile(r"\bnebosh\b|\biosh\b")


def _first_rule(q: str, rules: Tuple[Tuple[re.Pattern[str], str], ...]) -> Optional[str]:
    for pattern, family in rules:
        if pattern.search(q):
            return family
    return None


def _match_alias(q: str) -> Optional[str]:
    if q in ALIAS_TO_FAMILY:
        return ALIAS_TO_FAMILY[q]
    for alias, family in ALIAS_TO_FAMILY.items():
        if alias in q:
            return family
    return None


def _match_acronym(q: str) -> Optional[str]:
    for acronym, family in ACRONYM_RULES:
        if acronym in q:
            return family
    return None


def _match_water_hygiene(q: str) -> Optional[str]:
    if not _WATER_HYGIENE_RE.search(q):
        return None
    return _first_rule(q, SESSION_TIME_RULES) or "EUSR"


def _match_health_and_safety(q: str) -> Optional[str]:
    if _HEALTH_AND_SAFETY_RE.search(q) and not _NEBOSH_OR_IOSH_RE.search(q):
        return "HSA"
    return None


def _specialize(family: Optional[str], q: str) -> Optional[str]:
    if family is None:
        return None

    if family == "NEBOSH General" and "construction" in q:
        family = "NEBOSH Construction"
    if family.startswith("NEBOSH") and "general" not in q and "construction" not in q:
        family = "NEBOSH"

    if family == "IOSH":
        family = _first_rule(q, IOSH_PHRASE_RULES) or family
    elif family == "EUSR":
        family = _first_rule(q, SESSION_TIME_RULES) or family

    return family


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def as_family(family: Optional[Family | str]) -> Optional[Family]:
    """
    Wrap a family name into its tagged form. Generic placeholders come back
    as GenericFamily so they can never be used as a search key by accident.
    """
    if family is None or isinstance(family, (ConcreteFamily, GenericFamily)):
        return family
    name = str(family).strip()
    if not name:
        return None
    if name in GENERIC_FAMILIES:
        return GENERIC_FAMILIES[name]
    return ConcreteFamily(name)


def detect_refresher(text: str) -> Optional[bool]:
    q = normalize(text)
    for pattern, flag in REFRESHER_RULES:
        if pattern.search(q):
            return flag
    return None


def resolve_query(term: Optional[str]) -> ResolvedQuery:
    """
    Resolve free text into a family and a refresher flag.

    Returns family=None when nothing is recognized.
    """
    q = normalize(term)
    if not q:
        return ResolvedQuery(family=None, refresher=None)

    family = (
        _match_alias(q)
        or _match_acronym(q)
        or _first_rule(q, IOSH_PHRASE_RULES)
        or _match_water_hygiene(q)
        or _match_health_and_safety(q)
    )
    family = _specialize(family, q)

    resolved = ResolvedQuery(family=as_family(family), refresher=detect_refresher(q))
    logger.debug("resolved %r -> family=%s refresher=%s", q, resolved.family_name, resolved.refresher)
    return resolved


def is_refresher_capable(family: Optional[str]) -> bool:
    return family is not None and family in REFRESHER_CAPABLE


def counterpart_family(family: str) -> str:
    """
    The other half of a Standard/Refresher pair, or the family itself when it
    is not split.
    """
    base = base_family(family)
    if base != family:
        return base
    if is_refresher_capable(family):
        return f"{family} {REFRESHER_SUFFIX}"
    return family


def infer_family_label(term: Optional[str]) -> Optional[str]:
    """
    Single display label for a query, e.g. 'smsts renewal' -> 'SMSTS Refresher'.

    Generic placeholders are returned unmodified so the caller asks a
    follow-up question.
    """
    resolved = resolve_query(term or "")
    family = resolved.family
    if family is None:
        return None
    if family.is_generic:
        return family.name
    if re.search(r"\brefresher\b", family.name, re.IGNORECASE):
        return family.name
    if resolved.refresher is True and is_refresher_capable(family.name):
        return f"{family.name} {REFRESHER_SUFFIX}"
    return family.name


def closest_families(term: Optional[str], limit: int = config.SUGGESTION_LIMIT) -> List[str]:
    """
    Families within MAX_SUGGESTION_DISTANCE edits of the query, compared
    against both the full name and its leading acronym.
    """
    q = normalize(term)
    scored = []
    for family in FAMILIES:
        acronym = family.split(" ")[0]
        scored.append((min(edit_distance(q, family), edit_distance(q, acronym)), family))
    # stable: ties keep catalogue order
    scored.sort(key=lambda pair: pair[0])
    return [f for dist, f in scored if dist <= config.MAX_SUGGESTION_DISTANCE][:limit]


def nearest_refresher_families(family: str, limit: int = 2) -> List[str]:
    """Refresher-capable families ordered by edit distance to `family`."""
    scored = sorted(REFRESHER_CAPABLE, key=lambda f: edit_distance(f, family))
    return scored[:limit]
