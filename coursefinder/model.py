"""
Central data model definitions used across the project.

This module defines the canonical structure of the values passed between the
resolver, the validator, the date window normalizer and the search engine so
that:
- all modules share the same field names
- a generic placeholder family can never be mistaken for a searchable one
- callers receive plain data and do their own rendering
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, List, Optional, Tuple, Union


# ---------------------------------------------------------------------------
# Families
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConcreteFamily:
    """
    A course family that can be searched for directly (e.g. "SMSTS",
    "SMSTS Refresher", "NEBOSH Construction").
    """

    name: str

    @property
    def is_generic(self) -> bool:
        return False


@dataclass(frozen=True)
class GenericFamily:
    """
    An umbrella match (IOSH, EUSR) that is a valid resolver output but never a
    valid search key. The caller has to pick one of `variants` first.
    """

    name: str
    variants: Tuple[str, ...]

    @property
    def is_generic(self) -> bool:
        return True


Family = Union[ConcreteFamily, GenericFamily]


@dataclass(frozen=True)
class ResolvedQuery:
    """
    Output of the family resolver.

    refresher is tri-state: True (refresher asked for), False (standard asked
    for) or None (unspecified, accept either).
    """

    family: Optional[Family]
    refresher: Optional[bool]

    @property
    def family_name(self) -> Optional[str]:
        return self.family.name if self.family is not None else None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

REASON_OK = "ok"
REASON_MISSING_FAMILY = "missing_family"
REASON_NEEDS_VARIANT = "needs_variant"
REASON_VARIANT_NOT_OFFERED = "variant_not_offered"


@dataclass(frozen=True)
class Suggestion:
    label: str


@dataclass
class ValidationResult:
    recognized_family: Optional[str]
    refresher_requested: Optional[bool]
    exists: bool
    normalized_family: Optional[str]
    reason: str
    suggestions: List[Suggestion] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DateWindow:
    """
    Concrete day range (both bounds inclusive, UTC days) plus a human label.
    """

    start: Optional[date]
    end: Optional[date]
    label: str

    @property
    def is_bounded(self) -> bool:
        return self.start is not None or self.end is not None


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResultItem:
    """
    Projection of one raw catalogue row, as handed back to the caller.
    """

    id: Any
    title: str
    dates: str
    price: Any
    price_value: float
    spaces: Any
    link: Optional[str]
    venue_or_format: str
    starts_on: Optional[date]

    @property
    def start_ts(self) -> Optional[datetime]:
        if self.starts_on is None:
            return None
        return datetime.combine(self.starts_on, time(0, 0), tzinfo=timezone.utc)


@dataclass(frozen=True)
class SearchParams:
    family: Optional[Family | str] = None
    refresher: Optional[bool] = None
    location: Optional[str] = None
    date_window: Optional[DateWindow] = None


STAGE_NO_FAMILY_SESSIONS = "no_family_sessions"
STAGE_NO_SESSIONS_IN_WINDOW = "no_sessions_in_window"
STAGE_NO_SESSIONS_AT_LOCATION = "no_sessions_at_location"
STAGE_COMBINED = "combined"


@dataclass
class Diagnostics:
    """
    Explanation for an empty search: which relaxation first finds sessions,
    plus the nearest alternatives worth offering.
    """

    family: Optional[str]
    refresher: Optional[bool]
    stage: str
    has_any_family_ref: bool
    has_in_date_any_loc: bool
    has_in_loc_any_date: bool
    nearest_in_location: List[ResultItem] = field(default_factory=list)
    nearest_anywhere: List[ResultItem] = field(default_factory=list)
    alternative: List[ResultItem] = field(default_factory=list)


@dataclass
class QueryOutcome:
    """
    Everything the session pipeline produced for one request.
    """

    validation: ValidationResult
    date_window: Optional[DateWindow] = None
    location: Optional[str] = None
    count: int = 0
    items: List[ResultItem] = field(default_factory=list)
    diagnostics: Optional[Diagnostics] = None
