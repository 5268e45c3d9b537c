"""
Catalogue validation.

Classifies a course query as searchable (ok), unknown (missing_family),
ambiguous between two concrete variants (needs_variant) or asking for a
refresher that the family does not offer (variant_not_offered).
"""

from __future__ import annotations

import logging
from typing import List, Optional

from coursefinder import config
from coursefinder.families import (
    REFRESHER_SUFFIX,
    closest_families,
    is_refresher_capable,
    nearest_refresher_families,
    resolve_query,
)
from coursefinder.model import (
    REASON_MISSING_FAMILY,
    REASON_NEEDS_VARIANT,
    REASON_OK,
    REASON_VARIANT_NOT_OFFERED,
    Suggestion,
    ValidationResult,
)

logger = logging.getLogger(__name__)

# Offered when nothing in the catalogue is close to an unknown query
DEFAULT_SUGGESTION_FAMILIES = ("SMSTS", "SSSTS", "HSA")


def _with_refresher_variants(families: List[str]) -> List[Suggestion]:
    out: List[Suggestion] = []
    for family in families:
        out.append(Suggestion(label=family))
        if is_refresher_capable(family):
            out.append(Suggestion(label=f"{family} {REFRESHER_SUFFIX}"))
    return out


def validate_course_query(term: Optional[str]) -> ValidationResult:
    resolved = resolve_query(term)
    family = resolved.family
    refresher = resolved.refresher

    if family is None:
        near = closest_families(term) or list(DEFAULT_SUGGESTION_FAMILIES[: config.SUGGESTION_LIMIT])
        logger.debug("no family for %r, suggesting %s", term, near)
        return ValidationResult(
            recognized_family=None,
            refresher_requested=refresher,
            exists=False,
            normalized_family=None,
            reason=REASON_MISSING_FAMILY,
            suggestions=_with_refresher_variants(near),
        )

    if family.is_generic:
        return ValidationResult(
            recognized_family=family.name,
            refresher_requested=refresher,
            exists=False,
            normalized_family=None,
            reason=REASON_NEEDS_VARIANT,
            suggestions=[Suggestion(label=v) for v in family.variants],
        )

    if refresher is True and not is_refresher_capable(family.name):
        suggestions = [Suggestion(label=f"{family.name} (Standard)")]
        suggestions.extend(
            Suggestion(label=f"{f} {REFRESHER_SUFFIX}") for f in nearest_refresher_families(family.name)
        )
        return ValidationResult(
            recognized_family=family.name,
            refresher_requested=True,
            exists=False,
            normalized_family=None,
            reason=REASON_VARIANT_NOT_OFFERED,
            suggestions=suggestions,
        )

    normalized = f"{family.name} {REFRESHER_SUFFIX}" if refresher is True else family.name
    return ValidationResult(
        recognized_family=family.name,
        refresher_requested=refresher,
        exists=True,
        normalized_family=normalized,
        reason=REASON_OK,
        suggestions=[],
    )
