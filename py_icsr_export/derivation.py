# -*- coding: utf-8 -*-
# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
"""
This module maps case and finding attributes onto ICH E2B coded values.

Every function here is total over its input domain. The lookup tables are
keyed by every member of the source enum so that a new severity or category
cannot silently fall through to a default.
"""
from typing import Dict, Sequence, Tuple

from .models import Reaction, SeriousnessCriteria
from .types import FindingCategory, Qualification, ReactionOutcome, Severity, YesNo

# (serious, life threatening) per case severity
_SEVERITY_SERIOUSNESS: Dict[Severity, Tuple[bool, bool]] = {
    Severity.CRITICAL: (True, True),
    Severity.HIGH: (True, False),
    Severity.MEDIUM: (False, False),
    Severity.LOW: (False, False),
}

_OUTCOME_BY_SEVERITY: Dict[Severity, ReactionOutcome] = {
    Severity.CRITICAL: ReactionOutcome.NOT_RECOVERED,
    Severity.HIGH: ReactionOutcome.UNKNOWN,
    Severity.MEDIUM: ReactionOutcome.UNKNOWN,
    Severity.LOW: ReactionOutcome.UNKNOWN,
}

# Categories that establish a seriousness criterion on their own.
_HOSPITALIZATION_CATEGORIES = frozenset({FindingCategory.SERIOUS_ADVERSE_EVENT})
_CONGENITAL_CATEGORIES = frozenset({FindingCategory.PREGNANCY_EXPOSURE})

# Checked in order; the first rule with a matching keyword wins.
QUALIFICATION_RULES: Tuple[Tuple[Qualification, Tuple[str, ...]], ...] = (
    (Qualification.PHYSICIAN, ("dr.", "md", "physician", "doctor")),
    (Qualification.PHARMACIST, ("pharm", "rph")),
    (Qualification.OTHER_HEALTH_PROFESSIONAL, ("nurse", "rn", "np")),
)


def derive_seriousness(
    max_severity: Severity, reactions: Sequence[Reaction]
) -> SeriousnessCriteria:
    """
    Derive the ICH seriousness criteria for a case.

    Death and disability are never inferred from email text and are always
    reported as ``2``. ``other`` is set for serious cases that are neither
    life threatening nor hospitalisations, so every serious case carries at
    least one ``1``.
    """
    serious, life_threatening = _SEVERITY_SERIOUSNESS[Severity(max_severity)]
    hospitalization = any(r.category in _HOSPITALIZATION_CATEGORIES for r in reactions)
    congenital_anomaly = any(r.category in _CONGENITAL_CATEGORIES for r in reactions)
    other = serious and not life_threatening and not hospitalization

    return SeriousnessCriteria(
        serious=YesNo.of(serious),
        death=YesNo.NO,
        life_threatening=YesNo.of(life_threatening),
        hospitalization=YesNo.of(hospitalization),
        disabling=YesNo.NO,
        congenital_anomaly=YesNo.of(congenital_anomaly),
        other=YesNo.of(other),
    )


def derive_qualification(sender_raw: str) -> Qualification:
    """
    Guess the reporter qualification from the raw sender string.

    This is a case-insensitive substring scan, not an identity lookup: short
    tokens such as ``rn`` or ``md`` also match inside unrelated words.
    """
    lowered = (sender_raw or "").lower()
    for qualification, keywords in QUALIFICATION_RULES:
        if any(keyword in lowered for keyword in keywords):
            return qualification
    return Qualification.CONSUMER


def derive_outcome(severity: Severity) -> ReactionOutcome:
    """Map a finding severity to a reaction outcome. Never claims recovery."""
    return _OUTCOME_BY_SEVERITY[Severity(severity)]
