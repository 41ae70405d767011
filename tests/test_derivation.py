# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
"""
Tests for the field derivation functions.
"""
import itertools

import pytest

from py_icsr_export.derivation import (
    _OUTCOME_BY_SEVERITY,
    _SEVERITY_SERIOUSNESS,
    derive_outcome,
    derive_qualification,
    derive_seriousness,
)
from py_icsr_export.types import (
    FindingCategory,
    Qualification,
    ReactionOutcome,
    Severity,
    YesNo,
)


@pytest.mark.parametrize("severity", [Severity.CRITICAL, Severity.HIGH])
def test_high_and_critical_cases_are_serious(severity: Severity, make_reaction) -> None:
    """Test that high and critical cases are flagged serious."""
    criteria = derive_seriousness(severity, [make_reaction()])
    assert criteria.serious == YesNo.YES


@pytest.mark.parametrize("severity", [Severity.LOW, Severity.MEDIUM])
def test_low_and_medium_cases_are_not_serious(severity: Severity, make_reaction) -> None:
    """Test that low and medium cases are not serious and set no criterion."""
    criteria = derive_seriousness(severity, [make_reaction()])
    assert criteria.serious == YesNo.NO
    assert criteria.life_threatening == YesNo.NO
    assert criteria.other == YesNo.NO


def test_life_threatening_only_for_critical(make_reaction) -> None:
    """Test life-threatening across every severity and category combination."""
    for severity, category in itertools.product(Severity, FindingCategory):
        criteria = derive_seriousness(severity, [make_reaction(category=category)])
        expected = YesNo.YES if severity == Severity.CRITICAL else YesNo.NO
        assert criteria.life_threatening == expected, (severity, category)


def test_death_and_disabling_are_never_inferred(make_reaction) -> None:
    """Test that death and disability are always reported as 'no'."""
    reactions = [make_reaction(category=c, severity="critical") for c in FindingCategory]
    criteria = derive_seriousness(Severity.CRITICAL, reactions)
    assert criteria.death == YesNo.NO
    assert criteria.disabling == YesNo.NO


def test_hospitalization_from_serious_adverse_event(make_reaction) -> None:
    """Test that any serious_adverse_event finding sets hospitalization."""
    reactions = [
        make_reaction(category="adverse_reaction"),
        make_reaction(category="serious_adverse_event"),
    ]
    assert derive_seriousness(Severity.LOW, reactions).hospitalization == YesNo.YES
    assert (
        derive_seriousness(Severity.LOW, [make_reaction(category="overdose")]).hospitalization
        == YesNo.NO
    )


def test_congenital_anomaly_from_pregnancy_exposure(make_reaction) -> None:
    """Test that a pregnancy exposure finding sets the congenital anomaly flag."""
    with_pregnancy = [make_reaction(category="pregnancy_exposure")]
    without = [make_reaction(category="drug_interaction")]
    assert derive_seriousness(Severity.MEDIUM, with_pregnancy).congenital_anomaly == YesNo.YES
    assert derive_seriousness(Severity.MEDIUM, without).congenital_anomaly == YesNo.NO


def test_other_flag_for_high_without_hospitalization(make_reaction) -> None:
    """Test that 'other' catches serious cases that set no other criterion."""
    high = derive_seriousness(Severity.HIGH, [make_reaction()])
    assert high.other == YesNo.YES

    critical = derive_seriousness(Severity.CRITICAL, [make_reaction()])
    assert critical.other == YesNo.NO

    hospitalized = derive_seriousness(
        Severity.HIGH, [make_reaction(category="serious_adverse_event")]
    )
    assert hospitalized.other == YesNo.NO


def test_every_serious_case_has_a_criterion(make_reaction) -> None:
    """Test that serious cases always carry at least one 'yes' criterion."""
    for severity, category in itertools.product(
        [Severity.HIGH, Severity.CRITICAL], FindingCategory
    ):
        c = derive_seriousness(severity, [make_reaction(category=category)])
        flags = [c.life_threatening, c.hospitalization, c.congenital_anomaly, c.other]
        assert YesNo.YES in flags, (severity, category)


def test_example_a_high_serious_adverse_event(make_reaction) -> None:
    """High case with a serious adverse event finding: hospitalised, outcome unknown."""
    reaction = make_reaction(category="serious_adverse_event", severity="high")
    criteria = derive_seriousness(Severity.HIGH, [reaction])
    assert criteria.serious == YesNo.YES
    assert criteria.hospitalization == YesNo.YES
    assert criteria.life_threatening == YesNo.NO
    assert derive_outcome(reaction.severity) == ReactionOutcome.UNKNOWN


def test_lookup_tables_cover_every_severity() -> None:
    """Test that no severity can fall through the derivation tables."""
    assert set(_SEVERITY_SERIOUSNESS) == set(Severity)
    assert set(_OUTCOME_BY_SEVERITY) == set(Severity)


@pytest.mark.parametrize(
    "sender, expected",
    [
        ("Dr. A. Smith <asmith@hosp.org>", Qualification.PHYSICIAN),
        ("Jane Roe MD <jroe@clinic.org>", Qualification.PHYSICIAN),
        ("The Doctor <who@tardis.org>", Qualification.PHYSICIAN),
        ("Central Pharmacy <orders@example.com>", Qualification.PHARMACIST),
        ("Bob Lee RPh <bob@example.com>", Qualification.PHARMACIST),
        ("Night Nurse <ward7@hospital.org>", Qualification.OTHER_HEALTH_PROFESSIONAL),
        ("Sam Poe NP <sam@example.com>", Qualification.OTHER_HEALTH_PROFESSIONAL),
        ("patient@example.com", Qualification.CONSUMER),
        ("", Qualification.CONSUMER),
    ],
)
def test_derive_qualification(sender: str, expected: Qualification) -> None:
    """Test the keyword scan for reporter qualification."""
    assert derive_qualification(sender) == expected


def test_qualification_is_case_insensitive_and_ordered() -> None:
    """Test that physician keywords win over pharmacist keywords."""
    assert derive_qualification("DR. PHARMACIST <x@example.com>") == Qualification.PHYSICIAN


def test_derive_outcome_never_claims_recovery() -> None:
    """Test that critical maps to not recovered and everything else to unknown."""
    assert derive_outcome(Severity.CRITICAL) == ReactionOutcome.NOT_RECOVERED
    for severity in (Severity.HIGH, Severity.MEDIUM, Severity.LOW):
        assert derive_outcome(severity) == ReactionOutcome.UNKNOWN
    assert derive_outcome("critical") == ReactionOutcome.NOT_RECOVERED
