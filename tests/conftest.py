# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
# tests/conftest.py
from datetime import datetime, timezone
from typing import Any, Callable

import pytest

from py_icsr_export.models import Case, CodedTerm, MedDraTerm, Reaction

FIXED_NOW = datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc)
CASE_ID = "1a2b3c4d-5e6f-7a8b-9c0d-112233445566"


def nausea_coding(confirmed: bool = True) -> MedDraTerm:
    return MedDraTerm(
        llt=CodedTerm(code="10028813", display_name="Nausea"),
        pt=CodedTerm(code="10028813", display_name="Nausea"),
        hlt=CodedTerm(code="10028794", display_name="Nausea and vomiting symptoms"),
        hlgt=CodedTerm(code="10017974", display_name="Gastrointestinal signs and symptoms"),
        soc=CodedTerm(code="10017947", display_name="Gastrointestinal disorders"),
        confidence="high",
        ai_generated=True,
        confirmed=confirmed,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def make_reaction() -> Callable[..., Reaction]:
    """Factory for reactions with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides: Any) -> Reaction:
        counter["n"] += 1
        data: dict = {
            "finding_id": f"finding-{counter['n']}",
            "excerpt": "Patient reported nausea after the second dose.",
            "category": "adverse_reaction",
            "severity": "medium",
            "urgency": "routine",
            "coding": nausea_coding(),
        }
        data.update(overrides)
        return Reaction(**data)

    return _make


@pytest.fixture
def make_case(make_reaction: Callable[..., Reaction]) -> Callable[..., Case]:
    """Factory for cases; one default reaction unless ``reactions`` is given."""

    def _make(**overrides: Any) -> Case:
        data: dict = {
            "case_id": CASE_ID,
            "subject": "Follow-up on patient call",
            "sender_raw": "Jane Doe <jane.doe@example.com>",
            "received_at": "2026-03-10T15:04:05Z",
            "max_severity": "medium",
            "body_excerpt": "The patient called to report nausea.",
        }
        data.update(overrides)
        if "reactions" not in data:
            data["reactions"] = [make_reaction()]
        return Case(**data)

    return _make
