# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
"""
Tests for loading cases from JSON and YAML files.
"""
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from py_icsr_export.casefile import case_from_review_payload, load_case_file
from py_icsr_export.types import Confidence, FindingCategory, Severity

REVIEW_PAYLOAD = {
    "eventId": "9f8e7d6c-0000-1111-2222-333344445555",
    "event": {
        "subject": "Rash after injection",
        "sender": "Nurse Joy <joy@clinic.org>",
        "receivedAt": "2026-02-01T08:00:00.000Z",
        "bodyExcerpt": "Patient developed a rash.",
        "maxSeverity": "high",
    },
    "meddraVersion": "27.1",
    "findings": [
        {
            "findingId": "a1",
            "excerpt": "developed a rash after Humira",
            "category": "adverse_reaction",
            "severity": "high",
            "urgency": "24h",
            "explanation": "Rash is a listed reaction.",
            "meddra": {
                "lltCode": "10037844",
                "lltTerm": "Rash",
                "ptCode": "10037844",
                "ptTerm": "Rash",
                "hltCode": "10040753",
                "hltTerm": "Rashes, eruptions and exanthems NEC",
                "socCode": "10040785",
                "socTerm": "Skin and subcutaneous tissue disorders",
                "confidence": "medium",
                "aiGenerated": True,
                "confirmed": False,
            },
        }
    ],
}

CASE_YAML = """
caseId: 0badc0de-1234
subject: Call from pharmacy
senderRaw: Central Pharmacy <rx@example.com>
receivedAt: "2026-01-15T10:00:00Z"
maxSeverity: critical
bodyExcerpt: Overdose reported.
codingDictionaryVersion: "26.1"
reactions:
  - findingId: r1
    excerpt: Took ten tablets
    category: overdose
    severity: critical
    coding:
      pt: {code: "10033295", displayName: Overdose}
      confirmed: true
"""


def test_review_payload_conversion() -> None:
    """Test that the review API layout is mapped onto the case model."""
    loaded = case_from_review_payload(REVIEW_PAYLOAD)
    case = loaded.case

    assert loaded.coding_dictionary_version == "27.1"
    assert case.case_id == "9f8e7d6c-0000-1111-2222-333344445555"
    assert case.sender_raw == "Nurse Joy <joy@clinic.org>"
    assert case.max_severity == Severity.HIGH
    reaction = case.reactions[0]
    assert reaction.category == FindingCategory.ADVERSE_REACTION
    assert reaction.coding.pt.code == "10037844"
    assert reaction.coding.soc.display_name == "Skin and subcutaneous tissue disorders"
    assert reaction.coding.hlgt.code is None
    assert reaction.coding.confidence == Confidence.MEDIUM
    assert reaction.coding.confirmed is False


def test_load_json_case_file(tmp_path: Path) -> None:
    path = tmp_path / "case.json"
    path.write_text(json.dumps(REVIEW_PAYLOAD))
    loaded = load_case_file(path)
    assert loaded.case.subject == "Rash after injection"


def test_load_yaml_case_file(tmp_path: Path) -> None:
    """Test a YAML file in the case model layout using camelCase keys."""
    path = tmp_path / "case.yaml"
    path.write_text(CASE_YAML)
    loaded = load_case_file(path)

    assert loaded.coding_dictionary_version == "26.1"
    assert loaded.case.case_id == "0badc0de-1234"
    assert loaded.case.max_severity == Severity.CRITICAL
    assert loaded.case.reactions[0].coding.pt.display_name == "Overdose"
    assert loaded.case.reactions[0].coding.confirmed is True
    assert loaded.case.unconfirmed_count == 0


def test_load_case_file_not_found() -> None:
    with pytest.raises(FileNotFoundError):
        load_case_file(Path("does_not_exist.json"))


def test_load_case_file_rejects_unknown_category(tmp_path: Path) -> None:
    payload = json.loads(json.dumps(REVIEW_PAYLOAD))
    payload["findings"][0]["category"] = "bad_vibes"
    path = tmp_path / "case.json"
    path.write_text(json.dumps(payload))
    with pytest.raises(ValidationError):
        load_case_file(path)


def test_load_case_file_rejects_no_findings(tmp_path: Path) -> None:
    payload = dict(REVIEW_PAYLOAD, findings=[])
    path = tmp_path / "case.json"
    path.write_text(json.dumps(payload))
    with pytest.raises(ValidationError, match="at least one reaction"):
        load_case_file(path)


def test_load_case_file_rejects_non_object(tmp_path: Path) -> None:
    path = tmp_path / "case.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(ValueError, match="single object"):
        load_case_file(path)
