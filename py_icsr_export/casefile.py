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
This module provides functions for loading reviewed cases from JSON or YAML
files.

Two layouts are accepted: the case model itself (``caseId``, ``reactions``,
...) and the review API payload (``eventId``, ``event``, ``findings`` with a
flat ``meddra`` suggestion per finding).
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional

import yaml

from .models import Case, MedDraTerm

logger = logging.getLogger(__name__)


class LoadedCase(NamedTuple):
    case: Case
    coding_dictionary_version: Optional[str] = None


def case_from_review_payload(payload: Dict[str, Any]) -> LoadedCase:
    """Convert a review API payload into a ``Case``."""
    event = payload.get("event") or {}
    reactions = [
        {
            "finding_id": finding.get("findingId"),
            "excerpt": finding.get("excerpt"),
            "category": finding.get("category"),
            "severity": finding.get("severity"),
            "urgency": finding.get("urgency"),
            "coding": MedDraTerm.from_flat(finding.get("meddra") or {}),
        }
        for finding in payload.get("findings") or []
    ]
    case = Case.model_validate(
        {
            "case_id": payload.get("eventId"),
            "subject": event.get("subject", ""),
            "sender_raw": event.get("sender", ""),
            "received_at": event.get("receivedAt"),
            "max_severity": event.get("maxSeverity"),
            "body_excerpt": event.get("bodyExcerpt", ""),
            "reactions": reactions,
        }
    )
    return LoadedCase(case, payload.get("meddraVersion"))


def parse_case_data(data: Dict[str, Any]) -> LoadedCase:
    if "eventId" in data and "findings" in data:
        logger.debug("Case file uses the review API layout.")
        return case_from_review_payload(data)
    return LoadedCase(Case.model_validate(data), data.get("codingDictionaryVersion"))


def load_case_file(path: Path) -> LoadedCase:
    """
    Load a case from a ``.json``, ``.yaml`` or ``.yml`` file.

    :raises FileNotFoundError: If the file does not exist.
    :raises pydantic.ValidationError: If the content is not a valid case.
    """
    if not path.exists():
        raise FileNotFoundError(f"Case file not found at: {path}")

    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Case file {path} must contain a single object, got {type(data).__name__}.")

    logger.info(f"Loaded case file: {path}")
    return parse_case_data(data)
