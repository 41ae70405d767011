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
This module defines the Pydantic models for reviewed adverse-event cases and
the values derived from them during an ICSR export.

All models are frozen: the encoder reads them and never mutates them. Field
names are snake_case; the camelCase names used by the review dashboard API
(``caseId``, ``maxSeverity``, ...) are accepted as aliases.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .types import Confidence, FindingCategory, Severity, YesNo

DEFAULT_RECEIVER_ORGANIZATION = "Health Canada MedEffect Canada"
DEFAULT_SENDER_ORGANIZATION = "NARC Pharmacovigilance System"
DEFAULT_COUNTRY_CODE = "CA"
DEFAULT_CODING_DICTIONARY_VERSION = "27.0"


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class CodedTerm(_FrozenModel):
    """One level of the MedDRA hierarchy as a (code, display name) pair."""

    code: Optional[str] = Field(None, description="The dictionary code, carried verbatim.")
    display_name: Optional[str] = Field(None, description="The human-readable term.")


class MedDraTerm(_FrozenModel):
    """
    A MedDRA-style coding suggestion for one finding.

    ``llt`` is optional because the Lowest Level Term defaults to the
    Preferred Term when no more specific term exists.
    """

    llt: Optional[CodedTerm] = None
    pt: CodedTerm = Field(default_factory=CodedTerm)
    hlt: CodedTerm = Field(default_factory=CodedTerm)
    hlgt: CodedTerm = Field(default_factory=CodedTerm)
    soc: CodedTerm = Field(default_factory=CodedTerm)
    confidence: Confidence = Confidence.LOW
    ai_generated: bool = True
    confirmed: bool = False

    @property
    def lowest_level(self) -> CodedTerm:
        """The LLT, falling back to the PT."""
        return self.llt if self.llt is not None else self.pt

    @classmethod
    def from_flat(cls, data: Dict[str, Any]) -> "MedDraTerm":
        """
        Build a term from the flat suggestion shape used by the review API,
        e.g. ``{"ptCode": "10028813", "ptTerm": "Nausea", ...}``.
        """
        levels: Dict[str, Any] = {}
        for level in ("llt", "pt", "hlt", "hlgt", "soc"):
            code = data.get(f"{level}Code")
            term = data.get(f"{level}Term")
            if code is not None or term is not None:
                levels[level] = CodedTerm(code=code, display_name=term)
        return cls.model_validate(
            {
                **levels,
                "confidence": data.get("confidence", Confidence.LOW),
                "ai_generated": data.get("aiGenerated", True),
                "confirmed": data.get("confirmed", False),
            }
        )


class Reaction(_FrozenModel):
    """One adverse-event finding plus its medical coding."""

    finding_id: str
    excerpt: str = ""
    category: FindingCategory
    severity: Severity
    urgency: Optional[str] = None
    coding: MedDraTerm = Field(default_factory=MedDraTerm)

    @field_validator("excerpt", mode="before")
    @classmethod
    def _none_excerpt_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class Case(_FrozenModel):
    """A reviewed adverse-event case ready for regulatory export."""

    case_id: str = Field(..., description="Opaque, stable identifier of the case.")
    subject: str = ""
    sender_raw: str = ""
    received_at: Optional[Union[datetime, str]] = None
    max_severity: Severity
    body_excerpt: str = ""
    reactions: List[Reaction] = Field(
        ..., description="Findings in review order. A case without findings is never exported."
    )

    @field_validator("reactions")
    @classmethod
    def _reactions_not_empty(cls, value: List[Reaction]) -> List[Reaction]:
        if not value:
            raise ValueError("a case must carry at least one reaction to be exported")
        return value

    @property
    def unconfirmed_count(self) -> int:
        return sum(1 for r in self.reactions if not r.coding.confirmed)


class ExportOptions(_FrozenModel):
    """Caller-supplied export context. Not part of the case itself."""

    exported_by: str = Field("", description="Identity of the user running the export.")
    receiver_organization: str = Field(
        DEFAULT_RECEIVER_ORGANIZATION, description="Destination regulatory authority."
    )
    sender_organization: str = Field(
        DEFAULT_SENDER_ORGANIZATION, description="Organisation sending the report."
    )
    country_code: str = Field(
        DEFAULT_COUNTRY_CODE, description="ISO 3166-1 alpha-2 country of the primary source."
    )
    coding_dictionary_version: str = Field(
        DEFAULT_CODING_DICTIONARY_VERSION,
        description="MedDRA version string. Carried through verbatim, never validated.",
    )


class SeriousnessCriteria(_FrozenModel):
    """ICH seriousness flags, each coded as 1 (yes) or 2 (no)."""

    serious: YesNo
    death: YesNo
    life_threatening: YesNo
    hospitalization: YesNo
    disabling: YesNo
    congenital_anomaly: YesNo
    other: YesNo


class ReporterIdentity(_FrozenModel):
    """Reporter identity as parsed (best effort) from a raw sender string."""

    display_name: str
    email_address: Optional[str] = None
    given_name: str
    family_name: str
