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
This module defines common types and enums used across the application.

The ICH-coded enums carry the literal code written into the E2B document as
their value, so ``str(member.value)`` can be emitted directly.
"""
from enum import Enum


class Severity(str, Enum):
    """Severity scale shared by cases and individual findings."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class FindingCategory(str, Enum):
    """Enumeration for the closed set of adverse-event finding categories."""

    ADVERSE_REACTION = "adverse_reaction"
    OFF_LABEL_USE = "off_label_use"
    OFF_LABEL_DOSING = "off_label_dosing"
    PREGNANCY_EXPOSURE = "pregnancy_exposure"
    DRUG_INTERACTION = "drug_interaction"
    SERIOUS_ADVERSE_EVENT = "serious_adverse_event"
    OVERDOSE = "overdose"
    MEDICATION_ERROR = "medication_error"


class Confidence(str, Enum):
    """Confidence tier attached to a coding suggestion."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class YesNo(str, Enum):
    """E2B boolean convention: 1 = yes, 2 = no."""

    YES = "1"
    NO = "2"

    @classmethod
    def of(cls, flag: bool) -> "YesNo":
        return cls.YES if flag else cls.NO


class Qualification(str, Enum):
    """ICH reporter qualification codes."""

    PHYSICIAN = "1"
    PHARMACIST = "2"
    OTHER_HEALTH_PROFESSIONAL = "3"
    LAWYER = "4"
    CONSUMER = "5"


class ReactionOutcome(str, Enum):
    """ICH reaction outcome codes."""

    RECOVERED = "1"
    RECOVERING = "2"
    NOT_RECOVERED = "3"
    RECOVERED_WITH_SEQUELAE = "4"
    FATAL = "5"
    UNKNOWN = "6"


class PatientSex(str, Enum):
    UNKNOWN = "0"
    MALE = "1"
    FEMALE = "2"
    OTHER = "3"


class PatientAgeGroup(str, Enum):
    NEONATE = "1"
    INFANT = "2"
    CHILD = "3"
    ADOLESCENT = "4"
    ADULT = "5"
    ELDERLY = "6"


class DrugCharacterization(str, Enum):
    SUSPECT = "1"
    CONCOMITANT = "2"
    INTERACTING = "3"
    NOT_ADMINISTERED = "4"


class SenderType(str, Enum):
    PHARMACEUTICAL_COMPANY = "1"
    REGULATORY_AUTHORITY = "2"
    DISTRIBUTOR = "3"


class ReceiverType(str, Enum):
    PHARMACEUTICAL_COMPANY = "1"
    REGULATORY_AUTHORITY = "2"
    DISTRIBUTOR = "3"
    INVESTIGATOR = "4"
    OTHER = "5"


class ReportType(str, Enum):
    SPONTANEOUS = "1"
    STUDY = "2"
    OTHER = "3"
    NOT_AVAILABLE = "4"


class ReviewStatus(str, Enum):
    """Review state of a coding suggestion as written into the document."""

    CONFIRMED = "confirmed"
    UNCONFIRMED = "unconfirmed"
