# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
"""
This module contains the ICSR encoder that turns a reviewed case into an
ICH E2B(R3) document.
"""
import logging
from datetime import datetime
from typing import Optional

from .config import AppSettings, ExportSettings
from .derivation import derive_outcome, derive_qualification, derive_seriousness
from .document import DocumentInputs, IcsrDocument, assemble_document
from .exceptions import EmptyCaseError
from .formatting import parse_timestamp, utc_now
from .heuristics import DrugNameExtractor, RegexDrugNameExtractor, parse_sender
from .models import Case, ExportOptions
from .types import Confidence

logger = logging.getLogger(__name__)


class IcsrEncoder:
    """
    Encodes one case per call. Holds no per-case state, so a single instance
    can be shared between threads.
    """

    def __init__(
        self,
        settings: Optional[ExportSettings] = None,
        drug_extractor: Optional[DrugNameExtractor] = None,
    ):
        self.settings = settings or ExportSettings()
        self.drug_extractor = drug_extractor or RegexDrugNameExtractor()

    @classmethod
    def from_config(cls, config: AppSettings) -> "IcsrEncoder":
        return cls(settings=config.export)

    def build(
        self,
        case: Case,
        options: Optional[ExportOptions] = None,
        now: Optional[datetime] = None,
    ) -> IcsrDocument:
        """
        Derive every field for ``case`` and assemble the document tree.

        :param case: The reviewed case. Must carry at least one reaction.
        :param options: Export context; defaults come from the settings.
        :param now: Transmission time, defaults to the current UTC time.
        :raises EmptyCaseError: If the case has no reactions.
        """
        if not case.reactions:
            raise EmptyCaseError(f"Case {case.case_id!r} has no reactions and cannot be exported.")

        options = options or self.settings.to_options()
        generated_at = parse_timestamp(now) if now is not None else utc_now()

        seriousness = derive_seriousness(case.max_severity, case.reactions)
        qualification = derive_qualification(case.sender_raw)
        reporter = parse_sender(case.sender_raw)
        outcomes = tuple(derive_outcome(r.severity) for r in case.reactions)
        drug_names = tuple(self.drug_extractor.extract(case.reactions))
        received_at = parse_timestamp(case.received_at, fallback=generated_at)

        logger.debug(
            f"Case {case.case_id}: serious={seriousness.serious.value}, "
            f"qualification={qualification.value}, drugs={list(drug_names)}"
        )
        if not drug_names:
            logger.info(f"No suspect drug candidates found for case {case.case_id}.")

        document = assemble_document(
            DocumentInputs(
                case=case,
                options=options,
                settings=self.settings,
                seriousness=seriousness,
                qualification=qualification,
                reporter=reporter,
                outcomes=outcomes,
                drug_names=drug_names,
                generated_at=generated_at,
                received_at=received_at,
            )
        )

        unconfirmed = case.unconfirmed_count
        low_confidence = sum(1 for r in case.reactions if r.coding.confidence == Confidence.LOW)
        if unconfirmed:
            logger.warning(
                f"Report {document.report_id} contains {unconfirmed} unconfirmed MedDRA term(s); "
                "verify before submission."
            )
        logger.info(
            f"Encoded report {document.report_id}: {len(case.reactions)} reaction(s), "
            f"{unconfirmed} unconfirmed, {low_confidence} low confidence."
        )
        return document

    def encode(
        self,
        case: Case,
        options: Optional[ExportOptions] = None,
        now: Optional[datetime] = None,
    ) -> str:
        """Encode ``case`` and return the rendered XML document."""
        return self.build(case, options=options, now=now).render()


def encode_case(
    case: Case,
    options: Optional[ExportOptions] = None,
    now: Optional[datetime] = None,
    settings: Optional[ExportSettings] = None,
) -> str:
    """Encode a single case with default settings and the regex drug extractor."""
    return IcsrEncoder(settings=settings).encode(case, options=options, now=now)
