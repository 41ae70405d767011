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
This module reads an exported ICSR document back, so reviewers can check
which reactions still carry unconfirmed MedDRA codes before submission.
"""
import logging
from pathlib import Path
from typing import List, Optional, Union
from xml.sax.saxutils import unescape

from lxml import etree
from pydantic import BaseModel

from .document import REVIEW_COMMENT_PATTERN, UNCONFIRMED_MARKER
from .exceptions import IcsrReadError
from .types import ReviewStatus

logger = logging.getLogger(__name__)

_COMMENT_ENTITIES = {"&quot;": '"', "&apos;": "'"}


class ReactionSummary(BaseModel):
    index: int
    finding_id: Optional[str] = None
    category: Optional[str] = None
    excerpt: Optional[str] = None
    pt_term: Optional[str] = None
    outcome: Optional[str] = None
    status: Optional[ReviewStatus] = None


class IcsrSummary(BaseModel):
    """The review-relevant content of one exported safety report."""

    report_id: Optional[str] = None
    message_date: Optional[str] = None
    serious: Optional[str] = None
    medicinal_products: List[str] = []
    reactions: List[ReactionSummary] = []

    @property
    def unconfirmed(self) -> List[ReactionSummary]:
        """Reactions marked unconfirmed or missing a review marker altogether."""
        return [r for r in self.reactions if r.status != ReviewStatus.CONFIRMED]

    @property
    def ready_for_submission(self) -> bool:
        return bool(self.reactions) and not self.unconfirmed


def element_text(
    elem: etree._Element, path: str, default: Optional[str] = None
) -> Optional[str]:
    node = elem.find(path)
    return node.text if node is not None and node.text is not None else default


def read_icsr(source: Union[str, bytes, Path]) -> IcsrSummary:
    """
    Parse an exported ICSR document.

    :param source: The XML as text or bytes, or a path to the file.
    :return: The report summary with per-reaction review status.
    :raises IcsrReadError: If the document is not well-formed or lacks a safety report.
    """
    if isinstance(source, Path):
        data = source.read_bytes()
    elif isinstance(source, str):
        data = source.encode("utf-8")
    else:
        data = source

    try:
        root = etree.fromstring(data)
    except etree.XMLSyntaxError as e:
        logger.error(f"Could not parse ICSR document: {e}")
        raise IcsrReadError(f"Malformed ICSR document: {e}") from e

    report = root.find("safetyreport")
    if report is None:
        raise IcsrReadError("Document does not contain a <safetyreport> element.")

    summary = IcsrSummary(
        report_id=element_text(report, "safetyreportid"),
        message_date=element_text(root, "ichicsrmessageheader/messagedate"),
        serious=element_text(report, "serious"),
    )

    patient = report.find("patient")
    if patient is None:
        logger.warning(f"Report {summary.report_id} has no <patient> section.")
        return summary

    pending: Optional[ReactionSummary] = None
    for child in patient:
        if child.tag is etree.Comment:
            match = REVIEW_COMMENT_PATTERN.match(child.text or "")
            if match:
                finding = match.group("finding")
                pending = ReactionSummary(
                    index=int(match.group("index")),
                    category=match.group("category"),
                    finding_id=unescape(finding, _COMMENT_ENTITIES) if finding else None,
                    status=(
                        ReviewStatus.UNCONFIRMED
                        if match.group("marker") == UNCONFIRMED_MARKER
                        else ReviewStatus.CONFIRMED
                    ),
                )
        elif child.tag == "reaction":
            entry = pending or ReactionSummary(index=len(summary.reactions) + 1)
            entry.excerpt = element_text(child, "primarysourcereaction", "")
            entry.pt_term = element_text(child, "reactionmeddrapt")
            entry.outcome = element_text(child, "reactionoutcome")
            summary.reactions.append(entry)
            pending = None
        elif child.tag == "drug":
            product = element_text(child, "medicinalproduct")
            if product:
                summary.medicinal_products.append(product)

    logger.info(
        f"Read report {summary.report_id}: {len(summary.reactions)} reaction(s), "
        f"{len(summary.unconfirmed)} unconfirmed."
    )
    return summary
