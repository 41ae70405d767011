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
This module assembles the ICH E2B(R3) ICSR document.

The document is first built as an immutable tree of ``Element``, ``Comment``
and ``Blank`` nodes and only then rendered to text in one pass, so a half-built
document can never be returned. Node text is stored raw; escaping happens
exclusively in the renderer.
"""
import logging
import re
from datetime import datetime
from enum import Enum
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union

from .config import ExportSettings
from .formatting import (
    DATE_FORMAT_CODE,
    DATETIME_FORMAT_CODE,
    escape_comment,
    escape_xml,
    format_date,
    format_datetime,
    truncate,
)
from .models import (
    Case,
    CodedTerm,
    ExportOptions,
    Reaction,
    ReporterIdentity,
    SeriousnessCriteria,
)
from .types import (
    DrugCharacterization,
    PatientAgeGroup,
    PatientSex,
    Qualification,
    ReactionOutcome,
    ReceiverType,
    ReportType,
    ReviewStatus,
    SenderType,
)

logger = logging.getLogger(__name__)

MESSAGE_TYPE = "ichicsr"
MESSAGE_FORMAT_VERSION = "5.02"
MESSAGE_FORMAT_RELEASE = "2"
SAFETY_REPORT_VERSION = "1"
SENDER_DEPARTMENT = "Pharmacovigilance"
ANONYMOUS_PATIENT = "ANON"
ACTIVE_SUBSTANCE_PLACEHOLDER = "TBD"
PLACEHOLDER_CODE = "00000"
PLACEHOLDER_TERM = "Unknown"
NARRATIVE_ELLIPSIS = "..."
INDENT = "  "

CONFIRMED_MARKER = "CONFIRMED BY REVIEWER"
UNCONFIRMED_MARKER = "AI SUGGESTED - REQUIRES VERIFICATION"
REVIEW_STATUS_MARKERS = {
    ReviewStatus.CONFIRMED: CONFIRMED_MARKER,
    ReviewStatus.UNCONFIRMED: UNCONFIRMED_MARKER,
}
# Matches the review-status comment written before every <reaction>.
REVIEW_COMMENT_PATTERN = re.compile(
    r"^\s*Reaction (?P<index>\d+): (?P<category>\S+) / (?P<severity>\S+)"
    r" \| (?P<marker>" + re.escape(CONFIRMED_MARKER) + "|" + re.escape(UNCONFIRMED_MARKER) + r")"
    r"(?: \| finding=(?P<finding>.*?))?\s*$"
)


class Blank(NamedTuple):
    """An empty line between sections."""


class Comment(NamedTuple):
    text: str


class Element(NamedTuple):
    tag: str
    text: Optional[str] = None
    children: Tuple["Node", ...] = ()
    attributes: Tuple[Tuple[str, str], ...] = ()


Node = Union[Element, Comment, Blank]


def leaf(tag: str, value: object) -> Element:
    """An element holding a single text value. Enum members are written by value."""
    text = value.value if isinstance(value, Enum) else value
    return Element(tag, "" if text is None else str(text))


class DocumentInputs(NamedTuple):
    """Everything the assembler needs, already derived."""

    case: Case
    options: ExportOptions
    settings: ExportSettings
    seriousness: SeriousnessCriteria
    qualification: Qualification
    reporter: ReporterIdentity
    outcomes: Tuple[ReactionOutcome, ...]
    drug_names: Tuple[str, ...]
    generated_at: datetime
    received_at: datetime


class IcsrDocument(NamedTuple):
    """A fully assembled ICSR document, ready to render."""

    report_id: str
    nodes: Tuple[Node, ...]

    def render(self) -> str:
        lines = ['<?xml version="1.0" encoding="UTF-8"?>']
        for node in self.nodes:
            lines.extend(_render_node(node, 0))
        return "\n".join(lines) + "\n"


def _render_node(node: Node, depth: int) -> Iterator[str]:
    pad = INDENT * depth
    if isinstance(node, Blank):
        yield ""
    elif isinstance(node, Comment):
        comment_lines = node.text.split("\n")
        if len(comment_lines) == 1:
            yield f"{pad}<!-- {escape_comment(node.text)} -->"
        else:
            yield f"{pad}<!--"
            for line in comment_lines:
                yield f"{pad}     {escape_comment(line)}".rstrip()
            yield f"{pad}-->"
    else:
        attrs = "".join(f' {name}="{escape_xml(value)}"' for name, value in node.attributes)
        if node.children:
            yield f"{pad}<{node.tag}{attrs}>"
            for child in node.children:
                yield from _render_node(child, depth + 1)
            yield f"{pad}</{node.tag}>"
        else:
            yield f"{pad}<{node.tag}{attrs}>{escape_xml(node.text)}</{node.tag}>"


def make_report_id(case_id: str, prefix: str = "NARC") -> str:
    """Stable report id: the prefix plus the first 8 characters of the case id, upper-cased."""
    return f"{prefix}-{case_id[:8].upper()}"


def review_status(reaction: Reaction) -> ReviewStatus:
    return ReviewStatus.CONFIRMED if reaction.coding.confirmed else ReviewStatus.UNCONFIRMED


def _code(term: CodedTerm) -> str:
    return term.code or PLACEHOLDER_CODE


def _term(term: CodedTerm) -> str:
    return term.display_name or PLACEHOLDER_TERM


def _banner(inputs: DocumentInputs, report_id: str) -> Comment:
    unconfirmed = inputs.case.unconfirmed_count
    lines = [
        "ICH E2B(R3) Individual Case Safety Report (ICSR)",
        f"Generated by {inputs.options.sender_organization}",
        f"Report ID: {report_id}",
        f"Generated: {inputs.generated_at.isoformat()}",
        f"Exported by: {inputs.options.exported_by}",
        "",
    ]
    if unconfirmed:
        lines += [
            f"{unconfirmed} MedDRA term(s) NOT yet confirmed by a qualified person.",
            f"AI-suggested codes and any code shown as {PLACEHOLDER_CODE} must be verified",
            "against the current licensed MedDRA dictionary (MSSO) before submission.",
        ]
    else:
        lines.append("All terms confirmed by reviewer.")
    lines.append("Draft for human review. Not for automatic regulatory submission.")
    return Comment("\n".join(lines))


def _message_header(inputs: DocumentInputs, report_id: str) -> Element:
    options = inputs.options
    return Element(
        "ichicsrmessageheader",
        children=(
            leaf("messagetype", MESSAGE_TYPE),
            leaf("messageformatversion", MESSAGE_FORMAT_VERSION),
            leaf("messageformatrelease", MESSAGE_FORMAT_RELEASE),
            leaf("messagenumb", f"{report_id}-{format_date(inputs.generated_at)}"),
            leaf("messagesenderidentifier", options.sender_organization),
            leaf("messagereceiveridentifier", options.receiver_organization),
            leaf("messagedateformat", DATETIME_FORMAT_CODE),
            leaf("messagedate", format_datetime(inputs.generated_at)),
        ),
    )


def _seriousness(criteria: SeriousnessCriteria) -> Tuple[Node, ...]:
    return (
        Comment("Seriousness criteria: 1=yes, 2=no"),
        leaf("serious", criteria.serious),
        leaf("seriousnessdeath", criteria.death),
        leaf("seriousnesslifethreatening", criteria.life_threatening),
        leaf("seriousnesshospitalization", criteria.hospitalization),
        leaf("seriousnessdisabling", criteria.disabling),
        leaf("seriousnesscongenitalanomali", criteria.congenital_anomaly),
        leaf("seriousnessother", criteria.other),
    )


def _primary_source(inputs: DocumentInputs) -> Element:
    reporter = inputs.reporter
    children: List[Node] = [
        leaf("reporterfirstname", reporter.given_name),
        leaf("reporterlastname", reporter.family_name),
    ]
    if reporter.email_address:
        children.append(leaf("reporteremail", reporter.email_address))
    children += [
        leaf("reportercountry", inputs.options.country_code),
        Comment(
            "qualification: 1=physician, 2=pharmacist, 3=other HP, 4=lawyer, 5=consumer"
            " (best-effort guess from the sender string, verify before submission)"
        ),
        leaf("qualification", inputs.qualification),
    ]
    return Element("primarysource", children=tuple(children))


def _sender(options: ExportOptions) -> Element:
    return Element(
        "sender",
        children=(
            leaf("sendertype", SenderType.PHARMACEUTICAL_COMPANY),
            leaf("senderorganization", options.sender_organization),
            leaf("senderdepartment", SENDER_DEPARTMENT),
            leaf("senderemail", options.exported_by),
        ),
    )


def _receiver(options: ExportOptions) -> Element:
    return Element(
        "receiver",
        children=(
            leaf("receivertype", ReceiverType.REGULATORY_AUTHORITY),
            leaf("receiverorganization", options.receiver_organization),
        ),
    )


def _single_line(value: str) -> str:
    return re.sub(r"[\r\n]+", " ", value)


def _reaction(
    index: int,
    reaction: Reaction,
    outcome: ReactionOutcome,
    dictionary_version: str,
    max_excerpt_length: int,
) -> Tuple[Node, ...]:
    coding = reaction.coding
    llt = coding.lowest_level
    status_line = (
        f"Reaction {index}: {reaction.category.value} / {reaction.severity.value}"
        f" | {REVIEW_STATUS_MARKERS[review_status(reaction)]}"
        f" | finding={_single_line(reaction.finding_id)}"
    )
    return (
        Comment(status_line),
        Element(
            "reaction",
            children=(
                leaf("primarysourcereaction", truncate(reaction.excerpt, max_excerpt_length)),
                leaf("reactionmeddraversionpt", dictionary_version),
                Comment(f"PT Code: {_code(coding.pt)} | Confidence: {coding.confidence.value}"),
                leaf("reactionmeddrapt", _term(coding.pt)),
                leaf("reactionmeddraversionllt", dictionary_version),
                Comment(f"LLT Code: {_code(llt)}"),
                leaf("reactionmeddrallt", _term(llt)),
                Comment(f"HLT: {_code(coding.hlt)} / {_term(coding.hlt)}"),
                Comment(f"HLGT: {_code(coding.hlgt)} / {_term(coding.hlgt)}"),
                Comment(f"SOC: {_code(coding.soc)} / {_term(coding.soc)}"),
                leaf("reactionoutcome", outcome),
            ),
        ),
    )


def _drug(name: str) -> Element:
    return Element(
        "drug",
        children=(
            leaf("drugcharacterization", DrugCharacterization.SUSPECT),
            leaf("medicinalproduct", name),
            Comment("activesubstancename: fill in the verified INN/generic name"),
            leaf("activesubstancename", ACTIVE_SUBSTANCE_PLACEHOLDER),
        ),
    )


def build_narrative(case: Case, sender_organization: str, max_body_length: int) -> str:
    body = truncate(case.body_excerpt, max_body_length, NARRATIVE_ELLIPSIS)
    return (
        f"{sender_organization} automated pharmacovigilance report. "
        f"Source email subject: {case.subject}. "
        f"{len(case.reactions)} adverse event finding(s) detected. "
        f"Maximum severity: {case.max_severity.value}. "
        f"Body excerpt: {body}"
    )


def _patient(inputs: DocumentInputs) -> Element:
    case = inputs.case
    settings = inputs.settings
    children: List[Node] = [
        Comment("Patient identity anonymised; demographics are fixed defaults"),
        leaf("patientinitial", ANONYMOUS_PATIENT),
        leaf("patientsex", PatientSex.UNKNOWN),
        leaf("patientagegroup", PatientAgeGroup.ADULT),
        Blank(),
        Comment("Adverse reactions"),
    ]
    for index, (reaction, outcome) in enumerate(zip(case.reactions, inputs.outcomes), start=1):
        children.extend(
            _reaction(
                index,
                reaction,
                outcome,
                inputs.options.coding_dictionary_version,
                settings.max_excerpt_length,
            )
        )

    children += [Blank(), Comment("Suspect drugs")]
    drug_names: Sequence[str] = inputs.drug_names or (settings.unknown_drug_placeholder,)
    children.extend(_drug(name) for name in drug_names)

    narrative = build_narrative(
        case, inputs.options.sender_organization, settings.max_narrative_excerpt_length
    )
    children += [
        Blank(),
        Comment("Case narrative"),
        Element("summary", children=(leaf("narrativeincludespatient", narrative),)),
    ]
    return Element("patient", children=tuple(children))


def assemble_document(inputs: DocumentInputs) -> IcsrDocument:
    """
    Build the complete ICSR node tree from derived values and the raw case.

    :param inputs: The case, options and everything derived from them.
    :return: An immutable document; call ``render()`` for the XML text.
    """
    case = inputs.case
    options = inputs.options
    report_id = make_report_id(case.case_id, inputs.settings.report_id_prefix)

    safety_report = Element(
        "safetyreport",
        children=(
            leaf("safetyreportid", report_id),
            leaf("safetyreportversion", SAFETY_REPORT_VERSION),
            leaf("primarysourcecountry", options.country_code),
            leaf("occurcountry", options.country_code),
            leaf("transmissiondateformat", DATE_FORMAT_CODE),
            leaf("transmissiondate", format_date(inputs.generated_at)),
            leaf("reporttype", ReportType.SPONTANEOUS),
            leaf("receivedateformat", DATE_FORMAT_CODE),
            leaf("receivedate", format_date(inputs.received_at)),
            leaf("receiptdateformat", DATE_FORMAT_CODE),
            leaf("receiptdate", format_date(inputs.received_at)),
            Blank(),
            *_seriousness(inputs.seriousness),
            Blank(),
            _primary_source(inputs),
            _sender(options),
            _receiver(options),
            Blank(),
            _patient(inputs),
        ),
    )

    root = Element(
        "ichicsr",
        children=(_message_header(inputs, report_id), Blank(), safety_report),
        attributes=(("lang", "en"),),
    )
    logger.debug(f"Assembled document {report_id} with {len(case.reactions)} reaction(s).")
    return IcsrDocument(report_id=report_id, nodes=(_banner(inputs, report_id), Blank(), root))
