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
This module holds the best-effort, pattern-based extraction used by the
exporter: reporter identity from a raw sender string and suspect drug names
from finding excerpts.

Both are approximations. Sender parsing does not understand titles
("Dr. Jane Smith" yields the given name "Dr."), and drug extraction produces
false positives for any capitalised word with a matching suffix and misses
lower-case or unusual product names. Results always go to human review.
"""
import logging
import re
from abc import ABC, abstractmethod
from typing import Dict, List, Sequence, Tuple

from .models import Reaction, ReporterIdentity
from .types import FindingCategory

logger = logging.getLogger(__name__)

MAX_SUSPECT_DRUGS = 3
UNKNOWN_REPORTER = "Unknown Reporter"
UNKNOWN_NAME = "Unknown"

_SENDER_PATTERN = re.compile(r"^(.*?)\s*<(.+)>\s*$")

# Morphemes typical of INN stems and brand names: monoclonal antibodies,
# kinase inhibitors, statins, sartans, proton pump inhibitors, antibiotics,
# antivirals and vaccines.
DRUG_SUFFIXES = (
    "mab",
    "nib",
    "lib",
    "zib",
    "ximab",
    "umab",
    "olumab",
    "uzumab",
    "tinib",
    "ciclib",
    "statin",
    "sartan",
    "prazole",
    "mycin",
    "cycline",
    "cillin",
    "vir",
    "vac",
)
_SUFFIX_PATTERN = re.compile(r"\b[A-Z][a-zA-Z]+(?:" + "|".join(DRUG_SUFFIXES) + r")\b")
_PROPER_NOUN_PATTERN = re.compile(r"\b[A-Z][a-z]{4,}\b")
_OFF_LABEL_CATEGORIES = frozenset(
    {FindingCategory.OFF_LABEL_USE, FindingCategory.OFF_LABEL_DOSING}
)
_OFF_LABEL_CANDIDATES_PER_REACTION = 2


def split_name(display_name: str) -> Tuple[str, str]:
    """Split on whitespace: first token is the given name, the rest the family name."""
    tokens = display_name.split()
    if not tokens:
        return display_name, UNKNOWN_NAME
    return tokens[0], " ".join(tokens[1:]) or UNKNOWN_NAME


def parse_sender(sender_raw: str) -> ReporterIdentity:
    """
    Parse a raw sender string into a reporter identity.

    Accepts ``"Display Name <address>"``; a bare address (anything with an
    ``@``) becomes the email with its local part as display name; any other
    string is taken as a display name without address.
    """
    raw = sender_raw or ""
    match = _SENDER_PATTERN.match(raw)
    if match:
        display_name = match.group(1).strip() or UNKNOWN_NAME
        email = match.group(2).strip()
    elif "@" in raw:
        email = raw.strip()
        display_name = email.split("@")[0] or UNKNOWN_NAME
    else:
        display_name = raw.strip() or UNKNOWN_REPORTER
        email = None

    given_name, family_name = split_name(display_name)
    return ReporterIdentity(
        display_name=display_name,
        email_address=email or None,
        given_name=given_name,
        family_name=family_name,
    )


class DrugNameExtractor(ABC):
    """
    Interface for suspect drug name extraction, so the regex heuristic can be
    replaced without touching the document assembler.
    """

    @abstractmethod
    def extract(self, reactions: Sequence[Reaction]) -> List[str]:
        """
        Return up to three candidate product names, in first-seen order.

        :param reactions: The findings of one case.
        """
        raise NotImplementedError


class RegexDrugNameExtractor(DrugNameExtractor):
    """Suffix and proper-noun pattern matching over finding excerpts."""

    def __init__(self, limit: int = MAX_SUSPECT_DRUGS):
        self.limit = limit

    def extract(self, reactions: Sequence[Reaction]) -> List[str]:
        # dict keeps insertion order, which makes the cap deterministic
        names: Dict[str, None] = {}
        for reaction in reactions:
            excerpt = reaction.excerpt or ""
            for match in _SUFFIX_PATTERN.findall(excerpt):
                names.setdefault(match, None)
            if reaction.category in _OFF_LABEL_CATEGORIES:
                words = _PROPER_NOUN_PATTERN.findall(excerpt)
                for word in words[:_OFF_LABEL_CANDIDATES_PER_REACTION]:
                    names.setdefault(word, None)

        candidates = list(names)[: self.limit]
        logger.debug(f"Extracted {len(candidates)} suspect drug candidate(s): {candidates}")
        return candidates
