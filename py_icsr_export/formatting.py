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
This module provides the text and date helpers used when writing E2B values.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Optional, Union
from xml.sax.saxutils import escape

logger = logging.getLogger(__name__)

# E2B date format codes
DATE_FORMAT_CODE = "102"  # CCYYMMDD
DATETIME_FORMAT_CODE = "204"  # CCYYMMDDHHMMSS

_QUOTE_ENTITIES = {'"': "&quot;", "'": "&apos;"}

# Characters XML 1.0 cannot carry, not even as character references.
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")
REPLACEMENT_CHAR = "\ufffd"


def escape_xml(value: Optional[str]) -> str:
    """
    Escape the five reserved XML characters. ``None`` becomes an empty string.

    Characters that XML 1.0 forbids, such as form feeds pasted from email, are
    replaced with U+FFFD.
    """
    if value is None:
        return ""
    text = _INVALID_XML_CHARS.sub(REPLACEMENT_CHAR, str(value))
    return escape(text, _QUOTE_ENTITIES)


def escape_comment(value: Optional[str]) -> str:
    """
    Escape text destined for an XML comment.

    A comment may not contain ``--`` or end with ``-``, so those are broken up
    after escaping.
    """
    text = escape_xml(value)
    while "--" in text:
        text = text.replace("--", "- -")
    if text.endswith("-"):
        text += " "
    return text


def truncate(value: Optional[str], limit: int, marker: str = "") -> str:
    """Cut ``value`` to at most ``limit`` characters, appending ``marker`` when cut."""
    text = value or ""
    if len(text) <= limit:
        return text
    return text[:limit] + marker


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(
    value: Union[datetime, str, None], fallback: Optional[datetime] = None
) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive values are taken to be UTC. Anything unparsable falls back to
    ``fallback`` (or the current time) instead of failing the export.
    """
    default = fallback or utc_now()
    if value is None:
        return default

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.warning(f"Unparsable timestamp {value!r}; using current time instead.")
            return default

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_date(value: datetime) -> str:
    """Format as ``YYYYMMDD`` (E2B format 102)."""
    return value.astimezone(timezone.utc).strftime("%Y%m%d")


def format_datetime(value: datetime) -> str:
    """Format as ``YYYYMMDDHHMMSS`` in UTC (E2B format 204)."""
    return value.astimezone(timezone.utc).strftime("%Y%m%d%H%M%S")
