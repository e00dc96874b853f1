"""
ingestion/events.py
-------------------
Assembly of conversion ``Event`` payloads from decoded event records.

A record is a mapping such as one element of a JSON array::

    {
        "timestamp": "2025-06-10T14:30:00Z",
        "transactionId": "T-1001",
        "eventSource": "web",
        "gclid": "...",
        "currency": "USD",
        "value": 42.5,
        "emails": ["..."],
        "phoneNumbers": ["..."]
    }

Keys are matched case-insensitively and ``transaction_id`` is accepted for
``transactionId``.  Events without a usable timestamp or transaction ID, or
with an unknown event source, are skipped.  Invalid emails and phone numbers
are dropped individually; the event is kept even when none survive.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd

from userdata.core.encoding import Encoding
from userdata.formatting.formatter import EncodingLike, UserDataFormatter, get_default_formatter
from userdata.ingestion.members import build_user_data

logger = logging.getLogger(__name__)

EVENT_SOURCES = ("WEB", "APP", "IN_STORE", "PHONE", "OTHER")
_EVENT_SOURCE_LOOKUP = {s.replace("_", ""): s for s in EVENT_SOURCES}
# Timestamps must start with a calendar date; pandas would also accept "now".
_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


def _record_key(key: Any) -> str:
    return str(key).replace("_", "").lower()


def parse_event_timestamp(raw: Any) -> Optional[str]:
    """
    Parse *raw* into an RFC 3339 UTC timestamp string.

    The value must start with an ISO 8601 date (``YYYY-MM-DD``); relative
    words such as ``"now"`` or ``"today"`` are rejected.  Naive timestamps are
    taken to be UTC.

    Returns:
        e.g. ``"2025-06-10T14:30:00Z"``, or ``None`` if *raw* is missing or
        cannot be parsed.
    """
    if not isinstance(raw, str):
        return None
    raw = raw.strip()
    if not _ISO_DATE.match(raw):
        return None
    try:
        ts = pd.Timestamp(raw)
    except (ValueError, TypeError):
        return None
    if pd.isna(ts):
        return None
    ts = ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")
    return ts.tz_localize(None).isoformat() + "Z"


def parse_event_source(raw: Any) -> Optional[str]:
    """Map ``"web"``, ``"InStore"``, ``"in_store"`` ... to the API enum name."""
    if not isinstance(raw, str):
        return None
    return _EVENT_SOURCE_LOOKUP.get(raw.strip().replace("_", "").upper())


def build_event(
    record: Mapping[str, Any],
    formatter: Optional[UserDataFormatter] = None,
    encoding: EncodingLike = Encoding.HEX,
    index: int = 0,
) -> Optional[Dict[str, Any]]:
    """
    Build a single ``Event`` payload.

    Args:
        record:    Decoded event record.
        formatter: Formatter for the user identifiers.
        encoding:  Encoding of the hashed identifiers.
        index:     Position of the record, used only in log messages.

    Returns:
        The event payload, or ``None`` if the record was skipped.
    """
    encoding = Encoding.parse(encoding)
    fields = {_record_key(k): v for k, v in record.items()}

    timestamp = parse_event_timestamp(fields.get("timestamp"))
    if timestamp is None:
        logger.warning("Skipping event #%d with invalid timestamp", index)
        return None

    transaction_id = fields.get("transactionid")
    if transaction_id is None or transaction_id == "":
        logger.warning("Skipping event #%d with no transaction ID", index)
        return None

    event: Dict[str, Any] = {
        "eventTimestamp": timestamp,
        "transactionId": str(transaction_id),
    }

    raw_source = fields.get("eventsource")
    if raw_source:
        source = parse_event_source(raw_source)
        if source is None:
            logger.warning("Skipping event #%d with invalid event source", index)
            return None
        event["eventSource"] = source

    if fields.get("gclid"):
        event["adIdentifiers"] = {"gclid": str(fields["gclid"])}

    if fields.get("currency"):
        event["currency"] = str(fields["currency"])

    value = fields.get("value")
    if value is not None:
        try:
            event["conversionValue"] = float(value)
        except (TypeError, ValueError):
            logger.warning("Skipping event #%d with non-numeric value", index)
            return None

    user_data = build_user_data(
        fields.get("emails") or (),
        fields.get("phonenumbers") or (),
        formatter or get_default_formatter(),
        encoding,
    )
    if user_data is not None:
        event["userData"] = user_data
    return event


def build_events(
    records: Iterable[Mapping[str, Any]],
    formatter: Optional[UserDataFormatter] = None,
    encoding: EncodingLike = Encoding.HEX,
) -> List[Dict[str, Any]]:
    """Build ``Event`` payloads for every usable record, in input order."""
    encoding = Encoding.parse(encoding)
    formatter = formatter or get_default_formatter()
    events = []
    for index, record in enumerate(records):
        event = build_event(record, formatter, encoding, index=index)
        if event is not None:
            events.append(event)
    logger.debug("Built %d events", len(events))
    return events
