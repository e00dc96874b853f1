"""
ingestion/members.py
--------------------
Assembly of ``AudienceMember`` payloads from raw email addresses and phone
numbers.

Each value goes through
:meth:`~userdata.formatting.formatter.UserDataFormatter.process`.  A value that
fails validation is skipped on its own; a member whose every value failed is
dropped.  Only field names and counts are logged, never values.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from userdata.core.encoding import Encoding
from userdata.core.errors import UserDataError
from userdata.formatting.formatter import EncodingLike, UserDataFormatter, get_default_formatter
from userdata.formatting.normalizer import FieldType

logger = logging.getLogger(__name__)

# Field type -> key of the UserIdentifier it populates.
_IDENTIFIER_KEYS: Tuple[Tuple[FieldType, str], ...] = (
    (FieldType.EMAIL_ADDRESS, "emailAddress"),
    (FieldType.PHONE_NUMBER, "phoneNumber"),
)


def _identifiers(
    field_type: FieldType,
    key: str,
    values: Iterable[Optional[str]],
    formatter: UserDataFormatter,
    encoding: Encoding,
) -> List[Dict[str, str]]:
    if isinstance(values, str):
        values = (values,)
    identifiers = []
    for index, value in enumerate(values or ()):
        try:
            processed = formatter.process(field_type, value, encoding)
        except UserDataError as exc:
            logger.debug("Skipping %s #%d: %s", field_type.label, index, exc.reason)
            continue
        identifiers.append({key: processed})
    return identifiers


def build_user_data(
    emails: Iterable[Optional[str]] = (),
    phone_numbers: Iterable[Optional[str]] = (),
    formatter: Optional[UserDataFormatter] = None,
    encoding: EncodingLike = Encoding.HEX,
) -> Optional[Dict[str, Any]]:
    """
    Build a ``UserData`` payload from raw identifiers.

    Args:
        emails:        Raw email addresses.  A single string counts as one
                       address.
        phone_numbers: Raw phone numbers, likewise.
        formatter:     Formatter to use; the default formatter if omitted.
        encoding:      Encoding of the hashed identifiers.

    Returns:
        ``{"userIdentifiers": [...]}`` with emails first, or ``None`` if no
        value passed validation.

    Raises:
        UserDataError: If *encoding* is not a known encoding.  Only values
            are skipped; a bad encoding fails the whole call.
    """
    encoding = Encoding.parse(encoding)
    formatter = formatter or get_default_formatter()
    identifiers: List[Dict[str, str]] = []
    for (field_type, key), values in zip(_IDENTIFIER_KEYS, (emails, phone_numbers)):
        identifiers.extend(_identifiers(field_type, key, values, formatter, encoding))
    if not identifiers:
        return None
    return {"userIdentifiers": identifiers}


def build_audience_member(
    emails: Iterable[Optional[str]] = (),
    phone_numbers: Iterable[Optional[str]] = (),
    formatter: Optional[UserDataFormatter] = None,
    encoding: EncodingLike = Encoding.HEX,
) -> Optional[Dict[str, Any]]:
    """Build an ``AudienceMember``; ``None`` when no identifier survived."""
    user_data = build_user_data(emails, phone_numbers, formatter, encoding)
    if user_data is None:
        return None
    return {"userData": user_data}


def build_audience_members(
    members: Iterable[Mapping[str, Any]],
    formatter: Optional[UserDataFormatter] = None,
    encoding: EncodingLike = Encoding.HEX,
) -> List[Dict[str, Any]]:
    """
    Build ``AudienceMember`` payloads for many members.

    Args:
        members: Mappings with optional ``emails`` and ``phone_numbers``
                 lists of raw values.

    Returns:
        One payload per member that kept at least one identifier, in input
        order.
    """
    encoding = Encoding.parse(encoding)
    formatter = formatter or get_default_formatter()
    audience_members = []
    dropped = 0
    for member in members:
        payload = build_audience_member(
            member.get("emails") or (),
            member.get("phone_numbers") or (),
            formatter,
            encoding,
        )
        if payload is None:
            dropped += 1
            continue
        audience_members.append(payload)

    if dropped:
        logger.warning(
            "Dropped %d of %d members with no valid email address or phone number.",
            dropped,
            dropped + len(audience_members),
        )
    return audience_members
