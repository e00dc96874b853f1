"""
ingestion/requests.py
---------------------
Request bodies for the Data Manager ingestion service.

Builds ``IngestAudienceMembersRequest`` and ``IngestEventsRequest`` bodies as
plain dicts using the API's JSON field names, split into batches that respect
the per-request limits from :class:`~userdata.core.config.FormatterConfig`.
Sending them is left to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence

from userdata.core.config import DEFAULT_CONFIG, FormatterConfig
from userdata.core.encoding import Encoding
from userdata.formatting.formatter import EncodingLike

logger = logging.getLogger(__name__)

ACCOUNT_TYPES = (
    "GOOGLE_ADS",
    "DISPLAY_VIDEO_PARTNER",
    "DISPLAY_VIDEO_ADVERTISER",
    "DATA_PARTNER",
)

_CONSENT_GRANTED = {
    "adUserData": "CONSENT_GRANTED",
    "adPersonalization": "CONSENT_GRANTED",
}


def _account_type(value: str) -> str:
    account_type = str(value).strip().upper().replace("-", "_")
    if account_type not in ACCOUNT_TYPES:
        raise ValueError(
            f"Unknown account type {value!r}; expected one of {', '.join(ACCOUNT_TYPES)}"
        )
    return account_type


def _product_account(account_type: str, account_id: str) -> Dict[str, str]:
    return {"accountType": _account_type(account_type), "accountId": str(account_id)}


def build_destination(
    operating_account_type: str,
    operating_account_id: str,
    product_destination_id: str,
    login_account_type: Optional[str] = None,
    login_account_id: Optional[str] = None,
    linked_account_type: Optional[str] = None,
    linked_account_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build a ``Destination``.

    Args:
        operating_account_type: Account type receiving the data.
        operating_account_id:   ID of that account.
        product_destination_id: Audience (user list) ID or conversion action ID.
        login_account_type:     Optional; must be given together with the ID.
        login_account_id:       Optional; must be given together with the type.
        linked_account_type:    Optional; must be given together with the ID.
        linked_account_id:      Optional; must be given together with the type.

    Raises:
        ValueError: If only one half of a login/linked account pair is given,
                    or an account type is unknown.
    """
    if (login_account_id is None) != (login_account_type is None):
        raise ValueError(
            "Must specify either both or neither of login account ID and login account type"
        )
    if (linked_account_id is None) != (linked_account_type is None):
        raise ValueError(
            "Must specify either both or neither of linked account ID and linked account type"
        )

    destination: Dict[str, Any] = {
        "operatingAccount": _product_account(operating_account_type, operating_account_id),
        "productDestinationId": str(product_destination_id),
    }
    if login_account_type is not None:
        destination["loginAccount"] = _product_account(login_account_type, login_account_id)
    if linked_account_type is not None:
        destination["linkedAccount"] = _product_account(linked_account_type, linked_account_id)
    return destination


def chunks(items: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    """Yield successive *size*-sized chunks from *items*."""
    if size <= 0:
        raise ValueError("Chunk size must be positive.")
    for i in range(0, len(items), size):
        yield items[i:i + size]


def build_audience_members_requests(
    destination: Dict[str, Any],
    audience_members: Sequence[Dict[str, Any]],
    validate_only: bool = True,
    encoding: EncodingLike = Encoding.HEX,
    max_per_request: Optional[int] = None,
    config: Optional[FormatterConfig] = None,
) -> List[Dict[str, Any]]:
    """
    Build ``IngestAudienceMembersRequest`` bodies, one per batch of members.

    Args:
        destination:      Result of :func:`build_destination`.
        audience_members: Payloads from
                          :func:`~userdata.ingestion.members.build_audience_members`.
        validate_only:    When ``True`` the service validates without applying.
        encoding:         Encoding used for the hashed identifiers.
        max_per_request:  Batch size; defaults to
                          ``config.max_audience_members_per_request``.
    """
    config = config or DEFAULT_CONFIG
    size = max_per_request or config.max_audience_members_per_request
    requests = [
        {
            "destinations": [destination],
            "audienceMembers": list(batch),
            "consent": dict(_CONSENT_GRANTED),
            "validateOnly": validate_only,
            "encoding": Encoding.parse(encoding).api_name,
            "termsOfService": {"customerMatchTermsOfServiceStatus": "ACCEPTED"},
        }
        for batch in chunks(list(audience_members), size)
    ]
    logger.info(
        "Prepared %d audience member request(s) for %d member(s)",
        len(requests),
        len(audience_members),
    )
    return requests


def build_events_requests(
    destination: Dict[str, Any],
    events: Sequence[Dict[str, Any]],
    validate_only: bool = True,
    encoding: EncodingLike = Encoding.HEX,
    max_per_request: Optional[int] = None,
    config: Optional[FormatterConfig] = None,
) -> List[Dict[str, Any]]:
    """Build ``IngestEventsRequest`` bodies, one per batch of events."""
    config = config or DEFAULT_CONFIG
    size = max_per_request or config.max_events_per_request
    requests = [
        {
            "destinations": [destination],
            "events": list(batch),
            "consent": dict(_CONSENT_GRANTED),
            "validateOnly": validate_only,
            "encoding": Encoding.parse(encoding).api_name,
        }
        for batch in chunks(list(events), size)
    ]
    logger.info("Prepared %d event request(s) for %d event(s)", len(requests), len(events))
    return requests
