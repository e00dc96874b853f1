import logging

import pytest

from userdata.core.config import FormatterConfig
from userdata.core.encoding import Encoding
from userdata.core.errors import InvalidFormatError
from userdata.ingestion.events import (
    build_event,
    build_events,
    parse_event_source,
    parse_event_timestamp,
)
from userdata.ingestion.members import (
    build_audience_member,
    build_audience_members,
    build_user_data,
)
from userdata.ingestion.requests import (
    build_audience_members_requests,
    build_destination,
    build_events_requests,
    chunks,
)

EMAIL_HEX = "509e933019bb285a134a9334b8bb679dff79d0ce023d529af4bd744d47b4fd8a"
PHONE_HEX = "fb4f73a6ec5fdb7077d564cdd22c3554b43ce49168550c3b12c547b78c517b30"


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

def test_build_user_data_skips_invalid_values():
    user_data = build_user_data(
        emails=["alexz@example.com", "not-an-email", None, "  "],
        phone_numbers=["+1 800-555-0100", "++++"],
    )
    assert user_data == {
        "userIdentifiers": [
            {"emailAddress": EMAIL_HEX},
            {"phoneNumber": PHONE_HEX},
        ]
    }


def test_build_user_data_base64():
    user_data = build_user_data(emails=["alexz@example.com"], encoding=Encoding.BASE64)
    assert user_data["userIdentifiers"][0]["emailAddress"] == (
        "UJ6TMBm7KFoTSpM0uLtnnf950M4CPVKa9L10TUe0/Yo="
    )


def test_build_audience_member_none_when_every_field_fails():
    assert build_audience_member(emails=["@example.com"], phone_numbers=["abc"]) is None
    assert build_audience_member() is None


def test_build_audience_members_drops_empty_members(caplog):
    members = [
        {"emails": ["alexz@example.com"], "phone_numbers": []},
        {"emails": ["bad email@example.com"], "phone_numbers": ["n/a"]},
        {"phone_numbers": ["18005550100"]},
    ]
    with caplog.at_level(logging.WARNING, logger="userdata.ingestion.members"):
        result = build_audience_members(members)

    assert result == [
        {"userData": {"userIdentifiers": [{"emailAddress": EMAIL_HEX}]}},
        {"userData": {"userIdentifiers": [{"phoneNumber": PHONE_HEX}]}},
    ]
    assert "Dropped 1 of 3 members" in caplog.text
    # Raw values never reach the log.
    assert "bad email" not in caplog.text


def test_skipped_identifiers_logged_without_values(caplog):
    with caplog.at_level(logging.DEBUG, logger="userdata.ingestion.members"):
        build_user_data(emails=["Secret.Person@"])
    assert "Skipping email address #0" in caplog.text
    assert "Secret" not in caplog.text


def test_build_user_data_single_string_is_one_value():
    assert build_user_data(emails="alexz@example.com", phone_numbers="+1 800-555-0100") == {
        "userIdentifiers": [
            {"emailAddress": EMAIL_HEX},
            {"phoneNumber": PHONE_HEX},
        ]
    }
    assert build_user_data(emails="not-an-email") is None


def test_unknown_encoding_is_an_error_not_a_skipped_value():
    with pytest.raises(InvalidFormatError, match="encoding"):
        build_user_data(emails=["alexz@example.com"], encoding="sha1")
    with pytest.raises(InvalidFormatError):
        build_audience_member(emails=["alexz@example.com"], encoding="sha1")
    with pytest.raises(InvalidFormatError):
        build_audience_members([{"emails": ["alexz@example.com"]}], encoding="sha1")
    with pytest.raises(InvalidFormatError):
        build_events(
            [{"timestamp": "2025-06-10T14:30:00Z", "transactionId": "A"}], encoding="sha1"
        )


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

def test_parse_event_timestamp():
    assert parse_event_timestamp("2025-06-10T14:30:00Z") == "2025-06-10T14:30:00Z"
    assert parse_event_timestamp("2025-06-10T16:30:00+02:00") == "2025-06-10T14:30:00Z"
    assert parse_event_timestamp("2025-06-10 14:30:00") == "2025-06-10T14:30:00Z"
    assert parse_event_timestamp("not a timestamp") is None
    assert parse_event_timestamp("") is None
    assert parse_event_timestamp(None) is None
    assert parse_event_timestamp(1718030000) is None


@pytest.mark.parametrize("raw", ["now", "today", " Now ", "TODAY", "tomorrow", "06/10/2025"])
def test_parse_event_timestamp_requires_calendar_date(raw):
    assert parse_event_timestamp(raw) is None


@pytest.mark.parametrize("raw,expected", [
    ("web", "WEB"),
    ("APP", "APP"),
    ("InStore", "IN_STORE"),
    ("in_store", "IN_STORE"),
    ("phone", "PHONE"),
    ("Other", "OTHER"),
    ("carrier-pigeon", None),
    (None, None),
])
def test_parse_event_source(raw, expected):
    assert parse_event_source(raw) == expected


def test_build_event_full_record():
    record = {
        "Timestamp": "2025-06-10T14:30:00Z",
        "TransactionId": "T-1001",
        "eventSource": "web",
        "gclid": "abc123",
        "currency": "USD",
        "value": "42.5",
        "emails": ["  ALEXZ@example.com "],
        "phoneNumbers": ["1 800 555 0100", "none"],
    }
    assert build_event(record) == {
        "eventTimestamp": "2025-06-10T14:30:00Z",
        "transactionId": "T-1001",
        "eventSource": "WEB",
        "adIdentifiers": {"gclid": "abc123"},
        "currency": "USD",
        "conversionValue": 42.5,
        "userData": {
            "userIdentifiers": [
                {"emailAddress": EMAIL_HEX},
                {"phoneNumber": PHONE_HEX},
            ]
        },
    }


def test_build_event_kept_without_user_data():
    event = build_event({
        "timestamp": "2025-06-10T14:30:00Z",
        "transaction_id": "T-2",
        "emails": ["nope"],
    })
    assert event == {"eventTimestamp": "2025-06-10T14:30:00Z", "transactionId": "T-2"}


@pytest.mark.parametrize("record", [
    {"transactionId": "T-1"},
    {"timestamp": "yesterday-ish", "transactionId": "T-1"},
    {"timestamp": "2025-06-10T14:30:00Z"},
    {"timestamp": "2025-06-10T14:30:00Z", "transactionId": ""},
    {"timestamp": "2025-06-10T14:30:00Z", "transactionId": None},
    {"timestamp": "now", "transactionId": "T-1"},
    {"timestamp": "2025-06-10T14:30:00Z", "transactionId": "T-1", "eventSource": "fax"},
    {"timestamp": "2025-06-10T14:30:00Z", "transactionId": "T-1", "value": "lots"},
])
def test_build_event_skips_unusable_records(record):
    assert build_event(record) is None


def test_build_event_numeric_transaction_id_zero_is_kept():
    event = build_event({"timestamp": "2025-06-10T14:30:00Z", "transactionId": 0})
    assert event == {"eventTimestamp": "2025-06-10T14:30:00Z", "transactionId": "0"}


def test_build_events_keeps_order_and_skips():
    records = [
        {"timestamp": "2025-06-10T14:30:00Z", "transactionId": "A"},
        {"timestamp": "", "transactionId": "B"},
        {"timestamp": "2025-06-11T09:00:00Z", "transactionId": "C"},
    ]
    assert [e["transactionId"] for e in build_events(records)] == ["A", "C"]


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

def test_build_destination_minimal():
    assert build_destination("google_ads", "1234567890", "555") == {
        "operatingAccount": {"accountType": "GOOGLE_ADS", "accountId": "1234567890"},
        "productDestinationId": "555",
    }


def test_build_destination_with_login_and_linked_accounts():
    destination = build_destination(
        "DATA_PARTNER", "1", "2",
        login_account_type="data-partner", login_account_id="3",
        linked_account_type="GOOGLE_ADS", linked_account_id="4",
    )
    assert destination["loginAccount"] == {"accountType": "DATA_PARTNER", "accountId": "3"}
    assert destination["linkedAccount"] == {"accountType": "GOOGLE_ADS", "accountId": "4"}


@pytest.mark.parametrize("kwargs", [
    {"login_account_id": "3"},
    {"login_account_type": "GOOGLE_ADS"},
    {"linked_account_id": "4"},
    {"linked_account_type": "GOOGLE_ADS"},
])
def test_build_destination_requires_both_halves_of_account_pair(kwargs):
    with pytest.raises(ValueError, match="either both or neither"):
        build_destination("GOOGLE_ADS", "1", "2", **kwargs)


def test_build_destination_unknown_account_type():
    with pytest.raises(ValueError, match="Unknown account type"):
        build_destination("MYSPACE", "1", "2")


def test_chunks():
    assert list(chunks([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]
    assert list(chunks([], 3)) == []
    with pytest.raises(ValueError):
        list(chunks([1], 0))


def test_audience_members_requests_are_batched():
    destination = build_destination("GOOGLE_ADS", "1", "audience-9")
    members = [{"userData": {"userIdentifiers": [{"emailAddress": str(i)}]}} for i in range(5)]

    requests = build_audience_members_requests(destination, members, max_per_request=2)

    assert [len(r["audienceMembers"]) for r in requests] == [2, 2, 1]
    first = requests[0]
    assert first["destinations"] == [destination]
    assert first["validateOnly"] is True
    assert first["encoding"] == "HEX"
    assert first["consent"] == {
        "adUserData": "CONSENT_GRANTED",
        "adPersonalization": "CONSENT_GRANTED",
    }
    assert first["termsOfService"] == {"customerMatchTermsOfServiceStatus": "ACCEPTED"}


def test_audience_members_requests_use_config_limit():
    destination = build_destination("GOOGLE_ADS", "1", "2")
    members = [{"userData": {}}] * 7
    config = FormatterConfig(max_audience_members_per_request=3)
    requests = build_audience_members_requests(
        destination, members, validate_only=False, encoding="base64", config=config
    )
    assert [len(r["audienceMembers"]) for r in requests] == [3, 3, 1]
    assert requests[0]["validateOnly"] is False
    assert requests[0]["encoding"] == "BASE64"


def test_default_request_limits():
    destination = build_destination("GOOGLE_ADS", "1", "2")
    assert len(build_audience_members_requests(destination, [{}] * 10_001)) == 2
    assert len(build_events_requests(destination, [{}] * 2_000)) == 1
    assert len(build_events_requests(destination, [{}] * 2_001)) == 2


def test_events_requests_have_no_terms_of_service():
    destination = build_destination("GOOGLE_ADS", "1", "conversion-action")
    events = build_events([{"timestamp": "2025-06-10T14:30:00Z", "transactionId": "A"}])
    (request,) = build_events_requests(destination, events)
    assert request["events"] == events
    assert "termsOfService" not in request
    assert build_events_requests(destination, []) == []
