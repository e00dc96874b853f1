"""
cli.py
------
Command-line interface for the userdata toolkit.

Entry point: ``userdata``

Commands
--------
* ``format``   — normalize a single value.
* ``process``  — normalize, hash, and encode a single value.
* ``hash``     — hash and encode an already-normalized string.
* ``member``   — build an audience member (and optionally the full
  ``IngestAudienceMembersRequest`` body) from emails and phone numbers.

Error messages name the field and the failed rule; the input value itself is
never echoed back.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Optional, Tuple

import click

from userdata import __version__
from userdata.core.encoding import Encoding
from userdata.core.errors import UserDataError
from userdata.core.hashing import hash_and_encode
from userdata.formatting.formatter import UserDataFormatter
from userdata.formatting.normalizer import FieldType
from userdata.ingestion.members import build_audience_member
from userdata.ingestion.requests import (
    ACCOUNT_TYPES,
    build_audience_members_requests,
    build_destination,
)

_FIELD_CHOICES = [m.value for m in FieldType] + ["email", "phone"]
_ENCODING_CHOICES = [e.value for e in Encoding]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _fail(exc: UserDataError) -> None:
    """Report a validation failure on stderr and exit with status 1."""
    click.echo(click.style(f"✗  {exc}", fg="red"), err=True)
    sys.exit(1)


def _encoding_option(func):
    return click.option(
        "--encoding",
        type=click.Choice(_ENCODING_CHOICES, case_sensitive=False),
        default=Encoding.HEX.value, show_default=True,
        help="Encoding of the SHA-256 digest.",
    )(func)


def _field_argument(func):
    return click.argument(
        "field",
        type=click.Choice(_FIELD_CHOICES, case_sensitive=False),
    )(func)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.version_option(version=__version__, prog_name="userdata", message="%(prog)s %(version)s")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool):
    """userdata — normalize and hash user data for ad data ingestion."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


# ---------------------------------------------------------------------------
# Single-value commands
# ---------------------------------------------------------------------------

@cli.command("format")
@_field_argument
@click.argument("value")
def format_value(field: str, value: str):
    """
    Normalize VALUE as FIELD and print the result.

    \b
    FIELD  email_address, phone_number, given_name, family_name,
           region_code or postal_code (email/phone also accepted).
    """
    try:
        click.echo(UserDataFormatter().normalize(field, value))
    except UserDataError as exc:
        _fail(exc)


@cli.command("process")
@_field_argument
@click.argument("value")
@_encoding_option
def process_value(field: str, value: str, encoding: str):
    """
    Normalize, hash, and encode VALUE as FIELD.

    Region and postal codes are printed normalized but unhashed.
    """
    try:
        click.echo(UserDataFormatter().process(field, value, encoding))
    except UserDataError as exc:
        _fail(exc)


@cli.command("hash")
@click.argument("value")
@_encoding_option
def hash_value(value: str, encoding: str):
    """Hash an already-normalized VALUE with SHA-256 and encode the digest."""
    try:
        click.echo(hash_and_encode(value, encoding))
    except UserDataError as exc:
        _fail(exc)


# ---------------------------------------------------------------------------
# member command
# ---------------------------------------------------------------------------

@cli.command()
@click.option("--email", "emails", multiple=True, help="Email address (repeatable).")
@click.option("--phone", "phone_numbers", multiple=True, help="Phone number (repeatable).")
@_encoding_option
@click.option(
    "--operating-account-type",
    type=click.Choice(ACCOUNT_TYPES, case_sensitive=False),
    help="Account type of the operating account.",
)
@click.option("--operating-account-id", help="ID of the operating account.")
@click.option("--audience-id", help="ID of the audience.")
@click.option(
    "--login-account-type",
    type=click.Choice(ACCOUNT_TYPES, case_sensitive=False),
    help="Account type of the login account.",
)
@click.option("--login-account-id", help="ID of the login account.")
@click.option(
    "--linked-account-type",
    type=click.Choice(ACCOUNT_TYPES, case_sensitive=False),
    help="Account type of the linked account.",
)
@click.option("--linked-account-id", help="ID of the linked account.")
@click.option(
    "--validate-only/--no-validate-only", default=True, show_default=True,
    help="Whether to enable validateOnly on the request.",
)
@click.option(
    "--output", "output_format",
    type=click.Choice(["pretty", "json"], case_sensitive=False),
    default="pretty", show_default=True,
    help="Output format: pretty (default) or json.",
)
def member(
    emails: Tuple[str, ...],
    phone_numbers: Tuple[str, ...],
    encoding: str,
    operating_account_type: Optional[str],
    operating_account_id: Optional[str],
    audience_id: Optional[str],
    login_account_type: Optional[str],
    login_account_id: Optional[str],
    linked_account_type: Optional[str],
    linked_account_id: Optional[str],
    validate_only: bool,
    output_format: str,
):
    """
    Build an audience member from email addresses and phone numbers.

    Invalid values are skipped.  When the operating account and audience are
    given, the full IngestAudienceMembersRequest body is printed instead.
    """
    destination_opts = (operating_account_type, operating_account_id, audience_id)
    with_destination = any(destination_opts)
    if with_destination and not all(destination_opts):
        raise click.UsageError(
            "--operating-account-type, --operating-account-id and --audience-id "
            "must be given together."
        )

    payload = build_audience_member(emails, phone_numbers, encoding=encoding)
    if payload is None:
        click.echo(
            click.style("✗  No valid email address or phone number.", fg="red"), err=True
        )
        sys.exit(1)

    if with_destination:
        try:
            destination = build_destination(
                operating_account_type,  # type: ignore[arg-type]
                operating_account_id,  # type: ignore[arg-type]
                audience_id,  # type: ignore[arg-type]
                login_account_type=login_account_type,
                login_account_id=login_account_id,
                linked_account_type=linked_account_type,
                linked_account_id=linked_account_id,
            )
        except ValueError as exc:
            raise click.UsageError(str(exc))
        payload = build_audience_members_requests(
            destination, [payload], validate_only=validate_only, encoding=encoding
        )[0]

    if output_format == "json":
        click.echo(json.dumps(payload, indent=2))
        return

    _print_member(payload, emails, phone_numbers, encoding)


def _print_member(payload: dict, emails, phone_numbers, encoding: str) -> None:
    """Render the member's identifiers in human-readable form."""
    w = 60
    divider = click.style("─" * w, fg="bright_black")

    if "audienceMembers" in payload:
        user_data = payload["audienceMembers"][0]["userData"]
    else:
        user_data = payload["userData"]
    identifiers = user_data["userIdentifiers"]

    click.echo(f"\n{divider}")
    click.echo(click.style("  AUDIENCE MEMBER", bold=True, fg="bright_white"))
    click.echo(divider)
    click.echo(f"  Encoding  : {Encoding.parse(encoding).api_name}")
    click.echo(
        f"  Kept      : {len(identifiers)} of {len(emails) + len(phone_numbers)} identifiers"
    )
    click.echo(divider)
    for identifier in identifiers:
        for key, value in identifier.items():
            click.echo(f"  {key:<13} {click.style(value, fg='cyan')}")

    if "destinations" in payload:
        dest = payload["destinations"][0]
        click.echo(divider)
        click.echo(
            f"  Operating : {dest['operatingAccount']['accountType']} "
            f"{dest['operatingAccount']['accountId']}"
        )
        click.echo(f"  Audience  : {dest['productDestinationId']}")
        click.echo(f"  Validate  : {payload['validateOnly']}")
    click.echo(f"{divider}\n")
