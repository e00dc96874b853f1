"""
formatting/normalizer.py
------------------------
Per-field normalization of user data prior to hashing.

Each ``format_*`` method trims and canonicalizes one kind of value and raises
as soon as a rule fails:

* :class:`~userdata.core.errors.NullInputError` when the value is ``None``.
* :class:`~userdata.core.errors.InvalidFormatError` when the value is present
  but unusable (blank, malformed, or empty once prefixes/suffixes/periods
  have been removed).

Nothing here logs, hashes, or keeps state between calls.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Callable, Dict, Optional, Union

from userdata.core.config import DEFAULT_CONFIG, FormatterConfig
from userdata.core.errors import InvalidFormatError, NullInputError

_WHITESPACE = re.compile(r"\s")
_NON_DIGIT = re.compile(r"\D", re.ASCII)
_REGION_CODE = re.compile(r"[A-Za-z]{2}", re.ASCII)


class FieldType(str, Enum):
    """Kinds of user data understood by the formatter."""

    EMAIL_ADDRESS = "email_address"
    PHONE_NUMBER = "phone_number"
    GIVEN_NAME = "given_name"
    FAMILY_NAME = "family_name"
    REGION_CODE = "region_code"
    POSTAL_CODE = "postal_code"

    @property
    def label(self) -> str:
        """Name used in error messages, e.g. ``"email address"``."""
        return self.value.replace("_", " ")

    @property
    def hashed(self) -> bool:
        """Whether processed values of this type are hashed and encoded."""
        return self not in (FieldType.REGION_CODE, FieldType.POSTAL_CODE)

    @classmethod
    def parse(cls, value: Union["FieldType", str, None]) -> "FieldType":
        """
        Coerce *value* into a :class:`FieldType`.

        Accepts members, their values, or the short aliases ``email`` and
        ``phone``; matching ignores case and treats ``-`` like ``_``.
        """
        if value is None:
            raise NullInputError("field type")
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower().replace("-", "_")
            member = _FIELD_ALIASES.get(key)
            if member is not None:
                return member
        raise InvalidFormatError("field type", "Unknown field type")


_FIELD_ALIASES: Dict[str, FieldType] = {m.value: m for m in FieldType}
_FIELD_ALIASES.update({
    "email": FieldType.EMAIL_ADDRESS,
    "phone": FieldType.PHONE_NUMBER,
})


def _require_str(value, field: str) -> str:
    if value is None:
        raise NullInputError(field)
    if not isinstance(value, str):
        raise InvalidFormatError(field, "Expected a string")
    return value


def _trimmed(value, field: str) -> str:
    trimmed = _require_str(value, field).strip()
    if not trimmed:
        raise InvalidFormatError(field, f"Empty or blank {field}")
    return trimmed


class Normalizer:
    """
    Normalizes raw field values into the canonical forms used for matching.

    Args:
        config: A :class:`~userdata.core.config.FormatterConfig` instance.
                Uses :data:`~userdata.core.config.DEFAULT_CONFIG` if omitted.

    The honorific and suffix tables from *config* are compiled once; the
    instance is otherwise immutable and may be shared between threads.
    """

    def __init__(self, config: Optional[FormatterConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self._gmail_domains = frozenset(d.lower() for d in self.config.gmail_domains)
        prefixes = "|".join(re.escape(p) for p in self.config.given_name_prefixes)
        suffixes = "|".join(re.escape(s) for s in self.config.family_name_suffixes)
        # Honorific must be followed by a period and then whitespace or the end.
        self._given_name_prefix = re.compile(rf"^(?:{prefixes})\.(?:\s|$)")
        # The comma/whitespace separator is mandatory: "boardds" keeps its "dds".
        self._family_name_suffix = re.compile(rf"(?:,\s*|\s+)(?:{suffixes})\s?$")
        self._dispatch: Dict[FieldType, Callable[[str], str]] = {
            FieldType.EMAIL_ADDRESS: self.format_email_address,
            FieldType.PHONE_NUMBER: self.format_phone_number,
            FieldType.GIVEN_NAME: self.format_given_name,
            FieldType.FAMILY_NAME: self.format_family_name,
            FieldType.REGION_CODE: self.format_region_code,
            FieldType.POSTAL_CODE: self.format_postal_code,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def normalize(self, field_type: Union[FieldType, str], value: str) -> str:
        """Normalize *value* according to *field_type*."""
        return self._dispatch[FieldType.parse(field_type)](value)

    def format_email_address(self, value: str) -> str:
        """
        Return the email address lowercased, with Gmail periods removed.

        ``" Jane.Doe@GMail.com "`` becomes ``"janedoe@gmail.com"``; other
        domains keep their periods.

        Raises:
            InvalidFormatError: If blank, if whitespace remains inside the
                address, if it is not ``user@domain``, or if the user part is
                empty once periods are removed.
        """
        field = FieldType.EMAIL_ADDRESS.label
        email = _trimmed(value, field)
        if _WHITESPACE.search(email):
            raise InvalidFormatError(field, "Email contains intermediate whitespace")

        parts = email.lower().split("@")
        if len(parts) != 2:
            raise InvalidFormatError(field, "Email is not of the form user@domain")
        username, domain = parts
        if not username:
            raise InvalidFormatError(field, "Email address without the domain is empty")
        if not domain:
            raise InvalidFormatError(field, "Domain of email address is empty")

        if domain in self._gmail_domains:
            username = username.replace(".", "")
            if not username:
                raise InvalidFormatError(
                    field, "Email address without the domain is empty after normalization"
                )

        return f"{username}@{domain}"

    def format_phone_number(self, value: str) -> str:
        """
        Return ``+`` followed by the digits of the phone number.

        Country code and length are not validated.
        """
        field = FieldType.PHONE_NUMBER.label
        digits = _NON_DIGIT.sub("", _trimmed(value, field))
        if not digits:
            raise InvalidFormatError(field, "Phone number contains no digits")
        return f"+{digits}"

    def format_given_name(self, value: str) -> str:
        """
        Return the given name lowercased with one leading honorific removed.

        Only a single honorific at the very start is stripped, so
        ``"Mr. Dr. Alex"`` becomes ``"dr. alex"``.
        """
        field = FieldType.GIVEN_NAME.label
        name = _trimmed(value, field).lower()
        name = self._given_name_prefix.sub("", name, count=1).strip()
        if not name:
            raise InvalidFormatError(field, "Given name consists solely of a prefix")
        return name

    def format_family_name(self, value: str) -> str:
        """
        Return the family name lowercased with trailing suffixes removed.

        Suffixes are removed repeatedly, so ``"Quinn, Jr., DDS"`` becomes
        ``"quinn"``.
        """
        field = FieldType.FAMILY_NAME.label
        name = _trimmed(value, field).lower()
        match = self._family_name_suffix.search(name)
        while match:
            name = name[:match.start()].rstrip()
            match = self._family_name_suffix.search(name)
        if not name:
            raise InvalidFormatError(field, "Family name consists solely of a suffix")
        return name

    def format_region_code(self, value: str) -> str:
        """Return the region code as two uppercase letters (``"us"`` -> ``"US"``)."""
        field = FieldType.REGION_CODE.label
        # Checked before upper-casing: str.upper() maps "ß" to "SS".
        region = _trimmed(value, field)
        if len(region) != 2:
            raise InvalidFormatError(
                field, f"Region code length is {len(region)}, but length must be 2"
            )
        if not _REGION_CODE.fullmatch(region):
            raise InvalidFormatError(field, "Region code contains characters other than A-Z")
        return region.upper()

    def format_postal_code(self, value: str) -> str:
        """Return the postal code trimmed; its characters are left untouched."""
        return _trimmed(value, FieldType.POSTAL_CODE.label)


_DEFAULT_NORMALIZER = Normalizer()


def normalize(field_type: Union[FieldType, str], value: str) -> str:
    """Normalize *value* as *field_type* using the default rules."""
    return _DEFAULT_NORMALIZER.normalize(field_type, value)


def format_email_address(value: str) -> str:
    return _DEFAULT_NORMALIZER.format_email_address(value)


def format_phone_number(value: str) -> str:
    return _DEFAULT_NORMALIZER.format_phone_number(value)


def format_given_name(value: str) -> str:
    return _DEFAULT_NORMALIZER.format_given_name(value)


def format_family_name(value: str) -> str:
    return _DEFAULT_NORMALIZER.format_family_name(value)


def format_region_code(value: str) -> str:
    return _DEFAULT_NORMALIZER.format_region_code(value)


def format_postal_code(value: str) -> str:
    return _DEFAULT_NORMALIZER.format_postal_code(value)
