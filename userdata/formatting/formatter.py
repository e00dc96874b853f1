"""
formatting/formatter.py
-----------------------
:class:`UserDataFormatter` — normalization, hashing, and encoding of user
data in one object.

Methods fall into two groups:

* ``process_*`` convenience methods that normalize, hash, and encode a
  specific kind of value in one call.
* Fine-grained steps: ``format_*``, :meth:`UserDataFormatter.hash_string`,
  :meth:`UserDataFormatter.hex_encode`, :meth:`UserDataFormatter.base64_encode`.

The two are interchangeable::

    formatter = UserDataFormatter()

    # Convenience method.
    a = formatter.process_email_address(email, Encoding.HEX)

    # Chain of fine-grained steps.
    b = formatter.hex_encode(formatter.hash_string(formatter.format_email_address(email)))

Every method raises a :class:`~userdata.core.errors.UserDataError` subclass on
invalid input; messages never include the input value.
"""

from __future__ import annotations

from typing import Optional, Union

from userdata.core import encoding as _encoding
from userdata.core.config import DEFAULT_CONFIG, FormatterConfig
from userdata.core.encoding import Encoding
from userdata.core.hashing import hash_string
from userdata.formatting.normalizer import FieldType, Normalizer

EncodingLike = Union[Encoding, str]


class UserDataFormatter:
    """
    Formats, hashes, and encodes user data for ingestion.

    Args:
        config: A :class:`~userdata.core.config.FormatterConfig` instance.
                Uses :data:`~userdata.core.config.DEFAULT_CONFIG` if omitted.

    The formatter keeps no per-call state (each digest uses a fresh SHA-256
    object), so a single instance can be shared freely between threads.
    """

    def __init__(self, config: Optional[FormatterConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self.config.validate()
        self.normalizer = Normalizer(self.config)
        self.default_encoding = Encoding.parse(self.config.default_encoding)

    # ------------------------------------------------------------------
    # Generic entry points
    # ------------------------------------------------------------------

    def normalize(self, field_type: Union[FieldType, str], value: str) -> str:
        """Normalize *value* as *field_type*."""
        return self.normalizer.normalize(field_type, value)

    def process(
        self,
        field_type: Union[FieldType, str],
        value: str,
        encoding: Optional[EncodingLike] = None,
    ) -> str:
        """
        Normalize *value* and, for hashed field types, hash and encode it.

        Region and postal codes are never hashed; for those the normalized
        value is returned and *encoding* is ignored.

        Args:
            field_type: Kind of value being processed.
            value:      Raw user-supplied value.
            encoding:   :class:`Encoding` for the digest.  Defaults to
                        ``config.default_encoding``.

        Returns:
            The encoded digest, or the normalized value for unhashed types.
        """
        field = FieldType.parse(field_type)
        normalized = self.normalizer.normalize(field, value)
        if not field.hashed:
            return normalized
        return self._hash_and_encode(normalized, encoding)

    # ------------------------------------------------------------------
    # Convenience methods
    # ------------------------------------------------------------------

    def process_email_address(self, value: str, encoding: Optional[EncodingLike] = None) -> str:
        return self.process(FieldType.EMAIL_ADDRESS, value, encoding)

    def process_phone_number(self, value: str, encoding: Optional[EncodingLike] = None) -> str:
        return self.process(FieldType.PHONE_NUMBER, value, encoding)

    def process_given_name(self, value: str, encoding: Optional[EncodingLike] = None) -> str:
        return self.process(FieldType.GIVEN_NAME, value, encoding)

    def process_family_name(self, value: str, encoding: Optional[EncodingLike] = None) -> str:
        return self.process(FieldType.FAMILY_NAME, value, encoding)

    def process_region_code(self, value: str) -> str:
        return self.process(FieldType.REGION_CODE, value)

    def process_postal_code(self, value: str) -> str:
        return self.process(FieldType.POSTAL_CODE, value)

    # ------------------------------------------------------------------
    # Fine-grained steps
    # ------------------------------------------------------------------

    def format_email_address(self, value: str) -> str:
        return self.normalizer.format_email_address(value)

    def format_phone_number(self, value: str) -> str:
        return self.normalizer.format_phone_number(value)

    def format_given_name(self, value: str) -> str:
        return self.normalizer.format_given_name(value)

    def format_family_name(self, value: str) -> str:
        return self.normalizer.format_family_name(value)

    def format_region_code(self, value: str) -> str:
        return self.normalizer.format_region_code(value)

    def format_postal_code(self, value: str) -> str:
        return self.normalizer.format_postal_code(value)

    @staticmethod
    def hash_string(value: str) -> bytes:
        return hash_string(value)

    @staticmethod
    def hex_encode(data: bytes) -> str:
        return _encoding.hex_encode(data)

    @staticmethod
    def base64_encode(data: bytes) -> str:
        return _encoding.base64_encode(data)

    def encode(self, data: bytes, encoding: Optional[EncodingLike] = None) -> str:
        """Encode *data* with *encoding* (or the configured default)."""
        return _encoding.encode(data, self._resolve_encoding(encoding))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve_encoding(self, encoding: Optional[EncodingLike]) -> Encoding:
        if encoding is None:
            return self.default_encoding
        return Encoding.parse(encoding)

    def _hash_and_encode(self, normalized: str, encoding: Optional[EncodingLike]) -> str:
        selected = self._resolve_encoding(encoding)
        return _encoding.encode(hash_string(normalized), selected)

    def __repr__(self) -> str:
        return f"UserDataFormatter(default_encoding={self.default_encoding.value!r})"


_DEFAULT_FORMATTER: Optional[UserDataFormatter] = None


def get_default_formatter() -> UserDataFormatter:
    """Return the shared formatter built from :data:`DEFAULT_CONFIG`."""
    global _DEFAULT_FORMATTER
    if _DEFAULT_FORMATTER is None:
        _DEFAULT_FORMATTER = UserDataFormatter()
    return _DEFAULT_FORMATTER


def process(
    field_type: Union[FieldType, str],
    value: str,
    encoding: Optional[EncodingLike] = None,
) -> str:
    """Normalize, hash, and encode *value* with the default formatter."""
    return get_default_formatter().process(field_type, value, encoding)
