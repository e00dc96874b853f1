"""
core/encoding.py
----------------
Binary-to-text encodings for SHA-256 digests.

Hex output is lowercase; hex values compare case-insensitively, so callers
must not rely on the letter case.  Base64 output uses the standard RFC 4648
alphabet with ``=`` padding and is case-sensitive.
"""

from __future__ import annotations

import base64
from enum import Enum
from typing import Union

from userdata.core.errors import InvalidFormatError, NullInputError


class Encoding(str, Enum):
    """Encoding selector for processed (hashed) values."""

    HEX = "hex"
    BASE64 = "base64"

    @property
    def api_name(self) -> str:
        """Name of the encoding as spelled in ingestion requests (``HEX``)."""
        return self.name

    @classmethod
    def parse(cls, value: Union["Encoding", str, None]) -> "Encoding":
        """
        Coerce *value* into an :class:`Encoding`.

        Accepts an :class:`Encoding` member or its name/value as a
        case-insensitive string (``"hex"``, ``"BASE64"``).

        Raises:
            NullInputError:     If *value* is ``None``.
            InvalidFormatError: For any other value.
        """
        if value is None:
            raise NullInputError("encoding")
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidFormatError("encoding", "Invalid encoding")


def _check_bytes(data) -> bytes:
    if data is None:
        raise NullInputError("byte array")
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidFormatError("byte array", "Expected a bytes-like object")
    data = bytes(data)
    if not data:
        raise InvalidFormatError("byte array", "Empty byte array")
    return data


def hex_encode(data: bytes) -> str:
    """
    Encode *data* as hexadecimal, two characters per byte.

    Raises:
        NullInputError:     If *data* is ``None``.
        InvalidFormatError: If *data* is empty or not bytes-like.
    """
    return _check_bytes(data).hex()


def base64_encode(data: bytes) -> str:
    """
    Encode *data* as padded standard Base64.

    Raises:
        NullInputError:     If *data* is ``None``.
        InvalidFormatError: If *data* is empty or not bytes-like.
    """
    return base64.b64encode(_check_bytes(data)).decode("ascii")


def encode(data: bytes, encoding: Union[Encoding, str]) -> str:
    """Encode *data* with the selected :class:`Encoding`."""
    selected = Encoding.parse(encoding)
    if selected is Encoding.HEX:
        return hex_encode(data)
    return base64_encode(data)
