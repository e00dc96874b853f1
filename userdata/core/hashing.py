"""
core/hashing.py
---------------
SHA-256 hashing of normalized user data.

A new ``hashlib.sha256`` object is created for every call, so nothing is
shared between calls and the functions are safe to use from any thread.
"""

import hashlib
from typing import Union

from userdata.core.encoding import Encoding, encode
from userdata.core.errors import InvalidFormatError, NullInputError


def hash_string(value: str) -> bytes:
    """
    Compute the SHA-256 digest of a string's UTF-8 bytes.

    Args:
        value: A normalized string.  Must contain at least one
               non-whitespace character.

    Returns:
        The 32-byte raw digest.

    Raises:
        NullInputError:     If *value* is ``None``.
        InvalidFormatError: If *value* is not a string, or is empty or blank.
    """
    if value is None:
        raise NullInputError("string")
    if not isinstance(value, str):
        raise InvalidFormatError("string", "Expected a string")
    if not value.strip():
        raise InvalidFormatError("string", "Empty or blank string")
    return hashlib.sha256(value.encode("utf-8")).digest()


def hash_and_encode(value: str, encoding: Union[Encoding, str] = Encoding.HEX) -> str:
    """
    Hash *value* and render the digest with *encoding*.

    Returns:
        64 hex characters or 44 Base64 characters.
    """
    return encode(hash_string(value), encoding)
