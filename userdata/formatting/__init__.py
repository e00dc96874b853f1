"""formatting sub-package — field normalization and the UserDataFormatter facade."""

from userdata.formatting.normalizer import (
    FieldType,
    Normalizer,
    normalize,
    format_email_address,
    format_phone_number,
    format_given_name,
    format_family_name,
    format_region_code,
    format_postal_code,
)
from userdata.formatting.formatter import UserDataFormatter, get_default_formatter, process

__all__ = [
    "FieldType",
    "Normalizer",
    "UserDataFormatter",
    "get_default_formatter",
    "normalize",
    "process",
    "format_email_address",
    "format_phone_number",
    "format_given_name",
    "format_family_name",
    "format_region_code",
    "format_postal_code",
]
