"""
userdata — normalization and hashing of user data for ad data ingestion.
"""

__version__ = "0.1.0"
__author__ = "userdata"

from userdata.core.config import FormatterConfig, DEFAULT_CONFIG
from userdata.core.encoding import Encoding
from userdata.core.errors import UserDataError, NullInputError, InvalidFormatError
from userdata.formatting.formatter import UserDataFormatter
from userdata.formatting.normalizer import FieldType

__all__ = [
    "UserDataFormatter",
    "FieldType",
    "Encoding",
    "FormatterConfig",
    "DEFAULT_CONFIG",
    "UserDataError",
    "NullInputError",
    "InvalidFormatError",
    "__version__",
]
