"""core sub-package — configuration, errors, hashing, and encoding."""

from userdata.core.config import FormatterConfig, DEFAULT_CONFIG
from userdata.core.errors import UserDataError, NullInputError, InvalidFormatError
from userdata.core.encoding import Encoding, hex_encode, base64_encode, encode
from userdata.core.hashing import hash_string, hash_and_encode
