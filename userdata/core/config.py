"""
core/config.py
--------------
Centralized configuration for the userdata formatter and request builders.
"""

from dataclasses import dataclass, field
from typing import List

from userdata.core.encoding import Encoding


@dataclass
class FormatterConfig:
    """
    Configuration object for :class:`~userdata.formatting.formatter.UserDataFormatter`
    and the ingestion request builders.

    The defaults are the matching rules expected by the Data Manager API.
    Changing the rule tables changes every digest produced from them.

    Attributes:
        default_encoding: Encoding used when a caller does not choose one.
        gmail_domains: Domains whose email local part ignores periods.
        given_name_prefixes: Honorifics stripped from the start of given names
            (without the trailing period).
        family_name_suffixes: Generational/credential tokens stripped from the
            end of family names.
        max_audience_members_per_request: Batch size for audience member requests.
        max_events_per_request: Batch size for event requests.
    """

    default_encoding: str = "hex"

    gmail_domains: List[str] = field(default_factory=lambda: [
        "gmail.com",
        "googlemail.com",
    ])

    given_name_prefixes: List[str] = field(default_factory=lambda: [
        "mr", "mrs", "ms", "dr",
    ])

    family_name_suffixes: List[str] = field(default_factory=lambda: [
        "jr.", "sr.", "2nd", "3rd",
        "ii", "iii", "iv", "v", "vi",
        "cpa", "dc", "dds", "vm", "jd", "md", "phd",
    ])

    max_audience_members_per_request: int = 10_000
    max_events_per_request: int = 2_000

    def validate(self) -> None:
        """Validate configuration values are within acceptable ranges."""
        if self.default_encoding not in {e.value for e in Encoding}:
            raise ValueError(
                f"default_encoding must be one of 'hex' or 'base64', got {self.default_encoding!r}"
            )
        if not self.gmail_domains:
            raise ValueError("gmail_domains must not be empty.")
        if not self.given_name_prefixes or not self.family_name_suffixes:
            raise ValueError("Name prefix and suffix tables must not be empty.")
        if self.max_audience_members_per_request <= 0:
            raise ValueError("max_audience_members_per_request must be positive.")
        if self.max_events_per_request <= 0:
            raise ValueError("max_events_per_request must be positive.")


# Singleton default config — callers may override by passing their own instance.
DEFAULT_CONFIG = FormatterConfig()
