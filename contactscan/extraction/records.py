"""
Plain data records passed between extraction stages.

Every record is frozen; the pipeline builds new values instead of mutating.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator


@dataclass(frozen=True)
class PhonePattern:
    """One named entry of a numbering scheme's pattern battery."""

    name: str
    regex: "re.Pattern[str]"

    @classmethod
    def compile(cls, name: str, pattern: str) -> "PhonePattern":
        return cls(name=name, regex=re.compile(pattern, re.ASCII))

    def find_candidates(self, text: str) -> Iterator["RawCandidate"]:
        for match in self.regex.finditer(text):
            yield RawCandidate(text=match.group(0), start=match.start(), pattern=self.name)


@dataclass(frozen=True)
class RawCandidate:
    """A substring of OCR text that matched a digit-oriented pattern."""

    text: str
    start: int        # offset of ``text`` in the source string
    pattern: str      # name of the pattern (or digit-run scan) that surfaced it

    @property
    def end(self) -> int:
        return self.start + len(self.text)


@dataclass(frozen=True)
class NormalizedNumber:
    cleaned: str          # bare subscriber number, prefixes stripped
    formatted: str        # display form, e.g. "+91 98765 43210"
    country_code: str
    is_valid: bool


@dataclass(frozen=True)
class PhoneMatch:
    """A validated candidate together with its normalized form."""

    candidate: RawCandidate
    number: NormalizedNumber


@dataclass(frozen=True)
class ExtractedContact:
    """Final output unit of the extraction pipeline.

    ``name`` and ``email`` are empty strings when nothing plausible was found
    near the number.  ``source_text`` is the substring of the OCR text the
    number was matched from, kept so callers can map the contact back onto
    OCR line geometry.
    """

    phone_number: str
    formatted_number: str
    country_code: str
    is_valid: bool
    confidence: float
    name: str = ""
    email: str = ""
    context: str = ""
    source_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Render with the field names the storage/export layer expects."""
        return {
            "phoneNumber": self.phone_number,
            "formattedNumber": self.formatted_number,
            "countryCode": self.country_code,
            "isValid": self.is_valid,
            "confidence": self.confidence,
            "name": self.name,
            "email": self.email,
            "context": self.context,
            "sourceText": self.source_text,
        }
