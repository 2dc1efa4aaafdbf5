"""
Phone number cleaning, validation and formatting.

``clean_phone_number`` is scheme independent.  Everything that depends on a
country's numbering plan (accepted lengths and prefixes, display format,
country code, candidate patterns) sits behind a ``NumberingScheme`` so new
regions can be added without touching the orchestrator.
"""

import logging
import re
from typing import Dict, Optional, Tuple

from .records import NormalizedNumber, PhonePattern
from ..config import CONFIG
from ..errors import UnknownSchemeError

logger = logging.getLogger(__name__)

# ASCII digits only; other scripts' digits are not part of a phone number.
_NON_PHONE_CHARS = re.compile(r'[^\d+]', re.ASCII)
_DIGITS_WITH_PLUS = re.compile(r'^\+?\d+$', re.ASCII)


def clean_phone_number(raw: str) -> str:
    """
    Strip everything except digits and a single leading '+'.

    Total and idempotent: any string (including empty) is accepted, and
    cleaning an already-cleaned string returns it unchanged.
    """
    if not raw:
        return ""
    kept = _NON_PHONE_CHARS.sub('', raw)
    digits = kept.replace('+', '')
    if kept.startswith('+'):
        return '+' + digits
    return digits


class NumberingScheme:
    """Rules for one region's phone numbers.

    Subclasses set ``region``/``calling_code``/``patterns`` and implement
    ``is_valid``, ``format`` and ``normalize``.
    """

    region: str = ""
    calling_code: str = ""
    patterns: Tuple[PhonePattern, ...] = ()

    def is_valid(self, raw: str) -> bool:
        raise NotImplementedError

    def format(self, raw: str) -> str:
        raise NotImplementedError

    def normalize(self, raw: str) -> str:
        raise NotImplementedError

    def country_code(self, raw: str) -> str:
        """Calling code for a valid number; empty for anything else."""
        return self.calling_code if self.is_valid(raw) else ""

    def describe(self, raw: str) -> NormalizedNumber:
        """Clean, normalize and format ``raw`` in one step."""
        return NormalizedNumber(
            cleaned=self.normalize(raw),
            formatted=self.format(raw),
            country_code=self.country_code(raw),
            is_valid=self.is_valid(raw),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(region={self.region!r})"


# ============================================================================
# India (+91)
# ============================================================================

# Separators allowed between digit groups.  Never a line break: association
# relies on each match sitting on a single OCR line.
_SEP = r'[-. \t]?'

# Ordered and deliberately overlapping.  Anything a pattern lets through that
# is not a real number is dropped by validation afterwards.
INDIA_PATTERNS = (
    # +91 followed by 10-digit mobile
    PhonePattern.compile('intl_mobile', rf'(?<!\d)\+91{_SEP}[6-9]\d{{9}}(?!\d)'),
    # +91 98765 43210
    PhonePattern.compile('intl_mobile_grouped', rf'(?<!\d)\+91{_SEP}[6-9]\d{{4}}{_SEP}\d{{5}}(?!\d)'),
    # +91 followed by trunk 0 and 10-digit mobile
    PhonePattern.compile('intl_trunk_mobile', rf'(?<!\d)\+91{_SEP}0[6-9]\d{{9}}(?!\d)'),
    # 0 followed by 10-digit mobile
    PhonePattern.compile('trunk_mobile', r'(?<![\d+])0[6-9]\d{9}(?!\d)'),
    # 10-digit mobile without prefix
    PhonePattern.compile('bare_mobile', r'\b[6-9]\d{9}\b'),
    # Landline: 0, area code and subscriber number
    PhonePattern.compile('trunk_landline', r'(?<![\d+])0[1-9]\d{9}(?!\d)'),
    # Generic digit runs
    PhonePattern.compile('generic_10', r'\b\d{10}\b'),
    PhonePattern.compile('generic_trunk', r'\b0\d{9,10}\b'),
    PhonePattern.compile('generic_10_11', r'\b\d{10,11}\b'),
    PhonePattern.compile('loose_mobile', r'\b[6-9]\d{8,9}\b'),
    PhonePattern.compile('loose_trunk_mobile', r'\b0[6-9]\d{8,9}\b'),
    # Punctuation/space separated groups
    PhonePattern.compile('grouped_3_4', rf'\b\d{{3,4}}{_SEP}\d{{3,4}}{_SEP}\d{{3,4}}\b'),
    PhonePattern.compile('grouped_5_5', rf'\b\d{{5}}{_SEP}\d{{5}}\b'),
    PhonePattern.compile('grouped_4_3_3', rf'\b\d{{4}}{_SEP}\d{{3}}{_SEP}\d{{3}}\b'),
)

_MOBILE_LEAD = re.compile(r'^[6-9]')
_TRUNK_MOBILE_LEAD = re.compile(r'^0[6-9]')
_TRUNK_LEAD = re.compile(r'^0[1-9]')


class IndianNumberingScheme(NumberingScheme):
    """
    Indian numbers: 10-digit mobiles starting 6-9, optionally behind the
    trunk prefix 0 or the international prefix +91, and 0-prefixed 11-digit
    landlines.
    """

    region = "IN"
    calling_code = "91"
    patterns = INDIA_PATTERNS

    _INTL_PREFIX = "+91"

    def is_valid(self, raw: str) -> bool:
        cleaned = clean_phone_number(raw)

        if not _DIGITS_WITH_PLUS.match(cleaned):
            return False

        if cleaned.startswith(self._INTL_PREFIX):
            number = cleaned[len(self._INTL_PREFIX):]
            return ((len(number) == 10 and bool(_MOBILE_LEAD.match(number))) or
                    (len(number) == 11 and bool(_TRUNK_MOBILE_LEAD.match(number))))

        if len(cleaned) == 10 and _MOBILE_LEAD.match(cleaned):
            return True

        # Covers both 0[6-9] mobiles and 0[1-5] landlines
        if len(cleaned) == 11 and _TRUNK_LEAD.match(cleaned):
            return True

        return False

    def format(self, raw: str) -> str:
        """Render as ``+91 XXXXX XXXXX``; unrecognized shapes come back cleaned."""
        cleaned = clean_phone_number(raw)

        if cleaned.startswith(self._INTL_PREFIX):
            number = cleaned[len(self._INTL_PREFIX):]
            if len(number) == 10:
                return self._group(number)
            if len(number) == 11 and number.startswith('0'):
                return self._group(number[1:])

        if len(cleaned) == 11 and cleaned.startswith('0'):
            return self._group(cleaned[1:])

        if len(cleaned) == 10 and _MOBILE_LEAD.match(cleaned):
            return self._group(cleaned)

        return cleaned

    def normalize(self, raw: str) -> str:
        """Strip +91 and then the trunk 0, leaving the bare subscriber number."""
        cleaned = clean_phone_number(raw)
        if cleaned.startswith(self._INTL_PREFIX):
            number = cleaned[len(self._INTL_PREFIX):]
            if number.startswith('0'):
                number = number[1:]
            return number
        if cleaned.startswith('0') and len(cleaned) == 11:
            return cleaned[1:]
        return cleaned

    def _group(self, number: str) -> str:
        return f"{self._INTL_PREFIX} {number[:5]} {number[5:]}"


# ============================================================================
# Registry
# ============================================================================

SCHEMES: Dict[str, NumberingScheme] = {
    IndianNumberingScheme.region: IndianNumberingScheme(),
}


def register_scheme(scheme: NumberingScheme) -> None:
    """Make ``scheme`` available to ``get_scheme`` under its region code."""
    if not scheme.region:
        raise ValueError("Numbering scheme must define a region code")
    if scheme.region in SCHEMES:
        logger.warning("Replacing numbering scheme for region %s", scheme.region)
    SCHEMES[scheme.region] = scheme


def get_scheme(region: Optional[str] = None) -> NumberingScheme:
    """Look up a scheme by region code (defaults to CONFIG.default_scheme)."""
    key = (region or CONFIG.default_scheme).upper()
    try:
        return SCHEMES[key]
    except KeyError:
        raise UnknownSchemeError(
            f"No numbering scheme registered for region {key!r} "
            f"(available: {', '.join(sorted(SCHEMES))})"
        ) from None
