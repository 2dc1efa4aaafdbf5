"""
Candidate phone number detection in raw OCR text.

Two phases run over the same text:

1. every maximal run of 7-15 digits is validated as-is;
2. every pattern of the numbering scheme is applied in order, and each match
   is cleaned and validated.

Both phases feed one insertion-ordered map keyed by the normalized
subscriber number, so a number seen in several formats is reported once, in
the position of its first sighting.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional

from .records import PhoneMatch, RawCandidate
from .schemes import NumberingScheme, clean_phone_number, get_scheme
from ..config import CONFIG

logger = logging.getLogger(__name__)

DIGIT_RUN_PATTERN = 'digit_run'

_DIGIT_RUN_RE = re.compile(
    rf'(?<!\d)\d{{{CONFIG.min_digit_run},{CONFIG.max_digit_run}}}(?!\d)',
    re.ASCII,
)


def find_digit_runs(text: str) -> List[RawCandidate]:
    """Maximal digit runs whose length is within the configured bounds."""
    if not text:
        return []
    return [
        RawCandidate(text=m.group(0), start=m.start(), pattern=DIGIT_RUN_PATTERN)
        for m in _DIGIT_RUN_RE.finditer(text)
    ]


def try_candidate(candidate: RawCandidate, scheme: NumberingScheme) -> Optional[PhoneMatch]:
    """Clean and validate a candidate; None if the scheme rejects it."""
    cleaned = clean_phone_number(candidate.text)
    if not scheme.is_valid(cleaned):
        logger.debug("  [%s] rejected %r", candidate.pattern, candidate.text)
        return None
    return PhoneMatch(candidate=candidate, number=scheme.describe(cleaned))


def _collect(candidates: Iterable[RawCandidate], scheme: NumberingScheme,
             found: Dict[str, PhoneMatch]) -> int:
    """Validate candidates into ``found``; return how many new numbers were added."""
    added = 0
    for candidate in candidates:
        match = try_candidate(candidate, scheme)
        if match is None:
            continue
        key = match.number.cleaned
        if key in found:
            continue
        found[key] = match
        added += 1
        logger.debug("  [%s] accepted %r -> %s", candidate.pattern, candidate.text, key)
    return added


def find_phone_matches(text: str, scheme: Optional[NumberingScheme] = None) -> List[PhoneMatch]:
    """
    Surface every validated phone number in ``text``.

    Args:
        text: Raw OCR text.
        scheme: Numbering scheme to validate against (defaults to the
            configured region).

    Returns:
        Distinct matches in first-sighting order.  Every entry satisfies
        ``scheme.is_valid``.
    """
    if not text:
        return []
    if scheme is None:
        scheme = get_scheme()

    found: Dict[str, PhoneMatch] = {}

    added = _collect(find_digit_runs(text), scheme, found)
    logger.debug("Digit-run scan: %d numbers", added)

    for pattern in scheme.patterns:
        added = _collect(pattern.find_candidates(text), scheme, found)
        if added:
            logger.debug("Pattern %s: %d new numbers", pattern.name, added)

    return list(found.values())
