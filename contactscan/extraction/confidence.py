"""
Heuristic confidence score for an extracted phone number.
"""

import re

from .schemes import clean_phone_number
from ..config import CONFIG

_FULL_NUMBER_RE = re.compile(r'^\+?\d{10,15}$', re.ASCII)


def calculate_confidence(phone_number: str, context: str) -> float:
    """
    Score how much an extracted number looks like a real phone number.

    Starts from a base score and adds fixed bonuses for a plausible length,
    a clean digits-only form, and a telephony keyword anywhere in
    ``context``.  Pure function of its arguments.

    Returns:
        Score in [0.0, 1.0], rounded to three decimals.
    """
    confidence = CONFIG.confidence_base
    cleaned = clean_phone_number(phone_number)

    if CONFIG.confidence_min_length <= len(cleaned) <= CONFIG.confidence_max_length:
        confidence += CONFIG.confidence_length_bonus

    if _FULL_NUMBER_RE.match(cleaned):
        confidence += CONFIG.confidence_format_bonus

    context_lower = (context or "").lower()
    if any(keyword in context_lower for keyword in CONFIG.telephony_keywords):
        confidence += CONFIG.confidence_keyword_bonus

    return round(max(0.0, min(confidence, 1.0)), 3)
