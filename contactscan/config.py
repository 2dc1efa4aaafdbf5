"""
Centralized configuration for the extraction pipeline and the OCR front end.

Values referenced by more than one module, or that directly control the
recall/precision tradeoff of extraction, live here.  Pattern tables and
stoplists stay next to the code that uses them.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ExtractionConfig:
    """Key thresholds controlling extraction behavior.

    Frozen dataclass; treat as read-only at runtime.  To experiment with
    different values, create a new instance and pass it through.
    """

    # ------------------------------------------------------------------
    # Pattern matching
    # ------------------------------------------------------------------
    # Maximal digit runs inside this range are validated directly before
    # the pattern battery runs.  A 20-digit run is never a phone number.
    min_digit_run: int = 7
    max_digit_run: int = 15

    # Region code of the numbering scheme used when the caller passes none.
    default_scheme: str = "IN"

    # ------------------------------------------------------------------
    # Confidence scoring
    # ------------------------------------------------------------------
    confidence_base: float = 0.5
    confidence_length_bonus: float = 0.2     # cleaned length within [10, 15]
    confidence_format_bonus: float = 0.2     # cleaned form is +?\d{10,15}
    confidence_keyword_bonus: float = 0.1    # telephony keyword anywhere in context
    confidence_min_length: int = 10
    confidence_max_length: int = 15
    telephony_keywords: Tuple[str, ...] = ("phone", "call", "contact", "mobile", "tel", "number")

    # ------------------------------------------------------------------
    # Association and context
    # ------------------------------------------------------------------
    # Lines searched on each side of the line holding the number.
    locality_radius: int = 2
    # Characters kept on each side of the match in the context snippet.
    context_radius: int = 50

    # ------------------------------------------------------------------
    # Progress milestones (percent)
    # ------------------------------------------------------------------
    progress_start: int = 10
    progress_text_ready: int = 50
    progress_matched: int = 75
    progress_done: int = 100

    # OCR progress is squeezed into this band when OCR and extraction are
    # reported through the same callback.
    ocr_progress_floor: int = 10
    ocr_progress_ceiling: int = 50

    # ------------------------------------------------------------------
    # OCR front end
    # ------------------------------------------------------------------
    text_confidence_threshold: float = 0.4   # Min Surya confidence to keep a line
    row_y_threshold: int = 15                # Pixels of vertical drift tolerated within a row


# Singleton used by all modules.  Import this, not ExtractionConfig.
CONFIG = ExtractionConfig()
