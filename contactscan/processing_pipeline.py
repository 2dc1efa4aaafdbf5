import os
import logging
from typing import Any, Callable, Dict, List, Optional

from langdetect import detect, LangDetectException

from contactscan.config import CONFIG
from contactscan.errors import TextExtractionError
from contactscan.extraction import (
    ExtractedContact,
    NumberingScheme,
    extract_contacts_with_progress,
    get_scheme,
)
from contactscan.models.recognizer import ScreenshotRecognizer
from contactscan.utils import (
    bbox_to_position,
    empty_position,
    union_bbox,
    load_image,
    preprocess_screenshot,
    rows_to_text,
)

logger = logging.getLogger(__name__)


class _MonotonicProgress:
    """Forwards only increasing percentages to the caller's callback."""

    def __init__(self, callback: Optional[Callable[[int], None]]):
        self.callback = callback
        self.last = -1

    def __call__(self, percent: int) -> None:
        if self.callback is None or percent <= self.last:
            return
        self.last = percent
        self.callback(percent)

    def scaled(self, floor: int, ceiling: int) -> Callable[[int], None]:
        """Callback mapping 0-100 onto ``[floor, ceiling]``."""
        def report(percent: int) -> None:
            self(floor + round((ceiling - floor) * percent / 100))
        return report


class ScreenshotProcessor:
    """OCR a screenshot and extract phone contacts from the recognized text."""

    def __init__(self, recognizer: Optional[ScreenshotRecognizer] = None,
                 scheme: Optional[NumberingScheme] = None):
        self.scheme = scheme or get_scheme()
        if recognizer is None:
            logger.info("Initializing OCR models...")
            recognizer = ScreenshotRecognizer()
        self.recognizer = recognizer

    def detect_language(self, text: str) -> str:
        """Detect language of text, defaulting to English."""
        try:
            if text and len(text.strip()) > 20:
                return detect(text)
        except LangDetectException:
            pass
        return "en"

    def process_screenshot(self, file_path: str,
                           on_progress: Optional[Callable[[int], None]] = None) -> Dict[str, Any]:
        """
        Run OCR and contact extraction on one screenshot.

        Args:
            file_path: Path to an image file.
            on_progress: Optional callback receiving increasing percentages.
                OCR progress is mapped into the 10-50 band; extraction then
                reports 75 and 100.

        Returns:
            Dict with ``filename``, ``text``, ``language``, ``lines`` and
            ``contacts`` (each contact carries a ``position`` on the image).

        Raises:
            TextExtractionError: If the image cannot be read or OCR fails.
                A screenshot without phone numbers is not an error; it
                yields an empty ``contacts`` list.
        """
        progress = _MonotonicProgress(on_progress)

        image = load_image(file_path)
        if image is None:
            raise TextExtractionError("image could not be loaded", path=file_path)

        image = preprocess_screenshot(image)

        try:
            lines = self.recognizer.recognize_lines(
                image,
                on_progress=progress.scaled(CONFIG.ocr_progress_floor, CONFIG.ocr_progress_ceiling),
            )
        except TextExtractionError as e:
            if e.path is None:
                e.path = file_path
            raise

        text = rows_to_text(lines)
        logger.info("  Recognized %d chars in %d lines", len(text), len(lines))

        contacts = extract_contacts_with_progress(text, progress, scheme=self.scheme)

        return {
            "filename": os.path.basename(file_path),
            "text": text,
            "language": self.detect_language(text),
            "lines": lines,
            "contacts": [self._contact_to_dict(contact, lines) for contact in contacts],
        }

    @staticmethod
    def _contact_to_dict(contact: ExtractedContact, lines: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Serialize a contact, locating it on the first OCR line that contains its number.

        When Surya split the number across several boxes of one row, the row
        text (joined as in ``rows_to_text``) is searched instead and the
        position covers the boxes whose text is part of the number.
        """
        record = contact.to_dict()
        record["position"] = empty_position()
        source = contact.source_text
        if not source:
            return record

        for line in lines:
            if source in (line.get("content") or ""):
                record["position"] = bbox_to_position(line.get("bbox"))
                return record

        rows: Dict[Any, List[Dict[str, Any]]] = {}
        for line in lines:
            if (line.get("content") or "").strip():
                rows.setdefault(line.get("row_id"), []).append(line)

        for row in rows.values():
            if source not in rows_to_text(row):
                continue
            parts = [line for line in row if line["content"].strip() in source] or row
            record["position"] = bbox_to_position(union_bbox([line.get("bbox") for line in parts]))
            break
        return record
