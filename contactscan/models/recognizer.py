import logging
from typing import Any, Callable, Dict, List, Optional

from PIL import Image

from contactscan.config import CONFIG
from contactscan.errors import TextExtractionError
from contactscan.utils.text import cluster_text_rows, rows_to_text

logger = logging.getLogger(__name__)


class ScreenshotRecognizer:
    """Surya line detection + recognition for screenshots.

    Predictors are loaded on construction unless passed in, which lets
    callers share one loaded model set (and lets tests inject fakes).
    """

    def __init__(self, det_predictor=None, rec_predictor=None,
                 min_confidence: Optional[float] = None):
        self.min_confidence = (CONFIG.text_confidence_threshold
                               if min_confidence is None else min_confidence)
        if det_predictor is None or rec_predictor is None:
            det_predictor, rec_predictor = self._load_predictors()
        self.det_predictor = det_predictor
        self.rec_predictor = rec_predictor

    @staticmethod
    def _load_predictors():
        # Deferred so the extraction core never pays for importing torch.
        from surya.detection import DetectionPredictor
        from surya.recognition import FoundationPredictor, RecognitionPredictor

        logger.info("Loading Surya predictors...")
        det_predictor = DetectionPredictor()
        rec_predictor = RecognitionPredictor(FoundationPredictor())
        return det_predictor, rec_predictor

    def recognize_lines(self, image: Image.Image,
                        on_progress: Optional[Callable[[int], None]] = None) -> List[Dict[str, Any]]:
        """
        Run OCR and return text lines in reading order.

        Args:
            image: Preprocessed screenshot.
            on_progress: Optional callback receiving 0, 90 and 100.

        Returns:
            List of ``{"content", "bbox", "confidence", "row_id"}`` dicts for
            lines at or above ``min_confidence``.

        Raises:
            TextExtractionError: If the image is missing or Surya fails.
        """
        if image is None:
            raise TextExtractionError("no image to recognize")

        self._notify(on_progress, 0)
        if image.mode != "RGB":
            image = image.convert("RGB")

        try:
            predictions = self.rec_predictor([image], ['ocr_with_boxes'], self.det_predictor)
            ocr_result = predictions[0]
        except (RuntimeError, ValueError, OSError, IndexError) as e:
            logger.error("Surya OCR failed: %s", e)
            raise TextExtractionError(str(e)) from e
        self._notify(on_progress, 90)

        elements: List[Dict[str, Any]] = []
        dropped = 0
        for line in ocr_result.text_lines:
            if line.confidence is not None and line.confidence < self.min_confidence:
                dropped += 1
                continue
            elements.append({
                "type": "text",
                "content": line.text,
                "bbox": [float(v) for v in line.bbox],
                "confidence": line.confidence,
            })
        if dropped:
            logger.debug("  Dropped %d low-confidence lines", dropped)

        ordered = cluster_text_rows(elements)
        logger.info("  OCR produced %d lines", len(ordered))
        self._notify(on_progress, 100)
        return ordered

    def recognize(self, image: Image.Image,
                  on_progress: Optional[Callable[[int], None]] = None) -> str:
        """Run OCR and return the recognized text, one screen row per line."""
        return rows_to_text(self.recognize_lines(image, on_progress=on_progress))

    @staticmethod
    def _notify(on_progress, percent: int) -> None:
        if on_progress is None:
            return
        try:
            on_progress(percent)
        except Exception as e:
            logger.warning("OCR progress callback failed at %d%%: %s", percent, e)
