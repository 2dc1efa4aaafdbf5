"""
Tests for the screenshot OCR front end and the command line.

Surya is replaced by small fakes exposing the same ``text_lines`` shape, so
no models are downloaded.
Run with: pytest tests/test_processing_pipeline.py -v
"""

import json
import sys
from pathlib import Path

# Ensure project root is on sys.path for both standalone and pytest usage
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import pytest
from PIL import Image

import main
from contactscan import processing_pipeline
from contactscan.errors import TextExtractionError
from contactscan.models.recognizer import ScreenshotRecognizer
from contactscan.processing_pipeline import ScreenshotProcessor, _MonotonicProgress
from contactscan.utils.bbox import bbox_to_position, empty_position, position_to_bbox, union_bbox
from contactscan.utils.image import load_image, upscale_small_image
from contactscan.utils.text import cluster_text_rows, rows_to_text


class FakeTextLine:
    def __init__(self, text, bbox, confidence):
        self.text = text
        self.bbox = bbox
        self.confidence = confidence


class FakeOCRResult:
    def __init__(self, text_lines):
        self.text_lines = text_lines


class FakeRecPredictor:
    """Callable with the RecognitionPredictor signature used by the recognizer."""

    def __init__(self, lines=None, error=None):
        self.lines = lines or []
        self.error = error
        self.calls = []

    def __call__(self, images, tasks, det_predictor):
        self.calls.append((images, tasks, det_predictor))
        if self.error is not None:
            raise self.error
        return [FakeOCRResult(self.lines)]


CONTACT_CARD_LINES = [
    FakeTextLine("9876543210", [120, 52, 300, 70], 0.95),
    FakeTextLine("Priya Sharma", [10, 10, 200, 30], 0.9),
    FakeTextLine("Mobile:", [10, 50, 100, 70], 0.9),
    FakeTextLine("noise", [0, 100, 50, 120], 0.1),
]


def _recognizer(lines=None, error=None):
    return ScreenshotRecognizer(det_predictor=object(),
                                rec_predictor=FakeRecPredictor(lines, error))


@pytest.fixture
def screenshot_path(tmp_path):
    path = tmp_path / "card.png"
    Image.new("RGB", (1200, 400), "white").save(path)
    return str(path)


# ============================================================================
# Text row helpers
# ============================================================================

class TestClusterTextRows:
    def test_empty(self):
        assert cluster_text_rows([]) == []

    def test_rows_and_order(self):
        elements = [
            {"content": "b", "bbox": [100, 12, 150, 30]},
            {"content": "a", "bbox": [10, 10, 50, 30]},
            {"content": "c", "bbox": [10, 60, 50, 80]},
        ]
        ordered = cluster_text_rows(elements)
        assert [e["content"] for e in ordered] == ["a", "b", "c"]
        assert [e["row_id"] for e in ordered] == [0, 0, 1]

    def test_inputs_not_mutated(self):
        elements = [{"content": "a", "bbox": [0, 0, 10, 10]}]
        cluster_text_rows(elements)
        assert "row_id" not in elements[0]


class TestRowsToText:
    def test_joins_rows(self):
        elements = [
            {"content": "Mobile:", "row_id": 0},
            {"content": "9876543210", "row_id": 0},
            {"content": "Priya", "row_id": 1},
        ]
        assert rows_to_text(elements) == "Mobile: 9876543210\nPriya"

    def test_skips_blank(self):
        assert rows_to_text([{"content": "  ", "row_id": 0}]) == ""


# ============================================================================
# Bbox helpers
# ============================================================================

class TestBboxPosition:
    def test_to_position(self):
        assert bbox_to_position([10, 20, 110, 60]) == {"x": 10.0, "y": 20.0, "width": 100.0, "height": 40.0}

    def test_malformed(self):
        assert bbox_to_position(None) == empty_position()
        assert bbox_to_position([1, 2]) == empty_position()
        assert bbox_to_position([10, 10, 0, 0]) == empty_position()

    def test_union_bbox(self):
        assert union_bbox([[50, 10, 100, 30], [110, 12, 160, 28]]) == [50.0, 10.0, 160.0, 30.0]

    def test_union_bbox_skips_malformed(self):
        assert union_bbox([None, [1, 2], [0, 0, 5, 5]]) == [0.0, 0.0, 5.0, 5.0]
        assert union_bbox([]) is None

    def test_inverse(self):
        bbox = [10.0, 20.0, 110.0, 60.0]
        assert position_to_bbox(bbox_to_position(bbox)) == bbox


# ============================================================================
# Image loading
# ============================================================================

class TestImageHelpers:
    def test_load_flattens_transparency(self, tmp_path):
        path = tmp_path / "alpha.png"
        Image.new("RGBA", (20, 20), (0, 0, 0, 0)).save(path)
        image = load_image(str(path))
        assert image.mode == "RGB"
        assert image.getpixel((5, 5)) == (255, 255, 255)

    def test_load_missing_file(self, tmp_path):
        assert load_image(str(tmp_path / "missing.png")) is None

    def test_upscale_small(self):
        image = upscale_small_image(Image.new("RGB", (500, 100), "white"))
        assert image.size == (1000, 200)

    def test_large_unchanged(self):
        image = Image.new("RGB", (1200, 100), "white")
        assert upscale_small_image(image) is image


# ============================================================================
# Recognizer
# ============================================================================

class TestScreenshotRecognizer:
    def test_filters_and_orders_lines(self):
        lines = _recognizer(CONTACT_CARD_LINES).recognize_lines(Image.new("RGB", (400, 200)))
        assert [line["content"] for line in lines] == ["Priya Sharma", "Mobile:", "9876543210"]
        assert [line["row_id"] for line in lines] == [0, 1, 1]

    def test_recognize_text(self):
        text = _recognizer(CONTACT_CARD_LINES).recognize(Image.new("RGB", (400, 200)))
        assert text == "Priya Sharma\nMobile: 9876543210"

    def test_custom_threshold(self):
        recognizer = ScreenshotRecognizer(det_predictor=object(),
                                          rec_predictor=FakeRecPredictor(CONTACT_CARD_LINES),
                                          min_confidence=0.0)
        assert len(recognizer.recognize_lines(Image.new("RGB", (400, 200)))) == 4

    def test_converts_to_rgb(self):
        predictor = FakeRecPredictor(CONTACT_CARD_LINES)
        recognizer = ScreenshotRecognizer(det_predictor=object(), rec_predictor=predictor)
        recognizer.recognize_lines(Image.new("L", (400, 200)))
        images, tasks, _ = predictor.calls[0]
        assert images[0].mode == "RGB"
        assert tasks == ["ocr_with_boxes"]

    def test_progress(self, progress_log):
        _recognizer(CONTACT_CARD_LINES).recognize_lines(Image.new("RGB", (400, 200)), on_progress=progress_log)
        assert progress_log.calls == [0, 90, 100]

    def test_missing_image(self):
        with pytest.raises(TextExtractionError):
            _recognizer().recognize_lines(None)

    def test_predictor_failure(self):
        recognizer = _recognizer(error=RuntimeError("CUDA out of memory"))
        with pytest.raises(TextExtractionError) as excinfo:
            recognizer.recognize_lines(Image.new("RGB", (400, 200)))
        assert "CUDA out of memory" in str(excinfo.value)
        assert isinstance(excinfo.value.__cause__, RuntimeError)


# ============================================================================
# Processor
# ============================================================================

class TestMonotonicProgress:
    def test_drops_repeats_and_regressions(self, progress_log):
        progress = _MonotonicProgress(progress_log)
        for percent in (10, 10, 5, 50, 75, 60, 100):
            progress(percent)
        assert progress_log.calls == [10, 50, 75, 100]

    def test_scaled(self, progress_log):
        report = _MonotonicProgress(progress_log).scaled(10, 50)
        for percent in (0, 50, 100):
            report(percent)
        assert progress_log.calls == [10, 30, 50]

    def test_no_callback(self):
        _MonotonicProgress(None)(50)


class TestScreenshotProcessor:
    def test_contact_card(self, screenshot_path):
        processor = ScreenshotProcessor(recognizer=_recognizer(CONTACT_CARD_LINES))
        result = processor.process_screenshot(screenshot_path)

        assert result["filename"] == "card.png"
        assert result["text"] == "Priya Sharma\nMobile: 9876543210"
        assert isinstance(result["language"], str)
        assert len(result["lines"]) == 3
        assert len(result["contacts"]) == 1

        contact = result["contacts"][0]
        assert contact["phoneNumber"] == "9876543210"
        assert contact["formattedNumber"] == "+91 98765 43210"
        assert contact["name"] == "Priya Sharma"
        assert contact["confidence"] == pytest.approx(1.0)
        assert contact["position"] == {"x": 120.0, "y": 52.0, "width": 180.0, "height": 18.0}

    def test_result_is_json_serializable(self, screenshot_path):
        processor = ScreenshotProcessor(recognizer=_recognizer(CONTACT_CARD_LINES))
        json.dumps(processor.process_screenshot(screenshot_path))

    def test_progress_is_monotonic(self, screenshot_path, progress_log):
        processor = ScreenshotProcessor(recognizer=_recognizer(CONTACT_CARD_LINES))
        processor.process_screenshot(screenshot_path, on_progress=progress_log)
        assert progress_log.calls == [10, 46, 50, 75, 100]

    def test_no_numbers_is_not_an_error(self, screenshot_path):
        lines = [FakeTextLine("Good morning everyone", [10, 10, 300, 30], 0.9)]
        processor = ScreenshotProcessor(recognizer=_recognizer(lines))
        result = processor.process_screenshot(screenshot_path)
        assert result["contacts"] == []

    def test_blank_screenshot(self, screenshot_path):
        processor = ScreenshotProcessor(recognizer=_recognizer([]))
        result = processor.process_screenshot(screenshot_path)
        assert result["text"] == ""
        assert result["language"] == "en"
        assert result["contacts"] == []

    def test_missing_file(self, tmp_path):
        processor = ScreenshotProcessor(recognizer=_recognizer(CONTACT_CARD_LINES))
        missing = str(tmp_path / "missing.png")
        with pytest.raises(TextExtractionError) as excinfo:
            processor.process_screenshot(missing)
        assert excinfo.value.path == missing

    def test_ocr_failure_carries_path(self, screenshot_path):
        processor = ScreenshotProcessor(recognizer=_recognizer(error=RuntimeError("boom")))
        with pytest.raises(TextExtractionError) as excinfo:
            processor.process_screenshot(screenshot_path)
        assert excinfo.value.path == screenshot_path
        assert screenshot_path in str(excinfo.value)

    def test_number_split_across_boxes(self, screenshot_path):
        lines = [
            FakeTextLine("Call", [0, 10, 40, 30], 0.9),
            FakeTextLine("98765", [50, 10, 100, 30], 0.9),
            FakeTextLine("43210", [110, 12, 160, 30], 0.9),
        ]
        processor = ScreenshotProcessor(recognizer=_recognizer(lines))
        result = processor.process_screenshot(screenshot_path)

        contact = result["contacts"][0]
        assert contact["sourceText"] == "98765 43210"
        assert contact["position"] == {"x": 50.0, "y": 10.0, "width": 110.0, "height": 20.0}

    def test_unlocated_contact_gets_empty_position(self):
        contact = processing_pipeline.extract_contacts_with_progress("call 9876543210", None)[0]
        record = ScreenshotProcessor._contact_to_dict(contact, [{"content": "other", "bbox": [0, 0, 5, 5]}])
        assert record["position"] == empty_position()


# ============================================================================
# Command line
# ============================================================================

class _FakeProcessor:
    """Stands in for ScreenshotProcessor; fails on files named bad.*"""

    def __init__(self, scheme=None):
        self.scheme = scheme

    def process_screenshot(self, file_path, on_progress=None):
        name = Path(file_path).name
        if name.startswith("bad"):
            raise TextExtractionError("unreadable", path=file_path)
        return {"filename": name, "text": "", "language": "en", "lines": [], "contacts": []}


class TestMain:
    def test_text_file(self, tmp_path, capsys):
        text_path = tmp_path / "ocr.txt"
        text_path.write_text("Call John Smith at 9876543210 or john@example.com", encoding="utf-8")

        assert main.main(["--text_file", str(text_path)]) == 0

        contacts = json.loads(capsys.readouterr().out)
        assert len(contacts) == 1
        assert contacts[0]["formattedNumber"] == "+91 98765 43210"
        assert contacts[0]["name"] == "John Smith"

    def test_unknown_scheme(self, tmp_path):
        text_path = tmp_path / "ocr.txt"
        text_path.write_text("9876543210", encoding="utf-8")
        assert main.main(["--text_file", str(text_path), "--scheme", "XX"]) == 2

    def test_missing_input_dir(self, tmp_path, monkeypatch):
        monkeypatch.setattr(processing_pipeline, "ScreenshotProcessor", _FakeProcessor)
        assert main.main(["--input_dir", str(tmp_path / "nope"), "--output_dir", str(tmp_path / "out")]) == 1

    def test_directory(self, tmp_path, monkeypatch):
        monkeypatch.setattr(processing_pipeline, "ScreenshotProcessor", _FakeProcessor)
        input_dir = tmp_path / "input"
        output_dir = tmp_path / "output"
        input_dir.mkdir()
        for name in ("good.png", "bad.png", ".gitkeep"):
            (input_dir / name).write_bytes(b"")

        assert main.main(["--input_dir", str(input_dir), "--output_dir", str(output_dir)]) == 0

        assert sorted(p.name for p in output_dir.iterdir()) == ["bad.json", "good.json"]
        good = json.loads((output_dir / "good.json").read_text(encoding="utf-8"))
        assert good["contacts"] == []
        bad = json.loads((output_dir / "bad.json").read_text(encoding="utf-8"))
        assert bad["error_kind"] == "text_extraction_failed"
        assert bad["filename"] == "bad.png"
