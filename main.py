import os
import sys
import argparse
import json
import logging
import time

from contactscan.errors import TextExtractionError, UnknownSchemeError
from contactscan.extraction import extract_contacts, get_scheme

logger = logging.getLogger(__name__)

VALID_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.bmp', '.gif', '.webp', '.tif', '.tiff'}


def run_text_file(text_path, scheme):
    """Extract contacts from an already-recognized text file and print them as JSON."""
    with open(text_path, "r", encoding="utf-8") as f:
        text = f.read()
    contacts = extract_contacts(text, scheme=scheme)
    logger.info("Found %d contacts in %s", len(contacts), text_path)
    json.dump([c.to_dict() for c in contacts], sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


def run_directory(input_dir, output_dir, scheme):
    """OCR every screenshot in ``input_dir`` and write one JSON file per image."""
    # Imported here so --text_file never loads the OCR stack.
    from contactscan.processing_pipeline import ScreenshotProcessor

    if not os.path.exists(input_dir):
        logger.error("Input directory not found: %s", input_dir)
        return 1

    os.makedirs(output_dir, exist_ok=True)

    logger.info("Initializing ScreenshotProcessor...")
    start_time = time.time()
    try:
        processor = ScreenshotProcessor(scheme=scheme)
    except (ImportError, RuntimeError, OSError) as e:
        logger.error("Failed to initialize OCR models. Ensure surya-ocr is installed.\nError: %s", e)
        return 1

    all_files = [f for f in sorted(os.listdir(input_dir)) if os.path.isfile(os.path.join(input_dir, f))]
    files = [f for f in all_files if os.path.splitext(f)[1].lower() in VALID_EXTENSIONS]
    skipped = len(all_files) - len(files)
    if skipped:
        logger.info("Skipped %d non-image files (e.g. .gitkeep)", skipped)
    logger.info("Found %d screenshots in %s", len(files), input_dir)

    total_contacts = 0
    failures = 0
    for filename in files:
        file_path = os.path.join(input_dir, filename)
        logger.info("Processing %s...", filename)

        output_filename = os.path.splitext(filename)[0] + ".json"
        output_file_path = os.path.join(output_dir, output_filename)

        def on_progress(percent, _name=filename):
            logger.debug("  %s: %d%%", _name, percent)

        try:
            result = processor.process_screenshot(file_path, on_progress=on_progress)
            total_contacts += len(result["contacts"])
            logger.info("  %d contacts", len(result["contacts"]))
        except TextExtractionError as e:
            failures += 1
            logger.error("Text extraction failed for %s: %s", filename, e)
            result = {"filename": filename, "error": str(e), "error_kind": "text_extraction_failed"}

        with open(output_file_path, "w", encoding="utf-8") as f:
            json.dump(result, f, indent=2, ensure_ascii=False)

    logger.info("Processing complete in %.2fs: %d contacts, %d failed screenshots. Results saved to %s",
                time.time() - start_time, total_contacts, failures, output_dir)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Extract phone contacts from screenshots")
    parser.add_argument("--input_dir", type=str, default="input", help="Directory containing screenshots to process")
    parser.add_argument("--output_dir", type=str, default="output", help="Directory to save JSON output files")
    parser.add_argument("--text_file", type=str, default=None,
                        help="Extract from a plain text file instead of running OCR")
    parser.add_argument("--scheme", type=str, default=None,
                        help="Numbering scheme region code (default: IN)")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING"], default="INFO",
                        help="Set logging verbosity (default: INFO)")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=True,
    )

    # Suppress noisy third-party loggers
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("surya").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    try:
        scheme = get_scheme(args.scheme)
    except UnknownSchemeError as e:
        logger.error("%s", e)
        return 2

    if args.text_file:
        return run_text_file(args.text_file, scheme)
    return run_directory(args.input_dir, args.output_dir, scheme)


if __name__ == "__main__":
    sys.exit(main())
