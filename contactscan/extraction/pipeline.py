"""
Extraction orchestrator: OCR text in, contact records out.

Coordinates the pattern matcher, confidence scorer and contact associator.
The only side effects are logging and the optional progress callback.
"""

import logging
from typing import Callable, List, Optional

from .association import find_associated_email, find_associated_name
from .confidence import calculate_confidence
from .patterns import find_phone_matches
from .records import ExtractedContact, PhoneMatch
from .schemes import NumberingScheme, get_scheme
from ..config import CONFIG

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


def _report(on_progress: Optional[ProgressCallback], percent: int,
            log: logging.Logger) -> None:
    """Invoke the progress callback; a failing callback never aborts extraction."""
    if on_progress is None:
        return
    try:
        on_progress(percent)
    except Exception as e:
        log.warning("Progress callback failed at %d%%: %s", percent, e)


def context_snippet(text: str, start: int, length: int,
                    radius: Optional[int] = None) -> str:
    """Slice of ``text`` from ``radius`` chars before a match to ``radius`` chars after it."""
    if radius is None:
        radius = CONFIG.context_radius
    return text[max(0, start - radius):min(len(text), start + length + radius)]


def build_contact(match: PhoneMatch, text: str) -> ExtractedContact:
    """Score and enrich one validated match."""
    source = match.candidate.text
    number = match.number
    return ExtractedContact(
        phone_number=number.cleaned,
        formatted_number=number.formatted,
        country_code=number.country_code,
        is_valid=number.is_valid,
        confidence=calculate_confidence(number.cleaned, text),
        name=find_associated_name(source, text),
        email=find_associated_email(source, text),
        context=context_snippet(text, match.candidate.start, len(source)),
        source_text=source,
    )


def _run(text: str, scheme: Optional[NumberingScheme],
         log: logging.Logger,
         on_progress: Optional[ProgressCallback] = None) -> List[ExtractedContact]:
    _report(on_progress, CONFIG.progress_start, log)

    if not isinstance(text, str) or not text.strip():
        log.info("No text to extract contacts from")
        _report(on_progress, CONFIG.progress_done, log)
        return []

    if scheme is None:
        scheme = get_scheme()

    log.debug("Extracting contacts from %d chars: %r", len(text), text[:200])
    _report(on_progress, CONFIG.progress_text_ready, log)

    matches = find_phone_matches(text, scheme)
    log.info("Found %d candidate phone numbers", len(matches))
    _report(on_progress, CONFIG.progress_matched, log)

    contacts = [build_contact(match, text) for match in matches]
    for contact in contacts:
        log.debug("  %s (confidence %.2f, name=%r, email=%r)",
                  contact.formatted_number, contact.confidence,
                  contact.name, contact.email)

    _report(on_progress, CONFIG.progress_done, log)
    return contacts


def extract_contacts(text: str, scheme: Optional[NumberingScheme] = None,
                     log: Optional[logging.Logger] = None) -> List[ExtractedContact]:
    """
    Extract phone contacts from raw OCR text.

    Args:
        text: Recognized text of one screenshot.
        scheme: Numbering scheme (defaults to CONFIG.default_scheme).
        log: Logger to use instead of this module's.

    Returns:
        Contacts in first-sighting order, one per distinct normalized number.
        Empty or whitespace-only text gives an empty list.
    """
    return _run(text, scheme, log or logger)


def extract_contacts_with_progress(text: str, on_progress: Optional[ProgressCallback],
                                   scheme: Optional[NumberingScheme] = None,
                                   log: Optional[logging.Logger] = None) -> List[ExtractedContact]:
    """
    Same as ``extract_contacts`` but reports coarse progress.

    ``on_progress`` receives 10 at start, 50 once the text is accepted, 75
    after pattern matching and 100 when done.  Exceptions raised by the
    callback are logged and otherwise ignored.
    """
    return _run(text, scheme, log or logger, on_progress)
