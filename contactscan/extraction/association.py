"""
Name and email association for extracted phone numbers.

Screenshots of contact cards, chats and listings usually print a person's
name and email within a couple of lines of their number.  These helpers look
at that locality window only.  They are heuristics: they return the first
plausible hit, or an empty string, and never raise.
"""

import logging
import re
from typing import Iterator, List, Optional

from ..config import CONFIG

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}')
URL_RE = re.compile(r'(?:https?://|www\.)\S+', re.IGNORECASE)

# Lines carrying digit runs, addresses or links are data, not names
_NOT_A_NAME_LINE = re.compile(r'\d{3,}|@|http|www', re.ASCII)

# One or more capitalized words on the same line
_CAPITALIZED_RUN = re.compile(r'\b[A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)*\b')
_NAME_CHARS = re.compile(r'^[A-Za-z\s]+$')

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50
MAX_NAME_WORDS = 3
LONG_RUN_NAME_WORDS = 2

# Capitalized words that are labels, greetings, honorifics or function words.
# They split a capitalized run instead of becoming part of a name, so
# "Call John Smith" yields "John Smith".
NON_NAME_WORDS = frozenset({
    'the', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of', 'with',
    'by', 'from', 'up', 'about', 'into', 'through', 'during', 'before',
    'after', 'above', 'below', 'between', 'among',
    'phone', 'call', 'contact', 'mobile', 'number', 'email', 'address', 'name',
    'tel', 'telephone', 'fax', 'whatsapp', 'website', 'office', 'home', 'work',
    'hi', 'hello', 'dear', 'thanks', 'regards', 'is', 'my', 'me', 'us',
    'mr', 'mrs', 'ms', 'dr', 'prof', 'sir', 'madam', 'shri', 'smt',
})


def split_lines(text: str) -> List[str]:
    """Trimmed, non-empty lines of ``text``."""
    if not text:
        return []
    return [line.strip() for line in text.split('\n') if line.strip()]


def _find_anchor_line(matched: str, lines: List[str]) -> int:
    # Last occurrence wins when the same substring is on several lines.
    anchor = -1
    for index, line in enumerate(lines):
        if matched in line:
            anchor = index
    return anchor


def locality_window(matched: str, text: str,
                    radius: Optional[int] = None) -> List[str]:
    """
    Lines around the line that contains ``matched``.

    Args:
        matched: Literal substring to look for (the matched phone text).
        text: Full OCR text.
        radius: Lines kept on each side (defaults to CONFIG.locality_radius).

    Returns:
        Up to ``2 * radius + 1`` lines, or an empty list when no line
        contains ``matched``.
    """
    if not matched:
        return []
    if radius is None:
        radius = CONFIG.locality_radius

    lines = split_lines(text)
    anchor = _find_anchor_line(matched, lines)
    if anchor == -1:
        return []
    return lines[max(0, anchor - radius):anchor + radius + 1]


# ============================================================================
# Emails
# ============================================================================

def extract_emails(text: str) -> List[str]:
    """All email addresses in ``text``, lower-cased, in order of appearance."""
    if not text:
        return []
    return [email.lower().strip() for email in EMAIL_RE.findall(text)]


def find_associated_email(matched: str, text: str) -> str:
    """First email in the locality window of ``matched``, or ''."""
    window = locality_window(matched, text)
    emails = extract_emails('\n'.join(window))
    return emails[0] if emails else ''


# ============================================================================
# Names
# ============================================================================

def is_valid_name(name: str) -> bool:
    """Check that a candidate string looks like a personal name."""
    if not name or len(name) < MIN_NAME_LENGTH or len(name) > MAX_NAME_LENGTH:
        return False
    if not _NAME_CHARS.match(name):
        return False
    if not name[0].isupper():
        return False
    if name.lower() in NON_NAME_WORDS:
        return False
    return True


def _name_segments(line: str) -> Iterator[str]:
    """
    Capitalized word sequences split at stoplist words.

    Sequences longer than ``MAX_NAME_WORDS`` are cut to their first
    ``LONG_RUN_NAME_WORDS`` words ("Anil Kumar Singh Rathore" -> "Anil Kumar").
    """
    for run in _CAPITALIZED_RUN.finditer(line):
        segment: List[str] = []
        for word in run.group(0).split() + ['']:
            if word and word.lower() not in NON_NAME_WORDS:
                segment.append(word)
                continue
            if len(segment) > MAX_NAME_WORDS:
                segment = segment[:LONG_RUN_NAME_WORDS]
            if segment:
                yield ' '.join(segment)
            segment = []


def extract_names(text: str) -> List[str]:
    """
    Plausible personal names in ``text``, in line order, without duplicates.

    Lines containing three or more consecutive digits, an '@', or a URL
    marker are skipped entirely.
    """
    names: List[str] = []
    for line in split_lines(text):
        if _NOT_A_NAME_LINE.search(line):
            continue
        for candidate in _name_segments(line):
            if is_valid_name(candidate) and candidate not in names:
                names.append(candidate)
    return names


def _scrub_line(line: str, matched: str) -> str:
    """Blank out the matched number, emails and URLs so the rest of the line stays usable."""
    line = line.replace(matched, ' ')
    line = EMAIL_RE.sub(' ', line)
    return URL_RE.sub(' ', line)


def find_associated_name(matched: str, text: str) -> str:
    """
    First plausible name in the locality window of ``matched``, or ''.

    The number itself, email addresses and URLs are removed from each window
    line before the line filter runs, so "Call John Smith at 9876543210"
    still yields a name while a neighbouring line holding another number
    does not.
    """
    window = locality_window(matched, text)
    if not window:
        return ''
    scrubbed = [_scrub_line(line, matched) for line in window]
    names = extract_names('\n'.join(scrubbed))
    if names:
        logger.debug("  Name near %r: %s", matched, names[0])
    return names[0] if names else ''
