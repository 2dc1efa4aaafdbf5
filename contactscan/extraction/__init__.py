"""
Text-to-contact extraction package.

Re-exports the public functions so callers can import from
``contactscan.extraction`` directly.
"""

from .pipeline import extract_contacts, extract_contacts_with_progress, context_snippet
from .records import (
    ExtractedContact,
    NormalizedNumber,
    PhoneMatch,
    PhonePattern,
    RawCandidate,
)
from .schemes import (
    NumberingScheme,
    IndianNumberingScheme,
    clean_phone_number,
    get_scheme,
    register_scheme,
)
from .patterns import find_phone_matches, find_digit_runs, try_candidate
from .confidence import calculate_confidence
from .association import (
    find_associated_name,
    find_associated_email,
    extract_emails,
    extract_names,
    is_valid_name,
    locality_window,
)

__all__ = [
    # Pipeline
    'extract_contacts',
    'extract_contacts_with_progress',
    'context_snippet',
    # Records
    'ExtractedContact',
    'NormalizedNumber',
    'PhoneMatch',
    'PhonePattern',
    'RawCandidate',
    # Schemes
    'NumberingScheme',
    'IndianNumberingScheme',
    'clean_phone_number',
    'get_scheme',
    'register_scheme',
    # Patterns
    'find_phone_matches',
    'find_digit_runs',
    'try_candidate',
    # Confidence
    'calculate_confidence',
    # Association
    'find_associated_name',
    'find_associated_email',
    'extract_emails',
    'extract_names',
    'is_valid_name',
    'locality_window',
]
