"""
contactscan: phone contact extraction from screenshot OCR text.
"""

from .errors import ContactScanError, TextExtractionError, UnknownSchemeError
from .extraction import ExtractedContact, extract_contacts, extract_contacts_with_progress

__version__ = "0.1.0"

__all__ = [
    'ContactScanError',
    'TextExtractionError',
    'UnknownSchemeError',
    'ExtractedContact',
    'extract_contacts',
    'extract_contacts_with_progress',
]
