"""
Exception types raised by contactscan.

The extraction core never raises for bad input; these cover the OCR
composition and scheme lookup.
"""

from typing import Optional


class ContactScanError(Exception):
    """Base class for all contactscan errors."""


class TextExtractionError(ContactScanError):
    """OCR could not produce text for an image.

    Distinct from an extraction that simply found no phone numbers, which is
    an empty result rather than an error.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        base = super().__str__()
        if self.path:
            return f"Failed to extract text from {self.path}: {base}"
        return f"Failed to extract text: {base}"


class UnknownSchemeError(ContactScanError, KeyError):
    """No numbering scheme is registered under the requested region code."""

    def __str__(self) -> str:
        return Exception.__str__(self)
