"""Exception types raised by the normalizer."""

from typing import Optional


class PdfNormError(Exception):
    """Base class for all normalizer errors."""


class InputError(PdfNormError, ValueError):
    """Malformed or empty input: bad base64, unreadable PDF, no pages."""


class PageCaptureError(InputError):
    """A single page could not be decoded into primitives."""

    def __init__(self, message: str, page_number: Optional[int] = None):
        super().__init__(message)
        self.page_number = page_number
