"""Domain-specific exceptions"""

from typing import List


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ModelAPIError(DomainException):
    """Model endpoint returned an error, timed out, or is unreachable"""

    pass


class ModelResponseParseError(DomainException):
    """Model answered but no structured data could be recovered from the text"""

    pass


class UnsupportedDocumentError(DomainException):
    """File type cannot be turned into page images"""

    pass


class DocumentProcessingError(DomainException):
    """Rasterizing or reading a document failed"""

    pass


class NoDocumentsProcessedError(DomainException):
    """None of the submitted documents could be processed"""

    def __init__(self, message: str, details: List[str] | None = None):
        super().__init__(message)
        self.details = details or []
