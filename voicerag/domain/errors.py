# voicerag/domain/errors.py

from typing import Any, Dict, Optional


class RetrievalError(Exception):
    """Base exception for all retrieval engine errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ExtractionError(RetrievalError):
    """Raised when text cannot be extracted from a document."""

    def __init__(
        self,
        message: str = "Text extraction failed",
        file_name: Optional[str] = None,
        file_type: Optional[str] = None,
    ):
        details: Dict[str, Any] = {}
        if file_name:
            details["file_name"] = file_name
        if file_type:
            details["file_type"] = file_type
        super().__init__(message=message, code="EXTRACTION_ERROR", details=details)
        self.file_name = file_name


class UnsupportedFormatError(ExtractionError):
    """Raised for extensions outside the supported set."""

    def __init__(self, file_name: str):
        super().__init__(
            message=f"Unsupported file type: '{file_name}'",
            file_name=file_name,
        )
        self.code = "UNSUPPORTED_FORMAT"
