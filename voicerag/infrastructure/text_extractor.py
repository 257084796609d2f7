# voicerag/infrastructure/text_extractor.py

import io
import logging
import re
from pathlib import PurePath
from typing import List, Union

import fitz
import pdfplumber
from docx import Document as DocxDocument

from voicerag.domain.errors import ExtractionError, UnsupportedFormatError
from voicerag.domain.models import FileType


logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".pdf", ".docx", ".doc", ".txt"}


def detect_file_type(file_name: str) -> FileType:
    """Extension-derived tag; anything outside the supported set is UNKNOWN."""
    suffix = PurePath(file_name).suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        return FileType.UNKNOWN
    return FileType(suffix.lstrip("."))


def is_supported(file_name: str) -> bool:
    return detect_file_type(file_name) is not FileType.UNKNOWN


class TextExtractor:
    """
    Turns raw document bytes into plain text.

    - TXT: UTF-8 passthrough, undecodable bytes dropped
    - PDF: pdfplumber first, PyMuPDF when pdfplumber yields nothing
    - DOCX / DOC: python-docx paragraphs (legacy binary .doc files are not
      readable by python-docx and surface as ExtractionError)

    Unsupported extensions raise UnsupportedFormatError before any parsing.
    """

    def extract(self, file_name: str, content: Union[bytes, str]) -> str:
        file_type = detect_file_type(file_name)
        if file_type is FileType.UNKNOWN:
            raise UnsupportedFormatError(file_name)

        if isinstance(content, str):
            return content

        try:
            if file_type is FileType.TXT:
                return self._extract_text(content)
            if file_type is FileType.PDF:
                return self._extract_pdf(content, file_name)
            return self._extract_word(content)
        except ExtractionError:
            raise
        except Exception as error:
            raise ExtractionError(
                f"Failed to extract text from '{file_name}': {error}",
                file_name=file_name,
                file_type=file_type.value,
            ) from error

    # ─── Private: Format Extractors ───────────────────────────────────────────

    @staticmethod
    def _extract_text(data: bytes) -> str:
        return data.decode("utf-8", errors="ignore")

    def _extract_pdf(self, data: bytes, file_name: str) -> str:
        pages = self._extract_pages_pdfplumber(data, file_name)

        # Fallback to PyMuPDF
        if not pages:
            pages = self._extract_pages_pymupdf(data)

        return self._clean_text("\n\n".join(pages))

    @staticmethod
    def _extract_pages_pdfplumber(data: bytes, file_name: str) -> List[str]:
        try:
            pages = []
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                for page in pdf.pages:
                    text = page.extract_text(x_tolerance=2, y_tolerance=2)
                    if text:
                        pages.append(text)
            return pages
        except Exception as error:
            logger.warning("[TextExtractor] pdfplumber error on %s: %s", file_name, error)
            return []

    @staticmethod
    def _extract_pages_pymupdf(data: bytes) -> List[str]:
        pages = []
        with fitz.open(stream=data, filetype="pdf") as pdf:
            for page in pdf:
                text = page.get_text()
                if text:
                    pages.append(text)
        return pages

    @staticmethod
    def _extract_word(data: bytes) -> str:
        document = DocxDocument(io.BytesIO(data))
        return "\n".join(p.text for p in document.paragraphs if p.text.strip())

    @staticmethod
    def _clean_text(text: str) -> str:
        """Normalize whitespace left over by PDF layout."""
        text = re.sub(r"[ \t]{2,}", " ", text)
        text = re.sub(r"\n{3,}", "\n\n", text)
        return text.strip()
