"""Text extractors for uploaded knowledge and RFP documents."""

from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from pathlib import PurePath

from rfp_responder.errors import UnsupportedFileType

logger = logging.getLogger(__name__)


class Extractor(ABC):
    """Base extractor interface used by ingestion and RFP processing."""

    extensions: tuple[str, ...] = ()

    @abstractmethod
    def extract(self, data: bytes) -> str:
        """Extract plain UTF-8 text, preserving line breaks."""


class TextExtractor(Extractor):
    """Extractor for plain text and markdown uploads."""

    extensions = (".txt", ".md", ".markdown")

    def extract(self, data: bytes) -> str:
        return data.decode("utf-8", errors="replace")


class PdfExtractor(Extractor):
    """Extractor for PDF documents via pypdf, one text block per page."""

    extensions = (".pdf",)

    def extract(self, data: bytes) -> str:
        from pypdf import PdfReader

        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
        return "\n".join(pages) + "\n" if pages else ""


class DocxExtractor(Extractor):
    """Extractor for Word documents via python-docx, one paragraph per line."""

    extensions = (".docx",)

    def extract(self, data: bytes) -> str:
        from docx import Document

        document = Document(io.BytesIO(data))
        return "".join(f"{paragraph.text}\n" for paragraph in document.paragraphs)


class ParserRegistry:
    """Maps file extension to extractor implementation."""

    def __init__(self, extractors: list[Extractor] | None = None) -> None:
        self._extractors: dict[str, Extractor] = {}
        for extractor in extractors or [PdfExtractor(), DocxExtractor(), TextExtractor()]:
            self.register(extractor)

    def register(self, extractor: Extractor) -> None:
        for extension in extractor.extensions:
            self._extractors[extension.lower()] = extractor

    def supports(self, file_name: str) -> bool:
        return PurePath(file_name).suffix.lower() in self._extractors

    def extract(self, data: bytes, file_name: str) -> str:
        extractor = self._extractors.get(PurePath(file_name).suffix.lower())
        if extractor is None:
            raise UnsupportedFileType(file_name)
        text = extractor.extract(data)
        logger.debug("Extracted %d characters from %s", len(text), file_name)
        return text
