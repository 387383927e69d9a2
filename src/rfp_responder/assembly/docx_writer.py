"""DOCX rendering of a `ResponseDocument` via python-docx."""

from __future__ import annotations

import io
import logging
from typing import Any, Literal

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt, RGBColor
from pydantic import BaseModel, Field

from rfp_responder.types import ResponseDocument

logger = logging.getLogger(__name__)

DOCX_MEDIA_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)

_ALIGNMENTS = {
    "left": WD_ALIGN_PARAGRAPH.LEFT,
    "center": WD_ALIGN_PARAGRAPH.CENTER,
    "right": WD_ALIGN_PARAGRAPH.RIGHT,
}


class ParagraphStyle(BaseModel):
    """Styling for one kind of paragraph."""

    size_pt: float = Field(default=11.0, gt=0.0)
    bold: bool = False
    italic: bool = False
    color: str | None = Field(default=None, pattern=r"^[0-9A-Fa-f]{6}$")
    align: Literal["left", "center", "right"] = "left"
    space_after_pt: float = Field(default=0.0, ge=0.0)


class StylePolicy(BaseModel):
    """Fonts, colours and spacing of the rendered response document."""

    font_name: str = "Calibri"
    margin_inches: float = Field(default=1.0, ge=0.0)
    rule: str = "─" * 68
    title: ParagraphStyle = Field(
        default_factory=lambda: ParagraphStyle(
            size_pt=24, bold=True, color="00008B", align="center"
        )
    )
    date: ParagraphStyle = Field(
        default_factory=lambda: ParagraphStyle(
            size_pt=12, italic=True, color="808080", align="center"
        )
    )
    rule_style: ParagraphStyle = Field(
        default_factory=lambda: ParagraphStyle(size_pt=8, color="808080", align="center")
    )
    heading: ParagraphStyle = Field(
        default_factory=lambda: ParagraphStyle(
            size_pt=16, bold=True, color="00008B", space_after_pt=10
        )
    )
    body: ParagraphStyle = Field(
        default_factory=lambda: ParagraphStyle(size_pt=11, space_after_pt=15)
    )
    question: ParagraphStyle = Field(
        default_factory=lambda: ParagraphStyle(
            size_pt=12, bold=True, color="0000FF", space_after_pt=5
        )
    )
    answer: ParagraphStyle = Field(
        default_factory=lambda: ParagraphStyle(size_pt=11, space_after_pt=20)
    )
    footer: ParagraphStyle = Field(
        default_factory=lambda: ParagraphStyle(
            size_pt=9, italic=True, color="808080", align="right"
        )
    )


class DocxResponseWriter:
    """Renders the response document as a sequence of styled paragraphs."""

    def __init__(self, style: StylePolicy | None = None) -> None:
        self.style = style or StylePolicy()

    def write(self, document: ResponseDocument) -> bytes:
        doc = Document()
        margin = Inches(self.style.margin_inches)
        for section in doc.sections:
            section.left_margin = section.right_margin = margin
            section.top_margin = section.bottom_margin = margin

        generated = document.generated_at
        self._append(doc, document.title, self.style.title)
        self._append(doc, f"Generated: {generated:%B %d, %Y}", self.style.date)
        doc.add_paragraph()
        self._append(doc, self.style.rule, self.style.rule_style)
        doc.add_paragraph()

        self._append(doc, "Executive Summary", self.style.heading)
        self._append(doc, document.summary, self.style.body)
        doc.add_paragraph()

        self._append(doc, "Questions and Responses", self.style.heading)
        for question in document.questions:
            self._append(
                doc, f"Q{question.index}: {question.question_text}", self.style.question
            )
            self._append(doc, question.answer, self.style.answer)

        doc.add_paragraph()
        self._append(
            doc,
            f"Document generated on {generated:%A, %B %d, %Y %H:%M}",
            self.style.footer,
        )

        buffer = io.BytesIO()
        doc.save(buffer)
        payload = buffer.getvalue()
        logger.info(
            "Rendered response document with %d questions (%d bytes)",
            len(document.questions),
            len(payload),
        )
        return payload

    def _append(self, doc: Any, text: str, style: ParagraphStyle) -> None:
        paragraph = doc.add_paragraph()
        paragraph.alignment = _ALIGNMENTS[style.align]
        if style.space_after_pt:
            paragraph.paragraph_format.space_after = Pt(style.space_after_pt)

        run = paragraph.add_run(text)
        run.font.name = self.style.font_name
        run.font.size = Pt(style.size_pt)
        run.font.bold = style.bold
        run.font.italic = style.italic
        if style.color:
            run.font.color.rgb = RGBColor.from_string(style.color.upper())
