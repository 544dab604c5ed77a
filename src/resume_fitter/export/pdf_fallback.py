"""Fallback PDF renderer using fpdf2 (pure Python, no system deps).

Lays the document out directly with FPDF on a Letter page, honoring every
``LayoutOptions`` field, and reads the page count off the FPDF page counter.
"""

from __future__ import annotations

import logging
import re

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from resume_fitter.errors import RenderError
from resume_fitter.export.base import RenderResult
from resume_fitter.models.document import CoverLetterDocument, Document, ResumeDocument
from resume_fitter.models.layout import LayoutOptions

logger = logging.getLogger(__name__)

_UNIT_TO_PT = {"in": 72.0, "pt": 1.0, "mm": 72.0 / 25.4, "cm": 72.0 / 2.54, "px": 0.75}
_LENGTH = re.compile(r"^(\d+(?:\.\d+)?)(in|pt|mm|cm|px)?$")

# Core PDF fonts only cover latin-1; map the usual typographic characters first.
_ASCII_FALLBACKS = str.maketrans({
    "…": "...",
    "•": "-",
    "–": "-",
    "—": "-",
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
})

BULLET_INDENT = 10.0


def parse_padding(padding: str) -> tuple[float, float, float, float]:
    """Parse CSS-style padding shorthand into (top, right, bottom, left) points."""
    parts = padding.split()
    if not 1 <= len(parts) <= 4:
        raise RenderError(f"Invalid page padding: {padding!r}")
    values = []
    for part in parts:
        m = _LENGTH.match(part.strip().lower())
        if not m:
            raise RenderError(f"Invalid page padding length: {part!r}")
        values.append(float(m.group(1)) * _UNIT_TO_PT[m.group(2) or "pt"])
    if len(values) == 1:
        values *= 4
    elif len(values) == 2:
        values = [values[0], values[1], values[0], values[1]]
    elif len(values) == 3:
        values = [values[0], values[1], values[2], values[1]]
    return values[0], values[1], values[2], values[3]


def _safe_text(text: str, pdf: FPDF) -> str:
    """Ensure text is encodable by the current font. Replace if needed."""
    if pdf.is_ttf_font:
        return text
    text = text.translate(_ASCII_FALLBACKS)
    try:
        text.encode("latin-1")
        return text
    except UnicodeEncodeError:
        return text.encode("latin-1", errors="replace").decode("latin-1")


class _Writer:
    """Thin helper that keeps the font and line height consistent."""

    def __init__(self, layout: LayoutOptions):
        top, right, bottom, left = parse_padding(layout.page_padding)
        self.layout = layout
        self.pdf = FPDF(unit="pt", format="letter")
        self.pdf.set_margins(left, top, right)
        self.pdf.set_auto_page_break(auto=True, margin=bottom)
        self.pdf.add_page()

    def line(self, text: str, size: float, style: str = "", align: str = "L", indent: float = 0.0):
        if not text:
            return
        pdf = self.pdf
        pdf.set_font("Helvetica", style, size)
        pdf.set_x(pdf.l_margin + indent)
        pdf.multi_cell(
            pdf.epw - indent,
            size * self.layout.line_height,
            _safe_text(text, pdf),
            align=align,
            new_x=XPos.LMARGIN,
            new_y=YPos.NEXT,
        )

    def rule(self):
        pdf = self.pdf
        pdf.line(pdf.l_margin, pdf.get_y(), pdf.w - pdf.r_margin, pdf.get_y())
        pdf.ln(2)

    def gap(self, points: float):
        self.pdf.ln(points)


def _write_resume(w: _Writer, resume: ResumeDocument) -> None:
    layout = w.layout
    body = layout.body_font_size
    w.line(resume.name, layout.name_font_size, "B", align="C")
    contact = " | ".join(
        part for part in (resume.email, resume.phone, resume.location, *resume.links) if part
    )
    w.line(contact, body, align="C")
    w.rule()
    if resume.summary:
        w.line(resume.summary, body)
        w.gap(body * 0.4)

    for section in resume.sections:
        w.line(section.name.upper(), layout.section_title_size, "B")
        w.rule()
        for item in section.items:
            header = ", ".join(p for p in (item.title, item.organization) if p)
            meta = " ".join(p for p in (item.location, item.date_range) if p)
            w.line(header, body, "B")
            w.line(meta, body, "I", align="R")
            for bullet in item.bullets:
                w.line(f"- {bullet.text}", body, indent=BULLET_INDENT)
            w.gap(body * 0.3)
        w.gap(body * 0.4)


def _write_cover_letter(w: _Writer, letter: CoverLetterDocument) -> None:
    body = w.layout.body_font_size
    w.line(letter.date, body)
    w.gap(body)
    w.line(letter.salutation, body)
    w.gap(body * 0.6)
    for paragraph in letter.paragraphs:
        w.line(paragraph.text, body, align="J")
        w.gap(body * 0.6)
    w.line(letter.closing, body)


def render_with_fpdf2(document: Document, layout: LayoutOptions) -> RenderResult:
    """Render ``document`` to PDF bytes and report its page count."""
    try:
        writer = _Writer(layout)
        if isinstance(document, ResumeDocument):
            _write_resume(writer, document)
        else:
            _write_cover_letter(writer, document)
        data = bytes(writer.pdf.output())
    except RenderError:
        raise
    except Exception as exc:
        logger.debug("fpdf2 rendering failed", exc_info=True)
        raise RenderError(f"fpdf2 rendering failed: {exc}") from exc
    return RenderResult(pdf_bytes=data, page_count=writer.pdf.page_no())
