"""Tests for the PDF renderer and HTML preview."""
from __future__ import annotations

from unittest.mock import patch

import pytest

from resume_fitter.errors import RenderError
from resume_fitter.export import pdf_renderer
from resume_fitter.export.base import RenderResult
from resume_fitter.export.pdf_fallback import parse_padding, render_with_fpdf2
from resume_fitter.export.pdf_renderer import PdfRenderer, render_html
from resume_fitter.models import ResumeDocument, ResumeItem, ResumeSection, Statement
from resume_fitter.models.layout import AGGRESSIVE_LAYOUT, LayoutOptions

# ---------------------------------------------------------------------------
# parse_padding
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("padding,expected", [
    ("0.5in", (36.0, 36.0, 36.0, 36.0)),
    ("1in 0.5in", (72.0, 36.0, 72.0, 36.0)),
    ("10pt 20pt 30pt", (10.0, 20.0, 30.0, 20.0)),
    ("1 2 3 4", (1.0, 2.0, 3.0, 4.0)),
    ("8px", (6.0, 6.0, 6.0, 6.0)),
])
def test_parse_padding(padding, expected):
    assert parse_padding(padding) == pytest.approx(expected)


def test_parse_padding_millimetres():
    top, *_ = parse_padding("25.4mm")
    assert top == pytest.approx(72.0)


@pytest.mark.parametrize("padding", ["", "auto", "1in 1in 1in 1in 1in", "-1in", "1em"])
def test_parse_padding_rejects(padding):
    with pytest.raises(RenderError):
        parse_padding(padding)


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------


def test_render_html_resume(sample_resume):
    html = render_html(sample_resume)
    assert "<h1>Jordan Patel</h1>" in html
    assert "jordan@example.com | 555-0100 | Austin, TX" in html
    assert "margin: 36pt 36pt 36pt 36pt" in html
    assert "font-size: 10pt" in html
    assert "Kubernetes on AWS" in html


def test_render_html_uses_layout(sample_resume):
    html = render_html(sample_resume, AGGRESSIVE_LAYOUT)
    assert "margin: 9pt 9pt 9pt 9pt" in html
    assert "font-size: 8pt" in html
    assert "line-height: 1;" in html


def test_render_html_escapes_content(sample_resume):
    sample_resume.sections[0].items[0].bullets[0].text = "<script>alert(1)</script>"
    html = render_html(sample_resume)
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_render_html_cover_letter(sample_cover_letter):
    html = render_html(sample_cover_letter)
    assert "Dear Hiring Manager," in html
    assert "font-size: 12pt" in html
    assert html.count("<p>") == 2


def test_render_html_bad_padding(sample_resume):
    with pytest.raises(RenderError):
        render_html(sample_resume, LayoutOptions(page_padding="wide"))


# ---------------------------------------------------------------------------
# fpdf2 engine
# ---------------------------------------------------------------------------


def _long_resume(bullets: int) -> ResumeDocument:
    return ResumeDocument(
        name="Jordan Patel",
        email="jordan@example.com",
        sections=[ResumeSection(name="Experience", items=[ResumeItem(
            title="Engineer",
            organization="Acme Corp",
            bullets=[
                Statement(text=f"Shipped feature {i} to production with measurable impact – “quoted”…")
                for i in range(bullets)
            ],
        )])],
    )


def test_fpdf2_single_page(sample_resume):
    result = render_with_fpdf2(sample_resume, LayoutOptions())
    assert isinstance(result, RenderResult)
    assert result.pdf_bytes[:4] == b"%PDF"
    assert result.page_count == 1


def test_fpdf2_overflow_counts_pages():
    result = render_with_fpdf2(_long_resume(150), LayoutOptions())
    assert result.page_count >= 2


def test_fpdf2_smaller_layout_uses_fewer_pages():
    doc = _long_resume(150)
    default = render_with_fpdf2(doc, LayoutOptions()).page_count
    aggressive = render_with_fpdf2(doc, AGGRESSIVE_LAYOUT).page_count
    assert aggressive < default


def test_fpdf2_cover_letter(sample_cover_letter):
    result = render_with_fpdf2(sample_cover_letter, LayoutOptions.for_cover_letter())
    assert result.page_count == 1


def test_fpdf2_bad_padding(sample_resume):
    with pytest.raises(RenderError):
        render_with_fpdf2(sample_resume, LayoutOptions(page_padding="0.5in wide"))


# ---------------------------------------------------------------------------
# PdfRenderer engine selection
# ---------------------------------------------------------------------------


def test_unknown_engine():
    with pytest.raises(ValueError, match="Unknown render engine"):
        PdfRenderer("latex")


async def test_fpdf2_engine_skips_weasyprint(sample_resume):
    with patch.object(pdf_renderer, "_render_weasyprint") as weasy:
        result = await PdfRenderer("fpdf2").render(sample_resume)
    weasy.assert_not_called()
    assert result.page_count == 1


def test_auto_falls_back_when_weasyprint_missing(sample_resume):
    with patch.object(pdf_renderer, "_render_weasyprint", side_effect=OSError("no pango")):
        result = PdfRenderer("auto").render_sync(sample_resume)
    assert result.pdf_bytes[:4] == b"%PDF"


def test_weasyprint_engine_does_not_fall_back(sample_resume):
    with patch.object(pdf_renderer, "_render_weasyprint", side_effect=ImportError("weasyprint")):
        with pytest.raises(RenderError, match="not available"):
            PdfRenderer("weasyprint").render_sync(sample_resume)


def test_weasyprint_failure_becomes_render_error(sample_resume):
    with patch.object(pdf_renderer, "_render_weasyprint", side_effect=ValueError("bad css")):
        with pytest.raises(RenderError, match="bad css"):
            PdfRenderer("auto").render_sync(sample_resume)


def test_default_layout_by_document_kind(sample_resume, sample_cover_letter):
    seen = []

    def fake(document, layout):
        seen.append(layout)
        return RenderResult(b"%PDF", 1)

    with patch.object(pdf_renderer, "_render_weasyprint", side_effect=fake):
        renderer = PdfRenderer()
        renderer.render_sync(sample_resume)
        renderer.render_sync(sample_cover_letter)

    assert seen == [LayoutOptions(), LayoutOptions.for_cover_letter()]
