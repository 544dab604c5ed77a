from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup

from resume_fitter.errors import RenderError
from resume_fitter.export.base import RenderResult
from resume_fitter.export.pdf_fallback import parse_padding, render_with_fpdf2
from resume_fitter.models.document import CoverLetterDocument, Document, ResumeDocument
from resume_fitter.models.layout import LayoutOptions

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"

AVAILABLE_ENGINES = ("auto", "weasyprint", "fpdf2")


def default_layout(document: Document) -> LayoutOptions:
    if isinstance(document, CoverLetterDocument):
        return LayoutOptions.for_cover_letter()
    return LayoutOptions()


def _page_css(layout: LayoutOptions) -> str:
    """Page box and base typography for one layout."""
    top, right, bottom, left = parse_padding(layout.page_padding)
    return (
        f"@page {{ size: Letter; margin: {top:g}pt {right:g}pt {bottom:g}pt {left:g}pt; }}\n"
        f"    body {{ font-size: {layout.body_font_size:g}pt; line-height: {layout.line_height:g}; }}"
    )


def render_html(document: Document, layout: LayoutOptions | None = None) -> str:
    """Render a resume or cover letter to print-ready HTML."""
    layout = layout or default_layout(document)
    page_css = _page_css(layout)
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=True,
    )
    name = "resume.html" if isinstance(document, ResumeDocument) else "cover_letter.html"
    template = env.get_template(name)
    return template.render(doc=document, layout=layout, page_css=Markup(page_css))


def _render_weasyprint(document: Document, layout: LayoutOptions) -> RenderResult:
    from weasyprint import HTML

    rendered = HTML(string=render_html(document, layout)).render()
    return RenderResult(pdf_bytes=rendered.write_pdf(), page_count=len(rendered.pages))


class PdfRenderer:
    """Renderer backed by WeasyPrint, with the fpdf2 engine as fallback."""

    def __init__(self, engine: str = "auto"):
        if engine not in AVAILABLE_ENGINES:
            raise ValueError(f"Unknown render engine: {engine!r}")
        self.engine = engine

    async def render(
        self,
        document: Document,
        layout: LayoutOptions | None = None,
    ) -> RenderResult:
        return await asyncio.to_thread(self.render_sync, document, layout)

    def render_sync(
        self,
        document: Document,
        layout: LayoutOptions | None = None,
    ) -> RenderResult:
        layout = layout or default_layout(document)
        if self.engine == "fpdf2":
            return render_with_fpdf2(document, layout)
        try:
            return _render_weasyprint(document, layout)
        except (ImportError, OSError) as exc:
            if self.engine == "weasyprint":
                raise RenderError(f"WeasyPrint not available: {exc}") from exc
            logger.warning("WeasyPrint not available, using fpdf2 fallback")
            return render_with_fpdf2(document, layout)
        except RenderError:
            raise
        except Exception as exc:
            raise RenderError(f"WeasyPrint rendering failed: {exc}") from exc
