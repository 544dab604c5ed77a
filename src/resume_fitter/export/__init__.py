"""PDF export and page counting for tailored documents."""
from resume_fitter.export.base import Renderer, RenderResult
from resume_fitter.export.pdf_renderer import (
    AVAILABLE_ENGINES,
    PdfRenderer,
    render_html,
)
from resume_fitter.export.snapshot import (
    CoverLetterSnapshot,
    DocumentSnapshot,
    ResumeSnapshot,
    load_snapshot,
    make_snapshot,
    save_snapshot,
)

__all__ = [
    "AVAILABLE_ENGINES",
    "CoverLetterSnapshot",
    "DocumentSnapshot",
    "PdfRenderer",
    "RenderResult",
    "Renderer",
    "ResumeSnapshot",
    "load_snapshot",
    "make_snapshot",
    "render_html",
    "save_snapshot",
]
