"""Renderer contract shared by the fitting controller and the PDF engines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from resume_fitter.models.document import Document
from resume_fitter.models.layout import LayoutOptions


@dataclass
class RenderResult:
    pdf_bytes: bytes
    page_count: int


class Renderer(Protocol):
    async def render(
        self,
        document: Document,
        layout: LayoutOptions | None = None,
    ) -> RenderResult:
        """Paginate ``document``; raise RenderError when that is impossible."""
        ...
