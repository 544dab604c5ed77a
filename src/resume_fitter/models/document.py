"""Pydantic models for generated resumes and cover letters."""

from __future__ import annotations

from datetime import date
from typing import Iterator, Union

from pydantic import BaseModel, ConfigDict, Field

from resume_fitter.models.evidence import EvidenceSpan


class Statement(BaseModel):
    """A resume bullet or a cover-letter paragraph with its evidence."""

    text: str
    evidence_spans: list[EvidenceSpan] = []
    matched_terms: list[str] = []


class ResumeItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    organization: str | None = None
    location: str | None = None
    date_range: str | None = Field(default=None, alias="dateRange")
    bullets: list[Statement] = []


class ResumeSection(BaseModel):
    name: str  # Education, Experience, Projects, Skills, Leadership, ...
    items: list[ResumeItem] = []

    def bullet_count(self) -> int:
        return sum(len(item.bullets) for item in self.items)


class ResumeDocument(BaseModel):
    name: str = ""
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    links: list[str] = []
    summary: str | None = None
    sections: list[ResumeSection] = []
    matched_term_count: int = 0

    def iter_statements(self) -> Iterator[tuple[str, Statement, ResumeItem]]:
        """Yield ``(location, bullet, owning item)`` in document order."""
        for si, section in enumerate(self.sections):
            for ii, item in enumerate(section.items):
                for bi, bullet in enumerate(item.bullets):
                    yield f"sections[{si}].items[{ii}].bullets[{bi}]", bullet, item

    def bullet_count(self) -> int:
        return sum(section.bullet_count() for section in self.sections)


def _today() -> str:
    return date.today().strftime("%B %d, %Y")


class CoverLetterDocument(BaseModel):
    date: str = Field(default_factory=_today)
    salutation: str = "Dear Hiring Manager,"
    paragraphs: list[Statement] = []
    closing: str = "Sincerely,"
    matched_term_count: int = 0

    def iter_statements(self) -> Iterator[tuple[str, Statement, None]]:
        for pi, paragraph in enumerate(self.paragraphs):
            yield f"paragraphs[{pi}]", paragraph, None


Document = Union[ResumeDocument, CoverLetterDocument]
