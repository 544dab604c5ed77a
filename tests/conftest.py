"""Shared test fixtures."""

from __future__ import annotations

from typing import Callable
from unittest.mock import AsyncMock

import pytest

from resume_fitter.errors import RenderError
from resume_fitter.export.base import RenderResult
from resume_fitter.models.document import (
    CoverLetterDocument,
    ResumeDocument,
    ResumeItem,
    ResumeSection,
    Statement,
)
from resume_fitter.models.evidence import EvidenceSpan, SourceCorpus, SourceName
from resume_fitter.models.layout import LayoutOptions
from resume_fitter.pipeline.generator import ClaudeGenerator

RESUME_TEXT = """Jordan Patel
jordan@example.com | 555-0100 | Austin, TX

Experience
Acme Corp - Senior Software Engineer (2020 - 2024)
- Built data pipelines using Python and Airflow processing 2TB daily
- Led migration of 40 services to Kubernetes on AWS
- Mentored five junior engineers through code review
- Reduced API latency by 35% with Redis caching

Beta Labs - Software Engineer (2017 - 2020)
- Developed REST APIs in Django for the billing platform
- Wrote integration tests with pytest, raising coverage to 85%

Education
State University - B.S. Computer Science (2013 - 2017)

Skills
Python, Django, Airflow, Kubernetes, AWS, Redis, PostgreSQL
"""

JD_TEXT = """Senior Backend Engineer
We are looking for an engineer with Python, Kubernetes and AWS experience.
You will build data pipelines and REST APIs for our platform team.
"""


def cite(text: str, fragment: str, source: SourceName = SourceName.RESUME) -> EvidenceSpan:
    start = text.index(fragment)
    return EvidenceSpan(source=source, start=start, end=start + len(fragment))


def statement(text: str, fragment: str, terms: list[str] | None = None) -> Statement:
    """A bullet citing ``fragment`` of the resume text."""
    return Statement(
        text=text,
        evidence_spans=[cite(RESUME_TEXT, fragment)],
        matched_terms=list(terms or []),
    )


class FakeRenderer:
    """Renderer double that records every call.

    ``pages`` is either a fixed page count or a callable of
    ``(document, layout)`` returning a page count or an exception to raise.
    """

    def __init__(self, pages: int | Callable = 1):
        self.pages = pages
        self.calls: list[tuple[object, LayoutOptions | None]] = []

    async def render(self, document, layout=None) -> RenderResult:
        self.calls.append((document.model_copy(deep=True), layout))
        result = self.pages(document, layout) if callable(self.pages) else self.pages
        if isinstance(result, Exception):
            raise result
        return RenderResult(pdf_bytes=b"%PDF-fake", page_count=result)


@pytest.fixture
def corpus() -> SourceCorpus:
    return SourceCorpus(resume=RESUME_TEXT, job_description=JD_TEXT)


@pytest.fixture
def sample_resume() -> ResumeDocument:
    return ResumeDocument(
        name="Jordan Patel",
        email="jordan@example.com",
        phone="555-0100",
        location="Austin, TX",
        summary="Backend engineer focused on data platforms.",
        sections=[
            ResumeSection(name="Experience", items=[
                ResumeItem(
                    title="Senior Software Engineer",
                    organization="Acme Corp",
                    dateRange="2020 - 2024",
                    bullets=[
                        statement(
                            "Built Python and Airflow data pipelines processing 2TB daily",
                            "Built data pipelines using Python and Airflow processing 2TB daily",
                            ["Python", "data pipelines"],
                        ),
                        statement(
                            "Led migration of 40 services to Kubernetes on AWS",
                            "Led migration of 40 services to Kubernetes on AWS",
                            ["Kubernetes", "AWS"],
                        ),
                        statement(
                            "Mentored five junior engineers through code review",
                            "Mentored five junior engineers through code review",
                        ),
                        statement(
                            "Reduced API latency by 35% with Redis caching",
                            "Reduced API latency by 35% with Redis caching",
                            ["Redis"],
                        ),
                    ],
                ),
                ResumeItem(
                    title="Software Engineer",
                    organization="Beta Labs",
                    dateRange="2017 - 2020",
                    bullets=[
                        statement(
                            "Developed Django REST APIs for the billing platform",
                            "Developed REST APIs in Django for the billing platform",
                            ["REST APIs", "Django"],
                        ),
                        statement(
                            "Raised test coverage to 85% with pytest integration tests",
                            "Wrote integration tests with pytest, raising coverage to 85%",
                        ),
                    ],
                ),
            ]),
            ResumeSection(name="Education", items=[
                ResumeItem(
                    title="B.S. Computer Science",
                    organization="State University",
                    dateRange="2013 - 2017",
                    bullets=[statement("B.S. Computer Science", "B.S. Computer Science")],
                ),
            ]),
            ResumeSection(name="Skills", items=[
                ResumeItem(bullets=[
                    statement(
                        "Python, Django, Airflow, Kubernetes, AWS, Redis, PostgreSQL",
                        "Python, Django, Airflow, Kubernetes, AWS, Redis, PostgreSQL",
                        ["Python", "Kubernetes", "AWS"],
                    ),
                ]),
            ]),
        ],
        matched_term_count=0,
    )


@pytest.fixture
def sample_cover_letter() -> CoverLetterDocument:
    return CoverLetterDocument(
        date="October 1, 2026",
        salutation="Dear Hiring Manager,",
        paragraphs=[
            statement(
                "At Acme Corp I built Python and Airflow data pipelines processing 2TB daily.",
                "Built data pipelines using Python and Airflow processing 2TB daily",
                ["Python", "data pipelines"],
            ),
            statement(
                "I also led the migration of 40 services to Kubernetes on AWS.",
                "Led migration of 40 services to Kubernetes on AWS",
                ["Kubernetes", "AWS"],
            ),
        ],
        closing="Sincerely,\nJordan Patel",
    )


@pytest.fixture
def big_resume() -> ResumeDocument:
    """Ten sections of four bullets each, all citing valid resume spans."""
    fragments = [
        ("Built data pipelines using Python and Airflow processing 2TB daily", ["Python"]),
        ("Led migration of 40 services to Kubernetes on AWS", ["Kubernetes", "AWS"]),
        ("Mentored five junior engineers through code review", []),
        ("Reduced API latency by 35% with Redis caching", ["Redis"]),
    ]
    sections = []
    for si in range(10):
        bullets = [statement(f"{frag} ({si}.{bi})", frag, terms) for bi, (frag, terms) in enumerate(fragments)]
        sections.append(ResumeSection(
            name=f"Section {si}",
            items=[ResumeItem(title=f"Role {si}", organization="Acme Corp", bullets=bullets)],
        ))
    return ResumeDocument(name="Jordan Patel", email="jordan@example.com", sections=sections)


@pytest.fixture
def make_renderer() -> Callable[..., FakeRenderer]:
    return FakeRenderer


@pytest.fixture
def render_error() -> RenderError:
    return RenderError("engine unavailable")


@pytest.fixture
def mock_generator() -> ClaudeGenerator:
    """Generator mock; tests set return values or side effects per method."""
    return AsyncMock(spec=ClaudeGenerator)
