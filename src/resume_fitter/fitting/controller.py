"""One-page fitting controller.

Renders the candidate, and while it spills past one page walks the stage
ladder in order. Every content change is repaired and re-validated before it
is rendered; a candidate that fails validation is skipped. The controller
ends in ``FITTED`` or, once the ladder is exhausted, ``BEST_EFFORT`` with the
last validated candidate. It never raises for a document that did not fit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from resume_fitter.errors import RenderError, ValidationFailed
from resume_fitter.evidence.repairer import repair_document
from resume_fitter.evidence.terms import with_recomputed_count
from resume_fitter.evidence.validator import validate_document
from resume_fitter.export.base import Renderer
from resume_fitter.fitting import transforms
from resume_fitter.fitting.ladder import (
    AggressiveLayout,
    DistillSection,
    MergeBullets,
    MinimalDocument,
    MinimumPadding,
    PruneBullets,
    ReduceFont,
    RemoveSections,
    Stage,
    StageKind,
    Truncation,
    resume_ladder,
)
from resume_fitter.models.document import Document, ResumeDocument
from resume_fitter.models.evidence import SourceCorpus
from resume_fitter.models.layout import LayoutOptions
from resume_fitter.models.validation import ValidationResult

logger = logging.getLogger(__name__)


class FitStatus(str, Enum):
    FITTED = "fitted"
    BEST_EFFORT = "best_effort"


@dataclass(frozen=True)
class Candidate:
    document: Document
    layout: LayoutOptions
    note: str = ""


@dataclass(frozen=True)
class FitAttempt:
    stage: StageKind | None  # None for the untouched input
    note: str
    page_count: int | None  # None when the renderer failed
    bullet_count: int | None


@dataclass
class FitResult:
    status: FitStatus
    document: Document
    layout: LayoutOptions
    page_count: int | None
    stage: StageKind | None
    render_calls: int
    attempts: list[FitAttempt] = field(default_factory=list)

    @property
    def fitted(self) -> bool:
        return self.status is FitStatus.FITTED


def _bullets(document: Document) -> int | None:
    return document.bullet_count() if isinstance(document, ResumeDocument) else None


class FittingController:
    """Drives a document through the fitting ladder until it fits one page."""

    def __init__(
        self,
        renderer: Renderer,
        corpus: SourceCorpus,
        *,
        ladder: tuple[Stage, ...] | None = None,
        case_sensitive: bool = True,
    ):
        self.renderer = renderer
        self.corpus = corpus
        self.ladder = ladder if ladder is not None else resume_ladder()
        self.case_sensitive = case_sensitive
        self._handlers = {
            StageKind.REDUCE_FONT: self._reduce_font,
            StageKind.PRUNE_BULLETS: self._prune_bullets,
            StageKind.AGGRESSIVE_LAYOUT: self._fixed_layout,
            StageKind.MERGE_BULLETS: self._merge_bullets,
            StageKind.REMOVE_SECTIONS: self._remove_sections,
            StageKind.MINIMUM_PADDING: self._fixed_layout,
            StageKind.TRUNCATION: self._truncation,
            StageKind.DISTILL_SECTION: self._distill_section,
            StageKind.MINIMAL_DOCUMENT: self._minimal_document,
        }

    async def fit(self, document: Document, layout: LayoutOptions | None = None) -> FitResult:
        """Fit ``document`` to one page without mutating it.

        Raises:
            ValidationFailed: the input itself cannot be repaired into a valid
                document, so there is nothing safe to fit.
        """
        layout = layout or LayoutOptions()
        entry, validation = self._prepare(document.model_copy(deep=True))
        if not validation.valid:
            raise ValidationFailed(validation.errors, "Input to fitting failed validation")

        self._render_calls = 0
        self._attempts: list[FitAttempt] = []

        current = Candidate(entry, layout, "input")
        pages = await self._measure(current, None)
        if pages is not None and pages <= 1:
            return self._result(FitStatus.FITTED, current, pages, None)

        last_pages = pages
        last_stage: StageKind | None = None
        for stage in self.ladder:
            if stage.destructive and not isinstance(current.document, ResumeDocument):
                logger.debug("Skipping %s: not applicable to %s", stage.kind.value,
                             type(current.document).__name__)
                continue
            logger.info("Fitting stage %s", stage.kind.value)
            for candidate in self._handlers[stage.kind](stage, current):
                current = candidate
                last_stage = stage.kind
                last_pages = await self._measure(candidate, stage.kind)
                if last_pages is not None and last_pages <= 1:
                    logger.info("Fitted at stage %s (%s)", stage.kind.value, candidate.note)
                    return self._result(FitStatus.FITTED, candidate, last_pages, stage.kind)

        logger.warning(
            "Could not fit to one page after %d render(s); returning best-effort result",
            self._render_calls,
        )
        return self._result(FitStatus.BEST_EFFORT, current, last_pages, last_stage)

    # -- validation -------------------------------------------------------

    def _prepare(self, document: Document) -> tuple[Document, ValidationResult]:
        repair_document(document, self.corpus)
        with_recomputed_count(document, case_sensitive=self.case_sensitive)
        return document, validate_document(document, self.corpus)

    def _accept(self, document: Document | None, note: str) -> Document | None:
        if document is None:
            return None
        document, validation = self._prepare(document)
        if not validation.valid:
            logger.warning(
                "Candidate '%s' failed validation, skipping: %s",
                note, [e.message for e in validation.errors],
            )
            return None
        return document

    # -- rendering --------------------------------------------------------

    async def _measure(self, candidate: Candidate, stage: StageKind | None) -> int | None:
        self._render_calls += 1
        try:
            result = await self.renderer.render(candidate.document, candidate.layout)
            pages = result.page_count
        except RenderError as exc:
            logger.warning("Render failed during %s (%s): %s",
                           stage.value if stage else "input", candidate.note, exc)
            pages = None
        logger.debug("Rendered %s (%s): %s page(s)",
                     stage.value if stage else "input", candidate.note, pages)
        self._attempts.append(FitAttempt(stage, candidate.note, pages, _bullets(candidate.document)))
        return pages

    def _result(
        self,
        status: FitStatus,
        candidate: Candidate,
        pages: int | None,
        stage: StageKind | None,
    ) -> FitResult:
        return FitResult(
            status=status,
            document=candidate.document,
            layout=candidate.layout,
            page_count=pages,
            stage=stage,
            render_calls=self._render_calls,
            attempts=list(self._attempts),
        )

    # -- stage handlers ---------------------------------------------------
    # Each handler yields validated candidates lazily; the driver stops
    # pulling as soon as one fits.

    def _reduce_font(self, stage: ReduceFont, current: Candidate) -> Iterator[Candidate]:
        for layout in stage.layouts():
            yield Candidate(current.document, layout, f"font={layout.body_font_size}")

    def _fixed_layout(
        self, stage: AggressiveLayout | MinimumPadding, current: Candidate
    ) -> Iterator[Candidate]:
        yield Candidate(current.document, stage.layout, stage.kind.value)

    def _prune_bullets(self, stage: PruneBullets, current: Candidate) -> Iterator[Candidate]:
        document = current.document
        while document.bullet_count() > stage.floor:
            for ref in transforms.rank_bullets(document, case_sensitive=self.case_sensitive):
                trial = self._accept(transforms.remove_bullet(document, ref), "prune")
                if trial is not None:
                    break
            else:
                return
            document = trial
            yield Candidate(document, stage.layout, f"pruned relevance={ref.relevance}")

    def _merge_bullets(self, stage: MergeBullets, current: Candidate) -> Iterator[Candidate]:
        document = current.document
        while True:
            merged = transforms.merge_least_relevant_pair(
                document, separator=stage.separator, case_sensitive=self.case_sensitive,
            )
            if merged is None:
                return
            trial = self._accept(merged, "merge")
            if trial is None:
                # Keep the unmerged snapshot; nothing else can make progress here.
                return
            document = trial
            yield Candidate(document, stage.layout, f"merged bullets={document.bullet_count()}")

    def _remove_sections(self, stage: RemoveSections, current: Candidate) -> Iterator[Candidate]:
        document = current.document
        while len(document.sections) > 1:
            order = transforms.section_removal_order(
                document, protected=stage.protected, case_sensitive=self.case_sensitive,
            )
            for idx in order:
                name = document.sections[idx].name
                trial = self._accept(transforms.remove_section(document, idx), "remove section")
                if trial is not None:
                    break
            else:
                return
            document = trial
            yield Candidate(document, stage.layout, f"removed section {name!r}")

    def _truncation(self, stage: Truncation, current: Candidate) -> Iterator[Candidate]:
        base = current.document
        for profile in stage.profiles:
            trial = self._accept(
                transforms.apply_truncation_profile(
                    base, profile, separator=stage.separator, case_sensitive=self.case_sensitive,
                ),
                profile.describe(),
            )
            if trial is not None:
                yield Candidate(trial, stage.layout, profile.describe())

    def _distill_section(self, stage: DistillSection, current: Candidate) -> Iterator[Candidate]:
        trial = self._accept(
            transforms.distill_single_section(
                current.document,
                section_name=stage.section_name,
                max_bullets=stage.max_bullets,
                case_sensitive=self.case_sensitive,
            ),
            "distill",
        )
        if trial is not None:
            yield Candidate(trial, stage.layout, f"distilled to {trial.sections[0].name!r}")

    def _minimal_document(self, stage: MinimalDocument, current: Candidate) -> Iterator[Candidate]:
        trial = self._accept(
            transforms.minimal_document(
                current.document,
                max_bullets=stage.max_bullets,
                char_budget=stage.char_budget,
                case_sensitive=self.case_sensitive,
            ),
            "minimal",
        )
        if trial is not None:
            yield Candidate(trial, stage.layout, "minimal document")
