"""Generation/retry pipeline - generate, ground, condense, then fit to one page."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from resume_fitter.config import AppConfig
from resume_fitter.errors import GenerationError, RenderError, ValidationFailed
from resume_fitter.evidence.repairer import repair_document
from resume_fitter.evidence.terms import with_recomputed_count
from resume_fitter.evidence.validator import validate_document
from resume_fitter.export.base import Renderer
from resume_fitter.fitting.controller import FitResult, FitStatus, FittingController
from resume_fitter.fitting.ladder import StageKind, cover_letter_ladder, resume_ladder
from resume_fitter.fitting.transforms import strip_summary
from resume_fitter.models.document import CoverLetterDocument, Document, ResumeDocument
from resume_fitter.models.evidence import SourceCorpus
from resume_fitter.models.layout import LayoutOptions
from resume_fitter.pipeline.generator import DocumentGenerator

logger = logging.getLogger(__name__)

OVERFLOW_HINT = (
    "Rendered PDF is {pages} pages. Compress to a single page while preserving "
    "JD-matching facts."
)
RENDER_FAILED_HINT = "PDF rendering failed; please produce a concise one-page {kind}"


@dataclass
class TailoringResult:
    """Complete result from the tailoring pipeline."""

    document: Document
    layout: LayoutOptions
    status: FitStatus
    page_count: int | None
    stage: StageKind | None = None
    generator_calls: int = 0
    render_calls: int = 0
    elapsed_seconds: float = 0.0
    metadata: dict = field(default_factory=dict)

    @property
    def best_effort(self) -> bool:
        return self.status is FitStatus.BEST_EFFORT


class TailoringOrchestrator:
    """Coordinates the generator, evidence checks and the fitting ladder.

    The generator and renderer are injected; their lifecycles belong to the
    caller.
    """

    def __init__(
        self,
        generator: DocumentGenerator,
        renderer: Renderer,
        *,
        config: AppConfig | None = None,
    ):
        self.generator = generator
        self.renderer = renderer
        self.config = config or AppConfig()
        self._generator_calls = 0

    # -- public entry points ----------------------------------------------

    async def tailor_resume(
        self,
        corpus: SourceCorpus,
        ats_terms: list[str],
        *,
        on_phase: Callable[[str, str], None] | None = None,
    ) -> TailoringResult:
        force = self.config.generation.force_one_page

        def generate(hint: str | None = None) -> Awaitable[ResumeDocument]:
            return self.generator.generate_resume(
                corpus, ats_terms, force_one_page=force or hint is not None, hint=hint,
            )

        return await self._run(corpus, generate, "resume", on_phase)

    async def tailor_cover_letter(
        self,
        corpus: SourceCorpus,
        ats_terms: list[str],
        *,
        on_phase: Callable[[str, str], None] | None = None,
    ) -> TailoringResult:
        force = self.config.generation.force_one_page

        def generate(hint: str | None = None) -> Awaitable[CoverLetterDocument]:
            return self.generator.generate_cover_letter(
                corpus, ats_terms, force_one_page=force or hint is not None, hint=hint,
            )

        return await self._run(corpus, generate, "cover letter", on_phase)

    async def revise_resume(
        self,
        corpus: SourceCorpus,
        ats_terms: list[str],
        current: ResumeDocument,
        suggestions: str,
        *,
        on_phase: Callable[[str, str], None] | None = None,
    ) -> TailoringResult:
        """Regenerate a resume from user suggestions, then ground and fit it."""
        suggestions = _require_suggestions(suggestions)

        def generate(hint: str | None = None) -> Awaitable[ResumeDocument]:
            if hint is None:
                return self.generator.revise_resume(corpus, ats_terms, current, suggestions)
            return self.generator.generate_resume(
                corpus, ats_terms, force_one_page=True, hint=f"{suggestions}\n{hint}",
            )

        return await self._run(corpus, generate, "resume", on_phase)

    async def revise_cover_letter(
        self,
        corpus: SourceCorpus,
        ats_terms: list[str],
        current: CoverLetterDocument,
        suggestions: str,
        *,
        on_phase: Callable[[str, str], None] | None = None,
    ) -> TailoringResult:
        suggestions = _require_suggestions(suggestions)

        def generate(hint: str | None = None) -> Awaitable[CoverLetterDocument]:
            if hint is None:
                return self.generator.revise_cover_letter(corpus, ats_terms, current, suggestions)
            return self.generator.generate_cover_letter(
                corpus, ats_terms, force_one_page=True, hint=f"{suggestions}\n{hint}",
            )

        return await self._run(corpus, generate, "cover letter", on_phase)

    # -- pipeline ---------------------------------------------------------

    async def _run(
        self,
        corpus: SourceCorpus,
        generate: Callable[..., Awaitable[Document]],
        kind: str,
        on_phase: Callable[[str, str], None] | None,
    ) -> TailoringResult:
        start = time.monotonic()
        self._generator_calls = 0

        def _notify(phase: str, detail: str = "") -> None:
            if on_phase:
                on_phase(phase, detail)

        _notify("generate", f"Generating {kind}")
        document = await self._generate_with_retry(generate)

        _notify("validate", "Checking evidence spans")
        document = self._accept(document, corpus)

        _notify("render", "Checking page count")
        document, layout, pages, render_calls = await self._condense(document, corpus, generate, kind)

        if pages is not None and pages <= 1:
            status, stage = FitStatus.FITTED, None
        else:
            _notify("fit", "Fitting to one page")
            fit = await self._fit(document, corpus, layout)
            document, layout, pages, stage, status = (
                fit.document, fit.layout, fit.page_count, fit.stage, fit.status,
            )
            render_calls += fit.render_calls

        elapsed = time.monotonic() - start
        _notify("done", f"{status.value}: {pages} page(s) in {elapsed:.1f}s")

        return TailoringResult(
            document=document,
            layout=layout,
            status=status,
            page_count=pages,
            stage=stage,
            generator_calls=self._generator_calls,
            render_calls=render_calls,
            elapsed_seconds=elapsed,
            metadata={"kind": kind},
        )

    async def _generate_with_retry(self, generate: Callable[..., Awaitable[Document]], *args):
        """Call the generator a bounded number of times with a fixed backoff."""
        gen = self.config.generation
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(gen.max_attempts),
            wait=wait_fixed(gen.backoff_seconds),
            retry=retry_if_exception_type(GenerationError),
            reraise=True,
        ):
            with attempt:
                n = attempt.retry_state.attempt_number
                self._generator_calls += 1
                logger.info("Generator attempt %d/%d", n, gen.max_attempts)
                try:
                    return await generate(*args)
                except GenerationError:
                    logger.error("Generator attempt %d failed", n, exc_info=True)
                    raise

    def _accept(self, document: Document, corpus: SourceCorpus) -> Document:
        """Repair, recount and validate a generated document.

        Raises:
            ValidationFailed: spans remain invalid after repair.
        """
        if isinstance(document, ResumeDocument) and not self.config.generation.include_summary:
            document = strip_summary(document)
        repair_document(document, corpus)
        with_recomputed_count(document, case_sensitive=self.config.matching.case_sensitive)
        validation = validate_document(document, corpus)
        if not validation.valid:
            logger.warning("Validation errors: %s", [e.message for e in validation.errors])
            raise ValidationFailed(validation.errors, "Generated document failed validation")
        return document

    async def _condense(
        self,
        document: Document,
        corpus: SourceCorpus,
        generate: Callable[..., Awaitable[Document]],
        kind: str,
    ) -> tuple[Document, LayoutOptions, int | None, int]:
        """Render, and regenerate with a one-page hint while it overflows."""
        layout = (
            LayoutOptions.for_cover_letter()
            if isinstance(document, CoverLetterDocument) else LayoutOptions()
        )
        attempts = self.config.generation.condense_attempts
        pages: int | None = None
        render_calls = 0

        for attempt in range(attempts):
            render_calls += 1
            try:
                pages = (await self.renderer.render(document, layout)).page_count
            except RenderError as exc:
                logger.warning("Render failed on attempt %d: %s", attempt + 1, exc)
                pages = None
                hint = RENDER_FAILED_HINT.format(kind=kind)
            else:
                if pages <= 1:
                    break
                hint = OVERFLOW_HINT.format(pages=pages)

            if attempt == attempts - 1:
                break
            logger.info("Regenerating with hint: %s", hint)
            try:
                candidate = await self._generate_with_retry(generate, hint)
            except GenerationError as exc:
                logger.warning("Condensation stopped, generator failed: %s", exc)
                break
            try:
                document = self._accept(candidate, corpus)
            except ValidationFailed as exc:
                # The previous candidate is unchanged and already measured.
                logger.warning("Condensation stopped, validation errors: %s",
                               [e.message for e in exc.errors])
                break

        return document, layout, pages, render_calls

    async def _fit(
        self,
        document: Document,
        corpus: SourceCorpus,
        layout: LayoutOptions,
    ) -> FitResult:
        fitting = self.config.fitting
        ladder = (
            resume_ladder(fitting) if isinstance(document, ResumeDocument)
            else cover_letter_ladder(fitting)
        )
        controller = FittingController(
            self.renderer,
            corpus,
            ladder=ladder,
            case_sensitive=self.config.matching.case_sensitive,
        )
        return await controller.fit(document, layout)


def _require_suggestions(suggestions: str) -> str:
    if not suggestions or not suggestions.strip():
        raise ValueError("suggestions are required")
    return suggestions.strip()
