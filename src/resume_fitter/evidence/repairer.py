"""Best-effort repair of evidence spans the validator would reject.

Strategies run from most to least faithful and stop at the first hit:
exact text match, prefix match, matched-term anchor, then a clamped span
near the old position. The clamp always succeeds, so a repairable span never
stays invalid; spans whose source is missing are left alone.
"""

from __future__ import annotations

import logging

from resume_fitter.models.document import Document, ResumeItem, Statement
from resume_fitter.models.evidence import EvidenceSpan, SourceCorpus

logger = logging.getLogger(__name__)

PREFIX_MIN_LENGTH = 10
PREFIX_LENGTH = 30
MAX_SPAN_LENGTH = 400
MIN_SPAN_LENGTH = 20
TERM_CONTEXT = 20
DEFAULT_SPAN_LENGTH = 100


def _exact(needle: str, source: str) -> tuple[int, int] | None:
    if not needle:
        return None
    idx = source.find(needle)
    if idx < 0:
        return None
    return idx, idx + len(needle)


def _prefix(needle: str, source: str) -> tuple[int, int] | None:
    if len(needle) <= PREFIX_MIN_LENGTH:
        return None
    idx = source.find(needle[:PREFIX_LENGTH])
    if idx < 0:
        return None
    return idx, min(len(source), idx + min(len(needle), MAX_SPAN_LENGTH))


def _term_anchor(terms: list[str], source: str) -> tuple[int, int] | None:
    for term in terms:
        if not isinstance(term, str) or not term:
            continue
        idx = source.find(term)
        if idx >= 0:
            return (
                max(0, idx - TERM_CONTEXT),
                min(len(source), idx + len(term) + TERM_CONTEXT),
            )
    return None


def _clamp(span: EvidenceSpan, source: str) -> tuple[int, int] | None:
    width = span.end - span.start
    desired = max(MIN_SPAN_LENGTH, min(width if width > 0 else DEFAULT_SPAN_LENGTH, MAX_SPAN_LENGTH))
    new_end = min(len(source), span.end if span.end > 0 else len(source))
    new_start = new_end - desired
    if new_start < 0:
        # Not enough room behind the old end; grow forward from the start.
        new_start = 0
        new_end = min(len(source), desired)
    if new_start >= new_end:
        return None
    return new_start, new_end


def repair_span(
    span: EvidenceSpan,
    source: str,
    needle: str,
    terms: list[str],
) -> str | None:
    """Relocate one invalid span in place.

    Returns the name of the strategy that succeeded, or None if the span was
    already valid or could not be moved.
    """
    if span.is_valid_for(source):
        return None

    strategies = (
        ("exact", lambda: _exact(needle, source)),
        ("prefix", lambda: _prefix(needle, source)),
        ("term", lambda: _term_anchor(terms, source)),
        ("clamp", lambda: _clamp(span, source)),
    )
    for name, strategy in strategies:
        bounds = strategy()
        if bounds is None:
            continue
        span.start, span.end = bounds
        span.resolved_text = source[span.start:span.end]
        return name
    return None


def _needle_for(statement: Statement, item: ResumeItem | None) -> str:
    text = (statement.text or "").strip()
    if not text and item is not None and item.title:
        text = item.title.strip()
    return text


def repair_document(document: Document, corpus: SourceCorpus) -> bool:
    """Repair every invalid span of a candidate document in place.

    Returns True when at least one span changed, so callers know to re-run
    the validator.
    """
    changed = False
    for location, statement, item in document.iter_statements():
        needle = _needle_for(statement, item)
        terms = statement.matched_terms if isinstance(statement.matched_terms, list) else []
        for i, span in enumerate(statement.evidence_spans):
            source = corpus.text_for(span.source)
            if source is None:
                continue
            before = (span.start, span.end)
            strategy = repair_span(span, source, needle, terms)
            if strategy is not None:
                changed = True
                logger.debug(
                    "Repaired %s.evidence_spans[%d] via %s: %s -> %s",
                    location, i, strategy, before, (span.start, span.end),
                )
    return changed
