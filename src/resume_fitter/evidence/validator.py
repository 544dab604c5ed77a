"""Evidence span validation - the anti-hallucination check."""

from __future__ import annotations

from resume_fitter.models.document import Document, Statement
from resume_fitter.models.evidence import EvidenceSpan, SourceCorpus
from resume_fitter.models.validation import IssueKind, ValidationIssue, ValidationResult


def validate_spans(
    spans: list[EvidenceSpan],
    corpus: SourceCorpus,
    location: str = "evidence_spans",
) -> list[ValidationIssue]:
    """Check each span against its source text.

    Valid spans get ``resolved_text`` filled in; invalid ones are reported and
    left untouched.
    """
    issues: list[ValidationIssue] = []
    for i, span in enumerate(spans):
        where = f"{location}[{i}]"
        source_text = corpus.text_for(span.source)
        if source_text is None:
            issues.append(ValidationIssue(
                kind=IssueKind.SOURCE_MISSING,
                location=where,
                message=f"Source '{span.source.value}' not provided",
                span=span.model_copy(),
            ))
            continue
        if not span.is_valid_for(source_text):
            issues.append(ValidationIssue(
                kind=IssueKind.SPAN_OUT_OF_BOUNDS,
                location=where,
                message=(
                    f"Invalid character offsets: {span.start}-{span.end} "
                    f"(source length: {len(source_text)})"
                ),
                span=span.model_copy(),
            ))
            continue
        span.resolved_text = source_text[span.start:span.end]
    return issues


def _check_terms(statement: Statement, location: str) -> list[ValidationIssue]:
    terms = statement.matched_terms
    if not isinstance(terms, (list, tuple, set, frozenset)):
        return [ValidationIssue(
            kind=IssueKind.MALFORMED_TERMS,
            location=f"{location}.matched_terms",
            message="matched_terms must be a collection of strings",
        )]
    bad = [t for t in terms if not isinstance(t, str)]
    if bad:
        return [ValidationIssue(
            kind=IssueKind.MALFORMED_TERMS,
            location=f"{location}.matched_terms",
            message=f"matched_terms contains non-string values: {bad[:3]!r}",
        )]
    return []


def validate_document(document: Document, corpus: SourceCorpus) -> ValidationResult:
    """Validate every statement of a resume or cover letter.

    Returns all issues at once rather than stopping at the first one.
    """
    errors: list[ValidationIssue] = []
    for location, statement, _item in document.iter_statements():
        errors.extend(validate_spans(
            statement.evidence_spans, corpus, f"{location}.evidence_spans"
        ))
        errors.extend(_check_terms(statement, location))

    count = document.matched_term_count
    if not isinstance(count, int) or isinstance(count, bool) or count < 0:
        errors.append(ValidationIssue(
            kind=IssueKind.INVALID_TERM_COUNT,
            location="matched_term_count",
            message="matched_term_count must be a non-negative integer",
        ))

    return ValidationResult(valid=not errors, errors=errors)
