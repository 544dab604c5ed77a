"""Models for evidence validation results."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from resume_fitter.models.evidence import EvidenceSpan


class IssueKind(str, Enum):
    SOURCE_MISSING = "source_missing"
    SPAN_OUT_OF_BOUNDS = "span_out_of_bounds"
    MALFORMED_TERMS = "malformed_terms"
    INVALID_TERM_COUNT = "invalid_term_count"


class ValidationIssue(BaseModel):
    kind: IssueKind
    location: str  # e.g. "sections[0].items[1].bullets[2].evidence_spans[0]"
    message: str
    span: EvidenceSpan | None = None


class ValidationResult(BaseModel):
    valid: bool
    errors: list[ValidationIssue] = []

    def kinds(self) -> set[IssueKind]:
        return {e.kind for e in self.errors}
