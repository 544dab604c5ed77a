"""Data models for evidence-grounded documents."""

from resume_fitter.models.document import (
    CoverLetterDocument,
    Document,
    ResumeDocument,
    ResumeItem,
    ResumeSection,
    Statement,
)
from resume_fitter.models.evidence import EvidenceSpan, SourceCorpus, SourceName
from resume_fitter.models.layout import LayoutOptions
from resume_fitter.models.validation import IssueKind, ValidationIssue, ValidationResult

__all__ = [
    "CoverLetterDocument",
    "Document",
    "EvidenceSpan",
    "IssueKind",
    "LayoutOptions",
    "ResumeDocument",
    "ResumeItem",
    "ResumeSection",
    "SourceCorpus",
    "SourceName",
    "Statement",
    "ValidationIssue",
    "ValidationResult",
]
