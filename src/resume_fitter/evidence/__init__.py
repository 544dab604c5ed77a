"""Evidence span validation, repair and term aggregation."""

from resume_fitter.evidence.repairer import repair_document
from resume_fitter.evidence.terms import recompute_matched_term_count, relevance
from resume_fitter.evidence.validator import validate_document

__all__ = [
    "recompute_matched_term_count",
    "relevance",
    "repair_document",
    "validate_document",
]
