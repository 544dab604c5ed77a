"""Matched-term aggregation and relevance scoring.

One case policy is applied everywhere: literal terms by default, or
lower-cased when ``case_sensitive`` is False.
"""

from __future__ import annotations

from typing import Iterable

from resume_fitter.models.document import Document, ResumeSection, Statement


def _key(term: str, case_sensitive: bool) -> str:
    return term if case_sensitive else term.casefold()


def distinct_terms(terms: Iterable[str], *, case_sensitive: bool = True) -> set[str]:
    return {_key(t, case_sensitive) for t in terms if isinstance(t, str) and t}


def relevance(statement: Statement, *, case_sensitive: bool = True) -> int:
    """Number of distinct matched terms attributed to a statement."""
    return len(distinct_terms(statement.matched_terms, case_sensitive=case_sensitive))


def section_relevance(section: ResumeSection, *, case_sensitive: bool = True) -> int:
    return sum(
        relevance(bullet, case_sensitive=case_sensitive)
        for item in section.items
        for bullet in item.bullets
    )


def recompute_matched_term_count(
    document: Document,
    *,
    case_sensitive: bool = True,
    ats_terms: Iterable[str] | None = None,
) -> int:
    """Size of the union of matched terms across all statements.

    When ``ats_terms`` is given, only terms from that list are counted.
    """
    union: set[str] = set()
    for _location, statement, _item in document.iter_statements():
        union |= distinct_terms(statement.matched_terms, case_sensitive=case_sensitive)
    if ats_terms is not None:
        union &= distinct_terms(ats_terms, case_sensitive=case_sensitive)
    return len(union)


def with_recomputed_count(document: Document, **kwargs) -> Document:
    """Set ``matched_term_count`` from the statements and return the document."""
    document.matched_term_count = recompute_matched_term_count(document, **kwargs)
    return document
