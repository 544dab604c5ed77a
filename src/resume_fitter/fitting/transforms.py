"""Pure document transforms used by the one-page fitting ladder.

Every function returns a new document and leaves its input untouched, so a
stage can always fall back to the snapshot it started from.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

from resume_fitter.evidence.terms import relevance, section_relevance
from resume_fitter.models.document import ResumeDocument, ResumeItem, ResumeSection, Statement

ELLIPSIS = "…"


class BulletRef(NamedTuple):
    section: int
    item: int
    bullet: int
    relevance: int


def rank_bullets(document: ResumeDocument, *, case_sensitive: bool = True) -> list[BulletRef]:
    """All bullets, least relevant first; ties keep document order."""
    refs = [
        BulletRef(si, ii, bi, relevance(bullet, case_sensitive=case_sensitive))
        for si, section in enumerate(document.sections)
        for ii, item in enumerate(section.items)
        for bi, bullet in enumerate(item.bullets)
    ]
    return sorted(refs, key=lambda r: r.relevance)


def remove_bullet(document: ResumeDocument, ref: BulletRef) -> ResumeDocument:
    result = document.model_copy(deep=True)
    del result.sections[ref.section].items[ref.item].bullets[ref.bullet]
    return result


def merge_statements(first: Statement, second: Statement, separator: str = "; ") -> Statement:
    """Concatenate two bullets, keeping all of their evidence and terms."""
    terms = list(dict.fromkeys([*first.matched_terms, *second.matched_terms]))
    return Statement(
        text=f"{first.text}{separator}{second.text}".strip(),
        evidence_spans=[s.model_copy() for s in (*first.evidence_spans, *second.evidence_spans)],
        matched_terms=terms,
    )


def merge_least_relevant_pair(
    document: ResumeDocument,
    *,
    separator: str = "; ",
    case_sensitive: bool = True,
) -> ResumeDocument | None:
    """Merge the two weakest bullets of the weakest multi-bullet item.

    Returns None when no item has two bullets left to merge.
    """
    candidates = []
    for si, section in enumerate(document.sections):
        for ii, item in enumerate(section.items):
            if len(item.bullets) >= 2:
                total = sum(relevance(b, case_sensitive=case_sensitive) for b in item.bullets)
                candidates.append((total, si, ii))
    if not candidates:
        return None

    _, si, ii = min(candidates, key=lambda c: c[0])
    result = document.model_copy(deep=True)
    bullets = result.sections[si].items[ii].bullets
    ranked = sorted(
        range(len(bullets)),
        key=lambda idx: relevance(bullets[idx], case_sensitive=case_sensitive),
    )
    first, second = sorted(ranked[:2])
    merged = merge_statements(bullets[first], bullets[second], separator)
    del bullets[second]
    bullets[first] = merged
    return result


def section_removal_order(
    document: ResumeDocument,
    *,
    protected: tuple[str, ...] = ("Experience", "Education"),
    case_sensitive: bool = True,
) -> list[int]:
    """Section indices in the order they should be dropped.

    Unprotected sections go first, lowest relevance first; protected ones
    only follow once nothing else is left. A section with no bullets left is
    never protected and goes before a non-empty one of equal relevance.
    """
    protected_names = {p.casefold() for p in protected}

    def key(idx: int) -> tuple[int, int, int]:
        section = document.sections[idx]
        has_bullets = 1 if section.bullet_count() else 0
        is_protected = has_bullets if section.name.strip().casefold() in protected_names else 0
        return is_protected, section_relevance(section, case_sensitive=case_sensitive), has_bullets

    return sorted(range(len(document.sections)), key=key)


def remove_section(document: ResumeDocument, index: int) -> ResumeDocument:
    result = document.model_copy(deep=True)
    del result.sections[index]
    return result


def truncate_text(text: str, budget: int) -> str:
    """Cut ``text`` to at most ``budget`` characters, preferring a word break."""
    text = text.strip()
    if len(text) <= budget:
        return text
    cut = text[: max(budget - 1, 1)]
    space = cut.rfind(" ")
    if space >= budget // 2:
        cut = cut[:space]
    return cut.rstrip(" ,;:-") + ELLIPSIS


def top_statements(
    statements: list[Statement],
    limit: int,
    *,
    case_sensitive: bool = True,
) -> list[Statement]:
    """The ``limit`` most relevant statements, returned in their original order."""
    ranked = sorted(
        range(len(statements)),
        key=lambda idx: -relevance(statements[idx], case_sensitive=case_sensitive),
    )
    keep = sorted(ranked[:limit])
    return [statements[idx] for idx in keep]


@dataclass(frozen=True)
class TruncationProfile:
    """One rung of the deterministic truncation ladder."""

    max_bullets_per_item: int | None = None
    max_chars: int | None = None
    merge_items: bool = False
    top_sections: int | None = None

    def describe(self) -> str:
        parts = []
        if self.max_bullets_per_item is not None:
            parts.append(f"cap={self.max_bullets_per_item}")
        if self.max_chars is not None:
            parts.append(f"chars={self.max_chars}")
        if self.merge_items:
            parts.append("merge")
        if self.top_sections is not None:
            parts.append(f"top_sections={self.top_sections}")
        return ",".join(parts) or "identity"


def apply_truncation_profile(
    document: ResumeDocument,
    profile: TruncationProfile,
    *,
    separator: str = "; ",
    case_sensitive: bool = True,
) -> ResumeDocument:
    result = document.model_copy(deep=True)

    if profile.top_sections is not None and len(result.sections) > profile.top_sections:
        ranked = sorted(
            range(len(result.sections)),
            key=lambda idx: -section_relevance(result.sections[idx], case_sensitive=case_sensitive),
        )
        keep = sorted(ranked[: profile.top_sections])
        result.sections = [result.sections[idx] for idx in keep]

    for section in result.sections:
        for item in section.items:
            bullets = item.bullets
            if profile.max_bullets_per_item is not None and len(bullets) > profile.max_bullets_per_item:
                bullets = top_statements(
                    bullets, profile.max_bullets_per_item, case_sensitive=case_sensitive
                )
            if profile.merge_items and len(bullets) > 1:
                merged = bullets[0]
                for other in bullets[1:]:
                    merged = merge_statements(merged, other, separator)
                bullets = [merged]
            if profile.max_chars is not None:
                for bullet in bullets:
                    bullet.text = truncate_text(bullet.text, profile.max_chars)
            item.bullets = bullets
    return result


def distill_single_section(
    document: ResumeDocument,
    *,
    section_name: str = "Experience",
    max_bullets: int = 5,
    case_sensitive: bool = True,
) -> ResumeDocument | None:
    """Keep one section with its best bullets gathered under a single item."""
    if not document.sections:
        return None
    wanted = section_name.strip().casefold()
    section = next(
        (s for s in document.sections if s.name.strip().casefold() == wanted),
        document.sections[0],
    )
    bullets = [b for item in section.items for b in item.bullets]
    kept = top_statements(bullets, max_bullets, case_sensitive=case_sensitive)
    result = document.model_copy(deep=True, update={"summary": None})
    result.sections = [ResumeSection(
        name=section.name,
        items=[ResumeItem(bullets=[b.model_copy(deep=True) for b in kept])],
    )]
    return result


def minimal_document(
    document: ResumeDocument,
    *,
    max_bullets: int = 5,
    char_budget: int = 120,
    section_name: str = "Experience",
    case_sensitive: bool = True,
) -> ResumeDocument:
    """Name plus a handful of short, high-relevance bullets."""
    bullets = [b for _loc, b, _item in document.iter_statements()]
    kept = top_statements(bullets, max_bullets, case_sensitive=case_sensitive)
    trimmed = []
    for bullet in kept:
        copy = bullet.model_copy(deep=True)
        copy.text = truncate_text(copy.text, char_budget)
        trimmed.append(copy)
    sections = []
    if trimmed:
        name = document.sections[0].name if len(document.sections) == 1 else section_name
        sections.append(ResumeSection(name=name, items=[ResumeItem(bullets=trimmed)]))
    return ResumeDocument(name=document.name, sections=sections)


def strip_summary(document: ResumeDocument) -> ResumeDocument:
    return document.model_copy(deep=True, update={"summary": None})
