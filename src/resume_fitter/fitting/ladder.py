"""Stage definitions for the one-page fitting ladder.

Each stage is a small frozen record tagged with a ``StageKind``; the
controller dispatches on the kind, so a ladder is just an ordered tuple of
these records and can be built, reordered or trimmed in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from resume_fitter.config import FittingConfig
from resume_fitter.fitting.transforms import TruncationProfile
from resume_fitter.models.layout import AGGRESSIVE_LAYOUT, MINIMUM_LAYOUT, LayoutOptions

PRUNE_LAYOUT = LayoutOptions(body_font_size=8)


class StageKind(str, Enum):
    REDUCE_FONT = "reduce_font"
    PRUNE_BULLETS = "prune_bullets"
    AGGRESSIVE_LAYOUT = "aggressive_layout"
    MERGE_BULLETS = "merge_bullets"
    REMOVE_SECTIONS = "remove_sections"
    MINIMUM_PADDING = "minimum_padding"
    TRUNCATION = "truncation"
    DISTILL_SECTION = "distill_section"
    MINIMAL_DOCUMENT = "minimal_document"


@dataclass(frozen=True)
class ReduceFont:
    kind: ClassVar[StageKind] = StageKind.REDUCE_FONT
    destructive: ClassVar[bool] = False
    font_sizes: tuple[float, ...] = (9, 8)
    base: LayoutOptions = LayoutOptions()

    def layouts(self) -> list[LayoutOptions]:
        return [self.base.model_copy(update={"body_font_size": size}) for size in self.font_sizes]


@dataclass(frozen=True)
class PruneBullets:
    kind: ClassVar[StageKind] = StageKind.PRUNE_BULLETS
    destructive: ClassVar[bool] = True
    layout: LayoutOptions = PRUNE_LAYOUT
    floor: int = 1


@dataclass(frozen=True)
class AggressiveLayout:
    kind: ClassVar[StageKind] = StageKind.AGGRESSIVE_LAYOUT
    destructive: ClassVar[bool] = False
    layout: LayoutOptions = AGGRESSIVE_LAYOUT


@dataclass(frozen=True)
class MergeBullets:
    kind: ClassVar[StageKind] = StageKind.MERGE_BULLETS
    destructive: ClassVar[bool] = True
    layout: LayoutOptions = AGGRESSIVE_LAYOUT
    separator: str = "; "


@dataclass(frozen=True)
class RemoveSections:
    kind: ClassVar[StageKind] = StageKind.REMOVE_SECTIONS
    destructive: ClassVar[bool] = True
    layout: LayoutOptions = PRUNE_LAYOUT
    protected: tuple[str, ...] = ("Experience", "Education")


@dataclass(frozen=True)
class MinimumPadding:
    kind: ClassVar[StageKind] = StageKind.MINIMUM_PADDING
    destructive: ClassVar[bool] = False
    layout: LayoutOptions = MINIMUM_LAYOUT


@dataclass(frozen=True)
class Truncation:
    kind: ClassVar[StageKind] = StageKind.TRUNCATION
    destructive: ClassVar[bool] = True
    profiles: tuple[TruncationProfile, ...] = ()
    layout: LayoutOptions = AGGRESSIVE_LAYOUT
    separator: str = "; "


@dataclass(frozen=True)
class DistillSection:
    kind: ClassVar[StageKind] = StageKind.DISTILL_SECTION
    destructive: ClassVar[bool] = True
    section_name: str = "Experience"
    max_bullets: int = 5
    layout: LayoutOptions = AGGRESSIVE_LAYOUT


@dataclass(frozen=True)
class MinimalDocument:
    kind: ClassVar[StageKind] = StageKind.MINIMAL_DOCUMENT
    destructive: ClassVar[bool] = True
    max_bullets: int = 5
    char_budget: int = 120
    layout: LayoutOptions = MINIMUM_LAYOUT


Stage = Union[
    ReduceFont,
    PruneBullets,
    AggressiveLayout,
    MergeBullets,
    RemoveSections,
    MinimumPadding,
    Truncation,
    DistillSection,
    MinimalDocument,
]


def truncation_profiles(config: FittingConfig) -> tuple[TruncationProfile, ...]:
    """Increasingly destructive profiles, each applied to the same input."""
    profiles = [TruncationProfile(max_bullets_per_item=3), TruncationProfile(max_bullets_per_item=2)]
    profiles += [
        TruncationProfile(max_bullets_per_item=2, max_chars=budget)
        for budget in config.truncation_budgets
    ]
    merge_budget = config.truncation_budgets[0]
    profiles.append(TruncationProfile(merge_items=True, max_chars=merge_budget))
    profiles += [
        TruncationProfile(merge_items=True, max_chars=merge_budget, top_sections=n)
        for n in config.top_sections
    ]
    return tuple(profiles)


def resume_ladder(config: FittingConfig | None = None) -> tuple[Stage, ...]:
    config = config or FittingConfig()
    return (
        ReduceFont(font_sizes=config.font_sizes),
        PruneBullets(floor=config.prune_floor),
        AggressiveLayout(),
        MergeBullets(separator=config.merge_separator),
        RemoveSections(protected=config.protected_sections),
        MinimumPadding(),
        Truncation(profiles=truncation_profiles(config), separator=config.merge_separator),
        DistillSection(section_name=config.distill_section, max_bullets=config.distill_max_bullets),
        MinimalDocument(
            max_bullets=config.minimal_max_bullets,
            char_budget=config.minimal_char_budget,
        ),
    )


def cover_letter_ladder(config: FittingConfig | None = None) -> tuple[Stage, ...]:
    """Cover letters only get layout changes; their content is left alone."""
    config = config or FittingConfig()
    base = LayoutOptions.for_cover_letter()
    sizes = tuple(size + 2 for size in config.font_sizes)
    return (
        ReduceFont(font_sizes=sizes, base=base),
        AggressiveLayout(layout=base.model_copy(update={
            "body_font_size": min(sizes), "page_padding": "0.5in", "line_height": 1.2,
        })),
        MinimumPadding(layout=base.model_copy(update={
            "body_font_size": min(config.font_sizes), "page_padding": "0.25in", "line_height": 1.0,
        })),
    )
