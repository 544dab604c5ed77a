"""Layout hints forwarded to the renderer."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class LayoutOptions(BaseModel):
    """Opaque typography hints; only the renderer interprets the values."""

    model_config = ConfigDict(frozen=True)

    body_font_size: float = 10
    name_font_size: float = 16
    section_title_size: float = 11
    page_padding: str = "0.5in 0.5in"
    line_height: float = 1.15

    @classmethod
    def for_cover_letter(cls) -> LayoutOptions:
        return cls(body_font_size=12, page_padding="0.75in", line_height=1.5)


DEFAULT_LAYOUT = LayoutOptions()

AGGRESSIVE_LAYOUT = LayoutOptions(
    body_font_size=8,
    name_font_size=12,
    section_title_size=9,
    page_padding="0.125in 0.125in",
    line_height=1.0,
)

MINIMUM_LAYOUT = LayoutOptions(
    body_font_size=7.5,
    name_font_size=11,
    section_title_size=8.5,
    page_padding="0.1in 0.1in",
    line_height=1.0,
)
