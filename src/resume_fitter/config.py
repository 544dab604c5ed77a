"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

ENGINES = ("auto", "weasyprint", "fpdf2")


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 8192
    temperature: float = 0.1
    timeout: int = 120

    def __post_init__(self) -> None:
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(f"temperature must be between 0 and 1, got {self.temperature}")
        if self.timeout < 1:
            raise ValueError(f"timeout must be at least 1 second, got {self.timeout}")


@dataclass(frozen=True)
class GenerationConfig:
    max_attempts: int = 2
    backoff_seconds: float = 1.0
    condense_attempts: int = 3
    force_one_page: bool = True
    include_summary: bool = False

    def __post_init__(self) -> None:
        if not 1 <= self.max_attempts <= 5:
            raise ValueError(f"max_attempts must be between 1 and 5, got {self.max_attempts}")
        if self.backoff_seconds < 0:
            raise ValueError(f"backoff_seconds must be >= 0, got {self.backoff_seconds}")
        if not 1 <= self.condense_attempts <= 10:
            raise ValueError(
                f"condense_attempts must be between 1 and 10, got {self.condense_attempts}"
            )


@dataclass(frozen=True)
class FittingConfig:
    font_sizes: tuple[float, ...] = (9, 8)
    prune_floor: int = 1
    merge_separator: str = "; "
    protected_sections: tuple[str, ...] = ("Experience", "Education")
    distill_section: str = "Experience"
    distill_max_bullets: int = 5
    minimal_max_bullets: int = 5
    minimal_char_budget: int = 120
    truncation_budgets: tuple[int, ...] = (160, 120, 80)
    top_sections: tuple[int, ...] = (3, 2)

    def __post_init__(self) -> None:
        # YAML hands us lists; freeze them so the config stays hashable.
        for name in ("font_sizes", "protected_sections", "truncation_budgets", "top_sections"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

        if not self.font_sizes:
            raise ValueError("font_sizes must not be empty")
        if list(self.font_sizes) != sorted(self.font_sizes, reverse=True):
            raise ValueError(f"font_sizes must be descending, got {list(self.font_sizes)}")
        if self.prune_floor < 0:
            raise ValueError(f"prune_floor must be >= 0, got {self.prune_floor}")
        if self.distill_max_bullets < 1:
            raise ValueError(f"distill_max_bullets must be >= 1, got {self.distill_max_bullets}")
        if not 1 <= self.minimal_max_bullets <= 10:
            raise ValueError(
                f"minimal_max_bullets must be between 1 and 10, got {self.minimal_max_bullets}"
            )
        if self.minimal_char_budget < 20:
            raise ValueError(
                f"minimal_char_budget must be >= 20, got {self.minimal_char_budget}"
            )
        for name in ("truncation_budgets", "top_sections"):
            values = list(getattr(self, name))
            if any(v < 1 for v in values) or values != sorted(set(values), reverse=True):
                raise ValueError(f"{name} must be strictly descending positive values, got {values}")


@dataclass(frozen=True)
class MatchingConfig:
    case_sensitive: bool = True


@dataclass(frozen=True)
class RenderConfig:
    engine: str = "auto"

    def __post_init__(self) -> None:
        if self.engine not in ENGINES:
            raise ValueError(f"engine must be one of {ENGINES}, got {self.engine!r}")


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    fitting: FittingConfig = field(default_factory=FittingConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    render: RenderConfig = field(default_factory=RenderConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        # Look for config.yaml relative to the project root
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        generation=GenerationConfig(**raw.get("generation", {})),
        fitting=FittingConfig(**raw.get("fitting", {})),
        matching=MatchingConfig(**raw.get("matching", {})),
        render=RenderConfig(**raw.get("render", {})),
    )
