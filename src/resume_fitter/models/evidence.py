"""Pydantic models for evidence spans and the source texts they cite."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class SourceName(str, Enum):
    RESUME = "resume"
    JOB_DESCRIPTION = "jd"
    EXTRA = "extra"


class EvidenceSpan(BaseModel):
    """A ``[start, end)`` character range in one of the source texts.

    ``resolved_text`` is a cache of ``source_text[start:end]`` filled in by the
    validator; it is never used as the authority for where a span points.
    """

    source: SourceName
    start: int
    end: int
    resolved_text: str | None = None

    def is_valid_for(self, text: str | None) -> bool:
        if not text:
            return False
        return 0 <= self.start < self.end <= len(text)


class SourceCorpus(BaseModel):
    """The immutable texts a generated document may cite."""

    model_config = ConfigDict(frozen=True)

    resume: str
    job_description: str
    extra: str | None = None

    def text_for(self, source: SourceName) -> str | None:
        """Return the named text, or None when it was not supplied."""
        if source is SourceName.RESUME:
            text = self.resume
        elif source is SourceName.JOB_DESCRIPTION:
            text = self.job_description
        else:
            text = self.extra
        # An empty text cannot host a span, so it counts as missing.
        return text or None
