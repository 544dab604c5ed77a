"""Exception hierarchy for the tailoring core."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from resume_fitter.models.validation import ValidationIssue


class ResumeFitterError(Exception):
    """Base class for all errors raised by resume_fitter."""


class GenerationError(ResumeFitterError):
    """The content generator failed or returned something unusable."""


class RenderError(ResumeFitterError):
    """The renderer could not produce a paginated document."""


class ValidationFailed(ResumeFitterError):
    """Evidence validation still reports issues after repair.

    Attributes:
        errors: Every unresolved issue, in document order.
    """

    def __init__(self, errors: list[ValidationIssue], message: str = "Document failed validation"):
        self.errors = list(errors)
        parts = [f"{message} ({len(self.errors)} issue(s))"]
        for issue in self.errors[:5]:
            parts.append(f"  - {issue.location}: {issue.message}")
        if len(self.errors) > 5:
            parts.append(f"  ... and {len(self.errors) - 5} more")
        super().__init__("\n".join(parts))
