"""One-page fitting: transforms, stage ladder and controller."""

from resume_fitter.fitting.controller import FitResult, FitStatus, FittingController
from resume_fitter.fitting.ladder import StageKind, cover_letter_ladder, resume_ladder

__all__ = [
    "FitResult",
    "FitStatus",
    "FittingController",
    "StageKind",
    "cover_letter_ladder",
    "resume_ladder",
]
