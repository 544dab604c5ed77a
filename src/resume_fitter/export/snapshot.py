"""JSON snapshots of a finished document and the layout it was fitted with."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from resume_fitter.models.document import CoverLetterDocument, Document, ResumeDocument
from resume_fitter.models.layout import LayoutOptions

logger = logging.getLogger(__name__)


class ResumeSnapshot(BaseModel):
    kind: Literal["resume"] = "resume"
    document: ResumeDocument
    layout: LayoutOptions = Field(default_factory=LayoutOptions)
    status: str = "fitted"
    page_count: int | None = None


class CoverLetterSnapshot(BaseModel):
    kind: Literal["cover_letter"] = "cover_letter"
    document: CoverLetterDocument
    layout: LayoutOptions = Field(default_factory=LayoutOptions.for_cover_letter)
    status: str = "fitted"
    page_count: int | None = None


DocumentSnapshot = Annotated[Union[ResumeSnapshot, CoverLetterSnapshot], Field(discriminator="kind")]

_snapshot_adapter: TypeAdapter[DocumentSnapshot] = TypeAdapter(DocumentSnapshot)


def make_snapshot(
    document: Document,
    layout: LayoutOptions,
    *,
    status: str = "fitted",
    page_count: int | None = None,
) -> DocumentSnapshot:
    if isinstance(document, ResumeDocument):
        return ResumeSnapshot(document=document, layout=layout, status=status, page_count=page_count)
    return CoverLetterSnapshot(document=document, layout=layout, status=status, page_count=page_count)


def save_snapshot(snapshot: DocumentSnapshot, path: str | Path) -> Path:
    """Write a snapshot as JSON, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(snapshot.model_dump_json(indent=2, by_alias=True), encoding="utf-8")
    logger.debug("Saved %s snapshot to %s", snapshot.kind, path)
    return path


def load_snapshot(path: str | Path) -> DocumentSnapshot:
    """Read a snapshot written by :func:`save_snapshot`.

    Raises:
        FileNotFoundError: path does not exist.
        pydantic.ValidationError: the file is not a valid snapshot.
    """
    return _snapshot_adapter.validate_json(Path(path).read_text(encoding="utf-8"))
