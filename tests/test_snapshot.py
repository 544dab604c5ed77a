"""Tests for document snapshots."""

import json

import pytest
from pydantic import ValidationError

from resume_fitter.export.snapshot import (
    CoverLetterSnapshot,
    ResumeSnapshot,
    load_snapshot,
    make_snapshot,
    save_snapshot,
)
from resume_fitter.models.layout import MINIMUM_LAYOUT, LayoutOptions


class TestSnapshot:
    def test_resume_round_trip_keeps_layout(self, tmp_path, sample_resume):
        snapshot = make_snapshot(sample_resume, MINIMUM_LAYOUT, status="best_effort", page_count=2)
        path = save_snapshot(snapshot, tmp_path / "out" / "resume.json")

        loaded = load_snapshot(path)

        assert isinstance(loaded, ResumeSnapshot)
        assert loaded.document == sample_resume
        assert loaded.layout == MINIMUM_LAYOUT
        assert loaded.status == "best_effort"
        assert loaded.page_count == 2

    def test_wire_format(self, tmp_path, sample_resume):
        path = save_snapshot(make_snapshot(sample_resume, LayoutOptions()), tmp_path / "r.json")
        raw = json.loads(path.read_text())
        assert raw["kind"] == "resume"
        assert raw["document"]["sections"][0]["items"][0]["dateRange"] == "2020 - 2024"
        assert raw["document"]["sections"][0]["items"][0]["bullets"][0]["evidence_spans"][0]["source"] == "resume"

    def test_cover_letter(self, tmp_path, sample_cover_letter):
        layout = LayoutOptions.for_cover_letter()
        path = save_snapshot(make_snapshot(sample_cover_letter, layout), tmp_path / "c.json")
        loaded = load_snapshot(path)
        assert isinstance(loaded, CoverLetterSnapshot)
        assert loaded.document.paragraphs == sample_cover_letter.paragraphs
        assert loaded.layout == layout

    def test_invalid_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"kind": "memo", "document": {}}')
        with pytest.raises(ValidationError):
            load_snapshot(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_snapshot(tmp_path / "nope.json")
