"""Tests for the Claude-backed document generator."""

from unittest.mock import AsyncMock

import anthropic
import httpx
import pytest

from resume_fitter.clients.llm_client import LLMClient, ToolCallResponse
from resume_fitter.errors import GenerationError
from resume_fitter.models import CoverLetterDocument, ResumeDocument, SourceCorpus, SourceName
from resume_fitter.pipeline.generator import (
    COVER_LETTER_TOOL,
    ONE_PAGE_INSTRUCTION,
    RESUME_TOOL,
    SYSTEM_PROMPT,
    ClaudeGenerator,
)


@pytest.fixture
def resume_payload():
    return {
        "name": "Jordan Patel",
        "email": "jordan@example.com",
        "linkedin": "https://linkedin.com/in/jpatel",
        "sections": [{
            "name": "Experience",
            "items": [{
                "title": "Senior Software Engineer",
                "organization": "Acme Corp",
                "dateRange": "2020 - 2024",
                "bullets": [{
                    "text": "Led migration of 40 services to Kubernetes on AWS",
                    "evidence_spans": [{"source": "resume", "start": 10, "end": 40}],
                    "matched_terms": ["Kubernetes", "AWS"],
                }],
            }],
        }],
        "matched_term_count": 2,
    }


@pytest.fixture
def mock_llm():
    return AsyncMock(spec=LLMClient)


def _respond(mock_llm, data: dict) -> None:
    mock_llm.call_tool.return_value = ToolCallResponse(data=data, input_tokens=10, output_tokens=5)


class TestGenerateResume:
    async def test_parses_tool_output(self, mock_llm, corpus, resume_payload):
        _respond(mock_llm, resume_payload)
        generator = ClaudeGenerator(mock_llm)

        doc = await generator.generate_resume(corpus, ["Kubernetes", "AWS"])

        assert isinstance(doc, ResumeDocument)
        assert doc.links == ["https://linkedin.com/in/jpatel"]
        item = doc.sections[0].items[0]
        assert item.date_range == "2020 - 2024"
        assert item.bullets[0].evidence_spans[0].source is SourceName.RESUME

    async def test_prompt_contents(self, mock_llm, corpus, resume_payload):
        _respond(mock_llm, resume_payload)
        generator = ClaudeGenerator(mock_llm, model="claude-test", temperature=0.0, max_tokens=512)

        await generator.generate_resume(
            corpus, ["Kubernetes", "AWS"], force_one_page=True, hint="Rendered PDF is 2 pages.",
        )

        kwargs = mock_llm.call_tool.call_args.kwargs
        assert kwargs["tool"] is RESUME_TOOL
        assert kwargs["system"] == SYSTEM_PROMPT
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 512
        prompt = kwargs["prompt"]
        assert "Kubernetes, AWS" in prompt
        assert corpus.resume in prompt
        assert corpus.job_description in prompt
        assert ONE_PAGE_INSTRUCTION in prompt
        assert "Rendered PDF is 2 pages." in prompt
        assert "Additional Information" not in prompt

    async def test_extra_source_in_prompt(self, mock_llm, resume_payload):
        _respond(mock_llm, resume_payload)
        corpus = SourceCorpus(resume="r", job_description="j", extra="Volunteer at food bank")
        await ClaudeGenerator(mock_llm).generate_resume(corpus, [])
        assert "Volunteer at food bank" in mock_llm.call_tool.call_args.kwargs["prompt"]

    async def test_schema_mismatch_is_generation_error(self, mock_llm, corpus):
        _respond(mock_llm, {"name": "Jordan", "sections": [{"items": "oops"}]})
        with pytest.raises(GenerationError, match="schema"):
            await ClaudeGenerator(mock_llm).generate_resume(corpus, [])

    async def test_unparseable_response_is_generation_error(self, mock_llm, corpus):
        mock_llm.call_tool.side_effect = ValueError("Claude did not return a tool use response")
        with pytest.raises(GenerationError):
            await ClaudeGenerator(mock_llm).generate_resume(corpus, [])

    async def test_api_error_is_generation_error(self, mock_llm, corpus):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        mock_llm.call_tool.side_effect = anthropic.APIConnectionError(request=request)
        with pytest.raises(GenerationError):
            await ClaudeGenerator(mock_llm).generate_resume(corpus, [])


class TestGenerateCoverLetter:
    async def test_parses_tool_output(self, mock_llm, corpus):
        _respond(mock_llm, {
            "date": "",
            "salutation": "Dear Hiring Manager,",
            "paragraphs": [{
                "text": "I led the migration of 40 services to Kubernetes.",
                "evidence_spans": [{"source": "jd", "start": 0, "end": 10}],
                "matched_terms": ["Kubernetes"],
            }],
            "closing": "Sincerely,\nJordan Patel",
            "matched_term_count": 1,
        })

        letter = await ClaudeGenerator(mock_llm).generate_cover_letter(corpus, ["Kubernetes"])

        assert isinstance(letter, CoverLetterDocument)
        assert letter.date
        assert letter.paragraphs[0].evidence_spans[0].source is SourceName.JOB_DESCRIPTION
        assert mock_llm.call_tool.call_args.kwargs["tool"] is COVER_LETTER_TOOL


class TestRevise:
    async def test_revision_prompt_includes_current_and_suggestions(
        self, mock_llm, corpus, resume_payload, sample_resume,
    ):
        _respond(mock_llm, resume_payload)

        await ClaudeGenerator(mock_llm).revise_resume(
            corpus, ["AWS"], sample_resume, "Emphasize the Kubernetes migration",
        )

        prompt = mock_llm.call_tool.call_args.kwargs["prompt"]
        assert "Emphasize the Kubernetes migration" in prompt
        assert '"name": "Jordan Patel"' in prompt
        assert ONE_PAGE_INSTRUCTION in prompt

    async def test_revise_cover_letter_uses_cover_letter_tool(
        self, mock_llm, corpus, sample_cover_letter,
    ):
        _respond(mock_llm, sample_cover_letter.model_dump(mode="json"))

        letter = await ClaudeGenerator(mock_llm).revise_cover_letter(
            corpus, [], sample_cover_letter, "Shorter please",
        )

        assert letter.paragraphs == sample_cover_letter.paragraphs
        assert mock_llm.call_tool.call_args.kwargs["tool"] is COVER_LETTER_TOOL
