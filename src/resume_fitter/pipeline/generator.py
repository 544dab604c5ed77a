"""Claude-backed content generator for resumes and cover letters.

The model is forced through a tool call whose schema mirrors the document
models, and every statement must carry evidence spans into the source texts.
"""

from __future__ import annotations

import logging
from typing import Protocol

import anthropic
from pydantic import ValidationError

from resume_fitter.clients.llm_client import DEFAULT_MODEL, LLMClient
from resume_fitter.errors import GenerationError
from resume_fitter.models.document import CoverLetterDocument, ResumeDocument
from resume_fitter.models.evidence import SourceCorpus

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are an expert ATS resume optimizer. Your task is to tailor resumes and cover letters \
to job descriptions while maintaining 100% factual accuracy.

CRITICAL RULES:
1. Use ONLY evidence from the provided resume, job description, or extra information
2. Return JSON matching the schema exactly
3. For every bullet/sentence, include evidence_spans[] pointing to exact substrings in the inputs
4. NEVER invent employers, roles, dates, locations, credentials, or numbers
5. Maximize natural inclusion of ATS terms from the provided list
6. Keep language concise and professional; avoid buzzword stuffing
7. Reorder and rephrase for clarity and keyword alignment, but preserve all factual content

Evidence spans must reference character positions in the source text (start and end indices).
When you reference a fact, you must cite the exact substring from one of the source documents \
by providing its character offset."""

ONE_PAGE_INSTRUCTION = (
    "The result MUST fit on a single printed page. Keep only the most job-relevant "
    "material and prefer fewer, denser bullets."
)

_SPAN_SCHEMA = {
    "type": "object",
    "properties": {
        "source": {"type": "string", "enum": ["resume", "jd", "extra"]},
        "start": {"type": "integer"},
        "end": {"type": "integer"},
    },
    "required": ["source", "start", "end"],
}

_STATEMENT_SCHEMA = {
    "type": "object",
    "properties": {
        "text": {"type": "string"},
        "evidence_spans": {"type": "array", "items": _SPAN_SCHEMA},
        "matched_terms": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["text", "evidence_spans", "matched_terms"],
}

RESUME_TOOL = {
    "name": "generate_tailored_resume",
    "description": "Generate an ATS-optimized resume with evidence citations",
    "input_schema": {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "email": {"type": "string"},
            "phone": {"type": "string"},
            "location": {"type": "string"},
            "links": {"type": "array", "items": {"type": "string"}},
            "summary": {"type": "string", "description": "Optional professional summary"},
            "sections": {
                "type": "array",
                "description": "Resume sections (Education, Experience, Projects, Skills)",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "items": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "title": {"type": "string"},
                                    "organization": {"type": "string"},
                                    "location": {"type": "string"},
                                    "dateRange": {"type": "string"},
                                    "bullets": {"type": "array", "items": _STATEMENT_SCHEMA},
                                },
                            },
                        },
                    },
                    "required": ["name", "items"],
                },
            },
            "matched_term_count": {
                "type": "integer",
                "description": "Total number of ATS terms matched",
            },
        },
        "required": ["name", "sections", "matched_term_count"],
    },
}

COVER_LETTER_TOOL = {
    "name": "generate_cover_letter",
    "description": "Generate an ATS-optimized cover letter with evidence citations",
    "input_schema": {
        "type": "object",
        "properties": {
            "date": {"type": "string", "description": 'e.g. "September 23, 2025"'},
            "salutation": {"type": "string", "description": 'e.g. "Dear Hiring Manager,"'},
            "paragraphs": {
                "type": "array",
                "description": "Cover letter paragraphs with evidence",
                "items": _STATEMENT_SCHEMA,
            },
            "closing": {"type": "string", "description": 'e.g. "Sincerely,\\nJordan Patel"'},
            "matched_term_count": {"type": "integer"},
        },
        "required": ["salutation", "paragraphs", "closing", "matched_term_count"],
    },
}


class DocumentGenerator(Protocol):
    """Produces grounded documents from the source texts."""

    async def generate_resume(
        self,
        corpus: SourceCorpus,
        ats_terms: list[str],
        *,
        force_one_page: bool = False,
        hint: str | None = None,
    ) -> ResumeDocument: ...

    async def generate_cover_letter(
        self,
        corpus: SourceCorpus,
        ats_terms: list[str],
        *,
        force_one_page: bool = False,
        hint: str | None = None,
    ) -> CoverLetterDocument: ...

    async def revise_resume(
        self,
        corpus: SourceCorpus,
        ats_terms: list[str],
        current: ResumeDocument,
        suggestions: str,
        *,
        force_one_page: bool = True,
    ) -> ResumeDocument: ...

    async def revise_cover_letter(
        self,
        corpus: SourceCorpus,
        ats_terms: list[str],
        current: CoverLetterDocument,
        suggestions: str,
        *,
        force_one_page: bool = True,
    ) -> CoverLetterDocument: ...


def _sources_block(corpus: SourceCorpus) -> str:
    parts = [
        f"**Job Description:**\n{corpus.job_description}",
        f"**Current Resume:**\n{corpus.resume}",
    ]
    if corpus.extra:
        parts.append(f"**Additional Information:**\n{corpus.extra}")
    return "\n\n".join(parts)


def _extras(force_one_page: bool, hint: str | None) -> str:
    lines = []
    if force_one_page:
        lines.append(ONE_PAGE_INSTRUCTION)
    if hint:
        lines.append(f"Note: {hint}")
    return ("\n\n" + "\n".join(lines)) if lines else ""


class ClaudeGenerator:
    """DocumentGenerator backed by Claude tool use."""

    def __init__(
        self,
        llm: LLMClient,
        *,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.1,
        max_tokens: int = 8192,
    ):
        self.llm = llm
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def generate_resume(
        self,
        corpus: SourceCorpus,
        ats_terms: list[str],
        *,
        force_one_page: bool = False,
        hint: str | None = None,
    ) -> ResumeDocument:
        prompt = f"""I need you to tailor a resume to match a job description using ONLY the information provided below. Follow all the critical rules in your system prompt.

{_sources_block(corpus)}

**ATS Terms to Prioritize:**
{", ".join(ats_terms)}

**Task:**
1. Reorganize and optimize the resume sections to highlight relevant experience
2. Rewrite bullets to naturally incorporate ATS terms while keeping facts accurate
3. For EVERY bullet point, cite evidence_spans with exact character offsets from the source documents
4. DO NOT invent any new projects, roles, dates, or credentials
5. Count how many ATS terms were successfully incorporated{_extras(force_one_page, hint)}

Use the {RESUME_TOOL["name"]} tool to return your result."""
        data = await self._call(prompt, RESUME_TOOL)
        return self._parse_resume(data)

    async def generate_cover_letter(
        self,
        corpus: SourceCorpus,
        ats_terms: list[str],
        *,
        force_one_page: bool = False,
        hint: str | None = None,
    ) -> CoverLetterDocument:
        prompt = f"""I need you to write a professional cover letter tailored to a job description using ONLY the information from the resume provided below. Follow all the critical rules in your system prompt.

{_sources_block(corpus)}

**ATS Terms to Prioritize:**
{", ".join(ats_terms)}

**Task:**
1. Write a compelling cover letter (3-4 paragraphs) that connects the candidate's experience to the job requirements
2. Naturally incorporate ATS terms throughout
3. For EVERY sentence, cite evidence_spans with exact character offsets from the source documents
4. DO NOT invent any achievements, skills, or experiences not present in the resume
5. Keep it professional and concise (under 400 words){_extras(force_one_page, hint)}

Use the {COVER_LETTER_TOOL["name"]} tool to return your result."""
        data = await self._call(prompt, COVER_LETTER_TOOL)
        return self._parse_cover_letter(data)

    async def revise_resume(
        self,
        corpus: SourceCorpus,
        ats_terms: list[str],
        current: ResumeDocument,
        suggestions: str,
        *,
        force_one_page: bool = True,
    ) -> ResumeDocument:
        prompt = self._revision_prompt(corpus, ats_terms, current.model_dump_json(indent=2),
                                       suggestions, "resume", force_one_page)
        return self._parse_resume(await self._call(prompt, RESUME_TOOL))

    async def revise_cover_letter(
        self,
        corpus: SourceCorpus,
        ats_terms: list[str],
        current: CoverLetterDocument,
        suggestions: str,
        *,
        force_one_page: bool = True,
    ) -> CoverLetterDocument:
        prompt = self._revision_prompt(corpus, ats_terms, current.model_dump_json(indent=2),
                                       suggestions, "cover letter", force_one_page)
        return self._parse_cover_letter(await self._call(prompt, COVER_LETTER_TOOL))

    def _revision_prompt(
        self,
        corpus: SourceCorpus,
        ats_terms: list[str],
        current_json: str,
        suggestions: str,
        kind: str,
        force_one_page: bool,
    ) -> str:
        tool = RESUME_TOOL if kind == "resume" else COVER_LETTER_TOOL
        return f"""Revise the tailored {kind} below according to the user's suggestions, using ONLY the information in the source documents. Follow all the critical rules in your system prompt.

{_sources_block(corpus)}

**ATS Terms to Prioritize:**
{", ".join(ats_terms)}

**Current {kind} (JSON):**
{current_json}

**User Suggestions:**
{suggestions}

Apply the suggestions where the sources support them; never add facts the sources do not contain. Re-cite evidence_spans for every statement.{_extras(force_one_page, None)}

Use the {tool["name"]} tool to return your result."""

    async def _call(self, prompt: str, tool: dict) -> dict:
        try:
            response = await self.llm.call_tool(
                prompt=prompt,
                tool=tool,
                system=SYSTEM_PROMPT,
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except (anthropic.APIError, ValueError) as exc:
            raise GenerationError(f"{tool['name']} failed: {exc}") from exc
        return response.data

    @staticmethod
    def _parse_resume(data: dict) -> ResumeDocument:
        links = list(data.get("links") or [])
        for key in ("linkedin", "github"):
            if data.get(key):
                links.append(data.pop(key))
        data["links"] = links
        try:
            return ResumeDocument.model_validate(data)
        except ValidationError as exc:
            raise GenerationError(f"Generated resume does not match the schema: {exc}") from exc

    @staticmethod
    def _parse_cover_letter(data: dict) -> CoverLetterDocument:
        if not data.get("date"):
            data.pop("date", None)
        try:
            return CoverLetterDocument.model_validate(data)
        except ValidationError as exc:
            raise GenerationError(f"Generated cover letter does not match the schema: {exc}") from exc
