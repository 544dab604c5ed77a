"""Claude API wrapper with async support and retry logic."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import anthropic
from tenacity import retry, stop_after_attempt, wait_exponential

from resume_fitter.utils.json_parser import extract_json

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"


@dataclass
class ToolCallResponse:
    """Structured tool input returned by the model, with usage metadata."""

    data: dict
    input_tokens: int
    output_tokens: int


class LLMClient:
    """Async Claude API client with exponential-backoff retries."""

    def __init__(self, api_key: str | None = None, timeout: float | None = None):
        kwargs: dict = {}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)
        self._token_log: list[tuple[str, int, int]] = []  # (model, input_tokens, output_tokens)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(min=1, max=10),
        reraise=True,
    )
    async def _call_api(self, **kwargs) -> anthropic.types.Message:
        """Make the actual API call with retry logic."""
        return await self.client.messages.create(**kwargs)

    async def call_tool(
        self,
        prompt: str,
        tool: dict,
        system: str = "",
        model: str = DEFAULT_MODEL,
        temperature: float = 0.1,
        max_tokens: int = 8192,
    ) -> ToolCallResponse:
        """Force a single tool call and return its input as a dict.

        Falls back to parsing JSON out of a text block when the model answers
        in prose instead of calling the tool.
        """
        logger.debug("LLM tool call: model=%s tool=%s", model, tool["name"])
        kwargs: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
            "tools": [tool],
            "tool_choice": {"type": "tool", "name": tool["name"]},
        }
        if system:
            kwargs["system"] = system
        try:
            message = await self._call_api(**kwargs)
        except Exception:
            logger.error("LLM call failed", exc_info=True)
            raise

        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        self._token_log.append((model, input_tokens, output_tokens))

        data = None
        for block in message.content:
            if getattr(block, "type", None) == "tool_use":
                data = dict(block.input)
                break
        if data is None:
            text = next(
                (b.text for b in message.content if getattr(b, "type", None) == "text"),
                None,
            )
            if text is None:
                raise ValueError("Claude did not return a tool use response")
            parsed = extract_json(text)
            if not isinstance(parsed, dict):
                raise ValueError("Claude returned JSON that is not an object")
            data = parsed

        return ToolCallResponse(data=data, input_tokens=input_tokens, output_tokens=output_tokens)

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset the log."""
        summary = {
            "input": sum(t[1] for t in self._token_log),
            "output": sum(t[2] for t in self._token_log),
            "calls": list(self._token_log),
        }
        self._token_log.clear()
        return summary
