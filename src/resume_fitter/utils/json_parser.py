"""Utility to extract a JSON object from LLM text responses."""

from __future__ import annotations

import json


def extract_json(text: str) -> dict | list:
    """Extract JSON from an LLM response, handling ```json blocks.

    Tries in order:
    1. Direct json.loads on the full text
    2. Strip fenced code block markers and parse
    3. Find first '{' to last '}' and parse
    4. Close the braces/brackets of a truncated object
    """
    text = text.strip()

    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        pass

    stripped = _strip_code_fences(text)
    if stripped != text:
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            pass

    result = _extract_braces(stripped)
    if result is not None:
        return result

    result = _try_repair_truncated(stripped)
    if result is not None:
        return result

    raise ValueError(f"Could not extract JSON from text: {text[:200]}...")


def _strip_code_fences(text: str) -> str:
    """Remove markdown code fence markers from text."""
    lines = text.split("\n")
    if lines and lines[0].strip().startswith("```"):
        lines = lines[1:]
    while lines and lines[-1].strip() in ("```", ""):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def _extract_braces(text: str) -> dict | None:
    """Try to parse the span from the first '{' to the last '}'."""
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        try:
            return json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            pass
    return None


def _try_repair_truncated(text: str) -> dict | None:
    """Close the open structures of an object cut off mid-stream.

    Only the outermost nesting order is approximated: brackets are closed
    before braces, which covers the documents the generator emits (objects
    holding arrays of objects).
    """
    start = text.find("{")
    if start == -1:
        return None
    candidate = text[start:]

    for cut in (len(candidate), candidate.rfind('"') + 1):
        if cut <= 0:
            continue
        body = candidate[:cut].rstrip().rstrip(",")
        open_braces = body.count("{") - body.count("}")
        open_brackets = body.count("[") - body.count("]")
        if open_braces <= 0 and open_brackets <= 0:
            continue
        try:
            return json.loads(body + "]" * max(0, open_brackets) + "}" * max(0, open_braces))
        except json.JSONDecodeError:
            continue
    return None
