"""
Response Extractor
Turns raw LLM text into parsed JSON, tolerating prose and markdown code fences
around the answer.

Strategies, in order:
  1. Parse the whole string
  2. Parse the interior of the first ``` / ```json fenced block
  3. Parse the span from the first "{" to the last "}"

The fenced block and the brace span are independent candidates: with several
JSON-like blocks in the text they need not point at the same object.
"""
import json
import re
from dataclasses import dataclass
from typing import Any, Optional

from careermate.utils.logger import get_logger
from careermate.utils.metrics import inc

logger = get_logger("extractor")

PREVIEW_CHARS = 500

# First fenced block, optional json tag, non-greedy up to the first closing fence
_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


class ParseFailure(ValueError):
    """No extraction strategy produced parseable JSON."""

    def __init__(self, raw_text: Optional[str], reason: str = "No valid JSON found in response"):
        self.raw_text = raw_text
        self.preview = (raw_text or "")[:PREVIEW_CHARS]
        self.reason = reason
        super().__init__(f"{reason} (preview: {self.preview!r})")


@dataclass(frozen=True)
class ExtractionResult:
    """Tagged union: parsed JSON value, or the ParseFailure that explains why not."""
    ok: bool
    value: Any = None
    error: Optional[ParseFailure] = None


def _reject_constant(token: str):
    # NaN, Infinity and -Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {token}")


def _loads(candidate: str):
    try:
        return True, json.loads(candidate, parse_constant=_reject_constant)
    except (json.JSONDecodeError, ValueError):
        return False, None


def _fenced_candidate(text: str) -> Optional[str]:
    match = _FENCED_BLOCK.search(text)
    if not match:
        return None
    return match.group(1).strip()


def _brace_candidate(text: str) -> Optional[str]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None
    return text[start:end + 1]


def extract_json(text: str) -> Any:
    """
    Parse JSON out of raw model output.

    Raises:
        ParseFailure: none of the strategies yielded valid JSON
    """
    if text is None:
        raise ParseFailure(None, "Empty response from AI service")

    ok, value = _loads(text)
    if ok:
        inc("extractor.direct")
        return value

    fenced = _fenced_candidate(text)
    if fenced is not None:
        ok, value = _loads(fenced)
        if ok:
            inc("extractor.fenced")
            logger.debug("Extracted JSON from fenced block")
            return value

    braced = _brace_candidate(text)
    if braced is not None:
        ok, value = _loads(braced)
        if ok:
            inc("extractor.braces")
            logger.debug("Extracted JSON from brace span")
            return value
        inc("extractor.failed")
        raise ParseFailure(text, "Invalid JSON response from AI service")

    inc("extractor.failed")
    raise ParseFailure(text)


def try_extract_json(text: str) -> ExtractionResult:
    """Non-raising variant of extract_json."""
    try:
        return ExtractionResult(ok=True, value=extract_json(text))
    except ParseFailure as failure:
        return ExtractionResult(ok=False, error=failure)
