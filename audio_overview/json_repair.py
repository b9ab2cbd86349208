"""
Best-effort recovery of JSON objects from model output.

Model responses arrive fenced in markdown, truncated mid-structure when the
token budget runs out, or both. repair_json() strips the fence, tries a
straight parse, and otherwise closes whatever the text left open:
an unterminated string gets one closing quote, then every open bracket or
brace gets its closer in reverse order of opening.

parse_with_model_repair() adds the single model-assisted retry: the broken
text is handed back to the fast tier with a "fix the JSON only" instruction.
"""

import json
import logging
import re
from enum import Enum
from typing import Any, List, Tuple

from audio_overview.config import REPAIR_INPUT_CHARS
from audio_overview.errors import MalformedResponse

logger = logging.getLogger(__name__)

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"```$")

_CLOSERS = {"{": "}", "[": "]"}

REPAIR_INSTRUCTION = (
    "The following text was meant to be JSON but failed to parse.\n"
    "Fix the JSON formatting ONLY. Do not add explanations.\n\n"
    "BROKEN TEXT:\n"
)


class ScanState(Enum):
    NORMAL = "normal"
    IN_STRING = "in_string"
    ESCAPED = "escaped"


def strip_code_fences(text: str) -> str:
    """Remove a leading ``` / ```json fence and a trailing ``` fence."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN_RE.sub("", cleaned, count=1)
        cleaned = _FENCE_CLOSE_RE.sub("", cleaned)
    return cleaned.strip()


def scan_open_structures(text: str) -> Tuple[List[str], bool]:
    """Walk text and report what is still open at the end.

    Returns (closers, in_string): the closers expected for every bracket or
    brace still open, in opening order, and whether the text ends inside a
    string literal. Brackets inside strings are ignored; a closer that does
    not match the innermost open structure is skipped.
    """
    state = ScanState.NORMAL
    closers: List[str] = []
    for char in text:
        if state is ScanState.ESCAPED:
            state = ScanState.IN_STRING
        elif state is ScanState.IN_STRING:
            if char == "\\":
                state = ScanState.ESCAPED
            elif char == '"':
                state = ScanState.NORMAL
        elif char == '"':
            state = ScanState.IN_STRING
        elif char in _CLOSERS:
            closers.append(_CLOSERS[char])
        elif char in ("}", "]"):
            if closers and closers[-1] == char:
                closers.pop()
    return closers, state is not ScanState.NORMAL


def close_open_structures(text: str) -> str:
    """Append the quote and closers needed to balance a truncated document."""
    closers, in_string = scan_open_structures(text)
    if in_string:
        text += '"'
    return text + "".join(reversed(closers))


def repair_json(text: str) -> Any:
    """Parse text as JSON, closing truncated structures if needed.

    Raises MalformedResponse when the text is empty or still unparseable
    after balancing. The message carries the original parse error.
    """
    if text is None or not text.strip():
        raise MalformedResponse("Failed to parse JSON response", reason="empty response")

    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        original_error = e

    logger.warning("  JSON parse failed (%s), attempting repair...", original_error.msg)
    repaired = close_open_structures(cleaned)
    try:
        return json.loads(repaired)
    except json.JSONDecodeError:
        logger.error("  JSON repair failed for %d-char response", len(cleaned))
        raise MalformedResponse(
            "Failed to parse JSON response. The model output may have been too large or truncated",
            reason=str(original_error),
        ) from original_error


async def parse_with_model_repair(text: str, generator, model: str) -> Any:
    """repair_json(), then one model-assisted attempt if that fails.

    The fast tier receives the broken text (bounded to REPAIR_INPUT_CHARS)
    and its reply is parsed once. A second failure propagates.
    """
    try:
        return repair_json(text)
    except MalformedResponse as first_error:
        logger.warning("  Local JSON repair failed (%s) -- asking %s to fix it", first_error.reason, model)
        broken = (text or "")[:REPAIR_INPUT_CHARS]

    completion = await generator.complete(model, REPAIR_INSTRUCTION + broken, response_format="json")
    return repair_json(completion.text)
