"""
Pulls the structured JSON payload out of loosely formatted model output.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

logger = logging.getLogger(__name__)

UNPARSEABLE = "unparseable"
INCOMPLETE = "incomplete"

LEADING_FENCE = re.compile(r"```[a-zA-Z]*\n?")
TRAILING_FENCE = re.compile(r"\n?```\s*$")


@dataclass(frozen=True)
class ExtractionResult:
    ok: bool
    value: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, value: Dict[str, Any]) -> "ExtractionResult":
        return cls(ok=True, value=value)

    @classmethod
    def fail(cls, reason: str) -> "ExtractionResult":
        return cls(ok=False, reason=reason)


def strip_code_fences(text: str) -> str:
    """Remove the first opening fence (``` or ```json) and a trailing closing fence."""
    if "```" not in text:
        return text
    text = LEADING_FENCE.sub("", text, count=1)
    return TRAILING_FENCE.sub("", text)


def find_json_object(text: str) -> Optional[str]:
    """Widest `{ ... }` span: first opening brace to last closing brace."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None
    return text[start:end + 1]


def _lookup(value: Any, path: str):
    """Resolve a dotted path ("quiz.questions"); returns None when any segment is missing."""
    for key in path.split("."):
        if not isinstance(value, dict) or key not in value:
            return None
        value = value[key]
    return value


def extract_json(raw_text: Optional[str], required_fields: Iterable[str] = (),
                 sequence_fields: Iterable[str] = ()) -> ExtractionResult:
    """
    Locate and parse the JSON object embedded in model output.

    Args:
        raw_text: raw model text, possibly fenced and wrapped in prose
        required_fields: dotted paths that must be present and non-null
        sequence_fields: dotted paths that must be present and be lists

    Returns:
        ExtractionResult; never raises for malformed input.
    """
    text = (raw_text or "").strip()
    text = strip_code_fences(text)

    candidate = find_json_object(text)
    if candidate is None:
        logger.warning("No JSON object found in model output")
        return ExtractionResult.fail(UNPARSEABLE)

    try:
        parsed = json.loads(candidate)
    except (json.JSONDecodeError, RecursionError) as e:
        logger.warning(f"Failed to parse model output as JSON: {e}")
        return ExtractionResult.fail(UNPARSEABLE)

    if not isinstance(parsed, dict):
        return ExtractionResult.fail(UNPARSEABLE)

    for field in required_fields:
        if _lookup(parsed, field) is None:
            logger.warning(f"Model output is missing required field '{field}'")
            return ExtractionResult.fail(INCOMPLETE)

    for field in sequence_fields:
        if not isinstance(_lookup(parsed, field), list):
            logger.warning(f"Model output field '{field}' is missing or not a list")
            return ExtractionResult.fail(INCOMPLETE)

    return ExtractionResult.success(parsed)
