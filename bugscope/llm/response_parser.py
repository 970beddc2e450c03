"""
Response Parser
===============
Extracts JSON from model text that may be fenced or truncated.

Steps:
    1. Trim, strip a leading ```json / ``` fence and a trailing ``` fence
    2. json.loads → done
    3. On failure run repair_json() and try again
    4. Still failing → ResponseParseError carrying the ORIGINAL decode error,
       so logs point at the real defect rather than at the repair attempt
"""
import json
import logging
import re
from typing import Any

from bugscope.core.errors import ResponseParseError
from bugscope.llm.json_repair import repair_json
from bugscope.utils.logging_config import log_stage

logger = logging.getLogger(__name__)

# Opening fence plus an optional language tag (```json, ```JSON, ```)
_OPENING_FENCE_RE = re.compile(r"^```[A-Za-z0-9_+-]*")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fence wrapping, with or without a language tag."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _OPENING_FENCE_RE.sub("", cleaned, count=1)
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_json_response(text: str) -> Any:
    """
    Parse a model response into a JSON value.

    Parameters
    ----------
    text : str
        Raw text returned by the model.

    Returns
    -------
    Any
        The decoded JSON value.

    Raises
    ------
    ResponseParseError
        If the text is not valid JSON even after repair.
    """
    cleaned = strip_code_fences(text or "")

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as original:
        logger.warning("JSON parse failed (%s); first 300 chars: %r", original, cleaned[:300])

        with log_stage(logger, "json_repair", length=len(cleaned)):
            repaired = repair_json(cleaned)
        try:
            value = json.loads(repaired)
        except json.JSONDecodeError as repair_error:
            logger.error("Repaired JSON still invalid: %s", repair_error)
            raise ResponseParseError(str(original)) from original

        logger.info("JSON repaired and parsed successfully")
        return value
