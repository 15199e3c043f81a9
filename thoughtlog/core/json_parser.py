"""
JSON parsing utility functions
Decodes classifier responses: a strict path used by default and a multi-strategy
repair path for LLM output with formatting problems
"""

import json
import re
from typing import Any, Optional

from json_repair import repair_json

from thoughtlog.core.errors import ResponseParseError
from thoughtlog.core.logger import get_logger

logger = get_logger(__name__)

_CODE_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.DOTALL)


def strip_code_fence(response: str) -> str:
    """Remove a surrounding ```json ... ``` fence if the whole response is fenced"""
    cleaned = response.strip()
    if cleaned.startswith("```"):
        cleaned = re.sub(r"^```(?:json)?\s*\n?", "", cleaned)
        cleaned = re.sub(r"\n?```\s*$", "", cleaned)
    return cleaned.strip()


def load_json_payload(response: str, repair: bool = False) -> Any:
    """
    Decode a classifier response

    Args:
        response: Encoded payload, optionally wrapped in a markdown code fence
        repair: Fall back to parse_json_from_response() when strict decoding fails

    Returns:
        Decoded JSON value

    Raises:
        ResponseParseError: The payload cannot be decoded
    """
    if not isinstance(response, str):
        raise ResponseParseError(
            f"Failed to parse JSON response: expected str, got {type(response).__name__}"
        )

    cleaned = strip_code_fence(response)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        if not repair:
            raise ResponseParseError(
                f"Failed to parse JSON response: {e}", response
            ) from e
        strict_error = e

    result = parse_json_from_response(response)
    if result is None:
        raise ResponseParseError(
            f"Failed to parse JSON response: {strict_error}", response
        ) from strict_error
    return result


def parse_json_from_response(response: str) -> Optional[Any]:
    """
    Parse JSON object from LLM text response

    Handles code blocks and plain JSON strings, including fixing common format issues

    Args:
        response (str): LLM text response or JSON string

    Returns:
        Optional[Any]: Parsed JSON object or array, returns None if parsing fails
    """
    if not isinstance(response, str):
        logger.warning(f"Response is not string type: {type(response)}")
        return None

    response = response.strip()

    if not response:
        logger.warning("Response is empty string")
        return None

    response = _normalize_quotes(response)

    # Strategy 1: Direct parsing
    try:
        result = json.loads(response)
        logger.debug("Strategy 1 success: Direct JSON parsing")
        return result
    except json.JSONDecodeError as e:
        logger.debug(f"Strategy 1 failed: {e}")

    # Strategy 2: Extract JSON from code blocks
    match = _CODE_BLOCK.search(response)
    if match:
        json_str = match.group(1).strip()
        try:
            result = json.loads(json_str)
            logger.debug("Strategy 2 success: Extract JSON from code block")
            return result
        except json.JSONDecodeError as e:
            logger.debug(f"Strategy 2 failed: {e}")
            result = _repair(json_str)
            if result is not None:
                logger.debug("Strategy 2b success: json-repair on extracted JSON")
                return result

    # Strategy 3: Regex match JSON structure embedded in prose
    match = re.search(r"(\{[\s\S]*\}|\[[\s\S]*\])", response)
    if match:
        json_str = match.group(0)
        try:
            result = json.loads(json_str)
            logger.debug("Strategy 3 success: Regex match JSON structure")
            return result
        except json.JSONDecodeError as e:
            logger.debug(f"Strategy 3 failed: {e}")
            result = _lenient_json_parse(json_str)
            if result is not None:
                logger.debug("Strategy 3b success: Lenient parsing")
                return result
            result = _repair(json_str)
            if result is not None:
                logger.debug("Strategy 3c success: json-repair on regex-matched JSON")
                return result

    # Strategy 4: json-repair on the full response (also closes truncated output)
    result = _repair(response)
    if result is not None:
        logger.warning("Strategy 4 success: json-repair on full response (may be incomplete)")
        return result

    logger.error(
        f"All strategies failed, unable to parse JSON. Response content: {response[:500]}"
    )
    return None


def _repair(json_str: str) -> Optional[Any]:
    """Run json-repair, accepting only object/array results"""
    try:
        result = json.loads(repair_json(json_str))
    except (json.JSONDecodeError, ValueError, TypeError) as e:
        logger.debug(f"json-repair failed: {e}")
        return None
    # Garbage input repairs to "" or a bare scalar; that is not a payload
    if isinstance(result, (dict, list)) and result:
        return result
    return None


def _normalize_quotes(text: str) -> str:
    """
    Normalize various Unicode quote characters to standard ASCII quotes

    Args:
        text: Input text with possible Unicode quotes

    Returns:
        Text with normalized ASCII quotes
    """
    quote_map = {
        "“": '"',  # LEFT DOUBLE QUOTATION MARK
        "”": '"',  # RIGHT DOUBLE QUOTATION MARK
        "‘": "'",  # LEFT SINGLE QUOTATION MARK
        "’": "'",  # RIGHT SINGLE QUOTATION MARK
        "«": '"',  # LEFT-POINTING DOUBLE ANGLE QUOTATION MARK
        "»": '"',  # RIGHT-POINTING DOUBLE ANGLE QUOTATION MARK
        "„": '"',  # DOUBLE LOW-9 QUOTATION MARK
        "‟": '"',  # DOUBLE HIGH-REVERSED-9 QUOTATION MARK
        "＂": '"',  # FULLWIDTH QUOTATION MARK
        "＇": "'",  # FULLWIDTH APOSTROPHE
    }

    for unicode_quote, ascii_quote in quote_map.items():
        text = text.replace(unicode_quote, ascii_quote)

    return text


def _lenient_json_parse(json_str: str) -> Optional[Any]:
    """
    Lenient JSON parsing, tries to fix common issues

    Handles:
    - Trailing commas
    - Single-quoted keys and strings
    """
    modified = re.sub(r",(\s*[}\]])", r"\1", json_str)
    try:
        return json.loads(modified)
    except json.JSONDecodeError:
        pass

    # May break apostrophes inside values, so it runs last
    try:
        return json.loads(modified.replace("'", '"'))
    except json.JSONDecodeError:
        return None

