"""
Interpretation of Gemini generateContent responses.

classify_response() applies the rules below in order and stops at the first
match:

1. no candidates: blocked prompt (promptFeedback.blockReason) or empty result
2. first candidate finished for a reason other than STOP: blocked
3. first inlineData part: success, returned as a PNG data URI
4. text parts only: model refusal carrying the text
5. nothing usable: no image data
"""

from collections.abc import Mapping
from typing import Any

from studiolens.core.reference import create_image_data_url
from studiolens.logging_config import get_logger
from studiolens.utils.exceptions import (
    ContentBlockedError,
    EmptyResultError,
    ModelRefusalError,
    NoImageDataError,
)

logger = get_logger(__name__)

FINISH_REASON_STOP = "STOP"

_PROMPT_BLOCKED_OTHER = (
    "Generation blocked (Reason: OTHER). The system may have interpreted the prompt or "
    "reference image as sensitive. Please try a different pose or reference image."
)

_FINISH_REASON_MESSAGES = {
    "SAFETY": (
        "Generation blocked by safety filters. Please try modifying the prompt or using "
        "a different reference image."
    ),
    "RECITATION": "Generation blocked due to recitation check.",
    "OTHER": (
        "Generation blocked (Reason: OTHER). This typically occurs when the model detects "
        "potential policy violations in the reference images. Please try a different "
        "reference image."
    ),
}


def _inline_data(part: Mapping[str, Any]) -> Mapping[str, Any] | None:
    # REST responses use camelCase; some proxies return snake_case
    inline = part.get("inlineData") or part.get("inline_data")
    if isinstance(inline, Mapping) and inline.get("data"):
        return inline
    return None


def classify_response(response: Mapping[str, Any]) -> str:
    """
    Turn one API response into an image data URI or a categorized failure.

    Args:
        response: Parsed JSON body of a generateContent call

    Returns:
        ``data:image/png;base64,...`` for the first inline image part

    Raises:
        ContentBlockedError: Prompt blocked, or candidate finished abnormally
        EmptyResultError: No candidates and no block reason
        ModelRefusalError: Candidate contained only text
        NoImageDataError: Candidate contained neither image nor text
    """
    candidates = response.get("candidates") or []
    if not candidates:
        block_reason = (response.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            logger.info("Prompt blocked reason=%s", block_reason)
            if block_reason == "OTHER":
                raise ContentBlockedError(_PROMPT_BLOCKED_OTHER, reason=block_reason)
            raise ContentBlockedError(
                f"Generation blocked: {block_reason}. "
                "The prompt may have violated safety policies.",
                reason=block_reason,
            )
        raise EmptyResultError()

    candidate = candidates[0]
    finish_reason = candidate.get("finishReason") or ""
    if finish_reason and finish_reason != FINISH_REASON_STOP:
        logger.info("Candidate finished abnormally reason=%s", finish_reason)
        message = _FINISH_REASON_MESSAGES.get(
            finish_reason, f"Generation stopped early (Reason: {finish_reason})."
        )
        raise ContentBlockedError(message, reason=finish_reason)

    text_response = ""
    for part in (candidate.get("content") or {}).get("parts") or []:
        inline = _inline_data(part)
        if inline is not None:
            return create_image_data_url(inline["data"], "image/png")
        if part.get("text"):
            text_response += part["text"]

    if text_response:
        raise ModelRefusalError(text_response)

    raise NoImageDataError(finish_reason)
