"""
Gemini REST transport.

Issues one generateContent call per request, attaching the image
configuration (aspect ratio, resolution) and safety thresholds, and returns
the parsed JSON body for studiolens.core.response to interpret. No retries.
"""

import json
import time
from typing import Any

import requests

from studiolens.core.config import Config
from studiolens.logging_config import get_logger
from studiolens.utils.exceptions import APIError, NetworkError, RequestTimeoutError

logger = get_logger(__name__)

SAFETY_SETTINGS: list[dict[str, str]] = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_ONLY_HIGH"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_ONLY_HIGH"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_ONLY_HIGH"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_ONLY_HIGH"},
]

_DEBUG_TRUNCATE_THRESHOLD = 200
_DEBUG_NEVER_TRUNCATE_KEYS = frozenset({"text", "message"})


def _truncate_image_data_for_log(obj: Any, parent_key: str | None = None) -> Any:
    """Recursively replace long base64/data URL strings with placeholders for safe logging."""
    if isinstance(obj, dict):
        return {k: _truncate_image_data_for_log(v, k) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_truncate_image_data_for_log(v, None) for v in obj]
    if isinstance(obj, str) and len(obj) >= _DEBUG_TRUNCATE_THRESHOLD:
        if parent_key in _DEBUG_NEVER_TRUNCATE_KEYS:
            return obj
        if obj.startswith("data:"):
            return f"<data URL, {len(obj)} chars>"
        return f"<string, {len(obj)} chars>"
    return obj


def build_request_body(
    parts: list[dict[str, Any]],
    aspect_ratio: str,
    resolution: str,
) -> dict[str, Any]:
    """Build the generateContent body for an image request."""
    return {
        "contents": [{"role": "user", "parts": parts}],
        "generationConfig": {
            "responseModalities": ["TEXT", "IMAGE"],
            "imageConfig": {
                "aspectRatio": aspect_ratio,
                "imageSize": resolution,
            },
        },
        "safetySettings": SAFETY_SETTINGS,
    }


def _error_detail(response: requests.Response) -> str:
    """Best-effort ``error.message`` from a Google API error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.text


def _raise_for_status(response: requests.Response, model: str) -> None:
    """Map non-200 responses to APIError."""
    status = response.status_code
    if status == 200:
        return
    detail = _error_detail(response)
    if status == 400 and "api key" in detail.lower():
        raise APIError(
            "API key not valid. Please check your Gemini API key.",
            status_code=status,
            response=response.text,
        )
    if status in (401, 403):
        raise APIError(
            "Authentication failed. Please check your Gemini API key and project permissions.",
            status_code=status,
            response=response.text,
        )
    if status == 404:
        raise APIError(
            f"API Key invalid or project not found (model: {model}). "
            "Please select a valid project.",
            status_code=status,
            response=response.text,
        )
    if status == 429:
        raise APIError(
            "Rate limit exceeded. Please wait before making more requests.",
            status_code=status,
            response=response.text,
        )
    if status >= 500:
        raise APIError(
            f"Gemini service error: {status}",
            status_code=status,
            response=response.text,
        )
    raise APIError(
        f"API request failed with status {status}: {detail}",
        status_code=status,
        response=response.text,
    )


class GeminiTransport:
    """Sends generateContent requests to the Gemini REST API."""

    def _url(self, config: Config, model: str) -> str:
        return f"{config.gemini_base_url.rstrip('/')}/models/{model}:generateContent"

    def _headers(self, api_key: str) -> dict[str, str]:
        return {
            "x-goog-api-key": api_key,
            "Content-Type": "application/json",
        }

    def _post(
        self,
        url: str,
        headers: dict[str, str],
        payload: dict[str, Any],
        timeout: int | None,
    ) -> requests.Response:
        """POST and translate requests exceptions into studiolens errors."""
        try:
            return requests.post(url, headers=headers, json=payload, timeout=timeout)
        except requests.exceptions.Timeout as e:
            raise RequestTimeoutError(
                f"Request timed out after {timeout} seconds. "
                "The generation may be taking longer than expected."
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(
                "Failed to connect to the Gemini API. Please check your internet connection.",
                original_error=e,
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(
                f"Network error during API request: {str(e)}", original_error=e
            ) from e

    def generate(
        self,
        parts: list[dict[str, Any]],
        *,
        api_key: str,
        aspect_ratio: str,
        resolution: str,
        config: Config,
    ) -> dict[str, Any]:
        """
        Send one image generation request.

        Args:
            parts: Content parts (inline images and text) in the order the model sees them
            api_key: Gemini API key
            aspect_ratio: e.g. '3:4'
            resolution: '1K', '2K' or '4K'
            config: Endpoint, model and timeout settings

        Returns:
            Parsed JSON response body

        Raises:
            APIError: Non-200 status or unparseable body
            NetworkError: Connection or other transport failure
            RequestTimeoutError: If config.generation_timeout elapsed
        """
        model = config.image_model
        url = self._url(config, model)
        payload = build_request_body(parts, aspect_ratio, resolution)
        timeout = config.generation_timeout

        logger.debug("API request url=%s model=%s timeout=%s", url, model, timeout)
        if config.debug_api:
            logger.info(
                "API request payload (image data truncated): %s",
                json.dumps(_truncate_image_data_for_log(payload), indent=2, default=str),
            )

        start_time = time.time()
        response = self._post(url, self._headers(api_key), payload, timeout)
        elapsed = time.time() - start_time
        logger.debug(
            "API response status=%s content_type=%s time=%.2fs",
            response.status_code,
            response.headers.get("content-type", ""),
            elapsed,
        )

        _raise_for_status(response, model)

        try:
            result = response.json()
        except ValueError as e:
            raise APIError(
                f"Failed to parse API response as JSON: {str(e)}",
                response=response.text,
            ) from e
        if not isinstance(result, dict):
            raise APIError("Unexpected API response shape.", response=response.text)

        if config.debug_api:
            logger.info(
                "API response (image data truncated): %s",
                json.dumps(_truncate_image_data_for_log(result), indent=2, default=str),
            )
        return result

    def ping(self, api_key: str, config: Config) -> bool:
        """
        Send a minimal text request to the lightweight model.

        Returns True on a 200 response and False on any failure. Advisory only:
        a failed ping never blocks later requests.
        """
        url = self._url(config, config.ping_model)
        payload = {"contents": [{"role": "user", "parts": [{"text": "ping"}]}]}
        logger.debug("Connection check url=%s", url)
        try:
            response = self._post(url, self._headers(api_key), payload, config.ping_timeout)
            _raise_for_status(response, config.ping_model)
        except (APIError, NetworkError, RequestTimeoutError) as e:
            logger.info("Connection check failed: %s", e)
            return False
        return True
