"""Unit tests for the Gemini REST transport (mocked requests.post)."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from studiolens.core.config import Config
from studiolens.core.transport import (
    SAFETY_SETTINGS,
    GeminiTransport,
    _truncate_image_data_for_log,
    build_request_body,
)
from studiolens.utils.exceptions import APIError, NetworkError, RequestTimeoutError

PARTS = [{"inlineData": {"mimeType": "image/png", "data": "QUJD"}}, {"text": "prompt"}]


def _response(status: int = 200, body: object = None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.headers = {"content-type": "application/json"}
    resp.text = text
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body if body is not None else {}
    return resp


def _generate(config: Config | None = None) -> dict:
    return GeminiTransport().generate(
        PARTS,
        api_key="AIza-test",
        aspect_ratio="3:4",
        resolution="2K",
        config=config or Config(),
    )


@pytest.mark.unit
class TestRequestBody:
    def test_shape(self):
        body = build_request_body(PARTS, "16:9", "4K")
        assert body["contents"] == [{"role": "user", "parts": PARTS}]
        assert body["generationConfig"]["imageConfig"] == {"aspectRatio": "16:9", "imageSize": "4K"}
        assert body["generationConfig"]["responseModalities"] == ["TEXT", "IMAGE"]
        assert body["safetySettings"] == SAFETY_SETTINGS

    def test_all_categories_block_only_high(self):
        assert len(SAFETY_SETTINGS) == 4
        assert {s["threshold"] for s in SAFETY_SETTINGS} == {"BLOCK_ONLY_HIGH"}


@pytest.mark.unit
class TestGenerate:
    def test_success_posts_to_model_url(self):
        body = {"candidates": []}
        with patch(
            "studiolens.core.transport.requests.post", return_value=_response(body=body)
        ) as mock_post:
            result = _generate(Config(gemini_base_url="https://example.test/v1beta/"))
        assert result == body
        args, kwargs = mock_post.call_args
        assert args[0] == (
            "https://example.test/v1beta/models/gemini-3-pro-image-preview:generateContent"
        )
        assert kwargs["headers"]["x-goog-api-key"] == "AIza-test"
        assert kwargs["json"]["generationConfig"]["imageConfig"]["aspectRatio"] == "3:4"
        assert kwargs["timeout"] is None

    def test_configured_timeout_passed(self):
        with patch(
            "studiolens.core.transport.requests.post", return_value=_response(body={})
        ) as mock_post:
            _generate(Config(generation_timeout=120))
        assert mock_post.call_args.kwargs["timeout"] == 120

    @pytest.mark.parametrize(
        "status,body,fragment",
        [
            (400, {"error": {"message": "API key not valid. Please pass a valid API key."}}, "API key not valid"),
            (403, {"error": {"message": "denied"}}, "Authentication failed"),
            (404, {"error": {"message": "not found"}}, "project not found"),
            (429, {}, "Rate limit"),
            (503, {}, "Gemini service error: 503"),
            (400, {"error": {"message": "Bad aspect ratio"}}, "Bad aspect ratio"),
        ],
    )
    def test_http_errors(self, status: int, body: dict, fragment: str):
        with patch(
            "studiolens.core.transport.requests.post",
            return_value=_response(status, body, text="raw body"),
        ):
            with pytest.raises(APIError) as exc_info:
                _generate()
        assert fragment in str(exc_info.value)
        assert exc_info.value.status_code == status
        assert exc_info.value.response == "raw body"

    def test_404_mentions_model(self):
        with patch(
            "studiolens.core.transport.requests.post", return_value=_response(404, {})
        ):
            with pytest.raises(APIError) as exc_info:
                _generate(Config(image_model="my-model"))
        assert "my-model" in str(exc_info.value)

    def test_non_json_body(self):
        with patch(
            "studiolens.core.transport.requests.post",
            return_value=_response(body=ValueError("Expecting value")),
        ):
            with pytest.raises(APIError) as exc_info:
                _generate()
        assert "Failed to parse API response" in str(exc_info.value)

    def test_non_object_body(self):
        with patch("studiolens.core.transport.requests.post", return_value=_response(body=[1])):
            with pytest.raises(APIError):
                _generate()

    def test_timeout(self):
        with patch(
            "studiolens.core.transport.requests.post",
            side_effect=requests.exceptions.Timeout(),
        ):
            with pytest.raises(RequestTimeoutError):
                _generate(Config(generation_timeout=5))

    def test_connection_error(self):
        err = requests.exceptions.ConnectionError("refused")
        with patch("studiolens.core.transport.requests.post", side_effect=err):
            with pytest.raises(NetworkError) as exc_info:
                _generate()
        assert exc_info.value.original_error is err

    def test_other_request_error(self):
        with patch(
            "studiolens.core.transport.requests.post",
            side_effect=requests.exceptions.RequestException("boom"),
        ):
            with pytest.raises(NetworkError) as exc_info:
                _generate()
        assert "boom" in str(exc_info.value)


@pytest.mark.unit
class TestPing:
    def test_ok(self):
        with patch(
            "studiolens.core.transport.requests.post", return_value=_response(body={})
        ) as mock_post:
            assert GeminiTransport().ping("AIza-test", Config(ping_model="tiny")) is True
        assert mock_post.call_args.args[0].endswith("/models/tiny:generateContent")
        assert mock_post.call_args.kwargs["timeout"] == 15

    def test_http_failure_is_false(self):
        with patch("studiolens.core.transport.requests.post", return_value=_response(401)):
            assert GeminiTransport().ping("bad", Config()) is False

    def test_network_failure_is_false(self):
        with patch(
            "studiolens.core.transport.requests.post",
            side_effect=requests.exceptions.ConnectionError(),
        ):
            assert GeminiTransport().ping("AIza-test", Config()) is False


@pytest.mark.unit
class TestDebugTruncation:
    def test_long_strings_replaced(self):
        payload = {"data": "A" * 500, "url": "data:" + "B" * 500, "text": "C" * 500}
        out = _truncate_image_data_for_log(payload)
        assert out["data"] == "<string, 500 chars>"
        assert out["url"] == "<data URL, 505 chars>"
        assert out["text"] == "C" * 500
