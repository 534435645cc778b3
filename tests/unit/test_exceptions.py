"""Unit tests for studiolens exceptions."""

import pytest

from studiolens.utils.exceptions import (
    APIError,
    ConfigurationError,
    ContentBlockedError,
    EmptyResultError,
    GenerationError,
    ImageProcessingError,
    InvalidImageFormatError,
    MissingCredentialError,
    ModelRefusalError,
    NetworkError,
    NoImageDataError,
    RequestTimeoutError,
    StudioError,
    ValidationError,
)


@pytest.mark.unit
class TestStudioError:
    def test_base_is_exception(self):
        assert issubclass(StudioError, Exception)

    def test_subclasses_are_studio_error(self):
        for cls in (
            ValidationError,
            APIError,
            NetworkError,
            RequestTimeoutError,
            ConfigurationError,
            ImageProcessingError,
            GenerationError,
        ):
            assert issubclass(cls, StudioError)

    def test_generation_failures_share_a_base(self):
        for cls in (ContentBlockedError, ModelRefusalError, EmptyResultError, NoImageDataError):
            assert issubclass(cls, GenerationError)


@pytest.mark.unit
class TestValidationError:
    def test_message_and_field(self):
        e = ValidationError("bad value", field="grid_count")
        assert str(e) == "bad value"
        assert e.field == "grid_count"

    def test_field_defaults_to_empty(self):
        assert ValidationError("x").field == ""

    def test_invalid_image_format_is_validation_error_on_image(self):
        e = InvalidImageFormatError()
        assert isinstance(e, ValidationError)
        assert e.field == "image"
        assert "Invalid image data format" in str(e)


@pytest.mark.unit
class TestMissingCredentialError:
    def test_is_configuration_error_with_hint(self):
        e = MissingCredentialError()
        assert isinstance(e, ConfigurationError)
        assert "studiolens key set" in str(e)
        assert "GEMINI_API_KEY" in str(e)


@pytest.mark.unit
class TestAPIError:
    def test_status_and_response(self):
        e = APIError("failed", status_code=404, response='{"error": {}}')
        assert str(e) == "failed"
        assert e.status_code == 404
        assert e.response == '{"error": {}}'


@pytest.mark.unit
class TestNetworkError:
    def test_original_error_kept(self):
        cause = OSError("connection reset")
        e = NetworkError("network down", original_error=cause)
        assert e.original_error is cause


@pytest.mark.unit
class TestImageProcessingError:
    def test_image_path(self):
        e = ImageProcessingError("cannot read", image_path="/tmp/a.png")
        assert e.image_path == "/tmp/a.png"


@pytest.mark.unit
class TestGenerationErrors:
    def test_content_blocked_reason(self):
        e = ContentBlockedError("blocked", reason="SAFETY")
        assert e.reason == "SAFETY"

    def test_model_refusal_message(self):
        e = ModelRefusalError("I can't draw that.")
        assert str(e) == "Model Refusal: I can't draw that."
        assert e.explanation == "I can't draw that."

    def test_empty_result_default_message(self):
        assert "no results" in str(EmptyResultError())

    def test_no_image_data_unknown_reason(self):
        e = NoImageDataError()
        assert str(e) == "No image data received from model. Finish Reason: Unknown"

    def test_no_image_data_with_reason(self):
        e = NoImageDataError("STOP")
        assert e.finish_reason == "STOP"
        assert str(e).endswith("Finish Reason: STOP")
