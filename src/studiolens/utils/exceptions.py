"""
Custom exceptions for studiolens.

This module defines all custom exceptions used throughout the application.
Messages are user-facing: the CLI prints them verbatim.
"""


class StudioError(Exception):
    """Base exception for all studiolens errors."""

    pass


class ValidationError(StudioError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str = "") -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Name of the field that failed validation (optional)
        """
        self.field = field
        super().__init__(message)


class InvalidImageFormatError(ValidationError):
    """Raised when an image data URI cannot be parsed."""

    def __init__(
        self,
        message: str = "Invalid image data format. Please try uploading the image again.",
    ) -> None:
        super().__init__(message, field="image")


class ConfigurationError(StudioError):
    """Raised when there is a configuration problem."""

    pass


class MissingCredentialError(ConfigurationError):
    """Raised before any network call when no API key is available."""

    def __init__(
        self,
        message: str = (
            "Gemini API key is not set. Run 'studiolens key set' or set the "
            "GEMINI_API_KEY environment variable."
        ),
    ) -> None:
        super().__init__(message)


class APIError(StudioError):
    """Raised when an API call fails."""

    def __init__(self, message: str, status_code: int = 0, response: str = "") -> None:
        """
        Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response: Raw API response (if available)
        """
        self.status_code = status_code
        self.response = response
        super().__init__(message)


class NetworkError(StudioError):
    """Raised when a network operation fails."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """
        Initialize network error.

        Args:
            message: Error message
            original_error: The underlying exception that caused this error
        """
        self.original_error = original_error
        super().__init__(message)


class RequestTimeoutError(StudioError):
    """Raised when a request times out."""

    pass


class ImageProcessingError(StudioError):
    """Raised when an image file cannot be read or decoded."""

    def __init__(self, message: str, image_path: str = "") -> None:
        """
        Initialize image processing error.

        Args:
            message: Error message
            image_path: Path to the image that caused the error
        """
        self.image_path = image_path
        super().__init__(message)


class GenerationError(StudioError):
    """Base for failures classified from a model response."""

    pass


class ContentBlockedError(GenerationError):
    """Raised when the prompt or the candidate was blocked by the provider."""

    def __init__(self, message: str, reason: str = "") -> None:
        """
        Initialize content blocked error.

        Args:
            message: Error message
            reason: Block reason or finish reason reported by the API
        """
        self.reason = reason
        super().__init__(message)


class ModelRefusalError(GenerationError):
    """Raised when the model answered with text only (usually a refusal)."""

    def __init__(self, explanation: str) -> None:
        self.explanation = explanation
        super().__init__(f"Model Refusal: {explanation}")


class EmptyResultError(GenerationError):
    """Raised when the response has no candidates and no block reason."""

    def __init__(
        self,
        message: str = (
            "The model returned no results. This might be due to high safety settings "
            "or a refusal to generate the specific content."
        ),
    ) -> None:
        super().__init__(message)


class NoImageDataError(GenerationError):
    """Raised when a candidate carries neither image nor text."""

    def __init__(self, finish_reason: str = "") -> None:
        self.finish_reason = finish_reason
        super().__init__(
            f"No image data received from model. Finish Reason: {finish_reason or 'Unknown'}"
        )
