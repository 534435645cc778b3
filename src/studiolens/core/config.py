"""
Configuration management for studiolens.

This module handles the Gemini endpoint, model selection, timeouts and the
location of the local key file. The API key itself is resolved through the
key store (see studiolens.core.key_store); ``gemini_api_key`` here is only the
environment-provided default.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from studiolens.logging_config import get_logger
from studiolens.utils.exceptions import ConfigurationError

logger = get_logger(__name__)

# Load environment variables from .env file
load_dotenv()

# Default configuration constants
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_IMAGE_MODEL = "gemini-3-pro-image-preview"
DEFAULT_PING_MODEL = "gemini-2.5-flash"
DEFAULT_KEY_FILE = Path.home() / ".studiolens" / "credentials.json"

# Checked in order; the first non-empty value is the environment default key
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


def api_key_from_env() -> str:
    """Return the first non-empty API key from API_KEY_ENV_VARS, or ''."""
    for name in API_KEY_ENV_VARS:
        value = os.getenv(name, "").strip()
        if value:
            return value
    return ""


@dataclass
class Config:
    """Configuration for studiolens."""

    # Environment default key (excluded from repr to avoid leaking secrets)
    gemini_api_key: str = field(default="", repr=False)
    gemini_base_url: str = DEFAULT_GEMINI_BASE_URL

    # Model Configuration
    image_model: str = DEFAULT_IMAGE_MODEL
    ping_model: str = DEFAULT_PING_MODEL

    # None leaves the timeout to requests (no client-side limit)
    generation_timeout: int | None = None
    ping_timeout: int = 15

    key_file: Path = DEFAULT_KEY_FILE

    # Debug: log raw API payload/response with image data truncated
    debug_api: bool = False

    _validated: bool = field(default=False, repr=False)

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create a Config instance from environment variables.

        Environment variables:
            GEMINI_API_KEY / GOOGLE_API_KEY / API_KEY: Default API key
            STUDIOLENS_BASE_URL: Gemini REST base URL
            STUDIOLENS_IMAGE_MODEL: Image generation model id
            STUDIOLENS_PING_MODEL: Lightweight model used by the connection test
            STUDIOLENS_TIMEOUT: Generation timeout in seconds (unset = no limit)
            STUDIOLENS_KEY_FILE: Path of the obfuscated key file
            STUDIOLENS_DEBUG_API: 1/true/yes to log truncated payloads

        Returns:
            Config instance populated from environment
        """

        def _optional_int_env(name: str) -> int | None:
            val = os.getenv(name)
            if val is None or val.strip() == "":
                return None
            try:
                return int(val)
            except ValueError as e:
                raise ConfigurationError(f"{name} must be an integer, got {val!r}.") from e

        debug_api = os.getenv("STUDIOLENS_DEBUG_API", "").strip().lower() in ("1", "true", "yes")
        key_file = os.getenv("STUDIOLENS_KEY_FILE")

        return cls(
            gemini_api_key=api_key_from_env(),
            gemini_base_url=os.getenv("STUDIOLENS_BASE_URL", DEFAULT_GEMINI_BASE_URL),
            image_model=os.getenv("STUDIOLENS_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            ping_model=os.getenv("STUDIOLENS_PING_MODEL", DEFAULT_PING_MODEL),
            generation_timeout=_optional_int_env("STUDIOLENS_TIMEOUT"),
            key_file=Path(key_file).expanduser() if key_file else DEFAULT_KEY_FILE,
            debug_api=debug_api,
        )

    def validate(self) -> None:
        """
        Validate the configuration.

        The API key is not checked here; a missing key is reported by the
        generation functions before any network call.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        logger.debug("Validating config")

        if not self.image_model.strip():
            raise ConfigurationError("Image model ID cannot be empty.")
        if not self.ping_model.strip():
            raise ConfigurationError("Ping model ID cannot be empty.")
        if not self.gemini_base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"Gemini base URL must start with http:// or https://, got {self.gemini_base_url!r}."
            )
        if self.generation_timeout is not None and self.generation_timeout <= 0:
            raise ConfigurationError(
                f"generation_timeout must be positive, got {self.generation_timeout}."
            )
        if self.ping_timeout <= 0:
            raise ConfigurationError(f"ping_timeout must be positive, got {self.ping_timeout}.")

        self._validated = True

    def is_valid(self) -> bool:
        """
        Check if configuration has been validated.

        Returns:
            True if validate() has been called successfully
        """
        return self._validated

    def set_image_model(self, model: str) -> None:
        """
        Set the image generation model.

        Args:
            model: Gemini model id (e.g. 'gemini-3-pro-image-preview')

        Raises:
            ConfigurationError: If model is empty
        """
        if not model or not model.strip():
            raise ConfigurationError("Model ID cannot be empty")

        self.image_model = model
        self._validated = False


# Global configuration instance
_global_config: Config | None = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        The global Config instance
    """
    global _global_config
    if _global_config is None:
        _global_config = Config.from_env()
    return _global_config


def set_config(config: Config) -> None:
    """
    Set the global configuration instance.

    Args:
        config: The Config instance to use globally
    """
    global _global_config
    _global_config = config
