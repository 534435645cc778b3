"""
studiolens - fashion editorial image generation with Gemini

A Python package that turns structured shoot settings (lens, camera angle,
pose, grid layout, reference photos) into instructions for the Gemini image
model and interprets its responses.

Library usage:
- Build a GenerationSettings and call generate_image(settings), or
  generate_from_references(model_refs, clothing_refs, settings) for
  identity/outfit transfer.
- Configuration can be passed per operation (config=...) or via the shared
  config: use get_config() / set_config().
- The API key comes from the key store (get_key_store()): a locally stored,
  obfuscated value, else GEMINI_API_KEY from the environment. Pass api_key=...
  or key_store=... to override.
- Logging: control verbosity with set_verbosity(0|1|2) or configure_logging(verbose_level, quiet);
  STUDIOLENS_VERBOSITY env (0/1/2) is read when the CLI runs.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("studiolens")
except PackageNotFoundError:
    # Package is not installed (e.g., running from source in development)
    __version__ = "0.0.0.dev"

from studiolens.core.catalog import (
    CAMERA_ANGLES,
    CONCEPT_GROUPS,
    FASHION_POSES,
    GRID_COUNTS,
    LENSES,
    AspectRatio,
    GridSizing,
    LensConfig,
    Resolution,
    get_lens,
)
from studiolens.core.config import (
    DEFAULT_GEMINI_BASE_URL,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_PING_MODEL,
    Config,
    get_config,
    set_config,
)
from studiolens.core.image_gen import (
    GenerationResult,
    edit_image,
    edit_outfit,
    extract_outfit,
    generate_consistent_image,
    generate_from_references,
    generate_image,
    validate_connection,
    validate_outfit_source,
    validate_reference_selection,
)
from studiolens.core.key_store import KeyStore, get_key_store, set_key_store
from studiolens.core.prompt import (
    ReferencePayload,
    build_layout_block,
    build_override_block,
    build_style_block,
    compose_consistent_character_prompt,
    compose_edit_prompt,
    compose_outfit_edit_prompt,
    compose_outfit_extraction_prompt,
    compose_reference_prompt,
    compose_standard_prompt,
)
from studiolens.core.reference import (
    InlineImage,
    ReferenceImage,
    ReferenceSet,
    create_image_data_url,
    load_reference_image,
    parse_data_url,
)
from studiolens.core.response import classify_response
from studiolens.core.settings import (
    CutSettings,
    GeneratedImage,
    GenerationSettings,
    history_label,
)
from studiolens.logging_config import configure_logging, set_verbosity
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

__all__ = [
    "APIError",
    "AspectRatio",
    "CAMERA_ANGLES",
    "CONCEPT_GROUPS",
    "Config",
    "ConfigurationError",
    "ContentBlockedError",
    "CutSettings",
    "DEFAULT_GEMINI_BASE_URL",
    "DEFAULT_IMAGE_MODEL",
    "DEFAULT_PING_MODEL",
    "EmptyResultError",
    "FASHION_POSES",
    "GRID_COUNTS",
    "GeneratedImage",
    "GenerationError",
    "GenerationResult",
    "GenerationSettings",
    "GridSizing",
    "ImageProcessingError",
    "InlineImage",
    "InvalidImageFormatError",
    "KeyStore",
    "LENSES",
    "LensConfig",
    "MissingCredentialError",
    "ModelRefusalError",
    "NetworkError",
    "NoImageDataError",
    "ReferenceImage",
    "ReferencePayload",
    "ReferenceSet",
    "RequestTimeoutError",
    "Resolution",
    "StudioError",
    "ValidationError",
    "build_layout_block",
    "build_override_block",
    "build_style_block",
    "classify_response",
    "compose_consistent_character_prompt",
    "compose_edit_prompt",
    "compose_outfit_edit_prompt",
    "compose_outfit_extraction_prompt",
    "compose_reference_prompt",
    "compose_standard_prompt",
    "configure_logging",
    "create_image_data_url",
    "edit_image",
    "edit_outfit",
    "extract_outfit",
    "generate_consistent_image",
    "generate_from_references",
    "generate_image",
    "get_config",
    "get_key_store",
    "get_lens",
    "history_label",
    "load_reference_image",
    "parse_data_url",
    "set_config",
    "set_key_store",
    "set_verbosity",
    "validate_connection",
    "validate_outfit_source",
    "validate_reference_selection",
]
