"""
Image generation operations.

Each public function resolves the API key (failing before any network call
when there is none), composes the prompt, sends one request through the
Gemini transport and classifies the response. Nothing is retried; errors
propagate to the caller with user-facing messages.
"""

import time
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from PIL import Image

from studiolens.core.catalog import AspectRatio, Resolution, get_lens
from studiolens.core.config import Config, get_config
from studiolens.core.key_store import KeyStore, get_key_store
from studiolens.core.prompt import (
    compose_consistent_character_prompt,
    compose_edit_prompt,
    compose_outfit_edit_prompt,
    compose_outfit_extraction_prompt,
    compose_reference_prompt,
    compose_standard_prompt,
)
from studiolens.core.reference import (
    ReferenceImage,
    decode_data_url,
    load_image_from_data_url,
    parse_data_url,
)
from studiolens.core.response import classify_response
from studiolens.core.settings import GeneratedImage, GenerationSettings
from studiolens.core.transport import GeminiTransport
from studiolens.logging_config import get_logger, log_prompts
from studiolens.utils.exceptions import MissingCredentialError, ValidationError

logger = get_logger(__name__)

# Max prompt length for logging (large so prompts are effectively never truncated)
_PROMPT_LOG_MAX = 50_000

# Outfit extraction and outfit edits always produce a square 2K product shot
OUTFIT_ASPECT_RATIO = AspectRatio.SQUARE
OUTFIT_RESOLUTION = Resolution.HIGH

_default_transport = GeminiTransport()


@dataclass
class GenerationResult:
    """Result of one generation request.

    ``data_url`` is the primary output (``data:image/png;base64,...``); use
    ``image`` or ``image_data`` to save or post-process it.
    """

    data_url: str
    prompt_used: str
    model_used: str
    generation_time: float
    reference_count: int = 0

    @property
    def format(self) -> str:
        return "png"

    @property
    def image_data(self) -> bytes:
        """Raw image bytes decoded from the data URI."""
        return decode_data_url(self.data_url)

    @property
    def image(self) -> Image.Image:
        """The image decoded with Pillow."""
        return load_image_from_data_url(self.data_url)

    def save(self, path: str) -> None:
        """Write the image bytes unchanged to ``path``."""
        with open(path, "wb") as f:
            f.write(self.image_data)

    def to_history(self, label: str) -> GeneratedImage:
        """History entry pairing this image with its label (see history_label)."""
        return GeneratedImage(url=self.data_url, prompt=label)


def validate_reference_selection(
    model_refs: Iterable[ReferenceImage],
    clothing_refs: Iterable[ReferenceImage],
    clothing_prompt: str,
) -> None:
    """
    Check that a reference-mode request can be attempted.

    Raises:
        ValidationError: No model reference selected (field 'model_refs'), or no
            clothing reference selected and a blank clothing prompt (field 'clothing')
    """
    if not any(ref.selected for ref in model_refs):
        raise ValidationError(
            "Select at least one model reference image.", field="model_refs"
        )
    has_clothing_text = bool(clothing_prompt and clothing_prompt.strip())
    if not any(ref.selected for ref in clothing_refs) and not has_clothing_text:
        raise ValidationError(
            "Select a clothing reference image or enter a clothing description.",
            field="clothing",
        )


def validate_outfit_source(model_refs: Iterable[ReferenceImage]) -> ReferenceImage:
    """
    Return the single selected model reference used for outfit extraction.

    Raises:
        ValidationError: If not exactly one model reference is selected
    """
    selected = [ref for ref in model_refs if ref.selected]
    if len(selected) != 1:
        raise ValidationError(
            "Select exactly one model photo to extract the outfit from.",
            field="model_refs",
        )
    return selected[0]


def _require_instruction(value: str, field: str) -> None:
    if not value or not value.strip():
        label = field.replace("_", " ").capitalize()
        raise ValidationError(f"{label} cannot be empty.", field=field)


def resolve_api_key(
    api_key: str | None = None,
    key_store: KeyStore | None = None,
    config: Config | None = None,
) -> str:
    """
    Return the key to use: explicit argument, else the key store chain.

    Surrounding whitespace is dropped; it is not valid in a request header.

    Raises:
        MissingCredentialError: If no key is available
    """
    if api_key and api_key.strip():
        return api_key.strip()
    store = key_store or get_key_store(config)
    key = (store.get() or "").strip()
    if not key:
        raise MissingCredentialError()
    return key


def _run(
    operation: str,
    parts: list[dict[str, Any]],
    prompt: str,
    aspect_ratio: AspectRatio,
    resolution: Resolution,
    reference_count: int,
    api_key: str | None,
    key_store: KeyStore | None,
    config: Config | None,
    transport: GeminiTransport | None,
) -> GenerationResult:
    config = config or get_config()
    key = resolve_api_key(api_key, key_store, config)
    transport = transport or _default_transport

    logger.info(
        "%s model=%s aspect_ratio=%s resolution=%s references=%d",
        operation,
        config.image_model,
        aspect_ratio.value,
        resolution.value,
        reference_count,
    )
    if log_prompts():
        truncated = prompt if len(prompt) <= _PROMPT_LOG_MAX else prompt[:_PROMPT_LOG_MAX] + "..."
        logger.info("Prompt (used): %s", truncated)

    start_time = time.time()
    response = transport.generate(
        parts,
        api_key=key,
        aspect_ratio=aspect_ratio.value,
        resolution=resolution.value,
        config=config,
    )
    data_url = classify_response(response)
    generation_time = time.time() - start_time
    logger.info("Generated in %.1fs model=%s", generation_time, config.image_model)

    return GenerationResult(
        data_url=data_url,
        prompt_used=prompt,
        model_used=config.image_model,
        generation_time=generation_time,
        reference_count=reference_count,
    )


def generate_image(
    settings: GenerationSettings,
    *,
    api_key: str | None = None,
    key_store: KeyStore | None = None,
    config: Config | None = None,
    transport: GeminiTransport | None = None,
) -> GenerationResult:
    """
    Generate an image from settings alone (standard mode).

    Args:
        settings: Generation settings snapshot
        api_key: Optional key; defaults to the key store chain
        key_store: Optional key store; defaults to get_key_store()
        config: Optional config; defaults to get_config()
        transport: Optional transport (for tests or custom endpoints)

    Returns:
        GenerationResult with the image data URI and metadata

    Raises:
        MissingCredentialError: If no API key is available
        ValidationError: If settings are invalid
        ContentBlockedError, ModelRefusalError, EmptyResultError, NoImageDataError:
            If the model did not return an image
        APIError, NetworkError, RequestTimeoutError: If the request failed
    """
    settings.validate()
    prompt = compose_standard_prompt(get_lens(settings.lens_id), settings)
    return _run(
        "Generating image",
        [{"text": prompt}],
        prompt,
        settings.aspect_ratio,
        settings.resolution,
        0,
        api_key,
        key_store,
        config,
        transport,
    )


def generate_from_references(
    model_refs: Iterable[ReferenceImage],
    clothing_refs: Iterable[ReferenceImage],
    settings: GenerationSettings,
    *,
    api_key: str | None = None,
    key_store: KeyStore | None = None,
    config: Config | None = None,
    transport: GeminiTransport | None = None,
) -> GenerationResult:
    """
    Generate the model from the model photos wearing the clothing photos (or description).

    The selection is validated before anything else; see
    validate_reference_selection(). Other arguments and errors as in generate_image().
    """
    model_refs = list(model_refs)
    clothing_refs = list(clothing_refs)
    validate_reference_selection(model_refs, clothing_refs, settings.clothing_prompt)
    settings.validate()

    payload = compose_reference_prompt(
        get_lens(settings.lens_id), settings, model_refs, clothing_refs
    )
    return _run(
        "Generating from references",
        payload.to_parts(),
        payload.text,
        settings.aspect_ratio,
        settings.resolution,
        payload.model_count + payload.clothing_count,
        api_key,
        key_store,
        config,
        transport,
    )


def edit_image(
    image_url: str,
    edit_instruction: str,
    settings: GenerationSettings,
    *,
    api_key: str | None = None,
    key_store: KeyStore | None = None,
    config: Config | None = None,
    transport: GeminiTransport | None = None,
) -> GenerationResult:
    """Apply ``edit_instruction`` to an existing image, keeping everything else."""
    _require_instruction(edit_instruction, "instruction")
    source = parse_data_url(image_url)
    prompt = compose_edit_prompt(get_lens(settings.lens_id), settings, edit_instruction)
    return _run(
        "Editing image",
        [source.to_part(), {"text": prompt}],
        prompt,
        settings.aspect_ratio,
        settings.resolution,
        1,
        api_key,
        key_store,
        config,
        transport,
    )


def generate_consistent_image(
    reference_url: str,
    new_context: str,
    settings: GenerationSettings,
    *,
    api_key: str | None = None,
    key_store: KeyStore | None = None,
    config: Config | None = None,
    transport: GeminiTransport | None = None,
) -> GenerationResult:
    """Generate the next cut: same character as ``reference_url`` in a new scene."""
    _require_instruction(new_context, "new_context")
    settings.validate()
    source = parse_data_url(reference_url)
    prompt = compose_consistent_character_prompt(
        get_lens(settings.lens_id), settings, new_context
    )
    return _run(
        "Generating next cut",
        [source.to_part(), {"text": prompt}],
        prompt,
        settings.aspect_ratio,
        settings.resolution,
        1,
        api_key,
        key_store,
        config,
        transport,
    )


def extract_outfit(
    image_url: str,
    *,
    api_key: str | None = None,
    key_store: KeyStore | None = None,
    config: Config | None = None,
    transport: GeminiTransport | None = None,
) -> GenerationResult:
    """Product shot of the outfit worn in ``image_url`` with the person removed."""
    source = parse_data_url(image_url)
    prompt = compose_outfit_extraction_prompt()
    return _run(
        "Extracting outfit",
        [source.to_part(), {"text": prompt}],
        prompt,
        OUTFIT_ASPECT_RATIO,
        OUTFIT_RESOLUTION,
        1,
        api_key,
        key_store,
        config,
        transport,
    )


def edit_outfit(
    image_url: str,
    instruction: str,
    *,
    api_key: str | None = None,
    key_store: KeyStore | None = None,
    config: Config | None = None,
    transport: GeminiTransport | None = None,
) -> GenerationResult:
    """Edit an extracted outfit image, keeping the product-photo style."""
    _require_instruction(instruction, "instruction")
    source = parse_data_url(image_url)
    prompt = compose_outfit_edit_prompt(instruction)
    return _run(
        "Editing outfit",
        [source.to_part(), {"text": prompt}],
        prompt,
        OUTFIT_ASPECT_RATIO,
        OUTFIT_RESOLUTION,
        1,
        api_key,
        key_store,
        config,
        transport,
    )


def validate_connection(
    api_key: str,
    config: Config | None = None,
    transport: GeminiTransport | None = None,
) -> bool:
    """
    Check that ``api_key`` can reach the API with one minimal request.

    Returns False for a blank key without making a request. The result is
    advisory and never gates generation.
    """
    if not api_key or not api_key.strip():
        return False
    config = config or get_config()
    transport = transport or _default_transport
    return transport.ping(api_key.strip(), config)
