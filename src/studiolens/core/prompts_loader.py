"""
Load prompt templates from the bundled prompts.yaml file.

Prompts are defined in src/studiolens/prompts.yaml and loaded once per process.
Add new prompt keys there and access them via get_template().
"""

import importlib.resources
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from studiolens.utils.exceptions import ConfigurationError

# Module-level cache for parsed prompts
_prompts_data: dict[str, Any] | None = None


class StyleSection(BaseModel):
    template: str = Field(..., min_length=1)


class LayoutSection(BaseModel):
    single: str = Field(..., min_length=1)
    collage: str = Field(..., min_length=1)
    panel_line: str = Field(..., min_length=1)
    sizing_uniform: str = Field(..., min_length=1)
    sizing_random: str = Field(..., min_length=1)


class OverrideSection(BaseModel):
    template: str = Field(..., min_length=1)


class StandardSection(BaseModel):
    template: str = Field(..., min_length=1)


class ReferenceSection(BaseModel):
    template: str = Field(..., min_length=1)
    clothing_images_input: str = Field(..., min_length=1)
    clothing_images_instruction: str = Field(..., min_length=1)
    styling_note: str = Field(..., min_length=1)
    exact_note: str = Field(..., min_length=1)
    clothing_text_input: str = Field(..., min_length=1)
    clothing_text_instruction: str = Field(..., min_length=1)


class EditSection(BaseModel):
    template: str = Field(..., min_length=1)


class ConsistentSection(BaseModel):
    template: str = Field(..., min_length=1)


class OutfitSection(BaseModel):
    extraction: str = Field(..., min_length=1)
    edit: str = Field(..., min_length=1)


class PromptsSchema(BaseModel):
    """Schema for prompts.yaml."""

    model_config = {"extra": "allow"}  # Allow additional keys for future expansion

    style: StyleSection
    layout: LayoutSection
    override: OverrideSection
    standard: StandardSection
    reference: ReferenceSection
    edit: EditSection
    consistent: ConsistentSection
    outfit: OutfitSection


# Placeholders each template must carry; checked by get_template()
REQUIRED_PLACEHOLDERS: dict[tuple[str, str], tuple[str, ...]] = {
    ("style", "template"): ("{lens_name}", "{focal_length}", "{aperture}", "{technique}"),
    ("layout", "single"): ("{angle}", "{pose}"),
    ("layout", "collage"): ("{count}", "{sizing}", "{panels}"),
    ("layout", "panel_line"): ("{index}", "{angle}", "{pose}"),
    ("override", "template"): ("{request}",),
    ("standard", "template"): ("{style}", "{concept}", "{layout}", "{override}"),
    ("reference", "template"): (
        "{style}",
        "{model_count}",
        "{clothing_input}",
        "{clothing_instruction}",
        "{concept}",
        "{layout}",
        "{override}",
    ),
    ("reference", "clothing_images_input"): ("{clothing_count}",),
    ("reference", "clothing_images_instruction"): ("{note}",),
    ("reference", "styling_note"): ("{clothing_prompt}",),
    ("reference", "clothing_text_instruction"): ("{clothing_prompt}",),
    ("edit", "template"): ("{style}", "{concept}", "{angle}", "{instruction}"),
    ("consistent", "template"): ("{style}", "{layout}", "{new_context}", "{override}"),
    ("outfit", "edit"): ("{instruction}",),
}


def _load_prompts() -> dict[str, Any]:
    """Load and parse prompts.yaml from the package. Cached after first call.

    Returns:
        Dictionary of prompt data.

    Raises:
        ConfigurationError: If YAML is missing, malformed, or fails validation.
    """
    global _prompts_data
    if _prompts_data is not None:
        return _prompts_data

    try:
        with (
            importlib.resources.files("studiolens")
            .joinpath("prompts.yaml")
            .open(encoding="utf-8") as f
        ):
            raw = f.read()
    except FileNotFoundError as e:
        raise ConfigurationError(
            "prompts.yaml not found. This file is required and should be bundled with the package."
        ) from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse prompts.yaml: {e}. Check YAML syntax and formatting."
        ) from e

    if data is None:
        raise ConfigurationError("prompts.yaml is empty. Expected prompt template sections.")

    try:
        PromptsSchema(**data)
    except ValidationError as e:
        errors = "\n".join(
            [f"  - {'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        )
        raise ConfigurationError(f"Invalid prompts.yaml structure:\n{errors}") from e

    _prompts_data = data
    return _prompts_data


def get_prompt(key: str, subkey: str | None = None) -> str | None:
    """
    Get a prompt string from prompts.yaml.

    Args:
        key: Top-level key (e.g. "layout").
        subkey: Optional subkey (e.g. "collage") for nested value.

    Returns:
        The prompt string, or None if not found.
    """
    data = _load_prompts()
    value = data.get(key)
    if value is None:
        return None
    if subkey is not None:
        value = value.get(subkey) if isinstance(value, dict) else None
    return value if isinstance(value, str) else None


def get_template(key: str, subkey: str) -> str:
    """
    Return a required template, checking its placeholders.

    Raises:
        ConfigurationError: If the template is missing or lacks a required placeholder.
    """
    template = get_prompt(key, subkey)
    if not template:
        raise ConfigurationError(f"{key}.{subkey} not found in prompts.yaml. This key is required.")
    for placeholder in REQUIRED_PLACEHOLDERS.get((key, subkey), ()):
        if placeholder not in template:
            raise ConfigurationError(f"{key}.{subkey} must contain {placeholder} placeholder.")
    return template
