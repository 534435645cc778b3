"""
Prompt composition for studiolens.

Every function here is pure: the same lens, settings and references always
produce byte-identical output. Templates come from prompts.yaml; this module
only decides which template pieces apply and in what order.

Precedence rules applied while composing:
- a non-blank custom angle/pose for a cut replaces the preset for that cut
- a missing cut falls back to the first preset angle/pose
- a non-blank additional prompt is marked as overriding every pose, angle and
  layout instruction (the model is trusted to honor it)
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from studiolens.core.catalog import GridSizing, LensConfig
from studiolens.core.prompts_loader import get_template
from studiolens.core.reference import InlineImage, ReferenceImage, parse_data_url
from studiolens.core.settings import GenerationSettings

_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")


def _render(template: str, **fields: object) -> str:
    """
    Fill ``template`` and collapse blank lines left by empty blocks.

    Non-empty field values are swapped in after tidying, so user text and
    nested blocks are emitted exactly as given.
    """
    placeholders: dict[str, str] = {}
    values: dict[str, str] = {}
    for i, (name, value) in enumerate(fields.items()):
        value = str(value)
        if value:
            token = f"\x00{i}\x00"
            placeholders[name] = token
            values[token] = value
        else:
            placeholders[name] = ""
    text = _EXTRA_BLANK_LINES.sub("\n\n", template.format(**placeholders)).strip()
    for token, value in values.items():
        text = text.replace(token, value)
    return text



def build_style_block(lens: LensConfig) -> str:
    """Editorial style description for ``lens``."""
    return get_template("style", "template").format(
        lens_name=lens.name,
        focal_length=lens.focal_length,
        aperture=lens.aperture,
        technique=lens.description,
    ).strip()


def build_layout_block(settings: GenerationSettings) -> str:
    """
    Describe the frame layout and the angle/pose of every cut.

    A single cut yields one ``Camera Angle:`` and one ``Pose:`` line. A grid
    yields a collage directive with one ``Panel i:`` line per cut.
    """
    if settings.grid_count == 1:
        return get_template("layout", "single").format(
            angle=settings.effective_camera_angle(0),
            pose=settings.effective_pose(0),
        ).strip()

    if settings.grid_sizing == GridSizing.UNIFORM:
        sizing = get_template("layout", "sizing_uniform")
    else:
        sizing = get_template("layout", "sizing_random")

    panel_line = get_template("layout", "panel_line")
    panels = "\n".join(
        panel_line.format(
            index=i + 1,
            angle=settings.effective_camera_angle(i),
            pose=settings.effective_pose(i),
        )
        for i in range(settings.grid_count)
    )
    return get_template("layout", "collage").format(
        count=settings.grid_count,
        sizing=sizing,
        panels=panels,
    ).strip()


def build_override_block(settings: GenerationSettings) -> str:
    """Highest-priority user directive, or '' when the additional prompt is blank."""
    if not settings.additional_prompt or not settings.additional_prompt.strip():
        return ""
    return get_template("override", "template").format(request=settings.additional_prompt).strip()


def compose_standard_prompt(lens: LensConfig, settings: GenerationSettings) -> str:
    """Style, concept/location, layout and override blocks, in that order."""
    return _render(
        get_template("standard", "template"),
        style=build_style_block(lens),
        concept=settings.effective_concept,
        layout=build_layout_block(settings),
        override=build_override_block(settings),
    )


@dataclass(frozen=True)
class ReferencePayload:
    """Image parts and instruction text for a reference-mode request.

    ``image_parts`` holds the model photos first, then the clothing photos;
    ``text`` refers to them by that position.
    """

    image_parts: list[InlineImage] = field(default_factory=list)
    text: str = ""
    model_count: int = 0
    clothing_count: int = 0

    def to_parts(self) -> list[dict[str, Any]]:
        """Request content parts: every image in order, then the text."""
        parts: list[dict[str, Any]] = [img.to_part() for img in self.image_parts]
        parts.append({"text": self.text})
        return parts


def _selected(refs: Iterable[ReferenceImage]) -> list[ReferenceImage]:
    return [ref for ref in refs if ref.selected]


def compose_reference_prompt(
    lens: LensConfig,
    settings: GenerationSettings,
    model_refs: Iterable[ReferenceImage],
    clothing_refs: Iterable[ReferenceImage],
) -> ReferencePayload:
    """
    Build the identity + outfit transfer payload.

    Image parts and the text describing them are produced together so the
    "first N / next M images" wording always matches the part order. When
    clothing photos are selected they define the outfit and the clothing
    prompt becomes a styling note; otherwise the clothing prompt describes
    the outfit.

    Callers must check the selection first (see
    image_gen.validate_reference_selection).

    Raises:
        InvalidImageFormatError: If a selected reference is not a valid data URI
    """
    models = _selected(model_refs)
    clothing = _selected(clothing_refs)

    image_parts = [parse_data_url(ref.url) for ref in models]
    image_parts.extend(parse_data_url(ref.url) for ref in clothing)

    if clothing:
        if settings.clothing_prompt:
            note = get_template("reference", "styling_note").format(
                clothing_prompt=settings.clothing_prompt
            )
        else:
            note = get_template("reference", "exact_note")
        clothing_input = get_template("reference", "clothing_images_input").format(
            clothing_count=len(clothing)
        )
        clothing_instruction = get_template("reference", "clothing_images_instruction").format(
            note=note
        )
    else:
        clothing_input = get_template("reference", "clothing_text_input")
        clothing_instruction = get_template("reference", "clothing_text_instruction").format(
            clothing_prompt=settings.clothing_prompt
        )

    text = _render(
        get_template("reference", "template"),
        style=build_style_block(lens),
        model_count=len(models),
        clothing_input=clothing_input.strip(),
        clothing_instruction=clothing_instruction.strip(),
        concept=settings.effective_concept,
        layout=build_layout_block(settings),
        override=build_override_block(settings),
    )
    return ReferencePayload(
        image_parts=image_parts,
        text=text,
        model_count=len(models),
        clothing_count=len(clothing),
    )


def compose_edit_prompt(
    lens: LensConfig, settings: GenerationSettings, edit_instruction: str
) -> str:
    """Restate the original context and ask for only the requested change."""
    return _render(
        get_template("edit", "template"),
        style=build_style_block(lens),
        concept=settings.effective_concept,
        angle=settings.effective_camera_angle(0),
        instruction=edit_instruction,
    )


def compose_consistent_character_prompt(
    lens: LensConfig, settings: GenerationSettings, new_context: str
) -> str:
    """New scene for the character in the single supplied reference image."""
    return _render(
        get_template("consistent", "template"),
        style=build_style_block(lens),
        layout=build_layout_block(settings),
        new_context=new_context,
        override=build_override_block(settings),
    )


def compose_outfit_extraction_prompt() -> str:
    """Product shot of the worn garments and accessories, without the person."""
    return _render(get_template("outfit", "extraction"))


def compose_outfit_edit_prompt(instruction: str) -> str:
    return _render(get_template("outfit", "edit"), instruction=instruction)
