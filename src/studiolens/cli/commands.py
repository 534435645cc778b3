"""
Click command definitions for the studiolens CLI.

This module contains the Click command group and all CLI commands
(generate, edit, next-cut, extract-outfit, edit-outfit, lenses, presets, key).
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from studiolens import (
    CAMERA_ANGLES,
    CONCEPT_GROUPS,
    FASHION_POSES,
    GRID_COUNTS,
    LENSES,
    AspectRatio,
    Config,
    GeneratedImage,
    GenerationResult,
    GenerationSettings,
    GridSizing,
    MissingCredentialError,
    ReferenceImage,
    ReferenceSet,
    Resolution,
    ValidationError,
    __version__,
    edit_image,
    edit_outfit,
    extract_outfit,
    generate_consistent_image,
    generate_from_references,
    generate_image,
    get_key_store,
    history_label,
    load_reference_image,
    validate_connection,
    validate_outfit_source,
)
from studiolens.cli import progress
from studiolens.cli.handlers import run_with_error_handling
from studiolens.cli.utils import EXIT_API_OR_NETWORK, default_output_path, resolve_preset
from studiolens.core.catalog import ASPECT_RATIO_LABELS, GRID_SIZING_LABELS, RESOLUTION_LABELS
from studiolens.logging_config import configure_logging, get_verbosity_from_env, redact_secret

_IMAGE_PATH = click.Path(exists=True, dir_okay=False, path_type=Path)


def _apply(options: list[Callable[[Any], Any]], fn: Callable[..., Any]) -> Callable[..., Any]:
    for option in reversed(options):
        fn = option(fn)
    return fn


def settings_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Options that build a GenerationSettings."""
    return _apply(
        [
            click.option(
                "--lens",
                "lens_id",
                type=click.Choice([lens.id for lens in LENSES]),
                default=LENSES[0].id,
                show_default=True,
                help="Lens whose look the image should have.",
            ),
            click.option(
                "--aspect-ratio",
                type=click.Choice([a.value for a in AspectRatio]),
                default=AspectRatio.PORTRAIT.value,
                show_default=True,
            ),
            click.option(
                "--resolution",
                type=click.Choice([r.value for r in Resolution]),
                default=Resolution.HIGH.value,
                show_default=True,
            ),
            click.option(
                "--grid",
                "grid_count",
                type=int,
                default=1,
                show_default=True,
                help=f"Number of cuts in one image ({', '.join(str(n) for n in GRID_COUNTS)}).",
            ),
            click.option(
                "--sizing",
                "grid_sizing",
                type=click.Choice([s.value for s in GridSizing]),
                default=GridSizing.UNIFORM.value,
                show_default=True,
                help="Panel sizing for multi-cut layouts.",
            ),
            click.option(
                "--angle",
                "angles",
                multiple=True,
                help="Camera angle preset per cut (index or text; repeat in cut order).",
            ),
            click.option(
                "--custom-angle",
                "custom_angles",
                multiple=True,
                help="Free-text camera angle per cut; overrides --angle when non-empty.",
            ),
            click.option(
                "--pose",
                "poses",
                multiple=True,
                help="Pose preset per cut (index or text; repeat in cut order).",
            ),
            click.option(
                "--custom-pose",
                "custom_poses",
                multiple=True,
                help="Free-text pose per cut; overrides --pose when non-empty.",
            ),
            click.option("--concept", default=CONCEPT_GROUPS["indoor"][0], show_default=True),
            click.option(
                "--location", default="", help="Custom location; overrides --concept."
            ),
            click.option(
                "--prompt",
                "additional_prompt",
                default="",
                help="Extra request that takes priority over every other instruction.",
            ),
        ],
        fn,
    )


def output_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that calls the API."""
    return _apply(
        [
            click.option("--out", "-o", type=click.Path(path_type=Path), help="Output file path."),
            click.option("--model", "-m", help="Gemini image model ID (default from config)."),
            click.option(
                "--api-key",
                help="Gemini API key for this run (overrides the stored key and GEMINI_API_KEY).",
            ),
            click.option(
                "--quiet",
                "-q",
                is_flag=True,
                help="Minimize progress messages; only print result path or errors.",
            ),
            click.option(
                "--verbose",
                "-v",
                "verbose_count",
                count=True,
                help="Increase verbosity: -v also show prompts, -vv show API detail.",
            ),
            click.option(
                "--debug-api",
                is_flag=True,
                help="Log raw API request payload and response (image data truncated).",
            ),
        ],
        fn,
    )


def _setup_logging(verbose_count: int, quiet: bool) -> None:
    # CLI flags override STUDIOLENS_VERBOSITY
    verbose_level = min(verbose_count, 2) if verbose_count > 0 else get_verbosity_from_env()
    configure_logging(verbose_level=verbose_level, quiet=quiet)


def _load_config(model: str | None = None, debug_api: bool = False) -> Config:
    config = Config.from_env()
    if model is not None:
        config.set_image_model(model)
    if debug_api:
        config.debug_api = True
    config.validate()
    return config


def build_settings(
    *,
    lens_id: str,
    aspect_ratio: str,
    resolution: str,
    grid_count: int,
    grid_sizing: str,
    angles: tuple[str, ...],
    custom_angles: tuple[str, ...],
    poses: tuple[str, ...],
    custom_poses: tuple[str, ...],
    concept: str,
    location: str,
    additional_prompt: str,
    clothing_prompt: str = "",
) -> GenerationSettings:
    """
    Turn CLI option values into a validated GenerationSettings.

    Per-cut options may be given fewer times than there are cuts; the
    remaining cuts use the defaults.

    Raises:
        ValidationError: If a preset is unknown, more per-cut values than cuts
            are given, or the settings are invalid
    """
    for name, values in (
        ("angle", angles),
        ("custom_angle", custom_angles),
        ("pose", poses),
        ("custom_pose", custom_poses),
    ):
        if len(values) > grid_count:
            raise ValidationError(
                f"{len(values)} --{name.replace('_', '-')} values given for {grid_count} cut(s).",
                field=name,
            )
    settings = GenerationSettings.from_arrays(
        grid_count=grid_count,
        camera_angles=[resolve_preset(a, CAMERA_ANGLES, "camera_angle") for a in angles],
        custom_camera_angles=custom_angles,
        poses=[resolve_preset(p, FASHION_POSES, "pose") for p in poses],
        custom_poses=custom_poses,
        lens_id=lens_id,
        aspect_ratio=aspect_ratio,
        resolution=resolution,
        grid_sizing=grid_sizing,
        concept=concept,
        custom_location=location,
        additional_prompt=additional_prompt,
        clothing_prompt=clothing_prompt,
    )
    settings.validate()
    return settings


def _load_references(paths: tuple[Path, ...]) -> ReferenceSet:
    refs = ReferenceSet()
    for path in paths:
        refs.add(load_reference_image(path))
    return refs


def _generate_and_save(
    call: Callable[[], GenerationResult],
    *,
    operation: str,
    config: Config,
    reference_count: int,
    out: Path | None,
    label: str,
    quiet: bool,
    show_prompt: bool,
) -> GeneratedImage:
    """Run one API call with a spinner, save the image and print the result."""
    result: GenerationResult
    if not quiet:
        with progress.generation_progress(
            operation=operation,
            model=config.image_model,
            reference_count=reference_count,
        ):
            result = call()
    else:
        result = call()

    out_path = out if out is not None else Path(default_output_path(result.format))
    if out_path.parent != Path("."):
        out_path.parent.mkdir(parents=True, exist_ok=True)
    result.save(str(out_path))
    entry = result.to_history(label)

    if quiet:
        # Quiet mode: only output path to stdout
        click.echo(str(out_path))
    else:
        progress.print_success_result(
            output_path=out_path,
            generation_time=result.generation_time,
            model_used=result.model_used,
            label=entry.prompt,
            prompt_used=result.prompt_used if show_prompt else None,
        )
        # Also print path to stdout for scriptability
        click.echo(str(out_path))
    return entry


@click.group(
    help=f"""Fashion editorial image generation with Gemini.

\b
Version: {__version__}
Set your key once with 'studiolens key set', or export GEMINI_API_KEY.
"""
)
@click.version_option(version=__version__, package_name="studiolens", prog_name="studiolens")
@click.pass_context
def cli(ctx: click.Context) -> None:
    ctx.color = True


@cli.command()
@settings_options
@click.option(
    "--model-ref",
    "model_refs",
    multiple=True,
    type=_IMAGE_PATH,
    help="Photo of the person to depict (repeatable, up to 10).",
)
@click.option(
    "--clothing-ref",
    "clothing_refs",
    multiple=True,
    type=_IMAGE_PATH,
    help="Photo of clothing to dress them in (repeatable, up to 10).",
)
@click.option(
    "--clothing-prompt",
    default="",
    help="Outfit description; styling notes when clothing photos are given.",
)
@output_options
def generate(
    model_refs: tuple[Path, ...],
    clothing_refs: tuple[Path, ...],
    clothing_prompt: str,
    out: Path | None,
    model: str | None,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
    **settings_kwargs: Any,
) -> None:
    """Generate a photo shoot image.

    With --model-ref, --clothing-ref or --clothing-prompt the image keeps the
    person from the model photos and dresses them in the given outfit.
    """
    _setup_logging(verbose_count, quiet)

    def do_generate() -> None:
        config = _load_config(model, debug_api)
        settings = build_settings(clothing_prompt=clothing_prompt, **settings_kwargs)
        reference_mode = bool(model_refs or clothing_refs or clothing_prompt.strip())

        if reference_mode:
            models = _load_references(model_refs)
            clothing = _load_references(clothing_refs)
            _generate_and_save(
                lambda: generate_from_references(
                    models, clothing, settings, api_key=api_key, config=config
                ),
                operation="Generating from references",
                config=config,
                reference_count=len(models) + len(clothing),
                out=out,
                label=history_label("reference", settings),
                quiet=quiet,
                show_prompt=verbose_count > 0,
            )
        else:
            _generate_and_save(
                lambda: generate_image(settings, api_key=api_key, config=config),
                operation="Generating image",
                config=config,
                reference_count=0,
                out=out,
                label=history_label("standard", settings),
                quiet=quiet,
                show_prompt=verbose_count > 0,
            )

    run_with_error_handling(do_generate, quiet=quiet)


@cli.command()
@click.argument("image", type=_IMAGE_PATH)
@click.option("--instruction", "-i", required=True, help="What to change in the image.")
@settings_options
@output_options
def edit(
    image: Path,
    instruction: str,
    out: Path | None,
    model: str | None,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
    **settings_kwargs: Any,
) -> None:
    """Edit IMAGE according to an instruction, keeping everything else."""
    _setup_logging(verbose_count, quiet)

    def do_edit() -> None:
        config = _load_config(model, debug_api)
        settings = build_settings(**settings_kwargs)
        source = load_reference_image(image)
        _generate_and_save(
            lambda: edit_image(source, instruction, settings, api_key=api_key, config=config),
            operation="Editing image",
            config=config,
            reference_count=1,
            out=out,
            label=history_label("edit", settings, instruction),
            quiet=quiet,
            show_prompt=verbose_count > 0,
        )

    run_with_error_handling(do_edit, quiet=quiet)


@cli.command("next-cut")
@click.argument("image", type=_IMAGE_PATH)
@click.option("--context", "-c", required=True, help="The new scene, pose or angle.")
@settings_options
@output_options
def next_cut(
    image: Path,
    context: str,
    out: Path | None,
    model: str | None,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
    **settings_kwargs: Any,
) -> None:
    """Shoot the next cut: the same person as IMAGE in a new scene."""
    _setup_logging(verbose_count, quiet)

    def do_next_cut() -> None:
        config = _load_config(model, debug_api)
        settings = build_settings(**settings_kwargs)
        source = load_reference_image(image)
        _generate_and_save(
            lambda: generate_consistent_image(
                source, context, settings, api_key=api_key, config=config
            ),
            operation="Generating next cut",
            config=config,
            reference_count=1,
            out=out,
            label=history_label("next_cut", settings, context),
            quiet=quiet,
            show_prompt=verbose_count > 0,
        )

    run_with_error_handling(do_next_cut, quiet=quiet)


@cli.command("extract-outfit")
@click.argument("images", nargs=-1, required=True, type=_IMAGE_PATH)
@output_options
def extract_outfit_command(
    images: tuple[Path, ...],
    out: Path | None,
    model: str | None,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Product shot of the outfit worn in a single model photo."""
    _setup_logging(verbose_count, quiet)

    def do_extract() -> None:
        config = _load_config(model, debug_api)
        source: ReferenceImage = validate_outfit_source(_load_references(images))
        _generate_and_save(
            lambda: extract_outfit(source.url, api_key=api_key, config=config),
            operation="Extracting outfit",
            config=config,
            reference_count=1,
            out=out,
            label="Outfit extraction",
            quiet=quiet,
            show_prompt=verbose_count > 0,
        )

    run_with_error_handling(do_extract, quiet=quiet)


@cli.command("edit-outfit")
@click.argument("image", type=_IMAGE_PATH)
@click.option("--instruction", "-i", required=True, help="What to change in the outfit.")
@output_options
def edit_outfit_command(
    image: Path,
    instruction: str,
    out: Path | None,
    model: str | None,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Edit an extracted outfit image, keeping the product-photo style."""
    _setup_logging(verbose_count, quiet)

    def do_edit_outfit() -> None:
        config = _load_config(model, debug_api)
        source = load_reference_image(image)
        _generate_and_save(
            lambda: edit_outfit(source, instruction, api_key=api_key, config=config),
            operation="Editing outfit",
            config=config,
            reference_count=1,
            out=out,
            label=f"Outfit edit: {instruction}",
            quiet=quiet,
            show_prompt=verbose_count > 0,
        )

    run_with_error_handling(do_edit_outfit, quiet=quiet)


@cli.command()
def lenses() -> None:
    """List the available lenses."""
    progress.print_lenses(LENSES)


@cli.command()
def presets() -> None:
    """List camera angle, pose, concept and layout presets."""
    progress.print_indexed("Camera angles (--angle)", CAMERA_ANGLES)
    progress.print_indexed("Poses (--pose)", FASHION_POSES)
    for group, concepts in CONCEPT_GROUPS.items():
        progress.print_choices(
            f"Concepts: {group} (--concept)", {concept: "" for concept in concepts}
        )
    progress.print_choices(
        "Aspect ratios (--aspect-ratio)", {k.value: v for k, v in ASPECT_RATIO_LABELS.items()}
    )
    progress.print_choices(
        "Resolutions (--resolution)", {k.value: v for k, v in RESOLUTION_LABELS.items()}
    )
    progress.print_choices(
        "Grid sizing (--sizing)", {k.value: v for k, v in GRID_SIZING_LABELS.items()}
    )
    progress.print_choices(
        "Grid (--grid)", {str(n): "single" if n == 1 else f"{n} cuts" for n in GRID_COUNTS}
    )


@cli.group()
def key() -> None:
    """Manage the locally stored Gemini API key."""


@key.command("set")
@click.argument("value", required=False)
def key_set(value: str | None) -> None:
    """Store an API key (prompted when VALUE is omitted). An empty value clears it."""
    configure_logging(verbose_level=get_verbosity_from_env())

    def do_set() -> None:
        config = _load_config()
        api_key = value
        if api_key is None:
            api_key = click.prompt(
                "Gemini API key", hide_input=True, default="", show_default=False
            )
        store = get_key_store(config)
        store.set(api_key)
        if api_key.strip():
            progress.print_success(f"Saved API key {redact_secret(api_key)} to {store.path}")
        else:
            progress.print_info("Empty key given; stored key cleared.")

    run_with_error_handling(do_set)


@key.command("clear")
def key_clear() -> None:
    """Remove the stored API key."""
    configure_logging(verbose_level=get_verbosity_from_env())

    def do_clear() -> None:
        store = get_key_store(_load_config())
        if not store.has_stored_key():
            progress.print_info("No stored API key.")
            return
        store.clear()
        progress.print_success("Stored API key cleared.")

    run_with_error_handling(do_clear)


@key.command("show")
def key_show() -> None:
    """Show the active API key (masked) and where it comes from."""
    configure_logging(verbose_level=get_verbosity_from_env())

    def do_show() -> None:
        store = get_key_store(_load_config())
        if store.has_stored_key():
            source = f"stored in {store.path}"
        elif store.env_default():
            source = "environment"
        else:
            progress.print_warning(
                "No API key set. Run 'studiolens key set' or export GEMINI_API_KEY."
            )
            return
        click.echo(f"{redact_secret(store.get())} ({source})")

    run_with_error_handling(do_show)


@key.command("test")
@click.option("--api-key", help="Key to test instead of the active one.")
def key_test(api_key: str | None) -> None:
    """Check that the API key can reach Gemini (advisory)."""
    configure_logging(verbose_level=get_verbosity_from_env())

    def do_test() -> None:
        config = _load_config()
        candidate = api_key if api_key is not None else get_key_store(config).get()
        if not candidate:
            raise MissingCredentialError()
        with progress.generation_progress(operation="Checking connection", model=config.ping_model):
            ok = validate_connection(candidate, config=config)
        if not ok:
            progress.print_error(f"API key {redact_secret(candidate)} could not reach Gemini.")
            raise SystemExit(EXIT_API_OR_NETWORK)
        progress.print_success(f"API key {redact_secret(candidate)} is valid.")

    run_with_error_handling(do_test)


def main() -> None:
    """Entry point for the studiolens console script."""
    cli()


__all__ = [
    "cli",
    "main",
    "build_settings",
    "generate",
    "edit",
    "next_cut",
    "extract_outfit_command",
    "edit_outfit_command",
    "lenses",
    "presets",
    "key",
]
