"""
Rich progress displays for CLI operations.

This module provides progress indicators, result panels and catalog tables
using the rich library. All output goes to stderr to preserve stdout for
machine-readable output.
"""

from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from studiolens.core.catalog import LensConfig

# Console for stderr output (preserves stdout for machine output)
console = Console(stderr=True)


@contextmanager
def generation_progress(
    operation: str = "Generating image",
    model: str | None = None,
    reference_count: int = 0,
) -> Iterator[None]:
    """
    Display a spinner while a request is in flight.

    Args:
        operation: What is being done, e.g. 'Editing image'
        model: The image model being used
        reference_count: Number of images sent with the request

    Yields:
        None while the request is in progress
    """
    progress = Progress(
        SpinnerColumn(spinner_name="dots"),
        TextColumn("[green]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )

    desc_parts = [operation]
    if model:
        # Truncate long model names
        model_display = model if len(model) <= 40 else f"{model[:37]}..."
        desc_parts.append(f"[dim]({model_display})[/dim]")
    if reference_count:
        noun = "image" if reference_count == 1 else "images"
        desc_parts.append(f"• [dim cyan]{reference_count} reference {noun}[/dim cyan]")

    with progress:
        task = progress.add_task(" ".join(desc_parts), total=None)
        yield
        progress.update(task, completed=True)


def print_success_result(
    output_path: Path,
    generation_time: float,
    model_used: str,
    label: str,
    prompt_used: str | None = None,
) -> None:
    """
    Print a rich formatted success message with generation details.

    Args:
        output_path: Path where the image was saved
        generation_time: Time taken to generate (seconds)
        model_used: The model that generated the image
        label: Short history label, e.g. '[4 cuts] Studio Clean'
        prompt_used: The full instruction text; shown only when given
    """
    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan", justify="right", vertical="top")
    table.add_column(style="white")

    table.add_row("Saved to", f"[bold green]{output_path}[/bold green]")
    table.add_row("Shot", label)
    table.add_row("Model", model_used)
    table.add_row("Time", f"{generation_time:.1f}s")
    if prompt_used:
        table.add_row("Prompt", f"[dim]{prompt_used}[/dim]")

    panel = Panel(
        table,
        title="[bold green]✓ Image Generated[/bold green]",
        border_style="green",
        padding=(1, 2),
    )

    console.print()
    console.print(panel)


def print_lenses(lenses: Sequence[LensConfig]) -> None:
    """Print the lens catalog as a table."""
    table = Table(title="Lenses", title_justify="left")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Lens")
    table.add_column("Focal", justify="right")
    table.add_column("Aperture", justify="right")
    table.add_column("Character", style="dim")
    for lens in lenses:
        table.add_row(lens.id, lens.name, lens.focal_length, lens.aperture, lens.description)
    console.print(table)


def print_indexed(title: str, values: Sequence[str]) -> None:
    """Print a preset list with the indices accepted by --angle / --pose."""
    table = Table(title=title, title_justify="left")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Preset")
    for index, value in enumerate(values):
        table.add_row(str(index), value)
    console.print(table)


def print_choices(title: str, choices: Mapping[str, str]) -> None:
    """Print option values next to their labels."""
    table = Table(title=title, title_justify="left")
    table.add_column("Value", style="cyan", no_wrap=True)
    table.add_column("Label")
    for value, label in choices.items():
        table.add_row(value, label)
    console.print(table)


def print_info(message: str) -> None:
    """Print an info message in cyan."""
    console.print(f"[cyan]ℹ[/cyan] {message}")


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(f"[red]✗[/red] {message}")


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(f"[green]✓[/green] {message}")
