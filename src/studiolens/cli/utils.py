"""
Utility functions for the CLI.

This module contains helper functions used by CLI commands,
such as output path generation, preset lookup and exit code constants.
"""

from collections.abc import Sequence
from datetime import datetime

from studiolens.utils.exceptions import ValidationError

# Exit codes
EXIT_SUCCESS = 0
EXIT_API_OR_NETWORK = 1
EXIT_VALIDATION_OR_CONFIG = 2


def default_output_path(fmt: str) -> str:
    """Return default output path: studiolens_<YYYYMMDD>_<HHMMSS>.<ext> in current directory."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    ext = fmt if fmt else "png"
    return f"studiolens_{timestamp}.{ext}"


def resolve_preset(value: str, presets: Sequence[str], field: str) -> str:
    """
    Resolve a preset given by its index (as listed by `studiolens presets`) or its exact text.

    Raises:
        ValidationError: If value matches neither an index nor a preset
    """
    stripped = value.strip()
    if stripped.isdigit():
        index = int(stripped)
        if 0 <= index < len(presets):
            return presets[index]
    elif stripped in presets:
        return stripped
    raise ValidationError(
        f"Unknown {field.replace('_', ' ')}: {value!r}. "
        "Use an index or text from 'studiolens presets', or a --custom-* option.",
        field=field,
    )


__all__ = [
    "EXIT_SUCCESS",
    "EXIT_API_OR_NETWORK",
    "EXIT_VALIDATION_OR_CONFIG",
    "default_output_path",
    "resolve_preset",
]
