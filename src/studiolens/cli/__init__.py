"""
Command-line interface for studiolens.

This package contains CLI implementations using Click.
Uses only the public API: from studiolens import ...
"""

from studiolens.cli.commands import cli, main

__all__ = ["cli", "main"]
