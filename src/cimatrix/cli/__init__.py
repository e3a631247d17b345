"""Command-line interface for cimatrix."""

from cimatrix.cli.commands import cli, main

__all__ = ["cli", "main"]
