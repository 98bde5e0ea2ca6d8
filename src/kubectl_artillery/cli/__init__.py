"""Command line interface for kubectl-artillery."""

from .commands import cli, main

__all__ = ["cli", "main"]
