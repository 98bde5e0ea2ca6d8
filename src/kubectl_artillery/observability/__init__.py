"""Logging setup for the kubectl-artillery CLI."""

from .logging import configure_logging

__all__ = ["configure_logging"]
