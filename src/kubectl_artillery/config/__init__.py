"""Runtime configuration for kubectl-artillery."""

from .settings import ArtillerySettings, get_settings

__all__ = ["ArtillerySettings", "get_settings"]
