"""Core configuration for arcgate."""

from .config import ArcgateConfig

__all__ = ["ArcgateConfig"]
