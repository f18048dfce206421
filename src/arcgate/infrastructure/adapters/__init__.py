"""Adapters between the domain and external libraries."""

from .location_filesystem import create_location_filesystem

__all__ = ["create_location_filesystem"]
