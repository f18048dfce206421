"""Repository implementations."""

from .json_location_repository import JsonLocationRepository
from .json_ownership_repository import JsonOwnershipRepository
from .json_principal_repository import JsonPrincipalRepository
from .memory_ownership_repository import InMemoryOwnershipRepository

__all__ = [
    "InMemoryOwnershipRepository",
    "JsonLocationRepository",
    "JsonOwnershipRepository",
    "JsonPrincipalRepository",
]
