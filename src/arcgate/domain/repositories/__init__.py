"""Repository interfaces for the domain layer."""

from .exceptions import RepositoryError
from .location_repository import ILocationRepository
from .ownership_repository import IOwnershipRepository
from .principal_repository import IPrincipalRepository

__all__ = [
    "ILocationRepository",
    "IOwnershipRepository",
    "IPrincipalRepository",
    "RepositoryError",
]
