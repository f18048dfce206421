"""
Repository interface for location persistence.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..entities.location import LocationEntity


class ILocationRepository(ABC):
    """
    Abstract repository interface for the namespaces of the virtual
    filesystem.
    """

    @abstractmethod
    def save(self, location: LocationEntity) -> None:
        """
        Save a location entity.

        Raises:
            RepositoryError: If the save operation fails
        """
        pass

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[LocationEntity]:
        """
        Retrieve a location by its namespace name.

        Returns:
            The location entity if found, None otherwise
        """
        pass

    @abstractmethod
    def list_all(self) -> List[LocationEntity]:
        """Retrieve all locations."""
        pass

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Check if a location exists."""
        pass

    @abstractmethod
    def delete(self, name: str) -> bool:
        """Delete a location. Returns True if it existed."""
        pass
