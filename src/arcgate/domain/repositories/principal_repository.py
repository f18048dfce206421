"""
Repository interface for principal persistence.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..entities.principal import Principal


class IPrincipalRepository(ABC):
    """Abstract repository interface for principals and their grants."""

    @abstractmethod
    def save(self, principal: Principal) -> None:
        """Save a principal."""
        pass

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[Principal]:
        """Retrieve a principal by username, None if unknown."""
        pass

    @abstractmethod
    def list_all(self) -> List[Principal]:
        """Retrieve all principals."""
        pass
