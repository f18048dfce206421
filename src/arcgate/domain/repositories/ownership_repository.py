"""
Repository interface for file ownership records.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional


class IOwnershipRepository(ABC):
    """
    Abstract repository for ``virtual path -> owner`` records.

    Paths are stored in their string form (``user:/docs/a.txt``).
    """

    @abstractmethod
    def set_owner(self, vpath: str, owner: str) -> None:
        """
        Record ``owner`` as the owner of ``vpath``.

        Raises:
            RepositoryError: If the record cannot be persisted
        """
        pass

    @abstractmethod
    def set_owner_many(self, vpaths: Iterable[str], owner: str) -> int:
        """
        Record ``owner`` for every path in one write.

        Either all records are persisted or none are.

        Returns:
            Number of records written

        Raises:
            RepositoryError: If the records cannot be persisted
        """
        pass

    @abstractmethod
    def get_owner(self, vpath: str) -> Optional[str]:
        """Owner of a path, None if no record exists."""
        pass

    @abstractmethod
    def list_by_owner(self, owner: str) -> List[str]:
        """All paths owned by ``owner``."""
        pass

    @abstractmethod
    def remove(self, vpath: str) -> bool:
        """Remove the record for a path. Returns True if it existed."""
        pass

    @abstractmethod
    def as_dict(self) -> Dict[str, str]:
        """Snapshot of all records."""
        pass
