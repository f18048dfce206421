"""
In-memory ownership repository, for embedding and tests.
"""

import threading
from typing import Dict, Iterable, List, Optional

from ...domain.repositories.exceptions import RepositoryError
from ...domain.repositories.ownership_repository import IOwnershipRepository


class InMemoryOwnershipRepository(IOwnershipRepository):
    """Ownership records kept in a dictionary for the lifetime of the process."""

    def __init__(self):
        self._records: Dict[str, str] = {}
        self._lock = threading.RLock()

    def set_owner(self, vpath: str, owner: str) -> None:
        self.set_owner_many([vpath], owner)

    def set_owner_many(self, vpaths: Iterable[str], owner: str) -> int:
        if not owner:
            raise RepositoryError("Owner must be a non-empty string")
        staged = {str(vpath): owner for vpath in vpaths}
        with self._lock:
            self._records.update(staged)
        return len(staged)

    def get_owner(self, vpath: str) -> Optional[str]:
        with self._lock:
            return self._records.get(str(vpath))

    def list_by_owner(self, owner: str) -> List[str]:
        with self._lock:
            return sorted(path for path, who in self._records.items() if who == owner)

    def remove(self, vpath: str) -> bool:
        with self._lock:
            return self._records.pop(str(vpath), None) is not None

    def as_dict(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._records)
