"""
JSON-based ownership repository implementation.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ...domain.repositories.exceptions import RepositoryError
from ...domain.repositories.ownership_repository import IOwnershipRepository
from .json_store import JsonFileStore


class JsonOwnershipRepository(JsonFileStore, IOwnershipRepository):
    """
    Ownership records stored in ``ownership.json`` as a flat
    ``{"user:/docs/a.txt": "alice"}`` mapping.

    Batched assignments are written with a single atomic replace of the
    file, so a failed write leaves the previous records untouched.
    """

    def __init__(self, file_path: Path):
        super().__init__(file_path, "JsonOwnershipRepository")

    def set_owner(self, vpath: str, owner: str) -> None:
        self.set_owner_many([vpath], owner)

    def set_owner_many(self, vpaths: Iterable[str], owner: str) -> int:
        if not owner:
            raise RepositoryError("Owner must be a non-empty string")
        with self._lock:
            data = self._load_data()
            count = 0
            for vpath in vpaths:
                data[str(vpath)] = owner
                count += 1
            if count:
                self._save_data(data)
                self._logger.debug(f"Recorded {count} ownership entries for {owner}")
            return count

    def get_owner(self, vpath: str) -> Optional[str]:
        with self._lock:
            return self._load_data().get(str(vpath))

    def list_by_owner(self, owner: str) -> List[str]:
        with self._lock:
            return sorted(path for path, who in self._load_data().items() if who == owner)

    def remove(self, vpath: str) -> bool:
        with self._lock:
            data = self._load_data()
            if str(vpath) not in data:
                return False
            del data[str(vpath)]
            self._save_data(data)
            return True

    def as_dict(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._load_data())
