"""
JSON-based principal repository implementation.
"""

from pathlib import Path
from typing import List, Optional

from ...domain.entities.principal import AccessLevel, Principal
from ...domain.repositories.exceptions import RepositoryError
from ...domain.repositories.principal_repository import IPrincipalRepository
from .json_store import JsonFileStore


class JsonPrincipalRepository(JsonFileStore, IPrincipalRepository):
    """Principals stored in ``principals.json``, keyed by username."""

    def __init__(self, file_path: Path):
        super().__init__(file_path, "JsonPrincipalRepository")

    def save(self, principal: Principal) -> None:
        with self._lock:
            data = self._load_data()
            data[principal.username] = {
                "grants": {ns: level.value for ns, level in principal.grants.items()},
                "admin": principal.admin,
            }
            self._save_data(data)
            self._logger.debug(f"Saved principal: {principal.username}")

    def get_by_username(self, username: str) -> Optional[Principal]:
        with self._lock:
            data = self._load_data()
            if username not in data:
                return None
            return self._dict_to_entity(username, data[username])

    def list_all(self) -> List[Principal]:
        with self._lock:
            data = self._load_data()
            return [self._dict_to_entity(name, entry) for name, entry in data.items()]

    def _dict_to_entity(self, username: str, data: dict) -> Principal:
        try:
            grants = {
                ns: AccessLevel(level) for ns, level in data.get("grants", {}).items()
            }
            return Principal(username=username, grants=grants, admin=bool(data.get("admin", False)))
        except (ValueError, TypeError, AttributeError) as e:
            raise RepositoryError(f"Failed to convert data to Principal '{username}': {e}")
