"""
JSON-based location repository implementation.
"""

from pathlib import Path
from typing import List, Optional

from ...domain.entities.location import LocationEntity, LocationKind
from ...domain.repositories.exceptions import RepositoryError
from ...domain.repositories.location_repository import ILocationRepository
from .json_store import JsonFileStore


class JsonLocationRepository(JsonFileStore, ILocationRepository):
    """
    Locations stored in ``locations.json``, keyed by namespace name::

        {
          "user": {"kinds": ["USER"], "config": {"protocol": "file", "path": "/srv/files/users"}},
          "tmp":  {"kinds": ["TRANSIENT"], "config": {"protocol": "file", "path": "/srv/files/tmp"}}
        }
    """

    def __init__(self, file_path: Path):
        super().__init__(file_path, "JsonLocationRepository")

    def save(self, location: LocationEntity) -> None:
        with self._lock:
            data = self._load_data()
            data[location.name] = {
                "kinds": [kind.name for kind in location.kinds],
                "config": location.config,
            }
            self._save_data(data)
            self._logger.debug(f"Saved location: {location.name}")

    def get_by_name(self, name: str) -> Optional[LocationEntity]:
        with self._lock:
            data = self._load_data()
            if name not in data:
                return None
            return self._dict_to_entity(name, data[name])

    def list_all(self) -> List[LocationEntity]:
        with self._lock:
            data = self._load_data()
            return [self._dict_to_entity(name, entry) for name, entry in data.items()]

    def exists(self, name: str) -> bool:
        with self._lock:
            return name in self._load_data()

    def delete(self, name: str) -> bool:
        with self._lock:
            data = self._load_data()
            if name not in data:
                return False
            del data[name]
            self._save_data(data)
            self._logger.debug(f"Deleted location: {name}")
            return True

    def _dict_to_entity(self, name: str, data: dict) -> LocationEntity:
        """Convert dictionary data to a LocationEntity."""
        try:
            return LocationEntity(
                name=name,
                kinds=[LocationKind.from_str(kind) for kind in data.get("kinds", [])],
                config=dict(data.get("config", {})),
            )
        except (ValueError, TypeError, AttributeError) as e:
            raise RepositoryError(f"Failed to convert data to LocationEntity '{name}': {e}")
