"""
Shared JSON file persistence for the repository implementations.
"""

import json
import os
import threading
from pathlib import Path

from loguru import logger

from ...domain.repositories.exceptions import RepositoryError


class JsonFileStore:
    """
    Thread-safe, atomically replaced JSON document on disk.

    Subclasses hold ``self._lock`` while reading, modifying and writing the
    document so that a read-modify-write cycle is never interleaved.
    """

    def __init__(self, file_path: Path, repository_name: str):
        self._file_path = Path(file_path)
        self._lock = threading.RLock()
        self._logger = logger.bind(repository=repository_name)

        # Ensure parent directory exists
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

        if not self._file_path.exists():
            self._save_data({})

    @property
    def file_path(self) -> Path:
        return self._file_path

    def _load_data(self) -> dict:
        """Load data from the JSON file."""
        try:
            if not self._file_path.exists():
                return {}

            with open(self._file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)

        except json.JSONDecodeError as e:
            self._logger.error(f"JSON decode error loading {self._file_path}: {e}")
            raise RepositoryError(f"Invalid JSON in {self._file_path}: {e}")
        except OSError as e:
            raise RepositoryError(f"Failed to load data from {self._file_path}: {e}")

        if not isinstance(data, dict):
            raise RepositoryError(f"Expected a JSON object in {self._file_path}")
        return data

    def _save_data(self, data: dict) -> None:
        """Save data to the JSON file atomically."""
        temp_file = self._file_path.with_suffix('.tmp')
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, default=str, ensure_ascii=False)

            # Atomic replace (POSIX systems)
            os.replace(temp_file, self._file_path)

        except (OSError, TypeError, ValueError) as e:
            if temp_file.exists():
                temp_file.unlink()
            raise RepositoryError(f"Failed to save data to {self._file_path}: {e}")
