"""Shared fixtures: local locations under tmp_path, principals and services."""

import io
import struct
import zipfile
from pathlib import Path
from typing import Dict, Optional

import pytest

from arcgate.application.container import ServiceContainer
from arcgate.core.config import ArcgateConfig
from arcgate.domain.entities.location import LocationEntity, LocationKind
from arcgate.domain.entities.principal import AccessLevel, Principal
from arcgate.infrastructure.repositories import (
    JsonLocationRepository,
    JsonOwnershipRepository,
    JsonPrincipalRepository,
)
from arcgate.interfaces.scripting.library import ArchiveScriptLibrary, RecordingErrorSink


def _write_file(path: Path, data: bytes = b"") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


def _make_zip(path: Path, entries: Dict[str, bytes]) -> Path:
    """Write a zip whose entries are given as ``{name: data}``; names ending in / are directories."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return _write_file(path, buffer.getvalue())


def _patch_zip_headers(path: Path, flag_bits: int = 0, method: Optional[int] = None) -> Path:
    """OR ``flag_bits`` into, and optionally set the compression method of, every local and central header."""
    data = bytearray(path.read_bytes())
    for signature, flag_offset, method_offset in ((b"PK\x03\x04", 6, 8), (b"PK\x01\x02", 8, 10)):
        start = data.find(signature)
        while start != -1:
            (flags,) = struct.unpack_from("<H", data, start + flag_offset)
            struct.pack_into("<H", data, start + flag_offset, flags | flag_bits)
            if method is not None:
                struct.pack_into("<H", data, start + method_offset, method)
            start = data.find(signature, start + 4)
    path.write_bytes(bytes(data))
    return path


@pytest.fixture
def write_file():
    return _write_file


@pytest.fixture
def make_zip():
    return _make_zip


@pytest.fixture
def patch_zip_headers():
    return _patch_zip_headers


@pytest.fixture
def storage_root(tmp_path) -> Path:
    return tmp_path / "storage"


@pytest.fixture
def config_dir(tmp_path) -> Path:
    return tmp_path / "config"


@pytest.fixture
def location_repository(config_dir, storage_root):
    repo = JsonLocationRepository(file_path=config_dir / "locations.json")
    repo.save(LocationEntity("user", [LocationKind.USER], {"protocol": "file", "path": str(storage_root / "user")}))
    repo.save(LocationEntity("shared", [LocationKind.SHARED], {"protocol": "file", "path": str(storage_root / "shared")}))
    repo.save(LocationEntity("tmp", [LocationKind.TRANSIENT], {"protocol": "file", "path": str(storage_root / "tmp")}))
    return repo


@pytest.fixture
def principal_repository(config_dir):
    repo = JsonPrincipalRepository(file_path=config_dir / "principals.json")
    repo.save(Principal("alice", {"user": AccessLevel.READ_WRITE, "shared": AccessLevel.READ}))
    repo.save(Principal("bob", {"user": AccessLevel.READ}))
    return repo


@pytest.fixture
def ownership_repository(config_dir):
    return JsonOwnershipRepository(file_path=config_dir / "ownership.json")


@pytest.fixture
def container(config_dir, location_repository, principal_repository, ownership_repository):
    return ServiceContainer(
        ArcgateConfig(config_dir=config_dir),
        location_repository=location_repository,
        principal_repository=principal_repository,
        ownership_repository=ownership_repository,
    )


@pytest.fixture
def alice(container):
    return container.context_for("alice", script_path="user:/job.js")


@pytest.fixture
def bob(container):
    return container.context_for("bob", script_path="user:/job.js")


@pytest.fixture
def alice_home(storage_root) -> Path:
    home = storage_root / "user" / "alice"
    home.mkdir(parents=True)
    return home


@pytest.fixture
def shared_root(storage_root) -> Path:
    root = storage_root / "shared"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def sample_zip(alice_home) -> Path:
    """``a.zip`` with docs/a.txt (10 bytes) and docs/sub/b.txt (5 bytes)."""
    return _make_zip(alice_home / "a.zip", {"docs/a.txt": b"0123456789", "docs/sub/b.txt": b"hello"})


@pytest.fixture
def error_sink():
    return RecordingErrorSink()


@pytest.fixture
def library(container, alice, error_sink):
    return ArchiveScriptLibrary(container, alice, error_sink)
