"""
Tests for single-entry extraction into the transient namespace.
"""

import zipfile

import pytest

from arcgate.application.exceptions import (
    EntityNotFoundError,
    PermissionDeniedError,
    ValidationError,
)


@pytest.fixture
def extractor(container):
    return container.entry_extraction_service


class TestEntryExtraction:

    def test_extract_entry(self, extractor, alice, sample_zip, storage_root, ownership_repository):
        result = extractor.extract_entry(alice, "user:/a.zip", "docs/sub/b.txt")

        assert result.transient_path == "tmp:/b.txt"
        assert result.size == 5
        assert (storage_root / "tmp" / "alice" / "b.txt").read_bytes() == b"hello"
        assert ownership_repository.get_owner("tmp:/b.txt") == "alice"

    def test_every_entry_has_recorded_size(self, extractor, alice, sample_zip, storage_root):
        with zipfile.ZipFile(sample_zip) as zf:
            infos = [info for info in zf.infolist() if not info.is_dir()]
        for info in infos:
            result = extractor.extract_entry(alice, "user:/a.zip", info.filename)
            extracted = storage_root / "tmp" / "alice" / result.transient_path.split(":/", 1)[1]
            assert extracted.stat().st_size == info.file_size

    def test_same_basename_overwrites(self, extractor, alice, alice_home, storage_root, make_zip):
        make_zip(alice_home / "two.zip", {"x/data.txt": b"first", "y/data.txt": b"second"})
        extractor.extract_entry(alice, "user:/two.zip", "x/data.txt")
        extractor.extract_entry(alice, "user:/two.zip", "y/data.txt")
        assert (storage_root / "tmp" / "alice" / "data.txt").read_bytes() == b"second"

    def test_name_normalization(self, extractor, alice, sample_zip):
        assert extractor.extract_entry(alice, "user:/a.zip", "/docs\\a.txt").size == 10

    def test_missing_entry(self, extractor, alice, sample_zip):
        with pytest.raises(EntityNotFoundError, match="Entry not found"):
            extractor.extract_entry(alice, "user:/a.zip", "docs/nope.txt")

    def test_directory_entry(self, extractor, alice, alice_home, make_zip):
        make_zip(alice_home / "d.zip", {"docs/": b"", "docs/a.txt": b"a"})
        with pytest.raises(ValidationError, match="directory"):
            extractor.extract_entry(alice, "user:/d.zip", "docs/")

    def test_empty_entry_name(self, extractor, alice, sample_zip):
        with pytest.raises(ValidationError):
            extractor.extract_entry(alice, "user:/a.zip", "")

    def test_transient_is_per_user(self, extractor, container, storage_root, make_zip):
        make_zip(storage_root / "user" / "bob" / "b.zip", {"n.txt": b"bob"})
        bob = container.context_for("bob", script_path="user:/job.js")
        assert extractor.extract_entry(bob, "b.zip", "n.txt").transient_path == "tmp:/n.txt"
        assert (storage_root / "tmp" / "bob" / "n.txt").read_bytes() == b"bob"

    def test_read_denied(self, extractor, bob, shared_root, make_zip):
        make_zip(shared_root / "a.zip", {"x": b"x"})
        with pytest.raises(PermissionDeniedError):
            extractor.extract_entry(bob, "shared:/a.zip", "x")
