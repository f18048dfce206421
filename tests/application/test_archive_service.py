"""
Tests for the archive operation executor.
"""

import gzip
import tarfile
import zipfile

import pytest

from arcgate.application.exceptions import (
    ArchiveOperationError,
    EntityNotFoundError,
    PathResolutionError,
    PermissionDeniedError,
    UnsupportedFormatError,
    ValidationError,
)
from arcgate.domain.entities.archive import ArchiveFormat


@pytest.fixture
def service(container):
    return container.archive_service


@pytest.fixture
def docs(alice_home, write_file):
    write_file(alice_home / "docs" / "a.txt", b"0123456789")
    write_file(alice_home / "docs" / "sub" / "b.txt", b"hello")
    write_file(alice_home / "notes.txt", b"notes")
    return alice_home / "docs"


def _files_below(root):
    return sorted(str(p.relative_to(root)) for p in root.rglob("*") if p.is_file())


class TestExtract:

    def test_extract_zip(self, service, alice, sample_zip, alice_home, ownership_repository):
        result = service.extract(alice, "user:/a.zip", "user:/out", ArchiveFormat.ZIP)

        assert result.success
        assert result.files_owned == 2
        assert (alice_home / "out" / "docs" / "a.txt").read_bytes() == b"0123456789"
        assert ownership_repository.as_dict() == {
            "user:/out/docs/a.txt": "alice",
            "user:/out/docs/sub/b.txt": "alice",
        }

    def test_relative_paths(self, service, alice, sample_zip, alice_home):
        service.extract(alice, "a.zip", "out", "zip")
        assert (alice_home / "out" / "docs" / "sub" / "b.txt").exists()

    def test_extract_any_by_header(self, service, alice, alice_home, make_zip):
        make_zip(alice_home / "blob", {"x.txt": b"x"})
        result = service.extract(alice, "user:/blob", "user:/out")
        assert result.archive_format == "zip"
        assert (alice_home / "out" / "x.txt").read_bytes() == b"x"

    def test_extract_any_plain_gzip_unsupported(self, service, alice, alice_home, write_file):
        write_file(alice_home / "a.gz", gzip.compress(b"x"))
        with pytest.raises(UnsupportedFormatError, match="does not support extraction"):
            service.extract(alice, "user:/a.gz", "user:/out")

    def test_extract_any_not_archive(self, service, alice, alice_home, write_file):
        write_file(alice_home / "notes", b"plain")
        with pytest.raises(UnsupportedFormatError):
            service.extract(alice, "user:/notes", "user:/out")

    def test_missing_source(self, service, alice, alice_home):
        with pytest.raises(EntityNotFoundError):
            service.extract(alice, "user:/missing.zip", "user:/out")

    def test_corrupt_archive_records_no_ownership(
            self, service, alice, alice_home, write_file, ownership_repository):
        write_file(alice_home / "bad.zip", b"PK\x03\x04garbage")
        with pytest.raises(ArchiveOperationError):
            service.extract(alice, "user:/bad.zip", "user:/out")
        assert ownership_repository.as_dict() == {}

    def test_existing_file_not_overwritten(self, service, alice, sample_zip, alice_home, write_file):
        write_file(alice_home / "out" / "docs" / "a.txt", b"mine")
        with pytest.raises(ArchiveOperationError, match="already exists"):
            service.extract(alice, "user:/a.zip", "user:/out", "zip")
        assert (alice_home / "out" / "docs" / "a.txt").read_bytes() == b"mine"

    def test_unknown_format_name(self, service, alice, sample_zip):
        with pytest.raises(ValidationError):
            service.extract(alice, "user:/a.zip", "user:/out", "rar")


class TestCreate:

    @pytest.mark.parametrize("archive_format", ["zip", "tar", "tar.gz"])
    def test_round_trip(self, service, alice, docs, alice_home, archive_format):
        service.create(alice, ["user:/docs", "user:/notes.txt"], f"user:/bundle.{archive_format}", archive_format)
        service.extract(alice, f"user:/bundle.{archive_format}", "user:/restored", archive_format)

        assert _files_below(alice_home / "restored") == ["docs/a.txt", "docs/sub/b.txt", "notes.txt"]
        assert (alice_home / "restored" / "docs" / "sub" / "b.txt").read_bytes() == b"hello"

    def test_single_source_string(self, service, alice, docs, alice_home, ownership_repository):
        result = service.create(alice, "user:/notes.txt", "user:/n.zip")
        assert result.source_paths == ["user:/notes.txt"]
        assert result.files_owned == 1
        with zipfile.ZipFile(alice_home / "n.zip") as zf:
            assert zf.namelist() == ["notes.txt"]
        assert ownership_repository.get_owner("user:/n.zip") == "alice"

    def test_tgz_alias(self, service, alice, docs, alice_home):
        service.create(alice, "user:/docs", "user:/d.tgz", "tgz")
        with tarfile.open(alice_home / "d.tgz", "r:gz") as tar:
            assert "docs/a.txt" in tar.getnames()

    @pytest.mark.parametrize("sources", ["user:/notes.txt", ["user:/notes.txt"], ["user:/docs", "user:/notes.txt"]])
    @pytest.mark.parametrize("name", ["gz", "gzip", "GZ"])
    def test_gz_rejected(self, service, alice, docs, alice_home, sources, name):
        with pytest.raises(ValidationError, match="single-file compression"):
            service.create(alice, sources, "user:/x.gz", name)
        assert not (alice_home / "x.gz").exists()

    def test_seven_zip_not_creatable(self, service, alice, docs):
        with pytest.raises(UnsupportedFormatError, match="does not support archive creation"):
            service.create(alice, "user:/docs", "user:/d.7z", "7z")

    @pytest.mark.parametrize("sources", [[], 42, ["user:/a", 3], None])
    def test_malformed_sources(self, service, alice, sources):
        with pytest.raises(ValidationError):
            service.create(alice, sources, "user:/x.zip")

    def test_missing_source(self, service, alice, docs, alice_home):
        with pytest.raises(EntityNotFoundError):
            service.create(alice, ["user:/docs", "user:/nope"], "user:/x.zip")
        assert not (alice_home / "x.zip").exists()

    def test_existing_destination(self, service, alice, docs, alice_home, write_file):
        write_file(alice_home / "x.zip", b"old")
        with pytest.raises(ArchiveOperationError):
            service.create(alice, "user:/docs", "user:/x.zip")
        assert (alice_home / "x.zip").read_bytes() == b"old"

    def test_overwrite_existing(self, container, alice, docs, alice_home, write_file):
        container.config.overwrite_existing = True
        container.reset()
        write_file(alice_home / "x.zip", b"old")
        container.archive_service.create(alice, "user:/docs", "user:/x.zip")
        assert zipfile.is_zipfile(alice_home / "x.zip")


class TestPermissions:

    def test_denied_source_read_means_no_mutation(self, service, bob, shared_root, storage_root):
        # bob has no grant on shared
        (shared_root / "data.txt").write_bytes(b"x")
        with pytest.raises(PermissionDeniedError) as excinfo:
            service.create(bob, ["user:/ok.txt", "shared:/data.txt"], "user:/out.zip")
        assert excinfo.value.access == "read"
        assert not (storage_root / "user" / "bob").exists()

    def test_denied_destination_write(self, service, alice, docs, shared_root, ownership_repository):
        with pytest.raises(PermissionDeniedError) as excinfo:
            service.create(alice, "user:/docs", "shared:/docs.zip")
        assert excinfo.value.path == "shared:/docs.zip"
        assert list(shared_root.iterdir()) == []
        assert ownership_repository.as_dict() == {}

    def test_extract_into_read_only_namespace(self, service, alice, sample_zip, shared_root):
        with pytest.raises(PermissionDeniedError):
            service.extract(alice, "user:/a.zip", "shared:/out")
        assert not (shared_root / "out").exists()

    def test_read_only_principal(self, service, bob, storage_root, make_zip):
        make_zip(storage_root / "user" / "bob" / "a.zip", {"x": b"x"})
        with pytest.raises(PermissionDeniedError):
            service.extract(bob, "user:/a.zip", "user:/out")

    def test_unknown_namespace(self, service, alice):
        with pytest.raises(PathResolutionError):
            service.extract(alice, "nowhere:/a.zip", "user:/out")


class TestGzip:

    def test_compress_and_decompress(self, service, alice, docs, alice_home, ownership_repository):
        service.compress(alice, "user:/notes.txt", "user:/notes.txt.gz")
        assert gzip.decompress((alice_home / "notes.txt.gz").read_bytes()) == b"notes"

        result = service.decompress(alice, "user:/notes.txt.gz", "user:/notes.copy")
        assert result.operation_type == "decompress"
        assert (alice_home / "notes.copy").read_bytes() == b"notes"
        assert ownership_repository.list_by_owner("alice") == ["user:/notes.copy", "user:/notes.txt.gz"]

    def test_decompress_garbage_leaves_nothing(self, service, alice, alice_home, write_file):
        write_file(alice_home / "bad.gz", b"not gzip")
        with pytest.raises(ArchiveOperationError):
            service.decompress(alice, "user:/bad.gz", "user:/bad.out")
        assert not (alice_home / "bad.out").exists()

    def test_compress_directory_fails(self, service, alice, docs):
        with pytest.raises(EntityNotFoundError):
            service.compress(alice, "user:/docs", "user:/docs.gz")


class TestInspection:

    def test_detect_format(self, service, alice, sample_zip, alice_home, write_file):
        write_file(alice_home / "blob", b"\x1f\x8b\x08\x00")
        assert service.detect_format(alice, "user:/a.zip") is ArchiveFormat.ZIP
        assert service.detect_format(alice, "user:/blob") is ArchiveFormat.GZ
        assert service.detect_format(alice, "user:/x.tgz") is ArchiveFormat.TAR_GZ
        assert service.detect_format(alice, "user:/missing") is ArchiveFormat.UNKNOWN

    def test_is_valid_archive(self, service, alice, sample_zip, alice_home, write_file):
        write_file(alice_home / "notes", b"plain")
        assert service.is_valid_archive(alice, "user:/a.zip")
        assert not service.is_valid_archive(alice, "user:/notes")
        assert not service.is_valid_archive(alice, "user:/missing.zip")

    def test_detect_requires_read(self, service, bob):
        with pytest.raises(PermissionDeniedError):
            service.detect_format(bob, "shared:/x.zip")
