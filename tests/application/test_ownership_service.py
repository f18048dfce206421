"""
Tests for ownership propagation after writes.
"""

from arcgate.domain.entities.virtual_path import VirtualPath
from arcgate.domain.repositories.exceptions import RepositoryError
from arcgate.infrastructure.repositories import InMemoryOwnershipRepository
from arcgate.application.services import OwnershipService


class FailingOwnershipRepository(InMemoryOwnershipRepository):

    def set_owner_many(self, vpaths, owner):
        raise RepositoryError("ownership store offline")


class TestOwnershipService:

    def test_assign_tree_skips_directories(self, container, alice, alice_home, write_file):
        write_file(alice_home / "out" / "a.txt", b"a")
        write_file(alice_home / "out" / "deep" / "b.txt", b"b")
        (alice_home / "out" / "empty").mkdir()

        repo = InMemoryOwnershipRepository()
        service = OwnershipService(repo, container.path_service)
        resolved = container.path_service.resolve(alice, VirtualPath("user", "/out"))

        assert service.assign_tree(alice, resolved) == 2
        assert repo.as_dict() == {"user:/out/a.txt": "alice", "user:/out/deep/b.txt": "alice"}

    def test_assign_file(self, container, alice):
        repo = InMemoryOwnershipRepository()
        service = OwnershipService(repo, container.path_service)
        resolved = container.path_service.resolve(alice, VirtualPath("tmp", "/x.bin"))
        assert service.assign_file(alice, resolved) == 1
        assert service.owner_of("tmp:/x.bin") == "alice"

    def test_store_failure_is_not_fatal(self, container, alice, caplog):
        service = OwnershipService(FailingOwnershipRepository(), container.path_service)
        resolved = container.path_service.resolve(alice, VirtualPath("user", "/x"))
        assert service.assign_file(alice, resolved) == 0
        assert "ownership store offline" in caplog.text

    def test_archive_survives_ownership_failure(self, container, alice, sample_zip, alice_home):
        container._ownership_service = OwnershipService(FailingOwnershipRepository(), container.path_service)
        result = container.archive_service.extract(alice, "user:/a.zip", "user:/out", "zip")
        assert result.success
        assert result.files_owned == 0
        assert (alice_home / "out" / "docs" / "a.txt").exists()
