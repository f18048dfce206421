"""
Unit tests for locations and principals.
"""

import pytest

from arcgate.domain.entities.location import LocationEntity, LocationKind
from arcgate.domain.entities.principal import AccessLevel, Principal
from arcgate.domain.entities.virtual_path import VirtualPath


class TestLocationEntity:
    """Test location validation and root mapping."""

    def test_user_location_root_is_per_user(self):
        location = LocationEntity("user", [LocationKind.USER], {"path": "/srv/users"})
        assert location.root_for("alice") == "/srv/users/alice"

    def test_shared_location_root(self):
        location = LocationEntity("shared", [LocationKind.SHARED], {"path": "/srv/shared/"})
        assert location.root_for("alice") == "/srv/shared"

    def test_transient_location_is_per_user(self):
        location = LocationEntity("tmp", [LocationKind.TRANSIENT], {"path": "/srv/tmp"})
        assert location.is_transient()
        assert location.root_for("bob") == "/srv/tmp/bob"

    def test_defaults(self):
        location = LocationEntity("shared", [LocationKind.SHARED], {"path": "/srv"})
        assert location.get_protocol() == "file"
        assert location.get_storage_options() == {}

    def test_path_required(self):
        with pytest.raises(ValueError, match="Path is required"):
            LocationEntity("user", [LocationKind.USER], {})

    def test_invalid_name(self):
        with pytest.raises(ValueError, match="alphanumerics"):
            LocationEntity("us:er", [LocationKind.USER], {"path": "/x"})

    def test_user_and_shared_conflict(self):
        with pytest.raises(ValueError, match="both USER and SHARED"):
            LocationEntity("x", [LocationKind.USER, LocationKind.SHARED], {"path": "/x"})

    def test_kind_from_str(self):
        assert LocationKind.from_str("transient") is LocationKind.TRANSIENT
        with pytest.raises(ValueError, match="Valid kinds"):
            LocationKind.from_str("tape")


class TestPrincipal:
    """Test access checks."""

    def test_grants(self):
        principal = Principal("alice", {"user": AccessLevel.READ_WRITE, "shared": AccessLevel.READ})
        assert principal.can_write(VirtualPath("user", "/a"))
        assert principal.can_read(VirtualPath("shared", "/a"))
        assert not principal.can_write(VirtualPath("shared", "/a"))
        assert not principal.can_read(VirtualPath("other", "/a"))

    def test_admin_has_full_access(self):
        principal = Principal("root", admin=True)
        assert principal.can_write(VirtualPath("anything", "/"))

    def test_grant(self):
        principal = Principal("bob")
        principal.grant("shared", AccessLevel.READ)
        assert principal.access_for("shared") is AccessLevel.READ
        with pytest.raises(ValueError):
            principal.grant("shared", "rw")

    def test_username_validation(self):
        with pytest.raises(ValueError, match="Username"):
            Principal("")
        with pytest.raises(ValueError, match="path separators"):
            Principal("a/b")
