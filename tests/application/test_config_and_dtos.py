"""
Tests for configuration loading, the service container and DTOs.
"""

from pathlib import Path

import pytest

from arcgate.application.container import ServiceContainer
from arcgate.application.dtos import SourceKind, SourceSpec
from arcgate.application.exceptions import EntityNotFoundError
from arcgate.core.config import ArcgateConfig


class TestArcgateConfig:

    def test_defaults(self):
        config = ArcgateConfig.from_env(env={})
        assert config.config_dir == Path.home() / ".config" / "arcgate"
        assert config.transient_namespace == "tmp"
        assert config.overwrite_existing is False

    def test_env(self, tmp_path):
        config = ArcgateConfig.from_env(env={
            "ARCGATE_CONFIG_DIR": str(tmp_path),
            "ARCGATE_TRANSIENT_NAMESPACE": "scratch",
            "ARCGATE_OVERWRITE_EXISTING": "TRUE",
        })
        assert config.locations_file == tmp_path / "locations.json"
        assert config.ownership_file == tmp_path / "ownership.json"
        assert config.transient_namespace == "scratch"
        assert config.overwrite_existing is True

    def test_explicit_dir_wins(self, tmp_path):
        config = ArcgateConfig.from_env(env={"ARCGATE_CONFIG_DIR": "/elsewhere"}, config_dir=tmp_path)
        assert config.principals_file == tmp_path / "principals.json"

    def test_empty_transient_namespace(self):
        with pytest.raises(ValueError):
            ArcgateConfig(transient_namespace="")


class TestServiceContainer:

    def test_json_repositories_in_config_dir(self, tmp_path):
        container = ServiceContainer(ArcgateConfig(config_dir=tmp_path))
        assert container.location_repository.file_path == tmp_path / "locations.json"
        assert container.archive_service is container.archive_service

    def test_unknown_principal(self, container):
        with pytest.raises(EntityNotFoundError):
            container.context_for("mallory")


class TestSourceSpec:

    def test_single(self):
        spec = SourceSpec.from_argument("user:/a")
        assert spec.kind is SourceKind.SINGLE
        assert list(spec) == ["user:/a"]

    def test_many(self):
        spec = SourceSpec.from_argument(["user:/a", "user:/b"])
        assert spec.kind is SourceKind.MANY
        assert len(spec) == 2

    @pytest.mark.parametrize("value", [[], None, 1, [""], {"a": 1}])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            SourceSpec.from_argument(value)
