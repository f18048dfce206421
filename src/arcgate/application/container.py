"""
Application service container for dependency injection.

Wires the JSON repositories, the virtual path service and the archive
services together for the interface layers (scripting library and CLI).
"""

import logging
from typing import Optional

from ..core.config import ArcgateConfig
from ..domain.repositories.location_repository import ILocationRepository
from ..domain.repositories.ownership_repository import IOwnershipRepository
from ..domain.repositories.principal_repository import IPrincipalRepository
from ..infrastructure.repositories import (
    JsonLocationRepository,
    JsonOwnershipRepository,
    JsonPrincipalRepository,
)
from .dtos import CallerContext
from .exceptions import EntityNotFoundError
from .services import (
    ArchiveApplicationService,
    EntryExtractionService,
    FormatDetectionService,
    OwnershipService,
    VirtualPathService,
    ZipIndexService,
)

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Dependency injection container for arcgate services."""

    def __init__(
        self,
        config: Optional[ArcgateConfig] = None,
        location_repository: Optional[ILocationRepository] = None,
        principal_repository: Optional[IPrincipalRepository] = None,
        ownership_repository: Optional[IOwnershipRepository] = None,
    ):
        self._config = config or ArcgateConfig.from_env()
        self._location_repo = location_repository
        self._principal_repo = principal_repository
        self._ownership_repo = ownership_repository
        self._reset_services()

    def _reset_services(self):
        self._path_service: Optional[VirtualPathService] = None
        self._format_service: Optional[FormatDetectionService] = None
        self._ownership_service: Optional[OwnershipService] = None
        self._archive_service: Optional[ArchiveApplicationService] = None
        self._zip_index_service: Optional[ZipIndexService] = None
        self._entry_extraction_service: Optional[EntryExtractionService] = None

    @property
    def config(self) -> ArcgateConfig:
        return self._config

    @property
    def location_repository(self) -> ILocationRepository:
        if self._location_repo is None:
            self._location_repo = JsonLocationRepository(file_path=self._config.locations_file)
        return self._location_repo

    @property
    def principal_repository(self) -> IPrincipalRepository:
        if self._principal_repo is None:
            self._principal_repo = JsonPrincipalRepository(file_path=self._config.principals_file)
        return self._principal_repo

    @property
    def ownership_repository(self) -> IOwnershipRepository:
        if self._ownership_repo is None:
            self._ownership_repo = JsonOwnershipRepository(file_path=self._config.ownership_file)
        return self._ownership_repo

    @property
    def path_service(self) -> VirtualPathService:
        if self._path_service is None:
            self._path_service = VirtualPathService(
                location_repository=self.location_repository,
                transient_namespace=self._config.transient_namespace,
            )
        return self._path_service

    @property
    def format_service(self) -> FormatDetectionService:
        if self._format_service is None:
            self._format_service = FormatDetectionService()
        return self._format_service

    @property
    def ownership_service(self) -> OwnershipService:
        if self._ownership_service is None:
            self._ownership_service = OwnershipService(self.ownership_repository, self.path_service)
        return self._ownership_service

    @property
    def archive_service(self) -> ArchiveApplicationService:
        if self._archive_service is None:
            self._archive_service = ArchiveApplicationService(
                path_service=self.path_service,
                format_service=self.format_service,
                ownership_service=self.ownership_service,
                overwrite_existing=self._config.overwrite_existing,
            )
            logger.info("Archive service initialized")
        return self._archive_service

    @property
    def zip_index_service(self) -> ZipIndexService:
        if self._zip_index_service is None:
            self._zip_index_service = ZipIndexService(self.path_service)
        return self._zip_index_service

    @property
    def entry_extraction_service(self) -> EntryExtractionService:
        if self._entry_extraction_service is None:
            self._entry_extraction_service = EntryExtractionService(
                path_service=self.path_service,
                zip_index_service=self.zip_index_service,
                ownership_service=self.ownership_service,
            )
        return self._entry_extraction_service

    def context_for(self, username: str, script_path: Optional[str] = None) -> CallerContext:
        """Build the caller context for a registered principal.

        Raises:
            EntityNotFoundError: If no principal with that name is configured
        """
        principal = self.principal_repository.get_by_username(username)
        if principal is None:
            raise EntityNotFoundError("Principal", username)
        return CallerContext(principal=principal, script_path=script_path)

    def reset(self):
        """Drop cached services (useful for testing)."""
        self._reset_services()
        logger.debug("Service container reset")


# Global service container instance
_service_container: Optional[ServiceContainer] = None


def get_service_container() -> ServiceContainer:
    """Get the global service container instance."""
    global _service_container
    if _service_container is None:
        _service_container = ServiceContainer()
    return _service_container


def set_service_container(container: Optional[ServiceContainer]):
    """Set the global service container (useful for testing)."""
    global _service_container
    _service_container = container
