"""
arcgate - Archive operations on a permissioned virtual filesystem.
"""

from .domain.entities.archive import ArchiveFormat
from .domain.entities.location import LocationEntity, LocationKind
from .domain.entities.principal import AccessLevel, Principal
from .domain.entities.virtual_path import VirtualPath
from .application.services.archive_service import ArchiveApplicationService
from .application.container import ServiceContainer, get_service_container
from .interfaces.scripting.library import ArchiveScriptLibrary

__all__ = [
    "AccessLevel",
    "ArchiveApplicationService",
    "ArchiveFormat",
    "ArchiveScriptLibrary",
    "LocationEntity",
    "LocationKind",
    "Principal",
    "ServiceContainer",
    "VirtualPath",
    "get_service_container",
]
