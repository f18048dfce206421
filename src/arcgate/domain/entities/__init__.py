"""Domain entities - pure business objects without infrastructure concerns."""

from .archive import (
    FORMAT_CAPABILITIES,
    ArchiveEntry,
    ArchiveFormat,
    ArchiveOperation,
    EntryTreeNode,
    normalize_entry_name,
    supports,
)
from .location import LocationEntity, LocationKind
from .principal import AccessLevel, Principal
from .virtual_path import VirtualPath, is_absolute_vpath

__all__ = [
    "FORMAT_CAPABILITIES",
    "AccessLevel",
    "ArchiveEntry",
    "ArchiveFormat",
    "ArchiveOperation",
    "EntryTreeNode",
    "LocationEntity",
    "LocationKind",
    "Principal",
    "VirtualPath",
    "is_absolute_vpath",
    "normalize_entry_name",
    "supports",
]
