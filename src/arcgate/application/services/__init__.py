"""
Application services for archive operations.
"""

from .archive_service import ArchiveApplicationService
from .entry_extraction_service import EntryExtractionService
from .format_service import FormatDetectionService
from .ownership_service import OwnershipService
from .path_service import ResolvedLocation, VirtualPathService
from .zip_index_service import ZipIndexService

__all__ = [
    "ArchiveApplicationService",
    "EntryExtractionService",
    "FormatDetectionService",
    "OwnershipService",
    "ResolvedLocation",
    "VirtualPathService",
    "ZipIndexService",
]
