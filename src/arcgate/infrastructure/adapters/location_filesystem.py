"""
Filesystem access for locations through fsspec.
"""

import logging

import fsspec
from fsspec import AbstractFileSystem

from ...domain.entities.location import LocationEntity

logger = logging.getLogger(__name__)


def create_location_filesystem(location: LocationEntity) -> AbstractFileSystem:
    """Create the fsspec filesystem backing a location.

    fsspec caches instances per protocol and options, so repeated calls for
    the same location return the same handle.
    """
    protocol = location.get_protocol()
    storage_options = dict(location.get_storage_options())

    if protocol in ('file', 'local'):
        # Extraction writes below directories that may not exist yet
        storage_options.setdefault('auto_mkdir', True)
        protocol = 'file'

    logger.debug(f"Opening {protocol} filesystem for location {location.name}")
    return fsspec.filesystem(protocol, **storage_options)
