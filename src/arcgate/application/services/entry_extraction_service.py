"""
Entry Extraction Service - copy one zip entry into the transient namespace.
"""

import logging
import posixpath

from ...domain.entities.archive import normalize_entry_name
from ...infrastructure.adapters.archive_codecs import CodecError, FileRef, codec_errors, write_stream
from ..dtos import CallerContext, EntryExtractionDto
from ..exceptions import ArchiveOperationError, EntityNotFoundError, ValidationError
from .ownership_service import OwnershipService
from .path_service import VirtualPathService
from .zip_index_service import ZipIndexService

logger = logging.getLogger(__name__)


def _comparable(name: str) -> str:
    return normalize_entry_name(name).strip("/")


class EntryExtractionService:
    """
    Pull a single entry out of a zip without expanding the rest.

    The entry lands at ``<transient>:/<basename>``. A previous file with the
    same base name is replaced.
    """

    def __init__(
        self,
        path_service: VirtualPathService,
        zip_index_service: ZipIndexService,
        ownership_service: OwnershipService,
    ) -> None:
        self._paths = path_service
        self._index = zip_index_service
        self._ownership = ownership_service
        self._logger = logger

    def extract_entry(self, context: CallerContext, archive_path: str, entry_name: str) -> EntryExtractionDto:
        """
        Extract ``entry_name`` from the zip at ``archive_path``.

        Raises
        ------
        ValidationError
            If the entry name is empty or names a directory.
        PermissionDeniedError
            If the caller cannot read the archive.
        EntityNotFoundError
            If the archive or the entry does not exist.
        ArchiveOperationError
            If reading the entry or writing the transient file fails.
        """
        if not isinstance(entry_name, str) or not _comparable(entry_name):
            raise ValidationError(f"Entry name must be a non-empty string, got {entry_name!r}")
        wanted = _comparable(entry_name)

        with self._index.open_archive(context, archive_path) as (source, zf):
            info = next((i for i in zf.infolist() if _comparable(i.filename) == wanted), None)
            if info is None:
                raise EntityNotFoundError("Entry", entry_name, f"Entry not found in zip: {entry_name}")
            if info.is_dir():
                raise ValidationError(f"Entry is a directory: {entry_name}")

            tmp_vpath = self._paths.transient_path(posixpath.basename(wanted))
            self._paths.authorize(context, writes=[tmp_vpath])
            target = self._paths.resolve(context, tmp_vpath)

            self._logger.info(f"Extracting entry {wanted} of {source.vpath} to {tmp_vpath}")
            try:
                with codec_errors("extract entry", wanted):
                    with zf.open(info) as stream:
                        write_stream(FileRef(target.fs, target.real_path), stream, overwrite=True)
            except CodecError as e:
                raise ArchiveOperationError(str(source.vpath), "extract entry", str(e))

        self._ownership.assign_file(context, target)
        return EntryExtractionDto(
            archive_path=str(source.vpath),
            entry_name=wanted,
            transient_path=str(tmp_vpath),
            size=info.file_size,
        )
