"""
Archive Application Service - extract, create, compress and decompress
archives addressed by virtual paths.

Every call follows the same sequence: rewrite relative paths, pass the
permission gate (all reads, then writes), resolve to real paths, pick the
codec, run it, and only then record ownership of what was written.
"""

import logging
import posixpath
import time
from typing import Any, Union

from ...domain.entities.archive import ArchiveFormat, ArchiveOperation, supports
from ...infrastructure.adapters.archive_codecs import CodecError, FileRef, get_codec
from ..dtos import ArchiveOperationResultDto, CallerContext, SourceSpec
from ..exceptions import (
    ArchiveOperationError,
    EntityNotFoundError,
    UnsupportedFormatError,
    ValidationError,
)
from .format_service import FormatDetectionService
from .ownership_service import OwnershipService
from .path_service import ResolvedLocation, VirtualPathService

logger = logging.getLogger(__name__)

FormatArg = Union[ArchiveFormat, str, None]


def _ref(resolved: ResolvedLocation) -> FileRef:
    return FileRef(resolved.fs, resolved.real_path)


class ArchiveApplicationService:
    """
    Application service for archive operations on the virtual filesystem.

    Parameters
    ----------
    path_service : VirtualPathService
        Rewrites, authorizes and resolves virtual paths.
    format_service : FormatDetectionService
        Detects formats for the generic entry points.
    ownership_service : OwnershipService
        Records ownership after successful writes.
    overwrite_existing : bool
        Allow archive creation and extraction to replace existing files.

    Notes
    -----
    Recoverable failures raise ``ApplicationError`` subclasses; permission
    failures raise ``PermissionDeniedError`` before any filesystem mutation.
    """

    def __init__(
        self,
        path_service: VirtualPathService,
        format_service: FormatDetectionService,
        ownership_service: OwnershipService,
        overwrite_existing: bool = False,
    ) -> None:
        self._paths = path_service
        self._formats = format_service
        self._ownership = ownership_service
        self._overwrite = overwrite_existing
        self._logger = logger

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def extract(
        self,
        context: CallerContext,
        source: str,
        destination: str,
        archive_format: FormatArg = None,
    ) -> ArchiveOperationResultDto:
        """
        Extract an archive into a destination directory.

        With ``archive_format`` left as None the codec is probed from the
        file name and, failing that, from its header.

        Raises
        ------
        PermissionDeniedError
            If the source is not readable or the destination not writable.
        EntityNotFoundError
            If the source archive does not exist.
        UnsupportedFormatError
            If the format is unknown or cannot be extracted.
        ArchiveOperationError
            If the codec fails.
        """
        start_time = time.time()
        explicit = self._parse_format(archive_format) if archive_format is not None else None

        src_vpath = self._paths.rewrite(context, source)
        dest_vpath = self._paths.rewrite(context, destination)
        self._paths.authorize(context, reads=[src_vpath], writes=[dest_vpath])

        src = self._paths.resolve(context, src_vpath)
        dest = self._paths.resolve(context, dest_vpath)

        fmt = explicit if explicit is not None else self._formats.probe_codec(src)
        if not supports(fmt, ArchiveOperation.EXTRACT):
            raise UnsupportedFormatError(str(src_vpath), f"{fmt.value} format does not support extraction")
        self._require_file(src)

        self._logger.info(f"Extracting {src_vpath} ({fmt.value}) to {dest_vpath}")
        try:
            files = get_codec(fmt).unarchive(_ref(src), _ref(dest), overwrite=self._overwrite)
        except CodecError as e:
            self._logger.error(f"Extraction of {src_vpath} failed: {e}")
            raise ArchiveOperationError(str(src_vpath), "extract", str(e))

        owned = self._ownership.assign_tree(context, dest)
        self._logger.info(f"Extracted {files} file(s) from {src_vpath}")
        return ArchiveOperationResultDto(
            operation_type="extract",
            success=True,
            source_paths=[str(src_vpath)],
            destination_path=str(dest_vpath),
            archive_format=fmt.value,
            files_owned=owned,
            duration_seconds=time.time() - start_time,
        )

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create(
        self,
        context: CallerContext,
        sources: Any,
        destination: str,
        archive_format: FormatArg = ArchiveFormat.ZIP,
    ) -> ArchiveOperationResultDto:
        """
        Pack one or many sources into a new archive.

        ``sources`` is a path, a list of paths or a SourceSpec. gzip is
        refused here because it cannot hold more than one file; use
        :meth:`compress` instead.

        Raises
        ------
        ValidationError
            For malformed sources, unknown format names or gz/gzip.
        PermissionDeniedError
            If any source is unreadable or the destination unwritable.
        EntityNotFoundError
            If a source does not exist.
        UnsupportedFormatError
            If the format cannot create archives.
        ArchiveOperationError
            If the codec fails.
        """
        start_time = time.time()
        fmt = self._parse_format(archive_format)
        if fmt is ArchiveFormat.GZ:
            raise ValidationError("gz format requires single-file compression, not archive creation")
        try:
            spec = SourceSpec.from_argument(sources)
        except ValueError as e:
            raise ValidationError(str(e))

        src_vpaths = [self._paths.rewrite(context, path) for path in spec]
        dest_vpath = self._paths.rewrite(context, destination)
        self._paths.authorize(context, reads=src_vpaths, writes=[dest_vpath])

        srcs = [self._paths.resolve(context, vpath) for vpath in src_vpaths]
        dest = self._paths.resolve(context, dest_vpath)

        if not supports(fmt, ArchiveOperation.CREATE):
            raise UnsupportedFormatError(str(dest_vpath), f"{fmt.value} format does not support archive creation")
        for src in srcs:
            if not src.fs.exists(src.real_path):
                raise EntityNotFoundError("File", str(src.vpath))

        self._logger.info(f"Creating {fmt.value} archive {dest_vpath} from {len(srcs)} source(s)")
        entries = self._write(
            dest, "create",
            lambda: get_codec(fmt).archive([_ref(s) for s in srcs], _ref(dest), overwrite=self._overwrite),
        )

        owned = self._ownership.assign_file(context, dest)
        self._logger.info(f"Created {dest_vpath} with {entries} entries")
        return ArchiveOperationResultDto(
            operation_type="create",
            success=True,
            source_paths=[str(v) for v in src_vpaths],
            destination_path=str(dest_vpath),
            archive_format=fmt.value,
            files_owned=owned,
            duration_seconds=time.time() - start_time,
        )

    # ------------------------------------------------------------------
    # Single-file gzip
    # ------------------------------------------------------------------

    def compress(self, context: CallerContext, source: str, destination: str) -> ArchiveOperationResultDto:
        """gzip one file into another."""
        return self._single_file(context, source, destination, ArchiveOperation.COMPRESS)

    def decompress(self, context: CallerContext, source: str, destination: str) -> ArchiveOperationResultDto:
        """gunzip one file into another."""
        return self._single_file(context, source, destination, ArchiveOperation.DECOMPRESS)

    def _single_file(
        self,
        context: CallerContext,
        source: str,
        destination: str,
        operation: ArchiveOperation,
    ) -> ArchiveOperationResultDto:
        start_time = time.time()
        src_vpath = self._paths.rewrite(context, source)
        dest_vpath = self._paths.rewrite(context, destination)
        self._paths.authorize(context, reads=[src_vpath], writes=[dest_vpath])

        src = self._paths.resolve(context, src_vpath)
        dest = self._paths.resolve(context, dest_vpath)
        self._require_file(src)

        codec = get_codec(ArchiveFormat.GZ)
        run = codec.compress if operation is ArchiveOperation.COMPRESS else codec.decompress
        self._logger.info(f"{operation.value.capitalize()}ing {src_vpath} to {dest_vpath}")
        self._write(dest, operation.value, lambda: run(_ref(src), _ref(dest)))

        owned = self._ownership.assign_file(context, dest)
        return ArchiveOperationResultDto(
            operation_type=operation.value,
            success=True,
            source_paths=[str(src_vpath)],
            destination_path=str(dest_vpath),
            archive_format=ArchiveFormat.GZ.value,
            files_owned=owned,
            duration_seconds=time.time() - start_time,
        )

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def is_valid_archive(self, context: CallerContext, path: str) -> bool:
        """Whether some codec can read the file."""
        vpath = self._paths.rewrite(context, path)
        self._paths.authorize(context, reads=[vpath])
        resolved = self._paths.resolve(context, vpath)
        if not resolved.fs.isfile(resolved.real_path):
            return False
        return self._formats.is_archive(resolved)

    def detect_format(self, context: CallerContext, path: str) -> ArchiveFormat:
        """Format of a file by extension, then magic bytes; UNKNOWN otherwise."""
        vpath = self._paths.rewrite(context, path)
        self._paths.authorize(context, reads=[vpath])
        resolved = self._paths.resolve(context, vpath)
        return self._formats.detect_format(resolved)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _parse_format(self, archive_format: FormatArg) -> ArchiveFormat:
        if isinstance(archive_format, ArchiveFormat):
            return archive_format
        if archive_format is None:
            raise ValidationError("Archive format is required")
        try:
            return ArchiveFormat.from_name(archive_format)
        except ValueError as e:
            raise ValidationError(str(e))

    def _require_file(self, resolved: ResolvedLocation) -> None:
        if not resolved.fs.isfile(resolved.real_path):
            raise EntityNotFoundError("File", str(resolved.vpath))

    def _write(self, dest: ResolvedLocation, operation: str, run):
        """Run a codec call that produces ``dest``, removing partial output on failure."""
        existed = dest.fs.exists(dest.real_path)
        parent = posixpath.dirname(dest.real_path)
        try:
            if parent:
                dest.fs.makedirs(parent, exist_ok=True)
            return run()
        except (CodecError, OSError) as e:
            self._logger.error(f"{operation} of {dest.vpath} failed: {e}")
            if not existed:
                self._discard(dest)
            raise ArchiveOperationError(str(dest.vpath), operation, str(e))

    def _discard(self, dest: ResolvedLocation) -> None:
        try:
            if dest.fs.exists(dest.real_path):
                dest.fs.rm(dest.real_path)
        except OSError as e:
            self._logger.warning(f"Could not remove partial output {dest.vpath}: {e}")
