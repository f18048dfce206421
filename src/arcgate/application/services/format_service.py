"""
Format Detection Service - classify files as archive formats.

Two call sites with different failure semantics live here:

* :meth:`FormatDetectionService.detect_format` always answers, falling back
  to ``ArchiveFormat.UNKNOWN``.
* :meth:`FormatDetectionService.probe_codec` picks the codec used by the
  generic extractor and the validity check, and raises
  ``UnsupportedFormatError`` when the file is not an archive at all.
"""

import gzip
import logging
import posixpath
import zlib

from ...domain.entities.archive import ArchiveFormat
from ..exceptions import EntityNotFoundError, UnsupportedFormatError
from .path_service import ResolvedLocation

logger = logging.getLogger(__name__)

ZIP_MAGIC_PREFIX = b"PK"
ZIP_MAGIC_MARKERS = (0x03, 0x05)
SEVEN_Z_MAGIC = b"7z\xbc\xaf"
GZIP_MAGIC = b"\x1f\x8b"
TAR_MAGIC = b"ustar"
TAR_MAGIC_OFFSET = 257

_EXTENSIONS = {
    ".zip": ArchiveFormat.ZIP,
    ".7z": ArchiveFormat.SEVEN_Z,
    ".tar": ArchiveFormat.TAR,
    ".tgz": ArchiveFormat.TAR_GZ,
}


def format_from_extension(path: str) -> ArchiveFormat:
    """Classify by file name only; ``UNKNOWN`` when the extension says nothing."""
    lowered = path.lower()
    ext = posixpath.splitext(lowered)[1]
    if ext == ".gz":
        if lowered.endswith(".tar.gz") or lowered.endswith(".tgz"):
            return ArchiveFormat.TAR_GZ
        return ArchiveFormat.GZ
    return _EXTENSIONS.get(ext, ArchiveFormat.UNKNOWN)


def format_from_magic(magic: bytes) -> ArchiveFormat:
    """Classify by the first four bytes of a file."""
    if len(magic) >= 3 and magic[:2] == ZIP_MAGIC_PREFIX and magic[2] in ZIP_MAGIC_MARKERS:
        return ArchiveFormat.ZIP
    if magic[:4] == SEVEN_Z_MAGIC:
        return ArchiveFormat.SEVEN_Z
    if magic[:2] == GZIP_MAGIC:
        return ArchiveFormat.GZ
    return ArchiveFormat.UNKNOWN


def _is_tar_block(block: bytes) -> bool:
    return block[TAR_MAGIC_OFFSET:TAR_MAGIC_OFFSET + len(TAR_MAGIC)] == TAR_MAGIC


class FormatDetectionService:
    """Detect archive formats of resolved locations."""

    def __init__(self) -> None:
        self._logger = logger

    def _read_header(self, resolved: ResolvedLocation, size: int) -> bytes:
        with resolved.fs.open(resolved.real_path, "rb") as f:
            return f.read(size)

    def detect_format(self, resolved: ResolvedLocation) -> ArchiveFormat:
        """Extension first, then magic bytes. Never raises for unreadable files."""
        archive_format = format_from_extension(resolved.real_path)
        if archive_format is not ArchiveFormat.UNKNOWN:
            return archive_format

        try:
            magic = self._read_header(resolved, 4)
        except (OSError, ValueError) as e:
            self._logger.debug(f"Could not read header of {resolved}: {e}")
            return ArchiveFormat.UNKNOWN

        archive_format = format_from_magic(magic)
        self._logger.debug(f"Detected {archive_format.value} from header of {resolved}")
        return archive_format

    def probe_codec(self, resolved: ResolvedLocation) -> ArchiveFormat:
        """Find the codec able to read a file.

        Raises:
            EntityNotFoundError: If the file does not exist
            UnsupportedFormatError: If neither name nor header identify an archive
        """
        archive_format = format_from_extension(resolved.real_path)
        if archive_format is not ArchiveFormat.UNKNOWN:
            return archive_format

        if not resolved.fs.isfile(resolved.real_path):
            raise EntityNotFoundError("File", str(resolved.vpath))

        try:
            header = self._read_header(resolved, TAR_MAGIC_OFFSET + len(TAR_MAGIC))
        except OSError as e:
            raise UnsupportedFormatError(str(resolved.vpath), f"Cannot read header of {resolved.vpath}: {e}")

        archive_format = format_from_magic(header[:4])
        if archive_format is ArchiveFormat.GZ and self._gzip_wraps_tar(resolved):
            return ArchiveFormat.TAR_GZ
        if archive_format is ArchiveFormat.UNKNOWN and _is_tar_block(header):
            return ArchiveFormat.TAR
        if archive_format is ArchiveFormat.UNKNOWN:
            raise UnsupportedFormatError(str(resolved.vpath), f"Not an archive: {resolved.vpath}")
        return archive_format

    def _gzip_wraps_tar(self, resolved: ResolvedLocation) -> bool:
        try:
            with resolved.fs.open(resolved.real_path, "rb") as raw:
                with gzip.GzipFile(fileobj=raw, mode="rb") as gz:
                    block = gz.read(TAR_MAGIC_OFFSET + len(TAR_MAGIC))
        except (OSError, EOFError, zlib.error):
            return False
        return _is_tar_block(block)

    def is_archive(self, resolved: ResolvedLocation) -> bool:
        try:
            self.probe_codec(resolved)
        except (UnsupportedFormatError, EntityNotFoundError):
            return False
        return True
