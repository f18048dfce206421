"""
Archive codecs on top of zipfile, tarfile, gzip and py7zr.

Codecs read and write through fsspec file objects, so sources and
destinations may live on any filesystem a location is configured with.
They know nothing about virtual paths, permissions or ownership.
"""

import gzip
import logging
import os
import posixpath
import shutil
import tarfile
import tempfile
import time
import zipfile
import zlib
from contextlib import contextmanager
from typing import BinaryIO, Dict, Iterator, List, NamedTuple, Sequence

import py7zr
from fsspec import AbstractFileSystem
from py7zr.exceptions import ArchiveError as SevenZipArchiveError
from py7zr.exceptions import PasswordRequired, UnsupportedCompressionMethodError

from ...domain.entities.archive import ArchiveFormat, normalize_entry_name

logger = logging.getLogger(__name__)

COPY_BUFSIZE = 1024 * 1024
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


class CodecError(Exception):
    """Raised when a codec cannot read or write an archive."""
    pass


class FileRef(NamedTuple):
    """A path on a specific fsspec filesystem."""
    fs: AbstractFileSystem
    path: str


class SourceMember(NamedTuple):
    """One file or directory collected from an archive source."""
    arcname: str
    ref: FileRef
    is_dir: bool
    size: int
    mtime: float


_CODEC_FAILURES = (
    OSError,
    EOFError,
    zlib.error,
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    tarfile.TarError,
    SevenZipArchiveError,
    PasswordRequired,
    UnsupportedCompressionMethodError,
    # zipfile: encrypted entries and unknown compression methods
    RuntimeError,
    NotImplementedError,
)


@contextmanager
def codec_errors(operation: str, path: str) -> Iterator[None]:
    """Translate library failures into CodecError."""
    try:
        yield
    except CodecError:
        raise
    except _CODEC_FAILURES as e:
        raise CodecError(f"{operation} {path}: {e}") from e


def safe_join(root: str, name: str) -> str:
    """Join an in-archive name below ``root``, refusing names that escape it."""
    normalized = normalize_entry_name(name)
    if normalized.startswith("/") or any(part == ".." for part in normalized.split("/")):
        raise CodecError(f"illegal file path in archive: {name}")
    relative = posixpath.normpath(normalized)
    if relative in (".", ""):
        return root
    return posixpath.join(root, relative)


def _mtime_of(info: dict) -> float:
    for key in ("mtime", "created", "LastModified"):
        value = info.get(key)
        if isinstance(value, (int, float)):
            return float(value)
        if hasattr(value, "timestamp"):
            return value.timestamp()
    return time.time()


def iter_source_members(source: FileRef) -> Iterator[SourceMember]:
    """Yield the source itself, then (for directories) everything below it.

    Each member is named relative to the source's parent directory, so a
    source ``/data/logs`` produces ``logs/``, ``logs/a.txt`` and so on.
    """
    fs, path = source
    path = posixpath.normpath(path)
    top = posixpath.basename(path) or path.strip("/") or "root"
    info = fs.info(path)

    if info.get("type") != "directory":
        yield SourceMember(top, FileRef(fs, path), False, int(info.get("size") or 0), _mtime_of(info))
        return

    yield SourceMember(top, FileRef(fs, path), True, 0, _mtime_of(info))
    found = fs.find(path, withdirs=True, detail=True)
    for full in sorted(found):
        child = posixpath.normpath(full)
        if child == path:
            continue
        child_info = found[full]
        arcname = posixpath.join(top, posixpath.relpath(child, path))
        is_dir = child_info.get("type") == "directory"
        size = 0 if is_dir else int(child_info.get("size") or 0)
        yield SourceMember(arcname, FileRef(fs, child), is_dir, size, _mtime_of(child_info))


def collect_members(sources: Sequence[FileRef], destination: FileRef) -> List[SourceMember]:
    """All members of ``sources``, minus the archive being written."""
    skip = posixpath.normpath(destination.path)
    return [
        member
        for source in sources
        for member in iter_source_members(source)
        if member.is_dir or posixpath.normpath(member.ref.path) != skip
    ]


def write_stream(destination: FileRef, stream: BinaryIO, overwrite: bool) -> None:
    """Copy a readable stream into a file, creating parent directories."""
    fs, path = destination
    if not overwrite and fs.exists(path):
        raise CodecError(f"file already exists: {path}")
    parent = posixpath.dirname(path)
    if parent:
        fs.makedirs(parent, exist_ok=True)
    with fs.open(path, "wb") as out:
        shutil.copyfileobj(stream, out, COPY_BUFSIZE)


class IArchiveCodec:
    """
    Base class for format codecs.

    Which operations a format offers is decided by the capability table in
    the domain layer; the defaults here only guard against misuse.
    """

    archive_format: ArchiveFormat = ArchiveFormat.UNKNOWN

    def archive(self, sources: Sequence[FileRef], destination: FileRef, overwrite: bool = False) -> int:
        """Pack sources into a new archive. Returns the number of entries written."""
        raise CodecError(f"{self.archive_format.value} cannot create archives")

    def unarchive(self, source: FileRef, destination: FileRef, overwrite: bool = False) -> int:
        """Expand an archive below a directory. Returns the number of files written."""
        raise CodecError(f"{self.archive_format.value} cannot extract archives")

    def compress(self, source: FileRef, destination: FileRef) -> None:
        raise CodecError(f"{self.archive_format.value} cannot compress single files")

    def decompress(self, source: FileRef, destination: FileRef) -> None:
        raise CodecError(f"{self.archive_format.value} cannot decompress single files")


class ZipCodec(IArchiveCodec):
    archive_format = ArchiveFormat.ZIP

    def archive(self, sources: Sequence[FileRef], destination: FileRef, overwrite: bool = False) -> int:
        if not overwrite and destination.fs.exists(destination.path):
            raise CodecError(f"file already exists: {destination.path}")

        with codec_errors("zip", destination.path):
            members = collect_members(sources, destination)
            with destination.fs.open(destination.path, "wb") as out, \
                    zipfile.ZipFile(out, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for member in members:
                    self._add_member(zf, member)
        return len(members)

    def _add_member(self, zf: zipfile.ZipFile, member: SourceMember) -> None:
        date_time = max(time.localtime(member.mtime)[:6], ZIP_EPOCH)
        if member.is_dir:
            zinfo = zipfile.ZipInfo(member.arcname + "/", date_time=date_time)
            zinfo.external_attr = (0o40755 << 16) | 0x10
            zf.writestr(zinfo, b"")
            return

        zinfo = zipfile.ZipInfo(member.arcname, date_time=date_time)
        zinfo.compress_type = zipfile.ZIP_DEFLATED
        zinfo.external_attr = 0o100644 << 16
        zinfo.file_size = member.size
        with member.ref.fs.open(member.ref.path, "rb") as src, zf.open(zinfo, "w") as dst:
            shutil.copyfileobj(src, dst, COPY_BUFSIZE)

    def unarchive(self, source: FileRef, destination: FileRef, overwrite: bool = False) -> int:
        written = 0
        with codec_errors("unzip", source.path):
            destination.fs.makedirs(destination.path, exist_ok=True)
            with source.fs.open(source.path, "rb") as raw, zipfile.ZipFile(raw) as zf:
                for info in zf.infolist():
                    target = safe_join(destination.path, info.filename)
                    if info.is_dir():
                        destination.fs.makedirs(target, exist_ok=True)
                        continue
                    with zf.open(info) as stream:
                        write_stream(FileRef(destination.fs, target), stream, overwrite)
                    written += 1
        logger.debug(f"Unzipped {written} file(s) from {source.path}")
        return written


class TarCodec(IArchiveCodec):
    archive_format = ArchiveFormat.TAR
    compression = ""

    @property
    def _suffix(self) -> str:
        return f":{self.compression}" if self.compression else ":"

    def archive(self, sources: Sequence[FileRef], destination: FileRef, overwrite: bool = False) -> int:
        if not overwrite and destination.fs.exists(destination.path):
            raise CodecError(f"file already exists: {destination.path}")

        with codec_errors("tar", destination.path):
            members = collect_members(sources, destination)
            with destination.fs.open(destination.path, "wb") as out, \
                    tarfile.open(fileobj=out, mode="w" + self._suffix) as tar:
                for member in members:
                    tarinfo = tarfile.TarInfo(member.arcname)
                    tarinfo.mtime = int(member.mtime)
                    if member.is_dir:
                        tarinfo.type = tarfile.DIRTYPE
                        tarinfo.mode = 0o755
                        tar.addfile(tarinfo)
                    else:
                        tarinfo.size = member.size
                        tarinfo.mode = 0o644
                        with member.ref.fs.open(member.ref.path, "rb") as src:
                            tar.addfile(tarinfo, fileobj=src)
        return len(members)

    def unarchive(self, source: FileRef, destination: FileRef, overwrite: bool = False) -> int:
        written = 0
        with codec_errors("untar", source.path):
            destination.fs.makedirs(destination.path, exist_ok=True)
            with source.fs.open(source.path, "rb") as raw, \
                    tarfile.open(fileobj=raw, mode="r" + self._suffix) as tar:
                for member in tar:
                    target = safe_join(destination.path, member.name)
                    if member.isdir():
                        destination.fs.makedirs(target, exist_ok=True)
                    elif member.isfile():
                        stream = tar.extractfile(member)
                        with stream:
                            write_stream(FileRef(destination.fs, target), stream, overwrite)
                        written += 1
                    else:
                        raise CodecError(f"unsupported entry type in tar archive: {member.name}")
        logger.debug(f"Untarred {written} file(s) from {source.path}")
        return written


class TarGzCodec(TarCodec):
    archive_format = ArchiveFormat.TAR_GZ
    compression = "gz"


class GzipCodec(IArchiveCodec):
    archive_format = ArchiveFormat.GZ

    def compress(self, source: FileRef, destination: FileRef) -> None:
        with codec_errors("gzip", source.path):
            with source.fs.open(source.path, "rb") as fin, \
                    destination.fs.open(destination.path, "wb") as fout, \
                    gzip.GzipFile(filename=posixpath.basename(source.path), mode="wb", fileobj=fout) as gz:
                shutil.copyfileobj(fin, gz, COPY_BUFSIZE)

    def decompress(self, source: FileRef, destination: FileRef) -> None:
        with codec_errors("gunzip", source.path):
            with source.fs.open(source.path, "rb") as fin, \
                    gzip.GzipFile(fileobj=fin, mode="rb") as gz, \
                    destination.fs.open(destination.path, "wb") as fout:
                shutil.copyfileobj(gz, fout, COPY_BUFSIZE)


class SevenZipCodec(IArchiveCodec):
    """7z extraction; py7zr only writes to local disk, so entries are staged."""

    archive_format = ArchiveFormat.SEVEN_Z

    def unarchive(self, source: FileRef, destination: FileRef, overwrite: bool = False) -> int:
        written = 0
        with codec_errors("un7z", source.path):
            destination.fs.makedirs(destination.path, exist_ok=True)
            with source.fs.open(source.path, "rb") as raw, \
                    py7zr.SevenZipFile(raw, mode="r") as archive, \
                    tempfile.TemporaryDirectory(prefix="arcgate-7z-") as staging:
                for name in archive.getnames():
                    safe_join(destination.path, name)
                archive.extractall(path=staging)

                for root, dirs, files in os.walk(staging):
                    rel_root = os.path.relpath(root, staging).replace(os.sep, "/")
                    for name in sorted(dirs):
                        target = safe_join(destination.path, posixpath.join(rel_root, name))
                        destination.fs.makedirs(target, exist_ok=True)
                    for name in sorted(files):
                        target = safe_join(destination.path, posixpath.join(rel_root, name))
                        with open(os.path.join(root, name), "rb") as stream:
                            write_stream(FileRef(destination.fs, target), stream, overwrite)
                        written += 1
        return written


CODECS: Dict[ArchiveFormat, IArchiveCodec] = {
    ArchiveFormat.ZIP: ZipCodec(),
    ArchiveFormat.TAR: TarCodec(),
    ArchiveFormat.TAR_GZ: TarGzCodec(),
    ArchiveFormat.GZ: GzipCodec(),
    ArchiveFormat.SEVEN_Z: SevenZipCodec(),
}


def get_codec(archive_format: ArchiveFormat) -> IArchiveCodec:
    try:
        return CODECS[archive_format]
    except KeyError:
        raise CodecError(f"no codec for format {archive_format.value}")
