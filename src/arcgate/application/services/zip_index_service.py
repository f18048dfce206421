"""
Zip Index Service - enumerate zip entries without extracting them.
"""

import json
import logging
import zipfile
from contextlib import contextmanager
from typing import Iterator, List, Sequence, Tuple

from ...domain.entities.archive import ArchiveEntry, EntryTreeNode, normalize_entry_name
from ..dtos import CallerContext, DirectoryListingDto
from ..exceptions import ArchiveOperationError, EntityNotFoundError
from .path_service import ResolvedLocation, VirtualPathService

logger = logging.getLogger(__name__)


def build_entry_tree(entries: Sequence[ArchiveEntry]) -> EntryTreeNode:
    """Fold a flat entry list into a tree rooted at ``/``."""
    root = EntryTreeNode.root()
    for entry in entries:
        root.insert(entry)
    return root


def list_directory_entries(entries: Sequence[ArchiveEntry], directory: str = "") -> List[str]:
    """
    Immediate children of ``directory`` inside an archive.

    Directories are reported with a trailing ``/``. Items keep the order in
    which they first appear in the archive.

    Raises
    ------
    EntityNotFoundError
        If a non-root directory matches no entry at all.
    """
    prefix = normalize_entry_name(directory or "").lstrip("/")
    if prefix and not prefix.endswith("/"):
        prefix += "/"

    found = not prefix
    seen = set()
    items: List[str] = []
    for entry in entries:
        name = entry.name
        if prefix:
            if not name.startswith(prefix):
                continue
            found = True
            name = name[len(prefix):]
        if not name:
            continue

        parts = name.split("/")
        item = parts[0]
        if not item or item in seen:
            continue
        seen.add(item)
        items.append(item + "/" if len(parts) > 1 or entry.is_dir else item)

    if not found:
        raise EntityNotFoundError("Directory", directory, f"Directory not found in zip: {prefix}")
    return items


class ZipIndexService:
    """Read-only views of a zip's central directory."""

    def __init__(self, path_service: VirtualPathService) -> None:
        self._paths = path_service
        self._logger = logger

    @contextmanager
    def open_archive(self, context: CallerContext, path: str) -> Iterator[Tuple[ResolvedLocation, zipfile.ZipFile]]:
        """Authorize, resolve and open a zip for reading.

        Raises:
            PermissionDeniedError: If the caller cannot read the archive
            EntityNotFoundError: If the archive does not exist
            ArchiveOperationError: If the file is not a readable zip
        """
        vpath = self._paths.rewrite(context, path)
        self._paths.authorize(context, reads=[vpath])
        resolved = self._paths.resolve(context, vpath)
        if not resolved.fs.isfile(resolved.real_path):
            raise EntityNotFoundError("File", str(vpath))

        try:
            raw = resolved.fs.open(resolved.real_path, "rb")
        except OSError as e:
            raise ArchiveOperationError(str(vpath), "open", str(e))
        with raw:
            try:
                zf = zipfile.ZipFile(raw)
            except (zipfile.BadZipFile, OSError) as e:
                raise ArchiveOperationError(str(vpath), "open", f"invalid zip archive: {e}")
            with zf:
                yield resolved, zf

    def list_entries(self, context: CallerContext, path: str) -> List[ArchiveEntry]:
        with self.open_archive(context, path) as (_, zf):
            return [
                ArchiveEntry(name=info.filename, is_dir=info.is_dir(), size=info.file_size)
                for info in zf.infolist()
                if info.filename
            ]

    def list_tree(self, context: CallerContext, path: str) -> EntryTreeNode:
        """Hierarchical view of every entry in the archive."""
        entries = self.list_entries(context, path)
        self._logger.debug(f"Indexed {len(entries)} entries of {path}")
        return build_entry_tree(entries)

    def list_contents_json(self, context: CallerContext, path: str) -> str:
        """The entry tree serialized as JSON, children keyed by name."""
        return json.dumps(self.list_tree(context, path).to_dict())

    def list_directory(self, context: CallerContext, path: str, directory: str = "") -> DirectoryListingDto:
        """Immediate children of one directory inside the archive."""
        entries = self.list_entries(context, path)
        items = list_directory_entries(entries, directory)
        return DirectoryListingDto(archive_path=path, directory=directory or "", items=items)
