"""
Archive-related domain entities and value objects.
"""

import posixpath
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterator, Optional


class ArchiveFormat(Enum):
    """Archive formats known to the system."""
    ZIP = "zip"
    TAR = "tar"
    TAR_GZ = "tar.gz"
    GZ = "gz"
    SEVEN_Z = "7z"
    UNKNOWN = "unknown"

    @classmethod
    def from_name(cls, name: str) -> "ArchiveFormat":
        """Resolve a user supplied format name, accepting common aliases."""
        if not isinstance(name, str):
            raise ValueError(f"Format name must be a string, got {type(name).__name__}")
        key = name.strip().lower().lstrip(".")
        try:
            return _FORMAT_ALIASES[key]
        except KeyError:
            raise ValueError(f"Unsupported archive format: {name}")


_FORMAT_ALIASES = {
    "zip": ArchiveFormat.ZIP,
    "tar": ArchiveFormat.TAR,
    "tar.gz": ArchiveFormat.TAR_GZ,
    "tgz": ArchiveFormat.TAR_GZ,
    "targz": ArchiveFormat.TAR_GZ,
    "gz": ArchiveFormat.GZ,
    "gzip": ArchiveFormat.GZ,
    "7z": ArchiveFormat.SEVEN_Z,
}


class ArchiveOperation(Enum):
    """Operations a codec may support."""
    EXTRACT = "extract"
    CREATE = "create"
    COMPRESS = "compress"
    DECOMPRESS = "decompress"


FORMAT_CAPABILITIES: Dict[ArchiveFormat, FrozenSet[ArchiveOperation]] = {
    ArchiveFormat.ZIP: frozenset({ArchiveOperation.EXTRACT, ArchiveOperation.CREATE}),
    ArchiveFormat.TAR: frozenset({ArchiveOperation.EXTRACT, ArchiveOperation.CREATE}),
    ArchiveFormat.TAR_GZ: frozenset({ArchiveOperation.EXTRACT, ArchiveOperation.CREATE}),
    ArchiveFormat.GZ: frozenset({ArchiveOperation.COMPRESS, ArchiveOperation.DECOMPRESS}),
    ArchiveFormat.SEVEN_Z: frozenset({ArchiveOperation.EXTRACT}),
    ArchiveFormat.UNKNOWN: frozenset(),
}


def supports(archive_format: ArchiveFormat, operation: ArchiveOperation) -> bool:
    """Check the capability table for a format/operation pair."""
    return operation in FORMAT_CAPABILITIES.get(archive_format, frozenset())


def normalize_entry_name(name: str) -> str:
    """Slash-separated form of an in-archive name."""
    return name.replace("\\", "/")


@dataclass(frozen=True)
class ArchiveEntry:
    """Value object for one entry of an archive's directory."""
    name: str
    is_dir: bool = False
    size: int = 0

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Entry name must be a non-empty string")
        if not isinstance(self.size, int) or self.size < 0:
            raise ValueError("Entry size must be a non-negative integer")
        object.__setattr__(self, "name", normalize_entry_name(self.name))

    @property
    def segments(self) -> list:
        return [part for part in self.name.split("/") if part]


@dataclass
class EntryTreeNode:
    """Node of the hierarchical view of an archive's entries."""
    name: str
    is_dir: bool = True
    size: int = 0
    children: Dict[str, "EntryTreeNode"] = field(default_factory=dict)

    @classmethod
    def root(cls) -> "EntryTreeNode":
        return cls(name="/", is_dir=True)

    def insert(self, entry: ArchiveEntry) -> None:
        """Insert an entry's segments below this node.

        Existing nodes are never modified, so inserting the same path twice,
        or inserting ``docs/`` after ``docs/a.txt``, changes nothing.
        """
        parts = entry.name.split("/")
        current = self
        for index, part in enumerate(parts):
            if not part:
                continue
            is_last = index == len(parts) - 1
            child = current.children.get(part)
            if child is None:
                child = EntryTreeNode(name=part, is_dir=not is_last or entry.is_dir)
                if is_last and not entry.is_dir:
                    child.size = entry.size
                current.children[part] = child
            current = child

    def find(self, path: str) -> Optional["EntryTreeNode"]:
        current = self
        for part in normalize_entry_name(path).split("/"):
            if not part:
                continue
            current = current.children.get(part)
            if current is None:
                return None
        return current

    def walk(self, prefix: str = "") -> Iterator[ArchiveEntry]:
        """Flatten the subtree back into entries (directories end with ``/``)."""
        for child in self.children.values():
            path = posixpath.join(prefix, child.name) if prefix else child.name
            if child.is_dir:
                yield ArchiveEntry(name=path + "/", is_dir=True, size=0)
                yield from child.walk(path)
            else:
                yield ArchiveEntry(name=path, is_dir=False, size=child.size)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form: ``name``/``isDir`` plus ``children`` or ``size``."""
        data: Dict[str, Any] = {"name": self.name, "isDir": self.is_dir}
        if self.is_dir:
            data["children"] = {
                name: child.to_dict() for name, child in self.children.items()
            }
        else:
            data["size"] = self.size
        return data
