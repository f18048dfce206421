"""
Data Transfer Objects for the application layer.

DTOs carry data across the boundary between the script/CLI interfaces and
the application services.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple

from ..domain.entities.principal import Principal
from ..domain.entities.virtual_path import VirtualPath


@dataclass(frozen=True)
class CallerContext:
    """Who is calling, and from where.

    ``script_path`` is the virtual path of the invoking script; relative
    paths are resolved against its directory.
    """
    principal: Principal
    script_path: Optional[str] = None

    @property
    def base(self) -> Optional[VirtualPath]:
        if not self.script_path:
            return None
        return VirtualPath.parse(self.script_path).parent


class SourceKind(Enum):
    SINGLE = "single"
    MANY = "many"


@dataclass(frozen=True)
class SourceSpec:
    """Sources of a create call: a single path or an ordered list of paths."""
    kind: SourceKind
    paths: Tuple[str, ...]

    def __post_init__(self):
        if not self.paths:
            raise ValueError("At least one source path is required")
        if self.kind is SourceKind.SINGLE and len(self.paths) != 1:
            raise ValueError("A single source holds exactly one path")
        for path in self.paths:
            if not isinstance(path, str) or not path:
                raise ValueError(f"Source paths must be non-empty strings, got {path!r}")

    @classmethod
    def single(cls, path: str) -> "SourceSpec":
        return cls(SourceKind.SINGLE, (path,))

    @classmethod
    def many(cls, paths: Sequence[str]) -> "SourceSpec":
        return cls(SourceKind.MANY, tuple(paths))

    @classmethod
    def from_argument(cls, value: Any) -> "SourceSpec":
        """Build from a script argument that is either a string or a list of strings."""
        if isinstance(value, SourceSpec):
            return value
        if isinstance(value, str):
            return cls.single(value)
        if isinstance(value, (list, tuple)):
            return cls.many(value)
        raise ValueError(f"Invalid source format: expected a path or a list of paths, got {type(value).__name__}")

    def __iter__(self):
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)


@dataclass
class ArchiveOperationResultDto:
    """DTO for archive operation results."""
    operation_type: str
    success: bool
    source_paths: List[str] = field(default_factory=list)
    destination_path: Optional[str] = None
    archive_format: Optional[str] = None
    files_owned: int = 0
    duration_seconds: float = 0.0
    warnings: List[str] = field(default_factory=list)
    error_message: Optional[str] = None


@dataclass
class DirectoryListingDto:
    """Immediate children of one directory inside an archive."""
    archive_path: str
    directory: str
    items: List[str] = field(default_factory=list)


@dataclass
class EntryExtractionDto:
    """Result of pulling a single entry out of an archive."""
    archive_path: str
    entry_name: str
    transient_path: str
    size: int = 0
