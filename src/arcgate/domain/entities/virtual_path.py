"""
Virtual path value object.

A virtual path is ``namespace:/some/path``. Anything without a namespace
prefix is relative and must be rewritten against a base before use.
"""

import posixpath
import re
from dataclasses import dataclass
from typing import Optional

_PREFIX_RE = re.compile(r"^([A-Za-z0-9_-]+):/(.*)$", re.DOTALL)


def is_absolute_vpath(value: str) -> bool:
    """Check whether a string carries a namespace prefix."""
    return bool(_PREFIX_RE.match(value))


def _clean(path: str) -> str:
    # normpath on an absolute path never climbs above "/"
    cleaned = posixpath.normpath("/" + path.replace("\\", "/"))
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


@dataclass(frozen=True)
class VirtualPath:
    """Value object for a namespace-qualified path."""
    namespace: str
    path: str = "/"

    def __post_init__(self):
        if not self.namespace or not isinstance(self.namespace, str):
            raise ValueError("Virtual path namespace must be a non-empty string")
        if not isinstance(self.path, str):
            raise ValueError("Virtual path must be a string")
        object.__setattr__(self, "path", _clean(self.path))

    @classmethod
    def parse(cls, value: str) -> "VirtualPath":
        """Parse an absolute virtual path string.

        Raises:
            ValueError: If the string has no namespace prefix.
        """
        if not isinstance(value, str):
            raise ValueError(f"Virtual path must be a string, got {type(value).__name__}")
        match = _PREFIX_RE.match(value)
        if not match:
            raise ValueError(f"Not an absolute virtual path: {value!r}")
        return cls(match.group(1), match.group(2))

    @classmethod
    def rewrite(cls, value: str, base: Optional["VirtualPath"]) -> "VirtualPath":
        """Turn a possibly relative path into an absolute one.

        Relative paths are joined onto ``base`` (a directory). Without a base
        a relative path cannot be resolved.
        """
        if is_absolute_vpath(value):
            return cls.parse(value)
        if base is None:
            raise ValueError(f"Relative path {value!r} given without a base location")
        return cls(base.namespace, posixpath.join(base.path, value))

    @property
    def name(self) -> str:
        return posixpath.basename(self.path)

    @property
    def parent(self) -> "VirtualPath":
        return VirtualPath(self.namespace, posixpath.dirname(self.path))

    def is_root(self) -> bool:
        return self.path == "/"

    def joinpath(self, *parts: str) -> "VirtualPath":
        return VirtualPath(self.namespace, posixpath.join(self.path, *parts))

    def relative_parts(self) -> str:
        """Path below the namespace root without the leading slash."""
        return self.path.lstrip("/")

    def __str__(self) -> str:
        return f"{self.namespace}:{self.path}"
