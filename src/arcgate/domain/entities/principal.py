"""
Principal domain entity - the identity an operation runs for.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from .virtual_path import VirtualPath


class AccessLevel(Enum):
    """Access a principal holds on one namespace."""
    NONE = "none"
    READ = "read"
    READ_WRITE = "read_write"

    @property
    def can_read(self) -> bool:
        return self in (AccessLevel.READ, AccessLevel.READ_WRITE)

    @property
    def can_write(self) -> bool:
        return self is AccessLevel.READ_WRITE


@dataclass
class Principal:
    """
    Acting user identity.

    Grants map a namespace (location name) to an access level. Namespaces
    without a grant are inaccessible unless the principal is an admin.
    """
    username: str
    grants: Dict[str, AccessLevel] = field(default_factory=dict)
    admin: bool = False

    def __post_init__(self):
        errors = self.validate()
        if errors:
            raise ValueError(f"Invalid principal data: {', '.join(errors)}")

    def validate(self) -> List[str]:
        errors = []
        if not self.username or not isinstance(self.username, str):
            errors.append("Username is required")
        elif "/" in self.username or self.username in (".", ".."):
            errors.append("Username must not contain path separators")
        if not isinstance(self.grants, dict):
            errors.append("Grants must be a dictionary")
        else:
            for namespace, level in self.grants.items():
                if not isinstance(level, AccessLevel):
                    errors.append(f"Invalid access level for '{namespace}': {level}")
        return errors

    def access_for(self, namespace: str) -> AccessLevel:
        if self.admin:
            return AccessLevel.READ_WRITE
        return self.grants.get(namespace, AccessLevel.NONE)

    def can_read(self, vpath: VirtualPath) -> bool:
        """Check read access on a virtual path."""
        return self.access_for(vpath.namespace).can_read

    def can_write(self, vpath: VirtualPath) -> bool:
        """Check write access on a virtual path."""
        return self.access_for(vpath.namespace).can_write

    def grant(self, namespace: str, level: AccessLevel) -> None:
        if not isinstance(level, AccessLevel):
            raise ValueError(f"Invalid access level: {level}")
        self.grants[namespace] = level

    def __str__(self) -> str:
        return f"Principal[{self.username}]"
