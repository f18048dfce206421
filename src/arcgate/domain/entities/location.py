"""
Core Location domain entity - a namespace of the virtual filesystem.
"""

import posixpath
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, List


class LocationKind(Enum):
    """How a location lays out its tree for different principals."""
    USER = auto()
    SHARED = auto()
    TRANSIENT = auto()

    @classmethod
    def from_str(cls, s: str) -> 'LocationKind':
        """Create LocationKind from string representation."""
        try:
            return cls[s.upper()]
        except KeyError:
            valid_kinds = ', '.join(e.name for e in cls)
            raise ValueError(f"Invalid location kind: {s}. Valid kinds: {valid_kinds}")


@dataclass
class LocationEntity:
    """
    Pure domain entity representing a virtual path namespace.

    The location name is the namespace prefix used in virtual paths
    (``user:/docs/a.txt`` lives in the ``user`` location). The config
    names the fsspec protocol and the base path the namespace is rooted at.
    """
    name: str
    kinds: List[LocationKind]
    config: Dict[str, Any]

    def __post_init__(self):
        """Validate the entity after initialization."""
        validation_errors = self.validate()
        if validation_errors:
            raise ValueError(f"Invalid location data: {', '.join(validation_errors)}")

    def validate(self) -> List[str]:
        """
        Validate business rules for the location entity.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not self.name or not isinstance(self.name, str):
            errors.append("Location name is required")
        elif not all(c.isalnum() or c in "-_" for c in self.name):
            errors.append("Location name may only contain alphanumerics, hyphens and underscores")

        if not isinstance(self.kinds, list) or not self.kinds:
            errors.append("At least one location kind is required")
        else:
            for kind in self.kinds:
                if not isinstance(kind, LocationKind):
                    errors.append(f"Invalid location kind: {kind}. Must be LocationKind enum")
            if LocationKind.USER in self.kinds and LocationKind.SHARED in self.kinds:
                errors.append("A location cannot be both USER and SHARED")

        if not isinstance(self.config, dict):
            errors.append("Config must be a dictionary")
        else:
            errors.extend(self._validate_config())

        return errors

    def _validate_config(self) -> List[str]:
        errors = []

        protocol = self.config.get('protocol', 'file')
        if not isinstance(protocol, str):
            errors.append("Protocol must be a string")

        if 'path' not in self.config:
            errors.append("Path is required in config")
        elif not isinstance(self.config['path'], str):
            errors.append("Path must be a string")

        storage_options = self.config.get('storage_options', {})
        if not isinstance(storage_options, dict):
            errors.append("storage_options must be a dictionary")

        return errors

    def has_kind(self, kind: LocationKind) -> bool:
        """Check if location has a specific kind."""
        return kind in self.kinds

    def is_per_user(self) -> bool:
        """USER and TRANSIENT locations give every principal its own subtree."""
        return self.has_kind(LocationKind.USER) or self.has_kind(LocationKind.TRANSIENT)

    def is_transient(self) -> bool:
        return self.has_kind(LocationKind.TRANSIENT)

    def get_protocol(self) -> str:
        """Get the storage protocol for this location."""
        return self.config.get('protocol', 'file')

    def get_base_path(self) -> str:
        """Get the base path for this location."""
        return self.config.get('path', '')

    def get_storage_options(self) -> Dict[str, Any]:
        """Get storage options for this location."""
        return self.config.get('storage_options', {})

    def root_for(self, username: str) -> str:
        """Real path that ``<name>:/`` maps to for the given user."""
        base = self.get_base_path().rstrip('/') or '/'
        if self.is_per_user():
            return posixpath.join(base, username)
        return base

    def __eq__(self, other) -> bool:
        """Check equality based on name."""
        if not isinstance(other, LocationEntity):
            return False
        return self.name == other.name

    def __hash__(self) -> int:
        """Hash based on name."""
        return hash(self.name)

    def __str__(self) -> str:
        kinds_str = ', '.join(kind.name for kind in self.kinds)
        return f"Location[{self.name}] ({self.get_protocol()}, {kinds_str})"

    def __repr__(self) -> str:
        return (f"LocationEntity(name='{self.name}', "
                f"kinds={[k.name for k in self.kinds]}, "
                f"protocol='{self.get_protocol()}')")
