"""
Application-level exceptions.

Every failure a caller is expected to check for derives from
``ApplicationError``. ``PermissionDeniedError`` deliberately does not: it is
the one condition that aborts the calling script instead of being reported
through a return value.
"""

from typing import Optional


class ApplicationError(Exception):
    """Base class for recoverable application failures."""

    kind = "ApplicationError"


class ValidationError(ApplicationError):
    """Missing or malformed arguments, or an unusable format name."""

    kind = "InvalidArgument"


class EntityNotFoundError(ApplicationError):
    """A file, archive entry or directory does not exist."""

    kind = "NotFound"

    def __init__(self, entity_type: str, identifier: str, message: Optional[str] = None):
        self.entity_type = entity_type
        self.identifier = identifier
        super().__init__(message or f"{entity_type} not found: {identifier}")


class UnsupportedFormatError(ApplicationError):
    """The format could not be determined or does not support the operation."""

    kind = "UnsupportedFormat"

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__(message or f"Unsupported archive format: {path}")


class ArchiveOperationError(ApplicationError):
    """Reading, writing or coding an archive failed."""

    kind = "IOFailure"

    def __init__(self, path: str, operation: str, message: str):
        self.path = path
        self.operation = operation
        super().__init__(f"{operation} failed for {path}: {message}")


class PathResolutionError(ApplicationError):
    """A virtual path could not be mapped to a filesystem location."""

    kind = "PathResolution"

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Cannot resolve {path}: {message}")


class PermissionDeniedError(Exception):
    """Read or write access to a virtual path was refused."""

    kind = "PermissionDenied"

    def __init__(self, path: str, access: str):
        self.path = path
        self.access = access
        super().__init__(f"{access.capitalize()} access denied: {path}")
