"""
Virtual Path Service - path rewriting, permission gating and resolution.

Every archive operation passes its virtual paths through this service
before any filesystem or codec work happens.
"""

import logging
import posixpath
from dataclasses import dataclass
from typing import Callable, Sequence

from fsspec import AbstractFileSystem

from ...domain.entities.location import LocationEntity
from ...domain.entities.virtual_path import VirtualPath
from ...domain.repositories.location_repository import ILocationRepository
from ...infrastructure.adapters.location_filesystem import create_location_filesystem
from ..dtos import CallerContext
from ..exceptions import PathResolutionError, PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedLocation:
    """A virtual path mapped onto a concrete filesystem for one principal."""
    fs: AbstractFileSystem
    real_path: str
    vpath: VirtualPath
    location: LocationEntity

    def __str__(self) -> str:
        return str(self.vpath)


class VirtualPathService:
    """
    Rewrites, authorizes and resolves virtual paths.

    Resolution is a pure mapping from ``namespace:/path`` to
    ``(filesystem, real path)``; it never touches storage.
    """

    def __init__(
        self,
        location_repository: ILocationRepository,
        filesystem_factory: Callable[[LocationEntity], AbstractFileSystem] = create_location_filesystem,
        transient_namespace: str = "tmp",
    ) -> None:
        self._location_repo = location_repository
        self._filesystem_factory = filesystem_factory
        self._transient_namespace = transient_namespace
        self._logger = logger

    @property
    def transient_namespace(self) -> str:
        return self._transient_namespace

    def rewrite(self, context: CallerContext, path: str) -> VirtualPath:
        """Make ``path`` absolute using the caller's script directory."""
        if not isinstance(path, str) or not path:
            raise ValidationError(f"Path must be a non-empty string, got {path!r}")
        try:
            base = context.base
            return VirtualPath.rewrite(path, base)
        except ValueError as e:
            raise ValidationError(str(e))

    def _location_for(self, vpath: VirtualPath) -> LocationEntity:
        location = self._location_repo.get_by_name(vpath.namespace)
        if location is None:
            raise PathResolutionError(str(vpath), f"unknown namespace '{vpath.namespace}'")
        return location

    def can_read(self, context: CallerContext, vpath: VirtualPath) -> bool:
        location = self._location_for(vpath)
        if location.is_transient():
            return True
        return context.principal.can_read(vpath)

    def can_write(self, context: CallerContext, vpath: VirtualPath) -> bool:
        location = self._location_for(vpath)
        if location.is_transient():
            return True
        return context.principal.can_write(vpath)

    def require_read(self, context: CallerContext, vpath: VirtualPath) -> None:
        if not self.can_read(context, vpath):
            self._logger.warning(f"Read access denied for {context.principal.username}: {vpath}")
            raise PermissionDeniedError(str(vpath), "read")

    def require_write(self, context: CallerContext, vpath: VirtualPath) -> None:
        if not self.can_write(context, vpath):
            self._logger.warning(f"Write access denied for {context.principal.username}: {vpath}")
            raise PermissionDeniedError(str(vpath), "write")

    def authorize(
        self,
        context: CallerContext,
        reads: Sequence[VirtualPath] = (),
        writes: Sequence[VirtualPath] = (),
    ) -> None:
        """Check every read path in order, then every write path.

        The first failing check raises; nothing after it is evaluated.
        """
        for vpath in reads:
            self.require_read(context, vpath)
        for vpath in writes:
            self.require_write(context, vpath)

    def resolve(self, context: CallerContext, vpath: VirtualPath) -> ResolvedLocation:
        """Map a virtual path onto its filesystem and real path."""
        location = self._location_for(vpath)
        root = location.root_for(context.principal.username)
        relative = vpath.relative_parts()
        real_path = posixpath.join(root, relative) if relative else root

        try:
            fs = self._filesystem_factory(location)
        except (ImportError, ValueError, TypeError) as e:
            raise PathResolutionError(str(vpath), f"filesystem unavailable: {e}")

        return ResolvedLocation(fs=fs, real_path=real_path, vpath=vpath, location=location)

    def to_virtual(self, context: CallerContext, resolved: ResolvedLocation, real_path: str) -> VirtualPath:
        """Inverse of :meth:`resolve` for a real path inside the same location."""
        root = posixpath.normpath(resolved.location.root_for(context.principal.username))
        real = posixpath.normpath(real_path)
        if real == root:
            return VirtualPath(resolved.location.name, "/")
        prefix = root.rstrip("/") + "/"
        if not real.startswith(prefix):
            raise PathResolutionError(real_path, f"outside location '{resolved.location.name}'")
        return VirtualPath(resolved.location.name, real[len(prefix):])

    def transient_path(self, name: str) -> VirtualPath:
        """Virtual path for a scratch file in the transient namespace."""
        return VirtualPath(self._transient_namespace, name)
