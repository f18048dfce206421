"""
Ownership Service - attribute files produced by archive operations.

Runs strictly after an operation has succeeded. Ownership is bookkeeping
metadata: a failure to record it is logged and reported, never used to undo
the archive operation that produced the files.
"""

import logging
from typing import List

from ...domain.repositories.exceptions import RepositoryError
from ...domain.repositories.ownership_repository import IOwnershipRepository
from ..dtos import CallerContext
from ..exceptions import PathResolutionError
from .path_service import ResolvedLocation, VirtualPathService

logger = logging.getLogger(__name__)


class OwnershipService:
    """Assign the acting principal as owner of newly written files."""

    def __init__(self, ownership_repository: IOwnershipRepository, path_service: VirtualPathService) -> None:
        self._ownership_repo = ownership_repository
        self._path_service = path_service
        self._logger = logger

    def assign_file(self, context: CallerContext, resolved: ResolvedLocation) -> int:
        """Record ownership of one file produced by create/compress/get-entry."""
        return self._commit(context, [str(resolved.vpath)])

    def assign_tree(self, context: CallerContext, resolved: ResolvedLocation) -> int:
        """Record ownership of every regular file below an extraction target.

        Directories get no record. The whole batch is written at once.
        """
        try:
            files = resolved.fs.find(resolved.real_path, withdirs=False)
        except OSError as e:
            self._logger.warning(f"Could not walk {resolved} for ownership: {e}")
            return 0

        vpaths = []
        for real_path in sorted(files):
            try:
                vpaths.append(str(self._path_service.to_virtual(context, resolved, real_path)))
            except PathResolutionError as e:
                self._logger.warning(f"Skipping ownership for {real_path}: {e}")
        return self._commit(context, vpaths)

    def _commit(self, context: CallerContext, vpaths: List[str]) -> int:
        if not vpaths:
            return 0
        owner = context.principal.username
        try:
            count = self._ownership_repo.set_owner_many(vpaths, owner)
        except RepositoryError as e:
            self._logger.error(f"Failed to record ownership of {len(vpaths)} file(s) for {owner}: {e}")
            return 0
        self._logger.debug(f"Assigned {count} file(s) to {owner}")
        return count

    def owner_of(self, vpath: str):
        return self._ownership_repo.get_owner(vpath)
