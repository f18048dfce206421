"""
Script-facing archive library.

Each function takes virtual paths, runs as the calling context's principal
and reports failures through two channels: ``PermissionDeniedError``
propagates and aborts the script, every other failure is sent to the error
sink and the function returns a falsy value.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, TypeVar

from ...application.container import ServiceContainer
from ...application.dtos import CallerContext
from ...application.exceptions import ApplicationError
from ...domain.entities.archive import ArchiveFormat

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ScriptError:
    """One recoverable failure reported to a script."""
    function: str
    kind: str
    message: str


class ErrorSink:
    """Receives recoverable failures; the script engine decides what to do with them."""

    def notify(self, error: ScriptError) -> None:
        raise NotImplementedError


class RecordingErrorSink(ErrorSink):
    """Keeps reported errors in memory and logs them."""

    def __init__(self):
        self.errors: List[ScriptError] = []

    def notify(self, error: ScriptError) -> None:
        logger.warning(f"{error.function}: [{error.kind}] {error.message}")
        self.errors.append(error)

    @property
    def last(self) -> Optional[ScriptError]:
        return self.errors[-1] if self.errors else None

    def clear(self) -> None:
        self.errors.clear()


class ArchiveScriptLibrary:
    """Archive operations bound to one calling script."""

    def __init__(
        self,
        container: ServiceContainer,
        context: CallerContext,
        error_sink: Optional[ErrorSink] = None,
    ):
        self._container = container
        self._context = context
        self.error_sink = error_sink or RecordingErrorSink()

    def _call(self, function: str, failure: T, operation: Callable[[], T]) -> T:
        try:
            return operation()
        except ApplicationError as e:
            self.error_sink.notify(ScriptError(function=function, kind=e.kind, message=str(e)))
            return failure

    # Extraction

    def extract_zip(self, src: str, dest: str) -> bool:
        return self._extract("extract_zip", src, dest, ArchiveFormat.ZIP)

    def extract_tar(self, src: str, dest: str) -> bool:
        return self._extract("extract_tar", src, dest, ArchiveFormat.TAR)

    def extract_tar_gz(self, src: str, dest: str) -> bool:
        return self._extract("extract_tar_gz", src, dest, ArchiveFormat.TAR_GZ)

    def extract_any(self, src: str, dest: str) -> bool:
        """Extract with the codec picked from the file name or header."""
        return self._extract("extract_any", src, dest, None)

    def _extract(self, function: str, src: str, dest: str, archive_format: Optional[ArchiveFormat]) -> bool:
        service = self._container.archive_service
        return self._call(
            function, False,
            lambda: service.extract(self._context, src, dest, archive_format).success,
        )

    # Creation

    def create_zip(self, sources: Any, dest: str) -> bool:
        return self._create("create_zip", sources, dest, ArchiveFormat.ZIP)

    def create_tar(self, sources: Any, dest: str) -> bool:
        return self._create("create_tar", sources, dest, ArchiveFormat.TAR)

    def create_tar_gz(self, sources: Any, dest: str) -> bool:
        return self._create("create_tar_gz", sources, dest, ArchiveFormat.TAR_GZ)

    def create_archive(self, sources: Any, dest: str, format_name: str) -> bool:
        """Create with a named format; ``gz``/``gzip`` are refused."""
        return self._create("create_archive", sources, dest, format_name)

    def _create(self, function: str, sources: Any, dest: str, archive_format) -> bool:
        service = self._container.archive_service
        return self._call(
            function, False,
            lambda: service.create(self._context, sources, dest, archive_format).success,
        )

    # Single-file gzip

    def compress_gz(self, src: str, dest: str) -> bool:
        service = self._container.archive_service
        return self._call("compress_gz", False, lambda: service.compress(self._context, src, dest).success)

    def decompress_gz(self, src: str, dest: str) -> bool:
        service = self._container.archive_service
        return self._call("decompress_gz", False, lambda: service.decompress(self._context, src, dest).success)

    # Inspection

    def is_valid_archive(self, path: str) -> bool:
        service = self._container.archive_service
        return self._call("is_valid_archive", False, lambda: service.is_valid_archive(self._context, path))

    def detect_format(self, path: str) -> Optional[str]:
        service = self._container.archive_service
        return self._call("detect_format", None, lambda: service.detect_format(self._context, path).value)

    def list_contents(self, path: str) -> Optional[str]:
        """JSON tree of the zip's entries."""
        service = self._container.zip_index_service
        return self._call("list_contents", None, lambda: service.list_contents_json(self._context, path))

    def list_directory(self, path: str, directory: str = "") -> Optional[List[str]]:
        service = self._container.zip_index_service
        return self._call(
            "list_directory", None,
            lambda: service.list_directory(self._context, path, directory).items,
        )

    def get_entry(self, path: str, entry_name: str) -> Optional[str]:
        """Extract one zip entry to the transient namespace and return its virtual path."""
        service = self._container.entry_extraction_service
        return self._call(
            "get_entry", None,
            lambda: service.extract_entry(self._context, path, entry_name).transient_path,
        )

    def exports(self) -> Dict[str, Callable[..., Any]]:
        """Functions to register with a script engine, by script name."""
        names = [
            "extract_zip", "extract_tar", "extract_tar_gz", "extract_any",
            "create_zip", "create_tar", "create_tar_gz", "create_archive",
            "compress_gz", "decompress_gz",
            "is_valid_archive", "detect_format",
            "list_contents", "list_directory", "get_entry",
        ]
        return {name: getattr(self, name) for name in names}
