"""Archive functions exposed to automation scripts."""

from .library import ArchiveScriptLibrary, ErrorSink, RecordingErrorSink, ScriptError

__all__ = ["ArchiveScriptLibrary", "ErrorSink", "RecordingErrorSink", "ScriptError"]
