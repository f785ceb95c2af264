from pathlib import Path
from typing import Optional


class PeekError(Exception):
    """Base class for every error raised by peek-fm components."""


class FileAccessError(PeekError):
    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class ReadError(FileAccessError):
    pass


class EmptyClipboardError(PeekError):
    def __init__(self, message: str = "Clipboard is empty") -> None:
        super().__init__(message)


class UnsupportedFormatError(PeekError):
    def __init__(self, extension: str) -> None:
        if extension:
            message = f"Preview not available for .{extension} files"
        else:
            message = "Preview not available for files without an extension"
        super().__init__(message)
        self.extension = extension


class RenderError(PeekError):
    pass


class CommandExecutionError(PeekError):
    pass
