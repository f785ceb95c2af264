from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from peekfm.errors import EmptyClipboardError, FileAccessError, ReadError
from peekfm.gateway import FileSystemGateway
from peekfm.log import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ClipboardRecord:
    payload: bytes
    file_name: str
    source_path: Path
    is_cut: bool


class Clipboard:
    """Single-slot copy/cut buffer. Cut sources are removed only after a successful paste."""

    def __init__(self, gateway: FileSystemGateway) -> None:
        self.gateway = gateway
        self.record: Optional[ClipboardRecord] = None

    @property
    def is_empty(self) -> bool:
        return self.record is None

    async def _read(self, path: Path, is_cut: bool) -> ClipboardRecord:
        path = Path(path)
        try:
            info = await self.gateway.stat_path(path)
            if info.is_directory:
                raise ReadError(f"Cannot copy '{path.name}': directories are not supported", path)
            payload = await self.gateway.read_bytes(path)
        except ReadError:
            raise
        except FileAccessError as e:
            raise ReadError(str(e), path) from e

        self.record = ClipboardRecord(
            payload=payload, file_name=path.name, source_path=path, is_cut=is_cut
        )
        logger.info("%s %s (%d bytes)", "Cut" if is_cut else "Copied", path, len(payload))
        return self.record

    async def copy(self, path: Path) -> ClipboardRecord:
        return await self._read(path, is_cut=False)

    async def cut(self, path: Path) -> ClipboardRecord:
        return await self._read(path, is_cut=True)

    async def paste(self, destination_directory: Path) -> Path:
        record = self.record
        if record is None:
            raise EmptyClipboardError()

        destination = Path(destination_directory) / record.file_name
        await self.gateway.write_bytes(destination, record.payload)
        logger.info("Pasted %s -> %s", record.source_path, destination)

        if record.is_cut:
            if destination.resolve() != record.source_path.resolve():
                try:
                    await self.gateway.delete_path(record.source_path)
                except FileAccessError as e:
                    logger.warning(
                        "Pasted %s but could not remove the cut source: %s", destination, e
                    )
            self.record = None
        return destination

    def clear(self) -> None:
        self.record = None
