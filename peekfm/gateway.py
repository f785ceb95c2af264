"""Filesystem and process gateway.

Every call is a coroutine; blocking work runs in a worker thread so the
Textual event loop keeps drawing. ``OSError`` is translated into
:class:`~peekfm.errors.FileAccessError` and nothing else is interpreted here.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import subprocess
import sys
import tempfile
import webbrowser
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, TypeVar

from peekfm.errors import CommandExecutionError, FileAccessError
from peekfm.log import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    path: Path
    is_directory: bool
    size: int
    modified: datetime


@dataclass(frozen=True)
class FileInfo:
    size: int
    created: datetime
    modified: datetime
    is_directory: bool
    is_file: bool


@dataclass(frozen=True)
class CommandResult:
    stdout: str
    stderr: str
    error: Optional[str] = None

    def check(self) -> "CommandResult":
        if self.error is not None:
            raise CommandExecutionError(self.error)
        return self


def _created_time(stat_result: os.stat_result) -> datetime:
    birth = getattr(stat_result, "st_birthtime", None)
    return datetime.fromtimestamp(birth if birth is not None else stat_result.st_ctime)


def _scan_directory(path: Path) -> List[DirectoryEntry]:
    entries = []
    with os.scandir(path) as it:
        for item in it:
            try:
                st = item.stat()
            except OSError:
                # dangling symlink
                st = item.stat(follow_symlinks=False)
            entries.append(
                DirectoryEntry(
                    name=item.name,
                    path=path / item.name,
                    is_directory=item.is_dir(),
                    size=st.st_size,
                    modified=datetime.fromtimestamp(st.st_mtime),
                )
            )
    return entries


def _stat(path: Path) -> FileInfo:
    st = path.stat()
    return FileInfo(
        size=st.st_size,
        created=_created_time(st),
        modified=datetime.fromtimestamp(st.st_mtime),
        is_directory=path.is_dir(),
        is_file=path.is_file(),
    )


def _write_atomic(path: Path, data: bytes) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


def _delete(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def _rename(old_path: Path, new_path: Path) -> Path:
    if new_path.exists():
        raise FileExistsError(f"'{new_path.name}' already exists")
    old_path.rename(new_path)
    return new_path


def _open_with_default_application(path: Path) -> None:
    if sys.platform == "win32":
        os.startfile(path)
    elif sys.platform == "darwin":
        try:
            subprocess.run(["open", str(path)], check=True)
        except subprocess.CalledProcessError as e:
            raise OSError(
                f"No application can open '{path.name}' (exit status {e.returncode})"
            ) from e
    else:
        subprocess.Popen(
            ["xdg-open", str(path)],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )


def _reveal(path: Path) -> None:
    if sys.platform == "win32":
        subprocess.Popen(["explorer", "/select,", str(path)])
    elif sys.platform == "darwin":
        subprocess.Popen(["open", "-R", str(path)])
    else:
        target = path if path.is_dir() else path.parent
        subprocess.Popen(
            ["xdg-open", str(target)],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )


class FileSystemGateway:
    async def _call(self, action: str, path: Path, func: Callable[..., T], *args) -> T:
        try:
            return await asyncio.to_thread(func, *args)
        except OSError as e:
            logger.info("Failed to %s %s: %s", action, path, e)
            raise FileAccessError(f"Failed to {action}: {e}", path) from e

    async def list_directory(self, path: Path) -> List[DirectoryEntry]:
        return await self._call("read directory", path, _scan_directory, Path(path))

    async def read_text(self, path: Path) -> str:
        data = await self.read_bytes(path)
        return data.decode("utf-8", errors="replace")

    async def read_bytes(self, path: Path) -> bytes:
        return await self._call("read file", path, Path(path).read_bytes)

    async def stat_path(self, path: Path) -> FileInfo:
        return await self._call("get file info", path, _stat, Path(path))

    async def write_bytes(self, path: Path, data: bytes) -> None:
        await self._call("write file", path, _write_atomic, Path(path), data)

    async def delete_path(self, path: Path) -> None:
        await self._call("delete", path, _delete, Path(path))
        logger.info("Deleted %s", path)

    async def rename_path(self, old_path: Path, new_path: Path) -> Path:
        result = await self._call("rename", old_path, _rename, Path(old_path), Path(new_path))
        logger.info("Renamed %s -> %s", old_path, new_path)
        return result

    async def open_in_default_application(self, path: Path) -> None:
        await self._call("open", path, _open_with_default_application, Path(path))

    async def reveal_in_file_manager(self, path: Path) -> None:
        try:
            await asyncio.to_thread(_reveal, Path(path))
        except OSError as e:
            logger.warning("Could not reveal %s: %s", path, e)

    async def open_external_url(self, url: str) -> None:
        try:
            await asyncio.to_thread(webbrowser.open, url)
        except Exception as e:
            logger.warning("Could not open %s: %s", url, e)

    def home_directory(self) -> Path:
        return Path.home()

    async def run_command(self, command: str, cwd: Optional[Path] = None) -> CommandResult:
        workdir = str(cwd) if cwd else os.getcwd()
        logger.info("Running %r in %s", command, workdir)
        try:
            process = await asyncio.create_subprocess_shell(
                command,
                cwd=workdir,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            raw_stdout, raw_stderr = await process.communicate()
        except OSError as e:
            logger.warning("Could not start %r: %s", command, e)
            return CommandResult(stdout="", stderr="", error=str(e))

        stdout = raw_stdout.decode("utf-8", errors="replace")
        stderr = raw_stderr.decode("utf-8", errors="replace")
        if process.returncode != 0:
            message = f"Command failed: {command}"
            if stderr:
                message += f"\n{stderr}"
            logger.info("%r exited with %s", command, process.returncode)
            return CommandResult(stdout=stdout, stderr=stderr, error=message)
        return CommandResult(stdout=stdout, stderr=stderr)
