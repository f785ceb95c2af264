from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

from peekfm.errors import CommandExecutionError
from peekfm.gateway import FileSystemGateway
from peekfm.log import get_logger

logger = get_logger(__name__)

NO_OUTPUT_MARKER = "(command completed with no output)"
STDERR_PREFIX = "stderr: "
ERROR_PREFIX = "Error: "

LogListener = Callable[[str], None]


class CommandRunner:
    def __init__(self, gateway: FileSystemGateway) -> None:
        self.gateway = gateway
        self.lines: List[str] = []
        self.running = False
        self._listeners: List[LogListener] = []
        self._clear_listeners: List[Callable[[], None]] = []

    def subscribe(self, on_line: LogListener, on_clear: Optional[Callable[[], None]] = None) -> None:
        self._listeners.append(on_line)
        if on_clear is not None:
            self._clear_listeners.append(on_clear)

    def _append(self, line: str) -> None:
        self.lines.append(line)
        for listener in self._listeners:
            listener(line)

    async def execute(self, command_line: str, working_directory: Optional[Path] = None) -> bool:
        """Run one command and log its outcome.

        Returns False without touching the log when the input is blank or a
        command is already running.
        """
        command = command_line.strip()
        if not command:
            return False
        if self.running:
            logger.info("Refusing %r: a command is already running", command)
            return False

        self.running = True
        self._append(f"$ {command}")
        try:
            result = await self.gateway.run_command(command, working_directory)
            result.check()
        except CommandExecutionError as e:
            self._append(f"{ERROR_PREFIX}{e}")
            return True
        finally:
            self.running = False

        if result.stdout:
            self._append(result.stdout)
        if result.stderr:
            self._append(f"{STDERR_PREFIX}{result.stderr}")
        if not result.stdout and not result.stderr:
            self._append(NO_OUTPUT_MARKER)
        return True

    def clear(self) -> None:
        self.lines.clear()
        for listener in self._clear_listeners:
            listener()
