from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional


class RequestTokens:
    """Per-target counters used to drop responses that arrive after a newer request."""

    def __init__(self) -> None:
        self._current: Dict[str, int] = {}

    def issue(self, target: str) -> int:
        token = self._current.get(target, 0) + 1
        self._current[target] = token
        return token

    def is_current(self, target: str, token: int) -> bool:
        return self._current.get(target) == token


@dataclass
class Session:
    current_directory: Path
    selected_file: Optional[Path] = None
    tokens: RequestTokens = field(default_factory=RequestTokens, repr=False)

    def change_directory(self, path: Path) -> None:
        self.current_directory = Path(path)
        self.selected_file = None

    def select_file(self, path: Path) -> None:
        self.selected_file = Path(path)
