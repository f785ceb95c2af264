from __future__ import annotations

import locale
from pathlib import Path
from typing import Iterable, List, Optional

from peekfm.errors import FileAccessError
from peekfm.gateway import DirectoryEntry, FileSystemGateway
from peekfm.log import get_logger
from peekfm.session import Session

logger = get_logger(__name__)

LISTING_TARGET = "listing"


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def filter_hidden(entries: Iterable[DirectoryEntry], show_hidden: bool) -> List[DirectoryEntry]:
    if show_hidden:
        return list(entries)
    return [entry for entry in entries if not is_hidden(entry.name)]


def use_system_collation() -> None:
    """Order names by the user's locale rather than by code point."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        logger.warning("Falling back to the C collation order")


def sort_entries(entries: Iterable[DirectoryEntry]) -> List[DirectoryEntry]:
    # directories first, then collated names
    return sorted(entries, key=lambda e: (not e.is_directory, locale.strxfrm(e.name)))


def parent_of(path: Path) -> Path:
    return path.parent


class DirectoryListing:
    def __init__(
        self, gateway: FileSystemGateway, session: Session, show_hidden: bool = False
    ) -> None:
        self.gateway = gateway
        self.session = session
        self.show_hidden = show_hidden
        self.entries: List[DirectoryEntry] = []
        self.error: Optional[str] = None

    @property
    def current_directory(self) -> Path:
        return self.session.current_directory

    @property
    def at_root(self) -> bool:
        return parent_of(self.current_directory) == self.current_directory

    async def navigate(self, path: Path) -> bool:
        """Load ``path`` into the listing.

        Returns False when the response was superseded by a newer navigation
        and was dropped, True otherwise (including failed loads).
        """
        path = Path(path)
        token = self.session.tokens.issue(LISTING_TARGET)
        self.session.change_directory(path)
        try:
            raw_entries = await self.gateway.list_directory(path)
        except FileAccessError as e:
            if not self.session.tokens.is_current(LISTING_TARGET, token):
                return False
            self.entries = []
            self.error = str(e)
            logger.info("Listing %s failed: %s", path, e)
            return True

        if not self.session.tokens.is_current(LISTING_TARGET, token):
            logger.debug("Dropping stale listing of %s", path)
            return False
        self.entries = sort_entries(filter_hidden(raw_entries, self.show_hidden))
        self.error = None
        return True

    async def select_entry(self, entry: DirectoryEntry) -> bool:
        """Enter a directory or select a file. False means a newer navigation won."""
        if entry.is_directory:
            return await self.navigate(entry.path)
        self.session.select_file(entry.path)
        return True

    async def navigate_to_parent(self) -> bool:
        if self.at_root:
            return False
        return await self.navigate(parent_of(self.current_directory))

    async def refresh(self) -> bool:
        return await self.navigate(self.current_directory)

    async def set_show_hidden(self, show_hidden: bool) -> None:
        self.show_hidden = show_hidden
        await self.refresh()

    async def toggle_hidden(self) -> bool:
        await self.set_show_hidden(not self.show_hidden)
        return self.show_hidden
