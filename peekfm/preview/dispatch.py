from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Optional

from peekfm.config import Settings
from peekfm.errors import FileAccessError, UnsupportedFormatError
from peekfm.gateway import FileSystemGateway
from peekfm.log import get_logger
from peekfm.preview.formats import PreviewTarget, classify
from peekfm.preview.renderers import Renderer, RenderStatus, renderer_for
from peekfm.session import Session

logger = get_logger(__name__)

# 10 MiB; files strictly larger need confirmation
LARGE_FILE_THRESHOLD = 10 * 1024 * 1024
PREVIEW_TARGET = "preview"

ConfirmLargeLoad = Callable[[Path, int], Awaitable[bool]]


class PreviewStatus(Enum):
    IDLE = "idle"
    CHECKING_SIZE = "checking_size"
    APPROVED = "approved"
    CANCELLED = "cancelled"
    RENDERING = "rendering"
    RENDERED = "rendered"
    RENDER_ERROR = "render_error"
    UNSUPPORTED = "unsupported"


@dataclass
class PreviewState:
    path: Optional[Path] = None
    extension: str = ""
    size: int = 0
    user_approved_large_load: bool = False
    status: PreviewStatus = PreviewStatus.IDLE
    target: Optional[PreviewTarget] = None
    renderer: Optional[Renderer] = None
    error: Optional[str] = None


def needs_confirmation(size: int, threshold: int = LARGE_FILE_THRESHOLD) -> bool:
    return size > threshold


async def _always_approve(path: Path, size: int) -> bool:
    return True


class PreviewDispatcher:
    def __init__(
        self,
        gateway: FileSystemGateway,
        session: Session,
        confirm: Optional[ConfirmLargeLoad] = None,
        settings: Optional[Settings] = None,
        threshold: int = LARGE_FILE_THRESHOLD,
    ) -> None:
        self.gateway = gateway
        self.session = session
        self.confirm = confirm or _always_approve
        self.settings = settings
        self.threshold = threshold
        self.state = PreviewState()

    def _is_current(self, token: int) -> bool:
        return self.session.tokens.is_current(PREVIEW_TARGET, token)

    async def select(self, path: Optional[Path]) -> Optional[PreviewState]:
        """Run the preview pipeline for ``path``.

        Returns the settled state, or None when a newer selection superseded
        this one while it was waiting on the gateway or the user.
        """
        token = self.session.tokens.issue(PREVIEW_TARGET)
        if path is None:
            self.state = PreviewState()
            return self.state

        path = Path(path)
        target = classify(path)
        state = PreviewState(
            path=path,
            extension=target.extension,
            target=target,
            status=PreviewStatus.CHECKING_SIZE,
        )
        self.state = state

        try:
            info = await self.gateway.stat_path(path)
            state.size = info.size
        except FileAccessError as e:
            # still attempt the render; the renderer reports its own read error
            logger.info("Size check for %s failed: %s", path, e)
        if not self._is_current(token):
            return None

        if needs_confirmation(state.size, self.threshold):
            approved = await self.confirm(path, state.size)
            if not self._is_current(token):
                return None
            if not approved:
                logger.info("Preview of %s cancelled (%d bytes)", path, state.size)
                state.status = PreviewStatus.CANCELLED
                return state
            state.user_approved_large_load = True
        state.status = PreviewStatus.APPROVED

        try:
            renderer = renderer_for(target, self.gateway, path, self.settings)
        except UnsupportedFormatError as e:
            state.status = PreviewStatus.UNSUPPORTED
            state.error = str(e)
            return state

        state.renderer = renderer
        state.status = PreviewStatus.RENDERING
        await renderer.load()
        if not self._is_current(token):
            renderer.close()
            return None

        if renderer.status is RenderStatus.RENDERED:
            state.status = PreviewStatus.RENDERED
        else:
            state.status = PreviewStatus.RENDER_ERROR
            state.error = renderer.error
        return state
