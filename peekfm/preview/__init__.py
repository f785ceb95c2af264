from peekfm.preview.dispatch import (
    LARGE_FILE_THRESHOLD,
    PreviewDispatcher,
    PreviewState,
    PreviewStatus,
    needs_confirmation,
)
from peekfm.preview.formats import PreviewKind, PreviewTarget, classify, icon_for

__all__ = [
    "LARGE_FILE_THRESHOLD",
    "PreviewDispatcher",
    "PreviewKind",
    "PreviewState",
    "PreviewStatus",
    "PreviewTarget",
    "classify",
    "icon_for",
    "needs_confirmation",
]
