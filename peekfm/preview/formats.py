"""Closed mapping from file extension to preview kind."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional


class PreviewKind(Enum):
    MARKDOWN = "markdown"
    WORD = "word"
    SPREADSHEET = "spreadsheet"
    PDF = "pdf"
    IMAGE = "image"
    CODE = "code"
    PLAIN_TEXT = "plain_text"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class PreviewTarget:
    kind: PreviewKind
    extension: str
    language: Optional[str] = None


# extension -> pygments lexer name
CODE_LANGUAGES: Dict[str, str] = {
    "js": "javascript",
    "jsx": "jsx",
    "ts": "typescript",
    "tsx": "tsx",
    "json": "json",
    "html": "html",
    "css": "css",
    "scss": "scss",
    "xml": "xml",
    "yaml": "yaml",
    "yml": "yaml",
    "py": "python",
    "java": "java",
    "c": "c",
    "cpp": "cpp",
    "cs": "csharp",
    "go": "go",
    "rs": "rust",
    "rb": "ruby",
    "php": "php",
    "swift": "swift",
    "kt": "kotlin",
    "h": "c",
    "sh": "bash",
    "bash": "bash",
    "sql": "sql",
}

EXTENSION_KINDS: Dict[str, PreviewKind] = {
    "md": PreviewKind.MARKDOWN,
    "markdown": PreviewKind.MARKDOWN,
    "docx": PreviewKind.WORD,
    "doc": PreviewKind.WORD,
    "xlsx": PreviewKind.SPREADSHEET,
    "xls": PreviewKind.SPREADSHEET,
    "csv": PreviewKind.SPREADSHEET,
    "pdf": PreviewKind.PDF,
    "png": PreviewKind.IMAGE,
    "jpg": PreviewKind.IMAGE,
    "jpeg": PreviewKind.IMAGE,
    "gif": PreviewKind.IMAGE,
    "bmp": PreviewKind.IMAGE,
    "webp": PreviewKind.IMAGE,
    "svg": PreviewKind.IMAGE,
    "txt": PreviewKind.PLAIN_TEXT,
    "log": PreviewKind.PLAIN_TEXT,
    "conf": PreviewKind.PLAIN_TEXT,
    "ini": PreviewKind.PLAIN_TEXT,
    "cfg": PreviewKind.PLAIN_TEXT,
}
EXTENSION_KINDS.update({ext: PreviewKind.CODE for ext in CODE_LANGUAGES})

KIND_ICONS: Dict[PreviewKind, str] = {
    PreviewKind.MARKDOWN: "📝",
    PreviewKind.WORD: "📘",
    PreviewKind.SPREADSHEET: "📗",
    PreviewKind.PDF: "📕",
    PreviewKind.IMAGE: "🖼",
    PreviewKind.CODE: "💻",
    PreviewKind.PLAIN_TEXT: "📄",
    PreviewKind.UNSUPPORTED: "📄",
}

LANGUAGE_ICONS: Dict[str, str] = {
    "javascript": "🟨",
    "jsx": "🟨",
    "typescript": "🔷",
    "tsx": "🔷",
    "python": "🐍",
    "java": "☕",
    "c": "⚙",
    "cpp": "⚙",
    "csharp": "🔵",
    "go": "🐹",
    "rust": "🦀",
    "ruby": "💎",
    "php": "🐘",
    "swift": "🦅",
    "kotlin": "🟣",
    "json": "📋",
    "html": "🌐",
    "xml": "🌐",
    "css": "🎨",
    "scss": "🎨",
    "yaml": "⚙",
    "sql": "🗄",
    "bash": "💻",
}

DIRECTORY_ICON = "📁"
PARENT_ICON = "⬆"

SUPPORTED_FORMATS_HINT = (
    "Supported formats: Markdown, PDF, Word, Excel, Images, Code files, Text files"
)


def extension_of(path: Path) -> str:
    return Path(path).suffix.lower().lstrip(".")


def classify(path: Path) -> PreviewTarget:
    extension = extension_of(path)
    kind = EXTENSION_KINDS.get(extension, PreviewKind.UNSUPPORTED)
    language = CODE_LANGUAGES.get(extension) if kind is PreviewKind.CODE else None
    return PreviewTarget(kind=kind, extension=extension, language=language)


def icon_for(path: Path, is_directory: bool = False) -> str:
    if is_directory:
        return DIRECTORY_ICON
    target = classify(path)
    if target.language:
        return LANGUAGE_ICONS.get(target.language, KIND_ICONS[target.kind])
    return KIND_ICONS[target.kind]
