"""Per-format preview renderers.

Each renderer fetches its own content through the gateway in :meth:`load`
and then builds a Textual widget. ``load`` never raises: library failures
become :class:`RenderError`, which is kept on the renderer and shown inline.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Type

from openpyxl.utils import get_column_letter
from rich.syntax import Syntax
from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widget import Widget
from textual.widgets import Button, DataTable, Label, Markdown, Static, TabbedContent, TabPane
from textual_image.widget import Image as ImageWidget

from peekfm.config import Settings
from peekfm.errors import FileAccessError, RenderError, UnsupportedFormatError
from peekfm.formatting import count_lines
from peekfm.gateway import FileSystemGateway
from peekfm.log import get_logger
from peekfm.preview.documents import (
    Sheet,
    decode_image,
    docx_to_markdown,
    open_pdf,
    read_csv_sheet,
    read_legacy_workbook_sheets,
    read_workbook_sheets,
    render_pdf_page,
)
from peekfm.preview.formats import PreviewKind, PreviewTarget

logger = get_logger(__name__)

PDF_DEFAULT_SCALE = 1.5
PDF_MIN_SCALE = 0.5
PDF_MAX_SCALE = 3.0
PDF_SCALE_STEP = 0.25


class RenderStatus(Enum):
    LOADING = "loading"
    RENDERED = "rendered"
    RENDER_ERROR = "render_error"


class Renderer:
    kind: PreviewKind

    def __init__(
        self,
        gateway: FileSystemGateway,
        path: Path,
        target: PreviewTarget,
        settings: Optional[Settings] = None,
    ) -> None:
        self.gateway = gateway
        self.path = Path(path)
        self.target = target
        self.settings = settings or Settings()
        self.status = RenderStatus.LOADING
        self.error: Optional[str] = None

    async def load(self) -> RenderStatus:
        self.status = RenderStatus.LOADING
        self.error = None
        try:
            await self._load()
        except (RenderError, FileAccessError) as e:
            logger.info("Preview of %s failed: %s", self.path, e)
            self.status = RenderStatus.RENDER_ERROR
            self.error = str(e)
        else:
            self.status = RenderStatus.RENDERED
        return self.status

    async def _load(self) -> None:
        raise NotImplementedError

    def build_widget(self) -> Widget:
        if self.status is RenderStatus.RENDER_ERROR:
            return Static(Text(f"Error: {self.error}"), classes="preview-error")
        if self.status is RenderStatus.LOADING:
            return Static("Loading...", classes="preview-loading")
        return self._build()

    def _build(self) -> Widget:
        raise NotImplementedError

    def close(self) -> None:
        """Release resources held after a load whose result is never shown."""


# --- Markdown & Word ---
class MarkdownRenderer(Renderer):
    kind = PreviewKind.MARKDOWN

    async def _load(self) -> None:
        self.text = await self.gateway.read_text(self.path)

    def _build(self) -> Widget:
        return Markdown(self.text, classes="markdown-preview")


class WordRenderer(Renderer):
    kind = PreviewKind.WORD

    async def _load(self) -> None:
        data = await self.gateway.read_bytes(self.path)
        self.text = docx_to_markdown(data)

    def _build(self) -> Widget:
        return Markdown(self.text, classes="docx-preview")


# --- Spreadsheets ---
class SheetTable(DataTable):
    def __init__(self, sheet: Sheet, **kwargs) -> None:
        super().__init__(zebra_stripes=True, **kwargs)
        self.sheet = sheet

    def on_mount(self) -> None:
        width = self.sheet.width
        self.add_columns(*(get_column_letter(i + 1) for i in range(width)))
        for row in self.sheet.rows:
            self.add_row(*(row + [""] * (width - len(row))))


class WorkbookView(Vertical):
    def __init__(self, sheets: List[Sheet], **kwargs) -> None:
        super().__init__(**kwargs)
        self.sheets = sheets

    def compose(self) -> ComposeResult:
        with TabbedContent():
            for sheet in self.sheets:
                with TabPane(sheet.name):
                    yield SheetTable(sheet)


class SpreadsheetRenderer(Renderer):
    kind = PreviewKind.SPREADSHEET

    async def _load(self) -> None:
        if self.target.extension == "csv":
            text = await self.gateway.read_text(self.path)
            self.sheets = [read_csv_sheet(text)]
        elif self.target.extension == "xls":
            self.sheets = read_legacy_workbook_sheets(await self.gateway.read_bytes(self.path))
        else:
            self.sheets = read_workbook_sheets(await self.gateway.read_bytes(self.path))
        if not self.sheets:
            raise RenderError("No sheets found in file")

    def _build(self) -> Widget:
        if len(self.sheets) == 1:
            return SheetTable(self.sheets[0], classes="xlsx-preview")
        return WorkbookView(self.sheets, classes="xlsx-preview")


# --- PDF ---
def clamp_scale(scale: float) -> float:
    return min(PDF_MAX_SCALE, max(PDF_MIN_SCALE, round(scale, 2)))


class PdfView(Vertical, can_focus=True):
    BINDINGS = [
        Binding("left_square_bracket", "previous_page", "Prev Page"),
        Binding("right_square_bracket", "next_page", "Next Page"),
        Binding("plus", "zoom_in", "Zoom In"),
        Binding("minus", "zoom_out", "Zoom Out"),
    ]

    def __init__(self, document, **kwargs) -> None:
        super().__init__(**kwargs)
        self.document = document
        self.page_index = 0
        self.scale = PDF_DEFAULT_SCALE

    @property
    def page_count(self) -> int:
        return self.document.page_count

    def compose(self) -> ComposeResult:
        with Horizontal(id="pdf_controls"):
            yield Button("◀", id="pdf_prev")
            yield Label("", id="pdf_page_label")
            yield Button("▶", id="pdf_next")
            yield Button("-", id="pdf_zoom_out")
            yield Button("+", id="pdf_zoom_in")
        yield Vertical(id="pdf_page")

    def on_mount(self) -> None:
        self.show_page()

    def on_unmount(self) -> None:
        self.document.close()

    def show_page(self) -> None:
        self.query_one("#pdf_page_label", Label).update(
            f" Page {self.page_index + 1} of {self.page_count} · {int(self.scale * 100)}% "
        )
        page = self.query_one("#pdf_page", Vertical)
        page.remove_children()
        try:
            image = render_pdf_page(self.document, self.page_index, self.scale)
        except Exception as e:
            logger.warning("Rendering page %d of a PDF failed: %s", self.page_index + 1, e)
            page.mount(Static(Text(f"Error rendering page: {e}"), classes="preview-error"))
            return
        page.mount(ImageWidget(image))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        actions = {
            "pdf_prev": self.action_previous_page,
            "pdf_next": self.action_next_page,
            "pdf_zoom_out": self.action_zoom_out,
            "pdf_zoom_in": self.action_zoom_in,
        }
        action = actions.get(event.button.id or "")
        if action:
            event.stop()
            action()

    def action_previous_page(self) -> None:
        if self.page_index > 0:
            self.page_index -= 1
            self.show_page()

    def action_next_page(self) -> None:
        if self.page_index < self.page_count - 1:
            self.page_index += 1
            self.show_page()

    def action_zoom_in(self) -> None:
        self.scale = clamp_scale(self.scale + PDF_SCALE_STEP)
        self.show_page()

    def action_zoom_out(self) -> None:
        self.scale = clamp_scale(self.scale - PDF_SCALE_STEP)
        self.show_page()


class PdfRenderer(Renderer):
    kind = PreviewKind.PDF

    async def _load(self) -> None:
        self.document = open_pdf(await self.gateway.read_bytes(self.path))

    def close(self) -> None:
        document = getattr(self, "document", None)
        if document is not None and not document.is_closed:
            document.close()

    def _build(self) -> Widget:
        return PdfView(self.document, classes="pdf-preview")


# --- Images ---
class ImageRenderer(Renderer):
    kind = PreviewKind.IMAGE

    async def _load(self) -> None:
        if self.target.extension == "svg":
            self.markup = await self.gateway.read_text(self.path)
            return
        self.image = decode_image(await self.gateway.read_bytes(self.path))

    def _build(self) -> Widget:
        if self.target.extension == "svg":
            return Vertical(
                Label("SVG (vector image shown as markup)", classes="preview-subheader"),
                Static(Syntax(self.markup, "xml", theme=self.settings.syntax_theme, word_wrap=True)),
                classes="image-preview",
            )
        width, height = self.image.size
        label = self.image.format or self.target.extension.upper()
        return Vertical(
            Label(f"{width} × {height} · {label}", classes="preview-subheader"),
            ImageWidget(self.image),
            classes="image-preview",
        )


# --- Code & plain text ---
class CodeRenderer(Renderer):
    kind = PreviewKind.CODE

    async def _load(self) -> None:
        self.text = await self.gateway.read_text(self.path)

    def _build(self) -> Widget:
        syntax = Syntax(
            self.text,
            self.target.language or "text",
            theme=self.settings.syntax_theme,
            line_numbers=self.settings.line_numbers,
            word_wrap=True,
        )
        return Vertical(
            Label(f"{self.target.language} · {count_lines(self.text)} lines",
                  classes="preview-subheader"),
            Static(syntax),
            classes="code-preview",
        )


class TextRenderer(Renderer):
    kind = PreviewKind.PLAIN_TEXT

    async def _load(self) -> None:
        self.text = await self.gateway.read_text(self.path)

    def _build(self) -> Widget:
        return Vertical(
            Label(f".{self.target.extension} · {count_lines(self.text)} lines",
                  classes="preview-subheader"),
            Static(Text(self.text)),
            classes="text-preview",
        )


RENDERERS: Dict[PreviewKind, Type[Renderer]] = {
    PreviewKind.MARKDOWN: MarkdownRenderer,
    PreviewKind.WORD: WordRenderer,
    PreviewKind.SPREADSHEET: SpreadsheetRenderer,
    PreviewKind.PDF: PdfRenderer,
    PreviewKind.IMAGE: ImageRenderer,
    PreviewKind.CODE: CodeRenderer,
    PreviewKind.PLAIN_TEXT: TextRenderer,
}


def renderer_for(
    target: PreviewTarget,
    gateway: FileSystemGateway,
    path: Path,
    settings: Optional[Settings] = None,
) -> Renderer:
    renderer_class = RENDERERS.get(target.kind)
    if renderer_class is None:
        raise UnsupportedFormatError(target.extension)
    return renderer_class(gateway, path, target, settings)
