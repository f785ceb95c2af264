from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, cast

from rich.text import Text
from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Input, Label, Log, Static

from peekfm.commands import CommandRunner
from peekfm.formatting import format_megabytes, format_modified, format_size
from peekfm.gateway import DirectoryEntry
from peekfm.listing import DirectoryListing
from peekfm.preview.dispatch import PreviewState, PreviewStatus
from peekfm.preview.formats import PARENT_ICON, SUPPORTED_FORMATS_HINT, icon_for

PARENT_ROW_KEY = ".."


class ConfirmModal(ModalScreen[bool]):
    DEFAULT_CSS = """
    ConfirmModal { align: center middle; }
    ConfirmModal > Vertical {
        background: $surface; border: thick $warning;
        padding: 1 2; width: 64; height: auto;
    }
    ConfirmModal Label { margin-bottom: 1; }
    ConfirmModal Horizontal { height: auto; align: right middle; }
    ConfirmModal Button { margin-left: 1; }
    """
    BINDINGS = [("escape", "cancel", "Cancel"), ("y", "confirm", "Yes"), ("n", "cancel", "No")]

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label(self.message)
            with Horizontal():
                yield Button("Yes", variant="warning", id="yes")
                yield Button("No", variant="default", id="no")

    @on(Button.Pressed, "#yes")
    def action_confirm(self) -> None:
        self.dismiss(True)

    @on(Button.Pressed, "#no")
    def action_cancel(self) -> None:
        self.dismiss(False)


# --- File Panel ---
class EntryTable(DataTable):
    def __init__(self, *, key_map: dict, id: str | None = None) -> None:
        super().__init__(id=id, cursor_type="row", zebra_stripes=True)
        self.key_map = key_map

    def on_key(self, event: Key) -> None:
        key = event.key

        if key == self.key_map.get("nav_up"):
            event.stop()
            self.action_cursor_up()
        elif key == self.key_map.get("nav_down"):
            event.stop()
            self.action_cursor_down()
        elif key == self.key_map.get("nav_parent"):
            event.stop()
            cast("PeekApp", self.app).action_nav_parent()
        elif key == self.key_map.get("select_item"):
            event.stop()
            self.action_select_cursor()


class FilePanel(Vertical):
    def __init__(self, *, key_map: dict, **kwargs) -> None:
        super().__init__(**kwargs)
        self.key_map = key_map
        self.rows: Dict[str, Optional[DirectoryEntry]] = {}
        self.entry_table = EntryTable(key_map=self.key_map, id="entry_table")
        self.path_label = Label("", id="path_label")
        self.status_label = Label("", id="status_label")

    def compose(self) -> ComposeResult:
        yield self.path_label
        yield self.entry_table
        yield self.status_label

    def on_mount(self) -> None:
        self.entry_table.add_column(" ", key="icon", width=2)
        self.entry_table.add_column("Name", key="name")
        self.entry_table.add_column("Size", key="size")
        self.entry_table.add_column("Modified", key="modified")

    def populate(self, listing: DirectoryListing, selected: Optional[Path] = None) -> None:
        table = self.entry_table
        table.clear()
        self.rows = {}
        self.path_label.update(str(listing.current_directory))

        if not listing.at_root:
            table.add_row(PARENT_ICON, "..", "", "", key=PARENT_ROW_KEY)
            self.rows[PARENT_ROW_KEY] = None

        for entry in listing.entries:
            key = str(entry.path)
            table.add_row(
                icon_for(entry.path, entry.is_directory),
                Text(entry.name, style="bold" if entry.is_directory else ""),
                "" if entry.is_directory else format_size(entry.size),
                format_modified(entry.modified),
                key=key,
            )
            self.rows[key] = entry

        if selected is not None and str(selected) in self.rows:
            table.move_cursor(row=table.get_row_index(str(selected)))
        self.update_status(listing)

    def update_status(self, listing: DirectoryListing) -> None:
        if listing.error:
            self.status_label.update(Text(listing.error, style="red"))
            return
        hidden_note = "hidden shown" if listing.show_hidden else "hidden excluded"
        self.status_label.update(f"{len(listing.entries)} items ({hidden_note})")


# --- Preview Panel ---
class PreviewPanel(Vertical):
    def compose(self) -> ComposeResult:
        with Horizontal(id="preview_header"):
            yield Label("", id="preview_filename")
            yield Button("📁", id="reveal_button", tooltip="Show in folder")
        yield VerticalScroll(id="preview_body")

    def on_mount(self) -> None:
        self.show_placeholder("Select a file to preview")

    def _set_header(self, path: Optional[Path]) -> None:
        self.query_one("#preview_filename", Label).update(path.name if path else "")
        self.query_one("#reveal_button", Button).display = path is not None

    def _replace_body(self, *widgets) -> None:
        body = self.query_one("#preview_body", VerticalScroll)
        body.remove_children()
        body.mount_all(widgets)
        body.scroll_home(animate=False)

    def show_placeholder(self, message: str, hint: str = "") -> None:
        self._set_header(None)
        text = Text(message, style="bold")
        if hint:
            text.append(f"\n{hint}", style="dim")
        self._replace_body(Static(text, classes="preview-empty"))

    def show_checking(self, path: Path) -> None:
        self._set_header(path)
        self._replace_body(Static("Checking file size...", classes="preview-loading"))

    def show_state(self, state: PreviewState) -> None:
        if state.status is PreviewStatus.IDLE or state.path is None:
            self.show_placeholder("Select a file to preview")
            return

        self._set_header(state.path)
        if state.status is PreviewStatus.CANCELLED:
            text = Text("Preview cancelled", style="bold")
            text.append(f"\nFile size: {format_megabytes(state.size)}", style="dim")
            self._replace_body(Static(text, classes="preview-empty"))
        elif state.status is PreviewStatus.UNSUPPORTED:
            text = Text(state.error or "Preview not available", style="bold")
            text.append(f"\n{SUPPORTED_FORMATS_HINT}", style="dim")
            self._replace_body(Static(text, classes="preview-unsupported"))
        elif state.renderer is not None:
            self._replace_body(state.renderer.build_widget())
        else:
            self._replace_body(Static(Text(f"Error: {state.error}"), classes="preview-error"))


# --- Command Panel ---
class CommandPanel(Vertical):
    def __init__(self, runner: CommandRunner, **kwargs) -> None:
        super().__init__(**kwargs)
        self.runner = runner
        self.working_directory: Optional[Path] = None

    def compose(self) -> ComposeResult:
        with Horizontal(id="command_header"):
            yield Label("Working Directory:", id="command_cwd")
            yield Button("Clear", id="command_clear")
        yield Log(id="command_output")
        with Horizontal(id="command_input_row"):
            yield Label("$ ", id="command_prompt")
            yield Input(placeholder="Enter command...", id="command_input")

    def on_mount(self) -> None:
        output = self.query_one("#command_output", Log)
        self.runner.subscribe(self._write_output, output.clear)
        output.write_line(
            "Enter commands to execute in the current directory. Examples: ls, pwd, git status"
        )

    def _write_output(self, line: str) -> None:
        output = self.query_one("#command_output", Log)
        output.write_lines(line.rstrip("\n").split("\n"))

    def set_working_directory(self, path: Path) -> None:
        self.working_directory = path
        self.query_one("#command_cwd", Label).update(f"Working Directory: {path}")

    def focus_input(self) -> None:
        self.query_one("#command_input", Input).focus()

    @on(Button.Pressed, "#command_clear")
    def clear_output(self, event: Button.Pressed) -> None:
        event.stop()
        self.runner.clear()

    @on(Input.Submitted, "#command_input")
    def submit_command(self, event: Input.Submitted) -> None:
        event.stop()
        command = event.value
        if not command.strip():
            return
        event.input.value = ""
        self.run_worker(self._execute(command), group="command")

    async def _execute(self, command: str) -> None:
        command_input = self.query_one("#command_input", Input)
        command_input.disabled = True
        try:
            await self.runner.execute(command, self.working_directory)
        finally:
            command_input.disabled = False
            command_input.focus()
