import argparse
from pathlib import Path
from typing import Optional

from textual import on
from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.events import Key
from textual.widgets import Button, DataTable, Footer, Input
from textual_autocomplete import PathAutoComplete

from peekfm import __version__
from peekfm.clipboard import Clipboard
from peekfm.commands import CommandRunner
from peekfm.config import DEFAULT_KEYBINDINGS, Settings, load_or_create_config
from peekfm.errors import EmptyClipboardError, FileAccessError, ReadError
from peekfm.formatting import format_megabytes
from peekfm.gateway import DirectoryEntry, FileSystemGateway
from peekfm.listing import DirectoryListing, use_system_collation
from peekfm.log import get_logger, setup_logging
from peekfm.preview.dispatch import PreviewDispatcher
from peekfm.session import Session
from peekfm.widgets import (
    PARENT_ROW_KEY,
    CommandPanel,
    ConfirmModal,
    FilePanel,
    PreviewPanel,
)

logger = get_logger(__name__)


class PeekApp(App):
    TITLE = "peek-fm"
    DEFAULT_CSS = """
    Screen { layers: base input; }
    #app_container {
        layout: horizontal;
        height: 1fr;
    }
    FilePanel {
        width: 2fr;
        height: 100%;
        border: solid gray;
        padding: 0 1;
    }
    PreviewPanel {
        width: 3fr;
        height: 100%;
        border: solid gray;
        padding: 0 1;
    }
    FilePanel:focus-within, PreviewPanel:focus-within, CommandPanel:focus-within {
        border: heavy cyan;
    }
    #path_label {
        height: 1;
        text-style: bold;
    }
    #status_label {
        height: 1;
        dock: bottom;
        color: $text-muted;
    }
    #preview_header {
        height: 3;
    }
    #preview_filename {
        width: 1fr;
        padding: 1 0;
        text-style: bold;
    }
    .preview-subheader {
        color: $text-muted;
        margin-bottom: 1;
    }
    .preview-error {
        color: $error;
    }
    .preview-empty, .preview-unsupported, .preview-loading {
        width: 100%;
        height: 100%;
        content-align: center middle;
        text-align: center;
    }
    #pdf_controls {
        height: 3;
    }
    #pdf_page_label {
        padding: 1 1;
    }
    #pdf_page {
        height: auto;
    }
    CommandPanel {
        height: 14;
        border: solid gray;
        padding: 0 1;
        display: none;
    }
    #command_header, #command_input_row {
        height: 3;
    }
    #command_cwd {
        width: 1fr;
        padding: 1 0;
    }
    #command_prompt {
        padding: 1 0;
    }
    #command_input {
        width: 1fr;
    }
    #prompt_input {
        layer: input;
        dock: bottom;
        height: 3;
    }
    """

    def __init__(
        self,
        start_path: Optional[str] = None,
        *,
        settings: Optional[Settings] = None,
        gateway: Optional[FileSystemGateway] = None,
        show_hidden: Optional[bool] = None,
    ) -> None:
        super().__init__()
        self.settings = settings or load_or_create_config()
        self.key_map = self.settings.keybindings
        self.gateway = gateway or FileSystemGateway()
        use_system_collation()
        self.session = Session(current_directory=Path(self._validate_start_path(start_path)))
        self.listing = DirectoryListing(
            self.gateway,
            self.session,
            show_hidden=self.settings.show_hidden if show_hidden is None else show_hidden,
        )
        self.file_clipboard = Clipboard(self.gateway)
        self.dispatcher = PreviewDispatcher(
            self.gateway, self.session, confirm=self.confirm_large_load, settings=self.settings
        )
        self.runner = CommandRunner(self.gateway)
        self.current_action: Optional[str] = None
        self.action_context: dict = {}

    def _validate_start_path(self, path: Optional[str]) -> str:
        for candidate in (path, self.settings.start_directory):
            if candidate:
                candidate_path = Path(candidate).expanduser().resolve()
                if candidate_path.is_dir():
                    return str(candidate_path)
        return str(self.gateway.home_directory())

    def compose(self) -> ComposeResult:
        yield Horizontal(
            FilePanel(key_map=self.key_map, id="file_panel"),
            PreviewPanel(id="preview_panel"),
            id="app_container",
        )
        yield CommandPanel(self.runner, id="command_panel")
        yield Footer()

    def on_mount(self) -> None:
        actions_handled_by_widget = [
            "nav_up",
            "nav_down",
            "nav_parent",
            "select_item",
        ]
        for action, details in DEFAULT_KEYBINDINGS.items():
            if action not in actions_handled_by_widget:
                self.bind(
                    self.key_map.get(action, details["key"]),
                    action,
                    description=details["description"],
                )

        self.file_panel.entry_table.focus()
        self.command_panel.set_working_directory(self.session.current_directory)
        self.navigate_to(self.session.current_directory)

    @property
    def file_panel(self) -> FilePanel:
        return self.query_one("#file_panel", FilePanel)

    @property
    def preview_panel(self) -> PreviewPanel:
        return self.query_one("#preview_panel", PreviewPanel)

    @property
    def command_panel(self) -> CommandPanel:
        return self.query_one("#command_panel", CommandPanel)

    def open_url(self, url: str, *, new_tab: bool = True) -> None:
        self.run_worker(self.gateway.open_external_url(url), group="external")

    # --- Navigation ---
    def navigate_to(self, path: Path) -> None:
        self.run_worker(self._navigate(path), group="listing")

    async def _navigate(self, path: Path) -> None:
        if not await self.listing.navigate(path):
            return
        self._show_listing()

    async def _reload(self, select: Optional[Path] = None) -> None:
        if await self.listing.refresh():
            self._show_listing(select)

    def _show_listing(self, select: Optional[Path] = None) -> None:
        self.file_panel.populate(self.listing, select)
        self.command_panel.set_working_directory(self.session.current_directory)
        if self.listing.error:
            self.notify(self.listing.error, severity="error")
        self.run_worker(self._load_preview(None), group="preview")

    async def _load_preview(self, path: Optional[Path]) -> None:
        if path is not None:
            self.preview_panel.show_checking(path)
        state = await self.dispatcher.select(path)
        if state is None:
            return
        self.preview_panel.show_state(state)

    async def confirm_large_load(self, path: Path, size: int) -> bool:
        message = (
            f"'{path.name}' is {format_megabytes(size)}. Loading large files may slow "
            "down the application.\n\nDo you want to proceed?"
        )
        return bool(await self.push_screen_wait(ConfirmModal(message)))

    @on(DataTable.RowSelected, "#entry_table")
    def on_entry_selected(self, event: DataTable.RowSelected) -> None:
        key = str(event.row_key.value)
        if key == PARENT_ROW_KEY:
            self.action_nav_parent()
            return
        entry = self.file_panel.rows.get(key)
        if entry is None:
            return
        self.run_worker(self._select_entry(entry), group="listing")

    async def _select_entry(self, entry: DirectoryEntry) -> None:
        if not await self.listing.select_entry(entry):
            return
        if entry.is_directory:
            self._show_listing()
        else:
            await self._load_preview(entry.path)

    def action_nav_parent(self) -> None:
        self.run_worker(self._navigate_to_parent(), group="listing")

    async def _navigate_to_parent(self) -> None:
        if await self.listing.navigate_to_parent():
            self._show_listing()

    async def action_refresh(self) -> None:
        await self._reload(self.session.selected_file)

    async def action_toggle_hidden(self) -> None:
        shown = await self.listing.toggle_hidden()
        self._show_listing()
        self.notify("Showing hidden files" if shown else "Hiding hidden files")

    # --- Prompts ---
    def _prompt(self, placeholder: str, suggest_paths: bool = False, value: str = "") -> None:
        if self.query("#prompt_input"):
            return
        input_widget = Input(placeholder=placeholder, value=value, id="prompt_input")
        if suggest_paths:
            self.mount(input_widget, PathAutoComplete(target="#prompt_input"))
        else:
            self.mount(input_widget)
        input_widget.focus()

    def _dismiss_prompt(self) -> None:
        for prompt in self.query("#prompt_input"):
            prompt.remove()
        for autocomplete in self.query(PathAutoComplete):
            autocomplete.remove()
        self.current_action = None
        self.action_context = {}
        self.file_panel.entry_table.focus()

    def on_key(self, event: Key) -> None:
        if event.key == "escape" and self.query("#prompt_input"):
            event.stop()
            self._dismiss_prompt()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "prompt_input":
            return
        user_input = event.value.strip()
        action = self.current_action
        context = self.action_context
        self._dismiss_prompt()

        if not user_input:
            return

        if action == "browse":
            target = Path(user_input).expanduser().resolve()
            if not target.is_dir():
                self.notify(f"Error: '{target}' is not a valid directory.", severity="error")
                return
            self.navigate_to(target)

        elif action == "rename":
            old_path = context.get("file_path")
            if not old_path or user_input == old_path.name:
                return
            try:
                await self.gateway.rename_path(old_path, old_path.with_name(user_input))
            except FileAccessError as e:
                self.notify(f"Rename failed: {e}", severity="error")
                return
            self.notify(f"Renamed to: {user_input}")
            await self._reload()

        elif action == "delete_file" and user_input.lower() == "y":
            file_path = context.get("file_path")
            if not file_path:
                return
            try:
                await self.gateway.delete_path(file_path)
            except FileAccessError as e:
                self.notify(f"Delete failed: {e}", severity="error")
                return
            self.notify(f"Deleted: {file_path.name}")
            await self._reload()

    # --- File Operations ---
    def _selected_file(self) -> Optional[Path]:
        if self.session.selected_file is None:
            self.notify("No file selected", severity="warning")
        return self.session.selected_file

    async def action_copy_file(self) -> None:
        path = self._selected_file()
        if path is None:
            return
        try:
            await self.file_clipboard.copy(path)
        except ReadError as e:
            self.notify(f"Copy failed: {e}", severity="error")
            return
        self.notify(f"Copied: {path.name}")

    async def action_cut_file(self) -> None:
        path = self._selected_file()
        if path is None:
            return
        try:
            await self.file_clipboard.cut(path)
        except ReadError as e:
            self.notify(f"Cut failed: {e}", severity="error")
            return
        self.notify(f"Cut: {path.name}")

    async def action_paste_file(self) -> None:
        try:
            destination = await self.file_clipboard.paste(self.session.current_directory)
        except EmptyClipboardError:
            self.notify("Clipboard is empty", severity="warning")
            return
        except FileAccessError as e:
            self.notify(f"Paste failed: {e}", severity="error")
            return
        self.notify(f"Pasted: {destination.name}")
        await self._reload(destination)

    def action_rename(self) -> None:
        path = self._selected_file()
        if path is None:
            return
        self.current_action = "rename"
        self.action_context = {"file_path": path}
        self._prompt("Rename to:", value=path.name)

    def action_delete_file(self) -> None:
        path = self._selected_file()
        if path is None:
            return
        self.current_action = "delete_file"
        self.action_context = {"file_path": path}
        self._prompt(f"Delete '{path.name}'? (y/n)")

    def action_browse(self) -> None:
        self.current_action = "browse"
        self._prompt(
            "Open path:", suggest_paths=True, value=str(self.session.current_directory)
        )

    async def action_open_file(self) -> None:
        path = self._selected_file()
        if path is None:
            return
        try:
            await self.gateway.open_in_default_application(path)
        except FileAccessError as e:
            self.notify(f"Failed to open: {e}", severity="error")
            return
        self.notify(f"Opening {path.name}...")

    async def action_reveal_file(self) -> None:
        await self.gateway.reveal_in_file_manager(
            self.session.selected_file or self.session.current_directory
        )

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "reveal_button":
            event.stop()
            await self.action_reveal_file()

    # --- Panels ---
    def action_toggle_preview(self) -> None:
        preview_panel = self.preview_panel
        preview_panel.display = not preview_panel.display

    def action_toggle_command_panel(self) -> None:
        command_panel = self.command_panel
        command_panel.display = not command_panel.display
        if command_panel.display:
            command_panel.focus_input()
        else:
            self.file_panel.entry_table.focus()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="peek-fm", description="Terminal file browser with inline previews."
    )
    parser.add_argument("path", nargs="?", help="Directory to open (default: home).")
    parser.add_argument(
        "--show-hidden", action="store_true", default=None, help="Show dot files."
    )
    parser.add_argument("--log-level", default=None, help="Logging level, e.g. DEBUG.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[list] = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    app = PeekApp(start_path=args.path, show_hidden=args.show_hidden)
    logger.info("Starting peek-fm %s in %s", __version__, app.session.current_directory)
    app.run()


if __name__ == "__main__":
    main()
