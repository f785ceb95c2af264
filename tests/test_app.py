from __future__ import annotations

import asyncio
import dataclasses
import io
import tempfile
import unittest
from pathlib import Path
from typing import Optional

from PIL import Image
from textual.widgets import Input
from textual_image.widget import Image as ImageWidget

from peekfm.app import PeekApp, build_parser
from peekfm.config import Settings
from peekfm.gateway import CommandResult, FileInfo, FileSystemGateway
from peekfm.preview.dispatch import LARGE_FILE_THRESHOLD, PreviewStatus
from peekfm.widgets import PARENT_ROW_KEY, ConfirmModal


class LargeFileGateway(FileSystemGateway):
    async def stat_path(self, path: Path) -> FileInfo:
        info = await super().stat_path(path)
        return dataclasses.replace(info, size=LARGE_FILE_THRESHOLD + 1)


class GatedCommandGateway(FileSystemGateway):
    def __init__(self) -> None:
        self.release = asyncio.Event()

    async def run_command(self, command: str, cwd: Optional[Path] = None) -> CommandResult:
        await self.release.wait()
        return CommandResult(stdout="done\n", stderr="")


class CliTests(unittest.TestCase):
    def test_parser_defaults(self) -> None:
        args = build_parser().parse_args([])
        self.assertIsNone(args.path)
        self.assertIsNone(args.show_hidden)

    def test_parser_accepts_path_and_flags(self) -> None:
        args = build_parser().parse_args(["/tmp", "--show-hidden", "--log-level", "debug"])
        self.assertEqual(args.path, "/tmp")
        self.assertTrue(args.show_hidden)
        self.assertEqual(args.log_level, "debug")


class AppRuntimeTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        (self.root / "readme.md").write_text("# Hello\n\nWorld\n", encoding="utf-8")
        (self.root / "sub").mkdir()
        (self.root / ".secret").write_text("x", encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _app(self) -> PeekApp:
        return PeekApp(start_path=str(self.root), settings=Settings())

    async def _settle(self, app: PeekApp, pilot) -> None:
        await app.workers.wait_for_complete()
        await pilot.pause()

    async def _wait_until(self, pilot, condition) -> None:
        for _ in range(100):
            if condition():
                return
            await pilot.pause(0.01)
        self.fail("condition was never met")

    def _select_row(self, app: PeekApp, key: str) -> None:
        table = app.file_panel.entry_table
        table.move_cursor(row=table.get_row_index(key))
        table.action_select_cursor()

    async def test_start_directory_is_listed(self) -> None:
        app = self._app()
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            rows = app.file_panel.rows
            self.assertIn(PARENT_ROW_KEY, rows)
            self.assertIn(str(self.root / "readme.md"), rows)
            self.assertIn(str(self.root / "sub"), rows)
            self.assertNotIn(str(self.root / ".secret"), rows)

    async def test_selecting_a_file_renders_preview(self) -> None:
        app = self._app()
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            table = app.file_panel.entry_table
            table.move_cursor(row=table.get_row_index(str(self.root / "readme.md")))
            table.action_select_cursor()
            await pilot.pause()
            await self._settle(app, pilot)

            self.assertEqual(app.session.selected_file, self.root / "readme.md")
            self.assertIs(app.dispatcher.state.status, PreviewStatus.RENDERED)

    async def test_copy_and_paste_into_subdirectory(self) -> None:
        app = self._app()
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            app.session.select_file(self.root / "readme.md")
            await app.action_copy_file()

            app.navigate_to(self.root / "sub")
            await self._settle(app, pilot)
            await app.action_paste_file()
            await self._settle(app, pilot)

            pasted = self.root / "sub" / "readme.md"
            self.assertTrue(pasted.is_file())
            self.assertIn(str(pasted), app.file_panel.rows)
            self.assertTrue((self.root / "readme.md").is_file())

    async def test_parent_navigation(self) -> None:
        app = PeekApp(start_path=str(self.root / "sub"), settings=Settings())
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            app.action_nav_parent()
            await self._settle(app, pilot)
            self.assertEqual(app.session.current_directory, self.root)

    async def test_toggle_hidden_shows_dot_files(self) -> None:
        app = self._app()
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            await app.action_toggle_hidden()
            await self._settle(app, pilot)
            self.assertIn(str(self.root / ".secret"), app.file_panel.rows)

    async def test_parent_row_goes_up(self) -> None:
        app = PeekApp(start_path=str(self.root / "sub"), settings=Settings())
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            self._select_row(app, PARENT_ROW_KEY)
            await pilot.pause()
            await self._settle(app, pilot)
            self.assertEqual(app.session.current_directory, self.root)
            self.assertIn(str(self.root / "sub"), app.file_panel.rows)

    async def test_selecting_a_directory_enters_it(self) -> None:
        (self.root / "sub" / "inner.txt").write_text("inner", encoding="utf-8")
        app = self._app()
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            self._select_row(app, str(self.root / "sub"))
            await pilot.pause()
            await self._settle(app, pilot)
            self.assertEqual(app.session.current_directory, self.root / "sub")
            self.assertIn(str(self.root / "sub" / "inner.txt"), app.file_panel.rows)

    async def test_declining_large_file_shows_cancelled_placeholder(self) -> None:
        app = PeekApp(start_path=str(self.root), settings=Settings(), gateway=LargeFileGateway())
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            self._select_row(app, str(self.root / "readme.md"))
            await self._wait_until(pilot, lambda: isinstance(app.screen, ConfirmModal))

            await pilot.press("n")
            await self._settle(app, pilot)

            self.assertIs(app.dispatcher.state.status, PreviewStatus.CANCELLED)
            self.assertFalse(app.dispatcher.state.user_approved_large_load)
            self.assertTrue(app.preview_panel.query(".preview-empty"))

    async def test_image_preview_uses_image_widget(self) -> None:
        buffer = io.BytesIO()
        Image.new("RGB", (16, 8), (0, 128, 255)).save(buffer, format="PNG")
        (self.root / "photo.png").write_bytes(buffer.getvalue())
        app = self._app()
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            self._select_row(app, str(self.root / "photo.png"))
            await pilot.pause()
            await self._settle(app, pilot)

            self.assertIs(app.dispatcher.state.status, PreviewStatus.RENDERED)
            self.assertTrue(app.preview_panel.query(ImageWidget))

    async def test_command_input_is_disabled_while_running(self) -> None:
        gateway = GatedCommandGateway()
        app = PeekApp(start_path=str(self.root), settings=Settings(), gateway=gateway)
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            app.action_toggle_command_panel()
            await pilot.pause()
            command_input = app.query_one("#command_input", Input)
            command_input.value = "ls"
            await command_input.action_submit()
            await self._wait_until(pilot, lambda: app.runner.running)

            self.assertTrue(command_input.disabled)

            gateway.release.set()
            await self._wait_until(pilot, lambda: not app.runner.running)
            await pilot.pause()
            self.assertFalse(command_input.disabled)
            self.assertEqual(app.runner.lines, ["$ ls", "done\n"])


if __name__ == "__main__":
    unittest.main()
