import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import toml

import platformdirs

# --- Configuration Setup ---
APP_NAME = "peek-fm"
APP_AUTHOR = "peek-fm"

logger = logging.getLogger("peekfm.config")

DEFAULT_KEYBINDINGS = {
    # App & Panel Management
    "quit": {"key": "q", "description": "Quit"},
    "toggle_preview": {"key": "p", "description": "Toggle Preview"},
    "toggle_command_panel": {"key": "colon", "description": "Commands"},
    "toggle_hidden": {"key": "h", "description": "Hidden Files"},
    "refresh": {"key": "f5", "description": "Refresh"},
    "browse": {"key": "b", "description": "Browse"},
    # Navigation & Selection
    "nav_up": {"key": "up", "description": "Navigate Up"},
    "nav_down": {"key": "down", "description": "Navigate Down"},
    "nav_parent": {"key": "backspace", "description": "Go to Parent"},
    "select_item": {"key": "enter", "description": "Open / Enter Dir"},
    # File Operations
    "copy_file": {"key": "c", "description": "Copy"},
    "cut_file": {"key": "x", "description": "Cut"},
    "paste_file": {"key": "v", "description": "Paste"},
    "rename": {"key": "n", "description": "Rename"},
    "delete_file": {"key": "delete", "description": "Delete"},
    "open_file": {"key": "e", "description": "Open in Default App"},
    "reveal_file": {"key": "s", "description": "Show in Folder"},
}

DEFAULT_SYNTAX_THEME = "monokai"


@dataclass
class Settings:
    keybindings: Dict[str, str] = field(
        default_factory=lambda: {
            action: details["key"] for action, details in DEFAULT_KEYBINDINGS.items()
        }
    )
    show_hidden: bool = False
    start_directory: Optional[str] = None
    syntax_theme: str = DEFAULT_SYNTAX_THEME
    line_numbers: bool = True


def config_path() -> Path:
    return Path(platformdirs.user_config_dir(APP_NAME, APP_AUTHOR)) / "config.toml"


def write_default_config(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write("# peek-fm configuration\n\n[general]\n")
        f.write("show_hidden = false\n")
        f.write('# start_directory = "~/projects"\n\n')
        f.write("[preview]\n")
        f.write(f'syntax_theme = "{DEFAULT_SYNTAX_THEME}"\n')
        f.write("line_numbers = true\n\n")
        f.write("[keybindings]\n")
        for action, details in DEFAULT_KEYBINDINGS.items():
            f.write(f'{action} = "{details["key"]}" # {details["description"]}\n')


def read_config_file(path: Path) -> dict:
    if sys.version_info >= (3, 11):
        with open(path, "rb") as f:
            return tomllib.load(f)
    with open(path, "r", encoding="utf-8") as f:
        return toml.load(f)


def load_or_create_config(path: Optional[Path] = None) -> Settings:
    path = path or config_path()
    settings = Settings()

    if not path.is_file():
        try:
            write_default_config(path)
        except OSError as e:
            logger.warning("Could not write default config to %s: %s", path, e)
        return settings

    try:
        user_config = read_config_file(path)
    except Exception as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return settings

    keybindings = user_config.get("keybindings", {})
    settings.keybindings.update(
        {action: str(key) for action, key in keybindings.items() if action in DEFAULT_KEYBINDINGS}
    )

    general = user_config.get("general", {})
    settings.show_hidden = bool(general.get("show_hidden", settings.show_hidden))
    start_directory = general.get("start_directory")
    if start_directory:
        settings.start_directory = str(start_directory)

    preview = user_config.get("preview", {})
    settings.syntax_theme = str(preview.get("syntax_theme", settings.syntax_theme))
    settings.line_numbers = bool(preview.get("line_numbers", settings.line_numbers))
    return settings
