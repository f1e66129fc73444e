"""TUI screens for twostep."""

from twostep.tui.screens.login import LoginScreen
from twostep.tui.screens.code_entry import CodeEntryScreen, CodeCell

__all__ = [
    "LoginScreen",
    "CodeEntryScreen",
    "CodeCell",
]
