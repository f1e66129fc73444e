"""Code entry screen for TUI.

This screen prompts the user for the 6-digit code from their authenticator
app, one box per digit. Typing advances to the next box, backspace on an
empty box steps back, and pasting a full code fills every box.
"""

from typing import Callable, Optional

from textual import events
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.message import Message
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Input, Static

from twostep.forms.code_entry import CodeEntryController
from twostep.forms.schemas import CODE_LENGTH


class CodeCell(Input):
    """Single-digit input box.

    Paste and backspace-on-empty are reported to the screen instead of being
    handled by the input itself.
    """

    class Pasted(Message):
        """Text was pasted into a cell."""

        def __init__(self, cell: "CodeCell", text: str) -> None:
            super().__init__()
            self.cell = cell
            self.text = text

    class BackspaceOnEmpty(Message):
        """Backspace was pressed in an already empty cell."""

        def __init__(self, cell: "CodeCell") -> None:
            super().__init__()
            self.cell = cell

    def __init__(self, index: int) -> None:
        super().__init__(
            id=f"code-cell-{index}",
            max_length=1,
            restrict=r"[0-9]?",
            classes="code-cell",
        )
        self.index = index

    async def _on_paste(self, event: events.Paste) -> None:
        event.prevent_default()
        event.stop()
        self.post_message(self.Pasted(self, event.text))

    async def _on_key(self, event: events.Key) -> None:
        if event.key == "backspace" and not self.value:
            event.prevent_default()
            event.stop()
            self.post_message(self.BackspaceOnEmpty(self))


class CodeEntryScreen(Screen):
    """Screen for entering the one-time code.

    Shown after a successful login.
    """

    CSS = """
    CodeEntryScreen {
        background: $background;
    }

    #code-container {
        align: center middle;
        height: 100%;
    }

    #code-box {
        width: 60;
        height: auto;
        padding: 1 4;
        border: solid $primary;
    }

    .title {
        text-style: bold;
        text-align: center;
        color: $primary;
        margin-bottom: 1;
    }

    .subtitle {
        text-align: center;
        color: $text-muted;
        margin-bottom: 1;
    }

    #code-cells {
        height: auto;
        align: center middle;
    }

    .code-cell {
        width: 7;
        text-align: center;
    }

    .error-text {
        color: $error;
        text-align: center;
        height: auto;
    }

    #confirm-btn {
        margin-top: 1;
        width: 100%;
    }

    .hint {
        color: $text-muted;
        text-align: center;
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "quit", "Quit"),
    ]

    def __init__(
        self,
        controller: CodeEntryController,
        name: Optional[str] = None,
    ):
        """Initialize code entry screen.

        Args:
            controller: Controller holding the code entry state.
            name: Screen name.
        """
        super().__init__(name=name)
        self.controller = controller
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._applied_focus: Optional[int] = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Vertical(
                Static("Security Verification", classes="title"),
                Static("Google Authenticator", classes="subtitle"),
                Horizontal(
                    *(CodeCell(index) for index in range(CODE_LENGTH)),
                    id="code-cells",
                ),
                Static("", id="schema-error", classes="error-text"),
                Static("", id="server-error", classes="error-text"),
                Button("Confirm", variant="primary", id="confirm-btn"),
                Static("Having problems with verification?", classes="hint"),
                id="code-box",
            ),
            id="code-container",
        )
        yield Footer()

    def on_mount(self) -> None:
        self._unsubscribe = self.controller.subscribe(self.refresh_from_state)
        self.refresh_from_state()

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def cell(self, index: int) -> CodeCell:
        return self.query_one(f"#code-cell-{index}", CodeCell)

    def refresh_from_state(self) -> None:
        """Render the controller state into the widgets."""
        controller = self.controller

        with self.prevent(Input.Changed):
            for index, char in enumerate(controller.cells):
                cell = self.cell(index)
                if cell.value != char:
                    cell.value = char

        if controller.focus_index != self._applied_focus:
            self._applied_focus = controller.focus_index
            self.cell(controller.focus_index).focus()

        self.query_one("#schema-error", Static).update(controller.schema_error or "")
        self.query_one("#server-error", Static).update(controller.server_error or "")

        confirm_btn = self.query_one("#confirm-btn", Button)
        confirm_btn.disabled = controller.is_submitting

    def on_input_changed(self, event: Input.Changed) -> None:
        """Route a typed digit (or deletion) to the controller."""
        if not isinstance(event.input, CodeCell):
            return
        if not self.controller.on_digit(event.input.index, event.value):
            # Rejected input; put the cell back the way the controller has it.
            self.refresh_from_state()

    def on_descendant_focus(self, event: events.DescendantFocus) -> None:
        """Keep the controller in step with focus moved by click or Tab."""
        cell = event.widget
        if isinstance(cell, CodeCell):
            self._applied_focus = cell.index
            self.controller.on_cell_focused(cell.index)

    def on_code_cell_pasted(self, event: CodeCell.Pasted) -> None:
        self.controller.on_paste(event.text)

    def on_code_cell_backspace_on_empty(self, event: CodeCell.BackspaceOnEmpty) -> None:
        self.controller.on_backspace_at_empty_cell(event.cell.index)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Handle Enter key in a cell."""
        self._start_submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button presses."""
        if event.button.id == "confirm-btn":
            self._start_submit()

    def _start_submit(self) -> None:
        if self.controller.is_submitting:
            return
        self.run_worker(self.controller.submit(), exclusive=True, group="verify")

    def action_quit(self) -> None:
        self.app.exit()
