"""Login screen for TUI authentication.

This screen offers email and mobile login behind a tab selector. All state
lives in a CredentialFormController; the screen forwards input to it and
re-renders whenever it changes.
"""

from typing import Callable, Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Input, Static, Tab, Tabs

from twostep.forms.credentials import CredentialFormController
from twostep.forms.schemas import Scheme

PLACEHOLDERS = {
    "email": "Email",
    "mobile": "Mobile Number",
    "password": "Password",
}


def _input_id(scheme: Scheme, field: str) -> str:
    return f"{scheme.value}-{field}"


class LoginScreen(Screen):
    """Screen for email or mobile login.

    Shown first; moves on once the controller reports a successful login.
    """

    CSS = """
    LoginScreen {
        background: $background;
    }

    #login-container {
        align: center middle;
        height: 100%;
    }

    #login-box {
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

    .scheme-form {
        height: auto;
    }

    .password-row {
        height: auto;
    }

    .password-row Input {
        width: 1fr;
    }

    .toggle-password {
        min-width: 8;
    }

    .field-error {
        color: $error;
        height: auto;
    }

    #login-error {
        color: $error;
        text-align: center;
    }

    #submit-btn {
        margin-top: 1;
        width: 100%;
    }
    """

    BINDINGS = [
        Binding("escape", "quit", "Quit"),
        Binding("ctrl+t", "toggle_password", "Show/hide password"),
    ]

    def __init__(
        self,
        controller: CredentialFormController,
        name: Optional[str] = None,
    ):
        """Initialize login screen.

        Args:
            controller: Form controller holding the login state.
            name: Screen name.
        """
        super().__init__(name=name)
        self.controller = controller
        self._unsubscribe: Optional[Callable[[], None]] = None

    def _scheme_form(self, scheme: Scheme) -> Vertical:
        identifier = "email" if scheme is Scheme.EMAIL else "mobile"
        identifier_input = Input(
            placeholder=PLACEHOLDERS[identifier],
            id=_input_id(scheme, identifier),
            restrict=r"[0-9]*" if identifier == "mobile" else None,
        )
        return Vertical(
            identifier_input,
            Static("", id=f"{_input_id(scheme, identifier)}-error", classes="field-error"),
            Horizontal(
                Input(
                    placeholder=PLACEHOLDERS["password"],
                    id=_input_id(scheme, "password"),
                    password=True,
                ),
                Button("Show", id=f"{scheme.value}-toggle", classes="toggle-password"),
                classes="password-row",
            ),
            Static("", id=f"{_input_id(scheme, 'password')}-error", classes="field-error"),
            id=f"{scheme.value}-form",
            classes="scheme-form",
        )

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Vertical(
                Static("Login", classes="title"),
                Tabs(
                    *(Tab(scheme.label, id=scheme.value) for scheme in Scheme),
                    id="scheme-tabs",
                ),
                self._scheme_form(Scheme.EMAIL),
                self._scheme_form(Scheme.MOBILE),
                Static("", id="login-error"),
                Button("Login Now", variant="primary", id="submit-btn"),
                id="login-box",
            ),
            id="login-container",
        )
        yield Footer()

    def on_mount(self) -> None:
        self._unsubscribe = self.controller.subscribe(self.refresh_from_state)
        self.refresh_from_state()
        self._focus_identifier()

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def _focus_identifier(self) -> None:
        scheme = self.controller.active_scheme
        self.query_one(f"#{_input_id(scheme, scheme.value)}", Input).focus()

    def refresh_from_state(self) -> None:
        """Render the controller state into the widgets."""
        controller = self.controller
        active = controller.active_scheme

        for scheme in Scheme:
            self.query_one(f"#{scheme.value}-form").display = scheme is active
            errors = controller.errors(scheme)
            with self.prevent(Input.Changed):
                for field, value in controller.values(scheme).items():
                    field_input = self.query_one(f"#{_input_id(scheme, field)}", Input)
                    if field_input.value != value:
                        field_input.value = value
                    if field == "password":
                        field_input.password = not controller.is_password_visible
            for field in controller.values(scheme):
                self.query_one(f"#{_input_id(scheme, field)}-error", Static).update(
                    errors.get(field, "")
                )
            self.query_one(f"#{scheme.value}-toggle", Button).label = (
                "Hide" if controller.is_password_visible else "Show"
            )

        self.query_one("#login-error", Static).update(controller.login_error or "")

        submit_btn = self.query_one("#submit-btn", Button)
        submit_btn.disabled = controller.is_submitting
        submit_btn.label = "Loading..." if controller.is_submitting else "Login Now"

    def on_tabs_tab_activated(self, event: Tabs.TabActivated) -> None:
        """Switch scheme when a tab is selected."""
        if event.tab is None or event.tab.id is None:
            return
        scheme = Scheme(event.tab.id)
        if scheme is not self.controller.active_scheme:
            self.controller.select_scheme(scheme)
            self._focus_identifier()

    def on_input_changed(self, event: Input.Changed) -> None:
        """Forward typed values to the controller."""
        if event.input.id is None:
            return
        scheme_value, field = event.input.id.split("-", 1)
        self.controller.set_field(field, event.value, Scheme(scheme_value))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Handle Enter key in any input."""
        self._start_submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button presses."""
        if event.button.id == "submit-btn":
            self._start_submit()
        elif event.button.id in {f"{scheme.value}-toggle" for scheme in Scheme}:
            self.action_toggle_password()

    def _start_submit(self) -> None:
        if self.controller.is_submitting:
            return
        self.run_worker(self.controller.submit(), exclusive=True, group="login")

    def action_toggle_password(self) -> None:
        self.controller.toggle_password_visibility()

    def action_quit(self) -> None:
        self.app.exit()
