"""Main TUI application for twostep.

This module provides the TwoStepApp class that runs the two login steps:
credential login first, then the one-time code.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from textual.app import App
from textual.binding import Binding

from twostep.config import Config, get_config
from twostep.forms.code_entry import CodeEntryController
from twostep.forms.credentials import CredentialFormController
from twostep.forms.schemas import Scheme
from twostep.gateway import SubmissionGateway
from twostep.tui.screens.code_entry import CodeEntryScreen
from twostep.tui.screens.login import LoginScreen

LOG_FILE = Path.home() / ".twostep" / "tui.log"


def _configure_tui_logging(log_file: Path = LOG_FILE) -> None:
    """Configure logging to write to file instead of stderr.

    Textual apps need logging redirected to a file, otherwise log messages
    will corrupt the terminal UI.
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(log_file, level="DEBUG", mode="w")

    # Libraries that log through the standard logging module
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    file_handler = logging.FileHandler(log_file, mode="a")
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    root.addHandler(file_handler)
    root.setLevel(logging.INFO)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


class TwoStepApp(App):
    """Main TUI application.

    This app manages:
    - Login with email or mobile number
    - One-time code verification

    The app exits with the post-verification target once a code is accepted.
    """

    TITLE = "twostep"
    SUB_TITLE = "Login"

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        gateway: Optional[SubmissionGateway] = None,
        config: Optional[Config] = None,
    ):
        """Initialize the TUI app.

        Args:
            gateway: Gateway for backend calls (built from config if omitted).
            config: Configuration (global config if omitted).
        """
        super().__init__()
        self.config = config or get_config()
        self.gateway = gateway or SubmissionGateway(config=self.config)

        self.credential_form = CredentialFormController(
            self.gateway,
            on_success=self._on_login_success,
            config=self.config.forms,
        )
        self.code_entry = CodeEntryController(
            self.gateway,
            on_verified=self._on_verified,
            config=self.config.code_entry,
        )

    def on_mount(self) -> None:
        """Start on the login screen."""
        self.push_screen(LoginScreen(self.credential_form))

    def _on_login_success(self, scheme: Scheme, data: Any) -> None:
        """Called when login succeeds."""
        self.notify(f"Logged in with {scheme.label.lower()}")
        self.sub_title = "Security Verification"
        self.code_entry.reset()
        self.switch_screen(CodeEntryScreen(self.code_entry))

    def _on_verified(self, target: str, data: Any) -> None:
        """Called when the one-time code is accepted."""
        logger.info(f"Verification complete, handing off to {target}")
        self.exit(target)


def run_tui(base_url: Optional[str] = None) -> Optional[str]:
    """Run the TUI application.

    Args:
        base_url: Optional backend URL overriding the configured one.

    Returns:
        The post-verification target, or None if the user quit first.
    """
    # Redirect logging to file to avoid corrupting TUI display
    _configure_tui_logging()

    config = get_config()
    gateway = SubmissionGateway(base_url=base_url, config=config)
    app = TwoStepApp(gateway=gateway, config=config)
    return app.run()
