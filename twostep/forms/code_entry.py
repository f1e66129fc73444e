"""Code entry controller.

Holds six single-character cells and the focus position. The composite code
is always derived from the cells and never stored on its own.

Two error channels are kept apart:
- schema_error: set by submit() when the composite fails validation
- server_error: set when the backend rejects the code; cleared by new input
"""

import re
from typing import Any, Callable, List, Optional

from loguru import logger

from twostep.config import CodeEntryConfig
from twostep.forms.schemas import CODE_LENGTH, CODE_SCHEMA
from twostep.forms.state import Observable, SubmitOutcome, SubmitStatus
from twostep.forms.validation import validate
from twostep.gateway import OTP, SubmissionGateway

CODE_EXPIRED_MESSAGE = "Code expired! Put new code."

_CELL_INPUT = re.compile(r"[0-9]?")
_PASTE_INPUT = re.compile(rf"[0-9]{{{CODE_LENGTH}}}")


class CodeEntryController(Observable):
    """State machine for the segmented one-time code input.

    Attributes:
        cells: One character (or "") per input box
        focus_index: Cell the rendering layer should focus
        schema_error: Validation message from the last submit, if any
        server_error: Message shown after the backend rejected a code
        is_submitting: True while a verification call is outstanding
    """

    def __init__(
        self,
        gateway: SubmissionGateway,
        on_verified: Optional[Callable[[str, Any], None]] = None,
        config: Optional[CodeEntryConfig] = None,
    ):
        """Initialize controller.

        Args:
            gateway: Gateway used for verification calls.
            on_verified: Callback when the code is accepted (receives the
                post-verification target and response data).
            config: Code entry options (defaults to CodeEntryConfig()).
        """
        super().__init__()
        self.gateway = gateway
        self.on_verified = on_verified
        self.config = config or CodeEntryConfig()

        self.cells: List[str] = [""] * CODE_LENGTH
        self.focus_index = 0
        self.schema_error: Optional[str] = None
        self.server_error: Optional[str] = None
        self.is_submitting = False

    @property
    def composite(self) -> str:
        return "".join(self.cells)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < CODE_LENGTH:
            raise IndexError(f"Cell index {index} out of range 0-{CODE_LENGTH - 1}")

    def _clear_cells(self) -> None:
        self.cells = [""] * CODE_LENGTH
        self.focus_index = 0

    def on_digit(self, index: int, char: str) -> bool:
        """Write a digit (or "" to clear) into a cell.

        Returns:
            False if the character was rejected and nothing changed.
        """
        self._check_index(index)
        if _CELL_INPUT.fullmatch(char) is None:
            return False

        self.cells[index] = char
        self.server_error = None
        if char and index < CODE_LENGTH - 1:
            self.focus_index = index + 1
        self._notify()
        return True

    def on_backspace_at_empty_cell(self, index: int) -> bool:
        """Move focus back one cell when backspace hits an empty cell.

        Returns:
            True if focus moved.
        """
        self._check_index(index)
        if self.cells[index] or index == 0:
            return False

        self.focus_index = index - 1
        self._notify()
        return True

    def on_cell_focused(self, index: int) -> bool:
        """Record that the user moved focus to a cell (click, Tab).

        Returns:
            True if focus_index changed.
        """
        self._check_index(index)
        if index == self.focus_index:
            return False

        self.focus_index = index
        self._notify()
        return True

    def on_paste(self, text: str) -> bool:
        """Spread a pasted six-digit code over the cells.

        Anything other than exactly six digits is ignored.

        Returns:
            True if the paste was accepted.
        """
        if _PASTE_INPUT.fullmatch(text) is None:
            return False

        self.cells = list(text)
        self.server_error = None
        self._notify()
        return True

    def reset(self) -> None:
        self._clear_cells()
        self.schema_error = None
        self.server_error = None
        self._notify()

    async def submit(self) -> SubmitOutcome:
        """Validate the composite code and send it for verification.

        Returns:
            SubmitOutcome describing what happened.
        """
        if self.is_submitting:
            logger.debug("Verification already in progress, ignoring submit")
            return SubmitOutcome(SubmitStatus.BUSY)

        code = self.composite
        errors = validate(CODE_SCHEMA, {"code": code})
        self.schema_error = errors.get("code")
        if errors:
            self._notify()
            return SubmitOutcome(SubmitStatus.INVALID, errors=errors)

        self.is_submitting = True
        self._notify()
        try:
            result = await self.gateway.submit(OTP, {"code": code})
        finally:
            self.is_submitting = False
            self._notify()

        self._clear_cells()
        if not result.ok:
            logger.error(f"Code verification failed: {result.error}")
            self.server_error = CODE_EXPIRED_MESSAGE
            self._notify()
            return SubmitOutcome(SubmitStatus.FAILURE, error=result.error)

        target = self.config.post_verify_target
        logger.info(f"Code accepted, continuing to {target}")
        self._notify()
        if self.on_verified:
            self.on_verified(target, result.data)
        return SubmitOutcome(SubmitStatus.SUCCESS, data=result.data)
