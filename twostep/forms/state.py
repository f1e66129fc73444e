"""Shared pieces of the form controllers."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional

from twostep.forms.validation import ValidationResult


class SubmitStatus(str, Enum):
    INVALID = "invalid"  # validation failed, nothing sent
    BUSY = "busy"  # a submission is already outstanding
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class SubmitOutcome:
    """Result of a controller submit() call.

    Attributes:
        status: What happened
        errors: Validation errors (INVALID only)
        data: Backend response data (SUCCESS only)
        error: Gateway failure detail (FAILURE only)
    """

    status: SubmitStatus
    errors: ValidationResult = field(default_factory=dict)
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is SubmitStatus.SUCCESS


class Observable:
    """Lets a rendering layer re-render after every state transition."""

    def __init__(self):
        self._listeners: List[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()
