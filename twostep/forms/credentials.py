"""Credential form controller.

One controller serves both login schemes. Each scheme keeps its own field
values and errors; the schemes share only the submitting and
password-visibility flags.
"""

import re
from typing import Any, Callable, Dict, Mapping, Optional

from loguru import logger

from twostep.config import FormsConfig
from twostep.forms.schemas import SCHEMAS, Scheme
from twostep.forms.state import Observable, SubmitOutcome, SubmitStatus
from twostep.forms.validation import ValidationResult, validate
from twostep.gateway import LOGIN_WITH_EMAIL, LOGIN_WITH_MOBILE, SubmissionGateway

ENDPOINTS = {
    Scheme.EMAIL: LOGIN_WITH_EMAIL,
    Scheme.MOBILE: LOGIN_WITH_MOBILE,
}

LOGIN_FAILED_MESSAGE = "Login failed. Check your details and try again."

_NON_DIGITS = re.compile(r"[^0-9]")


def _empty_values(scheme: Scheme) -> Dict[str, str]:
    return {name: "" for name in SCHEMAS[scheme].field_names}


class CredentialFormController(Observable):
    """State and submission lifecycle of the login form.

    Attributes:
        active_scheme: Scheme whose fields are shown and submitted
        is_submitting: True while a login call is outstanding
        is_password_visible: Whether password fields render in clear text
        login_error: User-facing login failure, only set when
            surface_login_errors is enabled
    """

    def __init__(
        self,
        gateway: SubmissionGateway,
        on_success: Optional[Callable[[Scheme, Any], None]] = None,
        config: Optional[FormsConfig] = None,
    ):
        """Initialize controller.

        Args:
            gateway: Gateway used for login calls.
            on_success: Callback when login succeeds (receives scheme, response data).
                This is the signal to move on to code entry.
            config: Form behaviour options (defaults to FormsConfig()).
        """
        super().__init__()
        self.gateway = gateway
        self.on_success = on_success
        self.config = config or FormsConfig()

        self.active_scheme = Scheme.EMAIL
        self.is_submitting = False
        self.is_password_visible = False
        self.login_error: Optional[str] = None

        self._values: Dict[Scheme, Dict[str, str]] = {s: _empty_values(s) for s in Scheme}
        self._errors: Dict[Scheme, ValidationResult] = {s: {} for s in Scheme}
        # Schemes submitted at least once re-validate on every change.
        self._submitted: set = set()

    def values(self, scheme: Optional[Scheme] = None) -> Dict[str, str]:
        return dict(self._values[Scheme(scheme or self.active_scheme)])

    def errors(self, scheme: Optional[Scheme] = None) -> ValidationResult:
        return dict(self._errors[Scheme(scheme or self.active_scheme)])

    def select_scheme(self, scheme: Scheme) -> None:
        """Switch the active tab.

        The tab being left keeps its input unless preserve_inactive_scheme
        is disabled.
        """
        scheme = Scheme(scheme)
        if scheme is self.active_scheme:
            return

        previous = self.active_scheme
        if not self.config.preserve_inactive_scheme:
            self._values[previous] = _empty_values(previous)
            self._errors[previous] = {}
            self._submitted.discard(previous)

        self.active_scheme = scheme
        logger.debug(f"Login scheme switched from {previous.value} to {scheme.value}")
        self._notify()

    def set_field(self, name: str, value: str, scheme: Optional[Scheme] = None) -> str:
        """Store a raw field value.

        Mobile numbers are filtered to digits as they are typed.

        Returns:
            The value actually stored.
        """
        scheme = Scheme(scheme or self.active_scheme)
        if name not in self._values[scheme]:
            raise ValueError(f"Unknown field '{name}' for {scheme.value} login")

        if name == "mobile":
            value = _NON_DIGITS.sub("", value)
        self._values[scheme][name] = value

        if scheme in self._submitted:
            self._errors[scheme] = validate(SCHEMAS[scheme], self._values[scheme])
        self._notify()
        return value

    def toggle_password_visibility(self) -> bool:
        self.is_password_visible = not self.is_password_visible
        self._notify()
        return self.is_password_visible

    async def submit(
        self,
        scheme: Optional[Scheme] = None,
        raw_fields: Optional[Mapping[str, str]] = None,
    ) -> SubmitOutcome:
        """Validate and send a login request.

        Args:
            scheme: Scheme to submit (defaults to the active one).
            raw_fields: Field values to submit instead of the stored ones.

        Returns:
            SubmitOutcome describing what happened.
        """
        scheme = Scheme(scheme or self.active_scheme)
        if self.is_submitting:
            logger.debug("Login already in progress, ignoring submit")
            return SubmitOutcome(SubmitStatus.BUSY)

        schema = SCHEMAS[scheme]
        values = dict(raw_fields) if raw_fields is not None else self._values[scheme]

        self._submitted.add(scheme)
        errors = validate(schema, values)
        self._errors[scheme] = errors
        if errors:
            logger.debug(f"{scheme.value} login invalid: {', '.join(errors)}")
            self._notify()
            return SubmitOutcome(SubmitStatus.INVALID, errors=dict(errors))

        self.is_submitting = True
        self.login_error = None
        self._notify()
        try:
            result = await self.gateway.submit(ENDPOINTS[scheme], schema.payload(values))
        finally:
            self.is_submitting = False
            self._notify()

        if not result.ok:
            logger.error(f"{scheme.value} login failed: {result.error}")
            if self.config.surface_login_errors:
                self.login_error = LOGIN_FAILED_MESSAGE
                self._notify()
            return SubmitOutcome(SubmitStatus.FAILURE, error=result.error)

        logger.info(f"{scheme.value} login accepted")
        if self.on_success:
            self.on_success(scheme, result.data)
        return SubmitOutcome(SubmitStatus.SUCCESS, data=result.data)
