"""Validation schemas for the login and code entry forms."""

from enum import Enum

from twostep.forms.validation import (
    FieldSchema,
    Schema,
    email,
    exact_length,
    matches,
    min_length,
    required,
)

CODE_LENGTH = 6
MOBILE_MIN_LENGTH = 10


class Scheme(str, Enum):
    """Identifier type a user authenticates with."""

    EMAIL = "email"
    MOBILE = "mobile"

    @property
    def label(self) -> str:
        return "Email" if self is Scheme.EMAIL else "Mobile Number"


_PASSWORD = FieldSchema(
    "password",
    (required("Password is required"),),
)

EMAIL_SCHEMA = Schema(
    "email",
    (
        FieldSchema(
            "email",
            (
                required("Email is required"),
                email("Invalid email format"),
            ),
        ),
        _PASSWORD,
    ),
)

MOBILE_SCHEMA = Schema(
    "mobile",
    (
        FieldSchema(
            "mobile",
            (
                required("Mobile number is required"),
                matches(r"[0-9]+", "Mobile number must be digits only"),
                min_length(
                    MOBILE_MIN_LENGTH,
                    f"Mobile number must be at least {MOBILE_MIN_LENGTH} digits",
                ),
            ),
        ),
        _PASSWORD,
    ),
)

CODE_SCHEMA = Schema(
    "code",
    (
        FieldSchema(
            "code",
            (
                required("Code is required"),
                exact_length(CODE_LENGTH, f"Code must be exactly {CODE_LENGTH} digits"),
                matches(rf"[0-9]{{{CODE_LENGTH}}}", "Code must be numeric"),
            ),
        ),
    ),
)

SCHEMAS = {
    Scheme.EMAIL: EMAIL_SCHEMA,
    Scheme.MOBILE: MOBILE_SCHEMA,
}
