"""Forms module for twostep.

This module provides the interactive state behind the two login steps:
- validation: Schema-driven field validation
- schemas: Email, mobile and code schemas
- credentials: Login form controller (email / mobile tabs)
- code_entry: Six-cell one-time code controller
"""

from twostep.forms.validation import (
    ValidationError,
    ValidationResult,
    Schema,
    FieldSchema,
    validate,
    collect_errors,
)
from twostep.forms.schemas import (
    Scheme,
    EMAIL_SCHEMA,
    MOBILE_SCHEMA,
    CODE_SCHEMA,
    CODE_LENGTH,
)
from twostep.forms.state import SubmitOutcome, SubmitStatus
from twostep.forms.credentials import CredentialFormController
from twostep.forms.code_entry import CodeEntryController, CODE_EXPIRED_MESSAGE

__all__ = [
    # Validation
    "ValidationError",
    "ValidationResult",
    "Schema",
    "FieldSchema",
    "validate",
    "collect_errors",
    # Schemas
    "Scheme",
    "EMAIL_SCHEMA",
    "MOBILE_SCHEMA",
    "CODE_SCHEMA",
    "CODE_LENGTH",
    # Controllers
    "SubmitOutcome",
    "SubmitStatus",
    "CredentialFormController",
    "CodeEntryController",
    "CODE_EXPIRED_MESSAGE",
]
