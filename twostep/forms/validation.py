"""Schema-driven field validation.

A schema is an ordered set of field schemas, each holding a list of rules.
Validation is pure: it reads a snapshot of raw values and returns fresh
results without touching any state.

- validate(): first failing rule per field, for every field
- collect_errors(): every violation of every rule
"""

import re
from dataclasses import dataclass
from re import Pattern
from typing import Callable, Dict, List, Mapping, Optional, Union

# Field name -> error message. Only failing fields appear; empty means valid.
ValidationResult = Dict[str, str]

# Address grammar used by HTML email inputs (WHATWG).
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


@dataclass
class ValidationError:
    """A single rule violation for a form field.

    Attributes:
        field: Name of the field that failed validation
        message: Human-readable error message
        code: Error code for programmatic handling (e.g., REQUIRED)
    """

    field: str
    message: str
    code: Optional[str] = None


@dataclass(frozen=True)
class Rule:
    """A single check applied to a string value.

    Attributes:
        check: Predicate returning True when the value is acceptable
        message: Message reported when the check fails
        code: Error code for programmatic handling
        skip_empty: Treat empty values as passing (emptiness is the job of
            the required rule)
    """

    check: Callable[[str], bool]
    message: str
    code: str
    skip_empty: bool = True

    def violated_by(self, value: str) -> bool:
        if self.skip_empty and value == "":
            return False
        return not self.check(value)


def required(message: str) -> Rule:
    return Rule(lambda v: v != "", message, "REQUIRED", skip_empty=False)


def matches(pattern: Union[str, Pattern], message: str, code: str = "PATTERN") -> Rule:
    """Value must match the whole pattern."""
    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
    return Rule(lambda v: compiled.fullmatch(v) is not None, message, code)


def email(message: str) -> Rule:
    return matches(EMAIL_PATTERN, message, code="EMAIL")


def min_length(length: int, message: str) -> Rule:
    return Rule(lambda v: len(v) >= length, message, "MIN_LENGTH")


def exact_length(length: int, message: str) -> Rule:
    return Rule(lambda v: len(v) == length, message, "LENGTH")


@dataclass(frozen=True)
class FieldSchema:
    """Rules for one named field, checked in order."""

    name: str
    rules: tuple = ()

    def errors_for(self, value: str) -> List[ValidationError]:
        return [
            ValidationError(field=self.name, message=rule.message, code=rule.code)
            for rule in self.rules
            if rule.violated_by(value)
        ]


@dataclass(frozen=True)
class Schema:
    """An ordered collection of independent field schemas."""

    name: str
    fields: tuple = ()

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def payload(self, values: Mapping[str, object]) -> Dict[str, str]:
        """Extract exactly this schema's fields from raw values."""
        return {name: _as_text(values.get(name)) for name in self.field_names}


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def collect_errors(schema: Schema, values: Mapping[str, object]) -> List[ValidationError]:
    """Collect every rule violation across all fields.

    Args:
        schema: Schema to validate against
        values: Raw field values; missing keys count as empty strings

    Returns:
        List of ValidationError objects (empty if valid)
    """
    errors = []
    for field_schema in schema.fields:
        errors.extend(field_schema.errors_for(_as_text(values.get(field_schema.name))))
    return errors


def validate(schema: Schema, values: Mapping[str, object]) -> ValidationResult:
    """Validate values, reporting the first failing rule of each field.

    Args:
        schema: Schema to validate against
        values: Raw field values; missing keys count as empty strings

    Returns:
        Mapping of field name to error message (empty if valid)
    """
    result: ValidationResult = {}
    for error in collect_errors(schema, values):
        result.setdefault(error.field, error.message)
    return result
