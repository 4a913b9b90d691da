"""Field rules for contacts. Single routine shared by every write path."""

import re
import uuid

from phonebook.domain.errors import MalformedIdentifier, ValidationError

NAME_MIN_LENGTH = 3
NUMBER_MIN_LENGTH = 8

# 2 or 3 leading digits, a dash, then digits. The trailing count is only
# bounded by NUMBER_MIN_LENGTH.
NUMBER_PATTERN = re.compile(r"^\d{2,3}-\d+$")


def _check_min_length(field: str, value: str | None, min_length: int) -> str | None:
    if value is None or value == "":
        return f"Path `{field}` is required."
    if len(value) < min_length:
        return (
            f"Path `{field}` (`{value}`) is shorter than the minimum allowed "
            f"length ({min_length})."
        )
    return None


def name_error(name: str | None) -> str | None:
    """Return the violated rule for name, or None if valid."""
    return _check_min_length("name", name, NAME_MIN_LENGTH)


def number_error(number: str | None) -> str | None:
    """Return the violated rule for number, or None if valid."""
    error = _check_min_length("number", number, NUMBER_MIN_LENGTH)
    if error:
        return error
    if not NUMBER_PATTERN.match(number):
        return f"{number} The number must be prefixed with 2 or 3 numbers!"
    return None


def validate_contact(name: str | None, number: str | None) -> None:
    """Raise ValidationError listing every invalid field."""
    errors = {}
    for field, error in (("name", name_error(name)), ("number", number_error(number))):
        if error:
            errors[field] = error
    if errors:
        raise ValidationError(errors)


def name_taken(name: str) -> ValidationError:
    """Error for an update that would give a contact another contact's name."""
    return ValidationError(
        {"name": f"Path `name` (`{name}`) is already used by another contact."}
    )


def parse_contact_id(value: str) -> str:
    """Return the canonical form of a contact id, or raise MalformedIdentifier."""
    try:
        return str(uuid.UUID(str(value).strip()))
    except (ValueError, AttributeError, TypeError) as e:
        raise MalformedIdentifier(value) from e
