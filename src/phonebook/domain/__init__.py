"""Domain layer: entities, validation and errors. No dependencies on outer layers."""

from phonebook.domain.entities import Contact
from phonebook.domain.errors import (
    ContactNotFound,
    MalformedIdentifier,
    PhonebookError,
    ValidationError,
)
from phonebook.domain.validation import parse_contact_id, validate_contact

__all__ = [
    "Contact",
    "ContactNotFound",
    "MalformedIdentifier",
    "PhonebookError",
    "ValidationError",
    "parse_contact_id",
    "validate_contact",
]
