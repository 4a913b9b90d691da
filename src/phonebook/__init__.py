"""
Phonebook core: clean-architecture layout.

- domain: Contact entity, field validation, errors. No outer dependencies.
- application: use cases (ContactService), ports (ContactRepository), DTOs.
- infrastructure: adapters (InMemoryContactRepository, Neo4jContactRepository).
"""

from phonebook.application import (
    ContactData,
    ContactRepository,
    ContactService,
    PhonebookInfo,
)
from phonebook.domain import (
    Contact,
    ContactNotFound,
    MalformedIdentifier,
    PhonebookError,
    ValidationError,
)
from phonebook.infrastructure import InMemoryContactRepository, Neo4jContactRepository

__all__ = [
    "Contact",
    "ContactData",
    "ContactNotFound",
    "ContactRepository",
    "ContactService",
    "InMemoryContactRepository",
    "MalformedIdentifier",
    "Neo4jContactRepository",
    "PhonebookError",
    "PhonebookInfo",
    "ValidationError",
]
