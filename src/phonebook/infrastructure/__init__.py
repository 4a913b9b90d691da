"""Infrastructure layer: concrete implementations of application ports."""

from phonebook.infrastructure.memory_repository import InMemoryContactRepository
from phonebook.infrastructure.persistence.neo4j_repository import (
    Neo4jContactRepository,
    ensure_contact_constraints,
)

__all__ = [
    "InMemoryContactRepository",
    "Neo4jContactRepository",
    "ensure_contact_constraints",
]
