"""Application ports (interfaces). Implemented by infrastructure adapters."""

from typing import Protocol

from phonebook.domain import Contact


class ContactRepository(Protocol):
    """Persists and queries contacts. Names are unique within the store."""

    def list_all(self) -> list[Contact]:
        """Return all contacts in creation order."""
        ...

    def get_by_id(self, contact_id: str) -> Contact | None:
        """Return the contact with the given id, or None."""
        ...

    def upsert_by_name(self, contact: Contact) -> tuple[Contact, bool]:
        """Atomically insert contact, or replace the number of the contact with the same name.

        Returns (stored contact, created). When a contact with the name already
        exists its id is kept and contact.id is discarded.
        """
        ...

    def update(self, contact: Contact) -> Contact | None:
        """Replace name and number of the contact with contact.id. None if not found."""
        ...

    def delete(self, contact_id: str) -> bool:
        """Remove the contact. Returns True if something was removed."""
        ...

    def count(self) -> int:
        ...
