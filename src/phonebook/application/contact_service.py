"""Contact use cases: list, get, create (upsert by name), update, delete, count."""

import logging
from datetime import datetime, timezone

from phonebook.application.dto import ContactData, PhonebookInfo
from phonebook.application.ports import ContactRepository
from phonebook.domain import (
    Contact,
    ContactNotFound,
    MalformedIdentifier,
    parse_contact_id,
)

logger = logging.getLogger(__name__)


class ContactService:
    """Core flow: validate -> reconcile by name -> store. The store never holds two contacts with one name."""

    def __init__(self, repository: ContactRepository) -> None:
        self._repo = repository

    def list_all(self) -> list[Contact]:
        """Return all contacts in creation order."""
        return self._repo.list_all()

    def get_by_id(self, contact_id: str) -> Contact | None:
        """Return a contact by id, or None if not found."""
        return self._repo.get_by_id(parse_contact_id(contact_id))

    def create(self, data: ContactData) -> Contact:
        """Create a contact, or overwrite the number of the one already using the name.

        Raises ValidationError before touching the store.
        """
        candidate = Contact(name=data.name, number=data.number)
        stored, created = self._repo.upsert_by_name(candidate)
        if created:
            logger.info("Created contact %s (%s)", stored.id, stored.name)
        else:
            logger.info(
                "Contact named %s already exists; overwrote number of %s",
                stored.name,
                stored.id,
            )
        return stored

    def update_by_id(self, contact_id: str, data: ContactData) -> Contact:
        """Replace name and number of an existing contact, keeping its id."""
        contact_id = parse_contact_id(contact_id)
        candidate = Contact(id=contact_id, name=data.name, number=data.number)
        updated = self._repo.update(candidate)
        if updated is None:
            raise ContactNotFound(contact_id)
        logger.info("Updated contact %s (%s)", updated.id, updated.name)
        return updated

    def delete_by_id(self, contact_id: str) -> None:
        """Remove a contact. Missing or malformed ids are not an error."""
        try:
            contact_id = parse_contact_id(contact_id)
        except MalformedIdentifier:
            logger.info("Delete ignored for malformed id %r", contact_id)
            return
        if self._repo.delete(contact_id):
            logger.info("Deleted contact %s", contact_id)

    def count(self) -> int:
        return self._repo.count()

    def info(self, now: datetime | None = None) -> PhonebookInfo:
        """Return the contact count with the time it was taken."""
        return PhonebookInfo(
            count=self.count(),
            generated_at=now or datetime.now(timezone.utc),
        )
