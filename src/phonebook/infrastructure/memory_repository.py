"""In-memory implementation of ContactRepository (no DB)."""

import threading

from phonebook.domain import Contact
from phonebook.domain.validation import name_taken


class InMemoryContactRepository:
    """Stores contacts in memory. Order preserved by insertion.
    Writes hold a lock so the name lookup and the insert/update are one step.
    """

    def __init__(self) -> None:
        self._by_id: dict[str, Contact] = {}
        self._order: list[str] = []
        self._lock = threading.Lock()

    def _find_by_name(self, name: str) -> Contact | None:
        for contact in self._by_id.values():
            if contact.name == name:
                return contact
        return None

    def list_all(self) -> list[Contact]:
        with self._lock:
            return [self._by_id[cid] for cid in self._order if cid in self._by_id]

    def get_by_id(self, contact_id: str) -> Contact | None:
        return self._by_id.get(contact_id)

    def upsert_by_name(self, contact: Contact) -> tuple[Contact, bool]:
        with self._lock:
            existing = self._find_by_name(contact.name)
            if existing is not None:
                stored = existing.with_fields(existing.name, contact.number)
                self._by_id[existing.id] = stored
                return stored, False
            self._by_id[contact.id] = contact
            self._order.append(contact.id)
            return contact, True

    def update(self, contact: Contact) -> Contact | None:
        with self._lock:
            current = self._by_id.get(contact.id)
            if current is None:
                return None
            holder = self._find_by_name(contact.name)
            if holder is not None and holder.id != contact.id:
                raise name_taken(contact.name)
            stored = current.with_fields(contact.name, contact.number)
            self._by_id[contact.id] = stored
            return stored

    def delete(self, contact_id: str) -> bool:
        with self._lock:
            if self._by_id.pop(contact_id, None) is None:
                return False
            self._order.remove(contact_id)
            return True

    def count(self) -> int:
        return len(self._by_id)
