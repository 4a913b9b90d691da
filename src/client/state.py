"""Client-side state: local contact cache, form fields, filter and the transient notification."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from phonebook.application import ContactData
from phonebook.domain import Contact

SUCCESS = "success"
ERROR = "error"

NOTIFICATION_SECONDS = 5.0


@dataclass(frozen=True)
class Notification:
    text: str
    severity: str
    expires_at: float

    @property
    def is_error(self) -> bool:
        return self.severity == ERROR


@dataclass
class PhonebookState:
    """
    Local reflection of the store. The contact list is a cache: replaced by a
    fresh fetch on load and patched after each successful mutation.
    """

    contacts: list[Contact] = field(default_factory=list)
    new_name: str = ""
    new_number: str = ""
    filter_text: str = ""
    notification_seconds: float = NOTIFICATION_SECONDS
    clock: Callable[[], float] = time.monotonic
    _notification: Notification | None = field(default=None, init=False, repr=False)

    # --- cache ---

    def replace_all(self, contacts: list[Contact]) -> None:
        self.contacts = list(contacts)

    def find_by_name(self, name: str) -> Contact | None:
        """Exact, case-sensitive name match."""
        for contact in self.contacts:
            if contact.name == name:
                return contact
        return None

    def find_by_id(self, contact_id: str) -> Contact | None:
        for contact in self.contacts:
            if contact.id == contact_id:
                return contact
        return None

    def append(self, contact: Contact) -> None:
        self.contacts = [*self.contacts, contact]

    def replace(self, contact_id: str, contact: Contact) -> None:
        self.contacts = [contact if c.id == contact_id else c for c in self.contacts]

    def remove(self, contact_id: str) -> None:
        self.contacts = [c for c in self.contacts if c.id != contact_id]

    def visible_contacts(self) -> list[Contact]:
        """Contacts whose name equals the filter, ignoring case. Empty filter shows all."""
        if not self.filter_text:
            return list(self.contacts)
        needle = self.filter_text.lower()
        return [c for c in self.contacts if c.name.lower() == needle]

    # --- form ---

    def candidate(self) -> ContactData:
        return ContactData(name=self.new_name, number=self.new_number)

    def clear_form(self) -> None:
        self.new_name = ""
        self.new_number = ""

    # --- notification ---

    def notify(self, text: str, severity: str = SUCCESS) -> Notification:
        if severity not in (SUCCESS, ERROR):
            raise ValueError(f"Unknown severity {severity!r}")
        self._notification = Notification(
            text=text,
            severity=severity,
            expires_at=self.clock() + self.notification_seconds,
        )
        return self._notification

    @property
    def notification(self) -> Notification | None:
        """Current notification, or None once it has expired."""
        current = self._notification
        if current is not None and self.clock() >= current.expires_at:
            self._notification = None
            return None
        return current
