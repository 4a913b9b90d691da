"""Domain entity: Contact."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from phonebook.domain.validation import validate_contact


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Contact:
    """
    A stored name/number record.
    The id is assigned once at creation and never changes.
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = field(default="")
    number: str = field(default="")
    created_at: datetime = field(default_factory=_utcnow, compare=False)

    def __post_init__(self):
        validate_contact(self.name, self.number)

    def with_fields(self, name: str, number: str) -> "Contact":
        """Return a copy with name and number replaced, id and created_at kept."""
        return Contact(
            id=self.id,
            name=name,
            number=number,
            created_at=self.created_at,
        )

    def to_json(self) -> dict:
        return {"id": self.id, "name": self.name, "number": self.number}
