"""Data transfer objects for the contact use cases."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ContactData:
    """Name/number pair submitted by a client. Has no id until saved."""

    name: str | None = None
    number: str | None = None

    def to_json(self) -> dict:
        return {"name": self.name, "number": self.number}


@dataclass(frozen=True)
class PhonebookInfo:
    count: int
    generated_at: datetime

    def to_html(self) -> str:
        stamp = self.generated_at.strftime("%a %b %d %Y %H:%M:%S %Z").strip()
        return f"<p>Phonebook has info for {self.count} people</p><p>{stamp}</p>"
