"""Domain errors raised by validation and the contact use cases."""


class PhonebookError(Exception):
    """Base class for phonebook domain errors."""


class ValidationError(PhonebookError, ValueError):
    """A contact field violates a length or format rule.

    errors maps field name -> message for every field that failed.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        details = ", ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(f"Person validation failed: {details}")

    @property
    def message(self) -> str:
        return str(self)


class ContactNotFound(PhonebookError, LookupError):
    """No contact exists with the given id."""

    def __init__(self, contact_id: str) -> None:
        self.contact_id = contact_id
        super().__init__(f"Contact {contact_id} not found")


class MalformedIdentifier(PhonebookError, ValueError):
    """The id does not parse as a contact identifier."""

    message = "malformed id"

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(self.message)
