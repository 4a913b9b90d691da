"""Neo4j implementation of ContactRepository.
Graph: one (:Contact {id, name, number, created_at}) node per contact, no relationships.
Unique constraints on Contact.name and Contact.id make MERGE on name an atomic upsert.
"""

from datetime import datetime

from neo4j.exceptions import ConstraintError

from phonebook.domain import Contact
from phonebook.domain.validation import name_taken

_CONSTRAINT_QUERIES = (
    """
    CREATE CONSTRAINT contact_name_unique IF NOT EXISTS
    FOR (c:Contact) REQUIRE c.name IS UNIQUE
    """,
    """
    CREATE CONSTRAINT contact_id_unique IF NOT EXISTS
    FOR (c:Contact) REQUIRE c.id IS UNIQUE
    """,
)

_UPSERT_QUERY = """
MERGE (c:Contact {name: $name})
ON CREATE SET c.id = $id, c.number = $number, c.created_at = $created_at
ON MATCH SET c.number = $number
RETURN c, c.id = $id AS created
"""

_UPDATE_QUERY = """
MATCH (c:Contact {id: $id})
SET c.name = $name, c.number = $number
RETURN c
"""


def _datetime_to_iso(dt: datetime) -> str:
    return dt.isoformat()


def _iso_to_datetime(s: str) -> datetime:
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _run_single(tx, query: str, **params):
    return tx.run(query, **params).single()


def ensure_contact_constraints(driver) -> None:
    """Create unique constraints on Contact(name) and Contact(id) if missing."""
    with driver.session() as session:
        for query in _CONSTRAINT_QUERIES:
            session.run(query)


class Neo4jContactRepository:
    """Stores contacts as Contact nodes in Neo4j.
    Call ensure_contact_constraints at startup so concurrent upserts cannot duplicate a name.
    """

    def __init__(self, driver: object) -> None:
        self._driver = driver

    def list_all(self) -> list[Contact]:
        with self._driver.session() as session:
            result = session.run(
                """
                MATCH (c:Contact)
                RETURN c
                ORDER BY c.created_at
                """
            )
            return [_record_to_contact(rec) for rec in result]

    def get_by_id(self, contact_id: str) -> Contact | None:
        with self._driver.session() as session:
            result = session.run(
                "MATCH (c:Contact {id: $id}) RETURN c",
                id=contact_id,
            )
            record = result.single()
        if not record:
            return None
        return _record_to_contact(record)

    def upsert_by_name(self, contact: Contact) -> tuple[Contact, bool]:
        # Managed transaction: retried by the driver on transient lock conflicts.
        with self._driver.session() as session:
            record = session.execute_write(
                _run_single,
                _UPSERT_QUERY,
                id=contact.id,
                name=contact.name,
                number=contact.number,
                created_at=_datetime_to_iso(contact.created_at),
            )
        return _record_to_contact(record), bool(record["created"])

    def update(self, contact: Contact) -> Contact | None:
        try:
            with self._driver.session() as session:
                result = session.run(
                    _UPDATE_QUERY,
                    id=contact.id,
                    name=contact.name,
                    number=contact.number,
                )
                record = result.single()
        except ConstraintError as e:
            raise name_taken(contact.name) from e
        if not record:
            return None
        return _record_to_contact(record)

    def delete(self, contact_id: str) -> bool:
        with self._driver.session() as session:
            result = session.run(
                """
                MATCH (c:Contact {id: $id})
                DETACH DELETE c
                RETURN count(*) AS removed
                """,
                id=contact_id,
            )
            record = result.single()
        return bool(record and record["removed"])

    def count(self) -> int:
        with self._driver.session() as session:
            result = session.run("MATCH (c:Contact) RETURN count(c) AS total")
            record = result.single()
        return int(record["total"]) if record else 0


def _record_to_contact(record) -> Contact:
    c = record["c"]
    return Contact(
        id=c["id"],
        name=c["name"],
        number=c["number"],
        created_at=_iso_to_datetime(c["created_at"]),
    )
