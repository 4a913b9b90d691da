"""
FastAPI backend: phonebook REST API.
Run with uvicorn: uvicorn api.main:app --reload (or python -m api)
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from repo root (when run from repo root or from Docker)
for path in (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path.cwd() / ".env",
):
    if path.exists():
        load_dotenv(path)
        break

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from neo4j import GraphDatabase
from pydantic import BaseModel

from phonebook.application import ContactData, ContactService
from phonebook.domain import ContactNotFound, MalformedIdentifier, ValidationError
from phonebook.infrastructure import (
    InMemoryContactRepository,
    Neo4jContactRepository,
    ensure_contact_constraints,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

STORE_NEO4J = "neo4j"
STORE_MEMORY = "memory"


def _store_kind() -> str:
    return os.environ.get("PHONEBOOK_STORE", STORE_NEO4J).strip().lower() or STORE_NEO4J


def _get_driver():
    uri = os.environ.get("NEO4J_URI", "bolt://localhost:7687").strip()
    user = os.environ.get("NEO4J_USER", "neo4j").strip()
    password = os.environ.get("NEO4J_PASSWORD", "password").strip()
    return GraphDatabase.driver(uri, auth=(user, password))


def _build_service(app: FastAPI) -> ContactService:
    """Create the ContactService for the configured store. Neo4j gets its constraints first."""
    kind = _store_kind()
    if kind == STORE_MEMORY:
        logger.info("Using in-memory contact store")
        return ContactService(InMemoryContactRepository())
    if kind != STORE_NEO4J:
        raise RuntimeError(f"Unknown PHONEBOOK_STORE {kind!r} (expected neo4j or memory)")
    if getattr(app.state, "driver", None) is None:
        app.state.driver = _get_driver()
    ensure_contact_constraints(app.state.driver)
    return ContactService(Neo4jContactRepository(app.state.driver))


def get_service(request: Request) -> ContactService:
    app = request.app
    if getattr(app.state, "service", None) is None:
        app.state.service = _build_service(app)
    return app.state.service


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.driver = None
    app.state.service = None
    try:
        app.state.service = _build_service(app)
        logger.info("Phonebook API ready (store: %s)", _store_kind())
        yield
    finally:
        if getattr(app.state, "driver", None) is not None:
            app.state.driver.close()


app = FastAPI(title="Phonebook API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Errors ---


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(content={"error": message}, status_code=status_code)


@app.exception_handler(ValidationError)
def handle_validation_error(request: Request, exc: ValidationError):
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    return _error(400, str(exc))


@app.exception_handler(MalformedIdentifier)
def handle_malformed_id(request: Request, exc: MalformedIdentifier):
    logger.warning("%s %s rejected: malformed id %r", request.method, request.url.path, exc.value)
    return _error(400, exc.message)


@app.exception_handler(ContactNotFound)
def handle_not_found(request: Request, exc: ContactNotFound):
    logger.warning("%s %s: %s", request.method, request.url.path, exc)
    return _error(404, str(exc))


@app.exception_handler(RequestValidationError)
def handle_bad_body(request: Request, exc: RequestValidationError):
    logger.warning("%s %s: malformed body", request.method, request.url.path)
    return _error(400, "Request body must be a JSON object with name and number")


# --- REST: health ---


@app.get("/health")
def health():
    return {"status": "ok"}


# --- REST: persons ---


class PersonBody(BaseModel):
    name: str | None = None
    number: str | None = None

    def to_data(self) -> ContactData:
        return ContactData(name=self.name, number=self.number)


@app.get("/api/persons")
def list_persons(service: ContactService = Depends(get_service)):
    return [contact.to_json() for contact in service.list_all()]


@app.get("/api/info", response_class=HTMLResponse)
def info(service: ContactService = Depends(get_service)):
    return HTMLResponse(service.info().to_html())


@app.get("/api/persons/{contact_id}")
def get_person(contact_id: str, service: ContactService = Depends(get_service)):
    contact = service.get_by_id(contact_id)
    if contact is None:
        return Response(status_code=204)
    return contact.to_json()


@app.post("/api/persons")
def create_person(body: PersonBody, service: ContactService = Depends(get_service)):
    return service.create(body.to_data()).to_json()


@app.put("/api/persons/{contact_id}")
def update_person(
    contact_id: str,
    body: PersonBody,
    service: ContactService = Depends(get_service),
):
    return service.update_by_id(contact_id, body.to_data()).to_json()


@app.delete("/api/persons/{contact_id}", status_code=204)
def delete_person(contact_id: str, service: ContactService = Depends(get_service)):
    service.delete_by_id(contact_id)
    return Response(status_code=204)
