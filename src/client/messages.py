"""Load and validate the YAML message catalogue used by the submission flow."""

import os
from pathlib import Path

import yaml

REQUIRED_MESSAGES = frozenset(
    {
        "added",
        "updated",
        "already_removed",
        "deleted",
        "confirm_replace",
        "confirm_delete",
        "unknown_contact",
        "server_unreachable",
    }
)


def _repo_root() -> Path:
    """Return repo root (parent of src)."""
    return Path(__file__).resolve().parent.parent.parent


def get_messages_path() -> Path:
    """Return path to the catalogue (PHONEBOOK_MESSAGES_PATH env or flows/phonebook.yaml)."""
    default = _repo_root() / "flows" / "phonebook.yaml"
    path = os.environ.get("PHONEBOOK_MESSAGES_PATH", "").strip()
    if path:
        return Path(path).resolve()
    return default


def load_catalogue(path: Path | None = None) -> dict:
    """Load the catalogue YAML. Validates that every required message id is present."""
    if path is None:
        path = get_messages_path()
    raw = path.read_text(encoding="utf-8")
    catalogue = yaml.safe_load(raw)
    if not isinstance(catalogue, dict):
        raise ValueError("Message catalogue YAML must be a dict")
    messages = catalogue.get("messages")
    if not isinstance(messages, dict):
        raise ValueError("Message catalogue must have a 'messages' map")
    missing = sorted(REQUIRED_MESSAGES - set(messages))
    if missing:
        raise ValueError(f"Message catalogue is missing: {', '.join(missing)}")
    seconds = catalogue.setdefault("notification_seconds", 5)
    if not isinstance(seconds, (int, float)) or seconds <= 0:
        raise ValueError("notification_seconds must be a positive number")
    return catalogue


def format_message(messages: dict, message_id: str, template_vars: dict | None = None) -> str:
    text = messages.get(message_id) or message_id
    for k, v in (template_vars or {}).items():
        text = text.replace("{" + k + "}", str(v) if v is not None else "")
    return text


_catalogue_cache: dict | None = None


def get_catalogue(cache: bool = True) -> dict:
    """Load catalogue (cached by default). Pass cache=False to reload."""
    global _catalogue_cache
    if cache and _catalogue_cache is not None:
        return _catalogue_cache
    _catalogue_cache = load_catalogue()
    return _catalogue_cache
