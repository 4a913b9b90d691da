"""
Adapter: run the submission/deletion machine against the local state and the API.

The XState machine (xstate_machine) only knows states and events; every
effect (duplicate check, confirmation prompts, HTTP calls, cache patches,
notifications) lives here.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from client.messages import format_message, get_catalogue
from client.phonebook_api import ApiError, PhonebookApi
from client.state import ERROR, SUCCESS, Notification, PhonebookState
from client.xstate_machine import SubmissionMachine, get_machine, transition

logger = logging.getLogger(__name__)


@dataclass
class AskConfirmation:
    text: str


@dataclass
class ShowNotification:
    notification: Notification


@dataclass
class SetSlots:
    slots: dict[str, Any]


@dataclass
class ClearSlots:
    keys: list[str]


EDITING = "editing"
WAITING_STATES = frozenset({EDITING, "awaiting_confirmation", "awaiting_delete_confirmation"})


def event_to_xstate(event: dict) -> str | None:
    """Map a UI event (type) to the XState event string."""
    return {
        "submit": "SUBMIT",
        "delete": "DELETE",
        "confirm": "CONFIRM",
        "decline": "DECLINE",
    }.get(event.get("type"))


def _notify(state: PhonebookState, text: str, severity: str) -> ShowNotification:
    return ShowNotification(notification=state.notify(text, severity))


def _request_failed(
    state: PhonebookState, messages: dict, error: Exception
) -> ShowNotification:
    if isinstance(error, ApiError):
        return _notify(state, error.message, ERROR)
    logger.warning("Phonebook server unreachable: %s", error)
    return _notify(state, format_message(messages, "server_unreachable"), ERROR)


def _run_effect(
    state_value: str,
    event: dict,
    slots: dict,
    state: PhonebookState,
    api: PhonebookApi,
    messages: dict,
) -> tuple[list, str | None]:
    """
    Run effect for state_value. Return (actions, outcome_event).
    outcome_event is the XState event to send next (e.g. DONE, DUPLICATE).
    """
    actions: list = []
    payload = event.get("payload") or {}

    if state_value == "checking_duplicate":
        candidate = state.candidate()
        existing = state.find_by_name(candidate.name)
        if existing is None:
            actions.append(SetSlots(slots={"candidate": candidate}))
            return actions, "NEW"
        actions.append(
            SetSlots(
                slots={
                    "candidate": candidate,
                    "target_id": existing.id,
                    "target_name": existing.name,
                }
            )
        )
        text = format_message(messages, "confirm_replace", {"name": existing.name})
        actions.append(AskConfirmation(text=text))
        return actions, "DUPLICATE"

    if state_value == "submitting_create":
        candidate = slots["candidate"]
        try:
            created = api.create(candidate)
        except (ApiError, httpx.HTTPError) as e:
            actions.append(_request_failed(state, messages, e))
            return actions, "FAILED"
        state.append(created)
        state.clear_form()
        text = format_message(messages, "added", {"name": created.name})
        actions.append(_notify(state, text, SUCCESS))
        return actions, "DONE"

    if state_value == "submitting_update":
        candidate = slots["candidate"]
        target_id = slots["target_id"]
        try:
            updated = api.update(target_id, candidate)
        except ApiError as e:
            if e.status_code == 404:
                text = format_message(messages, "already_removed", {"name": candidate.name})
                actions.append(_notify(state, text, ERROR))
            else:
                actions.append(_request_failed(state, messages, e))
            return actions, "FAILED"
        except httpx.HTTPError as e:
            actions.append(_request_failed(state, messages, e))
            return actions, "FAILED"
        state.replace(target_id, updated)
        state.clear_form()
        text = format_message(messages, "updated", {"name": updated.name})
        actions.append(_notify(state, text, SUCCESS))
        return actions, "DONE"

    if state_value == "checking_delete":
        contact_id = payload.get("id") or ""
        contact = state.find_by_id(contact_id)
        if contact is None:
            name = payload.get("name") or contact_id
            text = format_message(messages, "unknown_contact", {"name": name})
            actions.append(_notify(state, text, ERROR))
            return actions, "NOT_FOUND"
        actions.append(SetSlots(slots={"target_id": contact.id, "target_name": contact.name}))
        text = format_message(messages, "confirm_delete", {"name": contact.name})
        actions.append(AskConfirmation(text=text))
        return actions, "FOUND"

    if state_value == "deleting":
        target_id = slots["target_id"]
        try:
            api.delete_person(target_id)
        except ApiError as e:
            # the server answered, so the local copy is dropped either way
            state.remove(target_id)
            actions.append(_request_failed(state, messages, e))
            return actions, "FAILED"
        except httpx.HTTPError as e:
            actions.append(_request_failed(state, messages, e))
            return actions, "FAILED"
        state.remove(target_id)
        text = format_message(messages, "deleted", {"name": slots.get("target_name")})
        actions.append(_notify(state, text, SUCCESS))
        return actions, "DONE"

    if state_value == "cancelled":
        actions.append(ClearSlots(keys=["candidate", "target_id", "target_name"]))
        return actions, "DONE"

    return actions, None


def run_submission_flow(
    state_value: str,
    event: dict,
    context: dict,
    state: PhonebookState,
    api: PhonebookApi,
    machine: SubmissionMachine | None = None,
    catalogue: dict | None = None,
) -> tuple[list, str, dict]:
    """
    Run one step: transition with event, run effects until we hit a waiting state.
    Returns (actions, new_state_value, new_context).
    """
    if machine is None:
        machine = get_machine()
    if catalogue is None:
        catalogue = get_catalogue()
    messages = catalogue.get("messages") or {}
    slots = dict(context or {})
    all_actions: list = []
    current = state_value or machine.initial
    xevent = event_to_xstate(event)
    max_steps = 20
    steps = 0
    while xevent is not None and steps < max_steps:
        steps += 1
        next_state = transition(machine, current, xevent)
        if next_state is None:
            break
        current = next_state
        if current in WAITING_STATES:
            break
        effect_actions, xevent = _run_effect(current, event, slots, state, api, messages)
        all_actions.extend(effect_actions)
        for a in effect_actions:
            if isinstance(a, SetSlots):
                slots.update(a.slots)
            if isinstance(a, ClearSlots):
                for k in a.keys:
                    slots.pop(k, None)
    if current == EDITING:
        slots = {}
    return all_actions, current, slots


@dataclass
class PhonebookController:
    """Holds the machine position and the local state; the only path that mutates the cache."""

    api: PhonebookApi
    state: PhonebookState = field(default_factory=PhonebookState)
    machine: SubmissionMachine | None = None
    catalogue: dict | None = None
    state_value: str = EDITING
    slots: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.catalogue is None:
            self.catalogue = get_catalogue()
        self.state.notification_seconds = float(
            self.catalogue.get("notification_seconds", self.state.notification_seconds)
        )

    @property
    def awaiting_answer(self) -> bool:
        return self.state_value in ("awaiting_confirmation", "awaiting_delete_confirmation")

    def load(self) -> None:
        """Replace the cache with a fresh fetch."""
        self.state.replace_all(self.api.get_all())

    def dispatch(self, event: dict) -> list:
        actions, self.state_value, self.slots = run_submission_flow(
            self.state_value,
            event,
            self.slots,
            self.state,
            self.api,
            machine=self.machine,
            catalogue=self.catalogue,
        )
        return actions

    def submit(self, name: str | None = None, number: str | None = None) -> list:
        if name is not None:
            self.state.new_name = name
        if number is not None:
            self.state.new_number = number
        return self.dispatch({"type": "submit", "payload": {}})

    def delete(self, contact_id: str, name: str | None = None) -> list:
        return self.dispatch({"type": "delete", "payload": {"id": contact_id, "name": name}})

    def answer(self, confirmed: bool) -> list:
        return self.dispatch({"type": "confirm" if confirmed else "decline", "payload": {}})
