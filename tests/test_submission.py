"""Tests for the XState submission machine, message catalogue and the client flow end to end."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from api.main import app, get_service
from client.messages import get_messages_path, load_catalogue
from client.phonebook_api import PhonebookApi
from client.submission import (
    AskConfirmation,
    PhonebookController,
    ShowNotification,
    event_to_xstate,
)
from client.xstate_machine import SubmissionMachine, load_machine, transition
from phonebook.application import ContactData, ContactService
from phonebook.infrastructure import InMemoryContactRepository


@pytest.fixture
def service():
    return ContactService(InMemoryContactRepository())


@pytest.fixture
def controller(service):
    app.dependency_overrides[get_service] = lambda: service
    try:
        controller = PhonebookController(api=PhonebookApi(client=TestClient(app)))
        controller.load()
        yield controller
    finally:
        app.dependency_overrides.clear()


def _notifications(actions):
    return [a.notification for a in actions if isinstance(a, ShowNotification)]


def test_xstate_machine_transition():
    machine = load_machine()
    assert machine.initial == "editing"
    assert transition(machine, "editing", "SUBMIT") == "checking_duplicate"
    assert transition(machine, "checking_duplicate", "DUPLICATE") == "awaiting_confirmation"
    assert transition(machine, "awaiting_confirmation", "CONFIRM") == "submitting_update"
    assert transition(machine, "awaiting_confirmation", "DECLINE") == "cancelled"
    assert transition(machine, "checking_duplicate", "NEW") == "submitting_create"
    assert transition(machine, "submitting_create", "DONE") == "editing"
    assert transition(machine, "editing", "CONFIRM") is None


def _two_state_config(machine_id: str, target: str) -> dict:
    return {
        "id": machine_id,
        "initial": "idle",
        "states": {
            "idle": {"on": {"GO": target}},
            "left": {"on": {"BACK": "idle"}},
            "right": {"on": {"BACK": "idle"}},
        },
    }


def test_machines_built_from_different_configs_stay_separate():
    left = SubmissionMachine.from_config(_two_state_config("left_machine", "left"))
    right = SubmissionMachine.from_config(_two_state_config("right_machine", "right"))
    for _ in range(3):
        fresh = SubmissionMachine.from_config(_two_state_config("fresh", "right"))
        assert transition(fresh, "idle", "GO") == "right"
    assert transition(left, "idle", "GO") == "left"
    assert transition(right, "idle", "GO") == "right"


def test_load_machine_from_custom_file(tmp_path):
    path = tmp_path / "machine.json"
    path.write_text(json.dumps(_two_state_config("custom", "left")))
    machine = load_machine(path)
    assert machine.id == "custom"
    assert transition(machine, "idle", "GO") == "left"
    assert transition(load_machine(), "editing", "SUBMIT") == "checking_duplicate"


def test_machine_config_with_unknown_target_rejected():
    with pytest.raises(ValueError, match="unknown state"):
        SubmissionMachine.from_config(_two_state_config("broken", "nowhere"))


def test_event_to_xstate():
    assert event_to_xstate({"type": "submit"}) == "SUBMIT"
    assert event_to_xstate({"type": "delete", "payload": {"id": "x"}}) == "DELETE"
    assert event_to_xstate({"type": "confirm"}) == "CONFIRM"
    assert event_to_xstate({"type": "decline"}) == "DECLINE"
    assert event_to_xstate({"type": "other"}) is None


def test_load_catalogue():
    path = get_messages_path()
    assert path.name == "phonebook.yaml"
    catalogue = load_catalogue(path)
    assert catalogue["notification_seconds"] == 5
    assert "{name}" in catalogue["messages"]["confirm_replace"]


def test_load_catalogue_missing_message(tmp_path):
    (tmp_path / "messages.yaml").write_text("messages:\n  added: 'Added {name}'\n")
    with pytest.raises(ValueError, match="missing"):
        load_catalogue(tmp_path / "messages.yaml")


def test_submit_new_contact_adds_and_clears_form(controller, service):
    actions = controller.submit("Ada", "09-1234567")

    assert controller.state_value == "editing"
    assert service.count() == 1
    assert [c.name for c in controller.state.contacts] == ["Ada"]
    assert controller.state.new_name == ""
    assert controller.state.new_number == ""
    notes = _notifications(actions)
    assert notes[-1].text == "Added Ada"
    assert not notes[-1].is_error


def test_submit_duplicate_waits_for_confirmation_without_request(controller, service):
    service.create(ContactData(name="Ada", number="09-1234567"))
    controller.load()

    actions = controller.submit("Ada", "09-7654321")

    assert controller.state_value == "awaiting_confirmation"
    assert controller.awaiting_answer
    prompts = [a for a in actions if isinstance(a, AskConfirmation)]
    assert prompts[0].text == "Ada is already added to phonebook, replace the old number with a new one?"
    assert service.list_all()[0].number == "09-1234567"


def test_confirmed_overwrite_syncs_server_and_cache(controller, service):
    ada = service.create(ContactData(name="Ada", number="09-1234567"))
    controller.load()

    controller.submit("Ada", "09-7654321")
    actions = controller.answer(True)

    assert controller.state_value == "editing"
    stored = service.list_all()
    assert [(c.id, c.name, c.number) for c in stored] == [(ada.id, "Ada", "09-7654321")]
    assert [(c.id, c.number) for c in controller.state.contacts] == [(ada.id, "09-7654321")]
    assert _notifications(actions)[-1].text == "Updated Ada"
    assert controller.state.new_name == ""


def test_declined_overwrite_sends_nothing(controller, service):
    service.create(ContactData(name="Ada", number="09-1234567"))
    controller.load()

    controller.submit("Ada", "09-7654321")
    actions = controller.answer(False)

    assert controller.state_value == "editing"
    assert controller.slots == {}
    assert _notifications(actions) == []
    assert service.list_all()[0].number == "09-1234567"
    assert controller.state.contacts[0].number == "09-1234567"
    assert controller.state.new_number == "09-7654321"


def test_overwrite_of_removed_contact_reports_already_removed(controller, service):
    ada = service.create(ContactData(name="Ada", number="09-1234567"))
    controller.load()
    service.delete_by_id(ada.id)

    controller.submit("Ada", "09-7654321")
    actions = controller.answer(True)

    note = _notifications(actions)[-1]
    assert note.text == "Information of Ada has already been removed from server"
    assert note.is_error
    # cache is left as it was
    assert [c.id for c in controller.state.contacts] == [ada.id]
    assert service.count() == 0


def test_create_validation_error_is_shown_verbatim(controller, service):
    actions = controller.submit("Ada", "1234-5678")

    note = _notifications(actions)[-1]
    assert note.is_error
    assert note.text.startswith("Person validation failed: number:")
    assert controller.state.contacts == []
    assert controller.state.new_name == "Ada"
    assert service.count() == 0


def test_delete_after_confirmation(controller, service):
    ada = service.create(ContactData(name="Ada", number="09-1234567"))
    controller.load()

    actions = controller.delete(ada.id)
    assert controller.state_value == "awaiting_delete_confirmation"
    assert [a.text for a in actions if isinstance(a, AskConfirmation)] == ["Delete Ada?"]

    controller.answer(True)
    assert controller.state_value == "editing"
    assert controller.state.contacts == []
    assert service.count() == 0


def test_delete_declined_keeps_contact(controller, service):
    ada = service.create(ContactData(name="Ada", number="09-1234567"))
    controller.load()

    controller.delete(ada.id)
    controller.answer(False)
    assert [c.id for c in controller.state.contacts] == [ada.id]
    assert service.count() == 1


def test_delete_unknown_contact(controller):
    actions = controller.delete("", name="Nobody")
    assert controller.state_value == "editing"
    assert _notifications(actions)[-1].text == "Nobody is not in the phonebook"


def test_filter_scenario(controller, service):
    service.create(ContactData(name="Ada", number="09-1234567"))
    service.create(ContactData(name="Adamina", number="09-7654321"))
    controller.load()
    controller.state.filter_text = "ada"
    assert [c.name for c in controller.state.visible_contacts()] == ["Ada"]


def test_unreachable_server_becomes_error_notification():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    api = PhonebookApi(client=httpx.Client(base_url="http://phonebook.test", transport=httpx.MockTransport(handler)))
    controller = PhonebookController(api=api)
    actions = controller.submit("Ada", "09-1234567")
    note = _notifications(actions)[-1]
    assert note.is_error
    assert note.text == "Could not reach the phonebook server"
    assert controller.state_value == "editing"


ADA_ID = "0b6f4d8e-3c1a-4f3e-9a57-7f1c2d3e4b5a"


def _delete_controller(delete_handler) -> PhonebookController:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=[{"id": ADA_ID, "name": "Ada", "number": "09-1234567"}])
        return delete_handler(request)

    api = PhonebookApi(client=httpx.Client(base_url="http://phonebook.test", transport=httpx.MockTransport(handler)))
    controller = PhonebookController(api=api)
    controller.load()
    return controller


def test_delete_answered_with_error_still_drops_cached_contact():
    controller = _delete_controller(lambda request: httpx.Response(500, json={"error": "store unavailable"}))

    controller.delete(ADA_ID)
    actions = controller.answer(True)

    assert controller.state_value == "editing"
    assert controller.state.contacts == []
    note = _notifications(actions)[-1]
    assert note.is_error
    assert note.text == "store unavailable"


def test_delete_without_response_keeps_cached_contact():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    controller = _delete_controller(refuse)

    controller.delete(ADA_ID)
    actions = controller.answer(True)

    assert [c.id for c in controller.state.contacts] == [ADA_ID]
    assert _notifications(actions)[-1].text == "Could not reach the phonebook server"
