"""
Submission/deletion state machine for the phonebook client.

The machine is plain XState JSON (flows/submission_machine.json, openable in
Stately Studio). SubmissionMachine keeps the parsed config next to the
xstate-python Machine built from it, so callers pass one object around and
the two can never drift apart.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from xstate.machine import Machine


def _repo_root() -> Path:
    return Path(__file__).resolve().parent.parent.parent


def get_machine_path() -> Path:
    """Return path to the machine JSON (PHONEBOOK_MACHINE_PATH env or flows/submission_machine.json)."""
    path = os.environ.get("PHONEBOOK_MACHINE_PATH", "").strip()
    if path:
        return Path(path).resolve()
    return _repo_root() / "flows" / "submission_machine.json"


def _check_config(config: dict) -> None:
    for key in ("id", "initial", "states"):
        if key not in config:
            raise ValueError(f"Machine config is missing '{key}'")
    states = config["states"]
    if config["initial"] not in states:
        raise ValueError(f"initial state '{config['initial']}' must be a state")
    for name, node in states.items():
        for event, target in (node.get("on") or {}).items():
            if target not in states:
                raise ValueError(f"State '{name}' sends {event} to unknown state '{target}'")


@dataclass(frozen=True)
class SubmissionMachine:
    config: dict
    _instance: Machine = field(repr=False, compare=False)

    @classmethod
    def from_config(cls, config: dict) -> "SubmissionMachine":
        _check_config(config)
        return cls(config=config, _instance=Machine(config))

    @property
    def id(self) -> str:
        return self.config["id"]

    @property
    def initial(self) -> str:
        return self.config["initial"]

    def transition(self, state_value: str, event: str) -> str | None:
        """Next state for (state_value, event), or None when the event is not handled there."""
        try:
            state = self._instance.state_from(state_value)
            next_state = self._instance.transition(state, event)
        except (ValueError, KeyError):
            return None
        if next_state.value == state_value:
            return None
        return next_state.value


def load_machine(path: Path | None = None) -> SubmissionMachine:
    if path is None:
        path = get_machine_path()
    config = json.loads(path.read_text(encoding="utf-8"))
    return SubmissionMachine.from_config(config)


def transition(machine: SubmissionMachine, state_value: str, event: str) -> str | None:
    return machine.transition(state_value, event)


_default_machine: SubmissionMachine | None = None


def get_machine(cache: bool = True) -> SubmissionMachine:
    """Load the default machine (cached by default). Pass cache=False to reload."""
    global _default_machine
    if cache and _default_machine is not None:
        return _default_machine
    _default_machine = load_machine()
    return _default_machine
