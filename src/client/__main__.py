"""
Terminal phonebook client: list, filter, add, update and delete contacts.
Run: python -m client (from repo root, with .env or env vars set).
"""
import logging
import re
from pathlib import Path

from dotenv import load_dotenv

_REPO_ROOT = Path(__file__).resolve().parent.parent.parent
for path in (_REPO_ROOT / ".env", Path.cwd() / ".env"):
    if path.exists():
        load_dotenv(path)
        break

import httpx
import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from client.phonebook_api import ApiError, PhonebookApi, get_api_url
from client.submission import AskConfirmation, PhonebookController

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.WARNING,
)
logger = logging.getLogger(__name__)

app = typer.Typer(
    add_completion=False,
    help="phonebook: list, filter, add and delete contacts on a phonebook server.",
)
console = Console()

HELP = (
    "Commands: add | delete <name> | filter [text] | list | info | help | quit"
)


def _render(controller: PhonebookController) -> None:
    state = controller.state
    notification = state.notification
    if notification is not None:
        style = "red" if notification.is_error else "green"
        console.print(Panel(notification.text, border_style=style, style=style))
    title = "Numbers" if not state.filter_text else f"Numbers (filter: {state.filter_text})"
    table = Table(title=title, show_lines=False)
    table.add_column("Name", style="bold")
    table.add_column("Number")
    for contact in state.visible_contacts():
        table.add_row(contact.name, contact.number)
    console.print(table)


def _settle(controller: PhonebookController, actions: list) -> None:
    """Answer confirmation prompts until the machine is back to editing."""
    while True:
        prompt = next((a for a in actions if isinstance(a, AskConfirmation)), None)
        if prompt is None or not controller.awaiting_answer:
            return
        actions = controller.answer(Confirm.ask(prompt.text, default=False))


def _add(controller: PhonebookController) -> None:
    name = Prompt.ask("Name")
    number = Prompt.ask("Number")
    _settle(controller, controller.submit(name.strip(), number.strip()))


def _delete(controller: PhonebookController, name: str) -> None:
    contact = controller.state.find_by_name(name)
    if contact is None:
        contact = next(
            (c for c in controller.state.visible_contacts() if c.name.lower() == name.lower()),
            None,
        )
    _settle(controller, controller.delete(contact.id if contact else "", name=name))


def _info(api: PhonebookApi) -> None:
    try:
        html = api.info()
    except (ApiError, httpx.HTTPError) as e:
        console.print(f"[red]Could not load info:[/red] {e}")
        return
    text = re.sub(r"</p>\s*<p>", "\n", html)
    console.print(re.sub(r"<[^>]+>", "", text), markup=False)


@app.command()
def run(
    api_url: str = typer.Option(
        None,
        "--api-url",
        help="Phonebook server base URL (default: PHONEBOOK_API_URL or http://localhost:3001).",
    ),
) -> None:
    """Start the interactive phonebook client."""
    with PhonebookApi(api_url or get_api_url()) as api:
        controller = PhonebookController(api=api)
        try:
            controller.load()
        except (ApiError, httpx.HTTPError) as e:
            console.print(f"[red]Could not load the phonebook:[/red] {e}")
            raise typer.Exit(code=1) from e
        console.print(HELP)
        _render(controller)
        while True:
            line = Prompt.ask("[bold]phonebook[/bold]").strip()
            command, _, arg = line.partition(" ")
            command = command.lower()
            arg = arg.strip()
            if command in ("quit", "exit", "q"):
                break
            if command == "add":
                _add(controller)
            elif command == "delete" and arg:
                _delete(controller, arg)
            elif command == "filter":
                controller.state.filter_text = arg
            elif command == "info":
                _info(api)
                continue
            elif command not in ("list", ""):
                console.print(HELP)
                continue
            _render(controller)


if __name__ == "__main__":
    app()
