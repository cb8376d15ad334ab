"""Typer CLI for Power Sticky."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from power_sticky.app.main import build_host, open_session, shutdown
from power_sticky.core.notes import Confirm
from power_sticky.core.settings import load_settings
from power_sticky.core.state import Theme
from power_sticky.storage.repository import dumps_snapshot
from power_sticky.ui.session import NoteSession
from power_sticky.utils.time import to_iso

T = TypeVar("T")

app = typer.Typer(help="Power Sticky notes CLI")
console = Console()
err_console = Console(stderr=True)

notes_app = typer.Typer(help="Note operations")
state_app = typer.Typer(help="Stored state")
settings_app = typer.Typer(help="Application preferences")
window_app = typer.Typer(help="Window preferences")
config_app = typer.Typer(help="Configuration")


@app.callback()
def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@config_app.command("show")
def config_show() -> None:
    settings = load_settings()
    console.print(f"data_dir={settings.data_dir}")
    console.print(f"store_path={settings.store_path}")
    console.print(f"save_debounce_s={settings.save_debounce_s}")
    console.print(f"save_retries={settings.save_retries}")
    console.print(f"log_level={settings.log_level}")
    console.print(f"autostart_dir={settings.autostart_dir}")


@state_app.command("show")
def state_show() -> None:
    async def _show(session: NoteSession) -> str:
        return dumps_snapshot(session.snapshot)

    console.print_json(_run(_show))


@state_app.command("path")
def state_path() -> None:
    console.print(str(load_settings().store_path))


@notes_app.command("list")
def notes_list(query: str = typer.Option("", "--query", "-q")) -> None:
    async def _list(session: NoteSession) -> None:
        selected = session.selected
        for note in session.search(query):
            marker = "*" if selected and note.id == selected.id else " "
            pin = "P" if note.pinned else " "
            console.print(
                f"{marker}{pin} {note.id} | {note.title} | {to_iso(note.updated_at)}",
                markup=False,
                soft_wrap=True,
            )

    _run(_list)


@notes_app.command("add")
def notes_add(title: str | None = None, content: str | None = None) -> None:
    async def _add(session: NoteSession) -> str:
        note = session.create_note()
        if content:
            session.update_content(content, note.id)
        if title:
            session.rename_note(title, note.id)
        return note.id

    console.print(f"created note {_run(_add)}")


@notes_app.command("write")
def notes_write(note_id: str, text: str) -> None:
    async def _write(session: NoteSession) -> None:
        session.update_content(text, _resolve(session, note_id))

    _run(_write)


@notes_app.command("rename")
def notes_rename(note_id: str, title: str) -> None:
    async def _rename(session: NoteSession) -> None:
        session.rename_note(title, _resolve(session, note_id))

    _run(_rename)


@notes_app.command("pin")
def notes_pin(note_id: str) -> None:
    async def _pin(session: NoteSession) -> bool:
        target = _resolve(session, note_id)
        session.toggle_pin(target)
        note = session.notes.get(target)
        return bool(note and note.pinned)

    console.print("pinned" if _run(_pin) else "unpinned")


@notes_app.command("move")
def notes_move(note_id: str, direction: str) -> None:
    if direction not in ("up", "down"):
        raise typer.BadParameter("direction must be 'up' or 'down'")

    async def _move(session: NoteSession) -> None:
        session.reorder_note("up" if direction == "up" else "down", _resolve(session, note_id))

    _run(_move)


@notes_app.command("select")
def notes_select(note_id: str) -> None:
    async def _select(session: NoteSession) -> None:
        session.select_note(_resolve(session, note_id))

    _run(_select)


@notes_app.command("delete")
def notes_delete(
    note_id: str, yes: bool = typer.Option(False, "--yes", "-y")
) -> None:
    async def _delete(session: NoteSession) -> bool:
        return await session.delete_note(_resolve(session, note_id))

    confirm: Confirm = _accept if yes else _prompt
    console.print("deleted" if _run(_delete, confirm) else "kept")


@settings_app.command("theme")
def settings_theme(theme: Theme) -> None:
    async def _theme(session: NoteSession) -> None:
        session.set_theme(theme)

    _run(_theme)


@settings_app.command("startup")
def settings_startup(enabled: bool = typer.Option(True, "--on/--off")) -> None:
    async def _startup(session: NoteSession) -> bool:
        return await session.set_launch_on_startup(enabled)

    actual = _run(_startup)
    console.print(f"launch_on_startup={actual}")


@window_app.command("always-on-top")
def window_always_on_top(enabled: bool = typer.Option(True, "--on/--off")) -> None:
    async def _always_on_top(session: NoteSession) -> bool:
        return await session.set_always_on_top(enabled)

    actual = _run(_always_on_top)
    console.print(f"always_on_top={actual}")


app.add_typer(notes_app, name="notes")
app.add_typer(state_app, name="state")
app.add_typer(settings_app, name="settings")
app.add_typer(window_app, name="window")
app.add_typer(config_app, name="config")


def _run(action: Callable[[NoteSession], Awaitable[T]], confirm: Confirm | None = None) -> T:
    settings = load_settings()

    async def _main() -> T:
        host = build_host(settings)
        session = await open_session(host, settings, confirm or _decline)
        try:
            return await action(session)
        finally:
            if not await shutdown(host, session):
                err_console.print("[red]Changes could not be saved[/red]")

    return asyncio.run(_main())


def _resolve(session: NoteSession, prefix: str) -> str:
    matches = [note.id for note in session.notes.notes if note.id.startswith(prefix)]
    if not matches:
        raise typer.BadParameter(f"No note matches '{prefix}'")
    if len(matches) > 1 and prefix not in matches:
        raise typer.BadParameter(f"'{prefix}' matches {len(matches)} notes")
    return prefix if prefix in matches else matches[0]


def _accept(prompt: str) -> bool:
    return True


def _decline(prompt: str) -> bool:
    return False


def _prompt(prompt: str) -> bool:
    return typer.confirm(prompt, default=False)


if __name__ == "__main__":  # pragma: no cover - CLI entry
    app()
