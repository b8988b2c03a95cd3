#!/usr/bin/env python3
"""Nova CLI - Chat with the project-management assistant.

Usage:
    # Interactive chat against a seeded in-memory store
    python main.py --demo

    # One-shot message in an existing session
    python main.py --session web_ana_1718000000000 --user ana --message "Muestra los proyectos"

    # Against the hosted backend
    python main.py --store supabase --user ana --new-session
"""

import sys
from typing import Optional

import click
from loguru import logger
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from contracts import AiMode, ChatRole, TaskStatus
from orchestrator import ChatOrchestrator
from store import DataStore, InMemoryStore, get_store
from config import settings


console = Console()

EXIT_WORDS = ("salir", "exit", "quit")


def configure_logging(verbose: bool = False) -> None:
    """Route loguru to stderr and, optionally, to a rotating log file."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else settings.log_level)
    if settings.log_file:
        logger.add(settings.log_file, level="DEBUG", rotation="10 MB", retention=5)


def seed_demo(store: InMemoryStore) -> None:
    """Sample projects and tasks for trying the assistant locally."""
    mars = store.add_project("Mars Logistics App")
    venus = store.add_project("Venus Portal", status="planning")
    store.add_project("Internal Tools", status="paused")

    store.add_task(mars.id, "Fix login", status=TaskStatus.IN_PROGRESS.value, assignees=["Ana"])
    store.add_task(mars.id, "Route optimizer")
    store.add_task(mars.id, "Release notes", status=TaskStatus.DONE.value)
    store.add_task(venus.id, "Landing page", status=TaskStatus.REVIEW.value)
    store.add_task(venus.id, "Billing integration")


def render_reply(reply) -> None:
    style = "magenta" if reply.mode == AiMode.AI else "blue"
    title = "Nova (AI)" if reply.mode == AiMode.AI else "Nova"
    console.print(Panel(Markdown(reply.content), title=title, border_style=style))
    if reply.refresh:
        console.print("[dim]Datos actualizados.[/dim]")


def print_history(orchestrator: ChatOrchestrator, session_id: str) -> None:
    entries = orchestrator.history(session_id)
    if not entries:
        console.print(f"[dim]No history for session {session_id}[/dim]")
        return
    for entry in entries:
        who = "[green]Tú[/green]" if entry.role == ChatRole.USER else "[blue]Nova[/blue]"
        console.print(f"{who} [dim]{entry.created_at:%Y-%m-%d %H:%M}[/dim]")
        console.print(Markdown(entry.content))


def chat_loop(orchestrator: ChatOrchestrator, session_id: str, user_id: str) -> None:
    console.print(Panel.fit(
        "[bold blue]Nova[/bold blue]\n"
        f"[dim]Session {session_id} - type 'salir' to quit[/dim]",
        border_style="blue"
    ))
    while True:
        try:
            text = console.input("[bold green]> [/bold green]")
        except (EOFError, KeyboardInterrupt):
            console.print()
            break
        if text.strip().lower() in EXIT_WORDS:
            break
        if not text.strip():
            continue
        render_reply(orchestrator.send(session_id, user_id, text))


@click.command()
@click.option(
    "--message", "-m",
    default=None,
    help="Send a single message and exit"
)
@click.option(
    "--session", "-s", "session_id",
    default=None,
    help="Session id to continue (default: a new one)"
)
@click.option(
    "--user", "-u", "user_id",
    default="local",
    help="User id (selects the AI configuration)"
)
@click.option(
    "--new-session",
    is_flag=True,
    help="Start a fresh session even if --session is given"
)
@click.option(
    "--clear-history",
    is_flag=True,
    help="Delete the session's chat history and pending flow, then exit"
)
@click.option(
    "--show-history",
    is_flag=True,
    help="Print the session's chat history, then exit"
)
@click.option(
    "--store", "store_backend",
    type=click.Choice(["memory", "supabase"]),
    default=None,
    help=f"Data store backend (default: {settings.store_backend})"
)
@click.option(
    "--demo",
    is_flag=True,
    help="Seed the in-memory store with sample projects and tasks"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Verbose output"
)
def main(
    message: Optional[str],
    session_id: Optional[str],
    user_id: str,
    new_session: bool,
    clear_history: bool,
    show_history: bool,
    store_backend: Optional[str],
    demo: bool,
    verbose: bool,
):
    """Nova: project-management assistant.

    Creates tasks, documents and projects from Spanish chat commands, asking
    follow-up questions when a command is incomplete.
    """
    configure_logging(verbose)

    store: DataStore = get_store(store_backend)
    if demo:
        if not isinstance(store, InMemoryStore):
            console.print("[red]Error: --demo only works with the memory store[/red]")
            sys.exit(1)
        seed_demo(store)

    orchestrator = ChatOrchestrator(store)
    if new_session or not session_id:
        session_id = orchestrator.new_session_id(user_id)

    if clear_history:
        orchestrator.clear_history(session_id)
        console.print(f"[green]Cleared session {session_id}[/green]")
        return

    if show_history:
        print_history(orchestrator, session_id)
        return

    if message is not None:
        if not message.strip():
            console.print("[red]Error: --message is empty[/red]")
            sys.exit(1)
        render_reply(orchestrator.send(session_id, user_id, message))
        console.print(f"[dim]Session:[/dim] {session_id}")
        return

    chat_loop(orchestrator, session_id, user_id)


if __name__ == "__main__":
    main()
