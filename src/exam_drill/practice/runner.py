"""Synchronous Rich loop that drives a practice session from typed commands.

The loop is single-threaded. A timed session's countdown is polled before
each render and again after each command is read, so a budget that runs out
while the prompt is waiting submits the session before that command is
applied. A late answer then falls on a session that has already been
scored, and ``record_answer`` ignores it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Optional

from rich.console import Console

from ..engine.models import OPTION_KEYS, SessionSnapshot, ViewState
from ..engine.session import PracticeSession
from .view import render_question, render_review, render_summary

InputProvider = Callable[[], str]
CommandType = Literal["select", "next", "prev", "submit", "review", "quit"]


@dataclass(frozen=True)
class SessionCommand:
    """Normalized user command parsed from console input."""

    type: CommandType
    option: Optional[int] = None


@dataclass(frozen=True)
class PracticeOutcome:
    snapshot: SessionSnapshot

    @property
    def submitted(self) -> bool:
        return self.snapshot.score is not None


def parse_session_command(raw: Optional[str]) -> Optional[SessionCommand]:
    if raw is None:
        return None
    text = raw.strip().lower()
    if not text:
        return None
    if text in {"n", "next"}:
        return SessionCommand("next")
    if text in {"p", "prev", "previous"}:
        return SessionCommand("prev")
    if text in {"s", "submit"}:
        return SessionCommand("submit")
    if text in {"r", "review"}:
        return SessionCommand("review")
    if text in {"q", "quit", "exit"}:
        return SessionCommand("quit")
    if len(text) == 1 and text.upper() in OPTION_KEYS:
        return SessionCommand("select", OPTION_KEYS.index(text.upper()))
    return None


def apply_command(
    command: SessionCommand, session: PracticeSession, console: Console
) -> None:
    if command.type == "select" and command.option is not None:
        if session.record_answer(command.option):
            console.print(f"Selected [bold]{OPTION_KEYS[command.option]}[/].")
    elif command.type == "next":
        session.advance()
    elif command.type == "prev":
        session.previous()
    elif command.type == "submit":
        session.submit()
    elif command.type == "review":
        session.open_review()
    elif command.type == "quit":
        if session.is_testing:
            console.print(
                "\n[bold yellow]Leaving without submitting; this attempt "
                "will not be scored.[/]"
            )
        session.exit()


def run_practice(
    session: PracticeSession,
    console: Console,
    input_provider: InputProvider,
) -> PracticeOutcome:
    """Drive ``session`` until the user exits and return its final state."""

    timeout_announced = False
    while not session.discarded:
        _poll_timer(session)
        snapshot = session.snapshot()
        if snapshot.is_timeout and not timeout_announced:
            console.print(
                "\n[bold red]Time's up! Your paper was submitted.[/]"
            )
            timeout_announced = True
        if snapshot.view is ViewState.TESTING:
            render_question(console, snapshot)
        elif snapshot.view is ViewState.SUMMARY:
            render_summary(console, snapshot)
        else:
            render_review(console, snapshot)

        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            session.exit()
            break
        if _poll_timer(session) and not session.is_testing:
            continue
        command = parse_session_command(raw)
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        apply_command(command, session, console)

    return PracticeOutcome(session.snapshot())


def _poll_timer(session: PracticeSession) -> int:
    if session.timer is None:
        return 0
    return session.timer.poll()
