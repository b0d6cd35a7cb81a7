"""Rich renderers for practice sessions."""

from __future__ import annotations

from typing import Iterable

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..engine.errors import GenerationError
from ..engine.models import (
    OPTION_KEYS,
    PlanEntitlement,
    SessionSnapshot,
    UsageCounters,
)
from ..engine.timer import format_remaining

__all__ = [
    "render_generation_error",
    "render_plans",
    "render_question",
    "render_review",
    "render_summary",
    "render_usage",
]

_LOW_TIME_SECONDS = 60


def render_question(console: Console, snapshot: SessionSnapshot) -> None:
    question = snapshot.question
    if question is None:
        return
    header = Text.assemble(
        (f"Question {snapshot.cursor + 1}", "bold cyan"),
        (f" / {snapshot.total}", "dim"),
        ("  ·  ", "dim"),
        (snapshot.title, "magenta"),
    )
    if snapshot.timed:
        remaining = snapshot.remaining_seconds or 0
        style = "bold red" if remaining < _LOW_TIME_SECONDS else "bold"
        header.append("  ·  ", style="dim")
        header.append(format_remaining(remaining), style=style)
    console.print()
    console.rule(header)
    console.print(Text(question.text, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Option")
    for index, option in enumerate(question.options):
        chosen = index == snapshot.selected_index
        row = Text("• " if chosen else "  ")
        row.append(option, style="bold green" if chosen else "")
        table.add_row(OPTION_KEYS[index], row)
    console.print(table)

    advance_hint = "submit" if snapshot.is_last else "next"
    console.print(
        Text(
            f"Answered {snapshot.answered}/{snapshot.total} | Commands: "
            f"options [{', '.join(OPTION_KEYS)}], n ({advance_hint}), "
            "p (prev), submit, quit",
            style="dim",
        )
    )


def render_summary(console: Console, snapshot: SessionSnapshot) -> None:
    console.print()
    title = "Time's up!" if snapshot.is_timeout else "Paper Complete!"
    console.rule(Text(title, style="bold magenta"))
    console.print(
        Text(f"{snapshot.title} for {snapshot.subject}", style="dim")
    )

    overview = Table(show_header=False, box=box.MINIMAL_DOUBLE_HEAD)
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Questions", str(snapshot.total))
    overview.add_row("Answered", str(snapshot.answered))
    overview.add_row("Score", f"{snapshot.score}/{snapshot.total}")
    overview.add_row("Accuracy", f"{(snapshot.accuracy or 0.0) * 100:.0f}%")
    console.print(overview)
    console.print(Text("Commands: r (review), q (exit)", style="dim"))


def render_review(console: Console, snapshot: SessionSnapshot) -> None:
    console.print()
    console.rule(Text("In-depth Review", style="bold magenta"))
    for item in snapshot.review:
        border = "green" if item.is_correct else "red"
        body = Text()
        body.append("Your choice: ", style="dim")
        body.append(item.chosen_text, style="bold")
        body.append("\nCorrect: ", style="dim")
        body.append(item.correct_text, style="bold green")
        if item.explanation:
            body.append("\n\n")
            body.append(item.explanation, style="italic")
        console.print(
            Panel(
                body,
                title=f"{item.number}. {item.question.text}",
                title_align="left",
                border_style=border,
            )
        )
    console.print(Text("Commands: q (return)", style="dim"))


def render_generation_error(
    console: Console, subject: str, exc: GenerationError
) -> None:
    hint = (
        "You can try again, possibly with a different subject or topic."
        if exc.retryable
        else "Fix the configuration or plan before trying again."
    )
    console.print(
        Panel(
            f"{exc}\n\n{hint}",
            title=f"Could not prepare {subject} ({type(exc).__name__})",
            border_style="red" if not exc.retryable else "yellow",
        )
    )


def render_usage(
    console: Console, entitlement: PlanEntitlement, usage: UsageCounters
) -> None:
    console.print(
        Text.assemble(
            (f"{entitlement.tier.label} plan", "bold"),
            (f" · {usage.period} · ", "dim"),
            entitlement.describe_usage(usage),
        )
    )


def render_plans(console: Console, plans: Iterable[PlanEntitlement]) -> None:
    table = Table(title="Plans", box=box.SIMPLE)
    table.add_column("Plan", style="bold")
    table.add_column("Quick/topic", justify="right")
    table.add_column("Paper", justify="right")
    table.add_column("Modes")
    table.add_column("Questions / month", justify="right")
    table.add_column("Papers / month", justify="right")
    for plan in plans:
        table.add_row(
            plan.tier.label,
            str(plan.quick_count),
            str(plan.paper_count),
            ", ".join(sorted(mode.value for mode in plan.modes)),
            _quota(plan.monthly_questions),
            _quota(plan.monthly_papers),
        )
    console.print(table)


def _quota(value: int | None) -> str:
    return "unlimited" if value is None else str(value)
