"""``drill practice`` and ``drill plans`` command line front ends."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from ..core.logging import configure_logger
from ..core.workspace import WorkspaceError, ensure_workspace
from ..engine.config import ConfigError, EngineConfig, load_config
from ..engine.errors import GenerationError
from ..engine.models import (
    Account,
    Medium,
    Mode,
    PlanTier,
    SessionParams,
    UsageCounters,
    current_period,
)
from ..engine.service import PracticeEngine
from .runner import InputProvider, run_practice
from .view import render_generation_error, render_plans, render_usage


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="drill practice",
        description="Generate questions for a subject and practice them.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument("subject", help="Subject to practice, e.g. 'Physics'")
    p.add_argument(
        "--mode",
        choices=[mode.value for mode in Mode],
        default=Mode.QUICK.value,
    )
    p.add_argument("--topic", help="Unit to focus on (topic mode)")
    p.add_argument(
        "--timed",
        action="store_true",
        help=(
            "Count down proportionally and auto-submit at zero. The clock "
            "is checked when a command is entered, so an expired paper is "
            "submitted before that command applies"
        ),
    )
    p.add_argument(
        "--medium",
        choices=[medium.value for medium in Medium],
        help="Language of questions (defaults to the configured medium)",
    )
    p.add_argument(
        "--plan",
        choices=[tier.value for tier in PlanTier],
        default=PlanTier.FREE.value,
    )
    p.add_argument(
        "--questions-used",
        type=int,
        default=0,
        help="Questions already answered this period",
    )
    p.add_argument(
        "--papers-used",
        type=int,
        default=0,
        help="Papers already answered this period",
    )
    _add_common_arguments(p)
    return p


def build_plans_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="drill plans",
        description="Show what each plan tier may request.",
    )
    p.add_argument("--config", type=Path, help="Path to drill.toml")
    return p


def _add_common_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", type=Path, help="Path to drill.toml")
    p.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root (defaults to EXAM_DRILL_HOME or ~/.exam-drill)",
    )
    p.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror log output to stderr",
    )


def _account_from_args(
    args: argparse.Namespace, config: EngineConfig
) -> Account:
    usage = UsageCounters(
        questions_answered=max(0, args.questions_used),
        papers_answered=max(0, args.papers_used),
        period=current_period(),
    )
    return Account(
        plan=PlanTier(args.plan),
        medium=args.medium or config.generation.default_medium,
        usage=usage,
    )


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
    input_provider: Optional[InputProvider] = None,
    engine: Optional[PracticeEngine] = None,
) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    console = console or Console()

    try:
        layout = ensure_workspace(path=args.workspace)
        config = load_config(
            explicit_path=args.config, workspace_path=layout.home
        )
    except (ConfigError, WorkspaceError) as exc:
        parser.error(str(exc))

    logger, log_path = configure_logger(
        log_dir=layout.log_dir,
        level=config.logging.level,
        verbose=args.verbose or config.logging.verbose,
    )
    logger.debug("drill practice invoked", extra={"argv": list(argv or [])})

    engine = engine or PracticeEngine(config)
    account = _account_from_args(args, config)
    params = SessionParams(
        subject=args.subject,
        mode=Mode(args.mode),
        topic=args.topic,
        timed=args.timed,
        medium=account.medium,
    )

    with console.status(f"Preparing {params.title} for {params.subject}..."):
        try:
            session = engine.create_session(params, account)
        except GenerationError as exc:
            render_generation_error(console, params.subject, exc)
            console.print(f"[dim]Details logged to {log_path}[/]")
            return 1

    outcome = run_practice(
        session,
        console,
        input_provider or (lambda: console.input("[bold green]>[/] ")),
    )

    final_account = session.account or account
    entitlement = engine.config.entitlement_for(final_account.plan)
    if not outcome.submitted:
        console.print("[dim]Attempt discarded; usage unchanged.[/]")
    render_usage(console, entitlement, final_account.usage)
    return 0


def plans_main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
) -> int:
    parser = build_plans_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    try:
        config = load_config(explicit_path=args.config)
    except ConfigError as exc:
        parser.error(str(exc))
    render_plans(console or Console(), config.plans.values())
    return 0
