from ._main import build_arg_parser, main, plans_main
from .runner import (
    PracticeOutcome,
    SessionCommand,
    apply_command,
    parse_session_command,
    run_practice,
)
from .view import (
    render_generation_error,
    render_plans,
    render_question,
    render_review,
    render_summary,
    render_usage,
)

__all__ = [
    "build_arg_parser",
    "main",
    "plans_main",
    "PracticeOutcome",
    "SessionCommand",
    "apply_command",
    "parse_session_command",
    "run_practice",
    "render_generation_error",
    "render_plans",
    "render_question",
    "render_review",
    "render_summary",
    "render_usage",
]
