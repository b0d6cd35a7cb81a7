"""Filter raw records down to well-formed five-option questions."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Tuple

from ..core.logging import component_logger
from .models import OPTION_COUNT, Question

__all__ = ["rejection_reason", "validate"]


def rejection_reason(record: Any) -> Optional[str]:
    """Return why ``record`` is not a usable question, or ``None``."""

    if not isinstance(record, dict):
        return "record is not an object"
    text = record.get("question")
    if not isinstance(text, str) or not text.strip():
        return "question text missing or empty"
    options = record.get("options")
    if not isinstance(options, list) or len(options) != OPTION_COUNT:
        return f"options must be a list of exactly {OPTION_COUNT} entries"
    if not all(isinstance(option, str) for option in options):
        return "options must all be strings"
    index = record.get("correctAnswerIndex")
    # bool is an int subclass; True would otherwise pass as index 1.
    if isinstance(index, bool) or not isinstance(index, int):
        return "correctAnswerIndex must be an integer"
    if not 0 <= index < OPTION_COUNT:
        return f"correctAnswerIndex {index} out of range"
    if not isinstance(record.get("explanation"), str):
        return "explanation missing"
    return None


def validate(
    records: Iterable[Any], *, logger: Optional[logging.Logger] = None
) -> Tuple[Question, ...]:
    """Return the well-formed questions in ``records``, in order.

    Never raises; malformed records are logged and dropped.
    """
    log = component_logger("validator", logger)
    accepted: List[Question] = []
    for position, record in enumerate(records):
        reason = rejection_reason(record)
        if reason is not None:
            log.info(
                "Dropped malformed question record",
                extra={"position": position, "reason": reason},
            )
            continue
        accepted.append(
            Question(
                text=record["question"].strip(),
                options=tuple(record["options"]),
                correct_index=record["correctAnswerIndex"],
                explanation=record["explanation"],
            )
        )
    return tuple(accepted)
