"""Recover the JSON array of question records from a free-form reply."""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from ..core.logging import component_logger
from .errors import ParseError

__all__ = ["extract"]


def _load_array(payload: str) -> Optional[List[Any]]:
    try:
        data = json.loads(payload)
    except (ValueError, RecursionError):
        return None
    return data if isinstance(data, list) else None


def _bracketed(text: str) -> Optional[str]:
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def extract(
    raw_text: str, *, logger: Optional[logging.Logger] = None
) -> List[Any]:
    """Return the records contained in ``raw_text``.

    The stripped text is parsed as-is first. Failing that, the span from the
    first ``[`` to the last ``]`` is parsed, which tolerates prose preambles,
    trailing commentary and markdown fences. Anything else (a truncated
    array, or one nested too deeply to decode) raises :class:`ParseError`
    with the original text; broken payloads are never repaired.
    """
    log = component_logger("extractor", logger)
    text = (raw_text or "").strip()

    records = _load_array(text)
    if records is not None:
        return records

    candidate = _bracketed(text)
    if candidate is not None:
        records = _load_array(candidate)
        if records is not None:
            log.debug(
                "Recovered array from surrounding text",
                extra={
                    "leading_chars": text.find("["),
                    "record_count": len(records),
                },
            )
            return records

    log.warning(
        "Reply did not contain a parseable JSON array",
        extra={"length": len(text), "preview": text[:200]},
    )
    raise ParseError("could not parse a JSON array from the reply", raw_text)
