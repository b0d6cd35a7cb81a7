"""Record question and paper consumption against an account."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Callable, Optional

from ..core.logging import component_logger
from .models import Account, Mode, UsageCounters, current_period

__all__ = ["UsageAccountant"]


class UsageAccountant:
    """Meters completed sessions. Quotas are enforced at request time.

    Counters belong to the caller's account; this class only ever returns
    updated copies of them.
    """

    def __init__(
        self,
        *,
        full_paper_threshold: int = 25,
        today: Callable[[], date] = date.today,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.full_paper_threshold = full_paper_threshold
        self._today = today
        self._logger = component_logger("usage", logger)

    def is_full_paper(self, mode: Mode, question_count: int) -> bool:
        """Whether a session of ``question_count`` counts as a paper."""

        return mode.is_paper and question_count >= self.full_paper_threshold

    def current_usage(self, counters: UsageCounters) -> UsageCounters:
        """Return ``counters`` reset to zero if their period has ended."""

        period = current_period(self._today())
        if counters.period == period:
            return counters
        self._logger.info(
            "Usage period rolled over",
            extra={"previous_period": counters.period, "period": period},
        )
        return UsageCounters(period=period)

    def apply_usage(
        self, account: Account, question_count: int, is_full_paper: bool
    ) -> Account:
        usage = self.current_usage(account.usage)
        papers = usage.papers_answered + (1 if is_full_paper else 0)
        updated = replace(
            usage,
            questions_answered=usage.questions_answered + question_count,
            papers_answered=papers,
        )
        self._logger.info(
            "Recorded session usage",
            extra={
                "plan": account.plan.value,
                "question_count": question_count,
                "full_paper": is_full_paper,
                "questions_answered": updated.questions_answered,
                "papers_answered": updated.papers_answered,
            },
        )
        return replace(account, usage=updated)
