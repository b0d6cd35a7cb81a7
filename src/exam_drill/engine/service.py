"""Caller-facing entry point that wires generation, sessions and metering."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..core.logging import component_logger
from .config import EngineConfig, default_config
from .gateway import GenerationGateway
from .models import Account, SessionParams
from .session import PracticeSession
from .timer import SessionTimer
from .usage import UsageAccountant

__all__ = ["PracticeEngine", "UsageCallback"]

UsageCallback = Callable[[Account], None]


class PracticeEngine:
    """Create practice sessions for an account.

    ``create_session`` is the only operation that can fail; it raises a
    :class:`~exam_drill.engine.errors.GenerationError` subclass and never
    returns an empty session. Once created, a session settles through its own
    total operations, and on submit the usage accountant runs exactly once.
    The updated account is stored on ``session.account`` and handed to
    ``on_usage`` so the caller can persist it.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        gateway: Optional[GenerationGateway] = None,
        accountant: Optional[UsageAccountant] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config or default_config()
        self._logger = component_logger("engine", logger)
        self.gateway = gateway or GenerationGateway(self.config)
        self.accountant = accountant or UsageAccountant(
            full_paper_threshold=self.config.usage.full_paper_threshold
        )

    def create_session(
        self,
        params: SessionParams,
        account: Account,
        *,
        on_usage: Optional[UsageCallback] = None,
    ) -> PracticeSession:
        entitlement = self.config.entitlement_for(account.plan)
        usage = self.accountant.current_usage(account.usage)
        questions = self.gateway.request_questions(
            params.subject,
            mode=params.mode,
            entitlement=entitlement,
            usage=usage,
            topic=params.topic,
            medium=params.medium or account.medium,
        )

        def meter(question_count: int, is_full_paper: bool) -> None:
            updated = self.accountant.apply_usage(
                session.account or account, question_count, is_full_paper
            )
            session.account = updated
            if on_usage is not None:
                on_usage(updated)

        session = PracticeSession(
            params,
            questions,
            is_full_paper=self.accountant.is_full_paper(
                params.mode, len(questions)
            ),
            on_submit=meter,
        )
        session.account = account
        if params.timed:
            budget = self.config.timing.budget_for(session.total)
            session.timer = SessionTimer(session, budget)

        self._logger.info(
            "Session created",
            extra={
                "subject": params.subject,
                "mode": params.mode.value,
                "questions": session.total,
                "timed": params.timed,
                "budget_seconds": session.remaining_seconds,
                "full_paper": session.is_full_paper,
            },
        )
        return session
