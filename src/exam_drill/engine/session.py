"""Practice-attempt state machine.

A :class:`PracticeSession` moves one way through ``testing -> summary ->
review``. Scoring happens on the single transition out of ``testing`` and that
transition is the settle flag: manual submits, advancing past the last
question, and timer expiry all funnel into :meth:`PracticeSession.submit`,
which does nothing once the session has left ``testing``. None of the public
operations raise; invalid calls are no-ops.
"""

from __future__ import annotations

import logging
from typing import (
    TYPE_CHECKING,
    Callable,
    Dict,
    List,
    Optional,
    Sequence,
    Tuple,
)

from ..core.logging import component_logger
from .models import (
    OPTION_COUNT,
    Account,
    Question,
    ReviewItem,
    SessionParams,
    SessionSnapshot,
    ViewState,
)

if TYPE_CHECKING:  # pragma: no cover
    from .timer import SessionTimer

__all__ = ["PracticeSession", "SubmitHook", "SettleListener"]

# Called once with (question_count, is_full_paper) when the session is scored.
SubmitHook = Callable[[int, bool], None]
# Called once when the session leaves ``testing`` (scored or discarded).
SettleListener = Callable[["PracticeSession"], None]


class PracticeSession:
    def __init__(
        self,
        params: SessionParams,
        questions: Sequence[Question],
        *,
        is_full_paper: bool = False,
        on_submit: Optional[SubmitHook] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if not questions:
            raise ValueError("a practice session needs at least one question")
        self.params = params
        self.questions: Tuple[Question, ...] = tuple(questions)
        self.is_full_paper = is_full_paper
        self.cursor = 0
        self.answers: Dict[int, int] = {}
        self.view = ViewState.TESTING
        self.score: Optional[int] = None
        self.is_timeout = False
        self.remaining_seconds: Optional[int] = None
        self.discarded = False
        self.account: Optional[Account] = None
        self.timer: Optional["SessionTimer"] = None
        self._on_submit = on_submit
        self._settle_listeners: List[SettleListener] = []
        self._logger = component_logger("session", logger)

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def current(self) -> Question:
        return self.questions[self.cursor]

    @property
    def is_testing(self) -> bool:
        return self.view is ViewState.TESTING and not self.discarded

    def add_settle_listener(self, listener: SettleListener) -> None:
        self._settle_listeners.append(listener)

    def record_answer(self, option_index: int) -> bool:
        """Record ``option_index`` for the question under the cursor."""

        if not self.is_testing or not 0 <= option_index < OPTION_COUNT:
            return False
        self.answers[self.cursor] = option_index
        return True

    def selected_for(self, index: Optional[int] = None) -> Optional[int]:
        return self.answers.get(self.cursor if index is None else index)

    def advance(self) -> None:
        """Move to the next question, or submit from the last one."""

        if not self.is_testing:
            return
        if self.cursor < self.total - 1:
            self.cursor += 1
        else:
            self.submit()

    def previous(self) -> None:
        if self.is_testing and self.cursor > 0:
            self.cursor -= 1

    def goto(self, index: int) -> None:
        if self.is_testing and 0 <= index < self.total:
            self.cursor = index

    def submit(self) -> None:
        """Score the session once and move it to the summary view."""

        if not self.is_testing:
            return
        self.score = sum(
            1
            for index, chosen in self.answers.items()
            if chosen == self.questions[index].correct_index
        )
        self.view = ViewState.SUMMARY
        self._logger.info(
            "Session submitted",
            extra={
                "subject": self.params.subject,
                "mode": self.params.mode.value,
                "score": self.score,
                "total": self.total,
                "answered": len(self.answers),
                "timeout": self.is_timeout,
            },
        )
        self._settle()
        if self._on_submit is not None:
            self._on_submit(self.total, self.is_full_paper)

    def expire(self) -> None:
        """Timer entry point: flag the timeout and submit."""

        if not self.is_testing:
            return
        self.is_timeout = True
        self.submit()

    def open_review(self) -> None:
        if self.view is ViewState.SUMMARY and not self.discarded:
            self.view = ViewState.REVIEW

    def exit(self) -> None:
        """Discard the session from any state; an unscored attempt stays so."""

        if self.discarded:
            return
        was_testing = self.is_testing
        self.discarded = True
        self._logger.info(
            "Session discarded",
            extra={"view": self.view.value, "unscored": was_testing},
        )
        if was_testing:
            self._settle()

    def review(self) -> Tuple[ReviewItem, ...]:
        if self.score is None:
            return ()
        items = []
        for index, question in enumerate(self.questions):
            chosen = self.answers.get(index)
            items.append(
                ReviewItem(
                    number=index + 1,
                    question=question,
                    chosen_index=chosen,
                    is_correct=chosen == question.correct_index,
                )
            )
        return tuple(items)

    def snapshot(self) -> SessionSnapshot:
        testing = self.view is ViewState.TESTING
        return SessionSnapshot(
            title=self.params.title,
            subject=self.params.subject,
            view=self.view,
            cursor=self.cursor,
            total=self.total,
            question=self.current if testing else None,
            selected_index=self.selected_for() if testing else None,
            answered=len(self.answers),
            timed=self.params.timed,
            remaining_seconds=self.remaining_seconds,
            is_timeout=self.is_timeout,
            score=self.score,
            discarded=self.discarded,
            review=self.review(),
        )

    def _settle(self) -> None:
        listeners, self._settle_listeners = self._settle_listeners, []
        for listener in listeners:
            listener(self)
