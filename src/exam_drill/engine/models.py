"""Value types shared by the generation pipeline and practice sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

OPTION_COUNT = 5
OPTION_KEYS = "ABCDE"


class Mode(str, Enum):
    """Practice style requested for a session."""

    QUICK = "quick"
    TOPIC = "topic"
    PAST = "past"
    MODEL = "model"

    @property
    def is_paper(self) -> bool:
        return self in (Mode.PAST, Mode.MODEL)

    def title(self, topic: Optional[str] = None) -> str:
        if self is Mode.PAST:
            return "Past Paper Simulation"
        if self is Mode.MODEL:
            return "Advanced Model Paper"
        if self is Mode.TOPIC:
            return f"Topic: {topic or 'general'}"
        return "Quick Revision"


class Medium(str, Enum):
    """Languages questions can be generated in."""

    SINHALA = "Sinhala"
    ENGLISH = "English"
    TAMIL = "Tamil"


class PlanTier(str, Enum):
    FREE = "free"
    PRO = "pro"
    PLUS = "plus"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class ViewState(str, Enum):
    TESTING = "testing"
    SUMMARY = "summary"
    REVIEW = "review"


@dataclass(frozen=True)
class Question:
    """A validated multiple-choice question with exactly five options."""

    text: str
    options: tuple[str, ...]
    correct_index: int
    explanation: str

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_index]

    def option_for(self, index: Optional[int]) -> Optional[str]:
        if index is None or not 0 <= index < len(self.options):
            return None
        return self.options[index]


def current_period(today: Optional[date] = None) -> str:
    """Return the ``YYYY-MM`` usage period containing ``today``."""

    today = today or date.today()
    return f"{today.year:04d}-{today.month:02d}"


@dataclass(frozen=True)
class UsageCounters:
    questions_answered: int = 0
    papers_answered: int = 0
    period: str = field(default_factory=current_period)


@dataclass(frozen=True)
class PlanEntitlement:
    """What a plan tier may request and how much it may consume per period.

    ``None`` quotas are unlimited.
    """

    tier: PlanTier
    quick_count: int
    paper_count: int
    modes: frozenset[Mode]
    monthly_questions: Optional[int] = None
    monthly_papers: Optional[int] = None

    def allows(self, mode: Mode) -> bool:
        return mode in self.modes

    def count_for(self, mode: Mode) -> int:
        return self.paper_count if mode.is_paper else self.quick_count

    def remaining_questions(self, usage: UsageCounters) -> Optional[int]:
        if self.monthly_questions is None:
            return None
        return max(0, self.monthly_questions - usage.questions_answered)

    def remaining_papers(self, usage: UsageCounters) -> Optional[int]:
        if self.monthly_papers is None:
            return None
        return max(0, self.monthly_papers - usage.papers_answered)

    def describe_usage(self, usage: UsageCounters) -> str:
        if self.monthly_questions is not None:
            return (
                f"{usage.questions_answered} / {self.monthly_questions} "
                "questions used"
            )
        if self.monthly_papers is not None:
            return (
                f"{usage.papers_answered} / {self.monthly_papers} papers used"
            )
        return "Unlimited access"


@dataclass(frozen=True)
class Account:
    """Caller-owned account data the engine reads and meters against."""

    plan: PlanTier = PlanTier.FREE
    medium: str = Medium.ENGLISH.value
    usage: UsageCounters = field(default_factory=UsageCounters)


@dataclass(frozen=True)
class SessionParams:
    subject: str
    mode: Mode = Mode.QUICK
    topic: Optional[str] = None
    timed: bool = False
    medium: Optional[str] = None

    @property
    def title(self) -> str:
        return self.mode.title(self.topic)


@dataclass(frozen=True)
class ReviewItem:
    """Per-question outcome exposed once a session has been scored."""

    number: int
    question: Question
    chosen_index: Optional[int]
    is_correct: bool

    @property
    def skipped(self) -> bool:
        return self.chosen_index is None

    @property
    def chosen_text(self) -> str:
        return self.question.option_for(self.chosen_index) or "Skipped"

    @property
    def correct_text(self) -> str:
        return self.question.correct_option

    @property
    def explanation(self) -> str:
        return self.question.explanation


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session for rendering."""

    title: str
    subject: str
    view: ViewState
    cursor: int
    total: int
    question: Optional[Question]
    selected_index: Optional[int]
    answered: int
    timed: bool
    remaining_seconds: Optional[int]
    is_timeout: bool
    score: Optional[int]
    discarded: bool
    review: tuple[ReviewItem, ...] = ()

    @property
    def accuracy(self) -> Optional[float]:
        if self.score is None or not self.total:
            return None
        return self.score / self.total

    @property
    def is_last(self) -> bool:
        return self.cursor == self.total - 1
