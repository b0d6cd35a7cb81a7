from __future__ import annotations

from datetime import date

import pytest

from fixtures import FakeChatClient, records, reply

from exam_drill.engine.config import default_config
from exam_drill.engine.errors import EntitlementError, ValidationError
from exam_drill.engine.gateway import GenerationGateway
from exam_drill.engine.models import (
    Account,
    Mode,
    PlanTier,
    SessionParams,
    UsageCounters,
    ViewState,
    current_period,
)
from exam_drill.engine.service import PracticeEngine
from exam_drill.engine.usage import UsageAccountant

CONFIG = default_config()


def _engine(client: FakeChatClient) -> PracticeEngine:
    return PracticeEngine(
        CONFIG, gateway=GenerationGateway(CONFIG, client=client)
    )


def _account(plan: PlanTier = PlanTier.FREE, **usage) -> Account:
    return Account(plan=plan, usage=UsageCounters(**usage))


def test_create_session_meters_once_on_submit() -> None:
    engine = _engine(FakeChatClient(reply(records(10))))
    seen = []
    session = engine.create_session(
        SessionParams("Physics"), _account(), on_usage=seen.append
    )

    assert session.total == 10
    assert session.view is ViewState.TESTING
    assert session.timer is None
    assert seen == []

    session.submit()
    session.submit()

    assert len(seen) == 1
    assert seen[0].usage.questions_answered == 10
    assert session.account == seen[0]


def test_create_session_respects_remaining_quota() -> None:
    client = FakeChatClient(reply(records(10)))
    session = _engine(client).create_session(
        SessionParams("Physics"), _account(questions_answered=18)
    )
    assert session.total == 2
    assert "Generate 2 MCQ" in client.last_messages[1]["content"]


def test_discarded_session_is_not_metered() -> None:
    engine = _engine(FakeChatClient(reply(records(3))))
    seen = []
    session = engine.create_session(
        SessionParams("Physics"), _account(), on_usage=seen.append
    )
    session.exit()
    assert seen == []
    assert session.account == _account()


def test_full_paper_flag_and_paper_count() -> None:
    engine = _engine(FakeChatClient(reply(records(25))))
    seen = []
    session = engine.create_session(
        SessionParams("Physics", mode=Mode.PAST),
        _account(PlanTier.PRO),
        on_usage=seen.append,
    )
    assert session.is_full_paper
    session.submit()
    assert seen[0].usage.papers_answered == 1
    assert seen[0].usage.questions_answered == 25


def test_short_paper_does_not_count_as_paper() -> None:
    engine = _engine(FakeChatClient(reply(records(12))))
    session = engine.create_session(
        SessionParams("Physics", mode=Mode.MODEL), _account(PlanTier.PRO)
    )
    assert session.total == 12
    assert not session.is_full_paper
    session.submit()
    assert session.account.usage.papers_answered == 0


def test_timed_session_gets_proportional_timer() -> None:
    engine = _engine(FakeChatClient(reply(records(25))))
    session = engine.create_session(
        SessionParams("Physics", mode=Mode.PAST, timed=True),
        _account(PlanTier.PRO),
    )
    assert session.timer is not None
    assert session.remaining_seconds == 1800
    session.submit()
    assert session.timer.cancelled


def test_stale_usage_rolls_over_before_counting() -> None:
    accountant = UsageAccountant(today=lambda: date(2026, 5, 1))
    engine = PracticeEngine(
        CONFIG,
        gateway=GenerationGateway(
            CONFIG, client=FakeChatClient(reply(records(10)))
        ),
        accountant=accountant,
    )
    account = _account(questions_answered=20, period="2026-04")
    session = engine.create_session(SessionParams("Physics"), account)
    assert session.total == 10
    session.submit()
    assert session.account.usage == UsageCounters(
        questions_answered=10, period="2026-05"
    )


def test_generation_failures_propagate() -> None:
    engine = _engine(FakeChatClient("[]"))
    with pytest.raises(ValidationError):
        engine.create_session(SessionParams("Physics"), _account())


def test_plan_refusal_propagates() -> None:
    client = FakeChatClient(reply(records(25)))
    with pytest.raises(EntitlementError):
        _engine(client).create_session(
            SessionParams("Physics", mode=Mode.PAST), _account()
        )
    assert client.calls == []


def test_account_medium_is_used_by_default() -> None:
    client = FakeChatClient(reply(records(1)))
    account = Account(
        medium="Tamil", usage=UsageCounters(period=current_period())
    )
    _engine(client).create_session(SessionParams("Physics"), account)
    assert "Language: Tamil." in client.last_messages[0]["content"]
