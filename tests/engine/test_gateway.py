from __future__ import annotations

import httpx
import openai
import pytest

from fixtures import FakeChatClient, record, records, reply

from exam_drill.core.ai import AIClientError
from exam_drill.engine.config import default_config
from exam_drill.engine.errors import (
    ConfigurationError,
    EmptyResponseError,
    EntitlementError,
    GenerationError,
    NetworkError,
    ParseError,
    ValidationError,
)
from exam_drill.engine.gateway import (
    GenerationGateway,
    plan_question_count,
    style_directive,
)
from exam_drill.engine.models import Mode, PlanTier, UsageCounters

CONFIG = default_config()
FREE = CONFIG.entitlement_for(PlanTier.FREE)
PRO = CONFIG.entitlement_for(PlanTier.PRO)
PLUS = CONFIG.entitlement_for(PlanTier.PLUS)


def _gateway(client: FakeChatClient) -> GenerationGateway:
    return GenerationGateway(CONFIG, client=client)


def _auth_error() -> openai.AuthenticationError:
    request = httpx.Request(
        "POST", "https://api.openai.com/v1/chat/completions"
    )
    response = httpx.Response(401, request=request)
    return openai.AuthenticationError("bad key", response=response, body=None)


def test_plan_question_count_per_tier() -> None:
    assert plan_question_count(Mode.QUICK, FREE) == 10
    assert plan_question_count(Mode.PAST, PRO) == 25
    assert plan_question_count(Mode.TOPIC, PRO) == 10
    assert plan_question_count(Mode.QUICK, PLUS) == 20
    assert plan_question_count(Mode.MODEL, PLUS) == 50


def test_plan_question_count_caps_to_remaining_quota() -> None:
    usage = UsageCounters(questions_answered=18)
    assert plan_question_count(Mode.QUICK, FREE, usage) == 2


def test_plan_question_count_refusals() -> None:
    with pytest.raises(EntitlementError):
        plan_question_count(Mode.PAST, FREE)
    with pytest.raises(EntitlementError):
        plan_question_count(
            Mode.QUICK, FREE, UsageCounters(questions_answered=20)
        )
    with pytest.raises(EntitlementError):
        plan_question_count(
            Mode.MODEL, PRO, UsageCounters(papers_answered=10)
        )
    # Paper quota does not gate quick practice.
    assert (
        plan_question_count(
            Mode.QUICK, PRO, UsageCounters(papers_answered=10)
        )
        == 10
    )


def test_style_directive_per_mode() -> None:
    assert style_directive(Mode.QUICK) == ""
    assert "past papers" in style_directive(Mode.PAST)
    assert "model-paper" in style_directive(Mode.MODEL)
    assert '"Organic Chemistry"' in style_directive(
        Mode.TOPIC, "Organic Chemistry"
    )


def test_request_sends_single_call_with_directives() -> None:
    client = FakeChatClient(reply(records(2)))
    questions = _gateway(client).request_questions(
        "Physics",
        mode=Mode.QUICK,
        entitlement=FREE,
        usage=UsageCounters(questions_answered=18),
        medium="Sinhala",
    )

    assert len(questions) == 2
    assert len(client.calls) == 1
    call = client.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["max_tokens"] == 8000
    system, user = client.last_messages
    assert system["role"] == "system"
    assert "Physics" in system["content"]
    assert "Language: Sinhala." in system["content"]
    assert "Sri Lankan Ministry of Education" in system["content"]
    assert user["content"].startswith("Generate 2 MCQ questions for")
    assert "in Sinhala language" in user["content"]
    assert "correctAnswerIndex" in user["content"]


def test_topic_directive_reaches_service() -> None:
    client = FakeChatClient(reply(records(3)))
    _gateway(client).request_questions(
        "Chemistry", mode=Mode.TOPIC, entitlement=PRO, topic=" Redox "
    )
    system = client.last_messages[0]["content"]
    assert 'Focus EXCLUSIVELY on the topic: "Redox"' in system


def test_topic_mode_without_topic_is_refused() -> None:
    client = FakeChatClient(reply(records(3)))
    with pytest.raises(EntitlementError):
        _gateway(client).request_questions(
            "Chemistry", mode=Mode.TOPIC, entitlement=PRO, topic="  "
        )
    assert client.calls == []


def test_missing_credentials_fail_before_any_request() -> None:
    def loader(**_kwargs):
        raise AIClientError("OPENAI_API_KEY not found in environment")

    gateway = GenerationGateway(CONFIG, client_loader=loader)
    with pytest.raises(ConfigurationError) as excinfo:
        gateway.request_questions(
            "Biology", mode=Mode.QUICK, entitlement=FREE
        )
    assert excinfo.value.retryable is False


def test_client_loader_receives_provider_settings() -> None:
    seen = {}
    client = FakeChatClient(reply(records(1)))

    def loader(**kwargs):
        seen.update(kwargs)
        return client

    GenerationGateway(CONFIG, client_loader=loader).request_questions(
        "Biology", mode=Mode.QUICK, entitlement=FREE
    )
    assert seen == {"api_base": None, "timeout": 120}


def test_rejected_credentials_map_to_configuration_error() -> None:
    client = FakeChatClient(_auth_error())
    with pytest.raises(ConfigurationError):
        _gateway(client).request_questions(
            "Biology", mode=Mode.QUICK, entitlement=FREE
        )


def test_service_failure_maps_to_network_error() -> None:
    client = FakeChatClient(openai.OpenAIError("connection reset"))
    with pytest.raises(NetworkError) as excinfo:
        _gateway(client).request_questions(
            "Biology", mode=Mode.QUICK, entitlement=FREE
        )
    assert "connection reset" in str(excinfo.value)
    assert excinfo.value.retryable is True


@pytest.mark.parametrize("content", [None, "", "   \n"])
def test_empty_reply(content) -> None:
    client = FakeChatClient(content)
    with pytest.raises(EmptyResponseError):
        _gateway(client).request_questions(
            "Biology", mode=Mode.QUICK, entitlement=FREE
        )


def test_unparseable_reply() -> None:
    client = FakeChatClient("I cannot help with that.")
    with pytest.raises(ParseError) as excinfo:
        _gateway(client).request_questions(
            "Biology", mode=Mode.QUICK, entitlement=FREE
        )
    assert excinfo.value.raw_text == "I cannot help with that."


def test_fenced_reply_with_one_valid_record() -> None:
    raw = "Here you go:\n```json\n" + reply([record(7, correct=2)]) + "\n```"
    questions = _gateway(FakeChatClient(raw)).request_questions(
        "Biology", mode=Mode.QUICK, entitlement=FREE
    )
    assert len(questions) == 1
    assert questions[0].correct_index == 2


def test_only_four_option_records_is_a_validation_error() -> None:
    bad = [record(n, options=["a", "b", "c", "d"]) for n in range(3)]
    with pytest.raises(ValidationError) as excinfo:
        _gateway(FakeChatClient(reply(bad))).request_questions(
            "Biology", mode=Mode.QUICK, entitlement=FREE
        )
    assert str(excinfo.value) == "no well-formed questions produced"


def test_partial_survivors_are_returned() -> None:
    items = records(4) + [record(9, correctAnswerIndex=7)]
    questions = _gateway(FakeChatClient(reply(items))).request_questions(
        "Biology", mode=Mode.QUICK, entitlement=FREE
    )
    assert len(questions) == 4


def test_extra_records_are_trimmed_to_requested_count() -> None:
    questions = _gateway(FakeChatClient(reply(records(14)))).request_questions(
        "Biology", mode=Mode.QUICK, entitlement=FREE
    )
    assert len(questions) == 10


def test_every_failure_is_a_generation_error() -> None:
    for exc_type in (
        ConfigurationError,
        EntitlementError,
        NetworkError,
        EmptyResponseError,
        ParseError,
        ValidationError,
    ):
        assert issubclass(exc_type, GenerationError)


def test_deeply_nested_reply_surfaces_as_generation_error() -> None:
    client = FakeChatClient("Sure: " + "[" * 100000 + "]" * 100000)
    with pytest.raises(ParseError):
        _gateway(client).request_questions(
            "Biology", mode=Mode.QUICK, entitlement=FREE
        )
