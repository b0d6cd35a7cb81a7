"""Request question sets from the OpenAI chat service.

The gateway owns everything between session parameters and a verified tuple
of :class:`~exam_drill.engine.models.Question`: sizing the request from the
plan, composing the directives, making exactly one chat completion call, and
running the reply through the extractor and validator. Every failure leaves
as a :class:`~exam_drill.engine.errors.GenerationError` subclass.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Tuple

import openai

from ..core.ai import AIClientError, load_client
from ..core.logging import component_logger
from .config import EngineConfig, default_config
from .errors import (
    ConfigurationError,
    EmptyResponseError,
    EntitlementError,
    NetworkError,
    ValidationError,
)
from .extractor import extract
from .models import (
    OPTION_COUNT,
    Mode,
    PlanEntitlement,
    Question,
    UsageCounters,
)
from .validator import validate

__all__ = [
    "GenerationGateway",
    "RECORD_SHAPE",
    "plan_question_count",
    "style_directive",
]

RECORD_SHAPE = (
    '[{"question": str, "options": [str, str, str, str, str], '
    '"correctAnswerIndex": int (0-4), "explanation": str}]'
)

ClientLoader = Callable[..., Any]

_CREDENTIAL_ERRORS = (openai.AuthenticationError, openai.PermissionDeniedError)


def plan_question_count(
    mode: Mode,
    entitlement: PlanEntitlement,
    usage: Optional[UsageCounters] = None,
) -> int:
    """Return how many questions ``entitlement`` may request for ``mode``.

    Raises :class:`EntitlementError` when the plan cannot request anything.
    """
    usage = usage or UsageCounters()
    tier = entitlement.tier.label
    if not entitlement.allows(mode):
        raise EntitlementError(
            f"{mode.value.capitalize()} practice is not included in the "
            f"{tier} plan."
        )
    if mode.is_paper and entitlement.remaining_papers(usage) == 0:
        raise EntitlementError(
            f"Monthly paper allowance of the {tier} plan is used up."
        )

    count = entitlement.count_for(mode)
    remaining = entitlement.remaining_questions(usage)
    if remaining is not None:
        if remaining == 0:
            raise EntitlementError(
                f"Monthly question allowance of the {tier} plan is used up."
            )
        count = min(count, remaining)
    return count


def style_directive(mode: Mode, topic: Optional[str] = None) -> str:
    if mode is Mode.PAST:
        return (
            "The questions should mimic the style, difficulty and structure "
            "of real past papers from previous years. Focus on commonly "
            "repeating patterns."
        )
    if mode is Mode.MODEL:
        return (
            "Generate challenging model-paper style questions that test deep "
            "application of theory, similar to high-difficulty trial exams."
        )
    if mode is Mode.TOPIC:
        return (
            f'Focus EXCLUSIVELY on the topic: "{topic}". Do not include '
            "questions from other units."
        )
    return ""


class GenerationGateway:
    """Turns session parameters into a validated question set."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        client: Any = None,
        client_loader: ClientLoader = load_client,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config or default_config()
        self._client = client
        self._client_loader = client_loader
        self._logger = component_logger("gateway", logger)

    def system_directive(
        self, subject: str, medium: str, mode: Mode, topic: Optional[str]
    ) -> str:
        generation = self._config.generation
        lines = [
            f"You are an expert {generation.curriculum} examiner.",
            "Generate high-quality multiple choice questions (MCQs) for the "
            f"subject: {subject}.",
            "The questions must be strictly based on the "
            f"{generation.syllabus_authority} syllabus and teacher guides.",
            f"Language: {medium}.",
        ]
        style = style_directive(mode, topic)
        if style:
            lines.append(style)
        lines.extend(
            [
                f"For each question provide exactly {OPTION_COUNT} options, "
                "the zero-based index of the correct answer, and a detailed "
                "explanation.",
                "Ensure the tone and technical terms are accurate for the "
                f"{medium} medium {generation.curriculum} curriculum.",
            ]
        )
        return "\n".join(lines)

    def user_prompt(self, subject: str, medium: str, count: int) -> str:
        return (
            f"Generate {count} MCQ questions for "
            f"{self._config.generation.curriculum} {subject} in {medium} "
            "language. Return only valid JSON: an array of objects shaped "
            f"like\n{RECORD_SHAPE}"
        )

    def request_questions(
        self,
        subject: str,
        *,
        mode: Mode,
        entitlement: PlanEntitlement,
        usage: Optional[UsageCounters] = None,
        topic: Optional[str] = None,
        medium: Optional[str] = None,
    ) -> Tuple[Question, ...]:
        """Return between one and the planned number of questions."""

        topic = (topic or "").strip() or None
        if mode is Mode.TOPIC and topic is None:
            raise EntitlementError("Topic practice needs a topic.")
        count = plan_question_count(mode, entitlement, usage)
        medium = medium or self._config.generation.default_medium
        client = self._resolve_client()

        self._logger.info(
            "Requesting questions",
            extra={
                "subject": subject,
                "mode": mode.value,
                "topic": topic,
                "medium": medium,
                "count": count,
                "plan": entitlement.tier.value,
            },
        )
        content = self._complete(
            client,
            system=self.system_directive(subject, medium, mode, topic),
            prompt=self.user_prompt(subject, medium, count),
        )
        if not content:
            self._logger.warning("Question service returned no text")
            raise EmptyResponseError(
                "The question service returned no text; it may have been "
                "filtered. Try again or adjust the subject or topic."
            )

        records = extract(content, logger=self._logger)
        questions = validate(records, logger=self._logger)
        if not questions:
            self._logger.warning(
                "No well-formed questions in reply",
                extra={"record_count": len(records)},
            )
            raise ValidationError("no well-formed questions produced")

        self._logger.info(
            "Accepted questions",
            extra={
                "record_count": len(records),
                "accepted": len(questions),
                "requested": count,
            },
        )
        return questions[:count]

    def _resolve_client(self) -> Any:
        if self._client is not None:
            return self._client
        provider = self._config.openai
        try:
            self._client = self._client_loader(
                api_base=provider.api_base,
                timeout=provider.request_timeout_seconds,
            )
        except AIClientError as exc:
            self._logger.error(
                "Question service is not configured",
                extra={"reason": str(exc)},
            )
            raise ConfigurationError(str(exc)) from exc
        return self._client

    def _complete(self, client: Any, *, system: str, prompt: str) -> str:
        provider = self._config.openai
        try:
            response = client.chat.completions.create(
                model=provider.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                temperature=provider.temperature,
                max_tokens=provider.max_output_tokens,
                timeout=provider.request_timeout_seconds,
            )
        except _CREDENTIAL_ERRORS as exc:
            self._logger.error(
                "Question service rejected the credentials",
                extra={"reason": str(exc)},
            )
            raise ConfigurationError(str(exc)) from exc
        except openai.OpenAIError as exc:
            self._logger.error(
                "Question service request failed",
                extra={"reason": str(exc), "error_type": type(exc).__name__},
            )
            raise NetworkError(str(exc)) from exc

        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""
        return (choices[0].message.content or "").strip()
