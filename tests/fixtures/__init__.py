"""Shared testing fixtures for the exam_drill test suite."""

from .openai import FakeChatClient, completion  # noqa: F401
from .questions import make_questions, record, records, reply  # noqa: F401

__all__ = [
    "FakeChatClient",
    "completion",
    "make_questions",
    "record",
    "records",
    "reply",
]
