"""Fake chat-completion client handed to the gateway in tests.

The gateway only touches ``client.chat.completions.create``, so the fake
exposes that surface, records each call, and replays queued replies or
raises queued exceptions.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Union

Reply = Union[str, None, BaseException]


def completion(content: Optional[str]) -> SimpleNamespace:
    """Build a response object shaped like the OpenAI SDK's."""

    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeChatClient:
    def __init__(self, *replies: Reply) -> None:
        self.replies: List[Reply] = list(replies)
        self.calls: List[Dict[str, Any]] = []
        self.chat = SimpleNamespace(
            completions=SimpleNamespace(create=self._create)
        )

    def queue(self, reply: Reply) -> None:
        self.replies.append(reply)

    @property
    def last_messages(self) -> List[Dict[str, str]]:
        return self.calls[-1]["messages"]

    def _create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, BaseException):
            raise reply
        return completion(reply)
