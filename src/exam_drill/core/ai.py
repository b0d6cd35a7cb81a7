"""OpenAI client construction for the question generator."""

from __future__ import annotations

import os
from typing import Any, Mapping

from dotenv import load_dotenv
from openai import OpenAI

__all__ = ["API_KEY_ENV", "AIClientError", "load_client"]

API_KEY_ENV = "OPENAI_API_KEY"


class AIClientError(RuntimeError):
    """Raised when no usable OpenAI client can be built."""


def load_client(
    *,
    api_base: str | None = None,
    timeout: float | None = None,
    env: Mapping[str, str] | None = None,
) -> Any:
    """Initialize an OpenAI client from environment-derived credentials.

    ``.env`` files are honoured when ``env`` is not supplied explicitly.
    """

    if env is None:
        load_dotenv()
        env = os.environ
    api_key = (env.get(API_KEY_ENV) or "").strip()
    if not api_key:
        raise AIClientError(
            f"{API_KEY_ENV} not found in environment. Set it or add to .env"
        )
    kwargs: dict[str, Any] = {"api_key": api_key}
    if api_base:
        kwargs["base_url"] = api_base
    if timeout is not None:
        kwargs["timeout"] = timeout
    try:
        return OpenAI(**kwargs)
    except Exception as exc:
        raise AIClientError(f"Unable to create OpenAI client: {exc}") from exc
