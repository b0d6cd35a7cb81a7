"""Typed failures surfaced while creating a practice session."""

from __future__ import annotations

__all__ = [
    "GenerationError",
    "ConfigurationError",
    "EntitlementError",
    "NetworkError",
    "EmptyResponseError",
    "ParseError",
    "ValidationError",
]


class GenerationError(RuntimeError):
    """Base class for every failure raised by question generation.

    ``retryable`` tells callers whether asking again, unchanged, can help.
    """

    retryable = True


class ConfigurationError(GenerationError):
    """The question service is not configured; no request was sent."""

    retryable = False


class EntitlementError(GenerationError):
    """The account's plan does not permit the requested session."""

    retryable = False


class NetworkError(GenerationError):
    """Transport or service failure reported by the question service."""


class EmptyResponseError(GenerationError):
    """The service answered without usable text (e.g. safety filtering)."""


class ParseError(GenerationError):
    """The reply could not be recovered as a JSON array."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text


class ValidationError(GenerationError):
    """The reply parsed but no record was a well-formed question."""
