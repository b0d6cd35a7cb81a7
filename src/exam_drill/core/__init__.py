"""Shared helpers for exam-drill commands."""

from __future__ import annotations

from .ai import AIClientError, load_client
from .logging import JsonLogFormatter, component_logger, configure_logger
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "AIClientError",
    "load_client",
    "JsonLogFormatter",
    "component_logger",
    "configure_logger",
    "WORKSPACE_ENV",
    "WorkspaceError",
    "WorkspaceLayout",
    "ensure_workspace",
]
