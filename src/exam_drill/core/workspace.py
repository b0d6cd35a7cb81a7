"""Workspace home holding the drill config and log files."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

__all__ = [
    "WORKSPACE_ENV",
    "DEFAULT_WORKSPACE",
    "WorkspaceError",
    "WorkspaceLayout",
    "ensure_workspace",
    "resolve_home",
]

WORKSPACE_ENV = "EXAM_DRILL_HOME"
DEFAULT_WORKSPACE = Path.home() / ".exam-drill"

_SUBDIRS = ("config", "logs")


class WorkspaceError(RuntimeError):
    """Raised when the workspace layout cannot be prepared."""


@dataclass(frozen=True)
class WorkspaceLayout:
    """Resolved workspace directories and whether each was just created."""

    home: Path
    directories: Mapping[str, Path]
    created: Mapping[str, bool]

    def path_for(self, key: str) -> Path:
        try:
            return self.directories[key]
        except KeyError as exc:
            raise WorkspaceError(
                f"Unknown workspace directory '{key}'."
            ) from exc

    @property
    def config_file(self) -> Path:
        return self.path_for("config") / "drill.toml"

    @property
    def log_dir(self) -> Path:
        return self.path_for("logs")


def resolve_home(
    *, env: Mapping[str, str] | None = None, path: Path | None = None
) -> tuple[Path, bool]:
    """Return the workspace home and whether it was explicitly chosen."""

    env_map = os.environ if env is None else env
    if path is not None:
        return path.expanduser().absolute(), True
    custom = (env_map.get(WORKSPACE_ENV) or "").strip()
    if custom:
        return Path(custom).expanduser().absolute(), True
    return DEFAULT_WORKSPACE, False


def ensure_workspace(
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
    create: bool = True,
) -> WorkspaceLayout:
    """Ensure the workspace exists and return its layout.

    When the default home is not writable the layout falls back to a
    directory under the system temp dir. Explicit homes never fall back.
    """

    home, explicit = resolve_home(env=env, path=path)
    candidates = [home]
    if create and not explicit:
        candidates.append(Path(tempfile.gettempdir()) / "exam-drill")

    last_error: Exception | None = None
    for candidate in candidates:
        try:
            return _build_layout(candidate, create=create)
        except PermissionError as exc:
            last_error = exc
    raise WorkspaceError(
        f"Unable to prepare workspace at {home}"
    ) from last_error


def _build_layout(home: Path, *, create: bool) -> WorkspaceLayout:
    if home.exists() and not home.is_dir():
        raise WorkspaceError(
            f"Configured workspace exists and is not a directory: {home}"
        )
    created = {"home": _ensure_dir(home) if create else False}
    directories: dict[str, Path] = {}
    for name in _SUBDIRS:
        directory = home / name
        if directory.exists() and not directory.is_dir():
            raise WorkspaceError(
                f"Expected workspace directory for '{name}' but found a "
                f"file: {directory}"
            )
        created[name] = _ensure_dir(directory) if create else False
        directories[name] = directory
    return WorkspaceLayout(
        home=home,
        directories=MappingProxyType(directories),
        created=MappingProxyType(created),
    )


def _ensure_dir(path: Path) -> bool:
    existed = path.exists()
    path.mkdir(parents=True, exist_ok=True)
    try:
        path.chmod(0o700)
    except (PermissionError, NotImplementedError):  # pragma: no cover
        pass
    return not existed
