from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import FakeChatClient  # noqa: E402

from exam_drill.core.logging import ROOT_LOGGER  # noqa: E402


@pytest.fixture
def fake_client() -> FakeChatClient:
    """A chat client with no queued replies; tests queue their own."""

    return FakeChatClient()


@pytest.fixture(autouse=True)
def _isolate_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    monkeypatch.setenv("EXAM_DRILL_HOME", str(tmp_path / "drill-home"))
    monkeypatch.delenv("EXAM_DRILL_CONFIG", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    yield
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)
    root.propagate = True
