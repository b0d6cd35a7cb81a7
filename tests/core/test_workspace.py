from __future__ import annotations

import pytest

from exam_drill.core import workspace


def test_ensure_workspace_creates_directories(tmp_path, monkeypatch):
    root = tmp_path / "data"
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    layout = workspace.ensure_workspace()

    assert layout.home == root.absolute()
    assert layout.created["home"] is True
    for name in ("config", "logs"):
        assert layout.path_for(name).is_dir()
        assert layout.created[name] is True
    assert layout.config_file == root.absolute() / "config" / "drill.toml"
    assert layout.log_dir == root.absolute() / "logs"


def test_ensure_workspace_is_idempotent(tmp_path):
    first = workspace.ensure_workspace(path=tmp_path / "existing")
    second = workspace.ensure_workspace(path=tmp_path / "existing")

    assert first.home == second.home
    assert not any(second.created.values())


def test_explicit_path_wins_over_environment(tmp_path, monkeypatch):
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(tmp_path / "env"))
    layout = workspace.ensure_workspace(path=tmp_path / "flag")
    assert layout.home == (tmp_path / "flag").absolute()
    assert not (tmp_path / "env").exists()


def test_resolve_home_defaults(tmp_path):
    home, explicit = workspace.resolve_home(env={})
    assert home == workspace.DEFAULT_WORKSPACE
    assert explicit is False
    home, explicit = workspace.resolve_home(
        env={workspace.WORKSPACE_ENV: str(tmp_path)}
    )
    assert home == tmp_path.absolute()
    assert explicit is True


def test_workspace_rejects_file_home(tmp_path):
    target = tmp_path / "file"
    target.write_text("x", encoding="utf-8")
    with pytest.raises(workspace.WorkspaceError):
        workspace.ensure_workspace(path=target)


def test_workspace_rejects_file_subdir(tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    (home / "logs").write_text("x", encoding="utf-8")
    with pytest.raises(workspace.WorkspaceError):
        workspace.ensure_workspace(path=home)


def test_create_false_does_not_touch_disk(tmp_path):
    layout = workspace.ensure_workspace(
        path=tmp_path / "dry", create=False
    )
    assert not (tmp_path / "dry").exists()
    assert layout.log_dir == (tmp_path / "dry").absolute() / "logs"


def test_path_for_unknown_key(tmp_path):
    layout = workspace.ensure_workspace(path=tmp_path / "w")
    with pytest.raises(workspace.WorkspaceError):
        layout.path_for("cache")
