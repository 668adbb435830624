"""Shared fixtures: an isolated git environment and a scripted fake git runner."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


@pytest.fixture
def isolated_git(tmp_path, monkeypatch):
    """Keep real git invocations away from the user's global and system config."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test Author")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "author@example.invalid")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test Author")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "author@example.invalid")
    return home


@pytest.fixture
def project_dir(tmp_path) -> Path:
    project = tmp_path / "proj"
    project.mkdir()
    (project / "README.md").write_text("# proj\n", encoding="utf-8")
    return project


def git_subcommand(cmd: list[str]) -> str:
    """First argv element after `git` and any `-c key=value` pairs."""
    i = 1
    while i < len(cmd) and cmd[i] == "-c":
        i += 2
    return cmd[i] if i < len(cmd) else ""


class FakeGit:
    """Records git invocations and answers them from a per-subcommand script."""

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], dict[str, str] | None]] = []
        self.responses: dict[str, tuple[int, str]] = {
            "rev-parse": (1, ""),
            "show-ref": (1, ""),
            "status": (0, "A  README.md\n"),
        }
        self.remote_get_url: tuple[int, str] = (2, "error: No such remote 'origin'\n")
        self.config_get: tuple[int, str] = (1, "")
        self.remote_set_url: tuple[int, str] = (0, "")

    def __call__(self, cmd, cwd, env=None):
        cmd = list(cmd)
        self.calls.append((cmd, env))
        sub = git_subcommand(cmd)
        if sub == "remote" and "get-url" in cmd:
            rc, out = self.remote_get_url
        elif sub == "remote" and "set-url" in cmd:
            rc, out = self.remote_set_url
        elif sub == "config" and "--get" in cmd:
            rc, out = self.config_get
        else:
            rc, out = self.responses.get(sub, (0, ""))
        return subprocess.CompletedProcess(cmd, rc, out)

    def argvs(self) -> list[list[str]]:
        return [cmd for cmd, _env in self.calls]

    def find(self, sub: str) -> list[tuple[list[str], dict[str, str] | None]]:
        return [(cmd, env) for cmd, env in self.calls if git_subcommand(cmd) == sub]

    def index(self, predicate) -> int:
        for i, cmd in enumerate(self.argvs()):
            if predicate(cmd):
                return i
        raise AssertionError("no matching git call")


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()
