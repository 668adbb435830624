"""
config.py

Responsibility: Resolve the settings for one upload into a typed, immutable model.

Sources, lowest to highest precedence:
1) Built-in defaults (`origin`, `main`, "first commit")
2) A YAML file: `--config PATH`, or `.uploader.yaml` in the project directory
3) Environment: GIT_USER_NAME, GIT_USER_EMAIL, GITHUB_USER
4) Explicit overrides from the command line

The CLI treats the resolved `UploadConfig` as the single source of truth.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

DEFAULT_REMOTE = "origin"
DEFAULT_BRANCH = "main"
DEFAULT_COMMIT_MESSAGE = "first commit"
PROJECT_CONFIG_NAME = ".uploader.yaml"

_KNOWN_KEYS = {"remote", "branch", "commit_message", "verify_access", "identity"}


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class GitIdentity:
    """Commit identity applied to this run only (never written to git config)."""

    name: str | None = None
    email: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.name and not self.email

    def env(self) -> dict[str, str]:
        out: dict[str, str] = {}
        if self.name:
            out["GIT_AUTHOR_NAME"] = self.name
            out["GIT_COMMITTER_NAME"] = self.name
        if self.email:
            out["GIT_AUTHOR_EMAIL"] = self.email
            out["GIT_COMMITTER_EMAIL"] = self.email
        return out


@dataclass(frozen=True)
class UploadConfig:
    project_path: Path
    repo_url: str
    remote: str = DEFAULT_REMOTE
    branch: str = DEFAULT_BRANCH
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    identity: GitIdentity = field(default_factory=GitIdentity)
    verify_access: bool = False
    default_user: str | None = None


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def read_config_file(path: str | Path) -> dict[str, Any]:
    """
    Parse a YAML settings file. The top level must be a mapping.
    """
    p = Path(path)
    if not p.is_file():
        raise ConfigError(f"Config file does not exist: {p}")
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{p}: top level must be a mapping/object.")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"{p}: unknown keys: {', '.join(unknown)}")

    identity = data.get("identity") or {}
    if not isinstance(identity, dict):
        raise ConfigError(f"{p}: `identity` must be an object/mapping when provided.")
    return data


def load_config(
    project_path: str | Path,
    repo_url: str,
    *,
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> UploadConfig:
    """
    Merge defaults, file, environment and overrides into an `UploadConfig`.

    `overrides` values that are None are ignored so argparse defaults can be
    passed straight through.
    """
    env = os.environ if env is None else env
    project = Path(project_path)

    data: dict[str, Any] = {}
    if config_path is not None:
        data = read_config_file(config_path)
    elif (project / PROJECT_CONFIG_NAME).is_file():
        data = read_config_file(project / PROJECT_CONFIG_NAME)

    file_identity = data.get("identity") or {}
    identity = GitIdentity(
        name=_clean(env.get("GIT_USER_NAME")) or _clean(file_identity.get("name")),
        email=_clean(env.get("GIT_USER_EMAIL")) or _clean(file_identity.get("email")),
    )

    settings: dict[str, Any] = {
        "remote": _clean(data.get("remote")) or DEFAULT_REMOTE,
        "branch": _clean(data.get("branch")) or DEFAULT_BRANCH,
        "commit_message": _clean(data.get("commit_message")) or DEFAULT_COMMIT_MESSAGE,
        "verify_access": bool(data.get("verify_access", False)),
    }
    for key, value in (overrides or {}).items():
        if key not in settings:
            raise ConfigError(f"Unknown setting: {key}")
        if isinstance(value, str):
            value = _clean(value)
        if value is not None:
            settings[key] = value

    return UploadConfig(
        project_path=project,
        repo_url=repo_url.strip(),
        identity=identity,
        default_user=_clean(env.get("GITHUB_USER")),
        **settings,
    )
