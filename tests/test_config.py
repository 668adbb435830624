"""Tests for settings resolution."""

from __future__ import annotations

import pytest

from uploader.config import (
    DEFAULT_BRANCH,
    DEFAULT_COMMIT_MESSAGE,
    DEFAULT_REMOTE,
    ConfigError,
    GitIdentity,
    load_config,
    read_config_file,
)


class TestGitIdentity:
    def test_empty(self):
        assert GitIdentity().is_empty
        assert GitIdentity().env() == {}

    def test_env_sets_author_and_committer(self):
        env = GitIdentity(name="Ann", email="ann@example.com").env()
        assert env == {
            "GIT_AUTHOR_NAME": "Ann",
            "GIT_COMMITTER_NAME": "Ann",
            "GIT_AUTHOR_EMAIL": "ann@example.com",
            "GIT_COMMITTER_EMAIL": "ann@example.com",
        }

    def test_partial_identity(self):
        assert GitIdentity(email="ann@example.com").env() == {
            "GIT_AUTHOR_EMAIL": "ann@example.com",
            "GIT_COMMITTER_EMAIL": "ann@example.com",
        }


class TestLoadConfig:
    def test_defaults(self, tmp_path):
        cfg = load_config(tmp_path, " https://github.com/a/b ", env={})
        assert cfg.remote == DEFAULT_REMOTE
        assert cfg.branch == DEFAULT_BRANCH
        assert cfg.commit_message == DEFAULT_COMMIT_MESSAGE
        assert cfg.repo_url == "https://github.com/a/b"
        assert cfg.identity.is_empty
        assert cfg.verify_access is False
        assert cfg.default_user is None

    def test_identity_from_env(self, tmp_path):
        env = {"GIT_USER_NAME": "Ann", "GIT_USER_EMAIL": "ann@example.com", "GITHUB_USER": "ann"}
        cfg = load_config(tmp_path, "x", env=env)
        assert cfg.identity == GitIdentity(name="Ann", email="ann@example.com")
        assert cfg.default_user == "ann"

    def test_blank_env_values_ignored(self, tmp_path):
        cfg = load_config(tmp_path, "x", env={"GIT_USER_NAME": "  ", "GIT_USER_EMAIL": ""})
        assert cfg.identity.is_empty

    def test_project_file_is_picked_up(self, tmp_path):
        (tmp_path / ".uploader.yaml").write_text(
            "branch: trunk\ncommit_message: 'Upload {{ project_name }}'\nidentity:\n  name: Bot\n",
            encoding="utf-8",
        )
        cfg = load_config(tmp_path, "x", env={})
        assert cfg.branch == "trunk"
        assert cfg.commit_message == "Upload {{ project_name }}"
        assert cfg.identity.name == "Bot"

    def test_precedence(self, tmp_path):
        cfg_file = tmp_path / "settings.yaml"
        cfg_file.write_text("remote: upstream\nbranch: trunk\nidentity:\n  name: FileName\n", encoding="utf-8")
        cfg = load_config(
            tmp_path,
            "x",
            config_path=cfg_file,
            env={"GIT_USER_NAME": "EnvName"},
            overrides={"branch": "release", "remote": None},
        )
        assert cfg.remote == "upstream"
        assert cfg.branch == "release"
        assert cfg.identity.name == "EnvName"

    def test_blank_overrides_fall_back_to_defaults(self, tmp_path):
        cfg = load_config(tmp_path, "x", env={}, overrides={"commit_message": "", "branch": "  ", "remote": " up "})
        assert cfg.commit_message == DEFAULT_COMMIT_MESSAGE
        assert cfg.branch == DEFAULT_BRANCH
        assert cfg.remote == "up"

    def test_unknown_override(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path, "x", env={}, overrides={"colour": "red"})


class TestReadConfigFile:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="does not exist"):
            read_config_file(tmp_path / "nope.yaml")

    def test_non_mapping(self, tmp_path):
        p = tmp_path / "c.yaml"
        p.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            read_config_file(p)

    def test_invalid_yaml(self, tmp_path):
        p = tmp_path / "c.yaml"
        p.write_text("branch: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            read_config_file(p)

    def test_unknown_key(self, tmp_path):
        p = tmp_path / "c.yaml"
        p.write_text("token: abc\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="unknown keys: token"):
            read_config_file(p)

    def test_identity_must_be_mapping(self, tmp_path):
        p = tmp_path / "c.yaml"
        p.write_text("identity: Ann\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="identity"):
            read_config_file(p)

    def test_empty_file(self, tmp_path):
        p = tmp_path / "c.yaml"
        p.write_text("", encoding="utf-8")
        assert read_config_file(p) == {}
