"""Tests for the interactive credential prompts."""

from __future__ import annotations

import pytest

from uploader.credentials import TOKEN_PROMPT, CredentialError, Credentials, prompt_credentials


def _answers(*values):
    it = iter(values)
    return lambda _prompt: next(it)


class TestPromptCredentials:
    def test_reads_user_and_hidden_token(self):
        seen = []

        def read_secret(prompt):
            seen.append(prompt)
            return "ghp_123\n"

        creds = prompt_credentials(read_line=_answers("alice"), read_secret=read_secret)
        assert creds == Credentials(user="alice", token="ghp_123")
        assert seen == [TOKEN_PROMPT]

    def test_empty_token_raises(self):
        with pytest.raises(CredentialError, match="token is empty"):
            prompt_credentials(read_line=_answers("alice"), read_secret=_answers("   "))

    def test_default_user_used_for_blank_answer(self):
        prompts = []

        def read_line(prompt):
            prompts.append(prompt)
            return ""

        creds = prompt_credentials(default_user="bob", read_line=read_line, read_secret=_answers("t"))
        assert creds.user == "bob"
        assert "[bob]" in prompts[0]

    def test_eof_becomes_credential_error(self):
        def closed(_prompt):
            raise EOFError

        with pytest.raises(CredentialError):
            prompt_credentials(read_line=closed, read_secret=closed)

    def test_repr_hides_token(self):
        assert "ghp_123" not in repr(Credentials(user="alice", token="ghp_123"))
