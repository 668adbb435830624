"""
credentials.py

Responsibility: Read the GitHub login and personal access token from the terminal.

The token is read with echo disabled, kept only in memory, and handed back to
the caller. Nothing here writes it anywhere.
"""

from __future__ import annotations

import getpass
from dataclasses import dataclass
from typing import Callable


class CredentialError(ValueError):
    pass


@dataclass(frozen=True)
class Credentials:
    user: str
    token: str

    def __repr__(self) -> str:
        return f"Credentials(user={self.user!r}, token='***')"


USER_PROMPT = "GitHub username (login): "
TOKEN_PROMPT = "Personal Access Token (PAT) (input hidden): "


def prompt_credentials(
    *,
    default_user: str | None = None,
    read_line: Callable[[str], str] = input,
    read_secret: Callable[[str], str] = getpass.getpass,
) -> Credentials:
    """
    Ask for the username (plain) and the token (hidden).

    An empty username answer falls back to `default_user`. An empty token raises
    `CredentialError`.
    """
    prompt = USER_PROMPT
    if default_user:
        prompt = f"GitHub username (login) [{default_user}]: "
    try:
        user = read_line(prompt).strip() or (default_user or "")
        token = read_secret(TOKEN_PROMPT).strip()
    except EOFError as e:
        raise CredentialError("no terminal input available for the credentials prompt.") from e
    if not token:
        raise CredentialError("token is empty. Aborting.")
    return Credentials(user=user, token=token)
