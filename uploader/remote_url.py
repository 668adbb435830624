"""
remote_url.py

Responsibility: Turn a user-supplied repository address into the URLs git is given.

Two outputs are derived from the same input:
- the canonical URL, `https://<host>/<path>.git`, which is what gets stored as the remote
- the transient push URL, `https://<user>:<token>@<host>/<path>.git`, used for a single
  `git push` invocation and never written to `.git/config`

Accepted input shapes:
- https://github.com/owner/repo(.git)
- https://someuser@github.com/owner/repo(.git)
- git@github.com:owner/repo(.git)

Anything else is passed through mostly untouched; git reports its own error later.
"""

from __future__ import annotations

import re
from urllib.parse import quote

from uploader.credentials import CredentialError

# GitHub supports x-access-token in the username position.
DEFAULT_TOKEN_USER = "x-access-token"

_SSH_RE = re.compile(r"^git@([^:]+):(.+)$")
_USERINFO_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*://)([^/@]+)@")


def normalize_repo_url(raw: str) -> str:
    """
    Return the canonical, credential-free HTTPS form of `raw`, ending in `.git`.

    Normalizing an already-canonical URL returns it unchanged.
    """
    url = raw.strip()

    match = _SSH_RE.match(url)
    if match:
        host, path = match.group(1), match.group(2)
        clean = f"{host}/{path}"
    else:
        # Drop the scheme, then any user[:secret]@ segment.
        clean = url.split("://", 1)[1] if "://" in url else url
        if "@" in clean:
            clean = clean.split("@", 1)[1]

    clean = clean.rstrip("/")
    if clean.endswith(".git"):
        clean = clean[: -len(".git")]
    return f"https://{clean}.git"


def credentialed_push_url(repo_url: str, user: str, token: str) -> str:
    """
    Build the one-shot push URL carrying `user` and `token`.

    Both values are percent-encoded so separators inside a token cannot change
    where the URL points. An empty `user` falls back to `x-access-token`.
    """
    if not token:
        raise CredentialError("token is empty")
    canonical = normalize_repo_url(repo_url)
    login = quote(user.strip() or DEFAULT_TOKEN_USER, safe="")
    secret = quote(token, safe="")
    return f"https://{login}:{secret}@{canonical[len('https://'):]}"


def has_embedded_credentials(url: str) -> bool:
    """True when `url` carries a `user:secret@` segment."""
    match = _USERINFO_RE.match(url.strip())
    return bool(match) and ":" in match.group(2)


def redact_url(url: str) -> str:
    """Mask any userinfo segment so the URL is safe to log."""
    return _USERINFO_RE.sub(r"\1***@", url.strip())


def redact_text(text: str, *secrets: str) -> str:
    """
    Remove credentials from free-form text such as git's stderr.

    Userinfo segments of any URL are masked, and each non-empty secret (raw and
    percent-encoded) is replaced outright.
    """
    out = re.sub(r"([A-Za-z][A-Za-z0-9+.-]*://)[^/@\s]+@", r"\1***@", text)
    for secret in secrets:
        if not secret:
            continue
        for form in {secret, quote(secret, safe="")}:
            out = out.replace(form, "***")
    return out
