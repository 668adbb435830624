"""
github_client.py

Responsibility: Isolate all direct GitHub REST API interaction.

This module must be the only place that:
- Constructs GitHub REST endpoints
- Sends HTTP requests to api.github.com
- Interprets GitHub API responses / error payloads

It is used for one optional check before pushing: does the token work, does the
repository exist, and may this token push to it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import requests

from uploader import __version__

GITHUB_HOST = "github.com"

_CANONICAL_RE = re.compile(r"^https://([^/@]+)/([^/]+)/([^/]+?)\.git$")


class GitHubError(RuntimeError):
    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass(frozen=True)
class RepoInfo:
    owner: str
    name: str
    html_url: str
    clone_url: str
    default_branch: str
    can_push: bool


def split_github_url(canonical_url: str) -> tuple[str, str] | None:
    """
    Return (owner, name) for a canonical `https://github.com/owner/name.git` URL.

    Other hosts and deeper paths return None.
    """
    match = _CANONICAL_RE.match(canonical_url)
    if not match or match.group(1).lower() != GITHUB_HOST:
        return None
    return match.group(2), match.group(3)


class GitHubClient:
    def __init__(self, token: str, api_base: str = "https://api.github.com") -> None:
        if not token.strip():
            raise GitHubError("GitHub token is required.")
        self._token = token
        self._api_base = api_base.rstrip("/")

    def __repr__(self) -> str:
        return f"GitHubClient(api_base={self._api_base!r})"

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": f"gh-uploader/{__version__}",
        }

    def _request(self, method: str, path: str) -> Any:
        url = f"{self._api_base}{path}"
        try:
            r = requests.request(method, url, headers=self._headers(), timeout=30)
        except requests.RequestException as e:
            raise GitHubError(f"GitHub API request failed {method} {path}: {e.__class__.__name__}") from e
        if r.status_code >= 400:
            try:
                payload = r.json()
            except ValueError:
                payload = {"message": r.text}
            message = payload.get("message", payload) if isinstance(payload, dict) else payload
            raise GitHubError(f"GitHub API error {r.status_code} {method} {path}: {message}", status=r.status_code)
        if r.status_code == 204:
            return None
        return r.json()

    def get_repo(self, owner: str, name: str) -> RepoInfo | None:
        """
        Return RepoInfo if the repo exists and is visible to the token; otherwise None.
        """
        try:
            data = self._request("GET", f"/repos/{owner}/{name}")
        except GitHubError as e:
            if e.status == 404:
                return None
            raise
        permissions = data.get("permissions") or {}
        return RepoInfo(
            owner=owner,
            name=name,
            html_url=data["html_url"],
            clone_url=data["clone_url"],
            default_branch=data.get("default_branch") or "main",
            can_push=bool(permissions.get("push") or permissions.get("admin")),
        )

    def check_push_access(self, owner: str, name: str) -> RepoInfo:
        """
        Raise GitHubError unless the token can push to owner/name.
        """
        repo = self.get_repo(owner, name)
        if repo is None:
            raise GitHubError(f"Repository {owner}/{name} not found (or not visible to this token).", status=404)
        if not repo.can_push:
            raise GitHubError(f"Token has no push permission on {owner}/{name}.", status=403)
        return repo
