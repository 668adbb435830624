"""
messages.py

Responsibility: Produce the commit message for an upload.

Rules:
- A message without Jinja2 markers is used exactly as given.
- A message with markers is rendered with StrictUndefined against a small,
  fixed context (project_name, branch, remote, repo_url, date).

This module intentionally does NOT know about git or CLI parsing.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from jinja2 import Environment, StrictUndefined


class MessageError(RuntimeError):
    pass


def _has_markers(text: str) -> bool:
    return ("{{" in text) or ("{%" in text) or ("{#" in text)


def message_context(
    *,
    project_name: str,
    branch: str,
    remote: str,
    repo_url: str,
    today: date | None = None,
) -> dict[str, Any]:
    return {
        "project_name": project_name,
        "branch": branch,
        "remote": remote,
        "repo_url": repo_url,
        "date": (today or date.today()).isoformat(),
    }


def render_message(template: str, context: dict[str, Any]) -> str:
    if not _has_markers(template):
        return template

    env = Environment(autoescape=False, undefined=StrictUndefined, keep_trailing_newline=False)
    try:
        out = env.from_string(template).render(**context)
    except Exception as e:  # noqa: BLE001 - surface as MessageError
        raise MessageError(f"Failed rendering commit message: {template!r}") from e

    out = out.strip()
    if not out:
        raise MessageError(f"Commit message rendered empty: {template!r}")
    return out
