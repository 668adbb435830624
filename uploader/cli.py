"""
cli.py

Responsibility: CLI entrypoint for the uploader.

High-level flow (single command):
1) Resolve settings -> `UploadConfig`
2) Init or reuse the repository, ensure the branch, add or update the remote
3) Stage everything, commit if there is anything to commit
4) Prompt for username and token, push to a one-shot credentialed URL
5) Restore the stored remote to its canonical URL (always, even if the push failed)

This module should orchestrate behavior but keep concerns isolated:
- URLs: `remote_url.py`
- git: `git_ops.py`
- Prompts: `credentials.py`
- Settings: `config.py`
- Commit message: `messages.py`
- GitHub API: `github_client.py`
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Callable

from uploader import __version__
from uploader.config import ConfigError, UploadConfig, load_config
from uploader.credentials import CredentialError, Credentials, prompt_credentials
from uploader.git_ops import GitError, GitRepo, Runner
from uploader.github_client import GitHubClient, GitHubError, split_github_url
from uploader.messages import MessageError, message_context, render_message
from uploader.remote_url import credentialed_push_url, normalize_repo_url

log = logging.getLogger(__name__)


class CLIError(RuntimeError):
    pass


@dataclass(frozen=True)
class UploadResult:
    canonical_url: str
    created_repo: bool
    remote_action: str
    committed: bool


def _verify_access(canonical_url: str, token: str, client_factory: Callable[[str], GitHubClient]) -> None:
    slug = split_github_url(canonical_url)
    if slug is None:
        log.info("Skipping access check: %s is not a github.com repository URL", canonical_url)
        return
    owner, name = slug
    repo = client_factory(token).check_push_access(owner, name)
    log.info("Token can push to %s/%s", repo.owner, repo.name)


def upload(
    config: UploadConfig,
    *,
    prompt: Callable[..., Credentials] | None = None,
    runner: Runner | None = None,
    client_factory: Callable[[str], GitHubClient] = GitHubClient,
) -> UploadResult:
    """
    Publish `config.project_path` to `config.repo_url`.

    The stored remote only ever holds the canonical URL. The credentialed URL is
    passed to one `git push` and the remote is reset on the way out regardless of
    how the push ended.
    """
    if not config.project_path.is_dir():
        raise CLIError(f"path not found: {config.project_path}")

    canonical = normalize_repo_url(config.repo_url)
    repo = GitRepo(config.project_path, runner=runner)

    created = repo.init_or_reuse()
    repo.ensure_branch(config.branch)
    remote_action = repo.set_remote(config.remote, canonical)

    repo.stage_all()
    message = render_message(
        config.commit_message,
        message_context(
            project_name=config.project_path.resolve().name,
            branch=config.branch,
            remote=config.remote,
            repo_url=canonical,
        ),
    )
    committed = repo.commit(message, identity=config.identity)

    creds = (prompt or prompt_credentials)(default_user=config.default_user)
    if config.verify_access:
        _verify_access(canonical, creds.token, client_factory)

    push_url = credentialed_push_url(canonical, creds.user, creds.token)
    with repo.scrubbed_remote(config.remote, canonical, branch=config.branch):
        repo.push(push_url, config.branch, secrets=(creds.token,))
        repo.set_upstream(config.branch, config.remote)

    return UploadResult(
        canonical_url=canonical,
        created_repo=created,
        remote_action=remote_action,
        committed=committed,
    )


def upload_cmd(args: argparse.Namespace) -> int:
    config = load_config(
        args.project_path,
        args.repo_url,
        config_path=args.config,
        overrides={
            "remote": args.remote,
            "branch": args.branch,
            "commit_message": args.message,
            "verify_access": args.verify_access,
        },
    )
    result = upload(config)

    print(f"Push complete. Remote '{config.remote}' now set to: {result.canonical_url}")
    print("IMPORTANT: If this token was temporary, revoke it in GitHub settings when done.")
    return 0


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(
        prog="uploader",
        description="Publish a local project directory to a GitHub repository over HTTPS",
    )
    p.add_argument("project_path", help="Path to the project directory")
    p.add_argument("repo_url", help="Repository URL (https://github.com/USER/REPO.git or git@github.com:USER/REPO.git)")

    p.add_argument("--remote", default=None, help="Remote name (default: origin)")
    p.add_argument("--branch", default=None, help="Branch to create/check out and push (default: main)")
    p.add_argument("-m", "--message", default=None, help="Commit message; Jinja2 markers are rendered (default: 'first commit')")
    p.add_argument("--config", default=None, help="YAML settings file (default: <project>/.uploader.yaml if present)")
    p.add_argument(
        "--verify-access",
        dest="verify_access",
        action="store_true",
        default=None,
        help="Check the token's push permission through the GitHub API before pushing",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log every git command (credentials redacted)")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    p.set_defaults(func=upload_cmd)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    try:
        return int(args.func(args))
    except GitError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.returncode or 1
    except (CLIError, ConfigError, CredentialError, MessageError, GitHubError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
