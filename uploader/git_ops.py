"""
git_ops.py

Responsibility: Every `git` subprocess invocation made by the uploader.

The repository steps are small and idempotent:
- init (or reuse an existing repository)
- ensure a branch is checked out, creating it if absent
- add the remote, or update its URL if it already exists
- stage everything and commit only when there is something to commit
- push to an explicit URL, then record upstream tracking against the named remote

Credentials only ever appear in the argv of a single `git push`. The helpers here
make sure they never reach `.git/config`, a credential helper, a log line, or an
exception message.
"""

from __future__ import annotations

import logging
import os
import subprocess
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Sequence

from uploader.config import GitIdentity
from uploader.remote_url import has_embedded_credentials, redact_text, redact_url

log = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]


class GitError(RuntimeError):
    def __init__(self, message: str, *, returncode: int = 1, output: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.output = output


def subprocess_runner(
    cmd: Sequence[str], cwd: Path, env: dict[str, str] | None = None
) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        list(cmd), cwd=str(cwd), env=env, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True
    )


class GitRepo:
    def __init__(self, path: str | Path, *, runner: Runner | None = None) -> None:
        self.path = Path(path)
        self._runner = runner or subprocess_runner

    def git(
        self,
        *args: str,
        check: bool = True,
        env: dict[str, str] | None = None,
        secrets: Sequence[str] = (),
        config: Sequence[str] = (),
    ) -> subprocess.CompletedProcess[str]:
        """
        Run `git <args>` in the repository, raising a GitError on failure when `check`.

        `config` entries are passed as `-c key=value` ahead of the subcommand.
        """
        cmd = ["git"]
        for item in config:
            cmd += ["-c", item]
        cmd += list(args)
        log.debug("$ %s", redact_text(" ".join(cmd), *secrets))

        try:
            proc = self._runner(cmd, self.path, env)
        except FileNotFoundError as e:
            raise GitError("git executable not found on PATH", returncode=127) from e

        if check and proc.returncode != 0:
            shown = redact_text(" ".join(cmd), *secrets)
            output = redact_text(proc.stdout or "", *secrets)
            raise GitError(
                f"Command failed: {shown}\n\n{output}".rstrip(),
                returncode=proc.returncode,
                output=output,
            )
        return proc

    # -- repository ---------------------------------------------------------

    def is_initialized(self) -> bool:
        return (self.path / ".git").exists()

    def init_or_reuse(self) -> bool:
        """Initialize a repository if absent. Returns True when one was created."""
        if self.is_initialized():
            log.info("Using existing git repository.")
            return False
        log.info("Initializing new git repository...")
        self.git("init")
        return True

    def has_head(self) -> bool:
        return self.git("rev-parse", "--verify", "--quiet", "HEAD", check=False).returncode == 0

    def branch_exists(self, name: str) -> bool:
        proc = self.git("show-ref", "--verify", "--quiet", f"refs/heads/{name}", check=False)
        return proc.returncode == 0

    def ensure_branch(self, name: str) -> str:
        """
        Check out `name`, creating it from the current HEAD when it does not exist.

        On a repository without commits the unborn HEAD is pointed at `name`.
        Returns "checked-out", "created" or "unborn".
        """
        if self.branch_exists(name):
            self.git("checkout", name)
            return "checked-out"
        if not self.has_head():
            self.git("symbolic-ref", "HEAD", f"refs/heads/{name}")
            return "unborn"
        self.git("checkout", "-b", name)
        return "created"

    # -- remotes ------------------------------------------------------------

    def remote_url(self, name: str) -> str | None:
        proc = self.git("remote", "get-url", name, check=False)
        if proc.returncode != 0:
            return None
        return proc.stdout.strip() or None

    def set_remote(self, name: str, url: str) -> str:
        """Add remote `name`, or point it at `url` if it exists. Returns "added" or "updated"."""
        if self.remote_url(name) is not None:
            log.info("Remote '%s' exists. Setting URL to %s", name, redact_url(url))
            self.git("remote", "set-url", name, url)
            return "updated"
        log.info("Adding remote '%s' (%s)", name, redact_url(url))
        self.git("remote", "add", name, url)
        return "added"

    @contextmanager
    def scrubbed_remote(self, name: str, canonical_url: str, *, branch: str | None = None) -> Iterator[None]:
        """
        Guarantee that on exit, however the block ends, remote `name` points at
        `canonical_url` and the branch's upstream names the remote rather than a URL.

        If the block raised, a failing restore is logged and the block's own
        exception is the one that propagates.
        """
        try:
            yield
        except BaseException:
            try:
                self._restore_remote(name, canonical_url, branch)
            except GitError as scrub_error:
                log.error("Could not restore remote '%s' to %s: %s", name, redact_url(canonical_url), scrub_error)
            raise
        else:
            self._restore_remote(name, canonical_url, branch)

    def _restore_remote(self, name: str, canonical_url: str, branch: str | None) -> None:
        self.git("remote", "set-url", name, canonical_url)
        if branch:
            key = f"branch.{branch}.remote"
            current = self.git("config", "--get", key, check=False).stdout.strip()
            if current and has_embedded_credentials(current):
                self.git("config", key, name)
        log.debug("Remote '%s' restored to %s", name, canonical_url)

    # -- changes ------------------------------------------------------------

    def stage_all(self) -> None:
        self.git("add", "-A")

    def has_changes(self) -> bool:
        """True when the index or working tree differs from HEAD (or, without HEAD, anything is staged)."""
        proc = self.git("status", "--porcelain", "--untracked-files=normal")
        return bool(proc.stdout.strip())

    def commit(self, message: str, *, identity: GitIdentity | None = None) -> bool:
        """
        Commit staged changes. A repository with nothing to commit is reported and
        left alone; returns False in that case.
        """
        if not self.has_changes():
            log.info("No changes to commit.")
            return False

        env = None
        if identity is not None and not identity.is_empty:
            env = dict(os.environ)
            env.update(identity.env())

        proc = self.git("commit", "-m", message, env=env, check=False)
        if proc.returncode != 0:
            if "nothing to commit" in (proc.stdout or ""):
                log.info("No changes to commit (commit skipped).")
                return False
            raise GitError(
                f"Command failed: git commit -m {message!r}\n\n{proc.stdout}".rstrip(),
                returncode=proc.returncode,
                output=proc.stdout or "",
            )
        log.info("Committed: %s", message)
        return True

    # -- push ---------------------------------------------------------------

    def push(self, target: str, branch: str, *, secrets: Sequence[str] = ()) -> None:
        """
        Push `branch` to `target` (a URL or remote name) without consulting or
        feeding any credential helper, and without interactive prompts.
        """
        env = dict(os.environ)
        env["GIT_TERMINAL_PROMPT"] = "0"
        log.info("Pushing %s to %s...", branch, redact_url(target))
        self.git(
            "push",
            target,
            f"{branch}:{branch}",
            env=env,
            secrets=secrets,
            config=("credential.helper=",),
        )

    def set_upstream(self, branch: str, remote: str) -> None:
        """
        Record `remote/branch` as the upstream of `branch`.

        `git push -u <url>` would store the URL itself as the upstream remote, so
        tracking is written against the remote name after a URL push instead.
        """
        self.git("update-ref", f"refs/remotes/{remote}/{branch}", f"refs/heads/{branch}")
        self.git("config", f"branch.{branch}.remote", remote)
        self.git("config", f"branch.{branch}.merge", f"refs/heads/{branch}")
