"""
uploader package

This package implements a CLI that publishes a local project directory to a
GitHub repository over HTTPS.

Key responsibilities are split across modules:
- `remote_url.py`: canonical remote URLs and the transient credentialed push URL
- `git_ops.py`: git subprocess invocations and the repository steps built on them
- `credentials.py`: interactive username / hidden token prompts
- `config.py`: settings from defaults, YAML file, environment and CLI flags
- `messages.py`: commit message rendering
- `github_client.py`: isolated GitHub REST API interactions (optional access check)
- `cli.py`: CLI entrypoint and orchestration (init -> branch -> remote -> commit -> push)
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
