"""Pull request identity and description storage.

The description is read and written through the GitHub CLI (`gh api`), which
picks up credentials from GH_TOKEN and works the same in GitHub Actions and
locally.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol

from bundle_impact.exceptions import ConfigError, GhNotAvailableError, PullRequestError

logger = logging.getLogger("bundle_impact.github")


@dataclass(frozen=True)
class PullRequest:
    """Identifies one pull request: (owner, repo, number)."""
    owner: str
    repo: str
    number: int

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def api_path(self) -> str:
        return f"repos/{self.owner}/{self.repo}/pulls/{self.number}"

    def __str__(self) -> str:
        return f"{self.slug}#{self.number}"


class DescriptionStore(Protocol):
    """Read-modify-write access to a pull request's description."""

    def get_description(self, pr: PullRequest) -> str: ...

    def set_description(self, pr: PullRequest, description: str) -> None: ...


def pull_request_from_env(environ: Mapping[str, str] | None = None) -> PullRequest:
    """Build the PullRequest for the current GitHub Actions run.

    Requires GITHUB_REPOSITORY and GITHUB_EVENT_PATH (a pull_request event).
    """
    env = os.environ if environ is None else environ

    repository = env.get("GITHUB_REPOSITORY", "")
    if "/" not in repository:
        raise ConfigError("GITHUB_REPOSITORY is not set (expected owner/repo)")
    owner, repo = repository.split("/", 1)

    event_path = env.get("GITHUB_EVENT_PATH")
    if not event_path or not Path(event_path).exists():
        raise ConfigError("GITHUB_EVENT_PATH is not set or does not exist")

    try:
        with open(event_path) as f:
            event = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read event payload {event_path}: {e}") from e

    number = (event.get("pull_request") or {}).get("number") or event.get("number")
    if not number:
        raise ConfigError("Event payload has no pull request number")

    return PullRequest(owner=owner, repo=repo, number=int(number))


class GhCliDescriptionStore:
    """DescriptionStore backed by `gh api`."""

    def __init__(self, token: str | None = None, timeout: int = 15) -> None:
        self.token = token
        self.timeout = timeout

    def _gh(self, args: list[str], stdin: str | None = None) -> str:
        env = dict(os.environ)
        if self.token:
            env["GH_TOKEN"] = self.token
        try:
            result = subprocess.run(
                ["gh", "api", *args],
                input=stdin,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=env,
            )
        except FileNotFoundError as e:
            raise GhNotAvailableError() from e
        except subprocess.TimeoutExpired as e:
            raise PullRequestError(f"gh api timed out after {self.timeout}s") from e

        if result.returncode != 0:
            raise PullRequestError(result.stderr.strip() or "gh api failed")
        return result.stdout

    def get_description(self, pr: PullRequest) -> str:
        output = self._gh([pr.api_path])
        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            raise PullRequestError(f"Unexpected response for {pr}: {e}") from e
        # GitHub returns null for an empty description
        return data.get("body") or ""

    def set_description(self, pr: PullRequest, description: str) -> None:
        logger.debug("Updating description of %s (%d chars)", pr, len(description))
        self._gh(
            ["--method", "PATCH", pr.api_path, "--input", "-"],
            stdin=json.dumps({"body": description}),
        )


class PreviewDescriptionStore:
    """Reads through to another store; hands writes to `echo` instead."""

    def __init__(self, inner: DescriptionStore, echo: Callable[[str], None]) -> None:
        self.inner = inner
        self.echo = echo

    def get_description(self, pr: PullRequest) -> str:
        return self.inner.get_description(pr)

    def set_description(self, pr: PullRequest, description: str) -> None:
        self.echo(description)
