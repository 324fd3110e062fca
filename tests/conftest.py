"""Shared test fixtures for bundle-impact."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from bundle_impact.github.pull_request import PullRequest


SUMMARY = """\
## Summary

This is a summary of the PR."""

REPORT_A = """\
| Status | File | Size | Difference (%) |
| --- | --- | --- | --- |
| M | src/foo/bar.ts | 110 | +10 (+10%) |"""

REPORT_B = """\
| Status | File | Size | Difference (%) |
| --- | --- | --- | --- |
| M | src/foo/bar.ts | 120 | +20 (+20%) |"""


def _git(root: Path, *args: str) -> None:
    subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com",
         "-c", "commit.gpgsign=false", *args],
        cwd=root,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """A git repo with a `main` branch and a checked-out `feature` branch.

    Between the two branches (raw byte sizes):
      - src/foo/bar.ts        modified, 100 -> 110
      - src/new.ts            added, 30
      - src/old.ts            deleted, 50
      - src/renamed_to.ts     renamed from src/renamed_from.ts, 40 -> 40
      - src/foo/bar.test.ts   modified, excluded by default patterns
    """
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    root = tmp_path / "repo"
    root.mkdir()
    _git(root, "init", "-q")
    _git(root, "symbolic-ref", "HEAD", "refs/heads/main")

    (root / "src" / "foo").mkdir(parents=True)
    (root / "src" / "foo" / "bar.ts").write_text("x" * 100)
    (root / "src" / "foo" / "bar.test.ts").write_text("t" * 10)
    (root / "src" / "old.ts").write_text("y" * 50)
    (root / "src" / "renamed_from.ts").write_text("z" * 40)
    (root / "README.md").write_text("# Demo\n")
    _git(root, "add", "-A")
    _git(root, "commit", "-q", "-m", "initial")

    _git(root, "checkout", "-q", "-b", "feature")
    (root / "src" / "foo" / "bar.ts").write_text("x" * 110)
    (root / "src" / "foo" / "bar.test.ts").write_text("t" * 20)
    (root / "src" / "new.ts").write_text("n" * 30)
    (root / "src" / "old.ts").unlink()
    _git(root, "mv", "src/renamed_from.ts", "src/renamed_to.ts")
    _git(root, "add", "-A")
    _git(root, "commit", "-q", "-m", "feature work")

    return root


class FakeStore:
    """In-memory DescriptionStore keyed like the GitHub API."""

    def __init__(self, bodies: dict[str, str | None] | None = None) -> None:
        self.bodies = dict(bodies or {})
        self.updates: list[tuple[PullRequest, str]] = []

    def get_description(self, pr: PullRequest) -> str:
        return self.bodies[str(pr)]

    def set_description(self, pr: PullRequest, description: str) -> None:
        self.updates.append((pr, description))
        self.bodies[str(pr)] = description


class RecordingNotifier:
    def __init__(self) -> None:
        self.infos: list[str] = []
        self.failures: list[str] = []

    def info(self, message: str) -> None:
        self.infos.append(message)

    def set_failed(self, message: str) -> None:
        self.failures.append(message)


@pytest.fixture
def pull_request() -> PullRequest:
    return PullRequest(owner="radashi-org", repo="radashi", number=1)


@pytest.fixture
def store(pull_request: PullRequest) -> FakeStore:
    return FakeStore({str(pull_request): SUMMARY})


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def event_env(tmp_path: Path) -> dict[str, str]:
    """Environment of a GitHub Actions pull_request run for radashi-org/radashi#1."""
    event_path = tmp_path / "event.json"
    event_path.write_text('{"action": "synchronize", "pull_request": {"number": 1}}')
    return {
        "GITHUB_REPOSITORY": "radashi-org/radashi",
        "GITHUB_EVENT_PATH": str(event_path),
    }
