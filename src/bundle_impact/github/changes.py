"""Changed-file discovery from git.

Parses `git diff --name-status` output to find which files a pull request
added, modified, deleted or renamed. This is the input layer for the
report producer.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from bundle_impact.exceptions import GitError

logger = logging.getLogger("bundle_impact.git")


@dataclass
class ChangedFile:
    """A file touched by the pull request."""
    status: str  # 'A', 'M', 'D', 'R', 'C', 'T'
    path: str
    old_path: str | None = None  # For renames and copies

    @property
    def base_path(self) -> str:
        """Path of this file on the base branch."""
        return self.old_path or self.path


def parse_name_status(text: str) -> list[ChangedFile]:
    """Parse `git diff --name-status` output into ChangedFile objects."""
    files: list[ChangedFile] = []

    for line in text.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t")
        # Rename/copy scores look like R087; only the letter matters
        status = parts[0][:1].upper()
        if status in ("R", "C") and len(parts) >= 3:
            files.append(ChangedFile(status=status, path=parts[2], old_path=parts[1]))
        elif len(parts) >= 2:
            files.append(ChangedFile(status=status, path=parts[1]))
        else:
            logger.debug("Skipping unparseable name-status line: %r", line)

    return files


def run_git(
    root: Path, args: list[str], timeout: int = 30, text: bool = True
) -> subprocess.CompletedProcess:
    """Run a git command in `root`, raising GitError if git is unavailable."""
    logger.debug("git %s", " ".join(args))
    try:
        return subprocess.run(
            ["git", *args],
            cwd=root,
            capture_output=True,
            text=text,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise GitError("git executable not found") from e
    except subprocess.TimeoutExpired as e:
        raise GitError(f"git {args[0]} timed out after {timeout}s") from e


def get_changed_files(root: Path, base: str = "main", timeout: int = 30) -> list[ChangedFile]:
    """List files changed between `base` and HEAD."""
    result = run_git(root, ["diff", "--name-status", f"{base}...HEAD"], timeout)
    if result.returncode != 0:
        # Fallback: diff against base directly
        logger.debug("Merge-base diff failed: %s", result.stderr.strip())
        result = run_git(root, ["diff", "--name-status", base], timeout)
    if result.returncode != 0:
        raise GitError(
            f"Could not diff against '{base}': {result.stderr.strip() or 'unknown error'}"
        )
    return parse_name_status(result.stdout)


def get_pr_base(base: str = "main", environ: Mapping[str, str] | None = None) -> str:
    """Resolve the base ref, preferring the PR's base branch in GitHub Actions."""
    env = os.environ if environ is None else environ
    base_ref = env.get("GITHUB_BASE_REF")
    if base_ref:
        return f"origin/{base_ref}"
    return base
