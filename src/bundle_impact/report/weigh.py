"""Weigh changed files against the base branch.

Each changed source file is measured twice: as it is in the working tree and
as it was on the base ref (read with `git show`). Sizes are compressed with
gzip by default, which is what ends up on the wire for a bundle.
"""

from __future__ import annotations

import fnmatch
import gzip
import logging
from dataclasses import dataclass
from pathlib import Path

from bundle_impact.config import ReportConfig
from bundle_impact.exceptions import ReportError
from bundle_impact.github.changes import ChangedFile, run_git
from bundle_impact.report.renderer import render_report

logger = logging.getLogger("bundle_impact.report")


@dataclass
class FileWeight:
    """Size of one changed file before and after the pull request."""
    status: str
    path: str
    size: int
    base_size: int

    @property
    def delta(self) -> int:
        return self.size - self.base_size

    @property
    def percent(self) -> int | None:
        """Relative change in whole percent, None when there is no base size."""
        if self.base_size == 0:
            return None
        return round(self.delta * 100 / self.base_size)


def matches_patterns(path: str, include: list[str], exclude: list[str]) -> bool:
    """Check a repo-relative posix path against include/exclude globs."""
    if include and not any(fnmatch.fnmatch(path, pat) for pat in include):
        return False
    return not any(fnmatch.fnmatch(path, pat) for pat in exclude)


def measure(data: bytes, compression: str = "gzip") -> int:
    """Size of `data` in bytes after compression."""
    if compression == "none":
        return len(data)
    # Fixed mtime keeps the header, and so the size, deterministic
    return len(gzip.compress(data, compresslevel=9, mtime=0))


def read_base_blob(root: Path, ref: str, path: str, timeout: int = 30) -> bytes:
    """Read a file's content at `ref`."""
    result = run_git(root, ["show", f"{ref}:{path}"], timeout, text=False)
    if result.returncode != 0:
        stderr = result.stderr.decode(errors="replace").strip()
        raise ReportError(f"Could not read {path} at {ref}: {stderr or 'unknown error'}")
    return result.stdout


def weigh_changed_files(
    root: Path,
    changed: list[ChangedFile],
    config: ReportConfig,
    base: str | None = None,
) -> list[FileWeight]:
    """Measure every changed file selected by the config's patterns."""
    ref = base or config.base
    weights: list[FileWeight] = []

    for cf in changed:
        if not matches_patterns(cf.path, config.include, config.exclude):
            logger.debug("Ignoring %s", cf.path)
            continue

        size = 0
        if cf.status != "D":
            head_file = root / cf.path
            try:
                size = measure(head_file.read_bytes(), config.compression)
            except OSError as e:
                raise ReportError(f"Could not read {cf.path}: {e}") from e

        base_size = 0
        if cf.status != "A":
            blob = read_base_blob(root, ref, cf.base_path, config.git_timeout)
            base_size = measure(blob, config.compression)

        logger.debug("%s %s: %d -> %d bytes", cf.status, cf.path, base_size, size)
        weights.append(FileWeight(
            status=cf.status,
            path=cf.path,
            size=size,
            base_size=base_size,
        ))

    return weights


class ReportProducer:
    """Turns a list of changed files into the bundle impact table."""

    def __init__(self, root: Path, config: ReportConfig, base: str | None = None) -> None:
        self.root = root
        self.config = config
        self.base = base or config.base

    def weigh(self, changed: list[ChangedFile]) -> list[FileWeight]:
        return weigh_changed_files(self.root, changed, self.config, base=self.base)

    def __call__(self, changed: list[ChangedFile]) -> str:
        return render_report(self.weigh(changed), show_unchanged=self.config.show_unchanged)
