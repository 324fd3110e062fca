"""Bundle impact bot — keeps the "Bundle impact" section of a PR up to date.

This is the main entry point for the GitHub Action. It:
1. Fetches the current PR description
2. Lists the files changed by the PR
3. Produces the bundle impact report for those files
4. Merges the report into the description and writes it back

Every collaborator comes in through an ActionEnv, so the same pipeline runs
against GitHub, a dry-run preview, or in-memory fakes in tests.

Usage:
    # In a GitHub Action
    bundle-impact run

    # Preview locally
    bundle-impact run --dry-run
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol

from bundle_impact.config import SECTION_TITLE
from bundle_impact.github.changes import ChangedFile
from bundle_impact.github.pull_request import DescriptionStore, PullRequest
from bundle_impact.markdown.sections import merge_section

logger = logging.getLogger("bundle_impact.bot")


class Notifier(Protocol):
    """Progress messages plus a failure channel used at most once per run."""

    def info(self, message: str) -> None: ...

    def set_failed(self, message: str) -> None: ...


@dataclass
class ActionEnv:
    """Capabilities the bot needs for one run."""
    pull_request: PullRequest
    store: DescriptionStore
    changed_files: Callable[[], list[ChangedFile]]
    produce_report: Callable[[list[ChangedFile]], str]
    notifier: Notifier
    section_title: str = SECTION_TITLE


def run(env: ActionEnv) -> bool:
    """Upsert the bundle impact section of the PR description.

    Returns True when the description was written back. Any failure is
    reported once through `env.notifier.set_failed` and nothing is written.
    """
    pr = env.pull_request
    notify = env.notifier.info

    try:
        notify(f"fetching PR #{pr.number} data from {pr.slug}...")
        description = env.store.get_description(pr) or ""

        notify("calculating bundle impact...")
        changed = env.changed_files()
        logger.debug("%d changed files in %s", len(changed), pr)
        report = env.produce_report(changed)

        body = merge_section(description, report, title=env.section_title)

        notify("updating PR description...")
        env.store.set_description(pr, body)
    except Exception as e:
        logger.debug("Bundle impact run failed for %s", pr, exc_info=True)
        env.notifier.set_failed(str(e) or e.__class__.__name__)
        return False

    notify("PR description updated with bundle impact.")
    return True


class ConsoleNotifier:
    """Notifier for terminal and CI logs.

    With `annotate`, failures are also emitted as a GitHub Actions error
    annotation so they show up on the workflow run.
    """

    def __init__(self, console, annotate: bool = False) -> None:
        self.console = console
        self.annotate = annotate
        self.failed: str | None = None

    def info(self, message: str) -> None:
        self.console.info(message)

    def set_failed(self, message: str) -> None:
        self.failed = message
        if self.annotate:
            # Workflow commands need newlines escaped
            escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
            print(f"::error::{escaped}", flush=True)
        self.console.error(message)
