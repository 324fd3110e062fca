"""Command-line interface for bundle-impact."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

import click
from rich.console import Console as RichConsole
from rich.logging import RichHandler

from bundle_impact import __version__
from bundle_impact.config import (
    SECTION_TITLE,
    ProjectConfig,
    find_project_root,
    load_config,
    save_config,
    set_config_value,
)
from bundle_impact.exceptions import BundleImpactError
from bundle_impact.ui.console import Console

console = Console()


def _setup_logging(verbose: bool) -> None:
    logger = logging.getLogger("bundle_impact")
    logger.handlers = [
        RichHandler(console=RichConsole(stderr=True), show_path=False, show_time=False)
    ]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _get_project_root(path: str | None = None) -> Path:
    """Find the project root or error."""
    if path:
        root = Path(path).resolve()
        if not root.exists():
            console.error(f"Path does not exist: {path}")
            sys.exit(1)
        return root

    root = find_project_root()
    if root is None:
        console.error(
            "No project found. Run inside a git checkout, "
            "or specify a path with --path."
        )
        sys.exit(1)
    return root


def _load_config(root: Path) -> ProjectConfig:
    try:
        return load_config(root)
    except BundleImpactError as e:
        console.error(str(e))
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="bundle-impact")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs on stderr.")
def main(verbose: bool):
    """bundle-impact - keep a "Bundle impact" section in your PR descriptions."""
    _setup_logging(verbose)


# =========================================================================
# CI entry point
# =========================================================================

@main.command("run")
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--base", "-b", default=None, help="Base ref to compare against.")
@click.option("--repo", "-r", default=None, help="Repository as OWNER/REPO (default: GITHUB_REPOSITORY).")
@click.option("--number", "-n", type=int, default=None, help="Pull request number (default: from the event payload).")
@click.option("--dry-run", is_flag=True, help="Print the new description instead of updating the PR.")
def run_cmd(
    path: str | None, base: str | None, repo: str | None, number: int | None, dry_run: bool
):
    """Update the PR description with the bundle impact of its changes.

    Meant to run in a GitHub Actions pull_request workflow:

        bundle-impact run

    Needs GITHUB_REPOSITORY, GITHUB_EVENT_PATH and a token for `gh`.
    Outside Actions, name the pull request directly:

        bundle-impact run --repo owner/repo --number 42 --dry-run
    """
    from bundle_impact.github import impact_bot
    from bundle_impact.github.changes import get_changed_files, get_pr_base
    from bundle_impact.github.pull_request import (
        GhCliDescriptionStore,
        PreviewDescriptionStore,
        PullRequest,
        pull_request_from_env,
    )
    from bundle_impact.report.weigh import ReportProducer

    root = _get_project_root(path)
    config = _load_config(root)

    if (repo is None) != (number is None):
        console.error("--repo and --number must be given together.")
        sys.exit(1)
    if repo is not None:
        owner, _, name = repo.partition("/")
        if not owner or not name:
            console.error(f"Invalid --repo {repo!r} (expected owner/repo)")
            sys.exit(1)
        pr = PullRequest(owner=owner, repo=name, number=number)
    else:
        try:
            pr = pull_request_from_env()
        except BundleImpactError as e:
            console.error(str(e))
            sys.exit(1)

    ref = base or get_pr_base(config.report.base)
    store = GhCliDescriptionStore(token=config.github.token, timeout=config.github.timeout)
    if dry_run:
        store = PreviewDescriptionStore(store, click.echo)

    env = impact_bot.ActionEnv(
        pull_request=pr,
        store=store,
        changed_files=lambda: get_changed_files(root, ref, config.report.git_timeout),
        produce_report=ReportProducer(root, config.report, base=ref),
        notifier=impact_bot.ConsoleNotifier(
            console, annotate=os.environ.get("GITHUB_ACTIONS") == "true"
        ),
        section_title=config.section.title,
    )
    if not impact_bot.run(env):
        sys.exit(1)


@main.command()
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--base", "-b", default=None, help="Base ref to compare against.")
@click.option(
    "--format", "output_format",
    type=click.Choice(["markdown", "json", "table"]),
    default="markdown",
    help="Output format.",
)
def report(path: str | None, base: str | None, output_format: str):
    """Weigh the files changed since BASE and print the report.

    Local usage:

        bundle-impact report --base main --format table
    """
    from bundle_impact.github.changes import get_changed_files
    from bundle_impact.report.renderer import render_report, summarize
    from bundle_impact.report.weigh import ReportProducer

    root = _get_project_root(path)
    config = _load_config(root)
    producer = ReportProducer(root, config.report, base=base)

    try:
        changed = get_changed_files(root, producer.base, config.report.git_timeout)
        weights = producer.weigh(changed)
    except BundleImpactError as e:
        console.error(str(e))
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps(summarize(weights), indent=2))
    elif output_format == "table":
        console.show_weights(summarize(weights))
    else:
        body = render_report(weights, show_unchanged=config.report.show_unchanged)
        if body:
            click.echo(body)
        else:
            console.info("No bundle size changes.")


@main.command()
@click.argument("description", type=click.File("rb"))
@click.argument("report_file", metavar="REPORT", type=click.File("rb"))
@click.option("--output", "-o", type=click.File("wb"), default="-", help="Where to write the result.")
@click.option("--title", default=SECTION_TITLE, show_default=True, help="Section heading.")
def merge(description, report_file, output, title: str):
    """Merge REPORT into the DESCRIPTION markdown file.

    Either argument may be '-' for stdin. Handy for other CI systems:

        bundle-impact merge body.md report.md -o body.md
    """
    from bundle_impact.markdown.sections import merge_section

    try:
        text = description.read().decode("utf-8")
        body = report_file.read().decode("utf-8")
    except UnicodeDecodeError as e:
        console.error(f"Input is not valid UTF-8: {e}")
        sys.exit(1)
    output.write(merge_section(text, body, title=title).encode("utf-8"))


# =========================================================================
# Config Management
# =========================================================================

@main.command("config")
@click.argument("action", type=click.Choice(["set", "get", "show"]))
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--path", "-p", default=None, help="Path to the project root.")
def config_cmd(action: str, key: str | None, value: str | None, path: str | None):
    """Manage bundle-impact configuration."""
    root = _get_project_root(path)
    config = _load_config(root)

    if action == "show":
        console.console.print_json(json.dumps(config.model_dump(), indent=2))
    elif action == "get":
        if not key:
            console.error("Usage: bundle-impact config get <key>")
            sys.exit(1)
        data = config.model_dump()
        for part in key.split("."):
            if isinstance(data, dict) and part in data:
                data = data[part]
            else:
                console.error(f"Unknown key: {key}")
                sys.exit(1)
        console.console.print(f"{key} = {data}", highlight=False)
    elif action == "set":
        if not key or value is None:
            console.error("Usage: bundle-impact config set <key> <value>")
            sys.exit(1)
        # Try to parse as JSON for non-string values
        try:
            parsed_value = json.loads(value)
        except json.JSONDecodeError:
            parsed_value = value

        try:
            config = set_config_value(config, key, parsed_value)
        except KeyError:
            console.error(f"Unknown config key: {key}")
            sys.exit(1)
        except BundleImpactError as e:
            console.error(str(e))
            sys.exit(1)
        save_config(root, config)
        console.success(f"Set {key} = {parsed_value}")


if __name__ == "__main__":
    main()
