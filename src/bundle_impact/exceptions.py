"""Custom exceptions for bundle-impact."""


class BundleImpactError(Exception):
    """Base exception for all bundle-impact errors."""


class ConfigError(BundleImpactError):
    """Configuration-related errors."""


class GitError(BundleImpactError):
    """A git command failed or could not be run."""


class PullRequestError(BundleImpactError):
    """Reading or writing the pull request failed."""


class ReportError(BundleImpactError):
    """The bundle impact report could not be produced."""


class GhNotAvailableError(PullRequestError):
    """Raised when the GitHub CLI is not installed."""

    def __init__(self) -> None:
        super().__init__(
            "The GitHub CLI ('gh') is required to update pull requests. "
            "Install it from https://cli.github.com"
        )
