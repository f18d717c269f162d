"""Exception hierarchy for the release manager."""

from __future__ import annotations


class ReleaseManagerError(Exception):
    """Base class for all release-manager errors."""


class GitHubApiError(ReleaseManagerError):
    """Raised when the GitHub API answers with a non-2xx status.

    Attributes:
        status_code: HTTP status of the failed response
        message: The ``message`` field of GitHub's error body, or the raw text
    """

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"GitHub API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class GitHubReleaseManagerError(ReleaseManagerError):
    """Raised for domain failures, e.g. a release branch that already exists."""
