"""Pydantic models for GitHub payloads and release-manager records.

These schemas are the contract between the GitHub client, the workflows
and the outer layers (CLI and HTTP service). They are used for:
- Parsing GitHub REST responses into typed objects
- Describing the progress steps of a release-candidate run
- Request/response serialization in the API layer

Key design decisions:
- GitHub payload models ignore unknown fields; GitHub responses carry far
  more keys than the workflows read
- A missing release is ``None``, never an error
- Field names follow GitHub's snake_case naming so payloads validate as-is
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class VersioningStrategy(StrEnum):
    """How the next release-candidate version is derived.

    SEMVER: Bump the minor part of the latest release tag
    CALVER: Use today's date (YYYY.MM.DD)
    """

    SEMVER = "semver"
    CALVER = "calver"


# ---------------------------------------------------------------------------
# GitHub Payloads
# ---------------------------------------------------------------------------


class GitHubModel(BaseModel):
    """Base for models parsed from GitHub responses."""

    model_config = ConfigDict(extra="ignore")


class Owner(GitHubModel):
    login: str


class Repository(GitHubModel):
    """Repository metadata as returned by ``GET /repos/{owner}/{repo}``."""

    name: str = Field(..., description="Repository name")
    full_name: str = Field("", description="owner/name")
    owner: Owner
    default_branch: str = Field(..., description="Name of the default branch")
    html_url: str = Field("", description="Repository web URL")


class CommitDetails(GitHubModel):
    message: str


class Commit(GitHubModel):
    """A commit as returned by ``GET /repos/{owner}/{repo}/commits/{ref}``."""

    sha: str
    html_url: str
    commit: CommitDetails


class BranchCommit(GitHubModel):
    sha: str


class Branch(GitHubModel):
    name: str
    commit: BranchCommit
    protected: bool = False


class GitRefObject(GitHubModel):
    sha: str


class GitRef(GitHubModel):
    """A created git reference, e.g. ``refs/heads/rc/1.2.0``."""

    ref: str
    object: GitRefObject


class Comparison(GitHubModel):
    """The diff between two branches."""

    ahead_by: int = Field(..., ge=0, description="Commits the head is ahead of the base")
    html_url: str = Field(..., description="Comparison web URL")
    status: str = Field("", description="ahead, behind, identical or diverged")


class Release(GitHubModel):
    """A GitHub release.

    Attributes:
        tag_name: Tag the release points at (e.g. "rc-1.2.0")
        target_commitish: Branch the release was cut from
        html_url: Release web URL
    """

    id: int = 0
    tag_name: str
    target_commitish: str
    name: str | None = None
    html_url: str = ""
    draft: bool = False
    prerelease: bool = False
    body: str | None = None


# ---------------------------------------------------------------------------
# Domain Records
# ---------------------------------------------------------------------------


class NextReleaseInfo(BaseModel):
    """Target state of the release candidate about to be created."""

    rc_branch: str = Field(..., min_length=1, description="Branch to create, e.g. rc/1.2.0")
    rc_release_tag: str = Field(..., min_length=1, description="Tag to assign, e.g. rc-1.2.0")
    release_name: str = Field(..., min_length=1, description="Human-readable release name")


class ResponseStep(BaseModel):
    """One completed remote operation in a release-candidate run.

    Attributes:
        message: Primary description of what happened
        secondary_message: Optional detail (commit message, ref, tag...)
        link: Optional URL to the affected GitHub object
    """

    message: str
    secondary_message: str | None = None
    link: str | None = None


class GitHubBatchInfo(BaseModel):
    """Snapshot of repository state shown before cutting a release candidate.

    ``release_branch`` is None exactly when ``latest_release`` is None.
    """

    repository: Repository
    latest_release: Release | None = None
    release_branch: Branch | None = None


class RcSuccessArgs(BaseModel):
    """Public identifiers handed to the completion callback of a run."""

    github_release_url: str
    github_release_name: str | None
    comparison_url: str
    previous_tag: str | None = None
    created_tag: str


class CreateRcResponse(BaseModel):
    steps: list[ResponseStep] = Field(default_factory=list)
