"""GitHub API client used by the release workflows.

This module wraps the handful of GitHub REST endpoints needed to inspect a
repository and cut a release candidate:
- Repository metadata, branches, latest commit on a branch
- Recent releases
- Creating a git ref, comparing two branches, creating a release

Design notes:
- Uses httpx for async HTTP requests
- Every call is single-shot: no retry, no pagination
- Non-2xx responses become GitHubApiError carrying GitHub's error message,
  so callers can recognise specific failures ("Reference already exists")
- Uses a Protocol so the workflows don't depend on the concrete
  implementation (makes testing with mocks easy)

GitHub API docs: https://docs.github.com/en/rest
"""

from __future__ import annotations

from typing import Any, Protocol
from urllib.parse import quote

import httpx

from release_manager.config import ProjectConfig
from release_manager.errors import GitHubApiError
from release_manager.logging_config import get_logger
from release_manager.schemas import (
    Branch,
    Commit,
    Comparison,
    GitRef,
    NextReleaseInfo,
    Release,
    Repository,
)

logger = get_logger(__name__)

REFERENCE_ALREADY_EXISTS = "Reference already exists"


def quote_branch(branch: str) -> str:
    """Percent-encode a branch name for a URL path; "/" separators stay as-is."""
    return quote(branch, safe="/")


# ---------------------------------------------------------------------------
# Protocol (Interface)
# ---------------------------------------------------------------------------


class GitHubClientProtocol(Protocol):
    """Protocol defining the GitHub operations the workflows rely on.

    By coding against this protocol (not the concrete class), the workflows
    and tests can use mock implementations without touching real GitHub.
    """

    @property
    def repository_html_url(self) -> str:
        """Web URL of the repository, used to build branch links."""
        ...

    async def get_repository(self) -> Repository: ...

    async def get_latest_commit(self, branch: str) -> Commit: ...

    async def get_branch(self, branch: str) -> Branch: ...

    async def get_recent_releases(self) -> list[Release]: ...

    async def create_ref(self, sha: str, branch: str) -> GitRef:
        """Create ``refs/heads/<branch>`` pointing at ``sha``.

        Raises:
            GitHubApiError: with message "Reference already exists" when
                the branch is already taken
        """
        ...

    async def get_comparison(self, previous_branch: str, next_branch: str) -> Comparison: ...

    async def create_release(self, next_info: NextReleaseInfo, body: str) -> Release: ...


# ---------------------------------------------------------------------------
# Concrete Implementation
# ---------------------------------------------------------------------------


class GitHubClient:
    """Real GitHub API client using httpx.

    Usage:
        client = GitHubClient(ProjectConfig(owner="myorg", repo="api", token="ghp_..."))
        repository = await client.get_repository()
    """

    def __init__(
        self,
        config: ProjectConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            config: Project configuration (repository coordinates, token)
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
            timeout: Per-request timeout in seconds
        """
        self._config = config
        self._transport = transport
        self._timeout = timeout
        self._headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if config.token:
            self._headers["Authorization"] = f"Bearer {config.token}"

    @property
    def repository_html_url(self) -> str:
        return self._config.repository_html_url

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self._config.full_name}"

    async def get_repository(self) -> Repository:
        data = await self._request("GET", self._repo_path)
        return Repository.model_validate(data)

    async def get_latest_commit(self, branch: str) -> Commit:
        data = await self._request("GET", f"{self._repo_path}/commits/{quote_branch(branch)}")
        return Commit.model_validate(data)

    async def get_branch(self, branch: str) -> Branch:
        data = await self._request("GET", f"{self._repo_path}/branches/{quote_branch(branch)}")
        return Branch.model_validate(data)

    async def get_recent_releases(self) -> list[Release]:
        """Fetch the most recent releases, newest first (first page only)."""
        data = await self._request(
            "GET", f"{self._repo_path}/releases", params={"per_page": 100}
        )
        return [Release.model_validate(item) for item in data]

    async def create_ref(self, sha: str, branch: str) -> GitRef:
        data = await self._request(
            "POST",
            f"{self._repo_path}/git/refs",
            json={"ref": f"refs/heads/{branch}", "sha": sha},
        )
        return GitRef.model_validate(data)

    async def get_comparison(self, previous_branch: str, next_branch: str) -> Comparison:
        data = await self._request(
            "GET",
            f"{self._repo_path}/compare/"
            f"{quote_branch(previous_branch)}...{quote_branch(next_branch)}",
        )
        return Comparison.model_validate(data)

    async def create_release(self, next_info: NextReleaseInfo, body: str) -> Release:
        data = await self._request(
            "POST",
            f"{self._repo_path}/releases",
            json={
                "tag_name": next_info.rc_release_tag,
                "target_commitish": next_info.rc_branch,
                "name": next_info.release_name,
                "body": body,
                "prerelease": True,
            },
        )
        return Release.model_validate(data)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            GitHubApiError: If GitHub answers with a non-2xx status
            httpx.HTTPError: On connection failures and timeouts
        """
        logger.debug("github_request", method=method, url=url)
        async with httpx.AsyncClient(
            base_url=self._config.api_base_url,
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            resp = await client.request(method, url, params=params, json=json)

        if resp.is_error:
            message = self._error_message(resp)
            logger.warning(
                "github_request_failed",
                method=method,
                url=url,
                status_code=resp.status_code,
                message=message,
            )
            raise GitHubApiError(resp.status_code, message)
        return resp.json()

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        """Extract the ``message`` field from a GitHub error body."""
        try:
            body = resp.json()
        except ValueError:
            return resp.text
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return resp.text


# ---------------------------------------------------------------------------
# Mock Implementation (for testing)
# ---------------------------------------------------------------------------


class MockGitHubClient:
    """In-memory GitHub client that behaves like a tiny repository.

    Use this in tests and local development when you don't want to hit
    the real GitHub API. Branches map to their head commit; creating a ref
    for an existing branch fails the way GitHub does.

    Usage:
        client = MockGitHubClient(default_branch="main")
        steps = await create_rc(client, "main", None, next_info)
    """

    def __init__(
        self,
        owner: str = "myorg",
        repo: str = "api",
        default_branch: str = "main",
        releases: list[Release] | None = None,
        ahead_by: int = 0,
    ) -> None:
        """Initialize the fake repository.

        Args:
            owner: Repository owner
            repo: Repository name
            default_branch: Name of the default branch (created with one commit)
            releases: Existing releases, newest first
            ahead_by: Commit count reported by every comparison
        """
        self.owner = owner
        self.repo = repo
        self.default_branch = default_branch
        self.releases: list[Release] = list(releases or [])
        self.ahead_by = ahead_by
        self.commits: dict[str, Commit] = {}
        self.branches: dict[str, str] = {}
        self.add_commit(default_branch, "Initial commit")
        for release in self.releases:
            self.branches.setdefault(release.target_commitish, self.branches[default_branch])

    @property
    def repository_html_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}"

    def add_commit(self, branch: str, message: str) -> Commit:
        """Append a commit to ``branch`` (creating the branch if needed)."""
        sha = f"{len(self.commits) + 1:040x}"
        commit = Commit.model_validate(
            {
                "sha": sha,
                "html_url": f"{self.repository_html_url}/commit/{sha}",
                "commit": {"message": message},
            }
        )
        self.commits[sha] = commit
        self.branches[branch] = sha
        return commit

    async def get_repository(self) -> Repository:
        return Repository.model_validate(
            {
                "name": self.repo,
                "full_name": f"{self.owner}/{self.repo}",
                "owner": {"login": self.owner},
                "default_branch": self.default_branch,
                "html_url": self.repository_html_url,
            }
        )

    async def get_latest_commit(self, branch: str) -> Commit:
        return self.commits[self._head(branch)]

    async def get_branch(self, branch: str) -> Branch:
        return Branch.model_validate(
            {"name": branch, "commit": {"sha": self._head(branch)}}
        )

    async def get_recent_releases(self) -> list[Release]:
        return list(self.releases)

    async def create_ref(self, sha: str, branch: str) -> GitRef:
        if branch in self.branches:
            raise GitHubApiError(422, REFERENCE_ALREADY_EXISTS)
        if sha not in self.commits:
            raise GitHubApiError(422, "Object does not exist")
        self.branches[branch] = sha
        return GitRef.model_validate({"ref": f"refs/heads/{branch}", "object": {"sha": sha}})

    async def get_comparison(self, previous_branch: str, next_branch: str) -> Comparison:
        self._head(previous_branch)
        self._head(next_branch)
        return Comparison(
            ahead_by=self.ahead_by,
            html_url=f"{self.repository_html_url}/compare/{previous_branch}...{next_branch}",
            status="ahead" if self.ahead_by else "identical",
        )

    async def create_release(self, next_info: NextReleaseInfo, body: str) -> Release:
        if any(r.tag_name == next_info.rc_release_tag for r in self.releases):
            raise GitHubApiError(422, "Validation Failed")
        release = Release(
            id=len(self.releases) + 1,
            tag_name=next_info.rc_release_tag,
            target_commitish=next_info.rc_branch,
            name=next_info.release_name,
            html_url=f"{self.repository_html_url}/releases/tag/{next_info.rc_release_tag}",
            prerelease=True,
            body=body,
        )
        self.releases.insert(0, release)
        return release

    def _head(self, branch: str) -> str:
        try:
            return self.branches[branch]
        except KeyError:
            raise GitHubApiError(404, "Branch not found") from None
