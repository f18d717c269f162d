"""Tests for the GitHub clients.

GitHubClient is exercised against httpx.MockTransport so requests can be
inspected without network access. MockGitHubClient is checked for the
GitHub behaviours the workflows depend on.

Run with: pytest tests/test_github_client.py -v
"""

from __future__ import annotations

import json

import httpx
import pytest

from release_manager.clients.github import GitHubClient, MockGitHubClient
from release_manager.config import ProjectConfig
from release_manager.errors import GitHubApiError
from release_manager.schemas import NextReleaseInfo, Release
from release_manager.workflows.batch_info import get_github_batch_info

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config() -> ProjectConfig:
    return ProjectConfig(owner="myorg", repo="api", token="ghp_test")


@pytest.fixture
def requests() -> list[httpx.Request]:
    return []


def make_client(
    config: ProjectConfig,
    requests: list[httpx.Request],
    response: httpx.Response,
) -> GitHubClient:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return response

    return GitHubClient(config, transport=httpx.MockTransport(handler))


# ---------------------------------------------------------------------------
# GitHubClient
# ---------------------------------------------------------------------------


class TestGitHubClientRequests:
    """Tests for the requests sent to GitHub."""

    @pytest.mark.asyncio
    async def test_get_repository(self, config: ProjectConfig, requests: list) -> None:
        client = make_client(
            config,
            requests,
            httpx.Response(
                200,
                json={
                    "id": 1,
                    "name": "api",
                    "full_name": "myorg/api",
                    "owner": {"login": "myorg", "id": 9},
                    "default_branch": "main",
                    "html_url": "https://github.com/myorg/api",
                    "private": False,
                },
            ),
        )

        repository = await client.get_repository()

        assert repository.default_branch == "main"
        assert repository.owner.login == "myorg"
        assert requests[0].method == "GET"
        assert requests[0].url == "https://api.github.com/repos/myorg/api"

    @pytest.mark.asyncio
    async def test_sends_auth_and_version_headers(
        self, config: ProjectConfig, requests: list
    ) -> None:
        client = make_client(config, requests, httpx.Response(200, json=[]))

        await client.get_recent_releases()

        headers = requests[0].headers
        assert headers["Authorization"] == "Bearer ghp_test"
        assert headers["X-GitHub-Api-Version"] == "2022-11-28"

    @pytest.mark.asyncio
    async def test_no_auth_header_without_token(self, requests: list) -> None:
        client = make_client(
            ProjectConfig(owner="myorg", repo="api"), requests, httpx.Response(200, json=[])
        )

        await client.get_recent_releases()

        assert "Authorization" not in requests[0].headers

    @pytest.mark.asyncio
    async def test_get_recent_releases_single_page(
        self, config: ProjectConfig, requests: list
    ) -> None:
        client = make_client(
            config,
            requests,
            httpx.Response(
                200,
                json=[{"id": 3, "tag_name": "rc-1.1.0", "target_commitish": "rc/1.1.0"}],
            ),
        )

        releases = await client.get_recent_releases()

        assert releases == [Release(id=3, tag_name="rc-1.1.0", target_commitish="rc/1.1.0")]
        assert requests[0].url.params["per_page"] == "100"
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_get_latest_commit(self, config: ProjectConfig, requests: list) -> None:
        client = make_client(
            config,
            requests,
            httpx.Response(
                200,
                json={
                    "sha": "abc123",
                    "html_url": "https://github.com/myorg/api/commit/abc123",
                    "commit": {"message": "Fix login", "author": {"name": "dev"}},
                },
            ),
        )

        commit = await client.get_latest_commit("main")

        assert commit.sha == "abc123"
        assert commit.commit.message == "Fix login"
        assert requests[0].url.path == "/repos/myorg/api/commits/main"

    @pytest.mark.asyncio
    async def test_create_ref(self, config: ProjectConfig, requests: list) -> None:
        client = make_client(
            config,
            requests,
            httpx.Response(
                201, json={"ref": "refs/heads/rc/1.3.0", "object": {"sha": "abc123", "type": "commit"}}
            ),
        )

        ref = await client.create_ref("abc123", "rc/1.3.0")

        assert ref.ref == "refs/heads/rc/1.3.0"
        assert requests[0].method == "POST"
        assert requests[0].url.path == "/repos/myorg/api/git/refs"
        assert json.loads(requests[0].content) == {"ref": "refs/heads/rc/1.3.0", "sha": "abc123"}

    @pytest.mark.asyncio
    async def test_get_comparison(self, config: ProjectConfig, requests: list) -> None:
        client = make_client(
            config,
            requests,
            httpx.Response(
                200,
                json={
                    "ahead_by": 4,
                    "behind_by": 0,
                    "status": "ahead",
                    "html_url": "https://github.com/myorg/api/compare/main...rc/1.0.0",
                },
            ),
        )

        comparison = await client.get_comparison("main", "rc/1.0.0")

        assert comparison.ahead_by == 4
        assert requests[0].url.path == "/repos/myorg/api/compare/main...rc/1.0.0"

    @pytest.mark.asyncio
    async def test_create_release_is_prerelease(
        self, config: ProjectConfig, requests: list
    ) -> None:
        client = make_client(
            config,
            requests,
            httpx.Response(
                201,
                json={
                    "id": 8,
                    "tag_name": "rc-1.3.0",
                    "target_commitish": "rc/1.3.0",
                    "name": "Version 1.3.0",
                    "html_url": "https://github.com/myorg/api/releases/tag/rc-1.3.0",
                    "prerelease": True,
                },
            ),
        )
        next_info = NextReleaseInfo(
            rc_branch="rc/1.3.0", rc_release_tag="rc-1.3.0", release_name="Version 1.3.0"
        )

        release = await client.create_release(next_info, "body text")

        assert release.tag_name == "rc-1.3.0"
        assert json.loads(requests[0].content) == {
            "tag_name": "rc-1.3.0",
            "target_commitish": "rc/1.3.0",
            "name": "Version 1.3.0",
            "body": "body text",
            "prerelease": True,
        }


class TestBranchNamesInPaths:
    """Branch names are percent-encoded so "#" and "%" reach GitHub intact."""

    @pytest.mark.asyncio
    async def test_get_branch_encodes_hash(self, config: ProjectConfig, requests: list) -> None:
        client = make_client(
            config,
            requests,
            httpx.Response(200, json={"name": "hotfix#12", "commit": {"sha": "abc123"}}),
        )

        await client.get_branch("hotfix#12")

        assert requests[0].url.raw_path == b"/repos/myorg/api/branches/hotfix%2312"

    @pytest.mark.asyncio
    async def test_get_latest_commit_keeps_slashes(
        self, config: ProjectConfig, requests: list
    ) -> None:
        client = make_client(
            config,
            requests,
            httpx.Response(
                200, json={"sha": "abc123", "html_url": "https://x", "commit": {"message": "m"}}
            ),
        )

        await client.get_latest_commit("release/50%-off")

        assert requests[0].url.raw_path == b"/repos/myorg/api/commits/release/50%25-off"

    @pytest.mark.asyncio
    async def test_get_comparison_encodes_both_branches(
        self, config: ProjectConfig, requests: list
    ) -> None:
        client = make_client(
            config, requests, httpx.Response(200, json={"ahead_by": 1, "html_url": "https://x"})
        )

        await client.get_comparison("hotfix#11", "rc/1.0.0")

        assert requests[0].url.raw_path == b"/repos/myorg/api/compare/hotfix%2311...rc/1.0.0"

    @pytest.mark.asyncio
    async def test_batch_info_reads_branch_of_release(self, config: ProjectConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.raw_path.split(b"?")[0]
            if path == b"/repos/myorg/api":
                return httpx.Response(
                    200,
                    json={"name": "api", "owner": {"login": "myorg"}, "default_branch": "main"},
                )
            if path == b"/repos/myorg/api/releases":
                return httpx.Response(
                    200, json=[{"tag_name": "rc-1.2.0", "target_commitish": "hotfix#12"}]
                )
            if path == b"/repos/myorg/api/branches/hotfix%2312":
                return httpx.Response(200, json={"name": "hotfix#12", "commit": {"sha": "abc"}})
            return httpx.Response(404, json={"message": "Branch not found"})

        client = GitHubClient(config, transport=httpx.MockTransport(handler))

        info = await get_github_batch_info(client)

        assert info.release_branch.name == "hotfix#12"


class TestGitHubClientErrors:
    """Tests for the mapping of error responses to GitHubApiError."""

    @pytest.mark.asyncio
    async def test_existing_reference(self, config: ProjectConfig, requests: list) -> None:
        client = make_client(
            config,
            requests,
            httpx.Response(
                422,
                json={
                    "message": "Reference already exists",
                    "documentation_url": "https://docs.github.com/rest/git/refs#create-a-reference",
                },
            ),
        )

        with pytest.raises(GitHubApiError) as exc_info:
            await client.create_ref("abc123", "rc/1.3.0")

        assert exc_info.value.status_code == 422
        assert exc_info.value.message == "Reference already exists"

    @pytest.mark.asyncio
    async def test_non_json_error_body(self, config: ProjectConfig, requests: list) -> None:
        client = make_client(config, requests, httpx.Response(502, text="Bad Gateway"))

        with pytest.raises(GitHubApiError) as exc_info:
            await client.get_repository()

        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Bad Gateway"

    @pytest.mark.asyncio
    async def test_requests_are_not_retried(self, config: ProjectConfig, requests: list) -> None:
        client = make_client(config, requests, httpx.Response(500, json={"message": "Server Error"}))

        with pytest.raises(GitHubApiError):
            await client.get_branch("main")

        assert len(requests) == 1


# ---------------------------------------------------------------------------
# MockGitHubClient
# ---------------------------------------------------------------------------


class TestMockGitHubClient:
    """Tests for the in-memory client used in development and tests."""

    @pytest.mark.asyncio
    async def test_existing_branch_is_rejected(self) -> None:
        client = MockGitHubClient()
        commit = await client.get_latest_commit("main")

        with pytest.raises(GitHubApiError, match="Reference already exists"):
            await client.create_ref(commit.sha, "main")

    @pytest.mark.asyncio
    async def test_unknown_branch_is_not_found(self) -> None:
        client = MockGitHubClient()

        with pytest.raises(GitHubApiError) as exc_info:
            await client.get_branch("rc/9.9.9")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_created_release_becomes_latest(self) -> None:
        client = MockGitHubClient(
            releases=[Release(id=1, tag_name="rc-1.0.0", target_commitish="rc/1.0.0")]
        )
        next_info = NextReleaseInfo(
            rc_branch="rc/1.1.0", rc_release_tag="rc-1.1.0", release_name="Version 1.1.0"
        )

        await client.create_release(next_info, "")

        releases = await client.get_recent_releases()
        assert [r.tag_name for r in releases] == ["rc-1.1.0", "rc-1.0.0"]
