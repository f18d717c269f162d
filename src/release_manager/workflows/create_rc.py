"""Release-candidate creation pipeline.

Cutting a release candidate is a strictly ordered sequence of GitHub calls,
each feeding the next:
1. Fetch the most recent commit on the default branch
2. Create the release-candidate branch at that commit
3. Compare the previous release branch with the new one
4. Create the (pre)release on the new branch
5. Hand the public identifiers to the optional completion callback

A ResponseStep is appended after each remote call succeeds. Any failure
aborts the run and nothing accumulated so far is returned.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable

from release_manager.clients.github import REFERENCE_ALREADY_EXISTS, GitHubClientProtocol
from release_manager.errors import GitHubApiError, GitHubReleaseManagerError
from release_manager.schemas import (
    GitRef,
    NextReleaseInfo,
    RcSuccessArgs,
    Release,
    ResponseStep,
)

# Type alias for completion callbacks; async callbacks are awaited
SuccessCallback = Callable[[RcSuccessArgs], Awaitable[None] | None]


def compose_release_body(comparison_url: str, ahead_by: int, release_branch_ref: str) -> str:
    """Build the release description; callers may append text after the rule."""
    return (
        f"**Compare** {comparison_url}\n"
        "\n"
        f"**Ahead by** {ahead_by} commits\n"
        "\n"
        f"**Release branch** {release_branch_ref}\n"
        "\n"
        "---\n"
        "\n"
    )


async def create_rc(
    client: GitHubClientProtocol,
    default_branch: str,
    latest_release: Release | None,
    next_info: NextReleaseInfo,
    success_cb: SuccessCallback | None = None,
) -> list[ResponseStep]:
    """Cut a release-candidate branch and create its release.

    Args:
        client: GitHub client to operate through
        default_branch: Branch the release candidate is cut from
        latest_release: The previous release, or None if there is none
        next_info: Branch, tag and name of the release candidate
        success_cb: Optional callback invoked once after the release exists

    Returns:
        The four ResponseSteps, in execution order

    Raises:
        GitHubReleaseManagerError: If the release-candidate branch already exists
        GitHubApiError: If any other GitHub call fails
    """
    response_steps: list[ResponseStep] = []

    latest_commit = await client.get_latest_commit(default_branch)
    response_steps.append(
        ResponseStep(
            message=f'Fetched latest commit from "{default_branch}"',
            secondary_message=f'with message "{latest_commit.commit.message}"',
            link=latest_commit.html_url,
        )
    )

    created_ref = await _create_release_branch(client, latest_commit.sha, next_info.rc_branch)
    response_steps.append(
        ResponseStep(
            message="Cut Release Branch",
            secondary_message=f'with ref "{created_ref.ref}"',
        )
    )

    previous_release_branch = (
        latest_release.target_commitish if latest_release is not None else default_branch
    )
    next_release_branch = next_info.rc_branch
    comparison = await client.get_comparison(previous_release_branch, next_release_branch)
    release_body = compose_release_body(comparison.html_url, comparison.ahead_by, created_ref.ref)
    response_steps.append(
        ResponseStep(
            message="Fetched commit comparison",
            secondary_message=f"{previous_release_branch}...{next_release_branch}",
            link=comparison.html_url,
        )
    )

    created_release = await client.create_release(next_info, release_body)
    response_steps.append(
        ResponseStep(
            message=f'Created Release Candidate "{created_release.name or created_release.tag_name}"',
            secondary_message=f'with tag "{next_info.rc_release_tag}"',
            link=created_release.html_url,
        )
    )

    if success_cb is not None:
        outcome = success_cb(
            RcSuccessArgs(
                github_release_url=created_release.html_url,
                github_release_name=created_release.name,
                comparison_url=comparison.html_url,
                previous_tag=latest_release.tag_name if latest_release is not None else None,
                created_tag=created_release.tag_name,
            )
        )
        if inspect.isawaitable(outcome):
            await outcome

    return response_steps


async def _create_release_branch(client: GitHubClientProtocol, sha: str, branch: str) -> GitRef:
    try:
        return await client.create_ref(sha, branch)
    except GitHubApiError as error:
        if error.message == REFERENCE_ALREADY_EXISTS:
            raise GitHubReleaseManagerError(
                f'Branch "{branch}" already exists: {client.repository_html_url}/tree/{branch}'
            ) from error
        raise
