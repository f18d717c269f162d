"""Batch repository/release info fetch.

Assembles the snapshot shown before cutting a release candidate:
repository metadata, the latest release and the branch that release was
cut from. The two independent reads run concurrently; the branch read
depends on the release and only happens when one exists.
"""

from __future__ import annotations

import asyncio

from release_manager.clients.github import GitHubClientProtocol
from release_manager.schemas import GitHubBatchInfo
from release_manager.workflows.latest_release import get_latest_release


async def get_github_batch_info(client: GitHubClientProtocol) -> GitHubBatchInfo:
    """Fetch repository, latest release and release branch.

    Args:
        client: GitHub client to read from

    Returns:
        A GitHubBatchInfo; ``release_branch`` is None when there is no release

    Raises:
        GitHubApiError: If any of the reads fails (no partial result)
    """
    tasks = [
        asyncio.create_task(client.get_repository()),
        asyncio.create_task(get_latest_release(client)),
    ]
    try:
        repository, latest_release = await asyncio.gather(*tasks)
    except BaseException:
        # Cancel and reap the sibling read; the first failure propagates unchanged.
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    if latest_release is None:
        return GitHubBatchInfo(
            repository=repository,
            latest_release=None,
            release_branch=None,
        )

    release_branch = await client.get_branch(latest_release.target_commitish)

    return GitHubBatchInfo(
        repository=repository,
        latest_release=latest_release,
        release_branch=release_branch,
    )
