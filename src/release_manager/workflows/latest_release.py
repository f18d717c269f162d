"""Latest-release lookup."""

from __future__ import annotations

from release_manager.clients.github import GitHubClientProtocol
from release_manager.schemas import Release


async def get_latest_release(client: GitHubClientProtocol) -> Release | None:
    """Return the newest non-draft release, or None if the repo has none.

    GitHub lists releases newest first, so the first published entry wins.
    """
    releases = await client.get_recent_releases()
    return next((release for release in releases if not release.draft), None)
