"""Release workflows built on top of the GitHub client.

Each workflow is a plain async function taking a GitHubClientProtocol so
it can run against the real API or an in-memory mock.
"""

from release_manager.workflows.batch_info import get_github_batch_info
from release_manager.workflows.create_rc import create_rc
from release_manager.workflows.latest_release import get_latest_release
from release_manager.workflows.rc_info import get_rc_github_info

__all__ = [
    "create_rc",
    "get_github_batch_info",
    "get_latest_release",
    "get_rc_github_info",
]
