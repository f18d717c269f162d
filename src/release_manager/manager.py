"""Release manager facade and CLI.

This module ties together all the components:
- Project configuration (config.py)
- The GitHub client (clients/github.py)
- The release workflows (workflows/)

Cutting a release candidate follows this flow:
1. Fetch repository and latest release info (batch info)
2. Derive the next release candidate from the versioning strategy
3. Run the creation pipeline and return its steps

This is the main entry point whether called from the API (main.py) or
the command line.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from release_manager.clients.github import GitHubClient, GitHubClientProtocol
from release_manager.config import DEFAULT_CONFIG_PATH, ProjectConfig, load_project_config
from release_manager.errors import ReleaseManagerError
from release_manager.logging_config import get_logger, setup_logging
from release_manager.schemas import GitHubBatchInfo, ResponseStep
from release_manager.workflows import create_rc, get_github_batch_info, get_rc_github_info
from release_manager.workflows.create_rc import SuccessCallback

logger = get_logger(__name__)


class ReleaseManager:
    """Runs the release workflows for one configured repository.

    It is stateless: each call reads fresh state from GitHub.

    Usage:
        manager = ReleaseManager.from_config(load_project_config())
        steps = await manager.create_release_candidate()
    """

    def __init__(self, client: GitHubClientProtocol, config: ProjectConfig) -> None:
        self.client = client
        self.config = config

    @classmethod
    def from_config(cls, config: ProjectConfig) -> ReleaseManager:
        return cls(GitHubClient(config), config)

    async def get_batch_info(self) -> GitHubBatchInfo:
        """Fetch repository, latest release and release branch."""
        logger.info("batch_info_started", repo=self.config.full_name)
        try:
            info = await get_github_batch_info(self.client)
        except Exception as e:
            logger.error(
                "batch_info_failed",
                repo=self.config.full_name,
                error=str(e),
                exc_info=True,
            )
            raise

        logger.info(
            "batch_info_complete",
            repo=self.config.full_name,
            default_branch=info.repository.default_branch,
            latest_tag=info.latest_release.tag_name if info.latest_release else None,
        )
        return info

    async def create_release_candidate(
        self,
        success_cb: SuccessCallback | None = None,
    ) -> list[ResponseStep]:
        """Cut the next release candidate.

        Args:
            success_cb: Optional callback invoked once the release exists

        Returns:
            The ResponseSteps of the creation pipeline

        Raises:
            GitHubReleaseManagerError: If the release branch already exists
            GitHubApiError: If a GitHub call fails
        """
        info = await self.get_batch_info()
        next_info = get_rc_github_info(info.latest_release, self.config.versioning_strategy)

        logger.info(
            "rc_creation_started",
            repo=self.config.full_name,
            rc_branch=next_info.rc_branch,
            rc_release_tag=next_info.rc_release_tag,
        )
        try:
            steps = await create_rc(
                self.client,
                default_branch=info.repository.default_branch,
                latest_release=info.latest_release,
                next_info=next_info,
                success_cb=success_cb,
            )
        except Exception as e:
            logger.error(
                "rc_creation_failed",
                repo=self.config.full_name,
                rc_branch=next_info.rc_branch,
                error=str(e),
                exc_info=True,
            )
            raise

        logger.info(
            "rc_creation_complete",
            repo=self.config.full_name,
            rc_release_tag=next_info.rc_release_tag,
            steps_count=len(steps),
        )
        return steps


# ---------------------------------------------------------------------------
# CLI Entry Point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Usage:
        release-manager info
        release-manager --config release-manager.yaml create-rc
    """
    parser = argparse.ArgumentParser(description="GitHub release-candidate manager")
    parser.add_argument(
        "--config", "-c",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to the project YAML config (default: {DEFAULT_CONFIG_PATH})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("info", help="Show repository, latest release and release branch")
    subparsers.add_parser("create-rc", help="Cut the next release candidate")
    args = parser.parse_args(argv)

    setup_logging()

    try:
        manager = ReleaseManager.from_config(load_project_config(args.config))
        if args.command == "info":
            info = asyncio.run(manager.get_batch_info())
            print(info.model_dump_json(indent=2))
        else:
            steps = asyncio.run(manager.create_release_candidate())
            print(json.dumps([step.model_dump() for step in steps], indent=2))
    except (ReleaseManagerError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
