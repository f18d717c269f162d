"""Derive the branch, tag and name of the next release candidate.

Release candidates live on ``rc/<version>`` branches and are tagged
``rc-<version>``. Once promoted, a release is re-tagged ``version-<version>``,
so both prefixes are accepted when reading the latest release.

Two versioning strategies are supported:
- semver: bump the minor part of the latest release (1.2.3 -> 1.3.0)
- calver: use the current date (2021.03.04)
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone

from release_manager.errors import GitHubReleaseManagerError
from release_manager.schemas import NextReleaseInfo, Release, VersioningStrategy

SEMVER_TAG_RE = re.compile(r"^(?:rc|version)-(\d+)\.(\d+)\.(\d+)$")

INITIAL_SEMVER = "1.0.0"


def bump_minor(tag_name: str) -> str:
    """Return the version after ``tag_name`` with its minor part bumped.

    Raises:
        GitHubReleaseManagerError: If the tag is not rc-X.Y.Z or version-X.Y.Z
    """
    match = SEMVER_TAG_RE.match(tag_name)
    if match is None:
        raise GitHubReleaseManagerError(
            f'Invalid tag "{tag_name}": expected "rc-<major>.<minor>.<patch>" '
            'or "version-<major>.<minor>.<patch>"'
        )
    major, minor, _patch = (int(part) for part in match.groups())
    return f"{major}.{minor + 1}.0"


def get_rc_github_info(
    latest_release: Release | None,
    strategy: VersioningStrategy = VersioningStrategy.SEMVER,
    today: date | None = None,
) -> NextReleaseInfo:
    """Compute the next release candidate's branch, tag and name.

    Args:
        latest_release: The newest release, or None for a repo without releases
        strategy: Versioning strategy of the project
        today: Date used for calver; defaults to the current UTC date

    Returns:
        The NextReleaseInfo to pass to create_rc
    """
    if strategy == VersioningStrategy.CALVER:
        version = (today or datetime.now(timezone.utc).date()).strftime("%Y.%m.%d")
    elif latest_release is None:
        version = INITIAL_SEMVER
    else:
        version = bump_minor(latest_release.tag_name)

    return NextReleaseInfo(
        rc_branch=f"rc/{version}",
        rc_release_tag=f"rc-{version}",
        release_name=f"Version {version}",
    )
