"""Project configuration for the release manager.

The configuration names the repository to operate on and how release
candidates are versioned. It is read from a YAML file, e.g.:

    owner: myorg
    repo: api
    versioning_strategy: semver

Environment variables fill whatever the file leaves unset:
GITHUB_OWNER, GITHUB_REPO, GITHUB_TOKEN, VERSIONING_STRATEGY.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from release_manager.schemas import VersioningStrategy

DEFAULT_CONFIG_PATH = "release-manager.yaml"

_ENV_FIELDS = {
    "owner": "GITHUB_OWNER",
    "repo": "GITHUB_REPO",
    "token": "GITHUB_TOKEN",
    "versioning_strategy": "VERSIONING_STRATEGY",
}


class ProjectConfig(BaseModel):
    """Repository coordinates and release settings.

    Attributes:
        owner: Repository owner (user or organization)
        repo: Repository name
        versioning_strategy: semver or calver
        api_base_url: GitHub REST API root (override for GitHub Enterprise)
        html_base_url: GitHub web root, used to build branch links
        token: Personal access token sent as a bearer header
    """

    owner: str = Field(..., min_length=1)
    repo: str = Field(..., min_length=1)
    versioning_strategy: VersioningStrategy = VersioningStrategy.SEMVER
    api_base_url: str = "https://api.github.com"
    html_base_url: str = "https://github.com"
    token: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def repository_html_url(self) -> str:
        return f"{self.html_base_url.rstrip('/')}/{self.full_name}"


def load_project_config(path: str | Path = DEFAULT_CONFIG_PATH) -> ProjectConfig:
    """Load and validate the project config.

    Args:
        path: Path to the YAML configuration file. A missing file is
              treated as empty, so the environment alone can configure
              the project.

    Returns:
        A validated ProjectConfig.

    Raises:
        ValueError: If the YAML content is invalid or fails validation.
    """
    config_path = Path(path)
    raw: dict = {}
    if config_path.exists():
        try:
            raw = yaml.safe_load(config_path.read_text()) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid project config in {path}: expected a mapping")

    for field, env_var in _ENV_FIELDS.items():
        value = os.environ.get(env_var)
        if raw.get(field) is None and value:
            raw[field] = value

    try:
        return ProjectConfig.model_validate(raw)
    except Exception as exc:
        raise ValueError(f"Invalid project config in {path}: {exc}") from exc
