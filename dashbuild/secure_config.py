"""
Secure Configuration Management

Provides centralized, validated configuration for metric collection runs.
Replaces ad hoc os.getenv() calls with strict validation and fail-fast behavior.

Usage:
    from dashbuild.secure_config import get_config

    config = get_config()
    github_config = config.get_github_config("GITHUB_STATS_")
    collection_config = config.get_collection_config("GITHUB_STATS_", default_areas=["prs", "issues"])

Security Features:
    - Fail-fast on missing/invalid configuration, before any network activity
    - Placeholder detection (e.g., "your_token_here")
    - HTTPS enforcement for the API base URL

Raises:
    ConfigurationError: If configuration is missing or invalid
"""

import os
import re
from dataclasses import dataclass, field

from dotenv import load_dotenv


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


REPOSITORY_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+/[A-Za-z0-9_.\-]+$")
TOKEN_PLACEHOLDERS = ["your_token", "your_pat", "placeholder", "replace_me", "xxx", "changeme"]


@dataclass
class GitHubConfig:
    """
    Validated GitHub API configuration.
    """

    token: str
    repository: str
    api_base_url: str = "https://api.github.com"
    env_prefix: str = ""

    def __post_init__(self):
        self._validate()

    def _validate(self):
        """
        Validate GitHub configuration.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.token:
            raise ConfigurationError("GITHUB_TOKEN is not set.")

        if any(placeholder in self.token.lower() for placeholder in TOKEN_PLACEHOLDERS):
            raise ConfigurationError("GITHUB_TOKEN contains a placeholder value - please set a real token")

        if not self.repository:
            raise ConfigurationError(f"{self.env_prefix}REPOSITORY is not set.")

        if not REPOSITORY_PATTERN.match(self.repository):
            raise ConfigurationError(
                f"{self.env_prefix}REPOSITORY must be in owner/repo form: {self.repository}"
            )

        if not self.api_base_url.startswith("https://"):
            raise ConfigurationError(f"GITHUB_API_URL must use HTTPS: {self.api_base_url}")

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0]

    @property
    def repo(self) -> str:
        return self.repository.split("/", 1)[1]


@dataclass
class CollectionConfig:
    """
    Validated settings for one collection run.

    Attributes:
        dashbuild_dir: Dashbuild checkout the data file is written into
        areas: Ordered list of requested area names
        lookback_days: Window for "recent" activity
        retention_days: History retention window (0 = unlimited)
        cache_file: Durable cache path ("" = disabled)
        max_review_prs: Cap on per-PR review fetches
        max_branch_checks: Cap on per-branch last-commit fetches
        max_concurrency: Areas collected at the same time
    """

    dashbuild_dir: str
    areas: list[str] = field(default_factory=list)
    lookback_days: int = 90
    retention_days: int = 90
    cache_file: str = ""
    max_review_prs: int = 30
    max_branch_checks: int = 20
    max_concurrency: int = 4

    def __post_init__(self):
        self._validate()

    def _validate(self):
        if not self.dashbuild_dir:
            raise ConfigurationError("DASHBUILD_DIR is not set. Did you run dashbuild/setup first?")

        if not self.areas:
            raise ConfigurationError("At least one metrics area must be configured")

        for name in ("lookback_days", "retention_days", "max_review_prs", "max_branch_checks"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must not be negative: {getattr(self, name)}")

        if self.max_concurrency < 1:
            raise ConfigurationError(f"max_concurrency must be at least 1: {self.max_concurrency}")


def parse_areas(areas_str: str) -> list[str]:
    """Split a comma-separated area list, dropping blanks."""
    return [area.strip() for area in areas_str.split(",") if area.strip()]


def _get_int(key: str, default: int) -> int:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from e


class SecureConfig:
    """
    Centralized secure configuration manager.

    Loads and validates configuration from environment variables (and a .env file).
    """

    def __init__(self):
        """Initialize configuration (loads .env file)."""
        load_dotenv()

    def get_github_config(self, env_prefix: str) -> GitHubConfig:
        """
        Get validated GitHub configuration.

        Args:
            env_prefix: Profile prefix, e.g. "GITHUB_STATS_" or "DEPENDABOT_"

        Raises:
            ConfigurationError: If configuration is missing or invalid
        """
        return GitHubConfig(
            token=os.getenv("GITHUB_TOKEN", ""),
            repository=os.getenv(f"{env_prefix}REPOSITORY", ""),
            api_base_url=os.getenv("GITHUB_API_URL") or "https://api.github.com",
            env_prefix=env_prefix,
        )

    def get_collection_config(self, env_prefix: str, default_areas: list[str]) -> CollectionConfig:
        """
        Get validated collection run configuration.

        Args:
            env_prefix: Profile prefix, e.g. "GITHUB_STATS_"
            default_areas: Areas used when <prefix>AREAS is unset

        Raises:
            ConfigurationError: If configuration is missing or invalid
        """
        areas_str = os.getenv(f"{env_prefix}AREAS") or ",".join(default_areas)

        return CollectionConfig(
            dashbuild_dir=os.getenv("DASHBUILD_DIR", ""),
            areas=parse_areas(areas_str),
            lookback_days=_get_int(f"{env_prefix}LOOKBACK_DAYS", 90),
            retention_days=_get_int(f"{env_prefix}RETENTION_DAYS", 90),
            cache_file=os.getenv(f"{env_prefix}CACHE_FILE", ""),
            max_review_prs=_get_int(f"{env_prefix}MAX_REVIEW_PRS", 30),
            max_branch_checks=_get_int(f"{env_prefix}MAX_BRANCH_CHECKS", 20),
            max_concurrency=_get_int(f"{env_prefix}MAX_CONCURRENCY", 4),
        )


_config_instance = None


def get_config() -> SecureConfig:
    """
    Get the global configuration instance (singleton pattern).

    Returns:
        SecureConfig: The configuration manager
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = SecureConfig()
    return _config_instance
