"""
Tests for secure configuration management

Environment is isolated per test with monkeypatch; the .env loader is
disabled so a developer's local .env never leaks in.
"""

import pytest

from dashbuild.secure_config import (
    CollectionConfig,
    ConfigurationError,
    GitHubConfig,
    SecureConfig,
    parse_areas,
)

ENV_KEYS = [
    "DASHBUILD_DIR",
    "GITHUB_TOKEN",
    "GITHUB_API_URL",
    "GITHUB_STATS_REPOSITORY",
    "GITHUB_STATS_AREAS",
    "GITHUB_STATS_LOOKBACK_DAYS",
    "GITHUB_STATS_RETENTION_DAYS",
    "GITHUB_STATS_CACHE_FILE",
    "GITHUB_STATS_MAX_REVIEW_PRS",
    "GITHUB_STATS_MAX_BRANCH_CHECKS",
    "GITHUB_STATS_MAX_CONCURRENCY",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Provide an environment without any collection settings"""
    monkeypatch.setattr("dashbuild.secure_config.load_dotenv", lambda *args, **kwargs: False)
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestGitHubConfig:
    """Tests for GitHubConfig validation"""

    def test_valid(self):
        config = GitHubConfig(token="ghp_realistic_token", repository="octo/widgets")

        assert config.owner == "octo"
        assert config.repo == "widgets"

    def test_missing_token(self):
        with pytest.raises(ConfigurationError, match="GITHUB_TOKEN is not set"):
            GitHubConfig(token="", repository="octo/widgets")

    def test_placeholder_token(self):
        with pytest.raises(ConfigurationError, match="placeholder"):
            GitHubConfig(token="your_token_here", repository="octo/widgets")

    def test_missing_repository_names_prefixed_key(self):
        with pytest.raises(ConfigurationError, match="DEPENDABOT_REPOSITORY is not set"):
            GitHubConfig(token="ghp_realistic_token", repository="", env_prefix="DEPENDABOT_")

    @pytest.mark.parametrize("repository", ["widgets", "octo/widgets/extra", "octo/"])
    def test_repository_must_be_owner_slash_repo(self, repository):
        with pytest.raises(ConfigurationError, match="owner/repo"):
            GitHubConfig(token="ghp_realistic_token", repository=repository)

    def test_api_url_must_be_https(self):
        with pytest.raises(ConfigurationError, match="HTTPS"):
            GitHubConfig(token="ghp_realistic_token", repository="o/r", api_base_url="http://ghe.local/api/v3")


class TestCollectionConfig:
    """Tests for CollectionConfig validation"""

    def test_missing_dashbuild_dir(self):
        with pytest.raises(ConfigurationError, match="DASHBUILD_DIR is not set"):
            CollectionConfig(dashbuild_dir="", areas=["prs"])

    def test_no_areas(self):
        with pytest.raises(ConfigurationError, match="At least one metrics area"):
            CollectionConfig(dashbuild_dir="/tmp/db", areas=[])

    def test_negative_values_rejected(self):
        with pytest.raises(ConfigurationError, match="lookback_days"):
            CollectionConfig(dashbuild_dir="/tmp/db", areas=["prs"], lookback_days=-1)

    def test_concurrency_at_least_one(self):
        with pytest.raises(ConfigurationError, match="max_concurrency"):
            CollectionConfig(dashbuild_dir="/tmp/db", areas=["prs"], max_concurrency=0)


class TestParseAreas:
    """Tests for parse_areas"""

    def test_trims_and_drops_blanks(self):
        assert parse_areas(" prs, issues,,workflows ") == ["prs", "issues", "workflows"]

    def test_preserves_order(self):
        assert parse_areas("stars,prs") == ["stars", "prs"]


class TestSecureConfig:
    """Tests for reading configuration from the environment"""

    def test_defaults(self, clean_env):
        clean_env.setenv("DASHBUILD_DIR", "/tmp/db")

        config = SecureConfig().get_collection_config("GITHUB_STATS_", ["prs", "issues"])

        assert config.areas == ["prs", "issues"]
        assert config.lookback_days == 90
        assert config.retention_days == 90
        assert config.cache_file == ""
        assert config.max_review_prs == 30
        assert config.max_branch_checks == 20
        assert config.max_concurrency == 4

    def test_prefixed_overrides(self, clean_env):
        clean_env.setenv("DASHBUILD_DIR", "/tmp/db")
        clean_env.setenv("GITHUB_STATS_AREAS", "stars,forks")
        clean_env.setenv("GITHUB_STATS_LOOKBACK_DAYS", "30")
        clean_env.setenv("GITHUB_STATS_RETENTION_DAYS", "0")
        clean_env.setenv("GITHUB_STATS_CACHE_FILE", "/tmp/cache.json")

        config = SecureConfig().get_collection_config("GITHUB_STATS_", ["prs"])

        assert config.areas == ["stars", "forks"]
        assert config.lookback_days == 30
        assert config.retention_days == 0
        assert config.cache_file == "/tmp/cache.json"

    def test_non_integer_setting(self, clean_env):
        clean_env.setenv("DASHBUILD_DIR", "/tmp/db")
        clean_env.setenv("GITHUB_STATS_LOOKBACK_DAYS", "ninety")

        with pytest.raises(ConfigurationError, match="GITHUB_STATS_LOOKBACK_DAYS must be an integer"):
            SecureConfig().get_collection_config("GITHUB_STATS_", ["prs"])

    def test_github_config_from_env(self, clean_env):
        clean_env.setenv("GITHUB_TOKEN", "ghp_realistic_token")
        clean_env.setenv("GITHUB_STATS_REPOSITORY", "octo/widgets")

        config = SecureConfig().get_github_config("GITHUB_STATS_")

        assert config.repository == "octo/widgets"
        assert config.api_base_url == "https://api.github.com"

    def test_github_enterprise_url(self, clean_env):
        clean_env.setenv("GITHUB_TOKEN", "ghp_realistic_token")
        clean_env.setenv("GITHUB_STATS_REPOSITORY", "octo/widgets")
        clean_env.setenv("GITHUB_API_URL", "https://ghe.example.com/api/v3")

        config = SecureConfig().get_github_config("GITHUB_STATS_")

        assert config.api_base_url == "https://ghe.example.com/api/v3"

    def test_missing_repository(self, clean_env):
        clean_env.setenv("GITHUB_TOKEN", "ghp_realistic_token")

        with pytest.raises(ConfigurationError, match="GITHUB_STATS_REPOSITORY is not set"):
            SecureConfig().get_github_config("GITHUB_STATS_")
