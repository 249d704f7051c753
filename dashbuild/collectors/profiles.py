"""
Collection Profiles

A profile is one dashboard module's view of the collection engine: its data
file slug, environment prefix, default areas and area registry.
"""

from dataclasses import dataclass

from dashbuild.collectors.areas import GITHUB_STATISTICS_FETCHERS, SECURITY_FETCHERS, build_registry
from dashbuild.collectors.base import AreaFetcher


@dataclass(frozen=True)
class CollectionProfile:
    """
    Attributes:
        slug: Data file name under src/data/ (without .json)
        env_prefix: Prefix of the profile's environment keys
        default_areas: Areas collected when <prefix>AREAS is unset
        fetcher_classes: Areas this profile can collect
        include_lookback: Record lookbackDays in the output config
        include_visibility: Detect and record repository visibility
    """

    slug: str
    env_prefix: str
    default_areas: tuple[str, ...]
    fetcher_classes: tuple[type[AreaFetcher], ...]
    include_lookback: bool = False
    include_visibility: bool = False

    def build_registry(self) -> dict[str, AreaFetcher]:
        return build_registry(list(self.fetcher_classes))


GITHUB_STATISTICS_PROFILE = CollectionProfile(
    slug="github-statistics",
    env_prefix="GITHUB_STATS_",
    default_areas=(
        "prs",
        "issues",
        "workflows",
        "releases",
        "commits",
        "contributors",
        "branches",
        "languages",
        "community",
    ),
    fetcher_classes=tuple(GITHUB_STATISTICS_FETCHERS),
    include_lookback=True,
    include_visibility=True,
)

DEPENDABOT_PROFILE = CollectionProfile(
    slug="dependabot",
    env_prefix="DEPENDABOT_",
    default_areas=("dependabot", "code-scanning", "secret-scanning"),
    fetcher_classes=tuple(SECURITY_FETCHERS),
)

PROFILES: dict[str, CollectionProfile] = {
    profile.slug: profile for profile in (GITHUB_STATISTICS_PROFILE, DEPENDABOT_PROFILE)
}


def get_profile(slug: str) -> CollectionProfile:
    """
    Raises:
        KeyError: If no profile has this slug
    """
    return PROFILES[slug]
