"""Registry resolving a domain to its site profile and extraction strategy."""

from enum import Enum
from typing import Dict, FrozenSet, List, Optional

import structlog

from gameprice.core.exceptions import ConfigurationError
from gameprice.scrapers.base import SiteProfile
from gameprice.scrapers.site_profiles import (
    BYPASS_REQUIRED_DOMAINS,
    RENDERING_DOMAINS,
    SITE_PROFILES,
    generic_profile,
)


logger = structlog.get_logger(__name__)


class ExtractionStrategy(str, Enum):
    BYPASS_PROXY = "bypass_proxy"
    RENDERING = "rendering"


class SiteProfileRegistry:
    """Read-only lookup of site profiles.

    The domain sets are validated once at construction; an inconsistent
    configuration raises ConfigurationError before any scraping starts.
    """

    def __init__(
        self,
        profiles: Optional[Dict[str, SiteProfile]] = None,
        bypass_domains: FrozenSet[str] = BYPASS_REQUIRED_DOMAINS,
        rendering_domains: FrozenSet[str] = RENDERING_DOMAINS,
    ):
        self._profiles = dict(SITE_PROFILES if profiles is None else profiles)
        self.bypass_domains = frozenset(bypass_domains)
        self.rendering_domains = frozenset(rendering_domains)
        self._validate()
        logger.info(
            "site_registry_loaded",
            profile_count=len(self._profiles),
            bypass_count=len(self.bypass_domains),
            rendering_count=len(self.rendering_domains),
        )

    def _validate(self) -> None:
        overlap = self.bypass_domains & self.rendering_domains
        if overlap:
            raise ConfigurationError(
                f"Domains cannot be both bypass and rendering: {sorted(overlap)}"
            )
        for key, profile in self._profiles.items():
            if key != profile.domain:
                raise ConfigurationError(
                    f"Profile registered under {key!r} declares domain {profile.domain!r}"
                )

    def resolve(self, domain: str) -> SiteProfile:
        """Return the profile for a domain, or a generic fallback profile."""
        profile = self._profiles.get(domain)
        if profile is None:
            logger.debug("site_profile_fallback", domain=domain)
            return generic_profile(domain)
        return profile

    def strategy_for(self, domain: str) -> ExtractionStrategy:
        """Pick the extraction strategy for a domain.

        Cloudflare-protected domains go through the bypass proxy, everything
        else (known or not) is rendered in the headless browser.
        """
        if domain in self.bypass_domains:
            return ExtractionStrategy.BYPASS_PROXY
        return ExtractionStrategy.RENDERING

    def domains(self) -> List[str]:
        """Registered domains in registration order."""
        return list(self._profiles.keys())


_registry: Optional[SiteProfileRegistry] = None


def get_site_registry() -> SiteProfileRegistry:
    """Get the process-wide site registry, building it on first use."""
    global _registry
    if _registry is None:
        _registry = SiteProfileRegistry()
    return _registry
