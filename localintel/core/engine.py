"""Process-wide facade over the business, competitor and SEO resolvers."""

import logging
from typing import List, Optional

from localintel.core.cache import TTLCache
from localintel.core.config import Settings, get_settings
from localintel.models import BusinessProfile, Competitor, CompetitorFilters, SeoMetrics, SignalSet
from localintel.resolvers.business import BusinessResolver
from localintel.resolvers.competitors import CompetitorResolver
from localintel.resolvers.seo import SeoResolver
from localintel.vendors.domain_intel import DomainIntelClient
from localintel.vendors.google_places import PlacesClient
from localintel.vendors.serp_client import SerpClient

logger = logging.getLogger(__name__)


class ResolutionEngine:
    """Owns the shared cache and the lookup clients; every entry point always returns a result."""

    def __init__(
        self,
        cache: Optional[TTLCache] = None,
        places: Optional[PlacesClient] = None,
        serp: Optional[SerpClient] = None,
        domain_intel: Optional[DomainIntelClient] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.settings = settings
        self.cache = cache if cache is not None else TTLCache()
        places = places or PlacesClient(settings.google_places_api_key, timeout=settings.request_timeout)
        serp = serp or SerpClient(
            settings.serpapi_api_key,
            country=settings.serp_country,
            language=settings.serp_language,
            timeout=settings.request_timeout,
        )
        domain_intel = domain_intel or DomainIntelClient(
            whois_url=settings.whois_api_url,
            whois_key=settings.whois_api_key,
            estimate_url=settings.seo_estimate_api_url,
            timeout=settings.request_timeout,
        )

        self.business = BusinessResolver(
            places, self.cache, ttl=settings.cache_ttl_seconds, phone_region=settings.default_phone_region
        )
        self.competitors = CompetitorResolver(
            places,
            serp,
            self.cache,
            ttl=settings.cache_ttl_seconds,
            workers=settings.detail_fetch_workers,
            phone_region=settings.default_phone_region,
        )
        self.seo = SeoResolver(
            domain_intel,
            self.cache,
            ttl=settings.cache_ttl_seconds,
            synthetic_ttl=settings.synthetic_seo_ttl_seconds,
        )

    def start(self) -> None:
        self.cache.start_sweeper(self.settings.cache_sweep_seconds)

    def stop(self) -> None:
        self.cache.stop_sweeper()

    def resolve_business(self, identifier: str) -> BusinessProfile:
        return self.business.resolve(identifier).value

    def resolve_competitors(
        self,
        seed: SignalSet,
        filters: Optional[CompetitorFilters] = None,
        query: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Competitor]:
        return self.competitors.resolve(seed, filters=filters, query=query, limit=limit).value

    def resolve_seo_metrics(self, domain: str, seed_name: Optional[str] = None) -> SeoMetrics:
        return self.seo.resolve(domain, seed_name=seed_name).value
