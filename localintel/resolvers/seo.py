"""SEO metrics: composite free-tools estimate, falling back to synthetic metrics."""

import logging
from typing import Optional

from localintel.core.cache import DEFAULT_TTL_SECONDS, TTLCache
from localintel.etl.extract import extract_domain
from localintel.models import SeoMetrics
from localintel.resolvers.cascade import CascadingResolver, Resolution, Strategy
from localintel.synthetic import js_round, seeded_random, synthetic_seo
from localintel.vendors.domain_intel import DomainIntelClient, ProbeResult, SeoEstimate, split_domain

logger = logging.getLogger(__name__)

SYNTHETIC_TTL_SECONDS = 1800
SUSPICIOUS_WORDS = ("free", "cheap", "discount", "win", "click", "cash", "money", "prize")
POPULAR_TLDS = ("com", "org", "net", "io")


def cache_key(domain: str) -> str:
    return f"seo|{domain}"


def _tier_points(value: int, tiers) -> int:
    for threshold, points in tiers:
        if value > threshold:
            return points
    return 0


def domain_authority(age_years: float, probe: ProbeResult, estimate: SeoEstimate) -> float:
    """Base 20, up to 25 for age, up to 15 technical, up to 40 from backlink/keyword tiers; clamped to 1..100."""
    score = 20 + min(25.0, age_years * 2)

    if probe.has_ssl:
        score += 5
    if 200 <= probe.status_code < 300:
        score += 5
    if probe.server_type != "unknown":
        score += 2
    if "text/html" in probe.content_type:
        score += 3

    if estimate.has_estimates:
        score += _tier_points(estimate.backlinks, ((1000, 20), (500, 15), (100, 10), (10, 5)))
        score += _tier_points(estimate.keywords, ((500, 20), (200, 15), (50, 10), (10, 5)))
    else:
        score += 15

    return min(100.0, max(1.0, score))


def spam_score(domain: str, probe: ProbeResult) -> int:
    name, _ = split_domain(domain)
    score = 1 + sum(1 for word in SUSPICIOUS_WORDS if word in name)
    if sum(1 for char in name if char.isdigit()) > 3:
        score += 1
    if len(name) > 15:
        score += 1
    if not probe.has_ssl:
        score += 2
    return min(10, max(1, score))


def monthly_traffic(domain: str, authority: int, estimate: SeoEstimate) -> int:
    traffic = (authority / 10) ** 2 * 100
    if estimate.has_estimates and estimate.keywords > 0:
        traffic += estimate.keywords * 5 * (1 - traffic / 50000)

    _, tld = split_domain(domain)
    if tld in POPULAR_TLDS:
        traffic *= 1.2
    traffic *= 0.85 + seeded_random(domain, "traffic") * 0.3

    if authority >= 80:
        traffic = max(50000.0, traffic)
    elif authority >= 60:
        traffic = min(90000.0, max(10000.0, traffic))
    elif authority >= 40:
        traffic = min(25000.0, max(1000.0, traffic))
    else:
        traffic = min(5000.0, max(100.0, traffic))
    return js_round(traffic)


class CompositeSeoStrategy(Strategy):
    name = "free_tools"

    def __init__(self, intel: DomainIntelClient, ttl: float = DEFAULT_TTL_SECONDS) -> None:
        self.intel = intel
        self.ttl = ttl

    def cache_key(self, domain: str) -> str:
        return cache_key(domain)

    def lookup(self, domain: str) -> SeoMetrics:
        age = self.intel.domain_age_years(domain)
        probe = self.intel.probe(domain)
        estimate = self.intel.estimate(domain)

        raw_authority = domain_authority(age, probe, estimate)
        authority = js_round(raw_authority)
        traffic = monthly_traffic(domain, authority, estimate)
        return SeoMetrics(
            domain=domain,
            domain_authority=authority,
            page_authority=max(1, js_round(raw_authority * 0.85)),
            spam_score=spam_score(domain, probe),
            monthly_traffic=traffic,
            backlinks=estimate.backlinks or js_round(authority * 50),
            ranking_keywords=estimate.keywords or js_round(traffic / 10),
            diagnostics={
                "age_years": round(age, 2),
                "status_code": probe.status_code,
                "server": probe.server_type,
                "has_estimates": estimate.has_estimates,
            },
        )


class SyntheticSeoStrategy(Strategy):
    name = "synthetic"

    def __init__(self, ttl: float = SYNTHETIC_TTL_SECONDS) -> None:
        self.ttl = ttl

    def cache_key(self, domain: str) -> str:
        return cache_key(domain)

    def lookup(self, domain: str) -> SeoMetrics:
        return synthetic_seo(domain)


class SeoResolver:
    def __init__(
        self,
        intel: DomainIntelClient,
        cache: TTLCache,
        ttl: float = DEFAULT_TTL_SECONDS,
        synthetic_ttl: float = SYNTHETIC_TTL_SECONDS,
    ) -> None:
        self.cascade = CascadingResolver(
            [CompositeSeoStrategy(intel, ttl)],
            cache,
            fallback=SyntheticSeoStrategy(synthetic_ttl),
            label="seo",
        )

    def resolve(self, website: str, seed_name: Optional[str] = None) -> Resolution[SeoMetrics]:
        """Metrics for the domain of ``website``; raises ValueError only for an empty website."""
        domain = extract_domain(website)
        logger.info("Resolving SEO metrics for %s (business=%s)", domain, seed_name or "-")
        return self.cascade.resolve(domain)
