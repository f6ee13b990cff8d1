"""Competitor discovery around a seed business.

Strategy order: nearby search around the seed's coordinates, nearby search
around the geocoded locality (only without coordinates), Places text search,
SerpAPI Google Maps, SerpAPI Google web search, then synthetic competitors.
The first non-empty list wins; lists from different sources are never merged.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from localintel.core.cache import DEFAULT_TTL_SECONDS, TTLCache
from localintel.core.geo import distance_km
from localintel.etl.categories import (
    GENERIC_CATEGORY,
    CategoryInfo,
    build_discovery_query,
    exclusion_term,
    normalize_category,
)
from localintel.etl.ranking import ADVANCED_LIMIT, DEFAULT_LIMIT, finalize, normalize_name
from localintel.etl.transform import to_competitor
from localintel.models import (
    SOURCE_PLACES_NEARBY,
    SOURCE_PLACES_TEXT,
    SYNTHETIC,
    Competitor,
    CompetitorFilters,
    Coordinates,
    SignalSet,
)
from localintel.resolvers.cascade import CascadingResolver, Resolution, Strategy
from localintel.synthetic import synthetic_competitors, synthetic_review_score
from localintel.vendors.google_places import COMPETITOR_FIELDS, PlacesClient
from localintel.vendors.serp_client import SerpClient, parse_web_results

logger = logging.getLogger(__name__)

NEARBY_RADIUS_M = 5000
TEXT_SEARCH_RADIUS_M = 50000
MAX_DETAIL_FETCHES = 8


@dataclass
class CompetitorRequest:
    seed: SignalSet
    info: CategoryInfo
    query: Optional[str] = None
    count: int = DEFAULT_LIMIT

    @property
    def keyword(self) -> str:
        return self.query or self.info.canonical.lower()

    def text_query(self) -> str:
        """``<query>`` or ``<search terms> in <locality> -<exclusion>``."""
        if self.query:
            return self.query
        text = self.info.search_terms
        if self.seed.locality_hint:
            text = f"{text} in {self.seed.locality_hint}"
        exclude = exclusion_term(self.seed.name)
        return f"{text} -{exclude}" if exclude else text


def _rounded(coordinates: Optional[Coordinates]) -> str:
    if coordinates is None:
        return ""
    return f"{coordinates.lat:.3f},{coordinates.lng:.3f}"


def _without_seed(competitors: List[Competitor], seed: SignalSet) -> List[Competitor]:
    seed_name = normalize_name(seed.name)
    return [c for c in competitors if c.name and normalize_name(c.name) != seed_name]


def _with_distance(competitors: List[Competitor], origin: Optional[Coordinates]) -> List[Competitor]:
    if origin is None:
        return competitors
    return [replace(c, distance_km=distance_km(origin, c.coordinates)) if c.coordinates else c for c in competitors]


def for_seed(competitors: List[Competitor], request: CompetitorRequest) -> List[Competitor]:
    """Per-request view of a (possibly shared, cached) list: drop the seed, measure from its coordinates."""
    return _with_distance(_without_seed(competitors, request.seed), request.seed.coordinates)


class _CompetitorStrategy(Strategy):
    def __init__(self, ttl: float = DEFAULT_TTL_SECONDS) -> None:
        self.ttl = ttl


class _PlacesCompetitorStrategy(_CompetitorStrategy):
    source_kind = SOURCE_PLACES_NEARBY

    def __init__(self, places: PlacesClient, ttl: float = DEFAULT_TTL_SECONDS, workers: int = 4, phone_region: str = "IN") -> None:
        super().__init__(ttl)
        self.places = places
        self.workers = workers
        self.phone_region = phone_region

    def applies(self, request: CompetitorRequest) -> bool:
        return self.places.is_configured

    def _details(self, result: Dict[str, Any]) -> Dict[str, Any]:
        place_id = result.get("place_id")
        if not place_id:
            return {}
        try:
            return self.places.place_details(place_id, fields=COMPETITOR_FIELDS)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Detail fetch failed for %s: %s", place_id, exc)
            return {}

    def _competitors(self, results: List[Dict[str, Any]], origin: Optional[Coordinates]) -> List[Competitor]:
        results = [result for result in results if result.get("name")][:MAX_DETAIL_FETCHES]
        if not results:
            return []
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            details = list(executor.map(self._details, results))
        return [
            to_competitor(result, detail, origin=origin, source_kind=self.source_kind, phone_region=self.phone_region)
            for result, detail in zip(results, details)
        ]


class NearbyByCoordinatesStrategy(_PlacesCompetitorStrategy):
    name = "places_nearby"

    def applies(self, request: CompetitorRequest) -> bool:
        return super().applies(request) and request.seed.coordinates is not None

    def cache_key(self, request: CompetitorRequest) -> str:
        return f"competitors|nearby|{_rounded(request.seed.coordinates)}|{request.info.place_type}|{request.query or ''}"

    def lookup(self, request: CompetitorRequest) -> List[Competitor]:
        origin = request.seed.coordinates
        results = self.places.search_nearby(
            origin, radius=NEARBY_RADIUS_M, place_type=request.info.place_type, keyword=request.query
        )
        return self._competitors(results, origin)


class NearbyByLocalityStrategy(_PlacesCompetitorStrategy):
    name = "places_geocoded_nearby"

    def applies(self, request: CompetitorRequest) -> bool:
        seed = request.seed
        return super().applies(request) and seed.coordinates is None and bool(seed.locality_hint)

    def cache_key(self, request: CompetitorRequest) -> str:
        return f"competitors|geocoded|{request.seed.locality_hint.lower()}|{request.keyword}"

    def lookup(self, request: CompetitorRequest) -> List[Competitor]:
        origin = self.places.geocode(request.seed.locality_hint)
        if origin is None:
            logger.info("Could not geocode location: %s", request.seed.locality_hint)
            return []
        results = self.places.search_nearby(origin, radius=NEARBY_RADIUS_M, keyword=request.keyword)
        return self._competitors(results, origin)


class TextSearchStrategy(_PlacesCompetitorStrategy):
    name = "places_text"
    source_kind = SOURCE_PLACES_TEXT

    def cache_key(self, request: CompetitorRequest) -> str:
        return f"competitors|text|{request.text_query()}|{_rounded(request.seed.coordinates)}"

    def lookup(self, request: CompetitorRequest) -> List[Competitor]:
        origin = request.seed.coordinates
        results = self.places.search_by_text(
            request.text_query(), location=origin, radius=TEXT_SEARCH_RADIUS_M if origin else None
        )
        return self._competitors(results, origin)


class SerpMapsStrategy(_CompetitorStrategy):
    name = "serp_maps"

    def __init__(self, serp: SerpClient, ttl: float = DEFAULT_TTL_SECONDS) -> None:
        super().__init__(ttl)
        self.serp = serp

    def applies(self, request: CompetitorRequest) -> bool:
        return self.serp.is_configured

    def _ll(self, request: CompetitorRequest) -> Optional[str]:
        coordinates = request.seed.coordinates
        return f"@{coordinates.lat},{coordinates.lng},14z" if coordinates else None

    def cache_key(self, request: CompetitorRequest) -> str:
        return f"competitors|serp_maps|{request.text_query()}|{_rounded(request.seed.coordinates)}"

    def lookup(self, request: CompetitorRequest) -> List[Competitor]:
        return self.serp.maps_search(request.text_query(), ll=self._ll(request))


class SerpWebStrategy(_CompetitorStrategy):
    name = "serp_web"

    def __init__(self, serp: SerpClient, ttl: float = DEFAULT_TTL_SECONDS) -> None:
        super().__init__(ttl)
        self.serp = serp

    def applies(self, request: CompetitorRequest) -> bool:
        return self.serp.is_configured and bool(request.query or request.seed.name)

    def _query(self, request: CompetitorRequest) -> str:
        if request.query:
            return request.query
        return build_discovery_query(request.seed.name, request.info.canonical, request.seed.locality_hint)

    def cache_key(self, request: CompetitorRequest) -> str:
        return f"competitors|serp_web|{self._query(request)}|{request.info.canonical}"

    def lookup(self, request: CompetitorRequest) -> List[Competitor]:
        competitors = parse_web_results(self.serp.search(self._query(request)))
        return [self._estimate(competitor, request.info) for competitor in competitors]

    @staticmethod
    def _estimate(competitor: Competitor, info: CategoryInfo) -> Competitor:
        category = competitor.category
        if category == GENERIC_CATEGORY:
            category = info.canonical
        if competitor.rating is not None:
            return replace(competitor, category=category)
        rating, reviews = synthetic_review_score(competitor.name, info.canonical)
        return replace(competitor, category=category, rating=rating, review_count=reviews, provenance=SYNTHETIC)


class SyntheticCompetitorsStrategy(_CompetitorStrategy):
    name = "synthetic"

    def cache_key(self, request: CompetitorRequest) -> str:
        seed = request.seed
        return (
            f"competitors|synthetic|{(seed.name or '').lower()}|{(seed.locality_hint or '').lower()}"
            f"|{request.info.canonical}|{request.query or ''}|{request.count}"
        )

    def lookup(self, request: CompetitorRequest) -> List[Competitor]:
        return synthetic_competitors(request.seed, count=request.count, category=request.info.canonical, query=request.query)


class CompetitorResolver:
    def __init__(
        self,
        places: PlacesClient,
        serp: SerpClient,
        cache: TTLCache,
        ttl: float = DEFAULT_TTL_SECONDS,
        workers: int = 4,
        phone_region: str = "IN",
    ) -> None:
        self.cascade = CascadingResolver(
            [
                NearbyByCoordinatesStrategy(places, ttl, workers, phone_region),
                NearbyByLocalityStrategy(places, ttl, workers, phone_region),
                TextSearchStrategy(places, ttl, workers, phone_region),
                SerpMapsStrategy(serp, ttl),
                SerpWebStrategy(serp, ttl),
            ],
            cache,
            fallback=SyntheticCompetitorsStrategy(ttl),
            label="competitors",
            on_value=for_seed,
        )

    def resolve(
        self,
        seed: SignalSet,
        filters: Optional[CompetitorFilters] = None,
        query: Optional[str] = None,
        limit: Optional[int] = None,
        category: Optional[str] = None,
    ) -> Resolution[List[Competitor]]:
        if limit is None and filters is not None and filters.limit:
            limit = filters.limit
        if limit is None:
            limit = ADVANCED_LIMIT if filters is not None else DEFAULT_LIMIT

        info = normalize_category(category or seed.category, seed.name)
        request = CompetitorRequest(seed=seed, info=info, query=(query or "").strip() or None, count=max(limit, DEFAULT_LIMIT))
        resolution = self.cascade.resolve(request)
        resolution.value = finalize(resolution.value, filters, limit, exclude_names=[seed.name] if seed.name else [])
        logger.info("Resolved %d competitors via %s", len(resolution.value), resolution.strategy)
        return resolution
