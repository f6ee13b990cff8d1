"""Business profile resolution: external id -> name search -> nearby search -> synthetic."""

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

from localintel.core.cache import DEFAULT_TTL_SECONDS, TTLCache
from localintel.etl.categories import ACCOMMODATION, canonical_category, is_lodging_name
from localintel.etl.extract import extract_signals
from localintel.etl.transform import to_business_profile
from localintel.models import BusinessProfile, SignalSet
from localintel.resolvers.cascade import CascadingResolver, Resolution, Strategy
from localintel.synthetic import profile_key, synthetic_profile
from localintel.vendors.google_places import PlacesClient

logger = logging.getLogger(__name__)

NAME_SEARCH_RADIUS_M = 5000
NEARBY_RADIUS_M = 500
NEARBY_BIAS_TYPES = ("lodging", "restaurant", "tourist_attraction")


def _coords_key(signals: SignalSet) -> str:
    if signals.coordinates is None:
        return ""
    return signals.coordinates.as_param()


class _PlacesStrategy(Strategy):
    def __init__(self, places: PlacesClient, ttl: float = DEFAULT_TTL_SECONDS, phone_region: str = "IN") -> None:
        self.places = places
        self.ttl = ttl
        self.phone_region = phone_region

    def _profile(self, details: Dict[str, Any], signals: SignalSet) -> Optional[BusinessProfile]:
        if not details or not details.get("name"):
            return None
        return to_business_profile(details, signals, self.phone_region)

    def _profile_from_result(self, result: Dict[str, Any], signals: SignalSet) -> Optional[BusinessProfile]:
        place_id = result.get("place_id")
        details = self.places.place_details(place_id) if place_id else {}
        return self._profile(details or result, signals)


class ExternalIdStrategy(_PlacesStrategy):
    name = "places_by_id"

    def applies(self, signals: SignalSet) -> bool:
        return self.places.is_configured and bool(signals.external_id)

    def cache_key(self, signals: SignalSet) -> str:
        return signals.external_id

    def lookup(self, signals: SignalSet) -> Optional[BusinessProfile]:
        return self._profile(self.places.get_by_external_id(signals.external_id), signals)


class NameSearchStrategy(_PlacesStrategy):
    name = "places_by_name"

    def applies(self, signals: SignalSet) -> bool:
        return self.places.is_configured and bool(signals.name)

    def cache_key(self, signals: SignalSet) -> str:
        return f"{signals.name}|{_coords_key(signals)}"

    def lookup(self, signals: SignalSet) -> Optional[BusinessProfile]:
        results = self.places.search_by_text(
            signals.name,
            location=signals.coordinates,
            radius=NAME_SEARCH_RADIUS_M if signals.coordinates else None,
        )
        if not results:
            return None
        return self._profile_from_result(results[0], signals)


def rank_nearby(results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Stable re-rank that moves lodging, restaurants and attractions to the front."""
    return sorted(results, key=lambda result: 0 if set(result.get("types") or []) & set(NEARBY_BIAS_TYPES) else 1)


class NearbyStrategy(_PlacesStrategy):
    name = "places_nearby"

    def applies(self, signals: SignalSet) -> bool:
        return self.places.is_configured and signals.coordinates is not None

    def cache_key(self, signals: SignalSet) -> str:
        return f"coords|{_coords_key(signals)}"

    def lookup(self, signals: SignalSet) -> Optional[BusinessProfile]:
        results = self.places.search_nearby(signals.coordinates, radius=NEARBY_RADIUS_M, rank_by="prominence")
        if not results:
            return None
        if not signals.name:
            results = rank_nearby(results)
        return self._profile_from_result(results[0], signals)


class SyntheticProfileStrategy(Strategy):
    name = "synthetic"

    def __init__(self, ttl: float = DEFAULT_TTL_SECONDS) -> None:
        self.ttl = ttl

    def cache_key(self, signals: SignalSet) -> str:
        return f"synthetic|{profile_key(signals)}"

    def lookup(self, signals: SignalSet) -> BusinessProfile:
        return synthetic_profile(signals)


def apply_lodging_override(profile: BusinessProfile, signals: Optional[SignalSet] = None) -> BusinessProfile:
    """Names that say resort/hotel/villa/lodge/inn are accommodation whatever the source claims."""
    if profile.category != ACCOMMODATION and is_lodging_name(profile.name):
        logger.info("Reclassifying %s from %s to %s", profile.name, profile.category, ACCOMMODATION)
        return replace(profile, category=ACCOMMODATION)
    return profile


class BusinessResolver:
    def __init__(
        self,
        places: PlacesClient,
        cache: TTLCache,
        ttl: float = DEFAULT_TTL_SECONDS,
        phone_region: str = "IN",
    ) -> None:
        self.cascade = CascadingResolver(
            [
                ExternalIdStrategy(places, ttl, phone_region),
                NameSearchStrategy(places, ttl, phone_region),
                NearbyStrategy(places, ttl, phone_region),
            ],
            cache,
            fallback=SyntheticProfileStrategy(ttl),
            label="business",
            on_value=apply_lodging_override,
        )

    def resolve_signals(self, signals: SignalSet) -> Resolution[BusinessProfile]:
        if signals.category is None and signals.name:
            signals = replace(signals, category=canonical_category(None, signals.name))
        resolution = self.cascade.resolve(signals)
        resolution.value = replace(
            resolution.value,
            diagnostics={
                **(resolution.value.diagnostics or {}),
                "strategy": resolution.strategy,
                "attempts": [(record.strategy, record.outcome) for record in resolution.attempts],
            },
        )
        return resolution

    def resolve(self, identifier: str) -> Resolution[BusinessProfile]:
        """Extract signals from ``identifier`` and resolve them; only ExtractionError escapes."""
        return self.resolve_signals(extract_signals(identifier))
