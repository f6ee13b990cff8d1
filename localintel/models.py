"""Core data models shared by the resolution pipelines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

LIVE = "live"
SYNTHETIC = "synthetic"

SOURCE_PLACES_NEARBY = "places_nearby"
SOURCE_PLACES_TEXT = "places_text"
SOURCE_SERP = "serp"
SOURCE_SYNTHETIC = "synthetic"


@dataclass(frozen=True, slots=True)
class Coordinates:
    lat: float
    lng: float

    def as_param(self) -> str:
        return f"{self.lat},{self.lng}"


@dataclass(slots=True)
class SignalSet:
    """Partial identifying data extracted from a raw business identifier."""

    name: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    external_id: Optional[str] = None
    website: Optional[str] = None
    review_count_hint: Optional[int] = None
    locality_hint: Optional[str] = None
    # Written by the category normalisation stage, not by extraction.
    category: Optional[str] = None

    def has_signal(self) -> bool:
        return any(
            value is not None
            for value in (
                self.name,
                self.coordinates,
                self.external_id,
                self.website,
                self.review_count_hint,
                self.locality_hint,
            )
        )


@dataclass(slots=True)
class BusinessProfile:
    """Resolved business entity, created per request and never persisted."""

    name: str
    category: str
    rating: float = 0.0
    review_count: int = 0
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    locality: Optional[str] = None
    external_id: Optional[str] = None
    maps_url: Optional[str] = None
    provenance: str = LIVE
    diagnostics: Optional[Dict[str, Any]] = field(default=None, repr=False)

    @property
    def is_estimated(self) -> bool:
        return self.provenance == SYNTHETIC


@dataclass(slots=True)
class Competitor:
    """A comparable business discovered around a seed business."""

    name: str
    category: str = "Business"
    rating: Optional[float] = None
    review_count: Optional[int] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    locality: Optional[str] = None
    external_id: Optional[str] = None
    maps_url: Optional[str] = None
    distance_km: Optional[float] = None
    price_level: Optional[int] = None
    coordinates: Optional[Coordinates] = None
    snippet: Optional[str] = None
    source_kind: str = SOURCE_SYNTHETIC
    provenance: str = LIVE

    @property
    def is_estimated(self) -> bool:
        return self.provenance == SYNTHETIC

    @property
    def distance_label(self) -> Optional[str]:
        if self.distance_km is None:
            return None
        return f"{self.distance_km:.1f} km"


@dataclass(slots=True)
class SeoMetrics:
    """Web-authority metrics for a single domain."""

    domain: str
    domain_authority: int
    page_authority: int
    spam_score: int
    monthly_traffic: int
    backlinks: int
    ranking_keywords: int
    provenance: str = LIVE
    data_source: str = "free-tools"
    diagnostics: Optional[Dict[str, Any]] = field(default=None, repr=False)

    @property
    def is_estimated(self) -> bool:
        return self.provenance == SYNTHETIC


@dataclass(slots=True)
class CompetitorFilters:
    """Advanced-search options applied after a competitor list is resolved."""

    min_rating: Optional[float] = None
    max_distance_km: Optional[Union[float, str]] = None
    price_level: Optional[Union[int, str]] = None
    category: Optional[str] = None
    sort_by: Optional[str] = None
    descending: bool = True
    limit: Optional[int] = None
