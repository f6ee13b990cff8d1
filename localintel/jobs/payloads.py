"""JSON shapes shared by the HTTP service and the CLI."""

from typing import Any, Dict, Iterable, List, Optional

from localintel.models import BusinessProfile, Competitor, CompetitorFilters, Coordinates, SeoMetrics


class RequestError(ValueError):
    """Invalid request input."""


def profile_payload(profile: BusinessProfile) -> Dict[str, Any]:
    return {
        "businessName": profile.name,
        "category": profile.category,
        "rating": profile.rating,
        "reviews": profile.review_count,
        "address": profile.address,
        "phoneNumber": profile.phone,
        "website": profile.website,
        "location": profile.locality,
        "placeId": profile.external_id,
        "mapsUrl": profile.maps_url,
        "isEstimated": profile.is_estimated,
    }


def competitor_payload(competitor: Competitor) -> Dict[str, Any]:
    return {
        "name": competitor.name,
        "category": competitor.category,
        "rating": competitor.rating,
        "reviews": competitor.review_count,
        "address": competitor.address,
        "phoneNumber": competitor.phone,
        "website": competitor.website,
        "location": competitor.locality,
        "placeId": competitor.external_id,
        "mapsUrl": competitor.maps_url,
        "distance": competitor.distance_label,
        "priceLevel": competitor.price_level,
        "snippet": competitor.snippet,
        "source": competitor.source_kind,
        "isEstimated": competitor.is_estimated,
    }


def competitors_payload(competitors: Iterable[Competitor]) -> List[Dict[str, Any]]:
    return [competitor_payload(competitor) for competitor in competitors]


def seo_payload(metrics: SeoMetrics) -> Dict[str, Any]:
    return {
        "domain": metrics.domain,
        "domainAuthority": metrics.domain_authority,
        "pageAuthority": metrics.page_authority,
        "spamScore": metrics.spam_score,
        "monthlyTraffic": metrics.monthly_traffic,
        "backlinks": metrics.backlinks,
        "rankingKeywords": metrics.ranking_keywords,
        "dataSource": metrics.data_source,
        "isEstimated": metrics.is_estimated,
    }


def _number(value: Any, field: str, cast=float) -> Optional[Any]:
    if value is None or value == "":
        return None
    try:
        return cast(value)
    except (TypeError, ValueError) as exc:
        raise RequestError(f"{field} must be numeric") from exc


def parse_coordinates(raw: Any) -> Optional[Coordinates]:
    if not raw:
        return None
    if not isinstance(raw, dict):
        raise RequestError("coordinates must be an object with lat and lng")
    lat = _number(raw.get("lat"), "coordinates.lat")
    lng = _number(raw.get("lng"), "coordinates.lng")
    if lat is None or lng is None:
        raise RequestError("coordinates must include lat and lng")
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise RequestError("coordinates are out of range")
    return Coordinates(lat=lat, lng=lng)


def parse_filters(raw: Any) -> CompetitorFilters:
    """Build CompetitorFilters from the camelCase ``filters`` object of a request."""
    raw = raw or {}
    if not isinstance(raw, dict):
        raise RequestError("filters must be an object")

    sort_by = raw.get("sortBy") or None
    if sort_by is not None and sort_by not in ("rating", "reviews"):
        raise RequestError("sortBy must be 'rating' or 'reviews'")
    limit = _number(raw.get("limit"), "limit", int)
    if limit is not None and limit <= 0:
        raise RequestError("limit must be positive")

    max_distance = raw.get("maxDistance")
    if isinstance(max_distance, str) and not max_distance.strip():
        max_distance = None

    return CompetitorFilters(
        min_rating=_number(raw.get("minRating"), "minRating"),
        max_distance_km=max_distance,
        price_level=raw.get("priceRange") or raw.get("priceLevel") or None,
        category=raw.get("category") or None,
        sort_by=sort_by,
        descending=str(raw.get("sortOrder", "desc")).lower() != "asc",
        limit=limit,
    )
