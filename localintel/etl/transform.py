"""Utilities for transforming Google Places responses into profiles and competitors."""

import logging
from typing import Any, Dict, Iterable, Optional, Tuple

import phonenumbers

from localintel.core.geo import distance_km
from localintel.etl.categories import GENERIC_PROVIDER_TYPES, category_from_place_types
from localintel.etl.extract import extract_area_from_address
from localintel.models import SOURCE_PLACES_NEARBY, BusinessProfile, Competitor, Coordinates, SignalSet

logger = logging.getLogger(__name__)


def parse_city_country(address_components: Iterable[Dict[str, Any]]) -> Tuple[Optional[str], Optional[str]]:
    city = None
    country = None
    for component in address_components or []:
        types = set(component.get("types", []))
        if "locality" in types or "administrative_area_level_2" in types:
            city = component.get("long_name")
        if "country" in types:
            country = component.get("long_name")
    return city, country


def _extract_primary_type(types: Iterable[str]) -> Optional[str]:
    for type_name in types or []:
        if type_name not in GENERIC_PROVIDER_TYPES:
            return type_name
    return None


def normalize_phone(raw: Optional[str], region: str = "IN") -> Optional[str]:
    """Format a phone number in international notation, keeping the raw text when it cannot be parsed."""
    if not raw or not str(raw).strip():
        return None
    text = str(raw).strip()
    try:
        number = phonenumbers.parse(text, region)
    except phonenumbers.NumberParseException:
        logger.debug("Could not parse phone number %r", text)
        return text
    if not phonenumbers.is_possible_number(number):
        return text
    return phonenumbers.format_number(number, phonenumbers.PhoneNumberFormat.INTERNATIONAL)


def place_coordinates(result: Dict[str, Any]) -> Optional[Coordinates]:
    location = (result.get("geometry") or {}).get("location") or {}
    lat, lng = location.get("lat"), location.get("lng")
    if lat is None or lng is None:
        return None
    try:
        return Coordinates(lat=float(lat), lng=float(lng))
    except (TypeError, ValueError):
        return None


def review_count(details: Dict[str, Any], hint: Optional[int] = None) -> int:
    total = details.get("user_ratings_total")
    if isinstance(total, int) and not isinstance(total, bool):
        return total
    reviews = details.get("reviews")
    if isinstance(reviews, list) and reviews:
        return len(reviews)
    return hint or 0


def _rating(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def to_business_profile(details: Dict[str, Any], signals: SignalSet, phone_region: str = "IN") -> BusinessProfile:
    """Assemble a live profile; extracted signals win over provider fields where both exist."""
    address = details.get("formatted_address") or details.get("vicinity")
    city, _ = parse_city_country(details.get("address_components", []))
    locality = signals.locality_hint or extract_area_from_address(address) or city

    return BusinessProfile(
        name=details.get("name") or signals.name or "",
        category=category_from_place_types(details.get("types")),
        rating=_rating(details.get("rating")) or 0.0,
        review_count=review_count(details, signals.review_count_hint),
        address=address,
        phone=normalize_phone(details.get("formatted_phone_number") or details.get("international_phone_number"), phone_region),
        website=signals.website or details.get("website"),
        locality=locality,
        external_id=signals.external_id or details.get("place_id"),
        maps_url=details.get("url"),
        diagnostics={"primary_type": _extract_primary_type(details.get("types", []))},
    )


def to_competitor(
    result: Dict[str, Any],
    details: Optional[Dict[str, Any]] = None,
    origin: Optional[Coordinates] = None,
    source_kind: str = SOURCE_PLACES_NEARBY,
    phone_region: str = "IN",
) -> Competitor:
    """Merge a search result with its (optional) detail payload into a Competitor."""
    details = details or {}
    coordinates = place_coordinates(result) or place_coordinates(details)
    address = result.get("formatted_address") or result.get("vicinity") or details.get("formatted_address")
    total = result.get("user_ratings_total", details.get("user_ratings_total"))
    price_level = details.get("price_level", result.get("price_level"))

    return Competitor(
        name=(result.get("name") or details.get("name") or "").strip(),
        category=category_from_place_types(result.get("types") or details.get("types")),
        rating=_rating(result.get("rating", details.get("rating"))),
        review_count=total if isinstance(total, int) else None,
        address=address,
        phone=normalize_phone(details.get("formatted_phone_number"), phone_region),
        website=details.get("website") or result.get("website"),
        locality=extract_area_from_address(address),
        external_id=result.get("place_id") or details.get("place_id"),
        maps_url=details.get("url"),
        distance_km=distance_km(origin, coordinates) if origin and coordinates else None,
        price_level=price_level if isinstance(price_level, int) else None,
        coordinates=coordinates,
        source_kind=source_kind,
    )
