"""Client utilities for the Google Places and Geocoding APIs."""

import logging
import re
from typing import Any, Dict, List, Optional

import requests

from localintel.models import Coordinates

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://maps.googleapis.com/maps/api/place"
_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
_OK_STATUSES = {"OK", "ZERO_RESULTS"}

PROFILE_FIELDS = (
    "place_id,name,formatted_address,formatted_phone_number,international_phone_number,geometry,"
    "website,rating,user_ratings_total,reviews,types,address_components,url,business_status"
)
COMPETITOR_FIELDS = "place_id,website,formatted_phone_number,url,reviews,price_level"

_HEX_FEATURE_ID = re.compile(r"^0x[0-9a-fA-F]+:0x[0-9a-fA-F]+$")


class GooglePlacesError(RuntimeError):
    """Raised when the Places API returns a non-successful response."""


def _get(url: str, params: Dict[str, Any], timeout: float, operation: str) -> Dict[str, Any]:
    response = _SESSION.get(url, params=params, timeout=timeout)
    response.raise_for_status()
    payload = response.json()
    if not isinstance(payload, dict):
        raise GooglePlacesError(f"{operation} returned a malformed payload")
    status = payload.get("status")
    if status not in _OK_STATUSES:
        logger.error("%s failed: status=%s, error_message=%s", operation, status, payload.get("error_message"))
        raise GooglePlacesError(payload.get("error_message") or status or "unknown status")
    return payload


def text_search(
    query: str,
    api_key: str,
    location: Optional[Coordinates] = None,
    radius: Optional[int] = None,
    timeout: float = 10,
) -> Dict[str, Any]:
    params: Dict[str, Any] = {"query": query, "key": api_key}
    if location is not None:
        params["location"] = location.as_param()
        params["radius"] = radius or 5000
    return _get(f"{_BASE_URL}/textsearch/json", params, timeout, "text_search")


def nearby_search(
    location: Coordinates,
    api_key: str,
    radius: int = 5000,
    place_type: Optional[str] = None,
    keyword: Optional[str] = None,
    rank_by: Optional[str] = None,
    timeout: float = 10,
) -> Dict[str, Any]:
    params: Dict[str, Any] = {"location": location.as_param(), "radius": radius, "key": api_key}
    if place_type:
        params["type"] = place_type
    if keyword:
        params["keyword"] = keyword
    if rank_by:
        params["rankby"] = rank_by
    return _get(f"{_BASE_URL}/nearbysearch/json", params, timeout, "nearby_search")


def place_details(place_id: str, api_key: str, fields: str = PROFILE_FIELDS, timeout: float = 10) -> Dict[str, Any]:
    params = {"place_id": place_id, "key": api_key, "fields": fields}
    payload = _get(f"{_BASE_URL}/details/json", params, timeout, "place_details")
    return payload.get("result", {})


def geocode(address: str, api_key: str, timeout: float = 10) -> Optional[Coordinates]:
    payload = _get(_GEOCODE_URL, {"address": address, "key": api_key}, timeout, "geocode")
    results = payload.get("results") or []
    if not results:
        return None
    location = (results[0].get("geometry") or {}).get("location") or {}
    if location.get("lat") is None or location.get("lng") is None:
        return None
    return Coordinates(lat=float(location["lat"]), lng=float(location["lng"]))


def is_place_id(value: Optional[str]) -> bool:
    """Places ids are opaque tokens; hex feature ids and numeric CIDs are not accepted by the details API."""
    if not value:
        return False
    return not (_HEX_FEATURE_ID.match(value) or value.isdigit())


class PlacesClient:
    """Places lookups bound to one API key and timeout."""

    def __init__(self, api_key: str, timeout: float = 10) -> None:
        self.api_key = api_key
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def get_by_external_id(self, external_id: str) -> Dict[str, Any]:
        if not is_place_id(external_id):
            raise GooglePlacesError(f"Unsupported place identifier: {external_id}")
        return self.place_details(external_id)

    def place_details(self, place_id: str, fields: str = PROFILE_FIELDS) -> Dict[str, Any]:
        return place_details(place_id, self.api_key, fields=fields, timeout=self.timeout)

    def search_by_text(
        self, query: str, location: Optional[Coordinates] = None, radius: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        payload = text_search(query, self.api_key, location=location, radius=radius, timeout=self.timeout)
        return payload.get("results", [])

    def search_nearby(
        self,
        location: Coordinates,
        radius: int = 5000,
        place_type: Optional[str] = None,
        keyword: Optional[str] = None,
        rank_by: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        payload = nearby_search(
            location,
            self.api_key,
            radius=radius,
            place_type=place_type,
            keyword=keyword,
            rank_by=rank_by,
            timeout=self.timeout,
        )
        return payload.get("results", [])

    def geocode(self, address: str) -> Optional[Coordinates]:
        return geocode(address, self.api_key, timeout=self.timeout)
