"""SerpAPI helpers for the Google web and Google Maps engines."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from serpapi import GoogleSearch

from localintel.models import SOURCE_SERP, Competitor, Coordinates

logger = logging.getLogger(__name__)

EXCLUDED_DOMAINS = (
    "wikipedia.org",
    "facebook.com",
    "instagram.com",
    "twitter.com",
    "linkedin.com",
    "youtube.com",
    "tripadvisor.com",
    "yelp.com",
)


class SerpApiError(RuntimeError):
    """Raised when SerpAPI returns an empty or error payload."""


def build_serpapi_params(
    query: str,
    api_key: str,
    engine: str = "google_maps",
    ll: Optional[str] = None,
    country: str = "in",
    language: str = "en",
) -> Dict[str, Any]:
    """Construct SerpAPI request parameters for the given engine."""
    if not query or not query.strip():
        raise ValueError("Query must be provided for SerpAPI lookups.")

    params: Dict[str, Any] = {
        "engine": engine,
        "q": query.strip(),
        "api_key": api_key,
        "hl": language,
    }
    if engine == "google_maps":
        params["type"] = "search"
        if ll:
            params["ll"] = ll
    else:
        params.update({"google_domain": "google.com", "gl": country, "num": 10})
    return params


def fetch_from_serpapi(params: Dict[str, Any], timeout: float = 10) -> Dict[str, Any]:
    """Call SerpAPI once and return the raw JSON response.

    SerpAPI charges per request, so callers cache results and never retry a
    failed call within the same resolution.
    """
    logger.info("Calling SerpAPI engine=%s q=%s ll=%s", params.get("engine"), params.get("q"), params.get("ll"))
    search = GoogleSearch(params)
    search.timeout = timeout
    data = search.get_dict()
    if not data:
        raise SerpApiError("SerpAPI returned an empty payload.")
    if "error" in data:
        message = data.get("error") or data
        raise SerpApiError(f"SerpAPI returned an error response: {message}")
    return data


def parse_serpapi_maps(data: Optional[Dict[str, Any]]) -> List[Competitor]:
    """Extract SerpAPI Google Maps local/place results into Competitor objects."""
    if not data:
        return []

    items = _extract_items(data)

    if not items:
        logger.warning(
            "SerpAPI response missing local_results iterable. keys=%s preview=%s",
            list(data.keys())[:10],
            str(data.get("local_results"))[:200],
        )
        place_results = data.get("place_results")
        if isinstance(place_results, list):
            items = place_results
        elif isinstance(place_results, dict):
            items = [place_results]

    competitors: List[Competitor] = []
    for raw in items:
        if not isinstance(raw, dict):
            continue

        name = (raw.get("title") or raw.get("name") or "").strip()
        if not name:
            continue

        gps = raw.get("gps_coordinates") or {}
        latitude = _safe_float(gps.get("latitude"))
        longitude = _safe_float(gps.get("longitude"))

        competitors.append(
            Competitor(
                name=name,
                category=_strip_or_none(raw.get("type")) or "Business",
                rating=_safe_float(raw.get("rating")),
                review_count=_safe_int(raw.get("reviews_count") or raw.get("reviews")),
                address=_strip_or_none(raw.get("address")),
                phone=_strip_or_none(raw.get("phone")),
                website=_strip_or_none(raw.get("website")),
                external_id=_strip_or_none(raw.get("place_id")),
                price_level=_price_level(raw.get("price")),
                coordinates=Coordinates(latitude, longitude) if latitude is not None and longitude is not None else None,
                source_kind=SOURCE_SERP,
            )
        )

    return competitors


def _is_excluded(link: str) -> bool:
    return any(domain in link for domain in EXCLUDED_DOMAINS)


def _title_to_name(title: str) -> str:
    for separator in (" - ", " | "):
        index = title.find(separator)
        if index > 0:
            title = title[:index]
    return title.strip()


def parse_web_results(data: Optional[Dict[str, Any]]) -> List[Competitor]:
    """Business candidates from a Google web search payload.

    Organic results are preferred, then the local pack, then knowledge-graph
    competitors; the first non-empty group wins. Organic and knowledge-graph
    entries carry no rating, which callers estimate.
    """
    if not data:
        return []

    organic = []
    for result in data.get("organic_results") or []:
        link = result.get("link")
        title = result.get("title")
        if not link or not title or _is_excluded(link):
            continue
        organic.append(
            Competitor(
                name=_title_to_name(title),
                website=link,
                snippet=_strip_or_none(result.get("snippet")),
                source_kind=SOURCE_SERP,
            )
        )
    if organic:
        return organic

    local_results = data.get("local_results")
    places = local_results.get("places") if isinstance(local_results, dict) else None
    if isinstance(places, list) and places:
        local = parse_serpapi_maps({"local_results": places})
        if local:
            return local

    knowledge = []
    for entry in (data.get("knowledge_graph") or {}).get("competitors") or []:
        if not isinstance(entry, dict) or not entry.get("name"):
            continue
        knowledge.append(Competitor(name=entry["name"].strip(), website=entry.get("link"), source_kind=SOURCE_SERP))
    return knowledge


class SerpClient:
    """SerpAPI searches bound to one API key and locale."""

    def __init__(self, api_key: str, country: str = "in", language: str = "en", timeout: float = 10) -> None:
        self.api_key = api_key
        self.country = country
        self.language = language
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def search(self, query: str) -> Dict[str, Any]:
        """Google web search, returning the raw payload."""
        params = build_serpapi_params(query, self.api_key, engine="google", country=self.country, language=self.language)
        return fetch_from_serpapi(params, timeout=self.timeout)

    def maps_search(self, query: str, ll: Optional[str] = None) -> List[Competitor]:
        params = build_serpapi_params(query, self.api_key, engine="google_maps", ll=ll, language=self.language)
        return parse_serpapi_maps(fetch_from_serpapi(params, timeout=self.timeout))


def _extract_items(data: Dict[str, Any]) -> Iterable[Any]:
    """SerpAPI sometimes returns local_results as a list or nested dict."""
    local_results = data.get("local_results")
    if isinstance(local_results, list):
        return local_results
    if isinstance(local_results, dict):
        logger.debug("local_results is dict with keys: %s", list(local_results.keys())[:10])
        for maybe in (local_results.get("places"), local_results.get("results"), local_results.get("local_results")):
            if isinstance(maybe, list):
                return maybe
    return []


def _price_level(value: Any) -> Optional[int]:
    if isinstance(value, str) and value.strip() and set(value.strip()) == {"$"}:
        return len(value.strip())
    return None


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _safe_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value)

    if isinstance(value, str):
        digits = "".join(ch for ch in value if ch.isdigit())
        if digits:
            return int(digits)
    return None
