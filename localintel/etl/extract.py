"""Signal extraction from messy business identifiers (map URLs or free text)."""

import logging
import re
from typing import Callable, List, Optional, Sequence
from urllib.parse import unquote, unquote_plus, urlparse

from localintel.models import Coordinates, SignalSet

logger = logging.getLogger(__name__)

BUSINESS_SUFFIX_WORDS = {"inc", "llc", "ltd", "co", "company", "corporation", "enterprises", "services"}
# Trailing words that name the kind of business rather than a place.
BUSINESS_KIND_WORDS = {
    "resort", "hotel", "villa", "lodge", "inn", "cafe", "restaurant", "bar", "bakery", "store", "shop",
    "mart", "clinic", "hospital", "salon", "spa", "gym", "school", "academy", "studio", "agency",
}

_PLACE_SEGMENT = re.compile(r"/place/([^/@?#]+)")
_QUERY_NAME = re.compile(r"[?&]q=([^&#]+)")
_MAPS_QUERY_NAME = re.compile(r"maps\?q=([^&#]+)")

_AT_COORDS = re.compile(r"@(-?\d{1,3}(?:\.\d+)?),(-?\d{1,3}(?:\.\d+)?)")
_DATA_COORDS = re.compile(r"!3d(-?\d{1,3}(?:\.\d+)?)!4d(-?\d{1,3}(?:\.\d+)?)")
_PARAM_COORDS = re.compile(r"[?&](?:ll|q|query)=(-?\d{1,3}(?:\.\d+)?),\s*(-?\d{1,3}(?:\.\d+)?)")
_BARE_COORDS = re.compile(r"^\s*(-?\d{1,3}\.\d+)\s*,\s*(-?\d{1,3}\.\d+)\s*$")

_PLACE_ID_PARAM = re.compile(r"[?&]place_?id[=:]([A-Za-z0-9_-]+)", re.IGNORECASE)
_PLACE_ID_TOKEN = re.compile(r"place_id:([A-Za-z0-9_-]+)")
_HEX_FEATURE_ID = re.compile(r"0x[0-9a-fA-F]+:0x[0-9a-fA-F]+")
_CID_PARAM = re.compile(r"[?&]cid=(\d+)")

_WEBSITE_PARAM = re.compile(r"[?&]website=([^&#]+)")

_REVIEW_PATTERNS = (
    re.compile(r"(\d[\d,]*)\s+reviews?", re.IGNORECASE),
    re.compile(r"user_ratings_total=(\d+)", re.IGNORECASE),
    re.compile(r'"user_ratings_total"\s*:\s*(\d+)', re.IGNORECASE),
    re.compile(r'data-rating-count="(\d+)"', re.IGNORECASE),
    re.compile(r'data-reviews-count="(\d+)"', re.IGNORECASE),
)

_CITY_STATE_SEGMENT = re.compile(r"/([A-Z][a-zA-Z\s]+?),\+([A-Z][a-zA-Z\s]+?)/")
_SEGMENT_AFTER_PLACE = re.compile(r"/maps/place/[^/]+/([^/?#]+)")
_ADDRESS_PARAM = re.compile(r"[?&]address=([^&#]+)", re.IGNORECASE)

_INVALID_LOCALITY = re.compile(r"^[\d\s,.]+$")
_SLUG = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)+$")


class ExtractionError(ValueError):
    """Raised when an identifier yields no usable signal at all."""


def deslugify(token: str) -> str:
    """Turn a URL slug or query token into a human readable name."""
    text = unquote_plus(token).replace("_", " ")
    text = re.sub(r"\s+", " ", text).strip()
    if _SLUG.match(text):
        text = text.replace("-", " ")
    return text


def _is_url(raw: str) -> bool:
    return bool(re.match(r"^[a-z][a-z0-9+.-]*://", raw, re.IGNORECASE)) or raw.lower().startswith(
        ("www.", "maps.", "goo.gl/")
    ) or "/maps" in raw


def _first(extractors: Sequence[Callable[[], Optional[object]]]) -> Optional[object]:
    for extractor in extractors:
        value = extractor()
        if value is not None:
            return value
    return None


def _match_group(pattern: re.Pattern, text: str, group: int = 1) -> Optional[str]:
    match = pattern.search(text)
    if match and match.group(group):
        return match.group(group)
    return None


def _looks_like_coordinates(text: str) -> bool:
    return bool(_BARE_COORDS.match(text))


# ---------- name ----------


def _name_from_place_segment(raw: str) -> Optional[str]:
    token = _match_group(_PLACE_SEGMENT, raw)
    return deslugify(token) if token else None


def _name_from_query(raw: str, pattern: re.Pattern) -> Optional[str]:
    token = _match_group(pattern, raw)
    if not token:
        return None
    name = deslugify(token)
    if _looks_like_coordinates(name) or name.lower().startswith("place_id:"):
        return None
    return name or None


def _name_from_free_text(decoded: str, is_url: bool) -> Optional[str]:
    if is_url or _looks_like_coordinates(decoded):
        return None
    name = decoded.split(",")[0].strip()
    return name or None


# ---------- coordinates ----------


def _coordinates_from(pattern: re.Pattern, decoded: str) -> Optional[Coordinates]:
    match = pattern.search(decoded)
    if not match:
        return None
    try:
        lat, lng = float(match.group(1)), float(match.group(2))
    except (TypeError, ValueError):
        return None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        logger.debug("Discarding out-of-range coordinates %s,%s", lat, lng)
        return None
    return Coordinates(lat=lat, lng=lng)


# ---------- locality ----------


def _valid_locality(candidate: Optional[str]) -> Optional[str]:
    if not candidate:
        return None
    candidate = candidate.replace("+", " ").strip()
    if len(candidate) < 2 or _INVALID_LOCALITY.match(candidate):
        logger.debug("Extracted locality appears invalid, discarding: %s", candidate)
        return None
    return candidate


def trailing_locality(name: Optional[str]) -> Optional[str]:
    """Return the trailing capitalized token of a multi-word name, if it looks like a place."""
    if not name:
        return None
    parts = name.split()
    if len(parts) < 3:
        return None
    last = parts[-1]
    word = last.lower().strip(".,")
    if last[:1].isupper() and word not in BUSINESS_SUFFIX_WORDS and word not in BUSINESS_KIND_WORDS:
        return last
    return None


def _locality_after_place(raw: str) -> Optional[str]:
    segment = _match_group(_SEGMENT_AFTER_PLACE, raw)
    if not segment or segment.startswith(("@", "data=")):
        return None
    return unquote_plus(segment)


def _locality_from_address_param(raw: str) -> Optional[str]:
    token = _match_group(_ADDRESS_PARAM, raw)
    if not token:
        return None
    return unquote_plus(token).split(",")[0]


def _locality_from_free_text(decoded: str, is_url: bool) -> Optional[str]:
    if is_url:
        return None
    parts = [part.strip() for part in decoded.split(",")]
    if len(parts) > 1 and parts[1]:
        return parts[1]
    return None


# ---------- review count ----------


def _review_count(decoded: str) -> Optional[int]:
    for pattern in _REVIEW_PATTERNS:
        token = _match_group(pattern, decoded)
        if token:
            try:
                return int(token.replace(",", ""))
            except ValueError:
                continue
    return None


# ---------- website ----------


def _website(raw: str) -> Optional[str]:
    token = _match_group(_WEBSITE_PARAM, raw)
    if not token:
        return None
    website = unquote(token).strip()
    if not website:
        return None
    if not website.startswith("http"):
        website = f"https://{website}"
    return website


def extract_signals(raw: str) -> SignalSet:
    """Extract a partial SignalSet from a URL or free-text business identifier.

    Every field has its own ordered list of patterns and is populated by the
    first one that matches; a miss on one field never blocks the others.
    Raises ExtractionError only when no field could be populated.
    """
    if raw is None or not str(raw).strip():
        raise ExtractionError("An identifier is required to look up a business.")

    text = str(raw).strip()
    # Path segments and query parameters are split on ``text`` and each token is
    # decoded once; value patterns (coordinates, ids, review counts) scan ``decoded``.
    decoded = unquote(text)
    is_url = _is_url(decoded)

    place_name = _name_from_place_segment(text)
    name = _first(
        [
            lambda: place_name,
            lambda: _name_from_query(text, _QUERY_NAME),
            lambda: _name_from_query(text, _MAPS_QUERY_NAME),
            lambda: _name_from_free_text(decoded, is_url),
        ]
    )

    coordinates = _first(
        [
            lambda: _coordinates_from(_AT_COORDS, decoded),
            lambda: _coordinates_from(_DATA_COORDS, decoded),
            lambda: _coordinates_from(_PARAM_COORDS, decoded),
            lambda: _coordinates_from(_BARE_COORDS, decoded),
        ]
    )

    external_id = _first(
        [
            lambda: _match_group(_PLACE_ID_PARAM, text),
            lambda: _match_group(_PLACE_ID_TOKEN, decoded),
            lambda: _match_group(_HEX_FEATURE_ID, decoded, group=0),
            lambda: _match_group(_CID_PARAM, text),
        ]
    )

    locality_candidates: List[Callable[[], Optional[str]]] = [
        lambda: _match_group(_CITY_STATE_SEGMENT, decoded),
        lambda: trailing_locality(place_name),
        lambda: _locality_after_place(text),
        lambda: _locality_from_address_param(text),
        lambda: _locality_from_free_text(decoded, is_url),
    ]
    locality = _first([lambda c=candidate: _valid_locality(c()) for candidate in locality_candidates])

    signals = SignalSet(
        name=name,
        coordinates=coordinates,
        external_id=external_id,
        website=_website(text),
        review_count_hint=_review_count(decoded),
        locality_hint=locality,
    )

    if not signals.has_signal():
        raise ExtractionError(
            "Could not extract business information from the identifier. "
            "Please use a map URL for a business or its name."
        )

    logger.info(
        "Extracted signals: name=%s coordinates=%s external_id=%s reviews=%s locality=%s",
        signals.name,
        signals.coordinates,
        signals.external_id,
        signals.review_count_hint,
        signals.locality_hint,
    )
    return signals


def extract_domain(url: str) -> str:
    """Normalise a website or URL to a bare host without the ``www.`` prefix."""
    value = (url or "").strip()
    if not value:
        raise ValueError("A website or domain is required.")
    if not value.startswith(("http://", "https://")):
        value = f"https://{value}"

    host = urlparse(value).hostname or ""
    if not host:
        host = re.sub(r"^https?://", "", value).split("/")[0]
    host = host.lower()
    if host.startswith("www."):
        host = host[4:]
    host = host.strip(".")
    if not host:
        raise ValueError(f"No domain could be read from {url!r}.")
    if "." not in host:
        logger.warning("Invalid domain format, missing TLD: %s", host)
        host = f"{host}.com"
    return host


def extract_area_from_address(address: Optional[str]) -> Optional[str]:
    """Best-effort locality (city/area) from a formatted street address."""
    if not address:
        return None
    parts = [part.strip() for part in address.split(",") if part.strip()]
    if not parts:
        return None

    if len(parts) >= 4 and parts[-1] == "India":
        city_match = re.match(r"([A-Za-z\s]+)", parts[-3])
        if city_match and len(city_match.group(1).strip()) > 2:
            return city_match.group(1).strip()

    if len(parts) >= 3:
        second_to_last = parts[-2]
        if re.search(r"\d{4,}", second_to_last) and len(parts) >= 4:
            return parts[-3]
        return re.sub(r"\s+\d{4,}.*$", "", second_to_last) or None
    if len(parts) == 2:
        return re.sub(r"\s+\d{4,}.*$", "", parts[1]) or None

    match = re.match(r"([A-Z][a-zA-Z\s]+?)(?=\s+\d|\s*,|$)", parts[0])
    if match and len(match.group(1)) > 2:
        return match.group(1).strip()
    return parts[0]
