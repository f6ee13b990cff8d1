"""Deterministic fallback data for when no live source produced a result.

Every "random" quantity is a function of (entity key, purpose salt) through
``seeded_random``, so the same domain or the same business name always yields
the same estimate within and across processes.
"""

import logging
import math
import re
from typing import List, Optional, Sequence, TypeVar

from localintel.etl.categories import ACCOMMODATION, accommodation_kind, normalize_category
from localintel.etl.extract import extract_area_from_address
from localintel.models import (
    SOURCE_SYNTHETIC,
    SYNTHETIC,
    BusinessProfile,
    Competitor,
    SeoMetrics,
    SignalSet,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNKNOWN_BUSINESS = "Unknown Business"

TLD_AUTHORITY_BONUS = {
    "com": 10,
    "org": 8,
    "net": 7,
    "io": 6,
    "co": 5,
    "in": 5,
    "ai": 6,
    "dev": 6,
    "app": 6,
}
DEFAULT_TLD_BONUS = 3

STREET_PREFIXES = ("Main", "Park", "Oak", "Pine", "Maple", "Cedar", "Hill", "Lake", "River", "Market")
STREET_SUFFIXES = ("Street", "Avenue", "Road", "Boulevard", "Lane", "Drive", "Way", "Place", "Court")
WEBSITE_TLDS = (".com", ".net", ".org", ".co.in", ".in")

ACCOMMODATION_PREFIXES = ("Royal", "Grand", "Golden", "Luxury", "Premium", "Elite", "Ocean", "Mountain", "Palm", "Sunset")
ACCOMMODATION_PLACES = ("Paradise", "Oasis", "Retreat", "Gateway", "Haven", "Sanctuary", "Escape")
BUSINESS_PREFIXES = ("Premium", "Elite", "Advanced", "Top", "First Choice", "Capital", "Golden", "Royal")
BUSINESS_SUFFIXES = ("Solutions", "Group", "Services", "Associates", "Partners", "International", "Experts", "Professionals")
DISTANCE_LADDER_KM = (0.5, 0.8, 1.2, 1.7, 2.3, 3.1, 3.8, 4.5)

MAX_NAME_ATTEMPTS = 50


def string_hash(value: str) -> int:
    """31x polynomial rolling hash reduced to a signed 32-bit int, absolute value taken."""
    h = 0
    for char in value:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def _mix32(h: int) -> int:
    h &= 0xFFFFFFFF
    h ^= h >> 16
    h = (h * 0x85EBCA6B) & 0xFFFFFFFF
    h ^= h >> 13
    h = (h * 0xC2B2AE35) & 0xFFFFFFFF
    h ^= h >> 16
    return h


def seeded_random(key: str, salt: str) -> float:
    """Stable pseudo-random float in [0, 1) for a (key, purpose) pair."""
    return _mix32(string_hash(f"{key}::{salt}")) / 2**32


def seeded_int(key: str, salt: str, low: int, high: int) -> int:
    """Stable integer in the inclusive range [low, high]."""
    return low + int(seeded_random(key, salt) * (high - low + 1))


def seeded_choice(key: str, salt: str, options: Sequence[T]) -> T:
    return options[int(seeded_random(key, salt) * len(options))]


def seeded_rating(key: str, salt: str, low: float, high: float) -> float:
    return round(low + seeded_random(key, salt) * (high - low), 1)


def js_round(value: float) -> int:
    """Round half up, the way the dashboards display numbers."""
    return int(math.floor(value + 0.5))


def slug_for_domain(name: str, max_length: int = 15) -> str:
    return re.sub(r"[^a-z0-9]", "", name.lower())[:max_length] or "business"


def rating_band(category: str):
    if category == ACCOMMODATION:
        return (3.7, 4.8), (50, 350)
    return (3.5, 5.0), (20, 220)


def synthetic_review_score(name: str, category: str):
    """Estimated (rating, review_count) for a business we only know by name."""
    (rating_low, rating_high), (reviews_low, reviews_high) = rating_band(category)
    return (
        seeded_rating(name, "rating", rating_low, rating_high),
        seeded_int(name, "reviews", reviews_low, reviews_high),
    )


# ---------- business profile ----------


def profile_key(signals: SignalSet) -> str:
    if signals.name:
        return f"{signals.name.strip().lower()}|{(signals.locality_hint or '').strip().lower()}"
    if signals.coordinates:
        return f"coords|{signals.coordinates.lat},{signals.coordinates.lng}"
    if signals.external_id:
        return f"id|{signals.external_id}"
    return f"website|{signals.website or ''}"


def _address(key: str, name: str, locality: Optional[str]) -> str:
    number = seeded_int(key, "street-number", 1, 200)
    street = f"{seeded_choice(key, 'street-prefix', STREET_PREFIXES)} {seeded_choice(key, 'street-suffix', STREET_SUFFIXES)}"
    return f"{number} {street}, {locality or name}"


def _website(key: str, name: str, tlds: Sequence[str] = WEBSITE_TLDS) -> str:
    return f"https://www.{slug_for_domain(name)}{seeded_choice(key, 'tld', tlds)}"


def _phone(key: str) -> str:
    return f"+91 {seeded_int(key, 'phone', 1_000_000_000, 9_999_999_999)}"


def synthetic_profile(signals: SignalSet) -> BusinessProfile:
    """Build a plausible, stable business profile from whatever signals we have."""
    key = profile_key(signals)
    name = signals.name or UNKNOWN_BUSINESS
    category = normalize_category(signals.category, signals.name).canonical
    (rating_low, rating_high), (reviews_low, reviews_high) = rating_band(category)

    address = _address(key, name, signals.locality_hint)
    review_count = signals.review_count_hint
    if review_count is None:
        review_count = seeded_int(key, "reviews", reviews_low, reviews_high)

    profile = BusinessProfile(
        name=name,
        category=category,
        rating=seeded_rating(key, "rating", rating_low, rating_high),
        review_count=review_count,
        address=address,
        phone=_phone(key),
        website=signals.website or _website(key, name),
        locality=signals.locality_hint or extract_area_from_address(address),
        external_id=signals.external_id or f"mock_{string_hash(key):08x}",
        maps_url=None,
        provenance=SYNTHETIC,
    )
    logger.info("Generated synthetic profile for key=%s", key)
    return profile


# ---------- competitors ----------


def _location_word(location: Optional[str]) -> Optional[str]:
    if not location:
        return None
    word = re.split(r"[\s,]+", location.strip())[0]
    return word or None


def _accommodation_name(key: str, index: int, attempt: int, kind: str, location: Optional[str]) -> str:
    salt = f"name-{index}-{attempt}"
    style = (index + attempt) % 3
    if style == 0:
        return f"{seeded_choice(key, salt, ACCOMMODATION_PREFIXES)} {kind}"
    if style == 1:
        return f"{seeded_choice(key, salt, ACCOMMODATION_PLACES)} {kind}"
    place = _location_word(location)
    if place and attempt == 0:
        return f"{place} {kind}"
    return f"{seeded_choice(key, salt, ACCOMMODATION_PREFIXES)} {seeded_choice(key, salt + '-b', ACCOMMODATION_PLACES)} {kind}"


def _business_name(key: str, index: int, attempt: int, base: str, location: Optional[str]) -> str:
    salt = f"name-{index}-{attempt}"
    prefix = seeded_choice(key, salt + "-prefix", BUSINESS_PREFIXES)
    suffix = seeded_choice(key, salt + "-suffix", BUSINESS_SUFFIXES)
    style = (index + attempt) % 3
    if style == 0:
        return f"{prefix} {base}"
    if style == 1:
        return f"{base} {suffix}"
    place = _location_word(location)
    if place and attempt == 0:
        return f"{place} {base} {suffix}"
    return f"{prefix} {base} {suffix}"


def synthetic_competitors(
    seed: SignalSet,
    count: int = 3,
    category: Optional[str] = None,
    query: Optional[str] = None,
) -> List[Competitor]:
    """Fabricate ``count`` distinct competitors for a seed business."""
    info = normalize_category(category or seed.category, seed.name)
    location = seed.locality_hint
    key = f"{(seed.name or query or info.canonical).lower()}|{(location or '').lower()}"
    is_accommodation = info.canonical == ACCOMMODATION
    kind = accommodation_kind(seed.name).capitalize() if is_accommodation else None
    base = re.sub(r"[^a-zA-Z0-9\s]", "", query or info.canonical).strip() or "Business"
    (rating_low, rating_high), (reviews_low, reviews_high) = rating_band(info.canonical)
    seed_name = (seed.name or "").strip().lower()

    competitors: List[Competitor] = []
    used = {seed_name} if seed_name else set()
    for index in range(count):
        name = ""
        for attempt in range(MAX_NAME_ATTEMPTS):
            if is_accommodation:
                name = _accommodation_name(key, index, attempt, kind, location)
            else:
                name = _business_name(key, index, attempt, base, location)
            if name.lower() not in used:
                break
        else:
            name = f"{name} {index + 1}"
        used.add(name.lower())

        name_key = f"{key}|{name.lower()}"
        street_number = seeded_int(name_key, "street-number", 1, 500)
        street = seeded_choice(name_key, "street", ("Market St", "Main St", "Commerce Ave", "Business Park", "Enterprise Dr"))
        competitors.append(
            Competitor(
                name=name,
                category=info.canonical,
                rating=seeded_rating(name_key, "rating", rating_low, rating_high),
                review_count=seeded_int(name_key, "reviews", reviews_low, reviews_high),
                address=f"{street_number} {street}, {location}" if location else f"{street_number} {street}",
                phone=_phone(name_key),
                website=_website(name_key, name),
                locality=location,
                distance_km=DISTANCE_LADDER_KM[index % len(DISTANCE_LADDER_KM)] if (location or seed.coordinates) else None,
                source_kind=SOURCE_SYNTHETIC,
                provenance=SYNTHETIC,
            )
        )

    competitors.sort(key=lambda competitor: competitor.rating, reverse=True)
    logger.info("Generated %d synthetic competitors for key=%s", len(competitors), key)
    return competitors


# ---------- SEO ----------


def domain_parts(domain: str):
    """Split a host into (name label, top-level label)."""
    labels = [label for label in domain.lower().split(".") if label]
    if not labels:
        return "", ""
    if len(labels) == 1:
        return labels[0], ""
    return labels[0], labels[-1]


def traffic_band(domain_authority: int):
    """Inclusive traffic band used for synthetic SEO at a given authority."""
    if domain_authority > 70:
        return 50_000, 99_999
    if domain_authority > 50:
        return 10_000, 49_999
    if domain_authority > 30:
        return 1_000, 9_999
    return 100, 999


def synthetic_seo(domain: str) -> SeoMetrics:
    """Estimate SEO metrics for a domain from its shape and a stable hash."""
    domain_hash = string_hash(domain)
    _, tld = domain_parts(domain)
    tld_bonus = TLD_AUTHORITY_BONUS.get(tld, DEFAULT_TLD_BONUS)
    length_factor = max(1.0, 10 - len(domain) / 3)
    simulated_age = domain_hash % 15 + 1

    raw_authority = 25 + tld_bonus + length_factor + simulated_age * 2
    domain_authority = js_round(min(95.0, max(15.0, raw_authority + domain_hash % 15)))
    page_authority = max(10, domain_authority - (5 + domain_hash % 10))
    spam_score = js_round(min(5.0, max(1.0, 10 - domain_authority / 10)))

    low, high = traffic_band(domain_authority)
    monthly_traffic = low + domain_hash % (high - low + 1)
    backlinks = domain_authority * 50 + domain_hash % (domain_authority * 20)
    ranking_keywords = monthly_traffic // 10 + domain_hash % 50

    return SeoMetrics(
        domain=domain,
        domain_authority=domain_authority,
        page_authority=page_authority,
        spam_score=spam_score,
        monthly_traffic=monthly_traffic,
        backlinks=backlinks,
        ranking_keywords=ranking_keywords,
        provenance=SYNTHETIC,
        data_source="fallback",
    )
