"""Category normalisation: canonical categories and provider vocabularies.

Everything here is a pure table lookup. Unknown input always resolves to the
generic "Business" category rather than failing.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

GENERIC_CATEGORY = "Business"
GENERIC_SEARCH_TERMS = "businesses"
GENERIC_PLACE_TYPE = "establishment"
ACCOMMODATION = "Accommodation"

LODGING_KEYWORDS = ("resort", "hotel", "villa", "lodge", "inn")

# Ordered: the first keyword found in the text wins.
KEYWORD_CATEGORIES: Tuple[Tuple[str, str], ...] = (
    ("restaurant", "Restaurant"),
    ("cafe", "Cafe"),
    ("coffee", "Cafe"),
    ("hotel", ACCOMMODATION),
    ("resort", ACCOMMODATION),
    ("villa", ACCOMMODATION),
    ("lodge", ACCOMMODATION),
    ("lodging", ACCOMMODATION),
    ("motel", ACCOMMODATION),
    ("guesthouse", ACCOMMODATION),
    ("guest house", ACCOMMODATION),
    ("homestay", ACCOMMODATION),
    ("inn", ACCOMMODATION),
    ("bar", "Bar"),
    ("pub", "Bar"),
    ("mall", "Shopping Mall"),
    ("grocery", "Grocery Store"),
    ("supermarket", "Grocery Store"),
    ("shop", "Retail"),
    ("store", "Retail"),
    ("market", "Retail"),
    ("boutique", "Retail"),
    ("hospital", "Healthcare"),
    ("clinic", "Healthcare"),
    ("medical", "Healthcare"),
    ("dental", "Dental Care"),
    ("dentist", "Dental Care"),
    ("pharmacy", "Pharmacy"),
    ("chemist", "Pharmacy"),
    ("school", "Education"),
    ("college", "Education"),
    ("university", "Education"),
    ("academy", "Education"),
    ("temple", "Place Of Worship"),
    ("church", "Place Of Worship"),
    ("mosque", "Place Of Worship"),
    ("bank", "Financial Services"),
    ("finance", "Financial Services"),
    ("salon", "Beauty Services"),
    ("spa", "Beauty Services"),
    ("beauty", "Beauty Services"),
    ("gym", "Fitness"),
    ("fitness", "Fitness"),
    ("real estate", "Real Estate"),
    ("realty", "Real Estate"),
    ("law", "Legal Services"),
    ("attorney", "Legal Services"),
    ("automotive", "Automotive"),
    ("motors", "Automotive"),
    ("garage", "Automotive"),
    ("auto", "Automotive"),
    ("museum", "Museum"),
    ("park", "Park"),
    ("garden", "Park"),
    ("station", "Transport"),
    ("airport", "Transport"),
    ("travel", "Travel"),
    ("tours", "Travel"),
)

CATEGORY_ALIASES = {
    "hotel": ACCOMMODATION,
    "resort": ACCOMMODATION,
    "lodging": ACCOMMODATION,
    "lodge": ACCOMMODATION,
    "villa": ACCOMMODATION,
    "medical": "Healthcare",
    "financial": "Financial Services",
    "beauty": "Beauty Services",
    "shopping": "Retail",
    "retail store": "Retail",
    "transportation": "Transport",
}

SEARCH_TERMS = {
    "Restaurant": "restaurants",
    "Cafe": "cafes coffee shops",
    ACCOMMODATION: "hotels resorts",
    "Bar": "bars pubs",
    "Retail": "retail shops",
    "Shopping Mall": "shopping malls",
    "Grocery Store": "grocery stores supermarkets",
    "Healthcare": "hospitals healthcare clinics",
    "Dental Care": "dental clinics",
    "Pharmacy": "pharmacies",
    "Education": "schools education",
    "Place Of Worship": "religious organizations",
    "Financial Services": "banks financial services",
    "Beauty Services": "beauty salons spas",
    "Fitness": "gyms fitness centers",
    "Real Estate": "real estate agencies",
    "Legal Services": "law firms lawyers",
    "Automotive": "car dealers auto repair",
    "Museum": "museums",
    "Park": "parks",
    "Transport": "transportation services",
    "Travel": "travel agencies",
    "Tourism": "tourist attractions",
    "Entertainment": "entertainment venues",
    "Locality": "local businesses",
    GENERIC_CATEGORY: GENERIC_SEARCH_TERMS,
}

PLACE_TYPES = {
    "Restaurant": "restaurant",
    "Cafe": "cafe",
    ACCOMMODATION: "lodging",
    "Bar": "bar",
    "Retail": "store",
    "Shopping Mall": "shopping_mall",
    "Grocery Store": "grocery_or_supermarket",
    "Healthcare": "hospital",
    "Dental Care": "dentist",
    "Pharmacy": "pharmacy",
    "Education": "school",
    "Place Of Worship": "place_of_worship",
    "Financial Services": "bank",
    "Beauty Services": "beauty_salon",
    "Fitness": "gym",
    "Real Estate": "real_estate_agency",
    "Legal Services": "lawyer",
    "Automotive": "car_repair",
    "Museum": "museum",
    "Park": "park",
    "Transport": "transit_station",
    "Travel": "travel_agency",
    "Tourism": "tourist_attraction",
    "Entertainment": "amusement_park",
}

# Raw keyword -> place type, for category strings outside the canonical set.
KEYWORD_PLACE_TYPES: Tuple[Tuple[str, str], ...] = (
    ("plumber", "plumber"),
    ("electrician", "electrician"),
    ("locksmith", "locksmith"),
    ("insurance", "insurance_agency"),
    ("accountant", "accounting"),
    ("bakery", "bakery"),
    ("florist", "florist"),
    ("car wash", "car_wash"),
    ("car rental", "car_rental"),
    ("jewelry", "jewelry_store"),
    ("furniture", "furniture_store"),
    ("hardware", "hardware_store"),
    ("electronics", "electronics_store"),
    ("clothing", "clothing_store"),
    ("shoe", "shoe_store"),
    ("book", "book_store"),
    ("pet", "pet_store"),
    ("veterinary", "veterinary_care"),
    ("cinema", "movie_theater"),
    ("theater", "movie_theater"),
    ("night club", "night_club"),
    ("takeaway", "meal_takeaway"),
    ("delivery", "meal_delivery"),
)

PROVIDER_TYPE_CATEGORIES = {
    "restaurant": "Restaurant",
    "food": "Restaurant",
    "meal_takeaway": "Restaurant",
    "cafe": "Cafe",
    "bar": "Bar",
    "night_club": "Bar",
    "lodging": ACCOMMODATION,
    "hotel": ACCOMMODATION,
    "resort": ACCOMMODATION,
    "campground": ACCOMMODATION,
    "guest_house": ACCOMMODATION,
    "store": "Retail",
    "clothing_store": "Retail",
    "shopping_mall": "Shopping Mall",
    "grocery_or_supermarket": "Grocery Store",
    "supermarket": "Grocery Store",
    "hospital": "Healthcare",
    "health": "Healthcare",
    "doctor": "Healthcare",
    "physiotherapist": "Healthcare",
    "dentist": "Dental Care",
    "pharmacy": "Pharmacy",
    "school": "Education",
    "university": "Education",
    "place_of_worship": "Place Of Worship",
    "church": "Place Of Worship",
    "hindu_temple": "Place Of Worship",
    "mosque": "Place Of Worship",
    "bank": "Financial Services",
    "accounting": "Financial Services",
    "beauty_salon": "Beauty Services",
    "hair_care": "Beauty Services",
    "spa": "Beauty Services",
    "gym": "Fitness",
    "real_estate_agency": "Real Estate",
    "lawyer": "Legal Services",
    "car_dealer": "Automotive",
    "car_repair": "Automotive",
    "museum": "Museum",
    "park": "Park",
    "airport": "Transport",
    "train_station": "Transport",
    "bus_station": "Transport",
    "transit_station": "Transport",
    "travel_agency": "Travel",
    "tourist_attraction": "Tourism",
    "amusement_park": "Entertainment",
    "movie_theater": "Entertainment",
}

GENERIC_PROVIDER_TYPES = {"point_of_interest", "establishment", "political", "premise"}
_CANONICAL = {category.lower(): category for category in SEARCH_TERMS}


@dataclass(frozen=True)
class CategoryInfo:
    canonical: str
    search_terms: str
    place_type: str

    @property
    def is_generic(self) -> bool:
        return self.canonical == GENERIC_CATEGORY


def _contains_keyword(text: str, keyword: str) -> bool:
    return re.search(rf"\b{re.escape(keyword)}(?:s|es)?\b", text) is not None


def _keyword_lookup(text: Optional[str], table: Iterable[Tuple[str, str]]) -> Optional[str]:
    if not text:
        return None
    lowered = text.lower()
    for keyword, value in table:
        if _contains_keyword(lowered, keyword):
            return value
    return None


def canonical_category(category: Optional[str] = None, name: Optional[str] = None) -> str:
    """Resolve a canonical category from an explicit category and/or a business name."""
    if category and category.strip():
        lowered = category.strip().lower()
        if lowered in _CANONICAL and _CANONICAL[lowered] != GENERIC_CATEGORY:
            return _CANONICAL[lowered]
        if lowered in CATEGORY_ALIASES:
            return CATEGORY_ALIASES[lowered]
        matched = _keyword_lookup(lowered, KEYWORD_CATEGORIES)
        if matched:
            return matched
    return _keyword_lookup(name, KEYWORD_CATEGORIES) or GENERIC_CATEGORY


def normalize_category(category: Optional[str] = None, name: Optional[str] = None) -> CategoryInfo:
    canonical = canonical_category(category, name)
    place_type = PLACE_TYPES.get(canonical)
    if place_type is None:
        place_type = _keyword_lookup(category, KEYWORD_PLACE_TYPES) or GENERIC_PLACE_TYPE
    return CategoryInfo(
        canonical=canonical,
        search_terms=SEARCH_TERMS.get(canonical, GENERIC_SEARCH_TERMS),
        place_type=place_type,
    )


def format_place_type(type_name: str) -> str:
    return " ".join(word.capitalize() for word in type_name.split("_"))


def category_from_place_types(types: Optional[Iterable[str]]) -> str:
    """Map a provider's place-type list to a display category."""
    types = list(types or [])
    for type_name in types:
        if type_name in PROVIDER_TYPE_CATEGORIES:
            return PROVIDER_TYPE_CATEGORIES[type_name]
    for type_name in types:
        if type_name not in GENERIC_PROVIDER_TYPES:
            return format_place_type(type_name)
    return GENERIC_CATEGORY


def is_lodging_name(name: Optional[str]) -> bool:
    if not name:
        return False
    lowered = name.lower()
    return any(_contains_keyword(lowered, keyword) for keyword in LODGING_KEYWORDS)


def accommodation_kind(name: Optional[str]) -> str:
    lowered = (name or "").lower()
    for kind in ("resort", "villa", "lodge"):
        if kind in lowered:
            return kind
    return "hotel"


def exclusion_term(name: Optional[str]) -> str:
    """Most distinctive word of a business name, used as a ``-term`` search exclusion."""
    if not name or len(name) <= 3:
        return ""
    words = [word for word in re.split(r"\s+", name) if len(word) > 3]
    return words[0] if words else ""


def build_discovery_query(name: str, category: Optional[str] = None, location: Optional[str] = None) -> str:
    """Web-search query used to discover competitors of a named business."""
    info = normalize_category(category, name)
    usable_location = location if location and len(location) > 2 and not re.match(r"^[0-9\s,]+$", location) else None
    exclude = exclusion_term(name)
    suffix = f" -{exclude}" if exclude else ""

    if info.canonical == ACCOMMODATION or is_lodging_name(name):
        kind = accommodation_kind(name)
        if usable_location:
            return f"best {kind}s in {usable_location}{suffix}"
        return f"top rated {kind}s{suffix}"
    if info.canonical in ("Restaurant", "Cafe"):
        if usable_location:
            return f"best restaurants in {usable_location}{suffix}"
        return f"popular restaurants{suffix}"
    if info.canonical in ("Retail", "Shopping Mall"):
        if usable_location:
            return f"top shopping {info.search_terms} in {usable_location}{suffix}"
        return f"best {info.search_terms}{suffix}"
    if not info.is_generic:
        if usable_location:
            return f"top {info.search_terms} in {usable_location}{suffix}"
        return f"best {info.search_terms}{suffix}"
    if usable_location:
        return f"popular businesses in {usable_location}{suffix}"
    return f"top rated businesses{suffix}"
