from localintel.etl import categories, transform
from localintel.models import SOURCE_PLACES_TEXT, Coordinates, SignalSet

DETAILS = {
    "place_id": "pid-1",
    "name": "Spice Route",
    "formatted_address": "12 MI Road, C Scheme, Jaipur, Rajasthan 302001, India",
    "formatted_phone_number": "098290 12345",
    "website": "https://spiceroute.example",
    "rating": 4.4,
    "user_ratings_total": 120,
    "types": ["restaurant", "food", "point_of_interest"],
    "geometry": {"location": {"lat": 26.91, "lng": 75.79}},
    "url": "https://maps.google.com/?cid=1",
}


def test_parse_city_country():
    components = [
        {"long_name": "Jaipur", "types": ["locality"]},
        {"long_name": "India", "types": ["country"]},
    ]
    city, country = transform.parse_city_country(components)
    assert city == "Jaipur"
    assert country == "India"

    city, country = transform.parse_city_country([])
    assert city is None and country is None


def test_extract_primary_type():
    assert transform._extract_primary_type(["point_of_interest", "restaurant"]) == "restaurant"
    assert transform._extract_primary_type([]) is None


def test_normalize_phone():
    assert transform.normalize_phone("098290 12345", "IN").startswith("+91")
    assert transform.normalize_phone("call us", "IN") == "call us"
    assert transform.normalize_phone(None) is None
    assert transform.normalize_phone("  ") is None


def test_review_count_fallbacks():
    assert transform.review_count({"user_ratings_total": 7}) == 7
    assert transform.review_count({"reviews": [{}, {}, {}]}) == 3
    assert transform.review_count({}, hint=42) == 42
    assert transform.review_count({}) == 0


def test_to_business_profile_prefers_signals():
    signals = SignalSet(name="spice route", website="https://from-url.example", external_id=None)

    profile = transform.to_business_profile(DETAILS, signals)

    assert profile.name == "Spice Route"
    assert profile.category == "Restaurant"
    assert profile.rating == 4.4
    assert profile.review_count == 120
    assert profile.website == "https://from-url.example"
    assert profile.locality == "Jaipur"
    assert profile.external_id == "pid-1"
    assert profile.phone.startswith("+91")
    assert profile.maps_url == "https://maps.google.com/?cid=1"
    assert not profile.is_estimated


def test_to_business_profile_keeps_signal_locality_and_id():
    signals = SignalSet(name="Spice Route", locality_hint="C Scheme", external_id="ChIJabc")

    profile = transform.to_business_profile(dict(DETAILS, user_ratings_total=None), signals)

    assert profile.locality == "C Scheme"
    assert profile.external_id == "ChIJabc"
    assert profile.review_count == 0


def test_to_competitor_merges_details_and_distance():
    result = {
        "place_id": "pid-1",
        "name": "Spice Route",
        "vicinity": "MI Road, Jaipur",
        "rating": 4.4,
        "user_ratings_total": 120,
        "types": ["restaurant"],
        "geometry": {"location": {"lat": 26.92, "lng": 75.79}},
    }
    details = {"website": "https://spiceroute.example", "price_level": 2, "formatted_phone_number": "098290 12345"}

    competitor = transform.to_competitor(
        result, details, origin=Coordinates(26.91, 75.79), source_kind=SOURCE_PLACES_TEXT
    )

    assert competitor.name == "Spice Route"
    assert competitor.category == "Restaurant"
    assert competitor.website == "https://spiceroute.example"
    assert competitor.price_level == 2
    assert competitor.distance_km == 1.1
    assert competitor.distance_label == "1.1 km"
    assert competitor.locality == "Jaipur"
    assert competitor.source_kind == SOURCE_PLACES_TEXT


def test_primary_type_and_display_category_skip_the_same_generic_types():
    types = ["establishment", "point_of_interest", "premise", "political", "car_wash"]

    assert transform._extract_primary_type(types) == "car_wash"
    assert categories.category_from_place_types(types) == "Car Wash"
