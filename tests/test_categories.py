import pytest

from localintel.etl import categories
from localintel.etl.categories import ACCOMMODATION


@pytest.mark.parametrize(
    "category, name, expected",
    [
        ("hotel", None, ACCOMMODATION),
        ("Restaurant", None, "Restaurant"),
        (None, "Blue Door Cafe", "Cafe"),
        (None, "Royal Palms Resort Jaipur", ACCOMMODATION),
        ("xyz", "Acme", "Business"),
        (None, None, "Business"),
        (None, "Barber Shop", "Retail"),
        (None, "Innovation Labs", "Business"),
    ],
)
def test_canonical_category(category, name, expected):
    assert categories.canonical_category(category, name) == expected


def test_normalize_category_uses_raw_keyword_place_type():
    info = categories.normalize_category("plumber")

    assert info.canonical == "Business"
    assert info.is_generic
    assert info.search_terms == "businesses"
    assert info.place_type == "plumber"


def test_normalize_category_accommodation():
    info = categories.normalize_category(None, "Sunset Villa Resort")

    assert info.canonical == ACCOMMODATION
    assert info.search_terms == "hotels resorts"
    assert info.place_type == "lodging"


def test_category_from_place_types():
    assert categories.category_from_place_types(["point_of_interest", "lodging"]) == ACCOMMODATION
    assert categories.category_from_place_types(["establishment", "car_wash"]) == "Car Wash"
    assert categories.category_from_place_types([]) == "Business"
    assert categories.category_from_place_types(None) == "Business"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Sunset Villa Resort", True),
        ("Dinner Inn", True),
        ("Hotel Clarks Amer", True),
        ("Dinner Club", False),
        ("Innovation Labs", False),
        (None, False),
    ],
)
def test_is_lodging_name(name, expected):
    assert categories.is_lodging_name(name) is expected


def test_accommodation_kind_and_exclusion_term():
    assert categories.accommodation_kind("Sunset Villa Resort") == "resort"
    assert categories.accommodation_kind("Blue Lagoon Villa") == "villa"
    assert categories.accommodation_kind(None) == "hotel"
    assert categories.exclusion_term("Royal Palms Resort Jaipur") == "Royal"
    assert categories.exclusion_term("Abc") == ""


@pytest.mark.parametrize(
    "name, category, location, expected",
    [
        ("Royal Palms Resort Jaipur", None, "Jaipur", "best resorts in Jaipur -Royal"),
        ("Blue Door Cafe", None, "Pune", "best restaurants in Pune -Blue"),
        ("Acme", None, "123", "top rated businesses -Acme"),
        ("City Dental", "dentist", "Delhi", "top dental clinics in Delhi -City"),
    ],
)
def test_build_discovery_query(name, category, location, expected):
    assert categories.build_discovery_query(name, category, location) == expected
