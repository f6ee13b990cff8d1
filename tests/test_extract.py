import pytest

from localintel.etl import extract
from localintel.etl.extract import ExtractionError
from localintel.models import Coordinates


def test_place_url_with_coordinates_and_trailing_locality():
    signals = extract.extract_signals(
        "https://www.google.com/maps/place/Royal+Palms+Resort+Jaipur/@26.9124,75.7873,15z"
    )

    assert signals.name == "Royal Palms Resort Jaipur"
    assert signals.coordinates == Coordinates(26.9124, 75.7873)
    assert signals.locality_hint == "Jaipur"
    assert signals.external_id is None
    assert signals.category is None


def test_coordinates_only_url_never_raises():
    signals = extract.extract_signals("https://www.google.com/maps/@12.9716,77.5946,17z")

    assert signals.name is None
    assert signals.coordinates == Coordinates(12.9716, 77.5946)
    assert signals.has_signal()


def test_data_segment_coordinates_and_hex_feature_id():
    signals = extract.extract_signals(
        "https://www.google.com/maps/place/Foo/data=!4m5!3m4!1s0x39db:0x1a2b!8m2!3d28.6139!4d77.2090"
    )

    assert signals.name == "Foo"
    assert signals.coordinates == Coordinates(28.6139, 77.2090)
    assert signals.external_id == "0x39db:0x1a2b"
    assert signals.locality_hint is None


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://maps.google.com/?place_id=ChIJN1t_tDeuEmsRUsoyG83frY4", "ChIJN1t_tDeuEmsRUsoyG83frY4"),
        ("https://maps.google.com/?cid=1234567890", "1234567890"),
    ],
)
def test_external_identifiers(url, expected):
    assert extract.extract_signals(url).external_id == expected


def test_query_name_and_website():
    signals = extract.extract_signals("https://maps.google.com/maps?q=Taj+Mahal+Palace&website=tajhotels.com")

    assert signals.name == "Taj Mahal Palace"
    assert signals.website == "https://tajhotels.com"


def test_query_coordinates_are_not_a_name():
    signals = extract.extract_signals("https://maps.google.com/?q=28.6139,77.2090")

    assert signals.name is None
    assert signals.coordinates == Coordinates(28.6139, 77.209)


def test_city_state_segment():
    signals = extract.extract_signals("https://www.google.com/maps/place/Acme+Plumbing/Austin,+Texas/")

    assert signals.name == "Acme Plumbing"
    assert signals.locality_hint == "Austin"


def test_free_text_name_locality_and_reviews():
    signals = extract.extract_signals("Cafe Mocha, Bangalore, 1,234 reviews")

    assert signals.name == "Cafe Mocha"
    assert signals.locality_hint == "Bangalore"
    assert signals.review_count_hint == 1234


def test_free_text_does_not_take_trailing_word_as_locality():
    signals = extract.extract_signals("Blue Door Cafe, Pune")

    assert signals.name == "Blue Door Cafe"
    assert signals.locality_hint == "Pune"


def test_business_kind_is_not_a_locality():
    signals = extract.extract_signals("https://www.google.com/maps/place/Sunset+Villa+Resort/@15.5,73.8,15z")

    assert signals.name == "Sunset Villa Resort"
    assert signals.locality_hint is None


def test_numeric_locality_is_discarded():
    signals = extract.extract_signals("12.9716, 77.5946")

    assert signals.name is None
    assert signals.coordinates == Coordinates(12.9716, 77.5946)
    assert signals.locality_hint is None


def test_slug_is_deslugified():
    assert extract.extract_signals("https://example.com/maps/place/blue-door-cafe").name == "blue door cafe"


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_empty_identifier_raises(raw):
    with pytest.raises(ExtractionError):
        extract.extract_signals(raw)


def test_out_of_range_coordinates_yield_no_signal():
    with pytest.raises(ExtractionError):
        extract.extract_signals("https://www.google.com/maps/@95.1234,200.5678,15z")


def test_extraction_error_is_a_value_error():
    assert issubclass(ExtractionError, ValueError)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://www.Example.com/path?x=1", "example.com"),
        ("http://blog.example.org", "blog.example.org"),
        ("example", "example.com"),
        ("shop.example.co.in/contact", "shop.example.co.in"),
    ],
)
def test_extract_domain(url, expected):
    assert extract.extract_domain(url) == expected


@pytest.mark.parametrize("value", ["  ", "https://", "http://www."])
def test_extract_domain_requires_a_host(value):
    with pytest.raises(ValueError):
        extract.extract_domain(value)


@pytest.mark.parametrize(
    "address, expected",
    [
        ("12 MI Road, C Scheme, Jaipur, Rajasthan 302001, India", "Jaipur"),
        ("1600 Amphitheatre Pkwy, Mountain View, CA 94043, USA", "Mountain View"),
        ("MG Road, Pune", "Pune"),
        (None, None),
        ("", None),
    ],
)
def test_extract_area_from_address(address, expected):
    assert extract.extract_area_from_address(address) == expected


def test_deslugify():
    assert extract.deslugify("Royal+Palms%20Resort") == "Royal Palms Resort"
    assert extract.deslugify("acme-plumbing-co") == "acme plumbing co"
    assert extract.deslugify("Jean-Paul_Bistro") == "Jean-Paul Bistro"


def test_encoded_ampersand_stays_inside_the_query_name():
    signals = extract.extract_signals("https://www.google.com/maps?q=Barnes+%26+Noble+Booksellers")

    assert signals.name == "Barnes & Noble Booksellers"


def test_place_segment_is_decoded_once():
    signals = extract.extract_signals("https://www.google.com/maps/place/Caf%C3%A9+100%2525+Pure/@18.52,73.85,15z")

    assert signals.name == "Café 100%25 Pure"


def test_encoded_separators_in_address_and_website_params():
    signals = extract.extract_signals(
        "https://maps.google.com/?q=Tom+%26+Jerry%27s&address=Koregaon+Park%2C+Pune&website=tomandjerrys.example%2Fmenu%3Fa%3D1%26b%3D2"
    )

    assert signals.name == "Tom & Jerry's"
    assert signals.locality_hint == "Koregaon Park"
    assert signals.website == "https://tomandjerrys.example/menu?a=1&b=2"
