import pytest
import requests

from localintel.models import Coordinates
from localintel.vendors import google_places


class DummyResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError("http error")

    def json(self):
        return self._payload


class DummySession:
    def __init__(self):
        self.calls = []
        self.response = DummyResponse()

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        return self.response


@pytest.fixture(autouse=True)
def patch_session(monkeypatch):
    session = DummySession()
    monkeypatch.setattr(google_places, "_SESSION", session)
    return session


def test_text_search_success(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OK", "results": []})
    payload = google_places.text_search("pizza", "key")
    assert payload["status"] == "OK"
    url, params, timeout = patch_session.calls[0]
    assert "textsearch" in url
    assert params["query"] == "pizza"
    assert "location" not in params
    assert timeout == 10


def test_text_search_with_location_bias(patch_session):
    patch_session.response = DummyResponse(payload={"status": "ZERO_RESULTS", "results": []})
    google_places.text_search("pizza", "key", location=Coordinates(1.5, 2.5), radius=50000, timeout=3)
    _, params, timeout = patch_session.calls[0]
    assert params["location"] == "1.5,2.5"
    assert params["radius"] == 50000
    assert timeout == 3


def test_text_search_error_status(patch_session):
    patch_session.response = DummyResponse(payload={"status": "INVALID_REQUEST", "error_message": "bad"})
    with pytest.raises(google_places.GooglePlacesError):
        google_places.text_search("pizza", "key")


def test_http_error_propagates(patch_session):
    patch_session.response = DummyResponse(status_code=503)
    with pytest.raises(requests.HTTPError):
        google_places.nearby_search(Coordinates(1, 2), "key")


def test_nearby_search_params(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OK", "results": [{"name": "A"}]})
    google_places.nearby_search(Coordinates(1, 2), "key", radius=500, place_type="lodging", keyword="spa", rank_by="prominence")
    url, params, _ = patch_session.calls[0]
    assert "nearbysearch" in url
    assert params == {
        "location": "1,2",
        "radius": 500,
        "key": "key",
        "type": "lodging",
        "keyword": "spa",
        "rankby": "prominence",
    }


def test_place_details_success(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OK", "result": {"name": "Acme"}})
    result = google_places.place_details("pid", "key")
    assert result["name"] == "Acme"
    assert "user_ratings_total" in patch_session.calls[0][1]["fields"]


def test_place_details_error(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OVER_QUERY_LIMIT", "error_message": "limit"})
    with pytest.raises(google_places.GooglePlacesError):
        google_places.place_details("pid", "key")


def test_geocode(patch_session):
    patch_session.response = DummyResponse(
        payload={"status": "OK", "results": [{"geometry": {"location": {"lat": 26.9, "lng": 75.8}}}]}
    )
    assert google_places.geocode("Jaipur", "key") == Coordinates(26.9, 75.8)

    patch_session.response = DummyResponse(payload={"status": "ZERO_RESULTS", "results": []})
    assert google_places.geocode("Nowhere", "key") is None


@pytest.mark.parametrize(
    "value, expected",
    [("ChIJN1t_tDeuEmsRUsoyG83frY4", True), ("0x39db:0x1a2b", False), ("1234567890", False), ("", False)],
)
def test_is_place_id(value, expected):
    assert google_places.is_place_id(value) is expected


def test_client_rejects_feature_ids_without_calling_api(patch_session):
    client = google_places.PlacesClient("key", timeout=4)

    with pytest.raises(google_places.GooglePlacesError):
        client.get_by_external_id("0x39db:0x1a2b")
    assert patch_session.calls == []


def test_client_passes_key_and_timeout(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OK", "results": [{"name": "A"}]})
    client = google_places.PlacesClient("secret", timeout=4)

    assert client.is_configured
    assert client.search_by_text("pizza") == [{"name": "A"}]
    _, params, timeout = patch_session.calls[0]
    assert params["key"] == "secret"
    assert timeout == 4
    assert not google_places.PlacesClient("").is_configured
