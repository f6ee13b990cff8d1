import pytest

from localintel.etl.extract import ExtractionError
from localintel.jobs import server
from localintel.models import SYNTHETIC, BusinessProfile, Competitor, SeoMetrics


class FakeEngine:
    def __init__(self):
        self.calls = []
        self.fail_with = None

    def resolve_business(self, identifier):
        self.calls.append(("business", identifier))
        if self.fail_with is not None:
            raise self.fail_with
        return BusinessProfile(
            name="Royal Palms Resort Jaipur",
            category="Accommodation",
            rating=4.3,
            review_count=812,
            phone="+91 141 261 0000",
            locality="Jaipur",
            external_id="mock_1",
            provenance=SYNTHETIC,
        )

    def resolve_competitors(self, seed, filters=None, query=None, limit=None):
        self.calls.append(("competitors", seed, filters, query))
        return [Competitor(name="Umaid Bhawan", rating=4.6, review_count=900, distance_km=1.2)]

    def resolve_seo_metrics(self, website, seed_name=None):
        self.calls.append(("seo", website, seed_name))
        if self.fail_with is not None:
            raise self.fail_with
        return SeoMetrics("example.com", 62, 53, 2, 12000, 3100, 420)


@pytest.fixture
def engine(monkeypatch):
    fake = FakeEngine()
    monkeypatch.setattr(server, "get_engine", lambda: fake)
    return fake


@pytest.fixture
def client():
    return server.app.test_client()


def test_root_and_health(client, monkeypatch):
    monkeypatch.delenv("GOOGLE_PLACES_API_KEY", raising=False)
    assert client.get("/").status_code == 200
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_gmb_requires_profile_url(client, engine):
    assert client.post("/api/gmb", json={}).status_code == 400
    assert client.post("/api/gmb", json={"profileUrl": "   "}).status_code == 400
    assert engine.calls == []


def test_gmb_returns_camel_case_profile(client, engine):
    response = client.post("/api/gmb", json={"profileUrl": "https://maps.google.com/?q=Royal+Palms"})

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["businessName"] == "Royal Palms Resort Jaipur"
    assert data["reviews"] == 812
    assert data["phoneNumber"] == "+91 141 261 0000"
    assert data["placeId"] == "mock_1"
    assert data["isEstimated"] is True


def test_gmb_maps_extraction_error_to_400(client, engine):
    engine.fail_with = ExtractionError("Could not extract business information")

    response = client.post("/api/gmb", json={"profileUrl": "???"})

    assert response.status_code == 400
    assert "Could not extract" in response.get_json()["error"]


def test_gmb_unexpected_error_is_500(client, engine):
    engine.fail_with = RuntimeError("boom")

    assert client.post("/api/gmb", json={"profileUrl": "x"}).status_code == 500


def test_competitors_requires_business_name(client, engine):
    assert client.post("/api/competitors", json={"location": "Jaipur"}).status_code == 400


def test_competitors_builds_seed(client, engine):
    response = client.post(
        "/api/competitors",
        json={"businessName": "Royal Palms", "location": "Jaipur", "category": "hotel", "coordinates": {"lat": 26.9, "lng": 75.8}},
    )

    assert response.status_code == 200
    competitor = response.get_json()["data"]["competitors"][0]
    assert competitor["name"] == "Umaid Bhawan"
    assert competitor["distance"] == "1.2 km"
    assert competitor["isEstimated"] is False
    _, seed, filters, query = engine.calls[0]
    assert (seed.name, seed.locality_hint, seed.category) == ("Royal Palms", "Jaipur", "hotel")
    assert seed.coordinates.lat == 26.9
    assert filters is None and query is None


def test_custom_competitors_validation(client, engine):
    assert client.post("/api/custom-competitors", json={}).status_code == 400
    assert client.post(
        "/api/custom-competitors", json={"searchQuery": "cafes", "filters": {"minRating": "high"}}
    ).status_code == 400
    assert client.post(
        "/api/custom-competitors", json={"searchQuery": "cafes", "filters": {"sortBy": "distance"}}
    ).status_code == 400
    assert client.post(
        "/api/custom-competitors", json={"searchQuery": "cafes", "coordinates": {"lat": 120, "lng": 0}}
    ).status_code == 400
    assert engine.calls == []


def test_custom_competitors_passes_filters(client, engine):
    response = client.post(
        "/api/custom-competitors",
        json={
            "searchQuery": "thali restaurants",
            "businessLocation": "Jaipur",
            "filters": {"minRating": "4", "maxDistance": "5 km", "priceLevel": "$$", "sortBy": "reviews", "sortOrder": "asc"},
        },
    )

    assert response.status_code == 200
    _, seed, filters, query = engine.calls[0]
    assert query == "thali restaurants"
    assert seed.name is None and seed.locality_hint == "Jaipur"
    assert filters.min_rating == 4.0
    assert filters.max_distance_km == "5 km"
    assert filters.price_level == "$$"
    assert filters.sort_by == "reviews"
    assert filters.descending is False


def test_seo_requires_website(client, engine):
    assert client.post("/api/seo", json={"businessName": "Acme"}).status_code == 400


def test_seo_returns_metrics(client, engine):
    response = client.post("/api/seo", json={"website": "https://example.com", "businessName": "Example"})

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["domainAuthority"] == 62
    assert data["dataSource"] == "free-tools"
    assert data["isEstimated"] is False
    assert engine.calls[0] == ("seo", "https://example.com", "Example")


def test_seo_value_error_is_400(client, engine):
    engine.fail_with = ValueError("A website or domain is required.")

    assert client.post("/api/seo", json={"website": "x"}).status_code == 400


def test_custom_competitors_reads_price_range(client, engine):
    response = client.post(
        "/api/custom-competitors",
        json={"businessCategory": "restaurant", "businessLocation": "Jaipur", "filters": {"priceRange": "$$"}},
    )

    assert response.status_code == 200
    _, _, filters, _ = engine.calls[0]
    assert filters.price_level == "$$"
