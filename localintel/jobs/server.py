"""HTTP entrypoint exposing business, competitor and SEO resolution (Cloud Run friendly)."""

from __future__ import annotations

import logging
import os
import threading
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from localintel.core.config import get_settings
from localintel.core.engine import ResolutionEngine
from localintel.etl.extract import ExtractionError
from localintel.jobs.payloads import (
    RequestError,
    competitors_payload,
    parse_coordinates,
    parse_filters,
    profile_payload,
    seo_payload,
)
from localintel.models import SignalSet

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App & engine ----------
app = Flask(__name__)
_engine: Optional[ResolutionEngine] = None
_engine_lock = threading.Lock()


def get_engine() -> ResolutionEngine:
    """Build the process-wide engine (and start its cache sweeper) on first use."""
    global _engine
    with _engine_lock:
        if _engine is None:
            _engine = ResolutionEngine()
            _engine.start()
        return _engine


def _text(payload: Dict[str, Any], field: str) -> Optional[str]:
    value = payload.get(field)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    """Simple root to avoid 404 on GET /"""
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    """Lightweight health endpoint; reports which live sources are configured."""
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "places_configured": bool(settings.google_places_api_key),
                "serpapi_configured": bool(settings.serpapi_api_key),
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.post("/api/gmb")
def business_profile() -> Any:
    """Resolve a business profile. Required JSON field: profileUrl."""
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    identifier = _text(payload, "profileUrl")
    if not identifier:
        return jsonify({"error": "profileUrl is required"}), 400

    try:
        profile = get_engine().resolve_business(identifier)
    except ExtractionError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception as exc:  # noqa: BLE001
        logger.exception("Business resolution failed for %s: %s", identifier, exc)
        return jsonify({"error": "business lookup failed"}), 500

    return jsonify({"data": profile_payload(profile)}), 200


@app.post("/api/competitors")
def competitors() -> Any:
    """Find competitors. Required: businessName. Optional: location, category, coordinates."""
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    name = _text(payload, "businessName")
    if not name:
        return jsonify({"error": "businessName is required"}), 400

    try:
        seed = SignalSet(
            name=name,
            locality_hint=_text(payload, "location"),
            category=_text(payload, "category"),
            coordinates=parse_coordinates(payload.get("coordinates")),
        )
    except RequestError as exc:
        return jsonify({"error": str(exc)}), 400

    try:
        result = get_engine().resolve_competitors(seed)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Competitor resolution failed for %s: %s", name, exc)
        return jsonify({"error": "competitor lookup failed"}), 500

    return jsonify({"data": {"competitors": competitors_payload(result)}}), 200


@app.post("/api/custom-competitors")
def custom_competitors() -> Any:
    """Advanced competitor search.

    Optional JSON fields: searchQuery, businessCategory, businessLocation,
    filters {minRating, maxDistance, priceRange (alias priceLevel), category, sortBy, sortOrder, limit},
    coordinates {lat, lng}. At least one of the first three is required.
    """
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    query = _text(payload, "searchQuery")
    category = _text(payload, "businessCategory")
    location = _text(payload, "businessLocation")
    if not (query or category or location):
        return jsonify({"error": "searchQuery, businessCategory or businessLocation is required"}), 400

    try:
        filters = parse_filters(payload.get("filters"))
        seed = SignalSet(
            locality_hint=location,
            category=category,
            coordinates=parse_coordinates(payload.get("coordinates")),
        )
    except RequestError as exc:
        return jsonify({"error": str(exc)}), 400

    try:
        result = get_engine().resolve_competitors(seed, filters=filters, query=query)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Custom competitor search failed: %s", exc)
        return jsonify({"error": "competitor search failed"}), 500

    return jsonify({"data": {"competitors": competitors_payload(result)}}), 200


@app.post("/api/seo")
def seo_metrics() -> Any:
    """SEO metrics for a website. Required: website. Optional: businessName."""
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    website = _text(payload, "website")
    if not website:
        return jsonify({"error": "website is required"}), 400

    try:
        metrics = get_engine().resolve_seo_metrics(website, seed_name=_text(payload, "businessName"))
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception as exc:  # noqa: BLE001
        logger.exception("SEO resolution failed for %s: %s", website, exc)
        return jsonify({"error": "seo lookup failed"}), 500

    return jsonify({"data": seo_payload(metrics)}), 200


def main() -> None:
    """Bind to the PORT the platform injects, 8080 when running locally."""
    port = get_settings().port
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    get_engine()
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
