"""CLI job that resolves a business, its competitors or a domain's SEO metrics and prints JSON."""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from localintel.core.engine import ResolutionEngine
from localintel.jobs.payloads import competitors_payload, profile_payload, seo_payload
from localintel.models import CompetitorFilters, Coordinates, SignalSet

logger = logging.getLogger(__name__)


def _filters(args: argparse.Namespace) -> Optional[CompetitorFilters]:
    values = (args.min_rating, args.max_distance, args.price, args.sort_by, args.filter_category)
    if all(value is None for value in values) and not args.ascending:
        return None
    return CompetitorFilters(
        min_rating=args.min_rating,
        max_distance_km=args.max_distance,
        price_level=args.price,
        category=args.filter_category,
        sort_by=args.sort_by or ("rating" if args.ascending else None),
        descending=not args.ascending,
    )


def run(args: argparse.Namespace, engine: ResolutionEngine) -> Dict[str, Any]:
    if args.command == "business":
        return profile_payload(engine.resolve_business(args.identifier))

    if args.command == "competitors":
        if not (args.name or args.query or args.location or args.category):
            raise ValueError("One of --name, --query, --location or --category is required")
        coordinates = None
        if args.lat is not None and args.lng is not None:
            coordinates = Coordinates(lat=args.lat, lng=args.lng)
        seed = SignalSet(name=args.name, locality_hint=args.location, category=args.category, coordinates=coordinates)
        competitors = engine.resolve_competitors(seed, filters=_filters(args), query=args.query, limit=args.limit)
        return {"competitors": competitors_payload(competitors)}

    return seo_payload(engine.resolve_seo_metrics(args.domain, seed_name=args.name))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Resolve local business data")
    commands = parser.add_subparsers(dest="command", required=True)

    business = commands.add_parser("business", help="Resolve a business profile from a map URL or name")
    business.add_argument("identifier", help="Map URL, place id or free-text business name")

    competitors = commands.add_parser("competitors", help="Find competitors of a business")
    competitors.add_argument("--name", help="Seed business name")
    competitors.add_argument("--query", help="Free-text search query")
    competitors.add_argument("--location", help="Locality of the seed business")
    competitors.add_argument("--category", help="Category of the seed business")
    competitors.add_argument("--lat", type=float, help="Seed latitude")
    competitors.add_argument("--lng", type=float, help="Seed longitude")
    competitors.add_argument("--min-rating", dest="min_rating", type=float, help="Minimum rating")
    competitors.add_argument("--max-distance", dest="max_distance", type=float, help="Maximum distance in km")
    competitors.add_argument("--price", help="Price level, e.g. $$ or 2")
    competitors.add_argument("--filter-category", dest="filter_category", help="Only keep competitors in this category")
    competitors.add_argument("--sort-by", dest="sort_by", choices=("rating", "reviews"), help="Sort field")
    competitors.add_argument("--ascending", action="store_true", help="Sort ascending instead of descending")
    competitors.add_argument("--limit", type=int, help="Maximum number of competitors")

    seo = commands.add_parser("seo", help="Estimate SEO metrics for a website")
    seo.add_argument("domain", help="Website or domain")
    seo.add_argument("--name", help="Business name, for logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args(argv)

    engine = ResolutionEngine()
    try:
        payload = run(args, engine)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    json.dump(payload, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
