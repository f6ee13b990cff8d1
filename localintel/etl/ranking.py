"""Post-processing for resolved competitor lists: dedupe, filter, sort, truncate."""

import logging
import re
from typing import Iterable, List, Optional, Union

from localintel.etl.categories import canonical_category
from localintel.models import Competitor, CompetitorFilters

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 3
ADVANCED_LIMIT = 8
SORT_FIELDS = {"rating": "rating", "reviews": "review_count", "review_count": "review_count"}

_DISTANCE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(?:km)?\s*$", re.IGNORECASE)


def normalize_name(name: Optional[str]) -> str:
    return re.sub(r"\s+", " ", (name or "").strip().lower())


def parse_distance_km(value: Union[str, float, int, None]) -> Optional[float]:
    """Parse ``"1.2 km"`` style labels (or plain numbers) into kilometres."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _DISTANCE.match(str(value))
    if not match:
        return None
    return float(match.group(1))


def parse_price_level(value: Union[str, int, None]) -> Optional[int]:
    """``"$$"`` -> 2, ``"3"`` -> 3, ``2`` -> 2."""
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text and set(text) == {"$"}:
        return len(text)
    try:
        return int(text)
    except ValueError:
        return None


def dedupe(competitors: Iterable[Competitor]) -> List[Competitor]:
    """Keep the first competitor for each case-normalised name."""
    seen = set()
    unique: List[Competitor] = []
    for competitor in competitors:
        key = normalize_name(competitor.name)
        if not key or key in seen:
            continue
        seen.add(key)
        unique.append(competitor)
    return unique


def _competitor_distance(competitor: Competitor) -> Optional[float]:
    return competitor.distance_km


def apply_filters(competitors: Iterable[Competitor], filters: Optional[CompetitorFilters]) -> List[Competitor]:
    filtered = list(competitors)
    if filters is None:
        return filtered

    if filters.min_rating:
        filtered = [c for c in filtered if (c.rating or 0) >= filters.min_rating]

    max_distance = parse_distance_km(filters.max_distance_km)
    if max_distance:
        # Entries without distance information are kept.
        filtered = [
            c for c in filtered if _competitor_distance(c) is None or _competitor_distance(c) <= max_distance
        ]

    price_level = parse_price_level(filters.price_level)
    if price_level is not None:
        filtered = [c for c in filtered if c.price_level is None or c.price_level == price_level]

    if filters.category:
        wanted = canonical_category(filters.category)
        filtered = [c for c in filtered if canonical_category(c.category, c.name) == wanted]

    return filtered


def sort_competitors(competitors: Iterable[Competitor], sort_by: str = "rating", descending: bool = True) -> List[Competitor]:
    """Sort by rating or review count; missing values always sort last."""
    attribute = SORT_FIELDS.get(sort_by)
    if attribute is None:
        raise ValueError(f"Unsupported sort field: {sort_by}")

    items = list(competitors)
    present = [c for c in items if getattr(c, attribute) is not None]
    missing = [c for c in items if getattr(c, attribute) is None]
    present.sort(key=lambda c: getattr(c, attribute), reverse=descending)
    return present + missing


def finalize(
    competitors: Iterable[Competitor],
    filters: Optional[CompetitorFilters] = None,
    limit: Optional[int] = None,
    exclude_names: Iterable[str] = (),
) -> List[Competitor]:
    excluded = {normalize_name(name) for name in exclude_names if name}
    result = [c for c in dedupe(competitors) if normalize_name(c.name) not in excluded]
    result = apply_filters(result, filters)
    if filters is not None and filters.sort_by:
        result = sort_competitors(result, filters.sort_by, filters.descending)

    if limit is None:
        limit = filters.limit if filters is not None and filters.limit else None
    if limit is None:
        limit = ADVANCED_LIMIT if filters is not None else DEFAULT_LIMIT
    logger.debug("Finalized %d competitors (limit=%d)", min(len(result), limit), limit)
    return result[:limit]
