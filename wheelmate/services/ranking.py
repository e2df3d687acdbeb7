"""
Ranking Pipeline

Pure functions that turn the facility feed into a presentation-ready list:
distance annotation, category/search filtering, sorting, and nearest lookups.
Nothing here touches the database or mutates its inputs.
"""

import math
import unicodedata
from typing import Iterable, List, Optional, Sequence

from wheelmate.constants import (
    CATEGORY_ALL,
    EARTH_RADIUS_KM,
    NEARBY_LIMIT,
    NEARBY_RADIUS_KM,
    SORT_DISTANCE,
    SORT_NAME,
    SORT_RATING,
)
from wheelmate.errors import LocationUnavailableError, NoFacilityFoundError
from wheelmate.models.facility import Facility, FacilityView, GeoPoint


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in km between two points given in degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Float drift can push a fraction past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def annotate_distance(
    facilities: Iterable[Facility],
    observer: Optional[GeoPoint],
) -> List[FacilityView]:
    """
    Attach distance (km) from the observer to every facility.

    Without an observer every distance is None, meaning unknown.
    """
    views = []
    for facility in facilities:
        distance = None
        if observer is not None:
            distance = haversine_km(
                observer.lat, observer.lng,
                facility.location.lat, facility.location.lng,
            )
        views.append(FacilityView.from_facility(facility, distance))
    return views


def filter_facilities(
    facilities: Sequence[Facility],
    search_term: Optional[str] = None,
    category: Optional[str] = CATEGORY_ALL,
) -> list:
    """Keep facilities matching the category and search term, in input order."""
    result = list(facilities)

    if category and category != CATEGORY_ALL:
        result = [f for f in result if f.type.value == category]

    if search_term:
        needle = search_term.lower()
        result = [
            f for f in result
            if needle in f.name.lower() or needle in f.address.lower()
        ]

    return result


def _name_key(name: str) -> tuple:
    # Accent and case insensitive first, raw name breaks ties
    decomposed = unicodedata.normalize("NFKD", name)
    folded = "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()
    return (folded, name)


def sort_facilities(facilities: Sequence[FacilityView], sort_key: Optional[str]) -> list:
    """
    Order facilities for display.

    - distance: ascending; unknown distances keep their input order after the known ones
    - rating: descending average rating, missing treated as 0
    - name: ascending, accent/case insensitive
    - anything else: input order unchanged

    Python's sort is stable, so equal elements keep their relative order and
    re-sorting a sorted list is a no-op.
    """
    items = list(facilities)

    if sort_key == SORT_DISTANCE:
        return sorted(
            items,
            key=lambda f: (
                getattr(f, "distance", None) is None,
                getattr(f, "distance", None) or 0.0,
            ),
        )
    if sort_key == SORT_RATING:
        return sorted(items, key=lambda f: -(f.average_rating or 0.0))
    if sort_key == SORT_NAME:
        return sorted(items, key=lambda f: _name_key(f.name))

    return items


def rank_facilities(
    facilities: Iterable[Facility],
    observer: Optional[GeoPoint] = None,
    search_term: Optional[str] = None,
    category: Optional[str] = CATEGORY_ALL,
    sort_key: Optional[str] = SORT_DISTANCE,
) -> List[FacilityView]:
    """Annotate, filter, then sort - the explore view in one call."""
    views = annotate_distance(facilities, observer)
    views = filter_facilities(views, search_term, category)
    return sort_facilities(views, sort_key)


def find_nearest_of_type(
    facilities: Iterable[Facility],
    facility_type: str,
    observer: Optional[GeoPoint],
) -> FacilityView:
    """
    Closest facility of the given type.

    Raises:
        LocationUnavailableError: No observer location.
        NoFacilityFoundError: Nothing of that type exists.
    """
    if observer is None:
        raise LocationUnavailableError()

    candidates = filter_facilities(list(facilities), category=facility_type)
    if not candidates:
        raise NoFacilityFoundError(facility_type)

    views = annotate_distance(candidates, observer)
    # min() keeps the first of equal distances
    return min(views, key=lambda v: v.distance)


def find_nearby(
    facilities: Iterable[Facility],
    observer: Optional[GeoPoint],
    radius_km: float = NEARBY_RADIUS_KM,
    limit: int = NEARBY_LIMIT,
) -> List[FacilityView]:
    """First `limit` facilities (feed order) strictly within `radius_km`."""
    if observer is None:
        return []

    nearby = [
        v for v in annotate_distance(facilities, observer)
        if v.distance is not None and v.distance < radius_km
    ]
    return nearby[:limit]
