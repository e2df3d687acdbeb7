#   __          __ _    _  ______  ______  _       __  __            _______  ______
#   \ \        / /| |  | ||  ____||  ____|| |     |  \/  |    /\    |__   __||  ____|
#    \ \  /\  / / | |__| || |__   | |__   | |     | \  / |   /  \      | |   | |__
#     \ \/  \/ /  |  __  ||  __|  |  __|  | |     | |\/| |  / /\ \     | |   |  __|
#      \  /\  /   | |  | || |____ | |____ | |____ | |  | | / ____ \    | |   | |____
#       \/  \/    |_|  |_||______||______||______||_|  |_|/_/    \_\   |_|   |______|
#

# Facilities API router - Feed, registration, ratings and ranked views.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# observer_from_query: Builds the optional observer location from lat/lng params.
# list_facilities: Endpoint for the public feed, newest first.
# create_facility: Endpoint to register a facility (auth required).
# explore_facilities: Endpoint for the filtered, sorted, distance-annotated view.
# nearby_facilities: Endpoint for the home screen shortlist.
# nearest_facility: Endpoint for the emergency nearest-of-type lookup.
# get_facility: Endpoint to fetch one facility.
# submit_feedback: Endpoint to rate a facility (auth required).

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# logger: Logger instance.
# router: FastAPI APIRouter instance.
# facility_service: Facility store service.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# fastapi: Framework components.
# typing: Type hints.
# logging: Logging.
# wheelmate.constants: Ranking defaults and coordinate limits.
# wheelmate.dependencies: Session dependency.
# wheelmate.errors: ValidationError for partial locations.
# wheelmate.models: Facility models and session.
# wheelmate.services: Facility store and ranking pipeline.

from fastapi import APIRouter, Depends, Path, Query, status
from typing import List, Optional
import logging

from wheelmate.constants import (
    CATEGORY_ALL,
    LATITUDE_LIMIT,
    LONGITUDE_LIMIT,
    NEARBY_LIMIT,
    NEARBY_RADIUS_KM,
    SORT_DISTANCE,
)
from wheelmate.dependencies import get_current_session
from wheelmate.errors import ValidationError
from wheelmate.models.facility import (
    Facility,
    FacilityCreate,
    FacilityType,
    FacilityView,
    GeoPoint,
    RatingSubmit,
    check_coordinate,
)
from wheelmate.models.user import SessionContext
from wheelmate.services import ranking
from wheelmate.services.facility_service import FacilityService


logger = logging.getLogger(__name__)
router = APIRouter()
facility_service = FacilityService()


def observer_from_query(lat: Optional[float], lng: Optional[float]) -> Optional[GeoPoint]:
    """No coordinates means location unavailable; exactly one is a client bug."""
    if lat is None and lng is None:
        return None
    if lat is None or lng is None:
        raise ValidationError("lat and lng must be supplied together.")
    return GeoPoint(
        lat=check_coordinate("lat", lat, LATITUDE_LIMIT),
        lng=check_coordinate("lng", lng, LONGITUDE_LIMIT),
    )


@router.get("", response_model=List[Facility])
async def list_facilities():
    return await facility_service.list_facilities()


@router.post("", response_model=Facility, status_code=status.HTTP_201_CREATED)
async def create_facility(
    data: FacilityCreate,
    session: SessionContext = Depends(get_current_session),
):
    """Register a facility. It starts accessible, unrated, and owned by the caller."""
    return await facility_service.create_facility(data, owner_id=session.user_id)


@router.get("/explore", response_model=List[FacilityView])
async def explore_facilities(
    q: Optional[str] = Query(None, max_length=200, description="Case-insensitive name/address search"),
    category: str = Query(CATEGORY_ALL, description="Facility type or 'all'"),
    sort: str = Query(SORT_DISTANCE, description="distance, rating or name"),
    lat: Optional[float] = Query(None),
    lng: Optional[float] = Query(None),
):
    observer = observer_from_query(lat, lng)
    facilities = await facility_service.list_facilities()
    return ranking.rank_facilities(
        facilities,
        observer=observer,
        search_term=q,
        category=category,
        sort_key=sort,
    )


@router.get("/nearby", response_model=List[FacilityView])
async def nearby_facilities(
    lat: Optional[float] = Query(None),
    lng: Optional[float] = Query(None),
    radius_km: float = Query(NEARBY_RADIUS_KM, gt=0, le=20100),
    limit: int = Query(NEARBY_LIMIT, ge=1, le=50),
):
    observer = observer_from_query(lat, lng)
    facilities = await facility_service.list_facilities()
    return ranking.find_nearby(facilities, observer, radius_km=radius_km, limit=limit)


@router.get("/nearest", response_model=FacilityView)
async def nearest_facility(
    facility_type: FacilityType = Query(..., alias="type"),
    lat: Optional[float] = Query(None),
    lng: Optional[float] = Query(None),
):
    """Closest facility of a type, e.g. the nearest hospital in an emergency"""
    observer = observer_from_query(lat, lng)
    facilities = await facility_service.list_facilities()
    return ranking.find_nearest_of_type(facilities, facility_type.value, observer)


@router.get("/{facility_id}", response_model=Facility)
async def get_facility(facility_id: str = Path(..., min_length=1, max_length=64)):
    return await facility_service.get_facility(facility_id)


@router.post("/{facility_id}/feedback", response_model=Facility)
async def submit_feedback(
    data: RatingSubmit,
    facility_id: str = Path(..., min_length=1, max_length=64),
    session: SessionContext = Depends(get_current_session),
):
    """Rate a facility 1-5. Feedback text is accepted but not stored."""
    logger.debug(f"User {session.user_id} rating {facility_id}")
    return await facility_service.submit_rating(facility_id, data.rating, data.feedback)
