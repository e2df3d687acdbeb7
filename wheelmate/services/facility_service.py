"""
Facility Service

Owns the facility collection: registration, the public feed, lookups, and
rating aggregation.
"""

import logging
import uuid
from typing import List, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from wheelmate.config import get_settings
from wheelmate.database import get_db
from wheelmate.errors import ConflictError, InternalError, NotFoundError, ValidationError
from wheelmate.models.facility import Facility, FacilityCreate, check_rating
from wheelmate.utils.timezone_utils import utc_now

logger = logging.getLogger(__name__)


def average_rating(values: List[int]) -> float:
    """Arithmetic mean, 0 for no ratings."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def parse_facility_input(data: Union[FacilityCreate, dict]) -> FacilityCreate:
    """Validate raw input, surfacing the first field problem as ValidationError."""
    if isinstance(data, FacilityCreate):
        return data
    if not isinstance(data, dict):
        raise ValidationError("Facility data must be an object.")
    try:
        return FacilityCreate.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        cause = (first.get("ctx") or {}).get("error")
        if isinstance(cause, ValidationError):
            raise cause
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(f"{field}: {first.get('msg')}" if field else first.get("msg"))


class FacilityService:
    """Service for registering, listing and rating facilities."""

    def __init__(self, max_retries: Optional[int] = None):
        self._max_retries = max_retries

    @property
    def max_retries(self) -> int:
        if self._max_retries is not None:
            return self._max_retries
        return get_settings().rating_update_max_retries

    async def create_facility(
        self, data: Union[FacilityCreate, dict], owner_id: str
    ) -> Facility:
        """
        Register a new facility owned by `owner_id`.

        Validation runs before the database is touched.
        """
        facility_data = parse_facility_input(data)
        if not owner_id:
            raise ValidationError("owner_id is required.")

        now = utc_now()
        doc = {
            "facility_id": str(uuid.uuid4()),
            "name": facility_data.name,
            "type": facility_data.type.value,
            "location": {"lat": facility_data.lat, "lng": facility_data.lng},
            "address": facility_data.address,
            "notes": facility_data.notes or "",
            "accessible": True,
            "rating_values": [],
            "average_rating": 0.0,
            "owner_id": owner_id,
            "revision": 0,
            "created_at": now,
            "updated_at": now,
        }

        db = get_db()
        try:
            await db.facilities.insert_one(doc)
        except PyMongoError as e:
            logger.error(f"Error adding facility: {e}")
            raise InternalError("Could not add facility.")

        logger.info(f"Facility created: {doc['facility_id']} ({facility_data.name}) by {owner_id}")
        return Facility.from_document(doc)

    async def list_facilities(self) -> List[Facility]:
        """All facilities, newest first."""
        db = get_db()
        facilities = []
        try:
            cursor = db.facilities.find({}, {"_id": 0}).sort("created_at", -1)
            async for doc in cursor:
                facilities.append(Facility.from_document(doc))
        except PyMongoError as e:
            logger.error(f"Error fetching facilities: {e}")
            raise InternalError("Could not fetch facilities.")
        return facilities

    async def get_facility(self, facility_id: str) -> Facility:
        db = get_db()
        try:
            doc = await db.facilities.find_one({"facility_id": facility_id}, {"_id": 0})
        except PyMongoError as e:
            logger.error(f"Error fetching facility {facility_id}: {e}")
            raise InternalError("Could not fetch facility.")
        if not doc:
            raise NotFoundError("Facility not found.")
        return Facility.from_document(doc)

    async def submit_rating(
        self,
        facility_id: str,
        rating: int,
        feedback: Optional[str] = None,
    ) -> Facility:
        """
        Append a 1-5 rating and recompute the average.

        Uses optimistic concurrency on the `revision` field: the update only
        applies if nobody rated the facility since it was read. Losing writers
        re-read and retry up to `max_retries` attempts before ConflictError.
        """
        rating = check_rating(rating)
        if feedback:
            logger.debug(f"Feedback for {facility_id} received ({len(feedback)} chars), not stored")

        db = get_db()
        attempts = max(1, self.max_retries)

        for attempt in range(attempts):
            try:
                doc = await db.facilities.find_one({"facility_id": facility_id}, {"_id": 0})
                if not doc:
                    raise NotFoundError("Facility not found.")

                # Documents written outside this service may lack the counter;
                # {"revision": 0} would never match them
                if "revision" in doc:
                    revision_filter = doc["revision"]
                else:
                    revision_filter = {"$exists": False}
                values = list(doc.get("rating_values", [])) + [rating]

                updated = await db.facilities.find_one_and_update(
                    {"facility_id": facility_id, "revision": revision_filter},
                    {
                        "$push": {"rating_values": rating},
                        "$set": {
                            "average_rating": average_rating(values),
                            "updated_at": utc_now(),
                        },
                        "$inc": {"revision": 1},
                    },
                    projection={"_id": 0},
                    return_document=ReturnDocument.AFTER,
                )
            except PyMongoError as e:
                logger.error(f"Error adding feedback to {facility_id}: {e}")
                raise InternalError("Could not add feedback.")

            if updated:
                if attempt > 0:
                    logger.info(f"Rating for {facility_id} applied on attempt {attempt + 1}")
                logger.info(f"Rating {rating} accepted for {facility_id} ({len(values)} total)")
                return Facility.from_document(updated)

            logger.warning(
                f"Rating conflict on {facility_id}, attempt {attempt + 1}/{attempts}"
            )

        logger.error(f"Rating for {facility_id} failed after {attempts} attempts")
        raise ConflictError("Facility is being rated by others right now. Please try again.")
