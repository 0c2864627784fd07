"""Post-ride ratings.  Ratings are append-only: never edited, never deleted."""

from __future__ import annotations

import logging
from typing import Optional

from ridesapp.domain.entities import validate_score
from ridesapp.domain.errors import NotFound
from ridesapp.infrastructure.models import RatingModel
from ridesapp.infrastructure.repositories import RatingRepository, RideRepository
from ridesapp.services.base import TransactionalService

logger = logging.getLogger(__name__)


class RatingCollector(TransactionalService):
    async def add_rating(
        self,
        ride_id: int,
        from_user_id: int,
        score: int,
        comment: Optional[str] = None,
    ) -> RatingModel:
        """Record *from_user_id*'s rating of the ride's rider.

        Repeat ratings by the same user are stored as separate rows.
        """
        validate_score(score)

        async with self.transaction() as session:
            ride = await RideRepository(session).get_by_id(ride_id)
            if ride is None:
                raise NotFound("Ride", ride_id)
            rating = await RatingRepository(session).create(
                RatingModel(
                    ride_id=ride_id,
                    from_user_id=from_user_id,
                    to_user_id=ride.rider_id,
                    score=score,
                    comment=comment or None,
                )
            )

        logger.info(
            "User %d rated ride %d: %d/5", from_user_id, ride_id, score
        )
        return rating

    async def get_ratings_by_ride(self, ride_id: int) -> list[RatingModel]:
        async with self.transaction() as session:
            return await RatingRepository(session).list_by_ride(ride_id)
