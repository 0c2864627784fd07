"""Profile of the calling user.  Registration and credentials live upstream."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Optional

from ridesapp.domain.enums import UserRole
from ridesapp.domain.errors import NotFound
from ridesapp.infrastructure.models import UserModel
from ridesapp.infrastructure.repositories import UserRepository
from ridesapp.services.base import TransactionalService

logger = logging.getLogger(__name__)

DRIVER_FIELDS = ("license_number", "vehicle_model", "vehicle_color", "vehicle_plate")


@dataclass
class ProfileChanges:
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    profile_picture: Optional[str] = None
    license_number: Optional[str] = None
    vehicle_model: Optional[str] = None
    vehicle_color: Optional[str] = None
    vehicle_plate: Optional[str] = None


class UserProfileService(TransactionalService):
    async def get_profile(self, user_id: int) -> UserModel:
        async with self.transaction() as session:
            user = await UserRepository(session).get_by_id(user_id)
        if user is None:
            raise NotFound("User", user_id)
        return user

    async def update_profile(self, user_id: int, changes: ProfileChanges) -> UserModel:
        """Apply the non-empty fields of *changes*.

        Vehicle and licence fields are only taken for drivers; for riders
        they are dropped.
        """
        async with self.transaction() as session:
            repo = UserRepository(session)
            user = await repo.get_by_id(user_id)
            if user is None:
                raise NotFound("User", user_id)

            fields = {name: value for name, value in asdict(changes).items() if value}
            if user.role != UserRole.DRIVER:
                for name in DRIVER_FIELDS:
                    fields.pop(name, None)
            await repo.update(user, **fields)

        logger.info("User %d updated profile fields: %s", user_id, ", ".join(sorted(fields)) or "none")
        return user
