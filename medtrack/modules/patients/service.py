from typing import Iterable, List

import structlog
from beanie.operators import In

from medtrack.modules.patients.models import PatientProfile
from medtrack.modules.patients.schemas import PatientProfileUpdate
from medtrack.modules.users.models import User
from medtrack.shared.documents import to_object_id

log = structlog.get_logger()


class PatientProfileService:
    async def get_for_user(self, user: User) -> PatientProfile | None:
        return await PatientProfile.find_one(PatientProfile.user_id == str(user.id))

    async def create_empty(self, user: User) -> PatientProfile:
        profile = PatientProfile(user_id=str(user.id), name=user.name)
        await profile.insert()
        log.info("patients.profile_created", user_id=str(user.id))
        return profile

    async def upsert_for_user(
        self, user: User, payload: PatientProfileUpdate
    ) -> PatientProfile:
        data = payload.model_dump()
        if data["photo_url"] is not None:
            data["photo_url"] = str(data["photo_url"])

        profile = await self.get_for_user(user)
        if profile is None:
            profile = PatientProfile(user_id=str(user.id), **data)
            await profile.insert()
            log.info("patients.profile_created", user_id=str(user.id))
            return profile

        for field, value in data.items():
            setattr(profile, field, value)
        await profile.save()
        log.info("patients.profile_updated", user_id=str(user.id))
        return profile

    async def list_by_ids(self, profile_ids: Iterable[str]) -> List[PatientProfile]:
        object_ids = [oid for oid in map(to_object_id, profile_ids) if oid is not None]
        if not object_ids:
            return []
        return await PatientProfile.find(In(PatientProfile.id, object_ids)).to_list()
