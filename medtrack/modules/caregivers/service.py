import secrets
from datetime import datetime, timedelta, timezone
from typing import List

import structlog

from medtrack.core.config import settings
from medtrack.modules.caregivers.models import CaregiverProfile, InviteCode
from medtrack.modules.caregivers.schemas import CaregiverProfileUpdate
from medtrack.modules.patients.models import PatientProfile
from medtrack.modules.patients.service import PatientProfileService
from medtrack.modules.permissions.models import Permission
from medtrack.modules.permissions.service import PermissionService
from medtrack.modules.users.models import User

log = structlog.get_logger()

# Ambiguous glyphs (0/O, 1/I) are left out so codes survive being read aloud.
INVITE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITE_CODE_LENGTH = 8


def generate_invite_code(length: int = INVITE_CODE_LENGTH) -> str:
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


class CaregiverService:
    def __init__(self) -> None:
        self.patient_service = PatientProfileService()
        self.permission_service = PermissionService()

    async def create_invite(self, patient: User) -> InviteCode:
        profile = await self.patient_service.get_for_user(patient)
        if not profile:
            raise LookupError("NO_PROFILE")

        invite = InviteCode(
            patient_profile_id=str(profile.id),
            code=generate_invite_code(),
            expires_at=datetime.now(timezone.utc)
            + timedelta(hours=settings.INVITE_CODE_TTL_HOURS),
        )
        await invite.insert()
        log.info("caregivers.invite_created", patient_profile_id=str(profile.id))
        return invite

    async def redeem_invite(self, code: str, caregiver: User) -> Permission:
        invite = await InviteCode.find_one(InviteCode.code == code)
        if not invite or not invite.is_redeemable(datetime.now(timezone.utc)):
            log.warning("caregivers.invite_rejected", caregiver_id=str(caregiver.id))
            raise ValueError("INVALID_CODE")

        permission = await self.permission_service.request_access(
            invite.patient_profile_id, str(caregiver.id)
        )
        invite.used = True
        await invite.save()
        log.info(
            "caregivers.invite_redeemed",
            caregiver_id=str(caregiver.id),
            patient_profile_id=invite.patient_profile_id,
        )
        return permission

    async def list_patients(self, caregiver: User) -> List[PatientProfile]:
        profile_ids = await self.permission_service.list_accepted_profile_ids(caregiver)
        return await self.patient_service.list_by_ids(profile_ids)

    async def get_profile(self, caregiver: User) -> CaregiverProfile | None:
        return await CaregiverProfile.find_one(
            CaregiverProfile.user_id == str(caregiver.id)
        )

    async def upsert_profile(
        self, caregiver: User, payload: CaregiverProfileUpdate
    ) -> CaregiverProfile:
        data = payload.model_dump(exclude={"name"})
        if data["photo_url"] is not None:
            data["photo_url"] = str(data["photo_url"])

        if "name" in payload.model_fields_set:
            caregiver.name = payload.name
            await caregiver.save()

        profile = await self.get_profile(caregiver)
        if profile is None:
            profile = CaregiverProfile(user_id=str(caregiver.id), **data)
            await profile.insert()
        else:
            for field, value in data.items():
                setattr(profile, field, value)
            await profile.save()
        log.info("caregivers.profile_saved", user_id=str(caregiver.id))
        return profile
