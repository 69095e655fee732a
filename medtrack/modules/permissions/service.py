from typing import List, Tuple

import structlog
from beanie.operators import In
from pymongo.errors import DuplicateKeyError

from medtrack.modules.patients.models import PatientProfile
from medtrack.modules.permissions.models import Permission
from medtrack.modules.permissions.schemas import PermissionUpdate
from medtrack.modules.users.models import User
from medtrack.shared.constants import PermissionLevel, PermissionStatus
from medtrack.shared.documents import get_document, to_object_id

log = structlog.get_logger()


class PermissionService:
    async def get_owned_profile(
        self, patient_profile_id: str, user: User
    ) -> PatientProfile:
        """Return the profile if ``user`` owns it; raise PermissionError otherwise."""
        profile = await get_document(PatientProfile, patient_profile_id)
        if not profile or profile.user_id != str(user.id):
            raise PermissionError("NO_ACCESS")
        return profile

    async def list_for_patient(
        self, patient_profile_id: str, user: User
    ) -> List[Tuple[Permission, User | None]]:
        await self.get_owned_profile(patient_profile_id, user)
        permissions = await Permission.find(
            Permission.patient_profile_id == patient_profile_id
        ).to_list()
        if not permissions:
            return []

        caregiver_ids = [
            oid
            for oid in (to_object_id(p.caregiver_id) for p in permissions)
            if oid is not None
        ]
        caregivers = await User.find(In(User.id, caregiver_ids)).to_list()
        by_id = {str(c.id): c for c in caregivers}
        return [(p, by_id.get(p.caregiver_id)) for p in permissions]

    async def update(
        self, permission_id: str, payload: PermissionUpdate, user: User
    ) -> Permission:
        permission = await get_document(Permission, permission_id)
        if not permission:
            raise PermissionError("NO_ACCESS")
        await self.get_owned_profile(permission.patient_profile_id, user)

        if payload.level is not None:
            permission.level = payload.level
        if payload.status is not None:
            permission.status = payload.status
        await permission.save()
        log.info(
            "permissions.updated",
            permission_id=str(permission.id),
            level=permission.level.value,
            status=permission.status.value,
        )
        return permission

    async def request_access(
        self, patient_profile_id: str, caregiver_id: str
    ) -> Permission:
        """Upsert a PENDING grant; one row per patient/caregiver pair."""
        existing = await self._find_pair(patient_profile_id, caregiver_id)
        if existing is None:
            permission = Permission(
                patient_profile_id=patient_profile_id,
                caregiver_id=caregiver_id,
                status=PermissionStatus.PENDING,
                level=PermissionLevel.READ,
            )
            try:
                await permission.insert()
                return permission
            except DuplicateKeyError:
                # A concurrent join inserted the pair first; reset that row instead.
                existing = await self._find_pair(patient_profile_id, caregiver_id)
                if existing is None:
                    raise

        existing.status = PermissionStatus.PENDING
        await existing.save()
        return existing

    async def _find_pair(
        self, patient_profile_id: str, caregiver_id: str
    ) -> Permission | None:
        return await Permission.find_one(
            Permission.patient_profile_id == patient_profile_id,
            Permission.caregiver_id == caregiver_id,
        )

    async def list_accepted_profile_ids(self, caregiver: User) -> List[str]:
        permissions = await Permission.find(
            Permission.caregiver_id == str(caregiver.id),
            Permission.status == PermissionStatus.ACCEPTED,
        ).to_list()
        return list(dict.fromkeys(p.patient_profile_id for p in permissions))
