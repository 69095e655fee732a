"""Patient-scoped authorization decisions."""

from typing import Any

import structlog

from medtrack.modules.patients.models import PatientProfile
from medtrack.modules.permissions.models import Permission
from medtrack.shared.constants import PermissionLevel, PermissionStatus, Role
from medtrack.shared.documents import get_document

log = structlog.get_logger()


async def can_access_patient(
    patient_profile_id: str,
    user: Any,
    level: PermissionLevel = PermissionLevel.READ,
) -> bool:
    """
    Decide whether ``user`` may act on a patient profile at ``level``.

    Patients reach only their own profile, at every level. Caregivers need an
    ACCEPTED permission whose level grants ``level``. Any other role is denied.
    A missing profile or permission is a ``False`` result, never an error;
    data-store failures propagate to the caller.
    """
    user_id = str(user.id)

    if user.role == Role.PATIENT:
        profile = await get_document(PatientProfile, patient_profile_id)
        allowed = profile is not None and profile.user_id == user_id
    elif user.role == Role.CAREGIVER:
        permission = await Permission.find_one(
            Permission.patient_profile_id == str(patient_profile_id),
            Permission.caregiver_id == user_id,
        )
        allowed = (
            permission is not None
            and permission.status == PermissionStatus.ACCEPTED
            and permission.level.grants(level)
        )
    else:
        allowed = False

    log.debug(
        "access.evaluated",
        patient_profile_id=str(patient_profile_id),
        user_id=user_id,
        role=str(user.role),
        level=level.value,
        allowed=allowed,
    )
    return allowed
