from beanie import init_beanie
from pymongo import AsyncMongoClient

from medtrack.core.config import settings
from medtrack.modules.appointments.models import Appointment
from medtrack.modules.caregivers.models import CaregiverProfile, InviteCode
from medtrack.modules.intake_events.models import IntakeEvent
from medtrack.modules.medications.models import Medication, MedicationSchedule
from medtrack.modules.notifications.models import Notification
from medtrack.modules.patients.models import PatientProfile
from medtrack.modules.permissions.models import Permission
from medtrack.modules.subscriptions.models import PushSubscription
from medtrack.modules.treatments.models import (
    Treatment,
    TreatmentMedication,
    TreatmentReminder,
)
from medtrack.modules.users.models import User

DOCUMENT_MODELS = [
    User,
    PatientProfile,
    CaregiverProfile,
    InviteCode,
    Permission,
    Medication,
    MedicationSchedule,
    Treatment,
    TreatmentReminder,
    TreatmentMedication,
    Appointment,
    IntakeEvent,
    Notification,
    PushSubscription,
]


async def init_db() -> AsyncMongoClient:
    """
    Create a single Mongo client, initialize Beanie, and return the client.

    This should be called exactly once at app startup.
    """
    client: AsyncMongoClient = AsyncMongoClient(
        settings.MONGODB_URL,
        uuidRepresentation="standard",
        serverSelectionTimeoutMS=5000,
    )

    await init_beanie(
        database=client[settings.MONGODB_DB_NAME],
        document_models=DOCUMENT_MODELS,
    )

    return client
