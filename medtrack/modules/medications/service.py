import re
from typing import List, Tuple

import structlog
from beanie.operators import Or, RegEx

from medtrack.modules.medications.models import Medication, MedicationSchedule
from medtrack.modules.medications.schemas import (
    MedicationCreate,
    MedicationListQuery,
    MedicationSort,
    MedicationUpdate,
    ScheduleUpdate,
)
from medtrack.shared.documents import get_document
from medtrack.shared.pagination import PageParams, sort_spec

log = structlog.get_logger()

_SORT_FIELDS = {
    MedicationSort.CREATED_AT: "created_at",
    MedicationSort.START_DATE: "start_date",
    MedicationSort.NAME: "name",
}


class MedicationService:
    async def list(
        self, params: MedicationListQuery, page: PageParams
    ) -> Tuple[int, List[Medication]]:
        query = Medication.find(Medication.patient_profile_id == params.patient_profile_id)
        if params.search:
            pattern = re.escape(params.search)
            query = query.find(
                Or(
                    RegEx(Medication.name, pattern, "i"),
                    RegEx(Medication.notes, pattern, "i"),
                )
            )
        if params.start:
            query = query.find(Medication.start_date >= params.start)
        if params.end:
            query = query.find(Medication.start_date <= params.end)

        total = await query.count()
        items = (
            await query.sort(sort_spec(_SORT_FIELDS[params.sort], params.order))
            .skip(page.skip)
            .limit(page.take)
            .to_list()
        )
        return total, items

    async def get_for_patient(
        self, medication_id: str, patient_profile_id: str
    ) -> Medication:
        medication = await get_document(Medication, medication_id)
        if not medication or medication.patient_profile_id != patient_profile_id:
            raise LookupError("MEDICATION_NOT_FOUND")
        return medication

    async def get_schedule(self, medication: Medication) -> MedicationSchedule | None:
        return await MedicationSchedule.find_one(
            MedicationSchedule.medication_id == str(medication.id)
        )

    async def create(
        self, payload: MedicationCreate
    ) -> Tuple[Medication, MedicationSchedule | None]:
        medication = Medication(
            **payload.model_dump(exclude={"schedule"}),
        )
        await medication.insert()

        schedule = None
        if payload.schedule:
            schedule = MedicationSchedule(
                patient_profile_id=payload.patient_profile_id,
                medication_id=str(medication.id),
                **payload.schedule.model_dump(),
            )
            await schedule.insert()

        log.info(
            "medications.created",
            medication_id=str(medication.id),
            patient_profile_id=payload.patient_profile_id,
            with_schedule=schedule is not None,
        )
        return medication, schedule

    async def update(
        self, medication_id: str, payload: MedicationUpdate
    ) -> Tuple[Medication, MedicationSchedule | None]:
        medication = await self.get_for_patient(medication_id, payload.patient_profile_id)

        changes = payload.model_dump(
            exclude_unset=True, exclude={"patient_profile_id", "schedule"}
        )
        for field, value in changes.items():
            # start_date, name and frequency are required on the document.
            if value is None and field in {"start_date", "name", "frequency"}:
                continue
            setattr(medication, field, value)
        await medication.save()

        schedule = await self.get_schedule(medication)
        if payload.schedule is not None:
            schedule = await self._apply_schedule(medication, schedule, payload.schedule)

        log.info("medications.updated", medication_id=str(medication.id))
        return medication, schedule

    async def _apply_schedule(
        self,
        medication: Medication,
        schedule: MedicationSchedule | None,
        payload: ScheduleUpdate,
    ) -> MedicationSchedule:
        changes = payload.model_dump(exclude_unset=True)
        if schedule is None:
            schedule = MedicationSchedule(
                patient_profile_id=medication.patient_profile_id,
                medication_id=str(medication.id),
                frequency=changes.get("frequency") or "daily",
                times=changes.get("times") or [],
                days_of_week=changes.get("days_of_week"),
                custom_rule=changes.get("custom_rule"),
                timezone=changes.get("timezone") or "UTC",
            )
            await schedule.insert()
            return schedule

        for field, value in changes.items():
            if value is None and field in {"frequency", "times", "timezone"}:
                continue
            setattr(schedule, field, value)
        await schedule.save()
        return schedule

    async def delete(self, medication_id: str, patient_profile_id: str) -> None:
        medication = await self.get_for_patient(medication_id, patient_profile_id)
        await MedicationSchedule.find(
            MedicationSchedule.medication_id == str(medication.id)
        ).delete()
        await medication.delete()
        log.info("medications.deleted", medication_id=str(medication.id))
