import re
from typing import List, Tuple

import structlog
from beanie.operators import RegEx

from medtrack.modules.treatments.models import (
    Treatment,
    TreatmentMedication,
    TreatmentReminder,
)
from medtrack.modules.treatments.schemas import (
    TreatmentCreate,
    TreatmentListQuery,
    TreatmentMedicationCreate,
    TreatmentMedicationUpdate,
    TreatmentSort,
    TreatmentUpdate,
)
from medtrack.shared.documents import get_document
from medtrack.shared.pagination import PageParams, sort_spec

log = structlog.get_logger()

_SORT_FIELDS = {
    TreatmentSort.CREATED_AT: "created_at",
    TreatmentSort.TITLE: "title",
}


class TreatmentService:
    async def list(
        self, params: TreatmentListQuery, page: PageParams
    ) -> Tuple[int, List[Treatment]]:
        query = Treatment.find(Treatment.patient_profile_id == params.patient_profile_id)
        if params.active is True:
            query = query.find(Treatment.end_date == None)  # noqa: E711
        elif params.active is False:
            query = query.find(Treatment.end_date != None)  # noqa: E711
        if params.search:
            query = query.find(RegEx(Treatment.title, re.escape(params.search), "i"))

        total = await query.count()
        items = (
            await query.sort(sort_spec(_SORT_FIELDS[params.sort], params.order))
            .skip(page.skip)
            .limit(page.take)
            .to_list()
        )
        return total, items

    async def get_for_patient(self, treatment_id: str, patient_profile_id: str) -> Treatment:
        treatment = await get_document(Treatment, treatment_id)
        if not treatment or treatment.patient_profile_id != patient_profile_id:
            raise LookupError("TREATMENT_NOT_FOUND")
        return treatment

    async def create(
        self, payload: TreatmentCreate
    ) -> Tuple[Treatment, List[TreatmentReminder]]:
        treatment = Treatment(**payload.model_dump(exclude={"reminders"}))
        await treatment.insert()

        reminders: List[TreatmentReminder] = []
        for reminder_in in payload.reminders or []:
            reminder = TreatmentReminder(
                patient_profile_id=payload.patient_profile_id,
                treatment_id=str(treatment.id),
                **reminder_in.model_dump(),
            )
            await reminder.insert()
            reminders.append(reminder)

        log.info(
            "treatments.created",
            treatment_id=str(treatment.id),
            reminders=len(reminders),
        )
        return treatment, reminders

    async def update(self, treatment_id: str, payload: TreatmentUpdate) -> Treatment:
        treatment = await self.get_for_patient(treatment_id, payload.patient_profile_id)
        changes = payload.model_dump(exclude_unset=True, exclude={"patient_profile_id"})
        for field, value in changes.items():
            if value is None and field in {"title", "start_date"}:
                continue
            setattr(treatment, field, value)
        await treatment.save()
        log.info("treatments.updated", treatment_id=str(treatment.id))
        return treatment

    async def delete(self, treatment_id: str, patient_profile_id: str) -> None:
        treatment = await self.get_for_patient(treatment_id, patient_profile_id)
        await TreatmentReminder.find(
            TreatmentReminder.treatment_id == str(treatment.id)
        ).delete()
        await TreatmentMedication.find(
            TreatmentMedication.treatment_id == str(treatment.id)
        ).delete()
        await treatment.delete()
        log.info("treatments.deleted", treatment_id=str(treatment.id))

    async def list_medications(
        self, treatment_id: str, patient_profile_id: str
    ) -> List[TreatmentMedication]:
        treatment = await self.get_for_patient(treatment_id, patient_profile_id)
        return await TreatmentMedication.find(
            TreatmentMedication.treatment_id == str(treatment.id)
        ).to_list()

    async def add_medication(
        self,
        treatment_id: str,
        patient_profile_id: str,
        payload: TreatmentMedicationCreate,
    ) -> TreatmentMedication:
        treatment = await self.get_for_patient(treatment_id, patient_profile_id)
        medication = TreatmentMedication(
            treatment_id=str(treatment.id), **payload.model_dump()
        )
        await medication.insert()
        return medication

    async def _get_medication(
        self, treatment_id: str, medication_id: str, patient_profile_id: str
    ) -> TreatmentMedication:
        treatment = await self.get_for_patient(treatment_id, patient_profile_id)
        medication = await get_document(TreatmentMedication, medication_id)
        if not medication or medication.treatment_id != str(treatment.id):
            raise LookupError("MEDICATION_NOT_FOUND")
        return medication

    async def update_medication(
        self,
        treatment_id: str,
        medication_id: str,
        patient_profile_id: str,
        payload: TreatmentMedicationUpdate,
    ) -> TreatmentMedication:
        medication = await self._get_medication(
            treatment_id, medication_id, patient_profile_id
        )
        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is None and field == "name":
                continue
            setattr(medication, field, value)
        await medication.save()
        return medication

    async def delete_medication(
        self, treatment_id: str, medication_id: str, patient_profile_id: str
    ) -> None:
        medication = await self._get_medication(
            treatment_id, medication_id, patient_profile_id
        )
        await medication.delete()
