from typing import List, Tuple

import structlog

from medtrack.modules.appointments.models import Appointment
from medtrack.modules.appointments.schemas import (
    AppointmentCreate,
    AppointmentListQuery,
    AppointmentSort,
    AppointmentUpdate,
)
from medtrack.shared.documents import get_document
from medtrack.shared.pagination import PageParams, sort_spec

log = structlog.get_logger()

_SORT_FIELDS = {
    AppointmentSort.DATE_TIME: "date_time",
    AppointmentSort.CREATED_AT: "created_at",
}

# Document fields that may not be cleared through a partial update.
_REQUIRED_FIELDS = {"title", "date_time", "status"}


class AppointmentService:
    async def list(
        self, params: AppointmentListQuery, page: PageParams
    ) -> Tuple[int, List[Appointment]]:
        query = Appointment.find(
            Appointment.patient_profile_id == params.patient_profile_id
        )
        if params.status:
            query = query.find(Appointment.status == params.status)
        if params.start:
            query = query.find(Appointment.date_time >= params.start)
        if params.end:
            query = query.find(Appointment.date_time <= params.end)

        total = await query.count()
        items = (
            await query.sort(sort_spec(_SORT_FIELDS[params.sort], params.order))
            .skip(page.skip)
            .limit(page.take)
            .to_list()
        )
        return total, items

    async def create(self, payload: AppointmentCreate) -> Appointment:
        appointment = Appointment(**payload.model_dump())
        await appointment.insert()
        log.info(
            "appointments.created",
            appointment_id=str(appointment.id),
            patient_profile_id=payload.patient_profile_id,
        )
        return appointment

    async def get_for_patient(
        self, appointment_id: str, patient_profile_id: str
    ) -> Appointment:
        appointment = await get_document(Appointment, appointment_id)
        if not appointment or appointment.patient_profile_id != patient_profile_id:
            raise LookupError("APPOINTMENT_NOT_FOUND")
        return appointment

    async def update(self, appointment_id: str, payload: AppointmentUpdate) -> Appointment:
        appointment = await self.get_for_patient(appointment_id, payload.patient_profile_id)
        changes = payload.model_dump(exclude_unset=True, exclude={"patient_profile_id"})
        for field, value in changes.items():
            if value is None and field in _REQUIRED_FIELDS:
                continue
            setattr(appointment, field, value)
        await appointment.save()
        log.info("appointments.updated", appointment_id=str(appointment.id))
        return appointment

    async def delete(self, appointment_id: str, patient_profile_id: str) -> None:
        appointment = await self.get_for_patient(appointment_id, patient_profile_id)
        await appointment.delete()
        log.info("appointments.deleted", appointment_id=str(appointment.id))
