from typing import List, Tuple

import structlog

from medtrack.modules.intake_events.models import IntakeEvent
from medtrack.modules.intake_events.schemas import IntakeEventCreate, IntakeEventListQuery
from medtrack.shared.pagination import PageParams

log = structlog.get_logger()


class IntakeEventService:
    async def list(
        self, params: IntakeEventListQuery, page: PageParams
    ) -> Tuple[int, List[IntakeEvent]]:
        query = IntakeEvent.find(IntakeEvent.patient_profile_id == params.patient_profile_id)
        if params.kind:
            query = query.find(IntakeEvent.kind == params.kind)
        if params.start:
            query = query.find(IntakeEvent.at >= params.start)
        if params.end:
            query = query.find(IntakeEvent.at <= params.end)

        total = await query.count()
        items = await query.sort("-at").skip(page.skip).limit(page.take).to_list()
        return total, items

    async def record(self, payload: IntakeEventCreate) -> IntakeEvent:
        data = payload.model_dump(exclude_none=True)
        event = IntakeEvent(**data)
        await event.insert()
        log.info(
            "intake_events.recorded",
            intake_event_id=str(event.id),
            kind=event.kind.value,
            action=event.action.value,
        )
        return event
