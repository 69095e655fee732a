from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, StringConstraints


def to_camel(value: str) -> str:
    """Convert snake_case field names to lowerCamelCase for API payloads."""
    if "_" not in value:
        return value
    head, *tail = value.split("_")
    return head + "".join(word.capitalize() for word in tail if word)


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class DocumentResponse(CamelModel):
    """Response shape for a stored document: its fields plus a string ``id``."""

    id: str

    _excluded_fields: ClassVar[set[str]] = {"id", "revision_id"}

    @classmethod
    def from_document(cls, document: Any, **extra: Any) -> "DocumentResponse":
        data = document.model_dump(exclude=cls._excluded_fields)
        data.update(extra)
        return cls(id=str(document.id), **data)


# "HH:MM" wall-clock time and 0 (Sunday) .. 6 (Saturday) weekday used by schedules.
ClockTime = Annotated[str, StringConstraints(pattern=r"^\d{2}:\d{2}$")]
Weekday = Annotated[int, Field(ge=0, le=6)]
