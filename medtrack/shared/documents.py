from typing import Type, TypeVar

from beanie import Document, PydanticObjectId
from bson.errors import InvalidId

DocT = TypeVar("DocT", bound=Document)


def to_object_id(value: object) -> PydanticObjectId | None:
    """Parse a client-supplied id; malformed values yield ``None``."""
    if isinstance(value, PydanticObjectId):
        return value
    try:
        return PydanticObjectId(str(value))
    except (InvalidId, TypeError):
        return None


async def get_document(model: Type[DocT], document_id: object) -> DocT | None:
    object_id = to_object_id(document_id)
    if object_id is None:
        return None
    return await model.get(object_id)
