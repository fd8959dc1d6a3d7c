from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from classroom.utils.helpers import as_utc

# Naive UTC from the database, rendered as ISO-8601 with a Z suffix
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]

class CamelModel(BaseModel):
    """Base for every request/response body; the wire format is camelCase"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

class MessageResponse(CamelModel):
    message: str
