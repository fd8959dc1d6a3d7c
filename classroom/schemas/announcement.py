from typing import Optional
from pydantic import field_validator
from classroom.schemas.common import CamelModel, UtcDatetime

class AnnouncementCreate(CamelModel):
    group_id: str
    message: str

    @field_validator("message")
    @classmethod
    def message_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Message is required")
        return value

class AnnouncementDisplay(CamelModel):
    id: str
    group_id: str
    teacher_id: str
    message: str
    created_at: UtcDatetime
    teacher_name: Optional[str] = None
    group_name: Optional[str] = None
    # Only filled in for students
    is_read: Optional[bool] = None

class UnreadCount(CamelModel):
    unread_count: int
