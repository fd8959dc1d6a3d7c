from typing import Optional
from pydantic import field_validator
from classroom.schemas.common import CamelModel

class GroupCreate(CamelModel):
    name: str

    @field_validator("name")
    @classmethod
    def name_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Group name must be at least 2 characters")
        return value

class JoinGroupRequest(CamelModel):
    join_code: str

    @field_validator("join_code")
    @classmethod
    def code_format(cls, value: str) -> str:
        # Codes of any other shape simply match no group
        value = value.strip().upper()
        if not value:
            raise ValueError("Join code is required")
        return value

class GroupDisplay(CamelModel):
    id: str
    name: str
    owner_id: str
    join_code: str
    owner_name: Optional[str] = None
    member_count: int = 0

class GroupMemberDisplay(CamelModel):
    id: str
    user_id: str
    name: str
    email: str

class JoinGroupResponse(CamelModel):
    message: str
    group: GroupDisplay
