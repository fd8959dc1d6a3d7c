from pydantic import EmailStr, field_validator
from classroom.models.user import RoleType
from classroom.schemas.common import CamelModel

class UserBase(CamelModel):
    name: str
    email: EmailStr
    role: RoleType

class RegisterRequest(UserBase):
    password: str

    @field_validator("name")
    @classmethod
    def name_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name must be at least 2 characters")
        return value

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        if len(value) < 6:
            raise ValueError("Password must be at least 6 characters")
        return value

class LoginRequest(CamelModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def password_required(cls, value: str) -> str:
        if not value:
            raise ValueError("Password is required")
        return value

class UserDisplay(UserBase):
    id: str

class AuthResponse(CamelModel):
    user: UserDisplay
    token: str
