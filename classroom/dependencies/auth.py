from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from classroom.core.errors import AuthenticationError, AuthorizationError
from classroom.core.security.auth import verify_token
from classroom.crud.groups import is_member_of_group
from classroom.models.group import Group
from classroom.models.user import RoleType

# auto_error=False so a missing header is reported as 401 through our own error type
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """The caller, resolved once per request from the session token"""
    id: str
    email: str
    role: RoleType
    name: str

    @property
    def is_teacher(self) -> bool:
        return self.role == RoleType.TEACHER

    @property
    def is_student(self) -> bool:
        return self.role == RoleType.STUDENT

    def is_owner(self, group: Group) -> bool:
        return group.owner_id == self.id

    def is_member(self, db: Session, group: Group) -> bool:
        """Owners count as members of their own group"""
        return self.is_owner(group) or is_member_of_group(db, group.id, self.id)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")

    payload = verify_token(credentials.credentials)
    try:
        role = RoleType(payload["role"])
    except ValueError:
        raise AuthenticationError("Invalid token payload")

    return CurrentUser(
        id=payload["id"],
        email=payload["email"],
        role=role,
        name=payload["name"],
    )


def require_role(role: RoleType, detail: str):
    """Build a dependency that lets only callers with ``role`` through"""
    def role_checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role != role:
            raise AuthorizationError(detail)
        return current_user
    return role_checker


teacher_required = require_role(RoleType.TEACHER, "Teacher access required")
student_required = require_role(RoleType.STUDENT, "Student access required")
