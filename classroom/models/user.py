from sqlalchemy import Column, String, Enum
from sqlalchemy.orm import relationship
import enum
from classroom.db.base import Base
from classroom.utils.helpers import generate_uuid

class RoleType(enum.Enum):
    TEACHER = "teacher"
    STUDENT = "student"

class User(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    hashed_password = Column(String, nullable=False)
    # Fixed at registration, there is no role change path
    role = Column(Enum(RoleType), nullable=False)

    owned_groups = relationship("Group", back_populates="owner")
    memberships = relationship("GroupMember", back_populates="user")
    submissions = relationship("Submission", back_populates="student")
    announcements = relationship("Announcement", back_populates="teacher")
