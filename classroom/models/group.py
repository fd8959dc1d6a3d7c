from sqlalchemy import Column, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from classroom.db.base import Base
from classroom.utils.helpers import generate_uuid, get_utc_now

class Group(Base):
    __tablename__ = "groups"
    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    join_code = Column(String(6), nullable=False, unique=True, index=True)
    created_at = Column(DateTime, default=get_utc_now, nullable=False)
    # Soft delete marker, dependents are kept
    deleted_at = Column(DateTime, nullable=True)

    owner = relationship("User", back_populates="owned_groups")
    memberships = relationship("GroupMember", back_populates="group")
    tasks = relationship("Task", back_populates="group")
    announcements = relationship("Announcement", back_populates="group")

class GroupMember(Base):
    __tablename__ = "group_members"
    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_members_group_user"),
    )
    id = Column(String(36), primary_key=True, default=generate_uuid)
    group_id = Column(String(36), ForeignKey("groups.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    joined_at = Column(DateTime, default=get_utc_now, nullable=False)

    group = relationship("Group", back_populates="memberships")
    user = relationship("User", back_populates="memberships")
