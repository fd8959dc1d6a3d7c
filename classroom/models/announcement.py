from sqlalchemy import Column, String, Text, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from classroom.db.base import Base
from classroom.utils.helpers import generate_uuid, get_utc_now

class Announcement(Base):
    __tablename__ = "announcements"
    id = Column(String(36), primary_key=True, default=generate_uuid)
    group_id = Column(String(36), ForeignKey("groups.id"), nullable=False, index=True)
    teacher_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, default=get_utc_now, nullable=False)

    group = relationship("Group", back_populates="announcements")
    teacher = relationship("User", back_populates="announcements")
    reads = relationship("AnnouncementRead", back_populates="announcement", cascade="all, delete-orphan")

class AnnouncementRead(Base):
    __tablename__ = "announcement_reads"
    __table_args__ = (
        UniqueConstraint("announcement_id", "user_id", name="uq_announcement_reads_announcement_user"),
    )
    id = Column(String(36), primary_key=True, default=generate_uuid)
    announcement_id = Column(String(36), ForeignKey("announcements.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    read_at = Column(DateTime, default=get_utc_now, nullable=False)

    announcement = relationship("Announcement", back_populates="reads")
