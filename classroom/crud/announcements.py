import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom.crud.groups import member_group_ids
from classroom.models.announcement import Announcement, AnnouncementRead
from classroom.models.group import Group
from classroom.models.user import RoleType, User

logger = logging.getLogger(__name__)

def _announcement_query(db: Session):
    return (
        db.query(Announcement, User, Group)
        .join(User, User.id == Announcement.teacher_id)
        .join(Group, Group.id == Announcement.group_id)
        .filter(Group.deleted_at.is_(None))
    )

def _read_ids(db: Session, user_id: str, announcement_ids: List[str]) -> set:
    if not announcement_ids:
        return set()
    rows = db.query(AnnouncementRead.announcement_id).filter(
        AnnouncementRead.user_id == user_id,
        AnnouncementRead.announcement_id.in_(announcement_ids)
    ).all()
    return {announcement_id for (announcement_id,) in rows}

def _with_details(db: Session, rows, reader_id: Optional[str]) -> List[Announcement]:
    announcements = []
    for announcement, teacher, group in rows:
        announcement.teacher_name = teacher.name
        announcement.group_name = group.name
        announcements.append(announcement)

    if reader_id is not None:
        read = _read_ids(db, reader_id, [announcement.id for announcement in announcements])
        for announcement in announcements:
            announcement.is_read = announcement.id in read
    return announcements

def create_announcement(db: Session, teacher_id: str, announcement_data: dict) -> Announcement:
    announcement = Announcement(teacher_id=teacher_id, **announcement_data)
    db.add(announcement)
    db.commit()
    db.refresh(announcement)
    logger.info("Announcement %s posted to group %s", announcement.id, announcement.group_id)
    return announcement

def get_announcement_by_id(db: Session, announcement_id: str) -> Optional[Announcement]:
    return (
        db.query(Announcement)
        .join(Group, Group.id == Announcement.group_id)
        .filter(Announcement.id == announcement_id, Group.deleted_at.is_(None))
        .first()
    )

def get_announcements_for_group(db: Session, group_id: str, reader_id: Optional[str] = None) -> List[Announcement]:
    """
    Announcements of a group, newest first

    Args:
        reader_id: when given, each announcement carries ``is_read`` for that user
    """
    rows = (
        _announcement_query(db)
        .filter(Announcement.group_id == group_id)
        .order_by(Announcement.created_at.desc())
        .all()
    )
    return _with_details(db, rows, reader_id)

def get_announcements_for_user(db: Session, user_id: str, role: RoleType) -> List[Announcement]:
    """Announcements across every group the user owns or has joined"""
    query = _announcement_query(db)
    if role == RoleType.TEACHER:
        query = query.filter(Group.owner_id == user_id)
        reader_id = None
    else:
        query = query.filter(Announcement.group_id.in_(member_group_ids(db, user_id)))
        reader_id = user_id
    rows = query.order_by(Announcement.created_at.desc()).all()
    return _with_details(db, rows, reader_id)

def count_unread_announcements(db: Session, student_id: str) -> int:
    read = db.query(AnnouncementRead.announcement_id).filter(AnnouncementRead.user_id == student_id)
    return (
        db.query(Announcement)
        .join(Group, Group.id == Announcement.group_id)
        .filter(
            Group.deleted_at.is_(None),
            Announcement.group_id.in_(member_group_ids(db, student_id)),
            Announcement.id.notin_(read)
        )
        .count()
    )

def mark_announcement_as_read(db: Session, announcement_id: str, user_id: str) -> AnnouncementRead:
    existing = db.query(AnnouncementRead).filter(
        AnnouncementRead.announcement_id == announcement_id,
        AnnouncementRead.user_id == user_id
    ).first()
    if existing:
        return existing

    marker = AnnouncementRead(announcement_id=announcement_id, user_id=user_id)
    db.add(marker)
    try:
        db.commit()
    except IntegrityError:
        # Marked concurrently, keep the first marker
        db.rollback()
        return db.query(AnnouncementRead).filter(
            AnnouncementRead.announcement_id == announcement_id,
            AnnouncementRead.user_id == user_id
        ).first()
    db.refresh(marker)
    return marker

def delete_announcement(db: Session, announcement: Announcement) -> bool:
    announcement_id = announcement.id
    db.delete(announcement)
    db.commit()
    logger.info("Announcement %s deleted", announcement_id)
    return True
