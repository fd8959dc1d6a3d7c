from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from classroom.core.errors import NotFoundError
from classroom.crud.announcements import (
    count_unread_announcements, create_announcement, delete_announcement, get_announcement_by_id,
    get_announcements_for_group, get_announcements_for_user, mark_announcement_as_read,
)
from classroom.db.session import get_db
from classroom.dependencies.auth import CurrentUser, get_current_user, student_required, teacher_required
from classroom.dependencies.permissions import Relation, authorize_group, group_access
from classroom.models.announcement import Announcement
from classroom.models.group import Group
from classroom.schemas.announcement import AnnouncementCreate, AnnouncementDisplay, UnreadCount
from classroom.schemas.common import MessageResponse

router = APIRouter(prefix="/announcements", tags=["announcements"])

def get_announcement_or_404(db: Session, announcement_id: str) -> Announcement:
    announcement = get_announcement_by_id(db, announcement_id)
    if not announcement:
        raise NotFoundError("Announcement not found")
    return announcement

@router.post("", response_model=AnnouncementDisplay, status_code=status.HTTP_201_CREATED)
def post_announcement(
    request: AnnouncementCreate,
    current_user: CurrentUser = Depends(teacher_required),
    db: Session = Depends(get_db)
):
    group = authorize_group(db, current_user, request.group_id, Relation.OWNER)
    announcement = create_announcement(db, current_user.id, request.model_dump())
    announcement.teacher_name = current_user.name
    announcement.group_name = group.name
    return announcement

@router.get("/all", response_model=List[AnnouncementDisplay])
def list_my_announcements(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return get_announcements_for_user(db, current_user.id, current_user.role)

@router.get("/unread/count", response_model=UnreadCount)
def unread_announcement_count(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if not current_user.is_student:
        return {"unread_count": 0}
    return {"unread_count": count_unread_announcements(db, current_user.id)}

@router.get("/{group_id}", response_model=List[AnnouncementDisplay])
def list_group_announcements(
    group: Group = Depends(group_access(Relation.MEMBER)),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    reader_id = current_user.id if current_user.is_student else None
    return get_announcements_for_group(db, group.id, reader_id)

@router.post("/{announcement_id}/read", response_model=MessageResponse)
def read_announcement(
    announcement_id: str,
    current_user: CurrentUser = Depends(student_required),
    db: Session = Depends(get_db)
):
    announcement = get_announcement_or_404(db, announcement_id)
    authorize_group(db, current_user, announcement.group_id, Relation.MEMBER)
    mark_announcement_as_read(db, announcement.id, current_user.id)
    return {"message": "Marked as read"}

@router.delete("/{announcement_id}", response_model=MessageResponse)
def remove_announcement(
    announcement_id: str,
    current_user: CurrentUser = Depends(teacher_required),
    db: Session = Depends(get_db)
):
    announcement = get_announcement_or_404(db, announcement_id)
    authorize_group(db, current_user, announcement.group_id, Relation.OWNER)
    delete_announcement(db, announcement)
    return {"message": "Announcement deleted"}
