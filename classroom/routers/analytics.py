from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from classroom.core.errors import ValidationError
from classroom.crud.analytics import (
    get_analytics_for_student, get_analytics_for_teacher, get_teacher_stats, get_unread_count,
)
from classroom.crud.submissions import get_submissions_for_group
from classroom.db.session import get_db
from classroom.dependencies.auth import CurrentUser, get_current_user, teacher_required
from classroom.dependencies.permissions import Relation, authorize_group
from classroom.models.group import Group
from classroom.schemas.analytics import Analytics, TeacherStats
from classroom.schemas.announcement import UnreadCount
from classroom.utils.export import grades_to_csv

router = APIRouter(tags=["analytics"])

def grades_csv_response(db: Session, group: Group) -> Response:
    content = grades_to_csv(get_submissions_for_group(db, group.id))
    # Quotes in the group name would break the header value
    filename = group.name.replace('"', "")
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}-grades.csv"'},
    )

@router.get("/analytics", response_model=Analytics)
def get_analytics(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if current_user.is_teacher:
        return get_analytics_for_teacher(db, current_user.id)
    return get_analytics_for_student(db, current_user.id)

@router.get("/analytics/export-csv")
def export_grades(
    group_id: Optional[str] = Query(None, alias="groupId"),
    current_user: CurrentUser = Depends(teacher_required),
    db: Session = Depends(get_db)
):
    if not group_id:
        raise ValidationError("Group ID is required")
    group = authorize_group(db, current_user, group_id, Relation.OWNER)
    return grades_csv_response(db, group)

@router.get("/analytics/export-csv/{group_id}")
def export_group_grades(
    group_id: str,
    current_user: CurrentUser = Depends(teacher_required),
    db: Session = Depends(get_db)
):
    group = authorize_group(db, current_user, group_id, Relation.OWNER)
    return grades_csv_response(db, group)

@router.get("/stats", response_model=TeacherStats)
def get_stats(
    current_user: CurrentUser = Depends(teacher_required),
    db: Session = Depends(get_db)
):
    return get_teacher_stats(db, current_user.id)

@router.get("/unread-counts", response_model=UnreadCount)
def get_unread_counts(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"unread_count": get_unread_count(db, current_user.id, current_user.role)}
