import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from classroom.core.errors import ConflictError, NotFoundError, ValidationError
from classroom.crud.groups import (
    add_member_to_group, attach_group_details, create_group, delete_group, get_group_by_id,
    get_group_by_join_code, get_group_members, get_groups_for_user, is_member_of_group,
    remove_member_from_group,
)
from classroom.db.session import get_db
from classroom.dependencies.auth import CurrentUser, get_current_user, student_required, teacher_required
from classroom.dependencies.permissions import Relation, group_access
from classroom.models.group import Group
from classroom.schemas.common import MessageResponse
from classroom.schemas.group import (
    GroupCreate, GroupDisplay, GroupMemberDisplay, JoinGroupRequest, JoinGroupResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/groups", tags=["groups"])

@router.get("", response_model=List[GroupDisplay])
def list_groups(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return get_groups_for_user(db, current_user.id, current_user.role)

@router.post("", response_model=GroupDisplay, status_code=status.HTTP_201_CREATED)
def create_new_group(
    request: GroupCreate,
    current_user: CurrentUser = Depends(teacher_required),
    db: Session = Depends(get_db)
):
    group = create_group(db, current_user.id, request.model_dump())
    logger.info("Teacher %s created group %s", current_user.id, group.id)
    return attach_group_details(db, [group])[0]

@router.post("/join", response_model=JoinGroupResponse)
def join_group(
    request: JoinGroupRequest,
    current_user: CurrentUser = Depends(student_required),
    db: Session = Depends(get_db)
):
    group = get_group_by_join_code(db, request.join_code)
    if not group:
        raise NotFoundError("Invalid join code")

    # The unique constraint in add_member_to_group covers the concurrent case
    if is_member_of_group(db, group.id, current_user.id):
        raise ConflictError("Already a member of this group")

    add_member_to_group(db, group.id, current_user.id)
    return {"message": "Joined group successfully", "group": attach_group_details(db, [group])[0]}

@router.get("/{group_id}", response_model=GroupDisplay)
def get_group(
    group: Group = Depends(group_access(Relation.MEMBER)),
    db: Session = Depends(get_db)
):
    return attach_group_details(db, [group])[0]

@router.delete("/{group_id}", response_model=MessageResponse)
def remove_group(
    current_user: CurrentUser = Depends(teacher_required),
    group: Group = Depends(group_access(Relation.OWNER)),
    db: Session = Depends(get_db)
):
    delete_group(db, group)
    return {"message": "Group deleted"}

@router.post("/{group_id}/leave", response_model=MessageResponse)
def leave_group(
    group_id: str,
    current_user: CurrentUser = Depends(student_required),
    db: Session = Depends(get_db)
):
    group = get_group_by_id(db, group_id)
    if not group:
        raise NotFoundError("Group not found")

    if not remove_member_from_group(db, group.id, current_user.id):
        raise ValidationError("Not a member of this group")
    return {"message": "Left group successfully"}

@router.get("/{group_id}/members", response_model=List[GroupMemberDisplay])
def list_members(
    group: Group = Depends(group_access(Relation.MEMBER)),
    db: Session = Depends(get_db)
):
    return get_group_members(db, group.id)

@router.delete("/{group_id}/members/{member_id}", response_model=MessageResponse)
def remove_member(
    member_id: str,
    current_user: CurrentUser = Depends(teacher_required),
    group: Group = Depends(group_access(Relation.OWNER)),
    db: Session = Depends(get_db)
):
    if not remove_member_from_group(db, group.id, member_id):
        raise NotFoundError("Member not found")
    return {"message": "Student removed"}
