import logging
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom.core.errors import ConflictError
from classroom.models.group import Group, GroupMember
from classroom.models.user import RoleType, User
from classroom.utils.helpers import generate_join_code, get_utc_now

logger = logging.getLogger(__name__)

MAX_JOIN_CODE_ATTEMPTS = 10

def active_groups(db: Session):
    return db.query(Group).filter(Group.deleted_at.is_(None))

def member_group_ids(db: Session, user_id: str):
    """Subquery of the ids of groups a user has joined; callers filter out deleted groups"""
    return db.query(GroupMember.group_id).filter(GroupMember.user_id == user_id)

def get_group_by_id(db: Session, group_id: str) -> Optional[Group]:
    return active_groups(db).filter(Group.id == group_id).first()

def get_group_by_join_code(db: Session, join_code: str) -> Optional[Group]:
    return active_groups(db).filter(Group.join_code == join_code).first()

def create_group(db: Session, owner_id: str, group_data: dict) -> Group:
    """
    Create a group with a fresh join code

    A code already taken is regenerated. The unique index settles the race
    between two creators drawing the same code, the loser simply retries.
    """
    for attempt in range(MAX_JOIN_CODE_ATTEMPTS):
        join_code = generate_join_code()
        if get_group_by_join_code(db, join_code) is not None:
            continue

        group = Group(owner_id=owner_id, join_code=join_code, **group_data)
        db.add(group)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning("Join code collision on insert, retrying (attempt %d)", attempt + 1)
            continue
        db.refresh(group)
        return group

    raise ConflictError("Could not allocate a unique join code, please try again")

def count_group_members(db: Session, group_id: str) -> int:
    return db.query(func.count(GroupMember.id)).filter(GroupMember.group_id == group_id).scalar()

def _member_counts(db: Session, group_ids: List[str]) -> Dict[str, int]:
    if not group_ids:
        return {}
    rows = (
        db.query(GroupMember.group_id, func.count(GroupMember.id))
        .filter(GroupMember.group_id.in_(group_ids))
        .group_by(GroupMember.group_id)
        .all()
    )
    return dict(rows)

def attach_group_details(db: Session, groups: List[Group]) -> List[Group]:
    """Set ``owner_name`` and ``member_count`` on each group for display"""
    counts = _member_counts(db, [group.id for group in groups])
    for group in groups:
        group.owner_name = group.owner.name if group.owner else "Unknown"
        group.member_count = counts.get(group.id, 0)
    return groups

def get_groups_for_user(db: Session, user_id: str, role: RoleType) -> List[Group]:
    """Teachers get the groups they own, students the groups they joined"""
    query = active_groups(db)
    if role == RoleType.TEACHER:
        query = query.filter(Group.owner_id == user_id)
    else:
        query = query.filter(Group.id.in_(member_group_ids(db, user_id)))
    return attach_group_details(db, query.order_by(Group.name).all())

def get_group_members(db: Session, group_id: str) -> List[GroupMember]:
    rows = (
        db.query(GroupMember, User)
        .join(User, User.id == GroupMember.user_id)
        .filter(GroupMember.group_id == group_id)
        .order_by(User.name)
        .all()
    )
    members = []
    for membership, user in rows:
        membership.name = user.name
        membership.email = user.email
        members.append(membership)
    return members

def is_member_of_group(db: Session, group_id: str, user_id: str) -> bool:
    return db.query(GroupMember.id).filter(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id
    ).first() is not None

def add_member_to_group(db: Session, group_id: str, user_id: str) -> GroupMember:
    """
    Raises:
        ConflictError if the user already belongs to the group
    """
    membership = GroupMember(group_id=group_id, user_id=user_id)
    db.add(membership)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Already a member of this group")
    db.refresh(membership)
    return membership

def remove_member_from_group(db: Session, group_id: str, user_id: str) -> bool:
    deleted = db.query(GroupMember).filter(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id
    ).delete(synchronize_session=False)
    db.commit()
    return deleted > 0

def delete_group(db: Session, group: Group) -> Group:
    """Soft delete; tasks, submissions and memberships are kept"""
    group.deleted_at = get_utc_now()
    db.commit()
    logger.info("Group %s soft deleted", group.id)
    return group
