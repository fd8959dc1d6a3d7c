"""
Ownership and membership checks for group scoped resources.

Every route that touches a group, a task or a submission resolves it through
one of the ``*_access`` dependencies below, so the decision of who may see or
change what is made here and nowhere else:

* ``Relation.OWNER``  the caller owns the group
* ``Relation.MEMBER`` the caller owns the group or has joined it

A resource that does not exist (or was deleted) is a 404, a resource the
caller has no relation to is a 403.
"""
import enum

from fastapi import Depends
from sqlalchemy.orm import Session

from classroom.core.errors import AuthorizationError, NotFoundError
from classroom.crud.groups import get_group_by_id
from classroom.crud.submissions import get_submission_by_id
from classroom.crud.tasks import get_task_by_id
from classroom.db.session import get_db
from classroom.dependencies.auth import CurrentUser, get_current_user
from classroom.models.group import Group
from classroom.models.submission import Submission
from classroom.models.task import Task


class Relation(enum.Enum):
    OWNER = "owner"
    MEMBER = "member"


def check_relation(db: Session, current_user: CurrentUser, group: Group, relation: Relation):
    if relation == Relation.OWNER:
        if not current_user.is_owner(group):
            raise AuthorizationError("Not authorized")
    elif not current_user.is_member(db, group):
        raise AuthorizationError("Not a member of this group")


def authorize_group(db: Session, current_user: CurrentUser, group_id: str, relation: Relation) -> Group:
    group = get_group_by_id(db, group_id)
    if not group:
        raise NotFoundError("Group not found")
    check_relation(db, current_user, group, relation)
    return group


def authorize_task(db: Session, current_user: CurrentUser, task_id: str, relation: Relation) -> Task:
    task = get_task_by_id(db, task_id)
    if not task:
        raise NotFoundError("Task not found")
    check_relation(db, current_user, task.group, relation)
    return task


def authorize_submission(db: Session, current_user: CurrentUser, submission_id: str,
                         relation: Relation) -> Submission:
    """
    Resolve a submission through its task and group

    Besides the group owner, the student who wrote a submission holds the
    member relation to it; other members of the group do not.
    """
    submission = get_submission_by_id(db, submission_id)
    if not submission:
        raise NotFoundError("Submission not found")
    task = get_task_by_id(db, submission.task_id)
    if not task:
        raise NotFoundError("Task not found")

    if relation == Relation.MEMBER and submission.student_id == current_user.id:
        return submission
    check_relation(db, current_user, task.group, Relation.OWNER)
    return submission


def group_access(relation: Relation):
    def dependency(
        group_id: str,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user),
    ) -> Group:
        return authorize_group(db, current_user, group_id, relation)
    return dependency


def task_access(relation: Relation):
    def dependency(
        task_id: str,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user),
    ) -> Task:
        return authorize_task(db, current_user, task_id, relation)
    return dependency


def submission_access(relation: Relation):
    def dependency(
        submission_id: str,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user),
    ) -> Submission:
        return authorize_submission(db, current_user, submission_id, relation)
    return dependency
