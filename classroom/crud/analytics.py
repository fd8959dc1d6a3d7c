from typing import Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from classroom.crud.groups import active_groups, member_group_ids
from classroom.crud.tasks import NOT_SUBMITTED, active_tasks, get_upcoming_tasks_for_student
from classroom.models.group import Group, GroupMember
from classroom.models.submission import Submission
from classroom.models.task import Task
from classroom.models.user import RoleType
from classroom.utils.helpers import get_utc_now, percentage

def _average(scores: List[int]) -> int:
    if not scores:
        return 0
    return round(sum(scores) / len(scores))

def _submissions_by_task(db: Session, task_ids: List[str]) -> Dict[str, List[Submission]]:
    by_task = {task_id: [] for task_id in task_ids}
    if task_ids:
        for submission in db.query(Submission).filter(Submission.task_id.in_(task_ids)).all():
            by_task[submission.task_id].append(submission)
    return by_task

def get_teacher_stats(db: Session, teacher_id: str) -> dict:
    tasks = active_tasks(db).filter(Group.owner_id == teacher_id).all()
    now = get_utc_now()
    pending = 0
    if tasks:
        pending = db.query(func.count(Submission.id)).filter(
            Submission.task_id.in_([task.id for task in tasks]),
            Submission.score.is_(None)
        ).scalar()
    return {
        "pending_submissions": pending,
        "total_tasks": len(tasks),
        "active_tasks": sum(1 for task in tasks if task.due_date > now),
        "total_groups": active_groups(db).filter(Group.owner_id == teacher_id).count(),
    }

def get_analytics_for_teacher(db: Session, teacher_id: str) -> dict:
    """
    Submission and grade aggregates over the teacher's groups

    The submission rate is the share of expected submissions received, where
    every enrolled student is expected to submit every task of the group.
    """
    groups = active_groups(db).filter(Group.owner_id == teacher_id).order_by(Group.name).all()
    group_stats = []
    total_tasks = total_submissions = total_expected = 0
    all_scores = []

    for group in groups:
        task_ids = [task.id for task in active_tasks(db).filter(Task.group_id == group.id).all()]
        students = db.query(func.count(GroupMember.id)).filter(GroupMember.group_id == group.id).scalar()
        submissions = [
            submission
            for task_submissions in _submissions_by_task(db, task_ids).values()
            for submission in task_submissions
        ]
        scores = [submission.score for submission in submissions if submission.score is not None]
        expected = len(task_ids) * students

        group_stats.append({
            "group_id": group.id,
            "group_name": group.name,
            "task_count": len(task_ids),
            "submission_count": len(submissions),
            "submission_rate": percentage(len(submissions), expected),
            "average_score": _average(scores),
        })
        total_tasks += len(task_ids)
        total_submissions += len(submissions)
        total_expected += expected
        all_scores.extend(scores)

    return {
        "total_groups": len(groups),
        "total_tasks": total_tasks,
        "total_submissions": total_submissions,
        "average_score": _average(all_scores),
        "submission_rate": percentage(total_submissions, total_expected),
        "group_stats": group_stats,
    }

def get_analytics_for_student(db: Session, student_id: str) -> dict:
    """The student's own completion and grades over every task of their groups"""
    group_ids = member_group_ids(db, student_id)
    task_count = active_tasks(db).filter(Task.group_id.in_(group_ids)).count()
    submissions = (
        db.query(Submission)
        .join(Task, Task.id == Submission.task_id)
        .join(Group, Group.id == Task.group_id)
        .filter(
            Submission.student_id == student_id,
            Task.deleted_at.is_(None),
            Group.deleted_at.is_(None),
            Task.group_id.in_(group_ids)
        )
        .all()
    )
    scores = [submission.score for submission in submissions if submission.score is not None]
    return {
        "total_groups": active_groups(db).filter(Group.id.in_(group_ids)).count(),
        "total_tasks": task_count,
        "total_submissions": len(submissions),
        "average_score": _average(scores),
        "submission_rate": percentage(len(submissions), task_count),
        "group_stats": [],
    }

def get_unread_count(db: Session, user_id: str, role: RoleType) -> int:
    """Badge count: ungraded submissions for teachers, open unsubmitted tasks for students"""
    if role == RoleType.TEACHER:
        return get_teacher_stats(db, user_id)["pending_submissions"]
    return sum(
        1 for task in get_upcoming_tasks_for_student(db, user_id)
        if task.submission_status == NOT_SUBMITTED
    )
