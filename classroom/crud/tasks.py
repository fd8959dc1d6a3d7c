import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom.crud.groups import count_group_members, member_group_ids
from classroom.models.group import Group
from classroom.models.submission import Submission
from classroom.models.task import Question, ReminderDismissal, Task
from classroom.models.user import RoleType
from classroom.utils.helpers import get_utc_now, to_naive_utc

logger = logging.getLogger(__name__)

NOT_SUBMITTED = "not_submitted"
SUBMITTED = "submitted"
GRADED = "graded"

def active_tasks(db: Session):
    """Tasks that are not deleted and whose group is not deleted either"""
    return (
        db.query(Task)
        .join(Group, Group.id == Task.group_id)
        .filter(Task.deleted_at.is_(None), Group.deleted_at.is_(None))
    )

def create_task(db: Session, group_id: str, task_data: dict, questions: List[dict] = None,
                file_url: Optional[str] = None) -> Task:
    """
    Create a task and, for quizzes, its questions in a single commit

    Args:
        group_id: Group the task belongs to
        task_data: title, description, due_date and task_type
        questions: question_text, question_type, options and correct_answer per question
        file_url: URL of an already stored attachment
    """
    task_data = dict(task_data)
    task_data["due_date"] = to_naive_utc(task_data["due_date"])

    task = Task(group_id=group_id, file_url=file_url, **task_data)
    for order, question_data in enumerate(questions or []):
        task.question_items.append(Question(order=order, **question_data))

    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("Task %s created in group %s with %d question(s)", task.id, group_id, len(task.question_items))
    return task

def get_task_by_id(db: Session, task_id: str) -> Optional[Task]:
    return active_tasks(db).filter(Task.id == task_id).first()

def get_questions_for_task(db: Session, task_id: str) -> List[Question]:
    return db.query(Question).filter(Question.task_id == task_id).order_by(Question.order).all()

def attach_student_status(db: Session, tasks: List[Task], student_id: str) -> List[Task]:
    """Set ``submission_status`` and ``score`` from the student's own submissions"""
    if not tasks:
        return tasks
    submissions = db.query(Submission).filter(
        Submission.student_id == student_id,
        Submission.task_id.in_([task.id for task in tasks])
    ).all()
    by_task = {submission.task_id: submission for submission in submissions}

    for task in tasks:
        submission = by_task.get(task.id)
        if submission is None:
            task.submission_status = NOT_SUBMITTED
            task.score = None
        else:
            task.submission_status = GRADED if submission.score is not None else SUBMITTED
            task.score = submission.score
    return tasks

def attach_submission_counts(db: Session, tasks: List[Task], group_id: str) -> List[Task]:
    """Set ``submission_count`` and ``total_students`` for the group owner's view"""
    total_students = count_group_members(db, group_id)
    counts = {}
    if tasks:
        counts = dict(
            db.query(Submission.task_id, func.count(Submission.id))
            .filter(Submission.task_id.in_([task.id for task in tasks]))
            .group_by(Submission.task_id)
            .all()
        )
    for task in tasks:
        task.submission_count = counts.get(task.id, 0)
        task.total_students = total_students
    return tasks

def attach_group_names(tasks: List[Task]) -> List[Task]:
    for task in tasks:
        task.group_name = task.group.name
    return tasks

def get_tasks_for_group(db: Session, group_id: str, viewer_id: str, role: RoleType) -> List[Task]:
    """
    Tasks of a group ordered by due date

    Students see their own submission status on each task, teachers see
    how many of the group's students have submitted.
    """
    tasks = active_tasks(db).filter(Task.group_id == group_id).order_by(Task.due_date).all()
    if role == RoleType.TEACHER:
        return attach_submission_counts(db, tasks, group_id)
    return attach_student_status(db, tasks, viewer_id)

def get_all_tasks_for_student(db: Session, student_id: str) -> List[Task]:
    tasks = (
        active_tasks(db)
        .filter(Task.group_id.in_(member_group_ids(db, student_id)))
        .order_by(Task.due_date)
        .all()
    )
    return attach_group_names(attach_student_status(db, tasks, student_id))

def get_upcoming_tasks_for_student(db: Session, student_id: str) -> List[Task]:
    tasks = (
        active_tasks(db)
        .filter(
            Task.group_id.in_(member_group_ids(db, student_id)),
            Task.due_date > get_utc_now()
        )
        .order_by(Task.due_date)
        .all()
    )
    return attach_group_names(attach_student_status(db, tasks, student_id))

def get_urgent_tasks_for_student(db: Session, student_id: str, window_hours: int = 12) -> List[Task]:
    """Upcoming tasks due within ``window_hours`` that are neither submitted nor dismissed"""
    deadline = get_utc_now() + timedelta(hours=window_hours)
    dismissed = {
        task_id for (task_id,) in
        db.query(ReminderDismissal.task_id).filter(ReminderDismissal.user_id == student_id).all()
    }
    return [
        task for task in get_upcoming_tasks_for_student(db, student_id)
        if task.due_date <= deadline
        and task.submission_status == NOT_SUBMITTED
        and task.id not in dismissed
    ]

def dismiss_reminder(db: Session, task_id: str, user_id: str) -> ReminderDismissal:
    existing = db.query(ReminderDismissal).filter(
        ReminderDismissal.task_id == task_id,
        ReminderDismissal.user_id == user_id
    ).first()
    if existing:
        return existing

    dismissal = ReminderDismissal(task_id=task_id, user_id=user_id)
    db.add(dismissal)
    try:
        db.commit()
    except IntegrityError:
        # Dismissed concurrently, the other request's row stands
        db.rollback()
        return db.query(ReminderDismissal).filter(
            ReminderDismissal.task_id == task_id,
            ReminderDismissal.user_id == user_id
        ).first()
    db.refresh(dismissal)
    return dismissal

def delete_task(db: Session, task: Task) -> Task:
    """Soft delete; submissions stay in place"""
    task.deleted_at = get_utc_now()
    db.commit()
    logger.info("Task %s soft deleted", task.id)
    return task
