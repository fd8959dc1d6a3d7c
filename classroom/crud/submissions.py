import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom.core.errors import ConflictError, ValidationError
from classroom.models.group import Group
from classroom.models.submission import QuestionResponse, Submission
from classroom.models.task import Task
from classroom.models.user import User
from classroom.crud.tasks import get_questions_for_task
from classroom.utils.quiz import is_correct_answer

logger = logging.getLogger(__name__)

def create_submission(db: Session, task: Task, student_id: str, submission_data: dict,
                      file_url: Optional[str] = None) -> Submission:
    """
    Store a student's submission, grading quiz answers as they come in

    Raises:
        ValidationError if an answer refers to a question outside the task,
        or if a question is answered more than once
        ConflictError if the student already submitted to this task
    """
    questions = {question.id: question for question in get_questions_for_task(db, task.id)}

    submission = Submission(
        task_id=task.id,
        student_id=student_id,
        text_content=submission_data.get("text_content"),
        file_url=file_url,
    )
    answered = set()
    for answer in submission_data.get("answers") or []:
        question = questions.get(answer["question_id"])
        if question is None:
            raise ValidationError("Answer references an unknown question")
        if question.id in answered:
            raise ValidationError("Duplicate answer for a question")
        answered.add(question.id)
        submission.response_items.append(QuestionResponse(
            question_id=question.id,
            answer=answer["answer"],
            is_correct=is_correct_answer(question.options, question.correct_answer, answer["answer"]),
        ))

    db.add(submission)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Duplicate submission rejected for task %s by %s", task.id, student_id)
        raise ConflictError("Already submitted")
    db.refresh(submission)
    return submission

def get_submission_by_id(db: Session, submission_id: str) -> Optional[Submission]:
    return db.query(Submission).filter(Submission.id == submission_id).first()

def get_submission_for_task(db: Session, task_id: str, student_id: str) -> Optional[Submission]:
    return db.query(Submission).filter(
        Submission.task_id == task_id,
        Submission.student_id == student_id
    ).first()

def get_responses_for_submission(db: Session, submission_id: str) -> List[QuestionResponse]:
    return db.query(QuestionResponse).filter(QuestionResponse.submission_id == submission_id).all()

def attach_responses(db: Session, submissions: List[Submission]) -> List[Submission]:
    """Expose quiz responses as ``responses`` on submissions that have any"""
    for submission in submissions:
        responses = get_responses_for_submission(db, submission.id)
        if responses:
            submission.responses = responses
    return submissions

def _with_student(rows) -> List[Submission]:
    submissions = []
    for submission, student, task, group in rows:
        submission.student_name = student.name
        submission.student_email = student.email
        submission.task_title = task.title
        submission.group_name = group.name
        submissions.append(submission)
    return submissions

def _submission_query(db: Session):
    return (
        db.query(Submission, User, Task, Group)
        .join(User, User.id == Submission.student_id)
        .join(Task, Task.id == Submission.task_id)
        .join(Group, Group.id == Task.group_id)
    )

def get_submissions_for_task(db: Session, task_id: str) -> List[Submission]:
    rows = (
        _submission_query(db)
        .filter(Submission.task_id == task_id)
        .order_by(Submission.submitted_at.desc())
        .all()
    )
    return attach_responses(db, _with_student(rows))

def get_submissions_for_group(db: Session, group_id: str) -> List[Submission]:
    """Every submission to the group's live tasks, ordered by task then student"""
    rows = (
        _submission_query(db)
        .filter(Task.group_id == group_id, Task.deleted_at.is_(None))
        .order_by(Task.title, User.name)
        .all()
    )
    return _with_student(rows)

def get_all_submissions_for_teacher(db: Session, teacher_id: str, pending_only: bool = False) -> List[Submission]:
    """
    Submissions across all live groups and tasks the teacher owns, newest first

    Args:
        pending_only: only return submissions that have not been graded yet
    """
    query = _submission_query(db).filter(
        Group.owner_id == teacher_id,
        Group.deleted_at.is_(None),
        Task.deleted_at.is_(None)
    )
    if pending_only:
        query = query.filter(Submission.score.is_(None))
    return _with_student(query.order_by(Submission.submitted_at.desc()).all())

def update_submission_score(db: Session, submission: Submission, score: int) -> Submission:
    submission.score = score
    db.commit()
    db.refresh(submission)
    logger.info("Submission %s graded: %d", submission.id, score)
    return submission
