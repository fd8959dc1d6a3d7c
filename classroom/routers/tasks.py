import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from classroom.core.config.settings import get_settings
from classroom.core.errors import ValidationError, raise_validation_error
from classroom.crud.submissions import attach_responses, get_submission_for_task
from classroom.crud.tasks import (
    create_task, delete_task, dismiss_reminder, get_all_tasks_for_student, get_tasks_for_group,
    get_upcoming_tasks_for_student, get_urgent_tasks_for_student,
)
from classroom.db.session import get_db
from classroom.dependencies.auth import CurrentUser, get_current_user, student_required, teacher_required
from classroom.dependencies.permissions import Relation, group_access, task_access
from classroom.models.group import Group
from classroom.models.task import Task, TaskType
from classroom.schemas.common import MessageResponse
from classroom.schemas.submission import SubmissionDisplay
from classroom.schemas.task import QuestionDisplay, TaskCreate, TaskDetails, TaskDisplay, TaskWithStatus
from classroom.services.file_storage import file_storage
from classroom.utils.helpers import load_json_field

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(tags=["tasks"])

def attach_questions(task: Task, reveal_answers: bool) -> Task:
    """Expose quiz questions as ``questions``; only the group owner sees the answers"""
    if task.task_type != TaskType.QUIZ:
        return task
    questions = [QuestionDisplay.model_validate(question) for question in task.question_items]
    if not reveal_answers:
        questions = [question.model_copy(update={"correct_answer": None}) for question in questions]
    task.questions = questions
    return task

@router.get("/groups/{group_id}/tasks", response_model=List[TaskWithStatus])
def list_group_tasks(
    group: Group = Depends(group_access(Relation.MEMBER)),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return get_tasks_for_group(db, group.id, current_user.id, current_user.role)

@router.post("/groups/{group_id}/tasks", response_model=TaskDisplay, status_code=status.HTTP_201_CREATED)
async def create_group_task(
    current_user: CurrentUser = Depends(teacher_required),
    group: Group = Depends(group_access(Relation.OWNER)),
    title: str = Form(""),
    description: str = Form(""),
    due_date: Optional[str] = Form(None, alias="dueDate"),
    task_type: Optional[str] = Form(None, alias="taskType"),
    questions: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db)
):
    form = {"title": title, "description": description, "dueDate": due_date}
    if task_type:
        form["taskType"] = task_type
    parsed_questions = load_json_field(questions, "Invalid questions format")
    if parsed_questions is not None:
        form["questions"] = parsed_questions

    try:
        payload = TaskCreate.model_validate(form)
    except PydanticValidationError as e:
        raise_validation_error(e)

    # The attachment is stored only once the form is known to be valid
    file_url = None
    if file_storage.has_file(file):
        success, result = await file_storage.save_file(file)
        if not success:
            raise ValidationError(result)
        file_url = result

    try:
        task = create_task(
            db,
            group.id,
            payload.model_dump(exclude={"questions"}),
            questions=[question.model_dump() for question in payload.questions],
            file_url=file_url,
        )
    except Exception:
        if file_url:
            file_storage.delete_file(file_url)
        raise
    return attach_questions(task, reveal_answers=True)

@router.get("/tasks/upcoming", response_model=List[TaskWithStatus])
def list_upcoming_tasks(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if not current_user.is_student:
        return []
    return get_upcoming_tasks_for_student(db, current_user.id)

@router.get("/tasks/urgent", response_model=List[TaskWithStatus])
def list_urgent_tasks(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if not current_user.is_student:
        return []
    return get_urgent_tasks_for_student(db, current_user.id, settings.URGENT_WINDOW_HOURS)

@router.get("/tasks/all", response_model=List[TaskWithStatus])
def list_all_tasks(
    current_user: CurrentUser = Depends(student_required),
    db: Session = Depends(get_db)
):
    return get_all_tasks_for_student(db, current_user.id)

@router.get("/tasks/{task_id}", response_model=TaskDisplay)
def get_task(
    task: Task = Depends(task_access(Relation.MEMBER)),
    current_user: CurrentUser = Depends(get_current_user)
):
    return attach_questions(task, reveal_answers=current_user.is_owner(task.group))

@router.get("/tasks/{task_id}/details", response_model=TaskDetails)
def get_task_details(
    task: Task = Depends(task_access(Relation.MEMBER)),
    current_user: CurrentUser = Depends(get_current_user)
):
    task.group_name = task.group.name
    task.teacher_name = task.group.owner.name
    return attach_questions(task, reveal_answers=current_user.is_owner(task.group))

@router.delete("/tasks/{task_id}", response_model=MessageResponse)
def remove_task(
    current_user: CurrentUser = Depends(teacher_required),
    task: Task = Depends(task_access(Relation.OWNER)),
    db: Session = Depends(get_db)
):
    delete_task(db, task)
    return {"message": "Task deleted"}

@router.post("/tasks/{task_id}/dismiss-reminder", response_model=MessageResponse)
def dismiss_task_reminder(
    current_user: CurrentUser = Depends(student_required),
    task: Task = Depends(task_access(Relation.MEMBER)),
    db: Session = Depends(get_db)
):
    dismiss_reminder(db, task.id, current_user.id)
    return {"message": "Reminder dismissed"}

@router.get("/tasks/{task_id}/my-submission", response_model=Optional[SubmissionDisplay])
def get_my_submission(
    task: Task = Depends(task_access(Relation.MEMBER)),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    submission = get_submission_for_task(db, task.id, current_user.id)
    if not submission:
        return None
    return attach_responses(db, [submission])[0]
