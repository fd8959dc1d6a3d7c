import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from classroom.core.errors import ConflictError, ValidationError, raise_validation_error
from classroom.crud.submissions import (
    attach_responses, create_submission, get_all_submissions_for_teacher, get_submission_for_task,
    get_submissions_for_task, update_submission_score,
)
from classroom.db.session import get_db
from classroom.dependencies.auth import CurrentUser, student_required, teacher_required
from classroom.dependencies.permissions import Relation, submission_access, task_access
from classroom.models.submission import Submission
from classroom.models.task import Task, TaskType
from classroom.schemas.submission import ScoreUpdate, SubmissionCreate, SubmissionDisplay, SubmissionWithStudent
from classroom.services.file_storage import file_storage
from classroom.utils.helpers import load_json_field

logger = logging.getLogger(__name__)

router = APIRouter(tags=["submissions"])

@router.post("/tasks/{task_id}/submit", response_model=SubmissionDisplay, status_code=status.HTTP_201_CREATED)
async def submit_task(
    current_user: CurrentUser = Depends(student_required),
    task: Task = Depends(task_access(Relation.MEMBER)),
    text_content: Optional[str] = Form(None, alias="textContent"),
    answers: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db)
):
    form = {"textContent": text_content if text_content and text_content.strip() else None}
    parsed_answers = load_json_field(answers, "Invalid answers format")
    if parsed_answers is not None:
        form["answers"] = parsed_answers

    try:
        payload = SubmissionCreate.model_validate(form)
    except PydanticValidationError as e:
        raise_validation_error(e)

    has_file = file_storage.has_file(file)
    has_answers = task.task_type == TaskType.QUIZ and bool(payload.answers)
    if not payload.text_content and not has_file and not has_answers:
        raise ValidationError("Please provide text content or upload a file")

    if get_submission_for_task(db, task.id, current_user.id):
        raise ConflictError("Already submitted")

    file_url = None
    if has_file:
        success, result = await file_storage.save_file(file)
        if not success:
            raise ValidationError(result)
        file_url = result

    try:
        submission = create_submission(db, task, current_user.id, payload.model_dump(), file_url=file_url)
    except Exception:
        # Do not leave an orphaned upload behind a rejected submission
        if file_url:
            file_storage.delete_file(file_url)
        raise

    logger.info("Student %s submitted task %s", current_user.id, task.id)
    return attach_responses(db, [submission])[0]

@router.get("/tasks/{task_id}/submissions", response_model=List[SubmissionWithStudent])
def list_task_submissions(
    current_user: CurrentUser = Depends(teacher_required),
    task: Task = Depends(task_access(Relation.OWNER)),
    db: Session = Depends(get_db)
):
    return get_submissions_for_task(db, task.id)

@router.get("/submissions/all", response_model=List[SubmissionWithStudent])
def list_all_submissions(
    current_user: CurrentUser = Depends(teacher_required),
    db: Session = Depends(get_db)
):
    return get_all_submissions_for_teacher(db, current_user.id)

@router.get("/submissions/pending", response_model=List[SubmissionWithStudent])
def list_pending_submissions(
    current_user: CurrentUser = Depends(teacher_required),
    db: Session = Depends(get_db)
):
    return get_all_submissions_for_teacher(db, current_user.id, pending_only=True)

@router.patch("/submissions/{submission_id}/score", response_model=SubmissionDisplay)
def grade_submission(
    request: ScoreUpdate,
    current_user: CurrentUser = Depends(teacher_required),
    submission: Submission = Depends(submission_access(Relation.OWNER)),
    db: Session = Depends(get_db)
):
    return update_submission_score(db, submission, request.score)
