from typing import Annotated, List, Optional
from pydantic import Field
from classroom.schemas.common import CamelModel, UtcDatetime

class AnswerCreate(CamelModel):
    question_id: str
    answer: str

class SubmissionCreate(CamelModel):
    text_content: Optional[str] = None
    answers: List[AnswerCreate] = []

class ScoreUpdate(CamelModel):
    score: Annotated[int, Field(strict=True, ge=0, le=100)]

class QuestionResponseDisplay(CamelModel):
    id: str
    question_id: str
    answer: str
    is_correct: bool

class SubmissionDisplay(CamelModel):
    id: str
    task_id: str
    student_id: str
    text_content: Optional[str] = None
    file_url: Optional[str] = None
    submitted_at: UtcDatetime
    score: Optional[int] = None
    responses: Optional[List[QuestionResponseDisplay]] = None

class SubmissionWithStudent(SubmissionDisplay):
    student_name: str
    student_email: str
    task_title: Optional[str] = None
    group_name: Optional[str] = None
