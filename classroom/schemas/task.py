import json
from datetime import datetime
from typing import Any, List, Optional

from pydantic import field_validator, model_validator

from classroom.models.task import QuestionType, TaskType
from classroom.schemas.common import CamelModel, UtcDatetime
from classroom.utils.quiz import resolve_option_index

class QuestionCreate(CamelModel):
    question_text: str
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    options: List[str] = []
    correct_answer: str

    @field_validator("question_text")
    @classmethod
    def text_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("All questions must have text")
        return value

    @field_validator("options", mode="before")
    @classmethod
    def parse_options(cls, value: Any) -> List[str]:
        # Older clients send the options as a JSON encoded string
        if value is None:
            return []
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                raise ValueError("Failed to parse question options")
        if not isinstance(value, list):
            raise ValueError("Question options must be a list")
        return ["" if option is None else str(option) for option in value]

    @field_validator("correct_answer")
    @classmethod
    def answer_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("All questions must have a correct answer selected")
        return value

    @model_validator(mode="after")
    def answer_matches_option(self):
        if sum(1 for option in self.options if option.strip()) < 2:
            raise ValueError("Questions need at least 2 options")
        if resolve_option_index(self.options, self.correct_answer) is None:
            raise ValueError("The selected correct answer must be one of the available options")
        return self

class TaskCreate(CamelModel):
    title: str
    description: str
    due_date: datetime
    task_type: TaskType = TaskType.TEXT_FILE
    questions: List[QuestionCreate] = []

    @field_validator("title")
    @classmethod
    def title_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Title must be at least 2 characters")
        return value

    @field_validator("description")
    @classmethod
    def description_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Description is required")
        return value

    @field_validator("due_date", mode="before")
    @classmethod
    def due_date_required(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("Due date is required")
        return value

    @model_validator(mode="after")
    def quiz_has_questions(self):
        if self.task_type == TaskType.QUIZ:
            if not self.questions:
                raise ValueError("At least one question is required")
        else:
            self.questions = []
        return self

class QuestionDisplay(CamelModel):
    id: str
    question_text: str
    question_type: QuestionType
    options: List[str]
    correct_answer: Optional[str] = None
    order: int

class TaskDisplay(CamelModel):
    id: str
    group_id: str
    title: str
    description: str
    task_type: TaskType
    due_date: UtcDatetime
    file_url: Optional[str] = None
    questions: Optional[List[QuestionDisplay]] = None

class TaskWithStatus(TaskDisplay):
    # Student view
    submission_status: Optional[str] = None
    score: Optional[int] = None
    group_name: Optional[str] = None
    # Teacher view
    submission_count: Optional[int] = None
    total_students: Optional[int] = None

class TaskDetails(TaskDisplay):
    group_name: str
    teacher_name: str
