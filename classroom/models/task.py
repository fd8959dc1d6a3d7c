from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, Enum, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
import enum
from classroom.db.base import Base
from classroom.utils.helpers import generate_uuid, get_utc_now

class TaskType(enum.Enum):
    TEXT_FILE = "text_file"
    QUIZ = "quiz"

class QuestionType(enum.Enum):
    MULTIPLE_CHOICE = "multiple_choice"

class Task(Base):
    __tablename__ = "tasks"
    id = Column(String(36), primary_key=True, default=generate_uuid)
    group_id = Column(String(36), ForeignKey("groups.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    task_type = Column(Enum(TaskType), nullable=False, default=TaskType.TEXT_FILE)
    due_date = Column(DateTime, nullable=False)
    file_url = Column(String, nullable=True)  # URL path to the attachment
    created_at = Column(DateTime, default=get_utc_now, nullable=False)
    deleted_at = Column(DateTime, nullable=True)

    group = relationship("Group", back_populates="tasks")
    # Responses expose these as `questions` only where a route attaches them
    question_items = relationship("Question", back_populates="task", order_by="Question.order")
    submissions = relationship("Submission", back_populates="task")

class Question(Base):
    __tablename__ = "questions"
    id = Column(String(36), primary_key=True, default=generate_uuid)
    task_id = Column(String(36), ForeignKey("tasks.id"), nullable=False, index=True)
    question_text = Column(Text, nullable=False)
    question_type = Column(Enum(QuestionType), nullable=False, default=QuestionType.MULTIPLE_CHOICE)
    options = Column(JSON, nullable=False, default=list)
    correct_answer = Column(String, nullable=False)
    order = Column(Integer, nullable=False, default=0)

    task = relationship("Task", back_populates="question_items")

class ReminderDismissal(Base):
    __tablename__ = "reminder_dismissals"
    __table_args__ = (
        UniqueConstraint("task_id", "user_id", name="uq_reminder_dismissals_task_user"),
    )
    id = Column(String(36), primary_key=True, default=generate_uuid)
    task_id = Column(String(36), ForeignKey("tasks.id"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    dismissed_at = Column(DateTime, default=get_utc_now, nullable=False)
