from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, DateTime, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from classroom.db.base import Base
from classroom.utils.helpers import generate_uuid, get_utc_now

class Submission(Base):
    __tablename__ = "submissions"
    __table_args__ = (
        UniqueConstraint("task_id", "student_id", name="uq_submissions_task_student"),
        CheckConstraint("score IS NULL OR (score >= 0 AND score <= 100)", name="ck_submissions_score_range"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    task_id = Column(String(36), ForeignKey("tasks.id"), nullable=False, index=True)
    student_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    text_content = Column(Text, nullable=True)
    file_url = Column(String, nullable=True)
    submitted_at = Column(DateTime, default=get_utc_now, nullable=False)
    score = Column(Integer, nullable=True)  # None until graded

    task = relationship("Task", back_populates="submissions")
    student = relationship("User", back_populates="submissions")
    response_items = relationship("QuestionResponse", back_populates="submission")

class QuestionResponse(Base):
    __tablename__ = "question_responses"
    __table_args__ = (
        UniqueConstraint("submission_id", "question_id", name="uq_question_responses_submission_question"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    submission_id = Column(String(36), ForeignKey("submissions.id"), nullable=False, index=True)
    question_id = Column(String(36), ForeignKey("questions.id"), nullable=False)
    answer = Column(String, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)

    submission = relationship("Submission", back_populates="response_items")
