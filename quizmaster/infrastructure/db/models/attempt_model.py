from sqlalchemy import Column, Integer, ForeignKey, DateTime, Boolean, Float, Index, UniqueConstraint, text
from sqlalchemy.orm import relationship
from ..base import Base


class AttemptModel(Base):
    __tablename__ = "attempts"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    total_score = Column(Float, nullable=False, default=0.0)
    max_score = Column(Float, nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)  # NULL while in progress
    time_taken = Column(Integer, nullable=False, default=0)  # seconds, set on completion

    # Relationships
    answers = relationship(
        "AnswerModel",
        back_populates="attempt",
        cascade="all, delete-orphan",
        order_by="AnswerModel.id",
    )

    __table_args__ = (
        # At most one in-progress attempt per student and quiz
        Index(
            "uq_attempts_in_progress",
            "student_id",
            "quiz_id",
            unique=True,
            sqlite_where=text("completed_at IS NULL"),
            postgresql_where=text("completed_at IS NULL"),
        ),
    )


class AnswerModel(Base):
    __tablename__ = "answers"

    id = Column(Integer, primary_key=True, index=True)
    attempt_id = Column(Integer, ForeignKey("attempts.id", ondelete="CASCADE"), nullable=False)
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=False)
    submitted_boolean = Column(Boolean, nullable=True)
    submitted_option_index = Column(Integer, nullable=True)
    is_correct = Column(Boolean, nullable=False)
    time_to_answer = Column(Integer, nullable=False)  # seconds
    points_earned = Column(Float, nullable=False)
    answered_at = Column(DateTime(timezone=True), nullable=False)

    attempt = relationship("AttemptModel", back_populates="answers")

    __table_args__ = (
        UniqueConstraint("attempt_id", "question_id", name="uq_answer_per_question"),
    )
