from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, JSON, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..base import Base


class QuizModel(Base):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    category = Column(String, nullable=False)
    difficulty_level = Column(String, nullable=False)
    course_id = Column(String, nullable=False)  # External course reference
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(String, nullable=False, default="pending")  # pending / approved / rejected
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    questions = relationship(
        "QuestionModel",
        back_populates="quiz",
        cascade="all, delete-orphan",
        order_by="QuestionModel.order",
    )


class QuestionModel(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    question_text = Column(String, nullable=False)
    question_type = Column(String, nullable=False)  # true_false / multiple_choice
    options = Column(JSON, nullable=False, default=list)
    # Exactly one key column is set, matching question_type
    correct_boolean = Column(Boolean, nullable=True)
    correct_option_index = Column(Integer, nullable=True)
    time_limit = Column(Integer, nullable=False, default=15)  # seconds
    points = Column(Integer, nullable=False)
    order = Column(Integer, nullable=False)

    quiz = relationship("QuizModel", back_populates="questions")

    __table_args__ = (
        CheckConstraint("points > 0", name="ck_question_points_positive"),
    )
