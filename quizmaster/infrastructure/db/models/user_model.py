#user_model.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from ..base import Base
from sqlalchemy import UniqueConstraint


class UserModel(Base):
    __tablename__ = "users"

    ROLE_STUDENT = "student"
    ROLE_PROFESSOR = "professor"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False)  # "student" or "professor"
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("email", name="uq_email_user"),
    )

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
