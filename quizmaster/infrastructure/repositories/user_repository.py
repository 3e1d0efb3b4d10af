from typing import Optional
import logging

from sqlalchemy.orm import Session

from quizmaster.infrastructure.db.models.user_model import UserModel

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.id == user_id).first()

    def get_display_name(self, student_id: int) -> Optional[str]:
        user = self.get_by_id(student_id)
        if not user:
            logger.debug(f"User not found: user_id={student_id}")
            return None
        return user.display_name
