from app.core.db import Base
from app.models.base import MaterialMixin, TimestampMixin
from app.models.user import User
from app.models.user_role import UserRole
from app.models.practice_category import PracticeCategory
from app.models.practice_question import PracticeQuestion
from app.models.practice_note import PracticeNote

__all__ = [
    "Base",
    "MaterialMixin",
    "TimestampMixin",
    "User",
    "UserRole",
    "PracticeCategory",
    "PracticeQuestion",
    "PracticeNote",
]
