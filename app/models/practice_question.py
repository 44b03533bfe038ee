from sqlalchemy import CheckConstraint, Column, ForeignKey, String

from app.models.base import MaterialMixin
from app.core.db import Base

DIFFICULTY_LEVELS = ("easy", "medium", "hard")
DEFAULT_DIFFICULTY = "medium"


class PracticeQuestion(Base, MaterialMixin):
    __tablename__ = "practice_questions"
    __table_args__ = (
        CheckConstraint(
            "difficulty_level IN ('easy', 'medium', 'hard')", name="ck_practice_questions_difficulty"
        ),
    )

    category_id = Column(
        String(36), ForeignKey("practice_categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    difficulty_level = Column(
        String(10), nullable=False, default=DEFAULT_DIFFICULTY, server_default=DEFAULT_DIFFICULTY
    )
