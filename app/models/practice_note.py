from sqlalchemy import Column, ForeignKey, String

from app.models.base import MaterialMixin
from app.core.db import Base


class PracticeNote(Base, MaterialMixin):
    __tablename__ = "practice_notes"

    category_id = Column(
        String(36), ForeignKey("practice_categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
