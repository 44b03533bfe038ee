from sqlalchemy import Column, String, Text

from app.models.base import OrderedActiveMixin, TimestampMixin, new_id
from app.core.db import Base

DEFAULT_ICON = "📚"


class PracticeCategory(Base, OrderedActiveMixin, TimestampMixin):
    __tablename__ = "practice_categories"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    icon = Column(String(16), nullable=False, default=DEFAULT_ICON, server_default=DEFAULT_ICON)
