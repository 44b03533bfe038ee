import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, true
from sqlalchemy.sql import func

from app.core.db import Base


def new_id() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class OrderedActiveMixin:
    """练习区各表共有的排序键与启用标记。"""
    order_index = Column(Integer, nullable=False, default=0, server_default="0")
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())


class MaterialMixin(OrderedActiveMixin, TimestampMixin):
    """题目与笔记共有的字段，category_id 由子类声明（外键需要各自的列对象）。"""
    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    pdf_url = Column(Text, nullable=True)
    thumbnail_url = Column(Text, nullable=True)
    subject = Column(String(100), nullable=True)
    class_level = Column(String(50), nullable=True)
