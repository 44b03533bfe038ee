from sqlalchemy import CheckConstraint, Column, ForeignKey, String

from app.models.base import TimestampMixin, new_id
from app.core.db import Base

ROLE_ADMIN = "admin"
ROLE_STUDENT = "student"
ROLES = (ROLE_ADMIN, ROLE_STUDENT)


class UserRole(Base, TimestampMixin):
    __tablename__ = "user_roles"
    __table_args__ = (CheckConstraint("role IN ('admin', 'student')", name="ck_user_roles_role"),)

    id = Column(String(36), primary_key=True, default=new_id)
    # 每个用户恰好一行
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    role = Column(String(20), nullable=False, default=ROLE_STUDENT)
