"""练习区（分类、题目、笔记）请求/响应模型。字段名与数据库列一致（snake_case）。"""
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class MaterialKind(str, Enum):
    QUESTIONS = "questions"
    NOTES = "notes"


KIND_LABELS = {MaterialKind.QUESTIONS: "Question", MaterialKind.NOTES: "Note"}


class RoleInfo(BaseModel):
    role: str = Field(..., description="admin / student")
    is_admin: bool = Field(False, description="是否管理员")


class CategoryItem(BaseModel):
    id: str
    name: str
    description: str | None = None
    icon: str = "📚"
    order_index: int = 0
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class _MaterialItem(BaseModel):
    id: str
    category_id: str
    title: str
    description: str | None = None
    pdf_url: str | None = None
    thumbnail_url: str | None = None
    subject: str | None = None
    class_level: str | None = None
    order_index: int = 0
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class NoteItem(_MaterialItem):
    kind: Literal["notes"] = "notes"


class QuestionItem(_MaterialItem):
    kind: Literal["questions"] = "questions"
    difficulty_level: str = "medium"


class _DraftBase(BaseModel):
    """管理端表单公共字段。只做类型转换，业务校验在 material_service.validate_draft 中累积进行。"""
    title: str = ""
    description: str | None = None
    category_id: str | None = Field(None, description="为空时自动选用第一个分类")
    subject: str | None = None
    class_level: str | None = None
    order_index: int = 0


class QuestionDraft(_DraftBase):
    kind: Literal["questions"] = "questions"
    difficulty_level: str = "medium"


class NoteDraft(_DraftBase):
    kind: Literal["notes"] = "notes"


class PracticeSnapshot(BaseModel):
    """管理端整页数据。每次写操作成功后整体重新拉取，不做增量更新。"""
    role: RoleInfo | None = None
    categories: list[CategoryItem] = Field(default_factory=list)
    questions: list[QuestionItem] = Field(default_factory=list)
    notes: list[NoteItem] = Field(default_factory=list)
    notice: str | None = Field(None, description="加载失败时的提示，列表此时为空")


class SubmitMaterialResponse(BaseModel):
    message: str = Field(..., description="如 Question created successfully")
    item: Annotated[Union[QuestionItem, NoteItem], Field(discriminator="kind")]
    snapshot: PracticeSnapshot


class DeleteMaterialResponse(BaseModel):
    message: str
    snapshot: PracticeSnapshot


class CatalogEntry(BaseModel):
    id: str
    title: str
    description: str | None = None
    pdf_url: str | None = None
    thumbnail_url: str | None = None
    difficulty_level: str | None = Field(None, description="仅题目有")
    subject: str | None = None
    class_level: str | None = None
    pdf_available: bool = False
    notice: str | None = Field(None, description="无 PDF 时的提示")


class CatalogGroup(BaseModel):
    category: CategoryItem
    items: list[CatalogEntry] = Field(default_factory=list)


class CatalogResponse(BaseModel):
    kind: MaterialKind
    groups: list[CatalogGroup] = Field(default_factory=list)
    total: int = 0
    notice: str | None = None
