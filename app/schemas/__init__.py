"""API 请求/响应 Pydantic 模型。按模块组织，路由从本包或子模块导入。"""
from app.schemas.auth import (
    AuthResponse,
    AuthUser,
    LoginRequest,
    MeResponse,
    RegisterRequest,
)
from app.schemas.health import HealthResponse
from app.schemas.practice import (
    CatalogEntry,
    CatalogGroup,
    CatalogResponse,
    CategoryItem,
    DeleteMaterialResponse,
    MaterialKind,
    NoteDraft,
    NoteItem,
    PracticeSnapshot,
    QuestionDraft,
    QuestionItem,
    RoleInfo,
    SubmitMaterialResponse,
)

__all__ = [
    "AuthResponse",
    "AuthUser",
    "LoginRequest",
    "MeResponse",
    "RegisterRequest",
    "HealthResponse",
    "CatalogEntry",
    "CatalogGroup",
    "CatalogResponse",
    "CategoryItem",
    "DeleteMaterialResponse",
    "MaterialKind",
    "NoteDraft",
    "NoteItem",
    "PracticeSnapshot",
    "QuestionDraft",
    "QuestionItem",
    "RoleInfo",
    "SubmitMaterialResponse",
]
