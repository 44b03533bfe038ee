"""
练习区管理端：GET /admin/practice 整页数据；POST/PUT/DELETE /admin/practice/{kind}[/{item_id}] 增删改。
kind 为 questions 或 notes。写接口使用 multipart 表单，pdf 字段可选。
"""
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_optional_user
from app.core.db import get_db
from app.models.user import User
from app.schemas.practice import (
    DeleteMaterialResponse,
    MaterialKind,
    NoteDraft,
    PracticeSnapshot,
    QuestionDraft,
    SubmitMaterialResponse,
)
from app.services.context import SubmissionContext
from app.services.material_service import delete_material, load_admin_snapshot, submit_material
from app.services.storage_service import UploadedPdf, max_upload_bytes

router = APIRouter()


def get_submission_context(user: User | None = Depends(get_optional_user)) -> SubmissionContext:
    # 只带上用户 ID，角色与分类由服务层按提交顺序解析，避免校验前产生写操作
    return SubmissionContext(user_id=user.id if user else None)


async def _read_upload(pdf: UploadFile | None) -> UploadedPdf | None:
    # 浏览器未选文件时也可能提交一个空文件名的 part
    if pdf is None or not pdf.filename:
        return None
    # 只读到上限多 1 字节，超限文件由 validate_draft 判为 too-large
    data = await pdf.read(max_upload_bytes() + 1)
    return UploadedPdf(
        filename=pdf.filename,
        content_type=pdf.content_type or "",
        data=data,
    )


def _build_draft(
    kind: MaterialKind,
    *,
    title: str,
    description: str | None,
    category_id: str | None,
    difficulty_level: str,
    subject: str | None,
    class_level: str | None,
    order_index: int,
) -> QuestionDraft | NoteDraft:
    common = dict(
        title=title,
        description=description,
        category_id=category_id or None,
        subject=subject,
        class_level=class_level,
        order_index=order_index,
    )
    if kind == MaterialKind.QUESTIONS:
        return QuestionDraft(difficulty_level=difficulty_level or "medium", **common)
    return NoteDraft(**common)


@router.get("", response_model=PracticeSnapshot)
async def get_snapshot(
    ctx: SubmissionContext = Depends(get_submission_context),
    db: AsyncSession = Depends(get_db),
):
    """管理端整页数据；分类为空且当前用户是管理员时自动创建默认分类。"""
    return await load_admin_snapshot(db, ctx)


@router.post("/{kind}", response_model=SubmitMaterialResponse, status_code=201)
async def create_material(
    kind: MaterialKind,
    title: str = Form(""),
    description: str | None = Form(None),
    category_id: str | None = Form(None),
    difficulty_level: str = Form("medium"),
    subject: str | None = Form(None),
    class_level: str | None = Form(None),
    order_index: int = Form(0),
    pdf: UploadFile | None = File(None),
    ctx: SubmissionContext = Depends(get_submission_context),
    db: AsyncSession = Depends(get_db),
):
    draft = _build_draft(
        kind,
        title=title,
        description=description,
        category_id=category_id,
        difficulty_level=difficulty_level,
        subject=subject,
        class_level=class_level,
        order_index=order_index,
    )
    result = await submit_material(db, ctx, draft, await _read_upload(pdf))
    return SubmitMaterialResponse(message=result.message, item=result.item, snapshot=result.snapshot)


@router.put("/{kind}/{item_id}", response_model=SubmitMaterialResponse)
async def update_material(
    kind: MaterialKind,
    item_id: str,
    title: str = Form(""),
    description: str | None = Form(None),
    category_id: str | None = Form(None),
    difficulty_level: str = Form("medium"),
    subject: str | None = Form(None),
    class_level: str | None = Form(None),
    order_index: int = Form(0),
    pdf: UploadFile | None = File(None),
    ctx: SubmissionContext = Depends(get_submission_context),
    db: AsyncSession = Depends(get_db),
):
    """不上传 pdf 时保留原有 pdf_url。"""
    draft = _build_draft(
        kind,
        title=title,
        description=description,
        category_id=category_id,
        difficulty_level=difficulty_level,
        subject=subject,
        class_level=class_level,
        order_index=order_index,
    )
    result = await submit_material(db, ctx, draft, await _read_upload(pdf), editing_id=item_id)
    return SubmitMaterialResponse(message=result.message, item=result.item, snapshot=result.snapshot)


@router.delete("/{kind}/{item_id}", response_model=DeleteMaterialResponse)
async def remove_material(
    kind: MaterialKind,
    item_id: str,
    ctx: SubmissionContext = Depends(get_submission_context),
    db: AsyncSession = Depends(get_db),
):
    message, snapshot = await delete_material(db, ctx, kind, item_id)
    return DeleteMaterialResponse(message=message, snapshot=snapshot)
