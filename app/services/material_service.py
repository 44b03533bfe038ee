"""
管理端练习资料（题目/笔记）的增删改。

提交顺序固定：表单校验 -> 分类选择 -> 权限校验 -> 上传 PDF -> 写库。
任一步失败即中止后续步骤；已上传的文件不做回滚。写操作成功后整体重新拉取分类/题目/笔记。
"""
import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    AuthenticationRequired,
    AuthorizationDenied,
    CategoryResolutionFailed,
    UploadRejected,
    ValidationFailed,
)
from app.models.practice_question import DIFFICULTY_LEVELS
from app.repositories import material_repository as repo
from app.schemas.practice import (
    KIND_LABELS,
    MaterialKind,
    NoteDraft,
    NoteItem,
    PracticeSnapshot,
    QuestionDraft,
    QuestionItem,
)
from app.services.category_service import load_categories, resolve_category_id
from app.services.context import SubmissionContext
from app.services.role_service import resolve_role
from app.services.storage_service import UploadedPdf, pdf_violations, upload_pdf

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 1000
LOAD_FAILED_NOTICE = "Failed to load practice data"


@dataclass
class SubmitResult:
    message: str
    item: QuestionItem | NoteItem
    snapshot: PracticeSnapshot


def validate_draft(draft: QuestionDraft | NoteDraft, file: UploadedPdf | None = None) -> None:
    """不做任何 I/O 的表单校验，收集全部违规项后一次性抛出。有文件问题时抛 UploadRejected。"""
    errors = []
    title = (draft.title or "").strip()
    if not title:
        errors.append("Title is required")
    elif len(title) > MAX_TITLE_LENGTH:
        errors.append(f"Title must be at most {MAX_TITLE_LENGTH} characters")
    if draft.description and len(draft.description) > MAX_DESCRIPTION_LENGTH:
        errors.append(f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters")
    if isinstance(draft, QuestionDraft) and draft.difficulty_level not in DIFFICULTY_LEVELS:
        errors.append("Difficulty must be one of: " + ", ".join(DIFFICULTY_LEVELS))

    file_violations = pdf_violations(file) if file is not None else []
    errors.extend(msg for _, msg in file_violations)
    if file_violations:
        raise UploadRejected(errors, file_violations[0][0])
    if errors:
        raise ValidationFailed(errors)


async def ensure_admin(db: AsyncSession, ctx: SubmissionContext) -> None:
    """已知是管理员则直接放行，否则重新解析角色。"""
    if ctx.user_id is None:
        raise AuthenticationRequired()
    if ctx.known_admin:
        return
    ctx.role = await resolve_role(db, ctx.user_id)
    if not ctx.role.is_admin:
        logger.warning("[material] user_id=%s role=%s 无管理权限", ctx.user_id, ctx.role.role)
        raise AuthorizationDenied()


def _optional(value: str | None) -> str | None:
    value = (value or "").strip()
    return value or None


def _record_values(draft: QuestionDraft | NoteDraft, category_id: str, pdf_url: str | None) -> dict:
    values = {
        "title": draft.title.strip(),
        "description": _optional(draft.description),
        "category_id": category_id,
        "subject": _optional(draft.subject),
        "class_level": _optional(draft.class_level),
        "order_index": draft.order_index,
        "pdf_url": pdf_url,
        "is_active": True,
    }
    if isinstance(draft, QuestionDraft):
        values["difficulty_level"] = draft.difficulty_level
    return values


async def _existing_item(db: AsyncSession, kind: MaterialKind, item_id: str):
    getter = repo.get_question if kind == MaterialKind.QUESTIONS else repo.get_note
    return await getter(db, item_id)


async def load_admin_snapshot(db: AsyncSession, ctx: SubmissionContext) -> PracticeSnapshot:
    """
    管理端整页数据：管理员看到全部记录（含未启用），其他人只看到启用的记录。
    加载失败时返回空列表和提示，不让页面报错。
    """
    if ctx.user_id is not None and ctx.role is None:
        ctx.role = await resolve_role(db, ctx.user_id)
    active_only = not ctx.known_admin
    try:
        categories = await load_categories(db, ctx.role)
        questions = await repo.list_questions(db, active_only=active_only)
        notes = await repo.list_notes(db, active_only=active_only)
    except (SQLAlchemyError, CategoryResolutionFailed) as exc:
        await db.rollback()
        logger.error("[material] 加载练习数据失败: %s", exc)
        return PracticeSnapshot(role=ctx.role, notice=LOAD_FAILED_NOTICE)
    ctx.categories = categories
    return PracticeSnapshot(
        role=ctx.role,
        categories=categories,
        questions=[QuestionItem.model_validate(q) for q in questions],
        notes=[NoteItem.model_validate(n) for n in notes],
    )


async def submit_material(
    db: AsyncSession,
    ctx: SubmissionContext,
    draft: QuestionDraft | NoteDraft,
    file: UploadedPdf | None = None,
    editing_id: str | None = None,
) -> SubmitResult:
    kind = MaterialKind(draft.kind)
    validate_draft(draft, file)
    existing = await _existing_item(db, kind, editing_id) if editing_id else None
    # 编辑时表单未带分类，沿用记录原分类
    category_id = draft.category_id or (existing.category_id if existing is not None else None)
    category_id = await resolve_category_id(db, ctx, category_id)
    await ensure_admin(db, ctx)

    if file is not None:
        pdf_url = await upload_pdf(file)
    elif existing is not None:
        # 编辑时未选择新文件，保留原 PDF
        pdf_url = existing.pdf_url
    else:
        pdf_url = None

    values = _record_values(draft, category_id, pdf_url)
    if kind == MaterialKind.QUESTIONS:
        if editing_id:
            item = await repo.update_question(db, editing_id, values)
        else:
            item = await repo.create_question(db, values)
        saved = QuestionItem.model_validate(item)
    else:
        if editing_id:
            item = await repo.update_note(db, editing_id, values)
        else:
            item = await repo.create_note(db, values)
        saved = NoteItem.model_validate(item)

    action = "updated" if editing_id else "created"
    logger.info("[material] %s %s id=%s by user_id=%s", kind.value, action, saved.id, ctx.user_id)
    snapshot = await load_admin_snapshot(db, ctx)
    return SubmitResult(
        message=f"{KIND_LABELS[kind]} {action} successfully",
        item=saved,
        snapshot=snapshot,
    )


async def delete_material(
    db: AsyncSession, ctx: SubmissionContext, kind: MaterialKind, item_id: str
) -> tuple[str, PracticeSnapshot]:
    """立即物理删除，不可恢复；只影响 kind 对应的表。"""
    await ensure_admin(db, ctx)
    if kind == MaterialKind.QUESTIONS:
        await repo.delete_question(db, item_id)
    else:
        await repo.delete_note(db, item_id)
    logger.info("[material] %s deleted id=%s by user_id=%s", kind.value, item_id, ctx.user_id)
    snapshot = await load_admin_snapshot(db, ctx)
    return f"{KIND_LABELS[kind]} deleted successfully", snapshot
