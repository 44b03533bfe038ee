import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from app.core.errors import (
    AuthenticationRequired,
    AuthorizationDenied,
    ForeignKeyViolation,
    GenericPersistenceFailure,
    MaterialNotFound,
    RequiredFieldMissing,
    StorageUnavailable,
    UploadRejected,
    ValidationFailed,
)
from app.models import PracticeCategory, PracticeNote, PracticeQuestion
from app.repositories import material_repository
from app.repositories.material_repository import map_db_error
from app.schemas.practice import MaterialKind, NoteDraft, QuestionDraft, RoleInfo
from app.services.category_service import fetch_categories
from app.services.context import SubmissionContext
from app.services.material_service import (
    LOAD_FAILED_NOTICE,
    delete_material,
    load_admin_snapshot,
    submit_material,
    validate_draft,
)
from app.services.storage_service import UploadedPdf

PDF_BYTES = b"%PDF-1.4\n%test\n"


def pdf(name="paper.pdf", content_type="application/pdf", data=PDF_BYTES):
    return UploadedPdf(filename=name, content_type=content_type, data=data)


async def _count(db, model):
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.fixture
async def category(db):
    row = PracticeCategory(name="Question Papers", icon="📝", order_index=1)
    db.add(row)
    await db.commit()
    return row


@pytest.fixture
def admin_ctx(admin_user):
    return SubmissionContext(user_id=admin_user.id)


# ----- 表单校验 -----


@pytest.mark.parametrize("title", ["", "   ", "x" * 256])
def test_bad_title_is_rejected(title):
    with pytest.raises(ValidationFailed) as exc_info:
        validate_draft(QuestionDraft(title=title))
    assert not isinstance(exc_info.value, UploadRejected)
    assert len(exc_info.value.errors) == 1


def test_title_at_limit_passes():
    validate_draft(NoteDraft(title="x" * 255))


def test_violations_are_accumulated():
    draft = QuestionDraft(title="", description="d" * 1001, difficulty_level="extreme")
    with pytest.raises(ValidationFailed) as exc_info:
        validate_draft(draft)
    assert len(exc_info.value.errors) == 3


def test_non_pdf_upload_is_rejected_even_with_valid_fields():
    with pytest.raises(UploadRejected) as exc_info:
        validate_draft(QuestionDraft(title="Algebra"), pdf("notes.docx", "application/msword"))
    assert exc_info.value.reason == UploadRejected.WRONG_TYPE


def test_oversized_upload_is_rejected():
    big = pdf(data=b"0" * (10 * 1024 * 1024 + 1))
    with pytest.raises(UploadRejected) as exc_info:
        validate_draft(NoteDraft(title="Notes"), big)
    assert exc_info.value.reason == UploadRejected.TOO_LARGE


def test_upload_rejection_still_reports_field_errors():
    with pytest.raises(UploadRejected) as exc_info:
        validate_draft(QuestionDraft(title=""), pdf("a.png", "image/png"))
    assert "Title is required" in exc_info.value.errors
    assert "Only PDF files are allowed" in exc_info.value.errors


async def test_invalid_submission_writes_nothing(db, admin_ctx, bucket):
    with pytest.raises(ValidationFailed):
        await submit_material(db, admin_ctx, QuestionDraft(title=" "), pdf())
    assert await _count(db, PracticeQuestion) == 0
    # 分类初始化也不应发生
    assert await _count(db, PracticeCategory) == 0
    assert list(bucket.iterdir()) == []


# ----- 分类选择 -----


async def test_empty_category_uses_first_by_order_index(db, admin_ctx):
    db.add_all([
        PracticeCategory(name="Second", order_index=2),
        PracticeCategory(name="First", order_index=1),
    ])
    await db.commit()
    result = await submit_material(db, admin_ctx, NoteDraft(title="Chapter 1"))
    first = (await db.execute(select(PracticeCategory).where(PracticeCategory.name == "First"))).scalar_one()
    assert result.item.category_id == first.id


async def test_no_categories_bootstraps_defaults(db, admin_ctx):
    result = await submit_material(db, admin_ctx, QuestionDraft(title="Sample paper"))
    categories = await fetch_categories(db)
    assert len(categories) == 4
    assert result.item.category_id == categories[0].id
    assert result.snapshot.categories == categories


# ----- 权限 -----


async def test_student_cannot_write(db, student_user, category):
    ctx = SubmissionContext(user_id=student_user.id)
    with pytest.raises(AuthorizationDenied):
        await submit_material(db, ctx, QuestionDraft(title="Algebra"))
    assert await _count(db, PracticeQuestion) == 0


async def test_user_without_role_cannot_write(db, roleless_user, category):
    ctx = SubmissionContext(user_id=roleless_user.id)
    with pytest.raises(AuthorizationDenied):
        await submit_material(db, ctx, NoteDraft(title="Notes"))
    assert await _count(db, PracticeNote) == 0


async def test_anonymous_caller_must_sign_in(db, category):
    with pytest.raises(AuthenticationRequired):
        await submit_material(db, SubmissionContext(user_id=None), NoteDraft(title="Notes"))


async def test_stale_student_role_is_reverified(db, admin_user, category):
    ctx = SubmissionContext(user_id=admin_user.id, role=RoleInfo(role="student", is_admin=False))
    result = await submit_material(db, ctx, NoteDraft(title="Notes"))
    assert result.item.title == "Notes"
    assert ctx.role.is_admin


async def test_delete_requires_admin(db, student_user, admin_ctx, category):
    created = await submit_material(db, admin_ctx, NoteDraft(title="Notes"))
    ctx = SubmissionContext(user_id=student_user.id)
    with pytest.raises(AuthorizationDenied):
        await delete_material(db, ctx, MaterialKind.NOTES, created.item.id)
    assert await _count(db, PracticeNote) == 1


# ----- 写库 -----


async def test_question_round_trip(db, admin_ctx, category):
    draft = QuestionDraft(
        title="Algebra Basics",
        difficulty_level="easy",
        subject="Math",
        class_level="9",
        category_id=category.id,
    )
    result = await submit_material(db, admin_ctx, draft)
    assert result.message == "Question created successfully"

    listed = result.snapshot.questions
    assert len(listed) == 1
    item = listed[0]
    assert item.id
    assert item.title == "Algebra Basics"
    assert item.difficulty_level == "easy"
    assert item.subject == "Math"
    assert item.class_level == "9"
    assert item.is_active is True
    assert item.pdf_url is None


async def test_upload_sets_pdf_url(db, admin_ctx, category, bucket):
    result = await submit_material(db, admin_ctx, NoteDraft(title="Chapter 2"), pdf())
    stored = list(bucket.iterdir())
    assert len(stored) == 1
    assert result.item.pdf_url.endswith(f"/storage/practice-materials/{stored[0].name}")
    assert stored[0].read_bytes() == PDF_BYTES


async def test_edit_without_file_keeps_pdf_url(db, admin_ctx, category):
    created = await submit_material(db, admin_ctx, QuestionDraft(title="Paper 2019"), pdf())
    original_url = created.item.pdf_url

    updated = await submit_material(
        db, admin_ctx, QuestionDraft(title="Paper 2019 (revised)", difficulty_level="hard"),
        editing_id=created.item.id,
    )
    assert updated.message == "Question updated successfully"
    assert updated.item.pdf_url == original_url
    assert updated.item.title == "Paper 2019 (revised)"
    assert updated.item.difficulty_level == "hard"


async def test_edit_with_file_replaces_pdf_url(db, admin_ctx, category):
    created = await submit_material(db, admin_ctx, NoteDraft(title="Notes"), pdf())
    updated = await submit_material(
        db, admin_ctx, NoteDraft(title="Notes"), pdf("v2.pdf"), editing_id=created.item.id
    )
    assert updated.item.pdf_url != created.item.pdf_url


async def test_edit_missing_record(db, admin_ctx, category):
    with pytest.raises(MaterialNotFound):
        await submit_material(db, admin_ctx, NoteDraft(title="Ghost"), editing_id="missing")


async def test_unknown_category_is_foreign_key_violation(db, admin_ctx, category):
    with pytest.raises(ForeignKeyViolation) as exc_info:
        await submit_material(db, admin_ctx, NoteDraft(title="Notes", category_id="no-such-category"))
    assert exc_info.value.message == "Invalid category selected."
    assert await _count(db, PracticeNote) == 0


async def test_missing_bucket_is_storage_unavailable(db, admin_ctx, category, bucket):
    bucket.rmdir()
    with pytest.raises(StorageUnavailable):
        await submit_material(db, admin_ctx, NoteDraft(title="Notes"), pdf())
    assert await _count(db, PracticeNote) == 0


async def test_delete_only_touches_its_own_table(db, admin_ctx, category):
    question = await submit_material(db, admin_ctx, QuestionDraft(title="Q1"))
    await submit_material(db, admin_ctx, NoteDraft(title="N1"))

    message, snapshot = await delete_material(db, admin_ctx, MaterialKind.QUESTIONS, question.item.id)
    assert message == "Question deleted successfully"
    assert snapshot.questions == []
    assert [n.title for n in snapshot.notes] == ["N1"]


async def test_delete_missing_record(db, admin_ctx):
    with pytest.raises(MaterialNotFound):
        await delete_material(db, admin_ctx, MaterialKind.NOTES, "missing")


# ----- 管理端整页数据 -----


async def test_snapshot_visibility_by_role(db, admin_user, student_user, category):
    db.add_all([
        PracticeNote(title="Active", category_id=category.id, order_index=1),
        PracticeNote(title="Inactive", category_id=category.id, order_index=2, is_active=False),
    ])
    await db.commit()

    admin_view = await load_admin_snapshot(db, SubmissionContext(user_id=admin_user.id))
    assert [n.title for n in admin_view.notes] == ["Active", "Inactive"]
    assert admin_view.role.is_admin

    student_view = await load_admin_snapshot(db, SubmissionContext(user_id=student_user.id))
    assert [n.title for n in student_view.notes] == ["Active"]
    assert student_view.role.role == "student"


async def test_snapshot_bootstraps_categories_for_admin(db, admin_user):
    snapshot = await load_admin_snapshot(db, SubmissionContext(user_id=admin_user.id))
    assert len(snapshot.categories) == 4
    assert snapshot.notice is None


async def test_snapshot_load_failure_returns_notice(db, admin_user, category, monkeypatch):
    async def broken(db, active_only=False):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(material_repository, "list_questions", broken)
    snapshot = await load_admin_snapshot(db, SubmissionContext(user_id=admin_user.id))
    assert snapshot.notice == LOAD_FAILED_NOTICE
    assert snapshot.categories == []
    assert snapshot.questions == []
    assert snapshot.role.is_admin


async def test_edit_without_category_keeps_current_one(db, admin_ctx, category):
    second = PracticeCategory(name="Study Notes", order_index=2)
    db.add(second)
    await db.commit()
    created = await submit_material(db, admin_ctx, NoteDraft(title="Chapter 3", category_id=second.id))

    updated = await submit_material(db, admin_ctx, NoteDraft(title="Chapter 3 (v2)"), editing_id=created.item.id)
    assert updated.item.category_id == second.id


# ----- 数据库错误映射 -----


class _PgError(Exception):
    def __init__(self, sqlstate):
        super().__init__(f"sqlstate {sqlstate}")
        self.sqlstate = sqlstate


def test_foreign_key_sqlstate_maps_to_invalid_category():
    exc = IntegrityError("INSERT", {}, _PgError("23503"))
    assert isinstance(map_db_error(exc), ForeignKeyViolation)


@pytest.mark.parametrize(
    "orig",
    [_PgError("23502"), Exception("NOT NULL constraint failed: practice_notes.title")],
)
def test_not_null_maps_to_required_field_missing(orig):
    mapped = map_db_error(IntegrityError("INSERT", {}, orig))
    assert isinstance(mapped, RequiredFieldMissing)


@pytest.mark.parametrize(
    "exc",
    [
        OperationalError("INSERT", {}, Exception("database is locked")),
        IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: practice_notes.id")),
    ],
)
def test_other_errors_map_to_generic_failure(exc):
    mapped = map_db_error(exc)
    assert isinstance(mapped, GenericPersistenceFailure)
    assert mapped.status_code == 500


async def test_write_failure_is_mapped_and_rolled_back(db, admin_ctx, category, monkeypatch):
    async def broken_commit():
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", broken_commit)
    with pytest.raises(GenericPersistenceFailure):
        await submit_material(db, admin_ctx, NoteDraft(title="Notes", category_id=category.id))
    assert await _count(db, PracticeNote) == 0
