"""练习资料 PDF 的对象存储：校验、生成唯一文件名、写入 bucket、生成公开访问 URL。"""
import asyncio
import logging
import re
import time
import uuid
from dataclasses import dataclass
from pathlib import Path

from app.core.config import settings
from app.core.errors import (
    AuthorizationDenied,
    GenericPersistenceFailure,
    StorageUnavailable,
    UploadRejected,
)
from app.core.storage import bucket_dir

logger = logging.getLogger(__name__)

_EXT_RE = re.compile(r"[^a-z0-9]")
_OBJECT_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass
class UploadedPdf:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def max_upload_bytes() -> int:
    return settings.max_upload_mb * 1024 * 1024


def pdf_violations(file: UploadedPdf) -> list[tuple[str, str]]:
    """返回 [(reason, message)]，为空表示通过。只看声明的 Content-Type 与大小，不读取文件内容。"""
    violations = []
    if "pdf" not in (file.content_type or "").lower():
        violations.append((UploadRejected.WRONG_TYPE, "Only PDF files are allowed"))
    if file.size > max_upload_bytes():
        violations.append((UploadRejected.TOO_LARGE, f"File size must be less than {settings.max_upload_mb}MB"))
    return violations


def generate_object_name(filename: str) -> str:
    """<毫秒时间戳>_<随机串>.<扩展名>，扩展名只保留小写字母和数字。"""
    ext = ""
    if filename and "." in filename:
        ext = _EXT_RE.sub("", filename.rsplit(".", 1)[1].lower())
    return f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.{ext or 'pdf'}"


def public_url(object_name: str, bucket: str | None = None) -> str:
    bucket = bucket or settings.storage_bucket
    return f"{settings.public_base_url}{settings.api_prefix}/storage/{bucket}/{object_name}"


def save_object(object_name: str, data: bytes) -> Path:
    """写入 bucket。目录不存在视为存储不可用，不自动创建；同名对象不覆盖。"""
    directory = bucket_dir()
    if not directory.is_dir():
        raise StorageUnavailable()
    target_path = directory / object_name
    try:
        with target_path.open("xb") as f:
            f.write(data)
    except FileExistsError as exc:
        raise UploadRejected(
            [f"A file named {object_name} already exists"], UploadRejected.NAME_COLLISION
        ) from exc
    except PermissionError as exc:
        raise AuthorizationDenied("Permission denied for file upload. Admin access required.") from exc
    except OSError as exc:
        raise GenericPersistenceFailure(f"Upload failed: {exc.strerror or exc}") from exc
    return target_path


async def upload_pdf(file: UploadedPdf) -> str:
    """上传 PDF 并返回公开 URL。"""
    violations = pdf_violations(file)
    if violations:
        raise UploadRejected([msg for _, msg in violations], violations[0][0])
    object_name = generate_object_name(file.filename)
    logger.info("[storage] 上传文件 %s -> %s (%d bytes)", file.filename, object_name, file.size)
    try:
        await asyncio.to_thread(save_object, object_name, file.data)
    except Exception:
        logger.exception("[storage] 上传失败 %s", object_name)
        raise
    return public_url(object_name)


def resolve_object_path(bucket: str, object_name: str) -> Path | None:
    """公开读取：只允许已配置的 bucket 和不含路径分隔符的对象名，不存在返回 None。"""
    if bucket != settings.storage_bucket or not _OBJECT_NAME_RE.match(object_name):
        return None
    if object_name.startswith("."):
        return None
    path = bucket_dir(bucket) / object_name
    return path if path.is_file() else None
