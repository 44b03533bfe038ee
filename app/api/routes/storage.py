"""公开读取 bucket 中的对象：GET /storage/{bucket}/{object_name}。"""
import mimetypes
from urllib.parse import quote

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from app.services.storage_service import resolve_object_path

router = APIRouter()


@router.get("/{bucket}/{object_name}")
async def get_object(bucket: str, object_name: str):
    path = resolve_object_path(bucket, object_name)
    if path is None:
        raise HTTPException(status_code=404, detail="file not found")
    media_type = mimetypes.guess_type(object_name)[0] or "application/octet-stream"
    # RFC 5987：文件名可能含非 ASCII 字符
    headers = {"Content-Disposition": f"inline; filename*=UTF-8''{quote(object_name)}"}
    return FileResponse(path, media_type=media_type, headers=headers)
