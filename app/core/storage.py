from pathlib import Path

from app.core.config import settings


def bucket_dir(bucket: str | None = None) -> Path:
    return Path(settings.storage_dir) / (bucket or settings.storage_bucket)


def ensure_storage_dirs() -> None:
    bucket_dir().mkdir(parents=True, exist_ok=True)
