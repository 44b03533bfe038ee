from fastapi import APIRouter

from app.api.routes.auth import router as auth_router
from app.api.routes.health import router as health_router
from app.api.routes.practice import router as practice_router
from app.api.routes.practice_admin import router as practice_admin_router
from app.api.routes.storage import router as storage_router

api_router = APIRouter()
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(health_router, tags=["health"])
api_router.include_router(practice_admin_router, prefix="/admin/practice", tags=["practice-admin"])
api_router.include_router(practice_router, prefix="/practice", tags=["practice"])
api_router.include_router(storage_router, prefix="/storage", tags=["storage"])
