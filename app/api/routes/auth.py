"""登录与注册：POST /auth/login、POST /auth/register；当前用户与角色：GET /auth/me。"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.db import get_db
from app.core.security import create_access_token, hash_password, password_too_long, verify_password
from app.models.user import User
from app.repositories.user_repository import create_user, get_user_by_username
from app.schemas.auth import AuthResponse, AuthUser, LoginRequest, MeResponse, RegisterRequest
from app.services.role_service import resolve_role

router = APIRouter()


def _ensure_password_length(password: str) -> None:
    if password_too_long(password):
        raise HTTPException(status_code=400, detail="Password is too long (max 72 bytes)")


def _auth_user(user: User) -> AuthUser:
    return AuthUser(id=user.id, name=user.name or user.username)


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(token=create_access_token(user.id), user=_auth_user(user))


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """登录：用户名+密码，成功返回 token 与 user。"""
    _ensure_password_length(body.password)
    user = await get_user_by_username(db, body.username)
    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return _auth_response(user)


@router.post("/register", response_model=AuthResponse)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """注册：用户名+密码+可选姓名，成功即登录。新用户首次校验角色时成为 student。"""
    existing = await get_user_by_username(db, body.username)
    if existing:
        raise HTTPException(status_code=400, detail="Username already exists")
    _ensure_password_length(body.password)
    user = await create_user(
        db, username=body.username, password_hash=hash_password(body.password), name=body.name
    )
    return _auth_response(user)


@router.get("/me", response_model=MeResponse)
async def me(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    auth_user = _auth_user(user)
    role = await resolve_role(db, auth_user.id)
    return MeResponse(user=auth_user, role=role.role, is_admin=role.is_admin)
