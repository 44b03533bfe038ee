"""密码哈希与 JWT 访问令牌。令牌只携带用户 ID，角色每次从 user_roles 表解析。"""
from datetime import datetime, timezone, timedelta
from typing import Any

import jwt
from jwt.exceptions import PyJWTError
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt 只处理前 72 字节，超过会抛异常
MAX_BCRYPT_PASSWORD_BYTES = 72
TOKEN_TYPE = "access"


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_BCRYPT_PASSWORD_BYTES


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(subject: str | Any, expires_delta: timedelta | None = None) -> str:
    """生成 JWT access token，subject 为 user.id。"""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"sub": str(subject), "exp": expire, "typ": TOKEN_TYPE}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str | None:
    """解码 JWT，成功返回 sub（用户 ID），过期、签名错误或类型不符返回 None。"""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except PyJWTError:
        return None
    if payload.get("typ") != TOKEN_TYPE:
        return None
    return payload.get("sub")
