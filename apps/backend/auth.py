"""Аутентификация пользователей тенанта (JWT)."""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from jose import JWTError, jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from apps.backend.config import get_settings

security = HTTPBearer(auto_error=False)

ROLES = ("ADMIN", "EDITOR", "VIEWER")

# bcrypt limit; pass as bytes to avoid passlib's internal 72-byte test crash
_MAX_PW_BYTES = 72


@dataclass(frozen=True)
class AuthUser:
    user_id: str
    tenant_id: str
    role: str


def _to_bytes(s: str) -> bytes:
    b = s.encode("utf-8")
    return b[: _MAX_PW_BYTES] if len(b) > _MAX_PW_BYTES else b


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_to_bytes(plain), hashed.encode() if isinstance(hashed, str) else hashed)
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(_to_bytes(password), bcrypt.gensalt()).decode()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    s = get_settings()
    to_encode = data.copy()
    exp = expires_delta or timedelta(minutes=s.jwt_expire_minutes)
    to_encode.update({"exp": datetime.utcnow() + exp})
    return jwt.encode(to_encode, s.jwt_secret, algorithm=s.jwt_algorithm)


def create_user_token(user_id: str, tenant_id: str, role: str) -> str:
    return create_access_token({"sub": str(user_id), "tenant_id": str(tenant_id), "role": role})


def decode_token(token: str) -> Optional[dict]:
    s = get_settings()
    try:
        return jwt.decode(token, s.jwt_secret, algorithms=[s.jwt_algorithm])
    except JWTError:
        return None


def _user_from_payload(payload: dict | None) -> AuthUser | None:
    if not payload or not payload.get("sub") or not payload.get("tenant_id"):
        return None
    role = payload.get("role")
    if role not in ROLES:
        return None
    return AuthUser(user_id=str(payload["sub"]), tenant_id=str(payload["tenant_id"]), role=role)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthUser:
    if not credentials:
        raise HTTPException(status_code=401, detail="Unauthorized")
    user = _user_from_payload(decode_token(credentials.credentials))
    if not user:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def require_role(*roles: str):
    """Dependency factory: current user must have one of `roles`."""

    async def _check(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Forbidden")
        return user

    return _check


def refresh_user_token(token: str) -> Optional[str]:
    user = _user_from_payload(decode_token(token))
    if not user:
        return None
    return create_user_token(user.user_id, user.tenant_id, user.role)
