"""Вход пользователей тенанта."""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from apps.backend.auth import AuthUser, create_user_token, get_current_user, refresh_user_token, verify_password
from apps.backend.deps import get_db
from apps.backend.models.tenant import User

router = APIRouter()


class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    token: str


class TokenResponse(BaseModel):
    token: str


@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = db.execute(select(User).where(User.email == data.email)).scalar_one_or_none()
    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return TokenResponse(token=create_user_token(user.id, user.tenant_id, user.role))


@router.post("/refresh", response_model=TokenResponse)
def refresh(data: RefreshRequest):
    token = refresh_user_token(data.token)
    if not token:
        raise HTTPException(status_code=401, detail="Invalid token")
    return TokenResponse(token=token)


@router.get("/me")
def me(user: AuthUser = Depends(get_current_user)):
    return {"userId": user.user_id, "tenantId": user.tenant_id, "role": user.role}
