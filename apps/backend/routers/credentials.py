"""Exotel credentials of the caller's tenant."""
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from apps.backend.auth import AuthUser, get_current_user, require_role
from apps.backend.deps import get_db
from apps.backend.services.credentials import create_credential, list_credentials, serialize_credential

router = APIRouter()


class CredentialCreate(BaseModel):
    label: str = Field(min_length=1)
    apiKey: str = Field(min_length=1)
    apiToken: str = Field(min_length=1)
    subdomain: str = Field(min_length=1)
    sid: str = Field(min_length=1)
    region: str | None = None


@router.get("")
def get_credentials(
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
):
    return [serialize_credential(c) for c in list_credentials(db, user.tenant_id)]


@router.post("", status_code=201)
def post_credential(
    data: CredentialCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_role("ADMIN")),
):
    cred = create_credential(
        db,
        user.tenant_id,
        label=data.label,
        api_key=data.apiKey,
        api_token=data.apiToken,
        subdomain=data.subdomain,
        sid=data.sid,
        region=data.region,
    )
    return serialize_credential(cred)
