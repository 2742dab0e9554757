"""ISV onboarding links."""
import logging
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from apps.backend.auth import AuthUser, get_current_user
from apps.backend.clients.exotel import ExotelClient
from apps.backend.config import get_settings
from apps.backend.deps import get_db, get_exotel_client
from apps.backend.errors import UpstreamError, ValidationError
from apps.backend.models.onboarding_link import OnboardingLink
from apps.backend.services.credentials import get_tenant_credential, to_gateway_credential
from apps.backend.services.extraction import extract_onboarding

router = APIRouter()
logger = logging.getLogger(__name__)


class OnboardingCreate(BaseModel):
    count: int = Field(default=1, ge=1, le=50)
    credentialId: str | None = None


def serialize_link(link: OnboardingLink) -> dict:
    return {
        "id": link.id,
        "tenantId": link.tenant_id,
        "credentialId": link.credential_id,
        "url": link.url,
        "token": link.token,
        "expiresAt": link.expires_at.isoformat() if link.expires_at else None,
        "remainingUses": link.remaining_uses,
        "createdAt": link.created_at.isoformat() if link.created_at else None,
    }


@router.get("")
def list_links(
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
):
    q = select(OnboardingLink).where(OnboardingLink.tenant_id == user.tenant_id).order_by(
        OnboardingLink.created_at.desc()
    )
    return [serialize_link(link) for link in db.execute(q).scalars().all()]


@router.get("/validate")
def validate_link(
    token: str | None = Query(None),
    credentialId: str | None = Query(None),
    db: Session = Depends(get_db),
    client: ExotelClient = Depends(get_exotel_client),
    user: AuthUser = Depends(get_current_user),
):
    if not token:
        raise ValidationError("token required")
    cred = get_tenant_credential(db, user.tenant_id, credentialId)
    if not cred:
        raise ValidationError("Credential required")
    return client.validate_onboarding_token(to_gateway_credential(cred), token)


@router.post("", status_code=201)
def create_links(
    data: OnboardingCreate,
    db: Session = Depends(get_db),
    client: ExotelClient = Depends(get_exotel_client),
    user: AuthUser = Depends(get_current_user),
):
    cred = get_tenant_credential(db, user.tenant_id, data.credentialId)
    if not cred:
        raise ValidationError("Credential required")
    s = get_settings()
    gateway_cred = to_gateway_credential(cred)
    links: list[OnboardingLink] = []
    for _ in range(data.count):
        result = client.create_onboarding_link(gateway_cred)
        url, token = extract_onboarding(result)
        if not url or not token:
            logger.warning("onboarding_response_incomplete tenant_id=%s issued=%s", user.tenant_id, len(links))
            raise UpstreamError("Exotel onboarding response missing onboarding_url/access_token", body=result)
        link = OnboardingLink(
            tenant_id=user.tenant_id,
            credential_id=cred.id,
            url=url,
            token=token,
            expires_at=datetime.utcnow() + timedelta(hours=s.onboarding_link_ttl_hours),
            remaining_uses=s.onboarding_link_max_uses,
        )
        db.add(link)
        # Each link is already live upstream; keep it even if a later one fails.
        db.commit()
        db.refresh(link)
        links.append(link)
    return [serialize_link(link) for link in links]
