"""WhatsApp templates: local records mirrored to Exotel."""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from apps.backend.auth import AuthUser, get_current_user
from apps.backend.clients.exotel import ExotelClient
from apps.backend.deps import get_db, get_exotel_client
from apps.backend.errors import UpstreamError, ValidationError
from apps.backend.models.template import Template
from apps.backend.services.credentials import get_tenant_credential, require_tenant_credential, to_gateway_credential
from apps.backend.services.extraction import extract_template_id

router = APIRouter()
logger = logging.getLogger(__name__)


class TemplateCreate(BaseModel):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    language: str = Field(min_length=1)
    payload: Any = None
    credentialId: str | None = None


def serialize_template(t: Template) -> dict:
    return {
        "id": t.id,
        "tenantId": t.tenant_id,
        "credentialId": t.credential_id,
        "name": t.name,
        "category": t.category,
        "language": t.language,
        "payload": t.payload,
        "status": t.status,
        "externalId": t.external_id,
        "createdAt": t.created_at.isoformat() if t.created_at else None,
    }


@router.get("")
def list_templates(
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
):
    q = select(Template).where(Template.tenant_id == user.tenant_id).order_by(Template.created_at.desc())
    return [serialize_template(t) for t in db.execute(q).scalars().all()]


@router.get("/remote")
def list_remote_templates(
    credentialId: str | None = Query(None),
    db: Session = Depends(get_db),
    client: ExotelClient = Depends(get_exotel_client),
    user: AuthUser = Depends(get_current_user),
):
    cred = get_tenant_credential(db, user.tenant_id, credentialId)
    if not cred:
        raise ValidationError("Credential required")
    return client.list_templates(to_gateway_credential(cred))


@router.post("", status_code=201)
def create_template(
    data: TemplateCreate,
    db: Session = Depends(get_db),
    client: ExotelClient = Depends(get_exotel_client),
    user: AuthUser = Depends(get_current_user),
):
    cred = require_tenant_credential(db, user.tenant_id, data.credentialId) if data.credentialId else None
    t = Template(
        tenant_id=user.tenant_id,
        credential_id=cred.id if cred else None,
        name=data.name,
        category=data.category,
        language=data.language,
        payload=data.payload,
        status="PENDING",
    )
    db.add(t)
    db.commit()
    db.refresh(t)

    if cred:
        components = data.payload.get("components", []) if isinstance(data.payload, dict) else []
        try:
            result = client.create_template(
                to_gateway_credential(cred),
                {
                    "name": data.name,
                    "category": data.category,
                    "language": data.language,
                    "components": components,
                },
            )
        except UpstreamError as e:
            # Record stays PENDING; it can be resubmitted later.
            logger.warning("template_submit_failed template_id=%s error=%s", t.id, e.message)
        else:
            t.external_id = extract_template_id(result)
            t.status = "APPROVED"
            db.commit()
            db.refresh(t)
    return serialize_template(t)
