"""Exotel status callbacks."""
from __future__ import annotations

import json
import logging
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from apps.backend.auth import AuthUser, get_current_user
from apps.backend.config import get_settings
from apps.backend.deps import get_db
from apps.backend.errors import NotFoundError, ValidationError
from apps.backend.models.tenant import Tenant
from apps.backend.models.webhook_event import WebhookEvent
from apps.backend.services.webhook_signature import SIGNATURE_HEADER, verify_signature

router = APIRouter()
logger = logging.getLogger(__name__)


def _parse_body(raw: bytes, content_type: str):
    if not raw:
        return {}
    if "application/x-www-form-urlencoded" in content_type:
        return dict(parse_qsl(raw.decode("utf-8", errors="replace")))
    try:
        return json.loads(raw.decode("utf-8", errors="replace"))
    except ValueError:
        return {"raw": raw.decode("utf-8", errors="replace")[:10_000]}


def serialize_event(e: WebhookEvent) -> dict:
    return {
        "id": e.id,
        "tenantId": e.tenant_id,
        "source": e.source,
        "payload": e.payload,
        "signatureVerified": e.signature_verified,
        "createdAt": e.created_at.isoformat() if e.created_at else None,
    }


@router.post("/exotel")
async def exotel_webhook(
    request: Request,
    tenantId: str | None = Query(None),
    db: Session = Depends(get_db),
):
    if not tenantId:
        raise ValidationError("tenantId query parameter is required")
    tenant = db.get(Tenant, tenantId)
    if not tenant:
        raise NotFoundError("Unknown tenant")

    raw = await request.body()
    secret = get_settings().exotel_webhook_secret
    verified = False
    if secret:
        if not verify_signature(raw, request.headers.get(SIGNATURE_HEADER), secret):
            logger.warning("exotel_webhook_bad_signature tenant_id=%s", tenant.id)
            raise HTTPException(status_code=401, detail="Invalid signature")
        verified = True

    event = WebhookEvent(
        tenant_id=tenant.id,
        source="exotel",
        payload=_parse_body(raw, (request.headers.get("content-type") or "").lower()),
        signature_verified=verified,
    )
    db.add(event)
    db.commit()
    return {"ok": True}


@router.get("/logs")
def webhook_logs(
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
):
    q = (
        select(WebhookEvent)
        .where(WebhookEvent.tenant_id == user.tenant_id)
        .order_by(WebhookEvent.created_at.desc())
        .limit(100)
    )
    return [serialize_event(e) for e in db.execute(q).scalars().all()]
