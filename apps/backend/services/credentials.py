"""Tenant-scoped credential lookup and storage."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from apps.backend.clients.exotel import GatewayCredential
from apps.backend.errors import AuthorizationError
from apps.backend.models.credential import Credential
from apps.backend.services.token_crypto import decrypt_token, encrypt_token, mask_token


def get_tenant_credential(db: Session, tenant_id: str, credential_id: str | None) -> Credential | None:
    """Credential by id, or the tenant's first credential when id is None."""
    q = select(Credential).where(Credential.tenant_id == tenant_id)
    if credential_id:
        q = q.where(Credential.id == credential_id)
    else:
        q = q.order_by(Credential.created_at.asc())
    return db.execute(q.limit(1)).scalar_one_or_none()


def require_tenant_credential(db: Session, tenant_id: str, credential_id: str) -> Credential:
    cred = get_tenant_credential(db, tenant_id, credential_id)
    if not cred:
        raise AuthorizationError("Invalid credentialId for this tenant")
    return cred


def list_credentials(db: Session, tenant_id: str) -> list[Credential]:
    q = select(Credential).where(Credential.tenant_id == tenant_id).order_by(Credential.created_at.desc())
    return list(db.execute(q).scalars().all())


def create_credential(
    db: Session,
    tenant_id: str,
    *,
    label: str,
    api_key: str,
    api_token: str,
    subdomain: str,
    sid: str,
    region: str | None = None,
) -> Credential:
    cred = Credential(
        tenant_id=tenant_id,
        label=label,
        api_key=api_key,
        api_token_encrypted=encrypt_token(api_token),
        subdomain=subdomain,
        sid=sid,
        region=region,
    )
    db.add(cred)
    db.commit()
    db.refresh(cred)
    return cred


def to_gateway_credential(cred: Credential) -> GatewayCredential:
    return GatewayCredential(
        api_key=cred.api_key,
        api_token=decrypt_token(cred.api_token_encrypted) or "",
        subdomain=cred.subdomain,
        sid=cred.sid,
        region=cred.region,
    )


def serialize_credential(cred: Credential) -> dict:
    return {
        "id": cred.id,
        "tenantId": cred.tenant_id,
        "label": cred.label,
        "apiKey": cred.api_key,
        "apiToken": mask_token(decrypt_token(cred.api_token_encrypted)),
        "subdomain": cred.subdomain,
        "sid": cred.sid,
        "region": cred.region,
        "createdAt": cred.created_at.isoformat() if cred.created_at else None,
    }
