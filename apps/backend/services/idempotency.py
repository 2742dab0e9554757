"""Idempotency-Key handling for message submission."""
from __future__ import annotations

from sqlalchemy.orm import Session

from apps.backend.errors import ValidationError
from apps.backend.services.message_store import find_by_idempotency_key

HEADER = "Idempotency-Key"
MAX_KEY_LENGTH = 255


def normalize_key(raw: str | None) -> str | None:
    """Trim; blank means no key."""
    if raw is None:
        return None
    key = raw.strip()
    if len(key) > MAX_KEY_LENGTH:
        raise ValidationError(f"{HEADER} must be at most {MAX_KEY_LENGTH} characters")
    return key or None


def find_replay(db: Session, tenant_id: str, key: str | None) -> dict | None:
    """Response body for a replayed submission, or None when the key is new."""
    if not key:
        return None
    existing = find_by_idempotency_key(db, tenant_id, key)
    if not existing:
        return None
    return {"id": existing.id, "status": existing.status, "idempotent": True}
