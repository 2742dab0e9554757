"""Message lifecycle storage.

Every status transition is a single conditional UPDATE guarded by the set of
allowed source statuses, so a cancel and a worker dequeue racing on the same
row cannot both succeed. Callers get back whether their transition won.
"""
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from apps.backend.errors import InvalidStateError, NotFoundError
from apps.backend.models.message import (
    BULK,
    Message,
    STATUS_CANCELLED,
    STATUS_FAILED,
    STATUS_QUEUED,
    STATUS_SENDING,
    STATUS_SENT,
)

logger = logging.getLogger(__name__)

_REASON_MAX = 1000


def create_message(
    db: Session,
    *,
    tenant_id: str,
    credential_id: str,
    payload: dict,
    idempotency_key: str | None = None,
) -> Message:
    """Insert a QUEUED message from a canonical payload. Caller commits."""
    messages = payload["whatsapp"]["messages"]
    first = messages[0]
    bulk = len(messages) > 1
    msg = Message(
        tenant_id=tenant_id,
        credential_id=credential_id,
        idempotency_key=idempotency_key,
        to=BULK if bulk else first["to"],
        from_=first["from"],
        type=BULK if bulk else first["content"]["type"],
        body={
            "custom_data": payload.get("custom_data"),
            "status_callback": payload.get("status_callback"),
            "whatsapp": payload["whatsapp"],
        },
        custom_data=payload.get("custom_data"),
        status=STATUS_QUEUED,
    )
    db.add(msg)
    db.flush()
    return msg


def get_message(db: Session, message_id: str, tenant_id: str | None = None) -> Message | None:
    """Tenant-scoped when tenant_id is given; the worker reads unscoped by id."""
    q = select(Message).where(Message.id == message_id)
    if tenant_id is not None:
        q = q.where(Message.tenant_id == tenant_id)
    return db.execute(q).scalar_one_or_none()


def find_by_idempotency_key(db: Session, tenant_id: str, key: str) -> Message | None:
    q = select(Message).where(Message.tenant_id == tenant_id, Message.idempotency_key == key)
    return db.execute(q).scalar_one_or_none()


def list_messages(db: Session, tenant_id: str, limit: int = 50, status: str | None = None) -> list[Message]:
    q = select(Message).where(Message.tenant_id == tenant_id)
    if status:
        q = q.where(Message.status == status)
    q = q.order_by(Message.created_at.desc()).limit(limit)
    return list(db.execute(q).scalars().all())


def _transition(db: Session, message_id: str, allowed_from: tuple[str, ...], **values) -> bool:
    values.setdefault("updated_at", datetime.utcnow())
    result = db.execute(
        update(Message)
        .where(Message.id == message_id, Message.status.in_(allowed_from))
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    won = result.rowcount == 1
    if not won:
        logger.info(
            "message_transition_skipped message_id=%s to=%s allowed_from=%s",
            message_id, values.get("status"), ",".join(allowed_from),
        )
    return won


def mark_sending(db: Session, message_id: str) -> bool:
    # FAILED -> SENDING is a retry attempt.
    return _transition(db, message_id, (STATUS_QUEUED, STATUS_FAILED), status=STATUS_SENDING)


def mark_sent(db: Session, message_id: str, external_id: str | None) -> bool:
    return _transition(
        db,
        message_id,
        (STATUS_SENDING,),
        status=STATUS_SENT,
        external_id=external_id,
        failed_reason=None,
        sent_at=datetime.utcnow(),
    )


def mark_failed(db: Session, message_id: str, reason: str, allowed_from: tuple[str, ...] = (STATUS_SENDING,)) -> bool:
    return _transition(
        db,
        message_id,
        allowed_from,
        status=STATUS_FAILED,
        failed_reason=(reason or "send_failed")[:_REASON_MAX],
    )


def cancel_message(db: Session, message_id: str, tenant_id: str) -> Message:
    msg = get_message(db, message_id, tenant_id)
    if not msg:
        raise NotFoundError("Not found")
    if msg.status != STATUS_QUEUED or not _transition(db, message_id, (STATUS_QUEUED,), status=STATUS_CANCELLED):
        raise InvalidStateError("Cannot cancel")
    db.refresh(msg)
    return msg


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


def serialize_message(m: Message) -> dict:
    return {
        "id": m.id,
        "tenantId": m.tenant_id,
        "credentialId": m.credential_id,
        "idempotencyKey": m.idempotency_key,
        "to": m.to,
        "from": m.from_,
        "type": m.type,
        "body": m.body,
        "customData": m.custom_data,
        "status": m.status,
        "externalId": m.external_id,
        "failedReason": m.failed_reason,
        "sentAt": _iso(m.sent_at),
        "createdAt": _iso(m.created_at),
        "updatedAt": _iso(m.updated_at),
    }
