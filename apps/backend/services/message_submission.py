"""POST /messages pipeline: normalize, dedupe, persist, enqueue."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from redis.exceptions import RedisError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from apps.backend.errors import QueueUnavailableError
from apps.backend.models.message import STATUS_QUEUED
from apps.backend.services import message_store
from apps.backend.services.credentials import require_tenant_credential
from apps.backend.services.idempotency import find_replay, normalize_key
from apps.backend.services.payload import normalize_payload
from apps.backend.services.send_queue import SendJob, SendQueue

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    status_code: int
    body: dict


def submit_message(
    db: Session,
    queue: SendQueue,
    tenant_id: str,
    raw_body: Any,
    idempotency_header: str | None = None,
) -> SubmissionResult:
    payload = normalize_payload(raw_body)
    key = normalize_key(idempotency_header)

    replay = find_replay(db, tenant_id, key)
    if replay:
        return SubmissionResult(200, replay)

    credential_id = payload["credentialId"]
    require_tenant_credential(db, tenant_id, credential_id)

    try:
        msg = message_store.create_message(
            db,
            tenant_id=tenant_id,
            credential_id=credential_id,
            payload=payload,
            idempotency_key=key,
        )
        message_id = msg.id
        db.commit()
    except IntegrityError:
        # Concurrent request with the same key won the insert.
        db.rollback()
        replay = find_replay(db, tenant_id, key)
        if replay:
            return SubmissionResult(200, replay)
        raise

    try:
        queue.enqueue(SendJob(message_id=message_id, credential_id=credential_id))
    except RedisError as e:
        logger.exception("send_job_enqueue_failed message_id=%s", message_id)
        message_store.mark_failed(db, message_id, f"enqueue_failed: {e}", allowed_from=(STATUS_QUEUED,))
        raise QueueUnavailableError("Message could not be queued, retry later", details={"id": message_id}) from e

    count = len(payload["whatsapp"]["messages"])
    logger.info("message_queued message_id=%s tenant_id=%s count=%s", message_id, tenant_id, count)
    return SubmissionResult(202, {"id": message_id, "status": STATUS_QUEUED, "queuedMessages": count})
