"""One delivery attempt for a queued message."""
from __future__ import annotations

import logging
from typing import Any, Protocol

from apps.backend.clients.exotel import GatewayCredential
from apps.backend.errors import CredentialNotFound
from apps.backend.models.message import STATUS_CANCELLED, STATUS_SENT
from apps.backend.services import message_store
from apps.backend.services.credentials import get_tenant_credential, to_gateway_credential
from apps.backend.services.extraction import extract_external_id
from apps.backend.services.send_queue import SendJob

logger = logging.getLogger(__name__)

# Outcomes returned to RQ (stored as job result).
RESULT_SENT = "sent"
RESULT_MISSING = "missing"
RESULT_CANCELLED = "cancelled"
RESULT_ALREADY_SENT = "already_sent"
RESULT_SKIPPED = "skipped"


class Gateway(Protocol):
    def send_message(self, cred: GatewayCredential, payload: dict) -> Any: ...


def run_send_job(job: SendJob, session_factory, gateway: Gateway) -> str:
    """Re-read the message, send it, record the outcome.

    Failures are written to the row as FAILED and re-raised so RQ's retry
    policy decides whether another attempt follows.
    """
    with session_factory() as db:
        msg = message_store.get_message(db, job.message_id)
        if not msg:
            logger.info("send_job_message_missing message_id=%s", job.message_id)
            return RESULT_MISSING
        if msg.status == STATUS_CANCELLED:
            logger.info("send_job_cancelled message_id=%s", job.message_id)
            return RESULT_CANCELLED
        if msg.status == STATUS_SENT:
            logger.info("send_job_already_sent message_id=%s", job.message_id)
            return RESULT_ALREADY_SENT

        tenant_id = msg.tenant_id
        payload = {k: v for k, v in (msg.body or {}).items() if v is not None}
        if not message_store.mark_sending(db, job.message_id):
            # Lost the race to a cancel (or another transition).
            return RESULT_SKIPPED

        try:
            cred = get_tenant_credential(db, tenant_id, job.credential_id)
            if not cred:
                raise CredentialNotFound(job.credential_id)
            response = gateway.send_message(to_gateway_credential(cred), payload)
            external_id = extract_external_id(response)
            message_store.mark_sent(db, job.message_id, external_id)
            logger.info("send_job_sent message_id=%s external_id=%s", job.message_id, external_id)
            return RESULT_SENT
        except Exception as exc:
            logger.exception("send_job_failed message_id=%s", job.message_id)
            db.rollback()
            message_store.mark_failed(db, job.message_id, str(exc))
            raise
