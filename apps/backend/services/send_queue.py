"""RQ-backed send queue.

The queue is built once at process start (FastAPI lifespan, worker entry
point) and passed to whoever enqueues; nothing here keeps module state.
The only data crossing the boundary is the plain dict ``{messageId, credentialId}``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from redis import Redis
from rq import Queue, Retry

logger = logging.getLogger(__name__)

SEND_JOB_FUNC = "apps.worker.jobs.process_send_job"


@dataclass(frozen=True)
class SendJob:
    message_id: str
    credential_id: str

    def to_dict(self) -> dict:
        return {"messageId": self.message_id, "credentialId": self.credential_id}

    @classmethod
    def from_dict(cls, data: dict) -> "SendJob":
        return cls(message_id=str(data["messageId"]), credential_id=str(data["credentialId"]))


class SendQueue:
    def __init__(
        self,
        queue: Queue,
        *,
        max_retries: int = 3,
        retry_intervals: list[int] | None = None,
        job_timeout: int = 120,
    ) -> None:
        self.queue = queue
        self.max_retries = max_retries
        self.retry_intervals = list(retry_intervals or [10, 60, 300])
        self.job_timeout = job_timeout

    @classmethod
    def from_settings(cls, settings, connection: Redis | None = None) -> "SendQueue":
        conn = connection or Redis(host=settings.redis_host, port=settings.redis_port)
        return cls(
            Queue(settings.rq_send_queue_name or "send-messages", connection=conn),
            max_retries=settings.send_max_retries,
            retry_intervals=settings.send_retry_intervals,
            job_timeout=settings.send_job_timeout_seconds,
        )

    def enqueue(self, job: SendJob) -> str:
        retry = Retry(max=self.max_retries, interval=self.retry_intervals) if self.max_retries > 0 else None
        rq_job = self.queue.enqueue(
            SEND_JOB_FUNC,
            job.to_dict(),
            job_id=f"send-{job.message_id}",
            job_timeout=self.job_timeout,
            retry=retry,
        )
        logger.info("send_job_enqueued message_id=%s rq_job_id=%s", job.message_id, rq_job.id)
        return rq_job.id
