"""RQ jobs."""
import logging

from apps.backend.clients.exotel import ExotelClient
from apps.backend.config import get_settings
from apps.backend.database import get_session_factory
from apps.backend.services.send_queue import SendJob
from apps.backend.services.send_worker import run_send_job

logger = logging.getLogger(__name__)


def process_send_job(job_data: dict) -> str:
    """Deliver one queued message. Raises on failure so RQ retries."""
    job = SendJob.from_dict(job_data)
    return run_send_job(
        job,
        session_factory=get_session_factory(),
        gateway=ExotelClient.from_settings(get_settings()),
    )
