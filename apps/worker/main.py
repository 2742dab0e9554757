"""RQ worker entry point: python -m apps.worker.main"""
import logging

from redis import Redis
from rq import Worker

from apps.backend.config import get_settings
from apps.backend.services.send_queue import SendQueue

logger = logging.getLogger(__name__)


def build_worker(connection: Redis | None = None) -> Worker:
    s = get_settings()
    conn = connection or Redis(host=s.redis_host, port=s.redis_port)
    send_queue = SendQueue.from_settings(s, connection=conn)
    return Worker([send_queue.queue], connection=conn)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    worker = build_worker()
    logger.info("send_worker_starting queues=%s", ",".join(worker.queue_names()))
    # Scheduler is required for Retry intervals to fire.
    worker.work(with_scheduler=True)


if __name__ == "__main__":
    main()
