"""Зависимости FastAPI."""
from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from apps.backend.clients.exotel import ExotelClient
from apps.backend.config import get_settings
from apps.backend.database import get_session_factory
from apps.backend.services.send_queue import SendQueue


def get_db() -> Generator[Session, None, None]:
    factory = get_session_factory()
    sess = factory()
    try:
        yield sess
    finally:
        sess.close()


def get_send_queue(request: Request) -> SendQueue:
    """Queue built in the app lifespan (see main.py)."""
    queue = getattr(request.app.state, "send_queue", None)
    if queue is None:
        queue = SendQueue.from_settings(get_settings())
        request.app.state.send_queue = queue
    return queue


def get_exotel_client(request: Request) -> ExotelClient:
    client = getattr(request.app.state, "exotel_client", None)
    if client is None:
        client = ExotelClient.from_settings(get_settings())
        request.app.state.exotel_client = client
    return client
