"""Message submission, listing and cancel."""
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from apps.backend.auth import AuthUser, get_current_user
from apps.backend.deps import get_db, get_send_queue
from apps.backend.errors import NotFoundError
from apps.backend.services import message_store
from apps.backend.services.idempotency import HEADER as IDEMPOTENCY_HEADER
from apps.backend.services.message_submission import submit_message
from apps.backend.services.send_queue import SendQueue

router = APIRouter()


@router.get("")
def list_messages(
    status: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
):
    items = message_store.list_messages(db, user.tenant_id, limit=limit, status=status)
    return [message_store.serialize_message(m) for m in items]


@router.get("/{message_id}")
def get_message(
    message_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
):
    msg = message_store.get_message(db, message_id, user.tenant_id)
    if not msg:
        raise NotFoundError("Not found")
    return message_store.serialize_message(msg)


@router.post("")
def send_message(
    request: Request,
    payload: Any = Body(None),
    db: Session = Depends(get_db),
    queue: SendQueue = Depends(get_send_queue),
    user: AuthUser = Depends(get_current_user),
):
    result = submit_message(
        db,
        queue,
        user.tenant_id,
        payload,
        request.headers.get(IDEMPOTENCY_HEADER),
    )
    return JSONResponse(result.body, status_code=result.status_code)


@router.post("/{message_id}/cancel")
def cancel_message(
    message_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
):
    msg = message_store.cancel_message(db, message_id, user.tenant_id)
    return {"id": msg.id, "status": msg.status}
