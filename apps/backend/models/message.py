"""Outbound WhatsApp message lifecycle record."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Index, UniqueConstraint

from apps.backend.database import Base, JSONType, new_id

STATUS_QUEUED = "QUEUED"
STATUS_SENDING = "SENDING"
STATUS_SENT = "SENT"
STATUS_FAILED = "FAILED"
STATUS_CANCELLED = "CANCELLED"

BULK = "bulk"


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=new_id)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=False, index=True)
    credential_id = Column(String(36), ForeignKey("credentials.id"), nullable=False, index=True)
    idempotency_key = Column(String(255), nullable=True)
    to = Column(String(32), nullable=False)  # "bulk" when more than one message
    from_ = Column("from", String(32), nullable=False)
    type = Column(String(32), nullable=False)  # "bulk" when more than one message
    body = Column(JSONType, nullable=False)
    custom_data = Column(JSONType, nullable=True)
    status = Column(String(16), nullable=False, default=STATUS_QUEUED)  # QUEUED, SENDING, SENT, FAILED, CANCELLED
    external_id = Column(String(128), nullable=True, index=True)
    failed_reason = Column(Text, nullable=True)
    sent_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "idempotency_key", name="uq_messages_tenant_idempotency_key"),
        Index("ix_messages_tenant_created", "tenant_id", "created_at"),
    )
