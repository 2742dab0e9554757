"""Raw provider callbacks (delivery statuses, inbound)."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Boolean, Index

from apps.backend.database import Base, JSONType, new_id


class WebhookEvent(Base):
    __tablename__ = "webhook_events"

    id = Column(String(36), primary_key=True, default=new_id)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=False, index=True)
    source = Column(String(32), nullable=False)  # exotel
    payload = Column(JSONType, nullable=True)
    signature_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (Index("ix_webhook_events_tenant_created", "tenant_id", "created_at"),)
