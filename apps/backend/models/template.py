"""WhatsApp message templates."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey

from apps.backend.database import Base, JSONType, new_id


class Template(Base):
    __tablename__ = "templates"

    id = Column(String(36), primary_key=True, default=new_id)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=False, index=True)
    credential_id = Column(String(36), ForeignKey("credentials.id"), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(64), nullable=False)
    language = Column(String(16), nullable=False)
    payload = Column(JSONType, nullable=True)
    status = Column(String(16), nullable=False, default="PENDING")  # PENDING, APPROVED
    external_id = Column(String(128), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
