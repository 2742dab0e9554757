"""Exotel credentials per tenant."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Text

from apps.backend.database import Base, new_id


class Credential(Base):
    __tablename__ = "credentials"

    id = Column(String(36), primary_key=True, default=new_id)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=False, index=True)
    label = Column(String(128), nullable=False)
    api_key = Column(String(255), nullable=False)
    api_token_encrypted = Column(Text, nullable=False)  # Fernet, see services/token_crypto.py
    subdomain = Column(String(128), nullable=False)
    sid = Column(String(128), nullable=False)
    region = Column(String(128), nullable=True)  # None -> settings.exotel_region
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
