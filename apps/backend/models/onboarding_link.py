"""Embedded-signup (ISV) onboarding links."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text

from apps.backend.database import Base, new_id


class OnboardingLink(Base):
    __tablename__ = "onboarding_links"

    id = Column(String(36), primary_key=True, default=new_id)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=False, index=True)
    credential_id = Column(String(36), ForeignKey("credentials.id"), nullable=True, index=True)
    url = Column(Text, nullable=False)
    token = Column(Text, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    remaining_uses = Column(Integer, nullable=False, default=5)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
