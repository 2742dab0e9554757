"""Модели SQLAlchemy."""
from apps.backend.models.tenant import Tenant, User
from apps.backend.models.credential import Credential
from apps.backend.models.message import Message
from apps.backend.models.template import Template
from apps.backend.models.onboarding_link import OnboardingLink
from apps.backend.models.webhook_event import WebhookEvent

__all__ = [
    "Tenant",
    "User",
    "Credential",
    "Message",
    "Template",
    "OnboardingLink",
    "WebhookEvent",
]
