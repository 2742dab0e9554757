"""Create the default tenant and its admin user (idempotent).

Usage: python -m scripts.seed
"""
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from apps.backend.auth import get_password_hash
from apps.backend.config import get_settings
from apps.backend.database import get_session_factory
from apps.backend.models.tenant import Tenant, User

logger = logging.getLogger(__name__)


def seed(db: Session) -> User:
    s = get_settings()
    tenant = db.execute(select(Tenant).where(Tenant.name == s.default_tenant_name)).scalar_one_or_none()
    if not tenant:
        tenant = Tenant(name=s.default_tenant_name)
        db.add(tenant)
        db.flush()
    user = db.execute(select(User).where(User.email == s.admin_default_email)).scalar_one_or_none()
    if not user:
        user = User(
            email=s.admin_default_email,
            password_hash=get_password_hash(s.admin_default_password),
            role="ADMIN",
            tenant_id=tenant.id,
        )
        db.add(user)
    db.commit()
    return user


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    factory = get_session_factory()
    with factory() as db:
        user = seed(db)
        logger.info("seeded tenant_id=%s admin=%s", user.tenant_id, user.email)


if __name__ == "__main__":
    main()
