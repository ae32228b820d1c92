"""
Admin: role lookup keyed by account id (user_roles table).
"""
import logging

from sqlalchemy.orm import Session

from ghostcoin.core.constants import APP_ROLES, ROLE_ADMIN
from ghostcoin.models.user_role import UserRole

logger = logging.getLogger(__name__)


def has_role(db: Session, user_id: str, role: str = ROLE_ADMIN) -> bool:
    if not user_id:
        return False
    return (
        db.query(UserRole)
        .filter(UserRole.user_id == user_id, UserRole.role == role)
        .first()
        is not None
    )


def grant_role(db: Session, user_id: str, role: str = ROLE_ADMIN) -> UserRole:
    """Idempotent: returns the existing row if the account already has the role."""
    if role not in APP_ROLES:
        raise ValueError(f"Unknown role: {role}. Available: {list(APP_ROLES)}")
    row = db.query(UserRole).filter(UserRole.user_id == user_id, UserRole.role == role).first()
    if row:
        return row
    row = UserRole(user_id=user_id, role=role)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Granted role %s to %s", role, user_id)
    return row
