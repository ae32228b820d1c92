"""
Drops: read queries used by listings and the claim workflow, plus admin create/delete.
"""
import logging
import secrets
import string
from datetime import datetime
from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ghostcoin.core.constants import (
    ADMIN_DROPS_LIMIT,
    DROP_CODE_LENGTH,
    DROP_CODE_MAX_LENGTH,
    MAX_MIN_TOKEN_REQUIRED,
    RECENT_DROPS_LIMIT,
)
from ghostcoin.core.errors import DropCodeTaken, InvalidDropInput
from ghostcoin.models.drop import Drop

logger = logging.getLogger(__name__)

_DROP_CODE_ALPHABET = string.ascii_lowercase + string.digits


def list_drops(db: Session, limit: int = RECENT_DROPS_LIMIT) -> list[Drop]:
    """Newest first."""
    return (
        db.query(Drop)
        .order_by(Drop.created_at.desc(), Drop.id.desc())
        .limit(limit)
        .all()
    )


def list_drops_with_coordinates(db: Session) -> list[Drop]:
    """Drops that can be placed on a map (latitude and longitude both set)."""
    return (
        db.query(Drop)
        .filter(Drop.latitude.isnot(None), Drop.longitude.isnot(None))
        .order_by(Drop.created_at.desc(), Drop.id.desc())
        .all()
    )


def get_drop_by_code(db: Session, drop_code: str) -> Drop | None:
    code = (drop_code or "").strip()
    if not code:
        return None
    return db.query(Drop).filter(Drop.drop_code == code).first()


def get_drop(db: Session, drop_id: int) -> Drop | None:
    return db.query(Drop).filter(Drop.id == drop_id).first()


def generate_drop_code(length: int = DROP_CODE_LENGTH) -> str:
    """Random lowercase base-36 code for printing into a QR code."""
    return "".join(secrets.choice(_DROP_CODE_ALPHABET) for _ in range(length))


def _clean(value: str | None) -> str | None:
    value = (value or "").strip()
    return value or None


def _min_tokens(value) -> Decimal:
    if value is None or value == "":
        return Decimal(0)
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise InvalidDropInput(f"min_token_required must be a number, got {value!r}")
    if not amount.is_finite() or amount < 0:
        raise InvalidDropInput("min_token_required must be zero or more")
    if amount >= MAX_MIN_TOKEN_REQUIRED:
        raise InvalidDropInput(f"min_token_required must be below {MAX_MIN_TOKEN_REQUIRED:.0e} tokens")
    return amount


def create_drop(
    db: Session,
    *,
    title: str,
    prize: str,
    created_by: str,
    drop_code: str | None = None,
    description: str | None = None,
    latitude: float | None = None,
    longitude: float | None = None,
    expires_at: datetime | None = None,
    min_token_required=None,
) -> Drop:
    """
    Create a drop. Title and prize are required; a drop code is generated when not given.
    Coordinates must be given together. Raises InvalidDropInput or DropCodeTaken.
    """
    title = _clean(title)
    prize = _clean(prize)
    code = _clean(drop_code) or generate_drop_code()
    if not title or not prize:
        raise InvalidDropInput("Title, prize and drop code are required.")
    if len(code) > DROP_CODE_MAX_LENGTH:
        raise InvalidDropInput(f"Drop code must be at most {DROP_CODE_MAX_LENGTH} characters.")
    if (latitude is None) != (longitude is None):
        raise InvalidDropInput("Latitude and longitude must be set together.")
    if latitude is not None and not -90 <= latitude <= 90:
        raise InvalidDropInput("Latitude must be between -90 and 90.")
    if longitude is not None and not -180 <= longitude <= 180:
        raise InvalidDropInput("Longitude must be between -180 and 180.")

    drop = Drop(
        drop_code=code,
        title=title,
        description=_clean(description),
        prize=prize,
        latitude=latitude,
        longitude=longitude,
        expires_at=expires_at,
        min_token_required=_min_tokens(min_token_required),
        created_by=created_by,
    )
    db.add(drop)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("create_drop: drop code %s already exists", code)
        raise DropCodeTaken("Drop ID already exists. Please use a different ID.") from e
    db.refresh(drop)
    logger.info("Created drop id=%s code=%s by %s", drop.id, drop.drop_code, created_by)
    return drop


def delete_drop(db: Session, drop_id: int) -> bool:
    """Delete a drop and its claims. Returns False if it does not exist."""
    drop = get_drop(db, drop_id)
    if not drop:
        return False
    claim_count = len(drop.claims)
    db.delete(drop)
    db.commit()
    logger.info("Deleted drop id=%s (%s claims removed)", drop_id, claim_count)
    return True


def list_admin_drops(db: Session, limit: int = ADMIN_DROPS_LIMIT) -> list[Drop]:
    return list_drops(db, limit=limit)
