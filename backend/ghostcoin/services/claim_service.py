"""
Claims: lookups for the claim workflow and the claimant's history, plus admin status changes.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ghostcoin.core.constants import (
    ADMIN_CLAIMS_LIMIT,
    CLAIM_KEY_CONSTRAINT,
    CLAIM_POLICY_FIRST_CLAIMANT_WINS,
    CLAIM_POLICY_PER_USER,
    CLAIM_STATUS_PAID,
    CLAIM_STATUS_PENDING,
    CLAIM_STATUSES,
    FIRST_CLAIMANT_KEY,
)
from ghostcoin.core.errors import ClaimNotFound, ClaimNotPayable, InvalidClaimStatus
from ghostcoin.models.claim import Claim
from ghostcoin.models.profile import Profile

logger = logging.getLogger(__name__)


def claim_key_for(policy: str, user_id: str) -> str:
    """Value stored in claims.claim_key; unique per drop, so it encodes the winner rule."""
    if policy == CLAIM_POLICY_FIRST_CLAIMANT_WINS:
        return FIRST_CLAIMANT_KEY
    if policy == CLAIM_POLICY_PER_USER:
        return user_id
    raise ValueError(f"Unknown claim policy: {policy}")


def is_claim_key_conflict(exc: IntegrityError) -> bool:
    """True when the insert hit uq_claims_drop_claim_key (not a foreign key or other constraint)."""
    diag = getattr(exc.orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    if constraint:
        return constraint == CLAIM_KEY_CONSTRAINT
    # SQLite names the columns instead of the constraint
    message = str(exc.orig)
    return CLAIM_KEY_CONSTRAINT in message or "claims.claim_key" in message


def list_claims_for_user(db: Session, user_id: str) -> list[Claim]:
    """Caller's claims, newest first, drop loaded."""
    return (
        db.query(Claim)
        .options(joinedload(Claim.drop))
        .filter(Claim.user_id == user_id)
        .order_by(Claim.claimed_at.desc(), Claim.id.desc())
        .all()
    )


def find_claim(db: Session, drop_id: int, user_id: str | None = None) -> Claim | None:
    """Existing claim on the drop; by this user when user_id is given, by anyone otherwise."""
    q = db.query(Claim).filter(Claim.drop_id == drop_id)
    if user_id is not None:
        q = q.filter(Claim.user_id == user_id)
    return q.first()


def insert_claim(
    db: Session,
    drop_id: int,
    user_id: str,
    wallet_address: str | None,
    policy: str = CLAIM_POLICY_PER_USER,
    claimed_at: datetime | None = None,
) -> Claim:
    """
    Insert a pending claim. Raises sqlalchemy IntegrityError (after rollback) when
    (drop_id, claim_key) is already taken.
    """
    claim = Claim(
        drop_id=drop_id,
        user_id=user_id,
        wallet_address=(wallet_address or None),
        status=CLAIM_STATUS_PENDING,
        claim_key=claim_key_for(policy, user_id),
        claimed_at=claimed_at or datetime.now(timezone.utc),
    )
    db.add(claim)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(claim)
    return claim


def update_claim_status(
    db: Session,
    claim_id: int,
    status: str,
    admin_notes: str | None = None,
) -> Claim:
    """
    Set status and notes. Does not check the current status.
    Paying out needs a wallet: a claim created without one takes the claimant's current profile wallet.
    """
    if status not in CLAIM_STATUSES:
        raise InvalidClaimStatus(f"Status must be one of {', '.join(CLAIM_STATUSES)}")
    claim = db.query(Claim).filter(Claim.id == claim_id).first()
    if not claim:
        raise ClaimNotFound(f"Claim {claim_id} not found")
    if status == CLAIM_STATUS_PAID and not claim.wallet_address:
        profile = db.query(Profile).filter(Profile.user_id == claim.user_id).first()
        if not profile or not profile.wallet_address:
            raise ClaimNotPayable("Claimant has no wallet address; cannot mark as paid.")
        claim.wallet_address = profile.wallet_address
    previous = claim.status
    claim.status = status
    claim.admin_notes = (admin_notes or "").strip() or None
    db.commit()
    db.refresh(claim)
    logger.info("Claim %s: %s -> %s", claim_id, previous, status)
    return claim


def list_recent_claims(db: Session, limit: int = ADMIN_CLAIMS_LIMIT) -> list[dict]:
    """Admin view: newest claims with drop and claimant email."""
    rows = (
        db.query(Claim, Profile.email)
        .options(joinedload(Claim.drop))
        .outerjoin(Profile, Profile.user_id == Claim.user_id)
        .order_by(Claim.claimed_at.desc(), Claim.id.desc())
        .limit(limit)
        .all()
    )
    return [{"claim": claim, "email": email} for claim, email in rows]
