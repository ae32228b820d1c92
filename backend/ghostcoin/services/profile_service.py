"""
Profiles: one per account, created on first use. Holds the payout wallet.
"""
import logging
import re

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ghostcoin.core.constants import WALLET_ADDRESS_PATTERN
from ghostcoin.core.errors import InvalidWalletAddress
from ghostcoin.models.profile import Profile

logger = logging.getLogger(__name__)

_WALLET_RE = re.compile(WALLET_ADDRESS_PATTERN)


def is_valid_wallet_address(address: str | None) -> bool:
    return bool(address) and _WALLET_RE.match(address) is not None


def get_profile(db: Session, user_id: str) -> Profile | None:
    return db.query(Profile).filter(Profile.user_id == user_id).first()


def get_or_create_profile(db: Session, user_id: str, email: str | None = None) -> Profile:
    """Return the account's profile, creating it on first use. Fills in email if it was missing."""
    profile = get_profile(db, user_id)
    if profile:
        if email and not profile.email:
            profile.email = email
            db.commit()
        return profile
    profile = Profile(user_id=user_id, email=email)
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        # Created by a concurrent request for the same account
        db.rollback()
        profile = get_profile(db, user_id)
        if profile is None:
            raise
        return profile
    db.refresh(profile)
    logger.info("Created profile for user %s", user_id)
    return profile


def update_wallet_address(db: Session, user_id: str, wallet_address: str | None) -> Profile:
    """Set or clear (empty/None) the payout wallet. Raises InvalidWalletAddress for non-0x addresses."""
    address = (wallet_address or "").strip() or None
    if address is not None and not is_valid_wallet_address(address):
        raise InvalidWalletAddress("Please enter a valid Ethereum wallet address (0x...)")
    profile = get_or_create_profile(db, user_id)
    profile.wallet_address = address
    db.commit()
    db.refresh(profile)
    logger.info("Wallet %s for user %s", "updated" if address else "cleared", user_id)
    return profile
