"""Profile API: the caller's profile and payout wallet."""
import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ghostcoin.api.deps import get_current_user_id
from ghostcoin.core.errors import InvalidWalletAddress, domain_error_to_http
from ghostcoin.db.session import get_db
from ghostcoin.models.profile import Profile
from ghostcoin.services.profile_service import get_or_create_profile, update_wallet_address

router = APIRouter()
logger = logging.getLogger(__name__)


class WalletBody(BaseModel):
    wallet_address: str | None = Field(None, max_length=64, description="0x address; empty clears it")


def profile_to_dict(profile: Profile) -> dict[str, Any]:
    return {
        "user_id": profile.user_id,
        "email": profile.email,
        "wallet_address": profile.wallet_address,
    }


@router.get("/profile/me")
def read_profile(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    return profile_to_dict(get_or_create_profile(db, user_id))


@router.put("/profile/me/wallet")
def save_wallet(
    body: WalletBody,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    try:
        profile = update_wallet_address(db, user_id, body.wallet_address)
    except InvalidWalletAddress as e:
        raise domain_error_to_http(e)
    return profile_to_dict(profile)
