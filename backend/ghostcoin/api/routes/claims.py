"""
Claims API: turn a scanned QR code into a claim, and list the caller's claims.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ghostcoin.api.deps import get_current_user_id
from ghostcoin.core.errors import claim_error_to_http
from ghostcoin.db.session import get_db
from ghostcoin.models.claim import Claim
from ghostcoin.services.claim_service import list_claims_for_user
from ghostcoin.services.claim_workflow import ClaimWorkflow
from ghostcoin.services.eligibility import as_utc

router = APIRouter()
logger = logging.getLogger(__name__)


class ScanBody(BaseModel):
    drop_code: str = Field(..., max_length=512, description="Text decoded from the QR code")


def claim_to_dict(claim: Claim) -> dict[str, Any]:
    claimed_at = as_utc(claim.claimed_at)
    updated_at = as_utc(claim.updated_at)
    drop = claim.drop
    return {
        "id": claim.id,
        "drop_id": claim.drop_id,
        "user_id": claim.user_id,
        "wallet_address": claim.wallet_address,
        "status": claim.status,
        "claimed_at": claimed_at.isoformat() if claimed_at else None,
        "updated_at": updated_at.isoformat() if updated_at else None,
        "admin_notes": claim.admin_notes,
        "drop": {"id": drop.id, "title": drop.title, "prize": drop.prize} if drop else None,
    }


@router.post("/claims/scan", status_code=status.HTTP_201_CREATED)
def scan_drop(
    body: ScanBody,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """
    Claim the drop behind a scanned code. 201 with the pending claim on success.
    Rejections: 404 invalid_code, 410 expired, 409 duplicate, 422 wallet_missing,
    409 write_conflict, 500 unknown; detail is {error, message}.
    """
    outcome = ClaimWorkflow(db).run(body.drop_code, user_id)
    if not outcome.accepted:
        raise claim_error_to_http(outcome.error, outcome.message)
    return {"ok": True, "message": outcome.message, "claim": claim_to_dict(outcome.claim)}


@router.get("/claims/me")
def my_claims(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Caller's claims, newest first."""
    return {"claims": [claim_to_dict(c) for c in list_claims_for_user(db, user_id)]}
