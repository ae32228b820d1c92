"""
Admin API: create/delete drops, review claims. Every route requires the admin role (user_roles).
"""
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ghostcoin.api.deps import get_current_user_id, require_admin
from ghostcoin.api.routes.claims import claim_to_dict
from ghostcoin.api.routes.drops import drop_to_dict
from ghostcoin.core.constants import ADMIN_CLAIMS_LIMIT, ADMIN_DROPS_LIMIT, CLAIM_STATUSES
from ghostcoin.core.errors import GhostcoinError, domain_error_to_http
from ghostcoin.db.session import get_db
from ghostcoin.services.admin_service import has_role
from ghostcoin.services.claim_service import list_recent_claims, update_claim_status
from ghostcoin.services.drop_service import create_drop, delete_drop, generate_drop_code, list_admin_drops

router = APIRouter()
logger = logging.getLogger(__name__)


class CreateDropBody(BaseModel):
    title: str = Field(..., max_length=256)
    prize: str = Field(..., max_length=256)
    drop_code: str | None = Field(None, max_length=64, description="Printed into the QR code; generated if empty")
    description: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    expires_at: datetime | None = None
    min_token_required: str | float | None = Field(None, description="Whole GHOX needed to see/claim; default 0")


class ClaimStatusBody(BaseModel):
    status: str = Field(..., pattern="^(" + "|".join(CLAIM_STATUSES) + ")$")
    admin_notes: str | None = None


@router.get("/me")
def admin_check(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Whether the caller is an admin (clients use this to show the admin screen)."""
    return {"user_id": user_id, "is_admin": has_role(db, user_id)}


@router.get("/drops")
def admin_list_drops(
    db: Session = Depends(get_db),
    _admin: str = Depends(require_admin),
) -> dict[str, Any]:
    now = datetime.now(timezone.utc)
    return {"drops": [drop_to_dict(d, now, include_code=True) for d in list_admin_drops(db, ADMIN_DROPS_LIMIT)]}


@router.get("/drops/new-code")
def admin_new_drop_code(_admin: str = Depends(require_admin)) -> dict[str, str]:
    return {"drop_code": generate_drop_code()}


@router.post("/drops", status_code=201)
def admin_create_drop(
    body: CreateDropBody,
    db: Session = Depends(get_db),
    admin_id: str = Depends(require_admin),
) -> dict[str, Any]:
    expires_at = body.expires_at
    if expires_at is not None and expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    try:
        drop = create_drop(
            db,
            title=body.title,
            prize=body.prize,
            created_by=admin_id,
            drop_code=body.drop_code,
            description=body.description,
            latitude=body.latitude,
            longitude=body.longitude,
            expires_at=expires_at,
            min_token_required=body.min_token_required,
        )
    except GhostcoinError as e:
        raise domain_error_to_http(e)
    return {"ok": True, "drop": drop_to_dict(drop, include_code=True)}


@router.delete("/drops/{drop_id}")
def admin_delete_drop(
    drop_id: int,
    db: Session = Depends(get_db),
    _admin: str = Depends(require_admin),
) -> dict[str, Any]:
    if not delete_drop(db, drop_id):
        raise HTTPException(status_code=404, detail={"error": "drop_not_found", "message": f"Drop {drop_id} not found"})
    return {"ok": True, "id": drop_id}


@router.get("/claims")
def admin_list_claims(
    db: Session = Depends(get_db),
    _admin: str = Depends(require_admin),
) -> dict[str, Any]:
    rows = list_recent_claims(db, ADMIN_CLAIMS_LIMIT)
    return {"claims": [{**claim_to_dict(r["claim"]), "email": r["email"]} for r in rows]}


@router.patch("/claims/{claim_id}")
def admin_update_claim(
    claim_id: int,
    body: ClaimStatusBody,
    db: Session = Depends(get_db),
    admin_id: str = Depends(require_admin),
) -> dict[str, Any]:
    """Set a claim to pending/paid/rejected. Paying requires the claimant to have a wallet."""
    try:
        claim = update_claim_status(db, claim_id, body.status, body.admin_notes)
    except GhostcoinError as e:
        raise domain_error_to_http(e)
    logger.info("Admin %s set claim %s to %s", admin_id, claim_id, body.status)
    return {"ok": True, "claim": claim_to_dict(claim)}
