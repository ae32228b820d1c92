"""
Drops API: recent drops, drops visible to the viewer, and map drops.

Visibility uses the viewer context (position from ?lat=&lon=, wallet from ?wallet= or the profile).
Expired drops are listed with expired=true; they cannot be claimed.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ghostcoin.config import settings
from ghostcoin.core.constants import RECENT_DROPS_LIMIT, RECENT_DROPS_MAX_LIMIT
from ghostcoin.api.deps import get_viewer
from ghostcoin.db.session import get_db
from ghostcoin.models.drop import Drop
from ghostcoin.services.drop_service import list_drops, list_drops_with_coordinates
from ghostcoin.services.eligibility import ViewerContext, as_utc, is_expired, visible_drops

router = APIRouter()
logger = logging.getLogger(__name__)


def _whole_tokens(value) -> str:
    """Numeric(38, 18) comes back quantized (e.g. Decimal('0E-18')); send plain text like '250' or '0.5'."""
    text = format(Decimal(str(value if value is not None else 0)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def drop_to_dict(drop: Drop, now: datetime | None = None, *, include_code: bool = False) -> dict[str, Any]:
    """Public shape of a drop. drop_code is only included for admins (it is what the QR code encodes)."""
    expires_at = as_utc(drop.expires_at)
    created_at = as_utc(drop.created_at)
    out = {
        "id": drop.id,
        "title": drop.title,
        "description": drop.description,
        "prize": drop.prize,
        "latitude": drop.latitude,
        "longitude": drop.longitude,
        "expires_at": expires_at.isoformat() if expires_at else None,
        "expired": is_expired(drop, now),
        "min_token_required": _whole_tokens(drop.min_token_required),
        "created_at": created_at.isoformat() if created_at else None,
    }
    if include_code:
        out["drop_code"] = drop.drop_code
        out["created_by"] = drop.created_by
    return out


def _viewer_summary(viewer: ViewerContext) -> dict[str, Any]:
    return {
        "wallet_connected": viewer.wallet_address is not None,
        "location_known": viewer.position is not None,
    }


@router.get("/drops/recent")
def recent_drops(
    limit: int = Query(RECENT_DROPS_LIMIT, ge=1, le=RECENT_DROPS_MAX_LIMIT),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Newest drops, unfiltered."""
    now = datetime.now(timezone.utc)
    return {"drops": [drop_to_dict(d, now) for d in list_drops(db, limit=limit)]}


@router.get("/drops/visible")
def visible_recent_drops(
    limit: int = Query(RECENT_DROPS_LIMIT, ge=1, le=RECENT_DROPS_MAX_LIMIT),
    db: Session = Depends(get_db),
    viewer: ViewerContext = Depends(get_viewer),
) -> dict[str, Any]:
    """Newest drops the viewer may see (token gate + distance gate)."""
    now = datetime.now(timezone.utc)
    drops = visible_drops(
        list_drops(db, limit=limit),
        viewer.balance,
        viewer.position,
        settings.max_drop_distance_miles,
        decimals=settings.token_decimals,
    )
    return {"drops": [drop_to_dict(d, now) for d in drops], "viewer": _viewer_summary(viewer)}


@router.get("/drops/map")
def map_drops(
    drop_id: int | None = Query(None, description="Only this drop (if visible)"),
    db: Session = Depends(get_db),
    viewer: ViewerContext = Depends(get_viewer),
) -> dict[str, Any]:
    """Drops with coordinates that the viewer may see. Drops without coordinates are never on the map."""
    now = datetime.now(timezone.utc)
    candidates = list_drops_with_coordinates(db)
    drops = visible_drops(
        candidates, viewer.balance, viewer.position, settings.max_drop_distance_miles, decimals=settings.token_decimals
    )
    if drop_id is not None:
        drops = [d for d in drops if d.id == drop_id]
    hidden = len(candidates) - len(visible_drops(candidates, viewer.balance, None, decimals=settings.token_decimals))
    return {
        "drops": [drop_to_dict(d, now) for d in drops],
        "viewer": _viewer_summary(viewer),
        "token_gated_hidden": hidden,
    }
