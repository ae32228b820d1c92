"""
Request dependencies: caller identity (hosted auth JWT), admin gate, balance oracle, viewer context.

Identity: Authorization: Bearer <jwt> signed by the auth provider (HS256, AUTH_JWT_SECRET).
When AUTH_JWT_SECRET is unset (local dev) the X-User-Id header is trusted instead.
"""
import logging

import jwt
from fastapi import Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from ghostcoin.config import settings
from ghostcoin.db.session import get_db
from ghostcoin.services.admin_service import has_role
from ghostcoin.services.eligibility import GeoPoint, ViewerContext
from ghostcoin.services.profile_service import get_profile, is_valid_wallet_address
from ghostcoin.services.token import TokenBalanceOracle, default_oracle, get_balance_or_zero

logger = logging.getLogger(__name__)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": "unauthorized", "message": detail},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _user_id_from_token(authorization: str) -> str:
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Expected 'Authorization: Bearer <token>'")
    try:
        claims = jwt.decode(
            token.strip(),
            settings.auth_jwt_secret,
            algorithms=["HS256"],
            audience=settings.auth_jwt_audience or None,
        )
    except jwt.PyJWTError as e:
        logger.info("Rejected auth token: %s", e)
        raise _unauthorized("Invalid or expired session")
    sub = (claims.get("sub") or "").strip()
    if not sub:
        raise _unauthorized("Token has no subject")
    return sub


def get_optional_user_id(
    authorization: str | None = Header(None),
    x_user_id: str | None = Header(None, alias="X-User-Id"),
) -> str | None:
    """Caller's account id, or None for anonymous requests."""
    if settings.auth_jwt_secret:
        if not authorization:
            return None
        return _user_id_from_token(authorization)
    uid = (x_user_id or "").strip()
    return uid or None


def get_current_user_id(user_id: str | None = Depends(get_optional_user_id)) -> str:
    if not user_id:
        raise _unauthorized("Sign in required")
    return user_id


def require_admin(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> str:
    if not has_role(db, user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "forbidden", "message": "Admin access required"},
        )
    return user_id


def get_balance_oracle() -> TokenBalanceOracle:
    return default_oracle


def get_viewer(
    lat: float | None = Query(None, ge=-90, le=90, description="Viewer latitude"),
    lon: float | None = Query(None, ge=-180, le=180, description="Viewer longitude"),
    wallet: str | None = Query(None, description="Connected wallet; defaults to the profile wallet"),
    user_id: str | None = Depends(get_optional_user_id),
    db: Session = Depends(get_db),
    oracle: TokenBalanceOracle = Depends(get_balance_oracle),
) -> ViewerContext:
    """
    Build the viewer context for drop listings. Position needs both lat and lon.
    Balance is None without a wallet; a failed RPC read counts as 0.
    """
    if (lat is None) != (lon is None):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"error": "invalid_position", "message": "lat and lon must be given together"},
        )
    position = GeoPoint(latitude=lat, longitude=lon) if lat is not None else None

    address = (wallet or "").strip() or None
    if address is None and user_id:
        profile = get_profile(db, user_id)
        address = profile.wallet_address if profile else None
    if address is not None and not is_valid_wallet_address(address):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"error": "invalid_wallet_address", "message": "wallet must be a 0x address"},
        )
    balance = get_balance_or_zero(address, oracle=oracle) if address else None
    return ViewerContext(user_id=user_id, wallet_address=address, balance=balance, position=position)
