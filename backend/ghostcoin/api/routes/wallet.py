"""Wallet API: GHOX balance for a wallet (or the caller's profile wallet)."""
from typing import Any

from fastapi import APIRouter, Depends

from ghostcoin.api.deps import get_viewer
from ghostcoin.config import settings
from ghostcoin.services.eligibility import ViewerContext
from ghostcoin.services.token import format_tokens

router = APIRouter()


@router.get("/wallet/balance")
def wallet_balance(viewer: ViewerContext = Depends(get_viewer)) -> dict[str, Any]:
    """balance is base units as a string (uint256 does not fit JSON numbers); tokens is human-readable."""
    if viewer.wallet_address is None:
        return {"wallet_address": None, "balance": None, "tokens": None}
    balance = viewer.balance or 0
    return {
        "wallet_address": viewer.wallet_address,
        "balance": str(balance),
        "tokens": format_tokens(balance, settings.token_decimals),
    }
