"""GHOX balance lookups. Failures are fail-closed: callers get 0, never an exception."""
import logging
import time
from decimal import Decimal

from ghostcoin.config import settings
from ghostcoin.core.constants import BALANCE_CACHE_MAX_ENTRIES
from ghostcoin.services.token.client import RpcUnavailable, TokenBalanceOracle
from ghostcoin.services.token.config import TokenConfig

logger = logging.getLogger(__name__)

default_oracle = TokenBalanceOracle()

# address (lowercase) -> (balance, expires_at). Only successful reads are cached.
# Insertion order is age order; stale entries are swept, and the oldest go first when full.
_balance_cache: dict[str, tuple[int, float]] = {}
_next_sweep = 0.0
_clock = time.monotonic


def clear_balance_cache() -> None:
    global _next_sweep
    _balance_cache.clear()
    _next_sweep = 0.0


def _sweep_expired(now: float) -> None:
    for key in [k for k, (_, expires_at) in _balance_cache.items() if expires_at <= now]:
        del _balance_cache[key]


def _remember(key: str, balance: int, now: float, ttl: int) -> None:
    global _next_sweep
    _balance_cache.pop(key, None)
    if now >= _next_sweep or len(_balance_cache) >= BALANCE_CACHE_MAX_ENTRIES:
        _sweep_expired(now)
        _next_sweep = now + ttl
    while len(_balance_cache) >= BALANCE_CACHE_MAX_ENTRIES:
        del _balance_cache[next(iter(_balance_cache))]
    _balance_cache[key] = (balance, now + ttl)


def get_balance_or_zero(
    wallet_address: str,
    oracle: TokenBalanceOracle | None = None,
    cache_seconds: int | None = None,
) -> int:
    """Balance in base units; 0 when the RPC read fails (token gates stay closed)."""
    oracle = oracle or default_oracle
    ttl = settings.balance_cache_seconds if cache_seconds is None else cache_seconds
    key = (wallet_address or "").strip().lower()
    now = _clock()
    cached = _balance_cache.get(key)
    if cached is not None:
        if ttl > 0 and cached[1] > now:
            return cached[0]
        del _balance_cache[key]
    try:
        balance = oracle.get_balance(wallet_address)
    except RpcUnavailable as e:
        logger.warning("GHOX balance read failed for %s (treating as 0): %s", key[:10], e)
        return 0
    if ttl > 0:
        _remember(key, balance, now, ttl)
    return balance


def format_tokens(balance: int, decimals: int = 18) -> str:
    """Base units -> whole-token string without trailing zeros, e.g. 1500000000000000000 -> '1.5'."""
    value = Decimal(balance).scaleb(-decimals)
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


__all__ = [
    "RpcUnavailable",
    "TokenBalanceOracle",
    "TokenConfig",
    "clear_balance_cache",
    "default_oracle",
    "format_tokens",
    "get_balance_or_zero",
]
