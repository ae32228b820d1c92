"""
Drop visibility: which drops a viewer may see, given their token balance and position.

A drop is visible when it passes both gates:
  - token gate: no requirement, or a known balance >= requirement (compared in base units)
  - distance gate: within max_distance_miles of the viewer, skipped when either side has no position
Expiry is not a gate here; expired drops stay listed and are refused at claim time.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable

from ghostcoin.core.constants import MAX_DROP_DISTANCE_MILES, TOKEN_DECIMALS
from ghostcoin.core.geo import distance_miles
from ghostcoin.models.drop import Drop


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class ViewerContext:
    """Who is looking. Built per request and passed explicitly; nothing here is global."""

    user_id: str | None = None
    wallet_address: str | None = None
    balance: int | None = None  # base units; None = no wallet connected
    position: GeoPoint | None = None  # None = location unknown or permission denied


def to_base_units(whole_tokens, decimals: int = TOKEN_DECIMALS) -> int:
    """Whole-token threshold (e.g. 500 or 0.5) -> integer base units. Exact; never multiplies floats."""
    if whole_tokens is None:
        return 0
    if not isinstance(whole_tokens, Decimal):
        whole_tokens = Decimal(str(whole_tokens))
    return int(whole_tokens.scaleb(decimals))


def has_minimum_tokens(balance: int | None, min_token_required, decimals: int = TOKEN_DECIMALS) -> bool:
    required = to_base_units(min_token_required, decimals)
    if required <= 0:
        return True
    if balance is None:
        return False
    return balance >= required


def within_distance(drop: Drop, position: GeoPoint | None, max_distance_miles: float) -> bool:
    if position is None or drop.latitude is None or drop.longitude is None:
        return True
    return distance_miles(position.latitude, position.longitude, drop.latitude, drop.longitude) <= max_distance_miles


def visible_drops(
    drops: Iterable[Drop],
    viewer_balance: int | None,
    viewer_position: GeoPoint | None,
    max_distance_miles: float = MAX_DROP_DISTANCE_MILES,
    decimals: int = TOKEN_DECIMALS,
) -> list[Drop]:
    """Subset of drops the viewer may see, in input order."""
    return [
        d
        for d in drops
        if has_minimum_tokens(viewer_balance, d.min_token_required, decimals)
        and within_distance(d, viewer_position, max_distance_miles)
    ]


def visible_drops_for(
    viewer: ViewerContext,
    drops: Iterable[Drop],
    max_distance_miles: float = MAX_DROP_DISTANCE_MILES,
    decimals: int = TOKEN_DECIMALS,
) -> list[Drop]:
    return visible_drops(drops, viewer.balance, viewer.position, max_distance_miles, decimals)


def as_utc(dt: datetime | None) -> datetime | None:
    """Stored timestamps without tzinfo are UTC (SQLite drops the offset)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_expired(drop: Drop, now: datetime | None = None) -> bool:
    expires_at = as_utc(drop.expires_at)
    if expires_at is None:
        return False
    return expires_at < (now or datetime.now(timezone.utc))
