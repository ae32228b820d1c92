"""Helpers shared by the test modules."""
from datetime import datetime, timedelta, timezone

from ghostcoin.models.drop import Drop
from ghostcoin.services.token import RpcUnavailable

ONE_GHOX = 10**18
WALLET_A = "0x" + "a1" * 20
WALLET_B = "0x" + "b2" * 20


class FakeOracle:
    """Balances by lowercase address; addresses in `failing` raise like a dead RPC node."""

    decimals = 18

    def __init__(self, balances=None, failing=()):
        self.balances = {k.lower(): v for k, v in (balances or {}).items()}
        self.failing = {a.lower() for a in failing}
        self.calls = []

    def get_balance(self, wallet_address):
        self.calls.append(wallet_address)
        key = wallet_address.lower()
        if key in self.failing:
            raise RpcUnavailable("connection refused")
        return self.balances.get(key, 0)


def as_user(user_id):
    return {"X-User-Id": user_id}


def add_drop(db, drop_code="ghost-1", **fields):
    """Insert a drop directly (bypasses admin validation)."""
    values = {"title": "Ghost", "prize": "10 GHOX", "created_by": "admin-1", "min_token_required": 0}
    values.update(fields)
    drop = Drop(drop_code=drop_code, **values)
    db.add(drop)
    db.commit()
    db.refresh(drop)
    return drop


def hours_from_now(hours):
    return datetime.now(timezone.utc) + timedelta(hours=hours)
