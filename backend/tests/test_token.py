import pytest

import ghostcoin.services.token as token_service
from ghostcoin.services.token import (
    RpcUnavailable,
    TokenBalanceOracle,
    TokenConfig,
    format_tokens,
    get_balance_or_zero,
)
from tests.support import ONE_GHOX, WALLET_A, WALLET_B, FakeOracle


def test_format_tokens():
    assert format_tokens(0) == "0"
    assert format_tokens(ONE_GHOX) == "1"
    assert format_tokens(1500 * 10**15) == "1.5"
    assert format_tokens(1) == "0.000000000000000001"
    assert format_tokens(1234 * ONE_GHOX) == "1234"


def test_balance_is_cached_per_address():
    oracle = FakeOracle({WALLET_A: 7 * ONE_GHOX})
    assert get_balance_or_zero(WALLET_A, oracle=oracle) == 7 * ONE_GHOX
    assert get_balance_or_zero(WALLET_A.upper().replace("0X", "0x"), oracle=oracle) == 7 * ONE_GHOX
    assert len(oracle.calls) == 1


def test_cache_disabled_reads_every_time():
    oracle = FakeOracle({WALLET_A: 1})
    get_balance_or_zero(WALLET_A, oracle=oracle, cache_seconds=0)
    get_balance_or_zero(WALLET_A, oracle=oracle, cache_seconds=0)
    assert len(oracle.calls) == 2


def test_rpc_failure_reads_as_zero_and_is_not_cached():
    oracle = FakeOracle({WALLET_B: ONE_GHOX}, failing=[WALLET_B])
    assert get_balance_or_zero(WALLET_B, oracle=oracle) == 0
    oracle.failing.clear()
    assert get_balance_or_zero(WALLET_B, oracle=oracle) == ONE_GHOX


def test_unconfigured_oracle_raises_rpc_unavailable():
    oracle = TokenBalanceOracle(TokenConfig(rpc_url="", contract_address=""))
    with pytest.raises(RpcUnavailable):
        oracle.get_balance(WALLET_A)


def test_invalid_address_raises_before_any_network_call():
    oracle = TokenBalanceOracle(TokenConfig(rpc_url="http://127.0.0.1:1", contract_address=WALLET_A))
    with pytest.raises(RpcUnavailable, match="not-an-address"):
        oracle.get_balance("not-an-address")
    assert oracle._w3 is None


def _frozen_clock(monkeypatch, start=1000.0):
    now = [start]
    monkeypatch.setattr(token_service, "_clock", lambda: now[0])
    return now


def _address(i):
    return "0x" + format(i, "040x")


def test_expired_entries_are_swept(monkeypatch):
    now = _frozen_clock(monkeypatch)
    oracle = FakeOracle()
    for i in range(500):
        get_balance_or_zero(_address(i), oracle=oracle, cache_seconds=60)
    assert len(token_service._balance_cache) == 500

    now[0] += 10_000
    get_balance_or_zero(WALLET_A, oracle=oracle, cache_seconds=60)
    assert list(token_service._balance_cache) == [WALLET_A.lower()]


def test_stale_entry_is_replaced_on_lookup(monkeypatch):
    now = _frozen_clock(monkeypatch)
    oracle = FakeOracle({WALLET_A: 1})
    get_balance_or_zero(WALLET_A, oracle=oracle, cache_seconds=60)
    oracle.balances[WALLET_A.lower()] = 2
    now[0] += 61
    assert get_balance_or_zero(WALLET_A, oracle=oracle, cache_seconds=60) == 2
    assert len(oracle.calls) == 2


def test_cache_never_exceeds_its_cap(monkeypatch):
    _frozen_clock(monkeypatch)
    monkeypatch.setattr(token_service, "BALANCE_CACHE_MAX_ENTRIES", 8)
    oracle = FakeOracle()
    for i in range(20):
        get_balance_or_zero(_address(i), oracle=oracle, cache_seconds=60)
    cached = list(token_service._balance_cache)
    assert len(cached) == 8
    # oldest evicted first
    assert cached == [_address(i) for i in range(12, 20)]
