#!/usr/bin/env python3
"""
Read a wallet's GHOX balance through the same oracle the API uses.
  python backend/scripts/check_balance.py 0xYourWallet
"""
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))


def main(argv: list[str]) -> int:
    if len(argv) != 2:
        print("usage: check_balance.py <wallet_address>")
        return 2
    from ghostcoin.services.token import RpcUnavailable, default_oracle, format_tokens

    try:
        balance = default_oracle.get_balance(argv[1])
    except RpcUnavailable as e:
        print("FAIL", e)
        return 1
    print(f"{argv[1]}: {format_tokens(balance, default_oracle.decimals)} GHOX ({balance} base units)")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
