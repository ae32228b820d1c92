"""ERC-20 balance reader: one balanceOf call per lookup via a public JSON-RPC endpoint."""
from web3 import Web3

from ghostcoin.services.token.config import ERC20_BALANCE_ABI, TokenConfig


class RpcUnavailable(Exception):
    """The ledger read could not complete (no RPC configured, bad address, network or node error)."""


class TokenBalanceOracle:
    """Resolves a wallet address to its GHOX balance in base units (10**decimals per token)."""

    def __init__(self, config: TokenConfig | None = None) -> None:
        self._config = config or TokenConfig()
        self._w3: Web3 | None = None

    @property
    def decimals(self) -> int:
        return self._config.decimals

    def _web3(self) -> Web3:
        if self._w3 is None:
            self._w3 = Web3(
                Web3.HTTPProvider(self._config.rpc_url, request_kwargs={"timeout": self._config.timeout})
            )
        return self._w3

    def get_balance(self, wallet_address: str) -> int:
        if not self._config.is_configured():
            raise RpcUnavailable("Token RPC not configured. Set ETH_RPC_URL and GHOX_CONTRACT_ADDRESS in .env.")
        address = (wallet_address or "").strip()
        if not Web3.is_address(address):
            raise RpcUnavailable(f"Not a valid wallet address: {address!r}")
        w3 = self._web3()
        try:
            token = w3.eth.contract(
                address=Web3.to_checksum_address(self._config.contract_address),
                abi=ERC20_BALANCE_ABI,
            )
            balance = token.functions.balanceOf(Web3.to_checksum_address(address)).call()
        except Exception as e:
            raise RpcUnavailable(str(e)) from e
        return int(balance)
