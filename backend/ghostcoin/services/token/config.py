"""GHOX token config. RPC URL and contract come from settings (ETH_RPC_URL, GHOX_CONTRACT_ADDRESS) or TokenConfig args."""
from ghostcoin.config import settings

# Minimal ERC-20 ABI: balanceOf only
ERC20_BALANCE_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "type": "function",
    }
]


class TokenConfig:
    """RPC endpoint and token contract for balance reads."""

    __slots__ = ("rpc_url", "contract_address", "decimals", "timeout")

    def __init__(
        self,
        *,
        rpc_url: str | None = None,
        contract_address: str | None = None,
        decimals: int | None = None,
        timeout: float | None = None,
    ) -> None:
        self.rpc_url = (rpc_url if rpc_url is not None else settings.eth_rpc_url).strip()
        self.contract_address = (contract_address if contract_address is not None else settings.ghox_contract_address).strip()
        self.decimals = settings.token_decimals if decimals is None else decimals
        self.timeout = settings.rpc_timeout_seconds if timeout is None else timeout

    def is_configured(self) -> bool:
        return bool(self.rpc_url and self.contract_address)
