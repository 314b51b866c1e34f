from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from app.core.networks import NetworkConfig, block_explorer_url, get_network_config


@dataclass(frozen=True)
class WalletSession:
    """Wallet state reported by the client for the current request."""

    account: Optional[str] = None
    chain_id: Optional[int] = None

    @property
    def connected(self) -> bool:
        return bool(self.account)

    @property
    def network(self) -> Optional[NetworkConfig]:
        return get_network_config(self.chain_id) if self.chain_id else None

    def owns(self, address: Optional[str]) -> bool:
        if not self.account or not address:
            return False
        return self.account.lower() == address.lower()

    def tx_url(self, tx_hash: str) -> str:
        return block_explorer_url(self.chain_id, "tx", tx_hash)
