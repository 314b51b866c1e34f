"""Static configuration of the chains the raffle contract is deployed on.

Addresses are compiled in; update them here after running ``chainraffle-deploy``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from app.core.config import settings

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
DEFAULT_EXPLORER_URL = "https://etherscan.io"


class UnsupportedNetworkError(LookupError):
    def __init__(self, chain_id: int):
        super().__init__(f"Unsupported network: chain id {chain_id}")
        self.chain_id = chain_id


@dataclass(frozen=True)
class NativeCurrency:
    name: str
    symbol: str
    decimals: int


@dataclass(frozen=True)
class ContractAddresses:
    raffle: str
    usdt: Optional[str] = None


@dataclass(frozen=True)
class VrfConfig:
    coordinator: str
    gas_lane: str


@dataclass(frozen=True)
class NetworkConfig:
    chain_id: int
    key: str
    name: str
    rpc_url: str
    block_explorer: str
    native_currency: NativeCurrency
    contracts: ContractAddresses
    vrf: VrfConfig

    @property
    def raffle_deployed(self) -> bool:
        return self.contracts.raffle.lower() != ZERO_ADDRESS

    def explorer_url(self, kind: str, value: str) -> str:
        return f"{self.block_explorer}/{kind}/{value}"

    def as_dict(self) -> dict:
        return {
            "chain_id": self.chain_id,
            "key": self.key,
            "name": self.name,
            "rpc_url": self.rpc_url,
            "block_explorer": self.block_explorer,
            "native_currency": {
                "name": self.native_currency.name,
                "symbol": self.native_currency.symbol,
                "decimals": self.native_currency.decimals,
            },
            "contracts": {"raffle": self.contracts.raffle, "usdt": self.contracts.usdt},
            "vrf": {"coordinator": self.vrf.coordinator, "gas_lane": self.vrf.gas_lane},
            "raffle_deployed": self.raffle_deployed,
        }


SEPOLIA = NetworkConfig(
    chain_id=11155111,
    key="sepolia",
    name="Sepolia",
    rpc_url="https://sepolia.drpc.org",
    block_explorer="https://sepolia.etherscan.io",
    native_currency=NativeCurrency(name="Sepolia ETH", symbol="SepoliaETH", decimals=18),
    contracts=ContractAddresses(
        raffle="0x094e1309187D5f546067Ee22138Be6F0A39d1800",
        # USDT mock with a public mintWithDecimals
        usdt="0x11BBef28D8effD775F9674798cd219394F9C1969",
    ),
    vrf=VrfConfig(
        coordinator="0x9DdfaCa8183c41ad55329BdeeD9F6A8d53168B1B",
        gas_lane="0x787d74caea10b2b357790d5b5247c2f63d1d91572a9846f780606e4d953677ae",
    ),
)

MAINNET = NetworkConfig(
    chain_id=1,
    key="mainnet",
    name="Ethereum Mainnet",
    rpc_url="https://eth-mainnet.g.alchemy.com/v2/your-api-key",
    block_explorer="https://etherscan.io",
    native_currency=NativeCurrency(name="Ether", symbol="ETH", decimals=18),
    contracts=ContractAddresses(
        raffle=ZERO_ADDRESS,
        usdt="0xdAC17F958D2ee523a2206206994597C13D831ec7",
    ),
    vrf=VrfConfig(
        coordinator="0x271682DEB8C4E0901D1a1550aD2e64D568E69909",
        gas_lane="0x8af398995b04c28e9951adb9721ef74c74f93e6a478f39e7e0777be13527e7ef",
    ),
)


def build_network_table(configs: Iterable[NetworkConfig]) -> dict[int, NetworkConfig]:
    table: dict[int, NetworkConfig] = {}
    for config in configs:
        if config.chain_id in table:
            raise ValueError(f"Duplicate network configuration for chain id {config.chain_id}")
        table[config.chain_id] = config
    return table


NETWORKS = build_network_table([SEPOLIA, MAINNET])


def default_network() -> NetworkConfig:
    return require_network_config(settings.default_chain_id)


def get_network_config(chain_id: int) -> Optional[NetworkConfig]:
    return NETWORKS.get(chain_id)


def require_network_config(chain_id: int) -> NetworkConfig:
    config = NETWORKS.get(chain_id)
    if config is None:
        raise UnsupportedNetworkError(chain_id)
    return config


def find_network(name_or_id: str) -> NetworkConfig:
    """Resolve a network by key (``sepolia``) or numeric chain id (``11155111``)."""
    candidate = name_or_id.strip().lower()
    if candidate.isdigit():
        return require_network_config(int(candidate))
    for config in NETWORKS.values():
        if config.key == candidate:
            return config
    raise ValueError(f"Unknown network: {name_or_id}")


def is_supported_network(chain_id: int) -> bool:
    return chain_id in NETWORKS


def block_explorer_url(chain_id: Optional[int], kind: str, value: str) -> str:
    network = get_network_config(chain_id) if chain_id else None
    base_url = network.block_explorer if network else DEFAULT_EXPLORER_URL
    return f"{base_url}/{kind}/{value}"
